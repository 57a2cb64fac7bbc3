"""
Tests for campus_hub/services/ticket_service.py
Covers: create_ticket, assign_ticket, update_status, delete_ticket, reads,
        status notification table, transition policy
"""
import io
import logging
import pytest
from sqlalchemy.exc import OperationalError

from campus_hub.errors import NotFoundError, InvalidArgumentError, InvalidStateError
from campus_hub.models.ontology import (
    Ticket, TicketStatus, TicketPriority, Comment, Notification, NotificationType,
    ReferenceKind, UserRole
)
from campus_hub.models.schemas import TicketCreate
from campus_hub.services.ticket_service import (
    TicketService, STATUS_NOTIFICATIONS, parse_priority, parse_status
)


# ── helpers ──────────────────────────────────────────────────────────

def _data(**overrides):
    payload = dict(
        title="Projector not working",
        location="Block A, Ground Floor",
        category="Electrical",
        description="No signal from HDMI",
        priority="high",
        contact_email="jane@campus.edu",
    )
    payload.update(overrides)
    return TicketCreate(**payload)


def _ticket(db, reporter, status=TicketStatus.OPEN, assignee=None):
    t = Ticket(
        title="Broken chair", location="Room 1", category="Furniture",
        description="Leg snapped", priority=TicketPriority.LOW, status=status,
        reported_by=reporter.id, reported_by_name=reporter.name,
        assigned_to=assignee.id if assignee else None,
        assigned_to_name=assignee.name if assignee else None,
        attachment_urls=[],
    )
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


def _notifications(db, user_id):
    return db.query(Notification).filter(
        Notification.user_id == user_id
    ).order_by(Notification.id).all()


@pytest.fixture
def service(db_session, clock, storage):
    return TicketService(db_session, storage=storage, clock=clock, strict_transitions=False)


# ── parsing ──────────────────────────────────────────────────────────

class TestParsing:

    @pytest.mark.parametrize("raw,expected", [
        ("low", TicketPriority.LOW),
        ("HIGH", TicketPriority.HIGH),
        (" Critical ", TicketPriority.CRITICAL),
    ])
    def test_priority_case_insensitive(self, raw, expected):
        assert parse_priority(raw) == expected

    def test_unknown_priority(self):
        with pytest.raises(InvalidArgumentError):
            parse_priority("urgent")

    def test_status(self):
        assert parse_status("IN_PROGRESS") == TicketStatus.IN_PROGRESS
        with pytest.raises(InvalidArgumentError):
            parse_status("done")

    def test_notification_table_covers_every_status(self):
        assert set(STATUS_NOTIFICATIONS) == set(TicketStatus)


# ── create_ticket ────────────────────────────────────────────────────

class TestCreateTicket:

    def test_create_open_ticket(self, service, student_user, clock):
        ticket = service.create_ticket(_data(priority="HIGH"), student_user)
        assert ticket.status == TicketStatus.OPEN
        assert ticket.priority == TicketPriority.HIGH
        assert ticket.reported_by == student_user.id
        assert ticket.reported_by_name == student_user.name
        assert ticket.attachment_urls == []
        assert ticket.created_at == clock()

    def test_invalid_priority(self, service, db_session, student_user):
        with pytest.raises(InvalidArgumentError):
            service.create_ticket(_data(priority="whenever"), student_user)
        assert db_session.query(Ticket).count() == 0

    def test_facility_name_cached(self, service, sample_facility, student_user):
        ticket = service.create_ticket(_data(facility_id=sample_facility.id), student_user)
        assert ticket.facility_name == sample_facility.name

    def test_unknown_facility(self, service, student_user):
        with pytest.raises(NotFoundError):
            service.create_ticket(_data(facility_id=999), student_user)

    def test_attachments_stored(self, service, storage, student_user):
        ticket = service.create_ticket(_data(), student_user, [
            ("photo.jpg", b"jpeg-bytes"), ("log.txt", b"text"),
        ])
        assert len(ticket.attachment_urls) == 2
        assert all(url.startswith("/uploads/") for url in ticket.attachment_urls)
        assert ticket.attachment_urls[0].endswith(".jpg")
        assert storage.path_of(ticket.attachment_urls[0]).read_bytes() == b"jpeg-bytes"

    def test_more_than_three_attachments_rejected(self, service, db_session, storage, student_user):
        files = [(f"f{i}.png", b"x") for i in range(4)]
        with pytest.raises(InvalidArgumentError, match="at most 3"):
            service.create_ticket(_data(), student_user, files)
        assert db_session.query(Ticket).count() == 0
        assert not storage.upload_dir.exists() or list(storage.upload_dir.iterdir()) == []

    def test_upload_streams_stored(self, service, storage, student_user):
        ticket = service.create_ticket(_data(), student_user, [("scan.pdf", io.BytesIO(b"%PDF-1.7"))])
        assert storage.path_of(ticket.attachment_urls[0]).read_bytes() == b"%PDF-1.7"

    def test_too_many_upload_streams_left_unread(self, service, storage, student_user):
        streams = [io.BytesIO(b"payload") for _ in range(4)]
        with pytest.raises(InvalidArgumentError):
            service.create_ticket(_data(), student_user, [(f"f{i}.png", s) for i, s in enumerate(streams)])
        assert [s.tell() for s in streams] == [0, 0, 0, 0]

    def test_failed_commit_removes_stored_files(self, service, db_session, storage, student_user,
                                                monkeypatch):
        def broken_commit():
            raise OperationalError("INSERT INTO tickets", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "commit", broken_commit)
        with pytest.raises(OperationalError):
            service.create_ticket(_data(), student_user, [("photo.jpg", b"jpeg"), ("log.txt", b"text")])
        monkeypatch.undo()

        assert list(storage.upload_dir.iterdir()) == []
        assert db_session.query(Ticket).count() == 0


# ── assign_ticket ────────────────────────────────────────────────────

class TestAssignTicket:

    def test_assign_notifies_reporter_and_technician(self, service, db_session,
                                                     student_user, technician_user):
        ticket = _ticket(db_session, student_user)

        result = service.assign_ticket(ticket.id, technician_user.id)

        assert result.status == TicketStatus.IN_PROGRESS
        assert result.assigned_to == technician_user.id
        assert result.assigned_to_name == technician_user.name

        notes = db_session.query(Notification).all()
        assert len(notes) == 2
        assert {n.user_id for n in notes} == {student_user.id, technician_user.id}
        assert all(n.type == NotificationType.TICKET_ASSIGNED for n in notes)
        assert all(n.reference_type == ReferenceKind.TICKET for n in notes)
        reporter_note = _notifications(db_session, student_user.id)[0]
        assert technician_user.name in reporter_note.message

    def test_admin_can_be_assigned(self, service, db_session, student_user, admin_user):
        ticket = _ticket(db_session, student_user)
        assert service.assign_ticket(ticket.id, admin_user.id).assigned_to == admin_user.id

    def test_plain_user_cannot_be_assigned(self, service, db_session, student_user, other_user):
        ticket = _ticket(db_session, student_user)
        with pytest.raises(InvalidArgumentError):
            service.assign_ticket(ticket.id, other_user.id)
        db_session.refresh(ticket)
        assert ticket.status == TicketStatus.OPEN
        assert db_session.query(Notification).count() == 0

    def test_missing_ticket_or_user(self, service, db_session, student_user, technician_user):
        with pytest.raises(NotFoundError):
            service.assign_ticket(999, technician_user.id)
        ticket = _ticket(db_session, student_user)
        with pytest.raises(NotFoundError):
            service.assign_ticket(ticket.id, 999)

    def test_reassign(self, service, db_session, student_user, technician_user, user_factory):
        second = user_factory("tech2@campus.edu", "Second Tech", [UserRole.TECHNICIAN])
        ticket = _ticket(db_session, student_user, TicketStatus.IN_PROGRESS, technician_user)
        result = service.assign_ticket(ticket.id, second.id)
        assert result.assigned_to == second.id


# ── update_status ────────────────────────────────────────────────────

class TestUpdateStatus:

    def test_resolve(self, service, db_session, student_user, technician_user, clock):
        ticket = _ticket(db_session, student_user, TicketStatus.IN_PROGRESS, technician_user)
        clock.advance(hours=2)

        result = service.update_status(ticket.id, "resolved", resolution_notes="Replaced cable")

        assert result.status == TicketStatus.RESOLVED
        assert result.resolution_notes == "Replaced cable"
        assert result.resolved_at == clock()
        notes = _notifications(db_session, student_user.id)
        assert len(notes) == 1
        assert notes[0].type == NotificationType.TICKET_RESOLVED
        assert notes[0].title == "Ticket Update"
        assert "has been resolved" in notes[0].message

    def test_close_sets_closed_at(self, service, db_session, student_user, clock):
        ticket = _ticket(db_session, student_user, TicketStatus.RESOLVED)
        result = service.update_status(ticket.id, "CLOSED")
        assert result.closed_at == clock()
        assert _notifications(db_session, student_user.id)[0].type == NotificationType.TICKET_CLOSED

    def test_reject_records_reason(self, service, db_session, student_user):
        ticket = _ticket(db_session, student_user)
        result = service.update_status(ticket.id, "rejected", rejection_reason="Duplicate")
        assert result.rejection_reason == "Duplicate"
        note = _notifications(db_session, student_user.id)[0]
        assert note.type == NotificationType.TICKET_REJECTED
        assert "Reason: Duplicate" in note.message

    def test_in_progress_uses_generic_message(self, service, db_session, student_user):
        ticket = _ticket(db_session, student_user)
        service.update_status(ticket.id, "in_progress")
        note = _notifications(db_session, student_user.id)[0]
        assert note.type == NotificationType.TICKET_STATUS_CHANGED
        assert "status changed to in_progress" in note.message

    def test_unknown_status(self, service, db_session, student_user):
        ticket = _ticket(db_session, student_user)
        with pytest.raises(InvalidArgumentError):
            service.update_status(ticket.id, "archived")

    def test_illegal_transition_permissive_logs_warning(self, service, db_session, student_user, caplog):
        ticket = _ticket(db_session, student_user, TicketStatus.CLOSED)
        with caplog.at_level(logging.WARNING, logger="campus_hub.services.ticket_service"):
            result = service.update_status(ticket.id, "open")
        assert result.status == TicketStatus.OPEN
        assert any("cannot move from 'closed' to 'open'" in r.getMessage() for r in caplog.records)

    def test_illegal_transition_strict_raises(self, db_session, student_user, storage, clock):
        strict = TicketService(db_session, storage=storage, clock=clock, strict_transitions=True)
        ticket = _ticket(db_session, student_user, TicketStatus.CLOSED)
        with pytest.raises(InvalidStateError):
            strict.update_status(ticket.id, "in_progress")
        db_session.refresh(ticket)
        assert ticket.status == TicketStatus.CLOSED
        assert db_session.query(Notification).count() == 0


# ── delete / reads ───────────────────────────────────────────────────

class TestDeleteAndReads:

    def test_delete_removes_comments_and_files(self, service, db_session, storage, student_user):
        ticket = service.create_ticket(_data(), student_user, [("a.png", b"png")])
        path = storage.path_of(ticket.attachment_urls[0])
        db_session.add(Comment(ticket_id=ticket.id, content="hi", author_id=student_user.id))
        db_session.commit()

        service.delete_ticket(ticket.id)

        assert db_session.query(Ticket).count() == 0
        assert db_session.query(Comment).count() == 0
        assert not path.exists()

    def test_delete_missing(self, service):
        with pytest.raises(NotFoundError, match="Ticket not found with id: 5"):
            service.delete_ticket(5)

    def test_list_filters(self, service, db_session, student_user, other_user, technician_user):
        _ticket(db_session, student_user)
        _ticket(db_session, student_user, TicketStatus.IN_PROGRESS, technician_user)
        _ticket(db_session, other_user, TicketStatus.RESOLVED)

        assert len(service.list_all()) == 3
        assert len(service.list_by_reporter(student_user.id)) == 2
        assert len(service.list_assigned(technician_user.id)) == 1
        assert len(service.list_by_status(TicketStatus.RESOLVED)) == 1

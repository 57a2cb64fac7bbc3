"""
预订与工单的状态流转图
"""
from core.engine.state_machine import build_machine, state_machine_engine
from campus_hub.models.ontology import BookingStatus, TicketStatus

BOOKING = "Booking"
TICKET = "Ticket"

booking_machine = build_machine(
    BOOKING,
    initial_state=BookingStatus.PENDING.value,
    states=[s.value for s in BookingStatus],
    edges=[
        (BookingStatus.PENDING.value, BookingStatus.APPROVED.value, "approve"),
        (BookingStatus.PENDING.value, BookingStatus.REJECTED.value, "reject"),
        (BookingStatus.PENDING.value, BookingStatus.CANCELLED.value, "cancel"),
        (BookingStatus.APPROVED.value, BookingStatus.CANCELLED.value, "cancel"),
    ],
)

ticket_machine = build_machine(
    TICKET,
    initial_state=TicketStatus.OPEN.value,
    states=[s.value for s in TicketStatus],
    edges=[
        (TicketStatus.OPEN.value, TicketStatus.IN_PROGRESS.value, "assign"),
        (TicketStatus.OPEN.value, TicketStatus.RESOLVED.value, "resolve"),
        (TicketStatus.OPEN.value, TicketStatus.CLOSED.value, "close"),
        (TicketStatus.OPEN.value, TicketStatus.REJECTED.value, "reject"),
        # 重新分配技术员
        (TicketStatus.IN_PROGRESS.value, TicketStatus.IN_PROGRESS.value, "assign"),
        (TicketStatus.IN_PROGRESS.value, TicketStatus.RESOLVED.value, "resolve"),
        (TicketStatus.IN_PROGRESS.value, TicketStatus.CLOSED.value, "close"),
        (TicketStatus.IN_PROGRESS.value, TicketStatus.REJECTED.value, "reject"),
        (TicketStatus.RESOLVED.value, TicketStatus.CLOSED.value, "close"),
    ],
)


def register_state_machines() -> None:
    """注册到全局状态机引擎（可重复调用）"""
    state_machine_engine.register(booking_machine)
    state_machine_engine.register(ticket_machine)


register_state_machines()

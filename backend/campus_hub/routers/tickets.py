"""
报修工单路由
"""
import json
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.orm import Session
from campus_hub.database import get_db
from campus_hub.models.ontology import User
from campus_hub.models.schemas import (
    TicketCreate, TicketAssign, TicketStatusUpdate, TicketResponse, MessageResponse
)
from campus_hub.services.ticket_service import TicketService, parse_status
from campus_hub.security.auth import (
    get_current_user, require_admin, require_admin_or_technician
)

router = APIRouter(prefix="/api/tickets", tags=["报修工单"])


@router.post("", response_model=TicketResponse)
def create_ticket(
    ticket: str = Form(...),
    files: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """创建工单（multipart：ticket 为 JSON，files 为附件）"""
    try:
        data = TicketCreate.model_validate_json(ticket)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=json.loads(e.json())
        )
    attachments = [(f.filename, f.file) for f in (files or []) if f.filename]
    return TicketService(db).create_ticket(data, current_user, attachments)


@router.post("/simple", response_model=TicketResponse)
def create_ticket_simple(
    data: TicketCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """创建工单（无附件）"""
    return TicketService(db).create_ticket(data, current_user)


@router.get("/my", response_model=List[TicketResponse])
def list_my_tickets(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """我报修的工单"""
    return TicketService(db).list_by_reporter(current_user.id)


@router.get("/assigned", response_model=List[TicketResponse])
def list_assigned_tickets(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """分配给我的工单"""
    return TicketService(db).list_assigned(current_user.id)


@router.get("", response_model=List[TicketResponse])
def list_tickets(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_technician)
):
    """获取工单列表（可按状态筛选）"""
    service = TicketService(db)
    if status:
        return service.list_by_status(parse_status(status))
    return service.list_all()


@router.get("/{ticket_id}", response_model=TicketResponse)
def get_ticket(
    ticket_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """获取工单详情"""
    return TicketService(db).get_ticket(ticket_id)


@router.put("/{ticket_id}/assign", response_model=TicketResponse)
def assign_ticket(
    ticket_id: int,
    data: TicketAssign,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """分配技术员"""
    return TicketService(db).assign_ticket(ticket_id, data.technician_id)


@router.put("/{ticket_id}/status", response_model=TicketResponse)
def update_ticket_status(
    ticket_id: int,
    data: TicketStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin_or_technician)
):
    """更新工单状态"""
    return TicketService(db).update_status(
        ticket_id, data.status, data.resolution_notes, data.rejection_reason
    )


@router.delete("/{ticket_id}", response_model=MessageResponse)
def delete_ticket(
    ticket_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """删除工单"""
    TicketService(db).delete_ticket(ticket_id)
    return MessageResponse(message="Ticket deleted")

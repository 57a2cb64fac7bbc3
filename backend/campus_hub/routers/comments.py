"""
工单评论路由
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from campus_hub.database import get_db
from campus_hub.models.ontology import User
from campus_hub.models.schemas import CommentContent, CommentResponse, MessageResponse
from campus_hub.services.comment_service import CommentService
from campus_hub.security.auth import get_current_user

router = APIRouter(prefix="/api/comments", tags=["工单评论"])


@router.get("/ticket/{ticket_id}", response_model=List[CommentResponse])
def list_comments(
    ticket_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """工单评论列表"""
    return CommentService(db).list_comments(ticket_id)


@router.post("/ticket/{ticket_id}", response_model=CommentResponse)
def add_comment(
    ticket_id: int,
    data: CommentContent,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """添加评论"""
    return CommentService(db).add_comment(ticket_id, data.content, current_user)


@router.put("/{comment_id}", response_model=CommentResponse)
def update_comment(
    comment_id: int,
    data: CommentContent,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """编辑评论"""
    return CommentService(db).update_comment(comment_id, data.content, current_user)


@router.delete("/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """删除评论"""
    CommentService(db).delete_comment(comment_id, current_user)
    return MessageResponse(message="Comment deleted")

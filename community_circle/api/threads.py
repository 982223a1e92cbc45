"""
Threads Router - Per-event discussion threads
"""
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from community_circle.dependencies import get_db, get_current_user_id
from community_circle.services.thread_service import thread_service

router = APIRouter()


class MessageRequest(BaseModel):
    body: str


@router.get("")
async def get_thread(
    event_id: int = Query(..., description="Event whose thread to load"),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Thread with its messages, oldest first (host and GOING attendees)"""
    return {"thread": thread_service.get_thread(db, event_id, user_id)}


@router.post("/{thread_id}/messages", status_code=201)
async def post_message(
    thread_id: int,
    request: MessageRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Post a message to an event thread"""
    return {"message": thread_service.post_message(db, thread_id, user_id, request.body)}

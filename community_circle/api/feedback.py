"""
Feedback Router - Post-event ratings
"""
from typing import List
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from community_circle.dependencies import get_db, get_current_user_id
from community_circle.services.feedback_service import feedback_service

router = APIRouter()


class FeedbackRequest(BaseModel):
    event_id: int
    rating: int
    tags: List[str] = []


@router.post("", status_code=201)
async def submit_feedback(
    request: FeedbackRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Rate an event once it has ended"""
    feedback = feedback_service.submit_feedback(
        db, request.event_id, user_id, request.rating, request.tags
    )
    return {"feedback": feedback}

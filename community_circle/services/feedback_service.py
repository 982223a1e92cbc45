"""
Feedback Service - Post-event ratings
"""
import logging
from datetime import datetime
from typing import Dict, Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from community_circle.db.models import Event, Feedback
from community_circle.exceptions import Conflict, NotFound, ValidationFailed
from community_circle.services.event_service import event_service
from community_circle.services.user_service import user_service

logger = logging.getLogger(__name__)

MAX_TAGS = 5


class FeedbackService:
    """Service for event feedback"""

    def submit_feedback(
        self,
        db: Session,
        event_id: int,
        user_id: int,
        rating: int,
        tags: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        """
        Submit a rating for an event.

        Rules:
        - Rating is a whole number from 1 to 5
        - Up to 5 non-empty tags
        - Only once the event has ended
        - One feedback per event per user
        """
        user_service.get_actor(db, user_id)

        tags = [tag.strip() for tag in (tags or [])]
        if rating is None or not 1 <= rating <= 5:
            raise ValidationFailed("Rating must be between 1 and 5")
        if len(tags) > MAX_TAGS:
            raise ValidationFailed(f"You can select up to {MAX_TAGS} tags")
        if any(not tag for tag in tags):
            raise ValidationFailed("Tag cannot be empty")

        event = db.query(Event).filter(Event.id == event_id).first()
        if not event:
            raise NotFound("Event not found")
        if event_service.event_end(event) > datetime.utcnow():
            raise ValidationFailed("Feedback can only be submitted after the event has ended")

        feedback = Feedback(event_id=event_id, user_id=user_id, rating=rating, tags=tags)
        db.add(feedback)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("You have already submitted feedback for this event")
        db.refresh(feedback)

        logger.info(f"Feedback {feedback.id} for event {event_id} from user {user_id}")
        return {
            "id": feedback.id,
            "event_id": feedback.event_id,
            "user_id": feedback.user_id,
            "rating": feedback.rating,
            "tags": feedback.tags,
            "created_at": feedback.created_at.isoformat() if feedback.created_at else None
        }


# Singleton instance
feedback_service = FeedbackService()

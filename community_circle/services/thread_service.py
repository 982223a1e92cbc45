"""
Thread Service - Per-event message threads

Clients poll for new messages; there is no push delivery.
"""
import logging
from typing import Dict, Any

from sqlalchemy.orm import Session, joinedload, selectinload

from community_circle.db.models import Event, Message, MessageThread, RSVP, RSVPStatus
from community_circle.exceptions import AuthorizationDenied, NotFound, ValidationFailed
from community_circle.services.user_service import user_service

logger = logging.getLogger(__name__)


def serialize_message(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "thread_id": message.thread_id,
        "body": message.body,
        "sender": {"id": message.sender.id, "name": message.sender.name},
        "created_at": message.created_at.isoformat() if message.created_at else None
    }


class ThreadService:
    """Service for event threads; only the host and GOING attendees take part"""

    def _ensure_participant(self, db: Session, event: Event, user_id: int) -> None:
        if event.host_user_id == user_id:
            return
        rsvp = db.query(RSVP).filter(
            RSVP.event_id == event.id,
            RSVP.user_id == user_id
        ).first()
        if not rsvp or rsvp.status != RSVPStatus.GOING.value:
            raise AuthorizationDenied()

    def get_thread(self, db: Session, event_id: int, user_id: int) -> Dict[str, Any]:
        user_service.get_actor(db, user_id)

        event = db.query(Event).filter(Event.id == event_id).first()
        if not event:
            raise NotFound("Event not found")
        self._ensure_participant(db, event, user_id)

        thread = db.query(MessageThread).options(
            selectinload(MessageThread.messages).joinedload(Message.sender)
        ).filter(MessageThread.event_id == event_id).first()
        if not thread:
            raise NotFound("Thread not found")

        return {
            "id": thread.id,
            "event": {
                "id": event.id,
                "title": event.title,
                "start_at": event.start_at.isoformat() if event.start_at else None
            },
            "messages": [serialize_message(message) for message in thread.messages]
        }

    def post_message(self, db: Session, thread_id: int, user_id: int, body: str) -> Dict[str, Any]:
        user_service.get_actor(db, user_id)

        thread = db.query(MessageThread).options(
            joinedload(MessageThread.event)
        ).filter(MessageThread.id == thread_id).first()
        if not thread:
            raise NotFound("Thread not found")
        self._ensure_participant(db, thread.event, user_id)

        body = (body or "").strip()
        if not body:
            raise ValidationFailed("Message body cannot be empty")

        message = Message(thread_id=thread_id, sender_user_id=user_id, body=body)
        db.add(message)
        db.commit()
        db.refresh(message)

        logger.info(f"User {user_id} posted message {message.id} in thread {thread_id}")
        return serialize_message(message)


# Singleton instance
thread_service = ThreadService()

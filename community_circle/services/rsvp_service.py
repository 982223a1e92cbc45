"""
RSVP Service - Attendance ledger with capacity enforcement
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Dict, Any, List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, Query, joinedload

from community_circle.db.models import Event, EventStatus, Role, RSVP, RSVPStatus
from community_circle.exceptions import (
    AuthorizationDenied, CapacityExceeded, Conflict, NotFound, ValidationFailed
)
from community_circle.services.event_service import serialize_rsvp
from community_circle.services.user_service import user_service

logger = logging.getLogger(__name__)


class RSVPAction(str, Enum):
    """What the caller asks the ledger to do with their (event, user) row"""
    SET_GOING = "GOING"
    SET_CANCELLED = "CANCELLED"


class RSVPService:
    """
    Service for RSVP rows, one per (event, user).

    Every write locks the event row first, so the GOING count check and the
    row write happen as one unit against concurrent writers for that event.
    """

    def lock_event_query(self, db: Session, event_id: int) -> Query:
        return db.query(Event).filter(Event.id == event_id).with_for_update()

    def _get_active_event_locked(self, db: Session, event_id: int) -> Event:
        event = self.lock_event_query(db, event_id).first()
        if not event:
            raise NotFound("Event not found")
        if event.status != EventStatus.ACTIVE.value:
            db.rollback()
            raise Conflict("Cannot RSVP to a cancelled or removed event")
        return event

    def _find_rsvp(self, db: Session, event_id: int, user_id: int) -> RSVP:
        return db.query(RSVP).filter(
            RSVP.event_id == event_id,
            RSVP.user_id == user_id
        ).first()

    def going_count_excluding(self, db: Session, event_id: int, user_id: int) -> int:
        return db.query(func.count(RSVP.id)).filter(
            RSVP.event_id == event_id,
            RSVP.status == RSVPStatus.GOING.value,
            RSVP.user_id != user_id
        ).scalar()

    def upsert_rsvp(
        self,
        db: Session,
        event_id: int,
        user_id: int,
        action: RSVPAction
    ) -> Dict[str, Any]:
        """
        Apply a GOING or CANCELLED request to the caller's row.

        SET_GOING inserts the row or flips an existing one; the caller's own
        row is excluded from the capacity count so re-confirming never
        self-blocks. SET_CANCELLED needs an existing row. A successful GOING
        response carries the private location notes.
        """
        user_service.get_actor(db, user_id)
        action = RSVPAction(action)
        event = self._get_active_event_locked(db, event_id)
        existing = self._find_rsvp(db, event_id, user_id)

        if action == RSVPAction.SET_CANCELLED:
            if existing is None:
                db.rollback()
                raise NotFound("RSVP not found")
            existing.status = RSVPStatus.CANCELLED.value
            db.commit()
            db.refresh(existing)

            logger.info(f"User {user_id} cancelled RSVP for event {event_id}")
            return {"rsvp": serialize_rsvp(existing)}

        going = self.going_count_excluding(db, event_id, user_id)
        if going >= event.max_attendees:
            db.rollback()
            logger.info(f"Event {event_id} at capacity ({event.max_attendees}), rejected user {user_id}")
            raise CapacityExceeded()

        if existing is None:
            rsvp = RSVP(event_id=event_id, user_id=user_id, status=RSVPStatus.GOING.value)
            db.add(rsvp)
        else:
            rsvp = existing
            rsvp.status = RSVPStatus.GOING.value

        location_notes = event.location_notes_private
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("RSVP changed while saving, please try again")
        db.refresh(rsvp)

        logger.info(f"User {user_id} is going to event {event_id} ({going + 1}/{event.max_attendees})")
        return {
            "rsvp": serialize_rsvp(rsvp),
            "location_notes_private": location_notes
        }

    def cancel_rsvp(self, db: Session, event_id: int, user_id: int) -> Dict[str, Any]:
        return self.upsert_rsvp(db, event_id, user_id, RSVPAction.SET_CANCELLED)

    def check_in(self, db: Session, event_id: int, user_id: int) -> Dict[str, Any]:
        """Mark a GOING attendee as arrived. There is no undo."""
        user_service.get_actor(db, user_id)

        if not db.query(Event.id).filter(Event.id == event_id).first():
            raise NotFound("Event not found")

        rsvp = self._find_rsvp(db, event_id, user_id)
        if not rsvp or rsvp.status != RSVPStatus.GOING.value:
            raise ValidationFailed("You must have a GOING RSVP to check in")

        updated = db.query(RSVP).filter(
            RSVP.id == rsvp.id,
            RSVP.status == RSVPStatus.GOING.value,
            RSVP.checked_in_at.is_(None)
        ).update({RSVP.checked_in_at: datetime.utcnow()}, synchronize_session=False)

        if not updated:
            db.rollback()
            raise Conflict("You have already checked in")

        db.commit()
        db.refresh(rsvp)

        logger.info(f"User {user_id} checked in to event {event_id}")
        return {"rsvp": serialize_rsvp(rsvp)}

    def list_attendees(self, db: Session, event_id: int, actor_id: int) -> List[Dict[str, Any]]:
        """All RSVP rows for an event with attendee contact details; host or admin only"""
        actor = user_service.get_actor(db, actor_id)

        event = db.query(Event).filter(Event.id == event_id).first()
        if not event:
            raise NotFound("Event not found")
        if event.host_user_id != actor_id and actor.role != Role.ADMIN.value:
            raise AuthorizationDenied()

        rsvps = db.query(RSVP).options(joinedload(RSVP.user)).filter(
            RSVP.event_id == event_id
        ).order_by(RSVP.created_at.asc(), RSVP.id.asc()).all()

        results = []
        for rsvp in rsvps:
            data = serialize_rsvp(rsvp)
            data["user"] = {
                "id": rsvp.user.id,
                "name": rsvp.user.name,
                "email": rsvp.user.email
            }
            results.append(data)
        return results


# Singleton instance
rsvp_service = RSVPService()

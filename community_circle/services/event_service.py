"""
Event Service - Event lifecycle and geospatial discovery
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from community_circle.config import settings
from community_circle.db.models import (
    Block, Event, EventCategory, EventSetting, EventStatus, MessageThread,
    Profile, ReportTargetType, Role, RSVP, RSVPStatus, User
)
from community_circle.exceptions import (
    AuthorizationDenied, Conflict, ModerationBlocked, NotFound, RateLimited,
    ValidationFailed
)
from community_circle.services.admin_service import admin_service
from community_circle.services.geo_service import geo_service
from community_circle.services.moderation_service import moderation_service
from community_circle.services.user_service import user_service

logger = logging.getLogger(__name__)


EDITABLE_FIELDS = (
    "title",
    "description",
    "category",
    "start_at",
    "duration_mins",
    "setting",
    "age_min",
    "age_max",
    "max_attendees",
    "screen_light",
    "location_label_public",
    "location_notes_private",
    "latitude",
    "longitude",
)

# Profile interest tags that correspond to an event category
INTEREST_CATEGORIES = {
    "walk": EventCategory.WALK.value,
    "walks": EventCategory.WALK.value,
    "playground": EventCategory.PLAYGROUND.value,
    "library": EventCategory.LIBRARY.value,
    "crafts": EventCategory.CRAFTS.value,
    "sports": EventCategory.SPORTS.value,
}


def to_naive_utc(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def start_of_local_day_utc() -> datetime:
    """Local midnight of the current day, expressed as naive UTC"""
    local_midnight = datetime.now().astimezone().replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return local_midnight.astimezone(timezone.utc).replace(tzinfo=None)


def serialize_event(event: Event, include_private: bool = False) -> Dict[str, Any]:
    """
    Event fields as a dict.

    The private location notes key is only present when include_private is
    set; callers decide who may see it.
    """
    data = {
        "id": event.id,
        "host_user_id": event.host_user_id,
        "title": event.title,
        "description": event.description,
        "category": event.category,
        "start_at": event.start_at.isoformat() if event.start_at else None,
        "duration_mins": event.duration_mins,
        "setting": event.setting,
        "age_min": event.age_min,
        "age_max": event.age_max,
        "max_attendees": event.max_attendees,
        "screen_light": event.screen_light,
        "location_label_public": event.location_label_public,
        "latitude": event.latitude,
        "longitude": event.longitude,
        "status": event.status,
        "created_at": event.created_at.isoformat() if event.created_at else None,
    }
    if include_private:
        data["location_notes_private"] = event.location_notes_private
    return data


def serialize_host(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "trust_score": user.profile.trust_score if user.profile else 0,
    }


class EventService:
    """Service for event operations"""

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _normalize_fields(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        data = {key: fields[key] for key in EDITABLE_FIELDS if key in fields}

        for key in ("title", "description", "location_label_public", "location_notes_private"):
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()

        if isinstance(data.get("category"), EventCategory):
            data["category"] = data["category"].value
        if isinstance(data.get("setting"), EventSetting):
            data["setting"] = data["setting"].value
        if data.get("setting") == "BOTH":
            data["setting"] = EventSetting.MIXED.value
        if "location_notes_private" in data and data["location_notes_private"] is None:
            data["location_notes_private"] = ""
        if isinstance(data.get("start_at"), datetime):
            data["start_at"] = to_naive_utc(data["start_at"])

        return data

    def _validate_fields(self, data: Dict[str, Any], check_start: bool = True) -> None:
        """Range checks over a complete set of event fields"""
        for key in EDITABLE_FIELDS:
            if key != "location_notes_private" and data.get(key) is None:
                raise ValidationFailed(f"{key} is required")

        title = data["title"]
        if len(title) < 6:
            raise ValidationFailed("Title must be at least 6 characters")
        if len(title) > 80:
            raise ValidationFailed("Title must be at most 80 characters")

        description = data["description"]
        if len(description) < 20:
            raise ValidationFailed("Description must be at least 20 characters")
        if len(description) > 600:
            raise ValidationFailed("Description must be at most 600 characters")

        if data["category"] not in {c.value for c in EventCategory}:
            raise ValidationFailed("Category is not valid")
        if data["setting"] not in {s.value for s in EventSetting}:
            raise ValidationFailed("Please specify indoor or outdoor")

        if check_start and data["start_at"] <= datetime.utcnow():
            raise ValidationFailed("Event must be scheduled in the future")

        if not 15 <= data["duration_mins"] <= 480:
            raise ValidationFailed("Duration must be between 15 minutes and 8 hours")

        for key, label in (("age_min", "Minimum age"), ("age_max", "Maximum age")):
            if data[key] < 0:
                raise ValidationFailed(f"{label} cannot be negative")
            if data[key] > 17:
                raise ValidationFailed(f"{label} must be at most 17")
        if data["age_min"] > data["age_max"]:
            raise ValidationFailed("Minimum age cannot be greater than maximum age")

        if data["max_attendees"] < 2:
            raise ValidationFailed("Must allow at least 2 attendees")
        if data["max_attendees"] > 50:
            raise ValidationFailed("Cannot exceed 50 attendees")

        label = data["location_label_public"]
        if len(label) < 3:
            raise ValidationFailed("Public location label must be at least 3 characters")
        if len(label) > 100:
            raise ValidationFailed("Public location label must be at most 100 characters")
        if len(data.get("location_notes_private") or "") > 300:
            raise ValidationFailed("Private location notes must be at most 300 characters")

        if not -90 <= data["latitude"] <= 90:
            raise ValidationFailed("Latitude must be between -90 and 90")
        if not -180 <= data["longitude"] <= 180:
            raise ValidationFailed("Longitude must be between -180 and 180")

    def _moderate(self, db: Session, event_id: int, texts: List[str]) -> None:
        """
        Classify each text independently.

        Any block aborts the surrounding transaction. Each flagged text adds
        one Flag row, written in the caller's transaction.
        """
        results = [moderation_service.classify(text) for text in texts]

        for result in results:
            if result.blocked:
                db.rollback()
                logger.warning(f"Moderation blocked write: {result.block_reason}")
                raise ModerationBlocked(result.block_reason)

        for result in results:
            if result.flagged:
                admin_service.record_flag(
                    db, ReportTargetType.EVENT, event_id, result.flag_rule, commit=False
                )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def lock_profile_query(self, db: Session, host_id: int):
        """Host profile row, locked until commit while the daily quota is checked"""
        return db.query(Profile).filter(Profile.user_id == host_id).with_for_update()

    def _daily_limit(self, profile: Profile) -> int:
        if profile.phone_verified_at:
            return settings.MAX_EVENTS_PER_DAY_PHONE_VERIFIED
        return settings.MAX_EVENTS_PER_DAY_UNVERIFIED

    def create_event(
        self,
        db: Session,
        host_id: int,
        fields: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Create an event, its message thread and any moderation flags.

        Gates, in order: field validation, email verification, daily quota,
        content moderation. The host's profile row stays locked until commit
        so concurrent creations cannot both pass the quota check.
        """
        host = user_service.get_actor(db, host_id)

        data = self._normalize_fields(fields)
        data.setdefault("location_notes_private", "")
        data.setdefault("screen_light", False)
        self._validate_fields(data)

        profile = self.lock_profile_query(db, host_id).first()
        if not profile:
            raise NotFound("Profile not found. Complete onboarding first.")
        if not profile.email_verified_at:
            db.rollback()
            raise AuthorizationDenied("Email verification required to create events")

        if host.role != Role.ADMIN.value:
            max_per_day = self._daily_limit(profile)
            created_today = db.query(func.count(Event.id)).filter(
                Event.host_user_id == host_id,
                Event.created_at >= start_of_local_day_utc()
            ).scalar()

            if created_today >= max_per_day:
                db.rollback()
                message = f"You can create at most {max_per_day} event(s) per day."
                if not profile.phone_verified_at:
                    message += " Verify your phone to increase your limit."
                logger.warning(f"User {host_id} hit daily event limit of {max_per_day}")
                raise RateLimited(message)

        event = Event(host_user_id=host_id, status=EventStatus.ACTIVE.value, **data)
        db.add(event)
        db.flush()

        self._moderate(db, event.id, [data["title"], data["description"]])

        db.add(MessageThread(event_id=event.id))
        db.commit()
        db.refresh(event)

        logger.info(f"Event {event.id} created by user {host_id}")
        return serialize_event(event, include_private=True)

    def _get_event(self, db: Session, event_id: int, for_update: bool = False) -> Event:
        query = db.query(Event).filter(Event.id == event_id)
        if for_update:
            query = query.with_for_update()
        event = query.first()
        if not event:
            raise NotFound("Event not found")
        return event

    def update_event(
        self,
        db: Session,
        event_id: int,
        actor_id: int,
        fields: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Host-only edit of mutable fields; status is never touched here"""
        user_service.get_actor(db, actor_id)
        event = self._get_event(db, event_id, for_update=True)

        if event.host_user_id != actor_id:
            db.rollback()
            raise AuthorizationDenied()
        if event.status != EventStatus.ACTIVE.value:
            db.rollback()
            raise Conflict("Only active events can be edited")

        updates = self._normalize_fields(fields)
        merged = {key: getattr(event, key) for key in EDITABLE_FIELDS}
        merged.update(updates)
        self._validate_fields(merged, check_start="start_at" in updates)

        if "max_attendees" in updates:
            going = self.going_counts(db, [event.id]).get(event.id, 0)
            if updates["max_attendees"] < going:
                db.rollback()
                raise Conflict(
                    f"{going} people are already going; capacity cannot be lower than that"
                )

        changed_texts = [
            updates[key] for key in ("title", "description")
            if key in updates and updates[key] != getattr(event, key)
        ]
        self._moderate(db, event.id, changed_texts)

        for key, value in updates.items():
            setattr(event, key, value)
        db.commit()
        db.refresh(event)

        logger.info(f"Event {event_id} updated by host {actor_id}")
        return serialize_event(event, include_private=True)

    def cancel_event(self, db: Session, event_id: int, actor_id: int) -> Dict[str, Any]:
        """Host cancels an active event. Irreversible."""
        user_service.get_actor(db, actor_id)
        event = self._get_event(db, event_id)

        if event.host_user_id != actor_id:
            raise AuthorizationDenied()

        updated = db.query(Event).filter(
            Event.id == event_id,
            Event.status == EventStatus.ACTIVE.value
        ).update({Event.status: EventStatus.CANCELLED.value}, synchronize_session=False)

        if not updated:
            db.rollback()
            raise Conflict(f"Event is already {event.status.lower()}")

        db.commit()
        db.refresh(event)

        logger.info(f"Event {event_id} cancelled by host {actor_id}")
        return serialize_event(event, include_private=True)

    def remove_event(self, db: Session, event_id: int, actor_id: int) -> Dict[str, Any]:
        """Admin takedown of an active event"""
        user_service.require_admin(db, actor_id)
        event = self._get_event(db, event_id)

        updated = db.query(Event).filter(
            Event.id == event_id,
            Event.status == EventStatus.ACTIVE.value
        ).update({Event.status: EventStatus.REMOVED.value}, synchronize_session=False)

        if not updated:
            db.rollback()
            if event.status == EventStatus.REMOVED.value:
                raise Conflict("Event is already removed")
            raise Conflict("Cancelled events cannot be removed")

        db.commit()
        db.refresh(event)

        logger.info(f"Event {event_id} removed by admin {actor_id}")
        return serialize_event(event)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def going_counts(self, db: Session, event_ids: List[int]) -> Dict[int, int]:
        if not event_ids:
            return {}
        rows = db.query(RSVP.event_id, func.count(RSVP.id)).filter(
            RSVP.event_id.in_(event_ids),
            RSVP.status == RSVPStatus.GOING.value
        ).group_by(RSVP.event_id).all()
        return {event_id: count for event_id, count in rows}

    def blocked_user_ids(self, db: Session, user_id: Optional[int]) -> List[int]:
        """Users in a block relation with user_id, in either direction"""
        if user_id is None:
            return []
        blocks = db.query(Block).filter(
            or_(Block.blocker_user_id == user_id, Block.blocked_user_id == user_id)
        ).all()

        ids = set()
        for block in blocks:
            if block.blocker_user_id != user_id:
                ids.add(block.blocker_user_id)
            if block.blocked_user_id != user_id:
                ids.add(block.blocked_user_id)
        return sorted(ids)

    def interest_categories(self, db: Session, user_id: Optional[int]) -> List[str]:
        if user_id is None:
            return []
        profile = db.query(Profile).filter(Profile.user_id == user_id).first()
        if not profile or not profile.interests:
            return []

        categories = set()
        for interest in profile.interests:
            tag = str(interest).strip()
            if tag.upper() in EventCategory.__members__:
                categories.add(tag.upper())
            elif tag.lower() in INTEREST_CATEGORIES:
                categories.add(INTEREST_CATEGORIES[tag.lower()])
        return sorted(categories)

    def discover(
        self,
        db: Session,
        latitude: float,
        longitude: float,
        radius_miles: Optional[float] = None,
        requester_id: Optional[int] = None,
        tab: str = "nearby",
        category: Optional[str] = None,
        start_after: Optional[datetime] = None,
        start_before: Optional[datetime] = None,
        age_min: Optional[int] = None,
        age_max: Optional[int] = None,
        setting: Optional[str] = None,
        screen_light_only: bool = False
    ) -> List[Dict[str, Any]]:
        """
        Events near a point.

        Bounding box and filters run in SQL, then the exact haversine check
        drops the box corners. "popular" sorts by GOING count, "nearby" and
        "foryou" by distance, anything else by start time. Private location
        notes are never part of a discovery result.
        """
        if radius_miles is None:
            radius_miles = settings.DEFAULT_RADIUS_MILES
        if radius_miles <= 0:
            raise ValidationFailed("Radius must be greater than 0")
        if not -90 <= latitude <= 90:
            raise ValidationFailed("Latitude must be between -90 and 90")
        if not -180 <= longitude <= 180:
            raise ValidationFailed("Longitude must be between -180 and 180")

        bbox = geo_service.get_bounding_box(latitude, longitude, radius_miles)

        query = db.query(Event).options(
            joinedload(Event.host).joinedload(User.profile)
        ).filter(
            Event.latitude >= bbox["min_lat"],
            Event.latitude <= bbox["max_lat"],
            Event.longitude >= bbox["min_lng"],
            Event.longitude <= bbox["max_lng"],
            Event.status.notin_([EventStatus.CANCELLED.value, EventStatus.REMOVED.value])
        )

        blocked_ids = self.blocked_user_ids(db, requester_id)
        if blocked_ids:
            query = query.filter(Event.host_user_id.notin_(blocked_ids))

        if category:
            query = query.filter(Event.category == category)
        if start_after:
            query = query.filter(Event.start_at >= to_naive_utc(start_after))
        if start_before:
            query = query.filter(Event.start_at <= to_naive_utc(start_before))
        if age_min is not None:
            query = query.filter(Event.age_max >= age_min)
        if age_max is not None:
            query = query.filter(Event.age_min <= age_max)
        if setting:
            query = query.filter(Event.setting == ("MIXED" if setting == "BOTH" else setting))
        if screen_light_only:
            query = query.filter(Event.screen_light.is_(True))

        if tab == "foryou":
            categories = self.interest_categories(db, requester_id)
            if categories:
                query = query.filter(Event.category.in_(categories))

        candidates = query.order_by(Event.start_at.asc(), Event.id.asc()).all()

        in_range = []
        for event in candidates:
            distance = geo_service.haversine_distance(
                latitude, longitude, event.latitude, event.longitude
            )
            if distance <= radius_miles:
                in_range.append((event, distance))

        counts = self.going_counts(db, [event.id for event, _ in in_range])

        results = []
        for event, distance in in_range:
            summary = serialize_event(event)
            summary["host"] = serialize_host(event.host)
            summary["going_count"] = counts.get(event.id, 0)
            summary["distance_miles"] = round(distance, 3)
            summary["distance_label"] = geo_service.format_distance(distance)
            results.append(summary)

        if tab == "popular":
            results.sort(key=lambda r: r["going_count"], reverse=True)
        elif tab in ("nearby", "foryou"):
            results.sort(key=lambda r: r["distance_miles"])

        logger.debug(
            f"Discovery at ({latitude}, {longitude}) r={radius_miles}: "
            f"{len(candidates)} candidates, {len(results)} in range"
        )
        return results

    def get_event(
        self,
        db: Session,
        event_id: int,
        requester_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """Single event detail, private notes only for the host or GOING attendees"""
        event = db.query(Event).options(
            joinedload(Event.host).joinedload(User.profile)
        ).filter(Event.id == event_id).first()
        if not event:
            raise NotFound("Event not found")

        user_rsvp = None
        show_private = False
        if requester_id is not None:
            user_rsvp = db.query(RSVP).filter(
                RSVP.event_id == event_id,
                RSVP.user_id == requester_id
            ).first()
            show_private = (
                event.host_user_id == requester_id or
                (user_rsvp is not None and user_rsvp.status == RSVPStatus.GOING.value)
            )

        detail = serialize_event(event, include_private=show_private)
        detail["host"] = serialize_host(event.host)

        response = {
            "event": detail,
            "going_count": self.going_counts(db, [event.id]).get(event.id, 0),
        }
        if user_rsvp is not None:
            response["user_rsvp"] = serialize_rsvp(user_rsvp)
        return response

    def list_my_events(self, db: Session, user_id: int) -> List[Dict[str, Any]]:
        """Active events the user hosts or is GOING to"""
        user_service.get_actor(db, user_id)

        going_event_ids = db.query(RSVP.event_id).filter(
            RSVP.user_id == user_id,
            RSVP.status == RSVPStatus.GOING.value
        )
        events = db.query(Event).options(
            joinedload(Event.host).joinedload(User.profile)
        ).filter(
            Event.status == EventStatus.ACTIVE.value,
            or_(Event.host_user_id == user_id, Event.id.in_(going_event_ids))
        ).order_by(Event.start_at.asc()).limit(settings.MY_EVENTS_LIMIT).all()

        counts = self.going_counts(db, [event.id for event in events])
        results = []
        for event in events:
            summary = serialize_event(event, include_private=True)
            summary["host"] = serialize_host(event.host)
            summary["going_count"] = counts.get(event.id, 0)
            results.append(summary)
        return results

    def event_end(self, event: Event) -> datetime:
        return event.start_at + timedelta(minutes=event.duration_mins)


def serialize_rsvp(rsvp: RSVP) -> Dict[str, Any]:
    return {
        "id": rsvp.id,
        "event_id": rsvp.event_id,
        "user_id": rsvp.user_id,
        "status": rsvp.status,
        "checked_in_at": rsvp.checked_in_at.isoformat() if rsvp.checked_in_at else None,
        "created_at": rsvp.created_at.isoformat() if rsvp.created_at else None,
    }


# Singleton instance
event_service = EventService()

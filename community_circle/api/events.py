"""
Events Router - Discovery, event lifecycle and RSVP endpoints
"""
from datetime import datetime
from typing import Optional, Literal
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from community_circle.db.models import EventCategory
from community_circle.dependencies import get_db, get_current_user_id, get_optional_user_id
from community_circle.services.event_service import event_service
from community_circle.services.rsvp_service import rsvp_service, RSVPAction

router = APIRouter()

SettingValue = Literal["INDOOR", "OUTDOOR", "MIXED", "BOTH"]


class EventCreateRequest(BaseModel):
    title: str
    description: str
    category: EventCategory
    start_at: datetime
    duration_mins: int
    setting: SettingValue
    age_min: int
    age_max: int
    max_attendees: int
    screen_light: bool = False
    location_label_public: str
    location_notes_private: str = ""
    latitude: float
    longitude: float

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Stroller walk by the river",
                "description": "Easy loop along the river trail, coffee afterwards.",
                "category": "WALK",
                "start_at": "2030-05-04T10:00:00Z",
                "duration_mins": 60,
                "setting": "OUTDOOR",
                "age_min": 0,
                "age_max": 3,
                "max_attendees": 8,
                "screen_light": True,
                "location_label_public": "Boathouse Row",
                "location_notes_private": "Meet by the third boathouse, blue bench",
                "latitude": 39.9696,
                "longitude": -75.1872
            }
        }


class EventUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[EventCategory] = None
    start_at: Optional[datetime] = None
    duration_mins: Optional[int] = None
    setting: Optional[SettingValue] = None
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    max_attendees: Optional[int] = None
    screen_light: Optional[bool] = None
    location_label_public: Optional[str] = None
    location_notes_private: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class RSVPRequest(BaseModel):
    status: RSVPAction = RSVPAction.SET_GOING


@router.get("")
async def discover_events(
    lat: float = Query(..., description="Search center latitude"),
    lng: float = Query(..., description="Search center longitude"),
    radius_miles: Optional[float] = Query(None, description="Search radius, defaults to 10 miles"),
    tab: Literal["nearby", "popular", "foryou"] = Query("nearby"),
    category: Optional[EventCategory] = None,
    start_after: Optional[datetime] = None,
    start_before: Optional[datetime] = None,
    age_min: Optional[int] = None,
    age_max: Optional[int] = None,
    setting: Optional[SettingValue] = None,
    screen_light_only: bool = False,
    user_id: Optional[int] = Depends(get_optional_user_id),
    db: Session = Depends(get_db)
):
    """
    Events within a radius of a point.

    Tabs:
    - nearby: closest first
    - popular: most GOING RSVPs first
    - foryou: limited to the caller's interests, closest first

    Hosts blocked by or blocking the caller are hidden. Private location
    notes are never included.
    """
    events = event_service.discover(
        db=db,
        latitude=lat,
        longitude=lng,
        radius_miles=radius_miles,
        requester_id=user_id,
        tab=tab,
        category=category.value if category else None,
        start_after=start_after,
        start_before=start_before,
        age_min=age_min,
        age_max=age_max,
        setting=setting,
        screen_light_only=screen_light_only
    )
    return {"events": events}


@router.get("/mine")
async def my_events(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Active events the caller hosts or is going to"""
    return {"events": event_service.list_my_events(db, user_id)}


@router.post("", status_code=201)
async def create_event(
    request: EventCreateRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Host a new event.

    Requires a verified email. Daily limit: 1 event, 3 with a verified
    phone. Profanity in title or description rejects the event; political
    keywords are allowed but flagged for review.
    """
    event = event_service.create_event(db, user_id, request.model_dump())
    return {"event": event}


@router.get("/{event_id}")
async def get_event(
    event_id: int,
    user_id: Optional[int] = Depends(get_optional_user_id),
    db: Session = Depends(get_db)
):
    """Event detail; private location notes only for the host and GOING attendees"""
    return event_service.get_event(db, event_id, user_id)


@router.patch("/{event_id}")
async def update_event(
    event_id: int,
    request: EventUpdateRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Edit an event (host only)"""
    event = event_service.update_event(
        db, event_id, user_id, request.model_dump(exclude_unset=True)
    )
    return {"event": event}


@router.post("/{event_id}/cancel")
async def cancel_event(
    event_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Cancel an event (host only, irreversible)"""
    return {"event": event_service.cancel_event(db, event_id, user_id)}


@router.post("/{event_id}/rsvp")
async def rsvp(
    event_id: int,
    request: RSVPRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Set the caller's RSVP to GOING or CANCELLED.

    GOING fails when the event is full; on success the response carries
    the private location notes. CANCELLED requires an existing RSVP.
    """
    return rsvp_service.upsert_rsvp(db, event_id, user_id, request.status)


@router.delete("/{event_id}/rsvp")
async def cancel_rsvp(
    event_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Cancel the caller's RSVP"""
    return rsvp_service.cancel_rsvp(db, event_id, user_id)


@router.get("/{event_id}/rsvps")
async def list_rsvps(
    event_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """All RSVPs with attendee contact details (host or admin)"""
    return {"rsvps": rsvp_service.list_attendees(db, event_id, user_id)}


@router.post("/{event_id}/checkin")
async def check_in(
    event_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Check in to an event the caller is going to"""
    return rsvp_service.check_in(db, event_id, user_id)

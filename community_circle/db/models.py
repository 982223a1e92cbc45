"""
SQLAlchemy ORM Models for the CommunityCircle service
"""
from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Column, Integer, String, Text, Float, Boolean, DateTime,
    ForeignKey, JSON, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from community_circle.db.database import Base


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class EventCategory(str, Enum):
    WALK = "WALK"
    PLAYGROUND = "PLAYGROUND"
    LIBRARY = "LIBRARY"
    CRAFTS = "CRAFTS"
    SPORTS = "SPORTS"
    OTHER = "OTHER"


class EventSetting(str, Enum):
    INDOOR = "INDOOR"
    OUTDOOR = "OUTDOOR"
    MIXED = "MIXED"


class EventStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"
    REMOVED = "REMOVED"


class RSVPStatus(str, Enum):
    GOING = "GOING"
    CANCELLED = "CANCELLED"


class FlagRule(str, Enum):
    PROFANITY = "PROFANITY"
    POLITICS = "POLITICS"
    OTHER = "OTHER"


class ReportTargetType(str, Enum):
    USER = "USER"
    EVENT = "EVENT"


class ReportReason(str, Enum):
    HARASSMENT = "HARASSMENT"
    HATE = "HATE"
    UNSAFE = "UNSAFE"
    SPAM = "SPAM"
    POLITICS = "POLITICS"
    OTHER = "OTHER"


class ReportStatus(str, Enum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default=Role.USER.value)
    suspended_at = Column(DateTime)  # null means active
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    profile = relationship("Profile", back_populates="user", uselist=False)
    events_hosted = relationship("Event", back_populates="host")
    rsvps = relationship("RSVP", back_populates="user")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    city = Column(String(100), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    radius_miles = Column(Float, nullable=False, default=5)
    interests = Column(JSON, nullable=False, default=list)
    kids_age_ranges = Column(JSON, nullable=False, default=list)
    screen_light_mode = Column(Boolean, nullable=False, default=False)
    email_verified_at = Column(DateTime)
    phone_verified_at = Column(DateTime)
    id_verified_at = Column(DateTime)
    trust_score = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="profile")


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    host_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String(80), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(20), nullable=False)
    start_at = Column(DateTime, nullable=False)
    duration_mins = Column(Integer, nullable=False)
    setting = Column(String(20), nullable=False)  # INDOOR, OUTDOOR, MIXED
    age_min = Column(Integer, nullable=False)
    age_max = Column(Integer, nullable=False)
    max_attendees = Column(Integer, nullable=False)
    screen_light = Column(Boolean, nullable=False, default=False)
    location_label_public = Column(String(100), nullable=False)
    location_notes_private = Column(String(300), nullable=False, default="")
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    status = Column(String(20), nullable=False, default=EventStatus.ACTIVE.value)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("idx_event_lat_lng", "latitude", "longitude"),
        Index("idx_event_host_created", "host_user_id", "created_at"),
    )

    # Relationships
    host = relationship("User", back_populates="events_hosted")
    rsvps = relationship("RSVP", back_populates="event")
    thread = relationship("MessageThread", back_populates="event", uselist=False)


class RSVP(Base):
    __tablename__ = "rsvps"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String(20), nullable=False, default=RSVPStatus.GOING.value)
    checked_in_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="unique_event_user_rsvp"),
    )

    # Relationships
    event = relationship("Event", back_populates="rsvps")
    user = relationship("User", back_populates="rsvps")


class Flag(Base):
    __tablename__ = "flags"

    id = Column(Integer, primary_key=True, index=True)
    target_type = Column(String(20), nullable=False, default=ReportTargetType.EVENT.value)
    target_id = Column(Integer, nullable=False, index=True)
    rule = Column(String(20), nullable=False)  # PROFANITY, POLITICS, OTHER
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    reporter_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    target_type = Column(String(20), nullable=False)  # USER, EVENT
    target_id = Column(Integer, nullable=False)
    reason = Column(String(20), nullable=False)
    notes = Column(Text)
    status = Column(String(20), nullable=False, default=ReportStatus.OPEN.value)
    resolved_at = Column(DateTime)
    resolved_by_user_id = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    reporter = relationship("User", foreign_keys=[reporter_user_id])
    resolved_by = relationship("User", foreign_keys=[resolved_by_user_id])


class Block(Base):
    __tablename__ = "blocks"

    id = Column(Integer, primary_key=True, index=True)
    blocker_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    blocked_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("blocker_user_id", "blocked_user_id", name="unique_blocker_blocked"),
    )


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="unique_event_user_feedback"),
    )


class MessageThread(Base):
    __tablename__ = "message_threads"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    event = relationship("Event", back_populates="thread")
    messages = relationship(
        "Message", back_populates="thread", order_by="Message.id"
    )


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    thread_id = Column(Integer, ForeignKey("message_threads.id"), nullable=False)
    sender_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    thread = relationship("MessageThread", back_populates="messages")
    sender = relationship("User")


class HelpRequest(Base):
    __tablename__ = "help_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"))
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)
    subject = Column(String(100), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="new")  # new, answered, closed
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

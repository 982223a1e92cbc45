"""
Shared fixtures: an in-memory SQLite database behind the FastAPI app
"""
import os
from datetime import datetime, timedelta

os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from community_circle.db.database import Base
from community_circle.db import models
from community_circle.dependencies import get_db
from community_circle.main import app
from community_circle.services.profile_service import compute_trust_score

PHILLY = (39.9526, -75.1652)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(user_id):
    return {"X-User-Id": str(user_id)}


@pytest.fixture
def make_user(db):
    """Insert a user with a profile; returns the user id"""
    counter = {"n": 0}

    def _make_user(
        name="Parent",
        role=models.Role.USER.value,
        email_verified=True,
        phone_verified=False,
        latitude=PHILLY[0],
        longitude=PHILLY[1],
        interests=None,
        with_profile=True
    ):
        counter["n"] += 1
        user = models.User(
            email=f"user{counter['n']}@example.com",
            password_hash="not-a-real-hash",
            name=f"{name} {counter['n']}",
            role=role
        )
        db.add(user)
        db.flush()

        if with_profile:
            now = datetime.utcnow()
            profile = models.Profile(
                user_id=user.id,
                city="Philadelphia",
                latitude=latitude,
                longitude=longitude,
                radius_miles=10,
                interests=interests or ["walks"],
                kids_age_ranges=["3-5"],
                email_verified_at=now if email_verified else None,
                phone_verified_at=now if phone_verified else None
            )
            profile.trust_score = compute_trust_score(
                profile.email_verified_at, profile.phone_verified_at, None
            )
            db.add(profile)

        db.commit()
        return user.id

    return _make_user


@pytest.fixture
def make_event(db):
    """Insert an event (with its thread) directly; returns the event id"""

    def _make_event(host_id, **overrides):
        fields = {
            "title": "Playground meetup",
            "description": "Open play at the neighbourhood playground, all welcome.",
            "category": models.EventCategory.PLAYGROUND.value,
            "start_at": datetime.utcnow() + timedelta(days=2),
            "duration_mins": 60,
            "setting": models.EventSetting.OUTDOOR.value,
            "age_min": 2,
            "age_max": 8,
            "max_attendees": 10,
            "screen_light": False,
            "location_label_public": "Rittenhouse Square",
            "location_notes_private": "By the goat statue",
            "latitude": PHILLY[0],
            "longitude": PHILLY[1],
            "status": models.EventStatus.ACTIVE.value,
        }
        fields.update(overrides)
        event = models.Event(host_user_id=host_id, **fields)
        db.add(event)
        db.flush()
        db.add(models.MessageThread(event_id=event.id))
        db.commit()
        return event.id

    return _make_event


def event_payload(**overrides):
    """Request body for POST /events"""
    payload = {
        "title": "Stroller walk by the river",
        "description": "Easy loop along the river trail, coffee afterwards.",
        "category": "WALK",
        "start_at": (datetime.utcnow() + timedelta(days=3)).isoformat(),
        "duration_mins": 60,
        "setting": "OUTDOOR",
        "age_min": 0,
        "age_max": 3,
        "max_attendees": 8,
        "screen_light": True,
        "location_label_public": "Boathouse Row",
        "location_notes_private": "Blue bench by the third boathouse",
        "latitude": PHILLY[0],
        "longitude": PHILLY[1],
    }
    payload.update(overrides)
    return payload

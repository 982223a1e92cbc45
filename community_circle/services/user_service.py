"""
User Service - Sign-up, identity lookups and role checks
"""
import logging
import re
from typing import Dict, Any

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from community_circle.db.models import User, Role
from community_circle.exceptions import (
    AuthenticationRequired, AuthorizationDenied, Conflict, NotFound, ValidationFailed
)

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def validate_email(email: str) -> str:
    """Normalise an email address; the request models enforce its syntax"""
    email = (email or "").strip().lower()
    if not email:
        raise ValidationFailed("Please enter a valid email address")
    if len(email) > 255:
        raise ValidationFailed("Email must be at most 255 characters")
    return email


def validate_name(name: str) -> str:
    name = (name or "").strip()
    if len(name) < 2:
        raise ValidationFailed("Name must be at least 2 characters")
    if len(name) > 50:
        raise ValidationFailed("Name must be at most 50 characters")
    return name


class UserService:
    """Service for user accounts"""

    def hash_password(self, password: str) -> str:
        return pwd_context.hash(password)

    def _validate_password(self, password: str) -> None:
        if len(password) < 8:
            raise ValidationFailed("Password must be at least 8 characters")
        if len(password) > 72:
            raise ValidationFailed("Password must be at most 72 characters")
        if not re.search(r"[A-Z]", password):
            raise ValidationFailed("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", password):
            raise ValidationFailed("Password must contain at least one lowercase letter")
        if not re.search(r"[0-9]", password):
            raise ValidationFailed("Password must contain at least one number")

    def register_user(
        self,
        db: Session,
        name: str,
        email: str,
        password: str
    ) -> Dict[str, Any]:
        """Create a new account with role USER"""
        name = validate_name(name)
        email = validate_email(email)
        self._validate_password(password or "")

        if db.query(User).filter(User.email == email).first():
            raise Conflict("An account with this email already exists")

        user = User(
            name=name,
            email=email,
            password_hash=self.hash_password(password),
            role=Role.USER.value
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("An account with this email already exists")
        db.refresh(user)

        logger.info(f"Registered user {user.id}")
        return {"id": user.id, "email": user.email, "name": user.name}

    def get_user(self, db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound("User not found")
        return user

    def get_actor(self, db: Session, actor_id: int) -> User:
        """Load the calling user; anonymous or unknown callers are rejected"""
        if actor_id is None:
            raise AuthenticationRequired()
        user = db.query(User).filter(User.id == actor_id).first()
        if not user:
            raise AuthenticationRequired()
        if user.suspended_at is not None:
            logger.warning(f"Rejected suspended user {actor_id}")
            raise AuthenticationRequired()
        return user

    def require_admin(self, db: Session, actor_id: int) -> User:
        actor = self.get_actor(db, actor_id)
        if actor.role != Role.ADMIN.value:
            logger.warning(f"User {actor_id} attempted an admin action")
            raise AuthorizationDenied()
        return actor

    def get_me(self, db: Session, user_id: int) -> Dict[str, Any]:
        """Current user with profile"""
        user = self.get_actor(db, user_id)
        profile = user.profile

        return {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "role": user.role,
            "created_at": user.created_at.isoformat() if user.created_at else None,
            "suspended_at": user.suspended_at.isoformat() if user.suspended_at else None,
            "profile": serialize_profile(profile) if profile else None
        }


def serialize_profile(profile) -> Dict[str, Any]:
    return {
        "id": profile.id,
        "city": profile.city,
        "latitude": profile.latitude,
        "longitude": profile.longitude,
        "radius_miles": profile.radius_miles,
        "interests": profile.interests or [],
        "kids_age_ranges": profile.kids_age_ranges or [],
        "screen_light_mode": profile.screen_light_mode,
        "email_verified_at": profile.email_verified_at.isoformat() if profile.email_verified_at else None,
        "phone_verified_at": profile.phone_verified_at.isoformat() if profile.phone_verified_at else None,
        "id_verified_at": profile.id_verified_at.isoformat() if profile.id_verified_at else None,
        "trust_score": profile.trust_score
    }


# Singleton instance
user_service = UserService()

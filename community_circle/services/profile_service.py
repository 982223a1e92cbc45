"""
Profile Service - Onboarding, settings, verification and trust scoring
"""
import logging
from datetime import datetime
from typing import Dict, Any, Optional, List

from sqlalchemy.orm import Session

from community_circle.config import settings
from community_circle.db.models import Profile
from community_circle.exceptions import Conflict, NotFound, ValidationFailed
from community_circle.services.user_service import user_service, serialize_profile

logger = logging.getLogger(__name__)


def compute_trust_score(
    email_verified_at: Optional[datetime],
    phone_verified_at: Optional[datetime],
    id_verified_at: Optional[datetime]
) -> int:
    """
    Trust score from the verification timestamps that are set.

    Always recomputed from scratch; never patched incrementally.
    """
    score = 0
    if email_verified_at:
        score += settings.TRUST_WEIGHT_EMAIL
    if phone_verified_at:
        score += settings.TRUST_WEIGHT_PHONE
    if id_verified_at:
        score += settings.TRUST_WEIGHT_ID
    return score


class ProfileService:
    """Service for user profiles"""

    def _validate_onboarding(self, fields: Dict[str, Any]) -> None:
        city = (fields.get("city") or "").strip()
        if len(city) < 2:
            raise ValidationFailed("City is required")
        if len(city) > 100:
            raise ValidationFailed("City name is too long")

        lat = fields.get("latitude")
        lng = fields.get("longitude")
        if lat is None:
            raise ValidationFailed("Latitude is required")
        if not -90 <= lat <= 90:
            raise ValidationFailed("Latitude must be between -90 and 90")
        if lng is None:
            raise ValidationFailed("Longitude is required")
        if not -180 <= lng <= 180:
            raise ValidationFailed("Longitude must be between -180 and 180")

        radius = fields.get("radius_miles")
        if radius is None:
            raise ValidationFailed("Radius is required")
        if radius < 1:
            raise ValidationFailed("Radius must be at least 1 mile")
        if radius > 50:
            raise ValidationFailed("Radius must be at most 50 miles")

        interests: List[str] = fields.get("interests") or []
        if len(interests) < 1:
            raise ValidationFailed("Select at least one interest")
        if len(interests) > 10:
            raise ValidationFailed("You can select up to 10 interests")

        age_ranges: List[str] = fields.get("kids_age_ranges") or []
        if len(age_ranges) < 1:
            raise ValidationFailed("Select at least one age range")
        if len(age_ranges) > 5:
            raise ValidationFailed("You can select up to 5 age ranges")

    def upsert_profile(
        self,
        db: Session,
        user_id: int,
        fields: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Complete onboarding or update settings.

        A settings-only update (screen_light_mode without interests) skips
        the onboarding validation. Only keys present in `fields` are written.
        """
        user_service.get_actor(db, user_id)

        is_settings_update = (
            fields.get("screen_light_mode") is not None and not fields.get("interests")
        )
        if not is_settings_update:
            self._validate_onboarding(fields)

        profile = db.query(Profile).filter(Profile.user_id == user_id).with_for_update().first()

        updates = {key: value for key, value in fields.items() if value is not None}
        if "city" in updates:
            updates["city"] = updates["city"].strip()

        if profile is None:
            profile = Profile(
                user_id=user_id,
                city=updates.get("city", "Unknown"),
                latitude=updates.get("latitude", 0.0),
                longitude=updates.get("longitude", 0.0),
                radius_miles=updates.get("radius_miles", 5),
                interests=updates.get("interests", []),
                kids_age_ranges=updates.get("kids_age_ranges", []),
                screen_light_mode=updates.get("screen_light_mode", False)
            )
            db.add(profile)
            logger.info(f"Created profile for user {user_id}")
        else:
            for key, value in updates.items():
                setattr(profile, key, value)

        profile.trust_score = compute_trust_score(
            profile.email_verified_at,
            profile.phone_verified_at,
            profile.id_verified_at
        )
        db.commit()
        db.refresh(profile)

        return serialize_profile(profile)

    def _get_profile_for_update(self, db: Session, user_id: int) -> Profile:
        user_service.get_actor(db, user_id)
        profile = db.query(Profile).filter(Profile.user_id == user_id).with_for_update().first()
        if not profile:
            raise NotFound("Profile not found. Complete onboarding first.")
        return profile

    def verify_email(self, db: Session, user_id: int) -> Dict[str, Any]:
        """Mark the email as verified (delivery of the link is stubbed)"""
        profile = self._get_profile_for_update(db, user_id)
        if profile.email_verified_at:
            db.rollback()
            raise Conflict("Email is already verified")

        profile.email_verified_at = datetime.utcnow()
        profile.trust_score = compute_trust_score(
            profile.email_verified_at,
            profile.phone_verified_at,
            profile.id_verified_at
        )
        db.commit()
        db.refresh(profile)

        logger.info(f"Email verified for user {user_id}, trust score {profile.trust_score}")
        return serialize_profile(profile)

    def verify_phone(self, db: Session, user_id: int, code: str) -> Dict[str, Any]:
        """Check the SMS code (stubbed) and mark the phone as verified"""
        if not code:
            raise ValidationFailed("Verification code is required")
        if code != settings.PHONE_VERIFICATION_CODE:
            raise ValidationFailed("Invalid verification code")

        profile = self._get_profile_for_update(db, user_id)
        if profile.phone_verified_at:
            db.rollback()
            raise Conflict("Phone is already verified")

        profile.phone_verified_at = datetime.utcnow()
        profile.trust_score = compute_trust_score(
            profile.email_verified_at,
            profile.phone_verified_at,
            profile.id_verified_at
        )
        db.commit()
        db.refresh(profile)

        logger.info(f"Phone verified for user {user_id}, trust score {profile.trust_score}")
        return serialize_profile(profile)


# Singleton instance
profile_service = ProfileService()

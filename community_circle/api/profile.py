"""
Profile Router - Current user, onboarding and verification endpoints
"""
from typing import Optional, List
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from community_circle.dependencies import get_db, get_current_user_id
from community_circle.services.user_service import user_service
from community_circle.services.profile_service import profile_service

router = APIRouter()


class OnboardingRequest(BaseModel):
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius_miles: Optional[float] = None
    interests: Optional[List[str]] = None
    kids_age_ranges: Optional[List[str]] = None
    screen_light_mode: Optional[bool] = None


class PhoneVerificationRequest(BaseModel):
    code: str


@router.get("/me")
async def get_me(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Current user with profile and trust score"""
    return user_service.get_me(db, user_id)


@router.post("/onboarding")
async def complete_onboarding(
    request: OnboardingRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create or update the caller's profile.

    Sending only screen_light_mode is treated as a settings change and
    skips the onboarding checks.
    """
    profile = profile_service.upsert_profile(
        db, user_id, request.model_dump(exclude_unset=True)
    )
    return {"profile": profile}


@router.post("/verify/email")
async def verify_email(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Mark email as verified (+10 trust)"""
    return {"profile": profile_service.verify_email(db, user_id)}


@router.post("/verify/phone")
async def verify_phone(
    request: PhoneVerificationRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Check the SMS code and mark phone as verified (+20 trust)"""
    return {"profile": profile_service.verify_phone(db, user_id, request.code)}

"""
Help Router - Contact form for support requests
"""
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from community_circle.dependencies import get_db, get_optional_user_id
from community_circle.services.help_service import help_service

router = APIRouter()


class HelpRequestBody(BaseModel):
    name: str
    email: EmailStr
    subject: str
    message: str


@router.post("", status_code=201)
async def create_help_request(
    request: HelpRequestBody,
    user_id: Optional[int] = Depends(get_optional_user_id),
    db: Session = Depends(get_db)
):
    """Submit a help request; signing in is optional"""
    help_request = help_service.create_help_request(
        db,
        name=request.name,
        email=request.email,
        subject=request.subject,
        message=request.message,
        user_id=user_id
    )
    return {"help_request": help_request}

"""
Auth Router - Account sign-up

Sign-in and session issuance live in the upstream identity provider.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from community_circle.dependencies import get_db
from community_circle.services.user_service import user_service

router = APIRouter()


class SignUpRequest(BaseModel):
    name: str
    email: EmailStr
    password: str


@router.post("/sign-up", status_code=201)
async def sign_up(
    request: SignUpRequest,
    db: Session = Depends(get_db)
):
    """
    Create an account.

    - Name: 2-50 characters
    - Password: 8-72 characters with an uppercase letter, a lowercase letter and a number
    - Email must not already be registered
    """
    return user_service.register_user(
        db=db,
        name=request.name,
        email=request.email,
        password=request.password
    )

"""
FastAPI dependencies for the CommunityCircle service
"""
from typing import Generator, Optional
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from community_circle.db.database import SessionLocal
from community_circle.exceptions import AuthenticationRequired
from community_circle.services.user_service import user_service


def get_db() -> Generator[Session, None, None]:
    """Get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


async def get_optional_user_id(
    x_user_id: Optional[int] = Header(None),
    db: Session = Depends(get_db)
) -> Optional[int]:
    """
    Caller identity forwarded by the upstream identity provider.

    No header means anonymous. Unknown and suspended users are rejected.
    """
    if x_user_id is None:
        return None
    user_service.get_actor(db, x_user_id)
    return x_user_id


async def get_current_user_id(
    user_id: Optional[int] = Depends(get_optional_user_id)
) -> int:
    """Authenticated caller id; mutations require one"""
    if user_id is None:
        raise AuthenticationRequired()
    return user_id

"""
Blocks Router
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from community_circle.dependencies import get_db, get_current_user_id
from community_circle.services.block_service import block_service

router = APIRouter()


class BlockRequest(BaseModel):
    blocked_user_id: int


@router.post("", status_code=201)
async def block_user(
    request: BlockRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Block a user. Their events disappear from the caller's discovery, and vice versa."""
    return {"block": block_service.create_block(db, user_id, request.blocked_user_id)}

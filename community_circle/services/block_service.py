"""
Block Service - Directed user blocks
"""
import logging
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from community_circle.db.models import Block
from community_circle.exceptions import Conflict, ValidationFailed
from community_circle.services.user_service import user_service

logger = logging.getLogger(__name__)


class BlockService:
    """Service for blocks; discovery hides hosts in either direction"""

    def create_block(self, db: Session, blocker_id: int, blocked_id: int) -> Dict[str, Any]:
        user_service.get_actor(db, blocker_id)

        if blocked_id is None:
            raise ValidationFailed("blocked_user_id is required")
        if blocked_id == blocker_id:
            raise ValidationFailed("You cannot block yourself")
        user_service.get_user(db, blocked_id)

        block = Block(blocker_user_id=blocker_id, blocked_user_id=blocked_id)
        db.add(block)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("You have already blocked this user")
        db.refresh(block)

        logger.info(f"User {blocker_id} blocked user {blocked_id}")
        return {
            "id": block.id,
            "blocker_user_id": block.blocker_user_id,
            "blocked_user_id": block.blocked_user_id,
            "created_at": block.created_at.isoformat() if block.created_at else None
        }


# Singleton instance
block_service = BlockService()

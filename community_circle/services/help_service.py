"""
Help Service - Support requests from the help page
"""
import logging
from typing import Dict, Any, Optional

from sqlalchemy.orm import Session

from community_circle.db.models import HelpRequest
from community_circle.exceptions import ValidationFailed
from community_circle.services.user_service import validate_email, validate_name

logger = logging.getLogger(__name__)


class HelpService:
    """Service for help requests; anonymous callers are allowed"""

    def create_help_request(
        self,
        db: Session,
        name: str,
        email: str,
        subject: str,
        message: str,
        user_id: Optional[int] = None
    ) -> Dict[str, Any]:
        name = validate_name(name)
        email = validate_email(email)

        subject = (subject or "").strip()
        if len(subject) < 5:
            raise ValidationFailed("Subject must be at least 5 characters")
        if len(subject) > 100:
            raise ValidationFailed("Subject must be at most 100 characters")

        message = (message or "").strip()
        if len(message) < 20:
            raise ValidationFailed("Message must be at least 20 characters")
        if len(message) > 2000:
            raise ValidationFailed("Message must be at most 2000 characters")

        help_request = HelpRequest(
            user_id=user_id,
            name=name,
            email=email,
            subject=subject,
            message=message
        )
        db.add(help_request)
        db.commit()
        db.refresh(help_request)

        logger.info(f"Help request {help_request.id} received")
        return {
            "id": help_request.id,
            "name": help_request.name,
            "email": help_request.email,
            "subject": help_request.subject,
            "status": help_request.status,
            "created_at": help_request.created_at.isoformat() if help_request.created_at else None
        }


# Singleton instance
help_service = HelpService()

"""
Reports Router - User-submitted reports against users and events
"""
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from community_circle.db.models import ReportReason, ReportTargetType
from community_circle.dependencies import get_db, get_current_user_id
from community_circle.services.admin_service import admin_service

router = APIRouter()


class ReportRequest(BaseModel):
    target_type: ReportTargetType
    target_id: int
    reason: ReportReason
    notes: Optional[str] = None


@router.post("", status_code=201)
async def create_report(
    request: ReportRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """File a report; it lands OPEN in the admin queue"""
    report = admin_service.create_report(
        db,
        reporter_id=user_id,
        target_type=request.target_type,
        target_id=request.target_id,
        reason=request.reason,
        notes=request.notes
    )
    return {"report": report}

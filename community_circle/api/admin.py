"""
Admin Router - Moderation queue and account actions (admin only)
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from community_circle.db.models import ReportStatus
from community_circle.dependencies import get_db, get_current_user_id
from community_circle.services.admin_service import admin_service
from community_circle.services.event_service import event_service

router = APIRouter()


@router.get("/reports")
async def list_reports(
    status: Optional[ReportStatus] = Query(None, description="OPEN or RESOLVED"),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Reports, newest first"""
    return {"reports": admin_service.list_reports(db, user_id, status)}


@router.post("/reports/{report_id}/resolve")
async def resolve_report(
    report_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return {"report": admin_service.resolve_report(db, report_id, user_id)}


@router.get("/flags")
async def list_flags(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Automatic content flags, newest first"""
    return {"flags": admin_service.list_flags(db, user_id)}


@router.post("/users/{target_user_id}/suspend")
async def suspend_user(
    target_user_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return {"user": admin_service.suspend_user(db, target_user_id, user_id)}


@router.post("/users/{target_user_id}/unsuspend")
async def unsuspend_user(
    target_user_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return {"user": admin_service.unsuspend_user(db, target_user_id, user_id)}


@router.post("/events/{event_id}/remove")
async def remove_event(
    event_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Take an active event down"""
    return {"event": event_service.remove_event(db, event_id, user_id)}

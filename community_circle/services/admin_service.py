"""
Admin Service - Moderation queue: flags, reports and user suspension
"""
import logging
from datetime import datetime
from typing import Dict, Any, List, Optional

from sqlalchemy.orm import Session, joinedload

from community_circle.db.models import (
    Flag, FlagRule, Report, ReportReason, ReportStatus, ReportTargetType, User
)
from community_circle.exceptions import Conflict, NotFound, ValidationFailed
from community_circle.services.user_service import user_service

logger = logging.getLogger(__name__)


def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else value


def serialize_flag(flag: Flag) -> Dict[str, Any]:
    return {
        "id": flag.id,
        "target_type": flag.target_type,
        "target_id": flag.target_id,
        "rule": flag.rule,
        "created_at": flag.created_at.isoformat() if flag.created_at else None
    }


def serialize_report(report: Report) -> Dict[str, Any]:
    return {
        "id": report.id,
        "reporter_user_id": report.reporter_user_id,
        "target_type": report.target_type,
        "target_id": report.target_id,
        "reason": report.reason,
        "notes": report.notes,
        "status": report.status,
        "resolved_at": report.resolved_at.isoformat() if report.resolved_at else None,
        "resolved_by_user_id": report.resolved_by_user_id,
        "created_at": report.created_at.isoformat() if report.created_at else None
    }


def serialize_account(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "suspended_at": user.suspended_at.isoformat() if user.suspended_at else None
    }


class AdminService:
    """Service for the moderation queue and admin actions"""

    def record_flag(
        self,
        db: Session,
        target_type: ReportTargetType,
        target_id: int,
        rule: FlagRule,
        commit: bool = True
    ) -> Flag:
        """Append a flag. No dedup; callers inside a larger write pass commit=False."""
        flag = Flag(
            target_type=_enum_value(target_type),
            target_id=target_id,
            rule=_enum_value(rule)
        )
        db.add(flag)
        if commit:
            db.commit()
            db.refresh(flag)

        logger.info(f"Flagged {_enum_value(target_type)} {target_id} for {_enum_value(rule)}")
        return flag

    def list_flags(self, db: Session, actor_id: int) -> List[Dict[str, Any]]:
        user_service.require_admin(db, actor_id)
        flags = db.query(Flag).order_by(Flag.created_at.desc(), Flag.id.desc()).all()
        return [serialize_flag(flag) for flag in flags]

    def create_report(
        self,
        db: Session,
        reporter_id: int,
        target_type: str,
        target_id: int,
        reason: str,
        notes: Optional[str] = None
    ) -> Dict[str, Any]:
        """Any authenticated user may report a user or an event"""
        user_service.get_actor(db, reporter_id)

        target_type = _enum_value(target_type)
        reason = _enum_value(reason)
        if target_type not in ReportTargetType.__members__:
            raise ValidationFailed("Report target type is required")
        if reason not in ReportReason.__members__:
            raise ValidationFailed("Please select a reason")
        if notes is not None:
            notes = notes.strip()
            if len(notes) > 500:
                raise ValidationFailed("Notes must be at most 500 characters")

        report = Report(
            reporter_user_id=reporter_id,
            target_type=target_type,
            target_id=target_id,
            reason=reason,
            notes=notes,
            status=ReportStatus.OPEN.value
        )
        db.add(report)
        db.commit()
        db.refresh(report)

        logger.info(f"Report {report.id} filed by user {reporter_id} against {target_type} {target_id}")
        return serialize_report(report)

    def list_reports(
        self,
        db: Session,
        actor_id: int,
        status: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Reports, newest first, with reporter and resolver identity"""
        user_service.require_admin(db, actor_id)

        query = db.query(Report).options(
            joinedload(Report.reporter),
            joinedload(Report.resolved_by)
        )
        if status:
            query = query.filter(Report.status == _enum_value(status))
        reports = query.order_by(Report.created_at.desc(), Report.id.desc()).all()

        results = []
        for report in reports:
            data = serialize_report(report)
            data["reporter"] = {
                "id": report.reporter.id,
                "name": report.reporter.name,
                "email": report.reporter.email
            }
            data["resolved_by"] = (
                {"id": report.resolved_by.id, "name": report.resolved_by.name}
                if report.resolved_by else None
            )
            results.append(data)
        return results

    def resolve_report(self, db: Session, report_id: int, actor_id: int) -> Dict[str, Any]:
        """OPEN -> RESOLVED, recorded with the resolving admin"""
        user_service.require_admin(db, actor_id)

        report = db.query(Report).filter(Report.id == report_id).first()
        if not report:
            raise NotFound("Report not found")

        updated = db.query(Report).filter(
            Report.id == report_id,
            Report.status == ReportStatus.OPEN.value
        ).update({
            Report.status: ReportStatus.RESOLVED.value,
            Report.resolved_at: datetime.utcnow(),
            Report.resolved_by_user_id: actor_id
        }, synchronize_session=False)

        if not updated:
            db.rollback()
            raise Conflict("Report is already resolved")

        db.commit()
        db.refresh(report)

        logger.info(f"Report {report_id} resolved by admin {actor_id}")
        return serialize_report(report)

    def _set_suspension(
        self,
        db: Session,
        user_id: int,
        actor_id: int,
        suspend: bool
    ) -> Dict[str, Any]:
        user_service.require_admin(db, actor_id)
        user = user_service.get_user(db, user_id)

        if suspend:
            updated = db.query(User).filter(
                User.id == user_id,
                User.suspended_at.is_(None)
            ).update({User.suspended_at: datetime.utcnow()}, synchronize_session=False)
        else:
            updated = db.query(User).filter(
                User.id == user_id,
                User.suspended_at.isnot(None)
            ).update({User.suspended_at: None}, synchronize_session=False)

        if not updated:
            db.rollback()
            raise Conflict("User is already suspended" if suspend else "User is not suspended")

        db.commit()
        db.refresh(user)

        logger.info(f"User {user_id} {'suspended' if suspend else 'unsuspended'} by admin {actor_id}")
        return serialize_account(user)

    def suspend_user(self, db: Session, user_id: int, actor_id: int) -> Dict[str, Any]:
        return self._set_suspension(db, user_id, actor_id, suspend=True)

    def unsuspend_user(self, db: Session, user_id: int, actor_id: int) -> Dict[str, Any]:
        return self._set_suspension(db, user_id, actor_id, suspend=False)


# Singleton instance
admin_service = AdminService()

"""
System Router - Health checks
"""
import logging
from datetime import datetime
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from community_circle.config import settings
from community_circle.dependencies import get_db

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Service health including a database round trip"""
    try:
        db.execute(text("SELECT 1"))
        database = "healthy"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        database = "unhealthy"

    status = "healthy" if database == "healthy" else "unhealthy"
    return JSONResponse(
        status_code=200 if status == "healthy" else 503,
        content={
            "status": status,
            "environment": settings.APP_ENV,
            "components": {"database": database},
            "timestamp": datetime.utcnow().isoformat()
        }
    )

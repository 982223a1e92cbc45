"""
Main FastAPI application for the CommunityCircle service
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from community_circle import __version__
from community_circle.config import settings
from community_circle.db.database import init_db
from community_circle.exceptions import ServiceError
from community_circle.api import (
    system,
    auth,
    profile,
    events,
    threads,
    blocks,
    reports,
    feedback,
    help_requests,
    admin
)

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.APP_DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Starting CommunityCircle service...")
    if settings.AUTO_CREATE_TABLES:
        try:
            init_db()
            logger.info("Database tables ready")
        except Exception as e:
            logger.error(f"Error initializing database: {e}")

    yield

    # Shutdown
    logger.info("Shutting down CommunityCircle service...")


app = FastAPI(
    title="CommunityCircle",
    description="Local family events: discovery, RSVPs and community moderation",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Expected failures carry their own status and caller-facing message"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and params are reported like any other invalid input"""
    errors = exc.errors()
    message = "Invalid input"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg", message)
    return JSONResponse(status_code=400, content={"error": message})


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred",
            "detail": str(exc) if settings.APP_DEBUG else None
        }
    )


# Include routers
app.include_router(system.router, tags=["System"])
app.include_router(auth.router, prefix="/auth", tags=["Auth"])
app.include_router(profile.router, tags=["Profile"])
app.include_router(events.router, prefix="/events", tags=["Events"])
app.include_router(threads.router, prefix="/threads", tags=["Threads"])
app.include_router(blocks.router, prefix="/blocks", tags=["Blocks"])
app.include_router(reports.router, prefix="/reports", tags=["Reports"])
app.include_router(feedback.router, prefix="/feedback", tags=["Feedback"])
app.include_router(help_requests.router, prefix="/help", tags=["Help"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "CommunityCircle",
        "version": __version__,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "community_circle.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.APP_DEBUG
    )

"""
API routers package
"""
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

__all__ = [
    "system",
    "auth",
    "profile",
    "events",
    "threads",
    "blocks",
    "reports",
    "feedback",
    "help_requests",
    "admin"
]

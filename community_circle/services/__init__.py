"""
Services package - Business logic layer
"""
from community_circle.services.user_service import user_service
from community_circle.services.profile_service import profile_service
from community_circle.services.geo_service import geo_service
from community_circle.services.moderation_service import moderation_service
from community_circle.services.admin_service import admin_service
from community_circle.services.event_service import event_service
from community_circle.services.rsvp_service import rsvp_service
from community_circle.services.block_service import block_service
from community_circle.services.feedback_service import feedback_service
from community_circle.services.thread_service import thread_service
from community_circle.services.help_service import help_service

__all__ = [
    "user_service",
    "profile_service",
    "geo_service",
    "moderation_service",
    "admin_service",
    "event_service",
    "rsvp_service",
    "block_service",
    "feedback_service",
    "thread_service",
    "help_service"
]

"""
CommunityCircle - family community events backend
"""
__version__ = "1.0.0"

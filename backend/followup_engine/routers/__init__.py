"""Follow-up Engine - API Routers"""
from .followups import router as followups_router

__all__ = [
    "followups_router",
]

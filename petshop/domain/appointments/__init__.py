"""Appointments domain - booking, visibility and status lifecycle"""

from .router import router

__all__ = ["router"]

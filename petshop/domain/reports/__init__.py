"""Reports domain - appointment, product and revenue summaries"""

from .router import router

__all__ = ["router"]

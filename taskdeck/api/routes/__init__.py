"""
Routes package for the taskdeck API.

- override: compile previews, built-in task listing, input checks
"""

from .override import router as override_router

__all__ = ["override_router"]

"""
taskdeck API - FastAPI surface for override compilation.

Endpoints:
    POST /api/override/compile        - Compile a selected task's override
    GET  /api/override/builtin-tasks  - List built-in tasks
    POST /api/override/verify-input   - Check an input value
    GET  /api/health                  - Health check
"""

from .server import create_app

__all__ = ["create_app"]

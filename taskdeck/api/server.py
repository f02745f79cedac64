"""
FastAPI application exposing override compilation.

Usage:
    # Run standalone
    python -m taskdeck.api.server

    # Or via factory
    from taskdeck.api import create_app
    app = create_app()
    uvicorn.run(app, port=5001)

API Structure:
    /api/override/compile        - Compile a selected task's override
    /api/override/builtin-tasks  - List built-in tasks
    /api/override/verify-input   - Check an input value
    /api/health                  - Health check
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config.runtime_config import get_runtime_config
from .routes import override_router

logger = logging.getLogger(__name__)


def create_app(enable_cors: bool = True) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        enable_cors: Whether to enable CORS middleware.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="taskdeck API",
        description="Compile task option selections into pipeline overrides.",
        version=__version__,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    app.include_router(override_router, prefix="/api")

    @app.get("/api/health")
    async def health() -> Dict[str, Any]:
        config = get_runtime_config()
        return {
            "status": "ok",
            "version": __version__,
            "builtin_output": config.builtin_output.value,
            "standard_output": config.standard_output.value,
        }

    logger.debug("taskdeck API created")
    return app


def main() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    logging.basicConfig(level=get_runtime_config().log_level)
    uvicorn.run(create_app(), host="127.0.0.1", port=5001)


if __name__ == "__main__":
    main()

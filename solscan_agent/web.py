"""
Settings HTTP API used by the web UI.

``GET /api/settings`` returns the persisted settings document and
``POST /api/settings`` replaces it wholesale.
"""

import json
import os
from typing import Optional

import uvicorn
from mcp.server.fastmcp.utilities.logging import configure_logging, get_logger
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from .config import DEFAULT_PORT, load_config, load_env_file
from .errors import AgentError, ConfigError, ValidationError
from .settings import SettingsStore

logger = get_logger(__name__)


def create_app(store: Optional[SettingsStore] = None) -> Starlette:
    store = store or SettingsStore()

    async def get_settings(request: Request) -> JSONResponse:
        settings = store.load()
        logger.info("Settings retrieved successfully")
        return JSONResponse(settings)

    async def post_settings(request: Request) -> JSONResponse:
        try:
            try:
                settings = await request.json()
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise ValidationError("Invalid JSON") from e
            if not isinstance(settings, dict):
                raise ValidationError("Settings must be a JSON object")
            store.save(settings)
        except AgentError as e:
            logger.error(f"Error saving settings: {e}")
            return JSONResponse({"success": False, "error": str(e)}, status_code=400)

        # Re-validate so a broken configuration shows up in the logs right away
        try:
            load_config(settings_store=store)
            logger.info("Config reloaded after settings update")
        except ConfigError as e:
            logger.warning(f"Could not reload config: {e}")

        logger.info("Settings saved successfully")
        return JSONResponse({"success": True})

    return Starlette(
        routes=[
            Route("/api/settings", get_settings, methods=["GET"]),
            Route("/api/settings", post_settings, methods=["POST"]),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["Content-Type"],
            )
        ],
    )


def main() -> None:
    load_env_file()
    configure_logging(os.getenv("LOG_LEVEL", "INFO").upper())
    port = int(os.getenv("PORT", DEFAULT_PORT))
    logger.info(f"Settings API available on http://localhost:{port}/api/settings")
    uvicorn.run(create_app(), host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()

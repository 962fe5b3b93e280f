#!/usr/bin/env python3
"""
API server runner script.

Starts the assessments API with uvicorn using HOST, PORT and RELOAD from
the environment.
"""

import os
import sys

import uvicorn

from talentflow.common.logger import app_logger

logger = app_logger.getChild("run_server")


def main():
    """Run the API server."""
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 8000))
    reload_enabled = os.getenv("RELOAD", "false").lower() == "true"

    logger.info(f"Starting server on {host}:{port} (reload: {reload_enabled})")
    try:
        uvicorn.run(
            "talentflow.api.app:app",
            host=host,
            port=port,
            reload=reload_enabled,
            log_level="info"
        )
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

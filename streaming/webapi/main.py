"""Uvicorn bootstrap for the streaming settings API."""

from __future__ import annotations

import logging
import os

import uvicorn
from dotenv import load_dotenv

from streaming.config import schema


def main() -> None:
    load_dotenv(override=False)
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # The variant may come from the .env file loaded above.
    schema.ACTIVE_VARIANT = schema.variant_from_env(os.environ)

    host = os.environ.get("STREAMING_WEBAPI_HOST", "0.0.0.0")
    port = int(os.environ.get("STREAMING_WEBAPI_PORT", "8000"))
    reload_flag = os.environ.get("STREAMING_WEBAPI_RELOAD", "0")
    uvicorn.run(
        "streaming.webapi:app",
        host=host,
        port=port,
        reload=reload_flag.lower() in {"1", "true", "yes"},
        log_level=os.environ.get("STREAMING_WEBAPI_LOG_LEVEL", "info"),
    )


if __name__ == "__main__":
    main()

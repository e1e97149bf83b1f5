# sdk/server.py
"""
Server shim that exposes the FastAPI app for uvicorn.
This imports the real app from apps.ui_api.main to provide a stable import path:
    uvicorn sdk.server:app
"""

from importlib import import_module
import os

import uvicorn

# Keep this dynamic so the main module path can be changed using an env var.
UI_API_MODULE = os.environ.get("GESTUREDECK_UI_MODULE", "apps.ui_api.main")

try:
    mod = import_module(UI_API_MODULE)
    # Expect the FastAPI instance to be named `app` in the module.
    app = getattr(mod, "app")
except (ImportError, AttributeError) as exc:
    # Fail fast with a helpful message if import/app is missing.
    raise RuntimeError(
        f"Failed to import FastAPI app from '{UI_API_MODULE}'. "
        "Make sure the module exists and exports `app` (FastAPI instance)."
    ) from exc


def serve(host: str = "127.0.0.1", port: int = 8765) -> None:
    """Run the API with uvicorn (``gesturedeck-api`` console script)."""
    from sdk.config import AppConfig
    from sdk.logging import configure_logging

    config = AppConfig()
    configure_logging(config.log_level)
    uvicorn.run(app, host=os.environ.get("GESTUREDECK_HOST", host),
                port=int(os.environ.get("GESTUREDECK_PORT", port)), log_level=config.log_level.lower())

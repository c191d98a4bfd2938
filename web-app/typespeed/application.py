import logging
import time
from pathlib import Path
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from typespeed.config import Settings, load_settings
from typespeed.routes import router
from typespeed.texts import TextSource, build_text_source

WEB_APP_DIR = Path(__file__).resolve().parent.parent
STATIC_DIR = WEB_APP_DIR / "static"


def create_app(
    settings: Optional[Settings] = None,
    text_source: Optional[TextSource] = None,
    clock: Callable[[], int] = time.monotonic_ns,
) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title="typespeed")
    app.state.settings = settings
    app.state.text_source = text_source or build_text_source(settings)
    app.state.clock = clock

    if STATIC_DIR.exists():
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    else:
        logging.warning("Static directory not found: %s", STATIC_DIR)

    app.include_router(router)
    return app

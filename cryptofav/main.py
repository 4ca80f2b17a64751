# cryptofav/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cryptofav.api.assets import router as assets_router
from cryptofav.api.favorites import router as favorites_router
from cryptofav.api.health import router as health_router
from cryptofav.config.settings import get_settings
from cryptofav.db.bootstrap import ensure_db_primitives
from cryptofav.errors import register_error_handlers
from cryptofav.logging_config import configure_logging

logger = logging.getLogger("cryptofav.main")


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(title="Crypto Favorites API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(assets_router)
    app.include_router(favorites_router)

    @app.on_event("startup")
    async def on_startup() -> None:
        # Tables + unique/ordering indexes
        await ensure_db_primitives()
        logger.info("startup complete | db=%s", settings.DATABASE_URL)

    return app


app = create_app()

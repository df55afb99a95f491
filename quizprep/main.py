import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quizprep.api.v1.api import api_router
from quizprep.core.config import Settings, get_settings
from quizprep.db.session import close_db, init_db

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application; the store handle lives on ``app.state.db`` for the app's lifetime."""

    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db = init_db(settings)
        logger.info("%s started", settings.project_name)
        try:
            yield
        finally:
            close_db(app.state.db)
            app.state.db = None
            logger.info("%s stopped", settings.project_name)

    app = FastAPI(title=settings.project_name, lifespan=lifespan)

    # CORS for frontend apps; configure origins via QUIZPREP_CORS_ORIGINS / CORS_ORIGINS env (comma-separated)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from urllib.parse import urlparse

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from session_auth.api.exception_handlers import register_exception_handlers
from session_auth.api.router import api_router
from session_auth.api.routers.auth import legacy_router
from session_auth.core.config import settings
from session_auth.core.sessions import SessionStore
from session_auth.db.base import create_db_engine, create_session_factory

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = create_db_engine(settings.database_url)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    store = SessionStore(max_age=timedelta(minutes=settings.session_max_age_minutes))
    app.state.session_store = store
    await store.start_purge_task(settings.session_purge_interval_seconds)
    logger.info("Connection pool and session store ready")
    try:
        yield
    finally:
        await store.stop_purge_task()
        store.close()
        engine.dispose()
        logger.info("Connection pool and session store shut down")


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="session-auth", lifespan=lifespan)

    if settings.frontend_url:
        parsed = urlparse(settings.frontend_url)
        origin = f"{parsed.scheme}://{parsed.netloc}"
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[origin],
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")
    app.include_router(legacy_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()

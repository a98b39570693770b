# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from jobfinder.config import settings
from jobfinder.config import build_sqlalchemy_db_url
from jobfinder.database import Base, engine
from jobfinder import models  # noqa: F401  registers tables on Base.metadata
from jobfinder.api.routes.health import router as health_router
from jobfinder.routers.jobs import router as jobs_router
from jobfinder.utils.logging import setup_logging


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        logger.info("%s %s starting (environment=%s)", settings.app_name, settings.version, settings.environment)
        yield

    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health endpoints (do not depend on API_PREFIX)
    application.include_router(health_router)
    application.include_router(jobs_router, prefix=settings.api_prefix)

    # Never auto-create tables on a shared MySQL database; sqlite is local/test only.
    db_url = build_sqlalchemy_db_url(settings)
    if db_url.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    return application


app = create_app()

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware

from stockwatch.api.errors import install_api_error_handlers
from stockwatch.api.v1.router import api_router
from stockwatch.application.container import build_connection_manager, shutdown_resources
from stockwatch.core.config import settings
from stockwatch.core.logging_config import configure_logging
from stockwatch.infrastructure.db.init_db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings.log_level)
    if settings.database_url:
        await init_db(build_connection_manager())
    else:
        logger.warning("DATABASE_URL is not set; database-backed routes will fail until it is configured")
    yield
    await shutdown_resources()


def create_app() -> FastAPI:
    application = FastAPI(title="Stockwatch API", version="0.1.0", lifespan=lifespan)
    install_api_error_handlers(application)

    application.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router, prefix="/api/v1")

    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run("stockwatch.main:app", host="0.0.0.0", port=8000, reload=True)

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .env_settings import get_env
from .log_config import setup_logging
from .routers.directory import router as directory_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    env = get_env()
    setup_logging(level=env.log_level, log_dir=env.log_dir, retention_days=env.log_retention_days)
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Directory Search", lifespan=lifespan)
    app.include_router(directory_router)
    return app


app = create_app()

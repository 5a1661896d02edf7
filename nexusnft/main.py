import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nexusnft.api import (
    assets_router,
    collections_router,
    contract_router,
    health_router,
    image_router,
    metadata_router,
    transactions_router,
    upload_router,
)
from nexusnft.config import settings
from nexusnft.db.database import init_db
from nexusnft.models.failure import KnownError, RefusalError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("nexusnft"),
    lifespan=lifespan,
)


@app.exception_handler(KnownError)
async def known_error_handler(request: Request, exc: KnownError) -> JSONResponse:
    """Render a known failure into the response envelope."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


@app.exception_handler(RefusalError)
async def refusal_handler(request: Request, exc: RefusalError) -> JSONResponse:
    """Render a refusal into the response envelope."""
    logger.info("%s %s refused: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


app.include_router(assets_router)
app.include_router(collections_router)
app.include_router(contract_router)
app.include_router(health_router)
app.include_router(image_router)
app.include_router(metadata_router)
app.include_router(transactions_router)
app.include_router(upload_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

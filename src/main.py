from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.router import router
from src.config import settings
from src.core.exceptions import AppError
from src.core.logging import setup_logging
from src.services import image_editor, session_store

setup_logging(settings.log_level, debug=settings.debug)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("app_starting", app_name=settings.app_name, model=settings.gemini_model)
    yield
    count = session_store.clear_sessions()
    image_editor.reset_client()
    logger.info("app_stopped", sessions_dropped=count)


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, status_code=exc.status_code, detail=exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [{k: v for k, v in error.items() if k not in ("url", "ctx", "input")} for error in exc.errors()]
    return JSONResponse(status_code=422, content={"detail": errors})


app.include_router(router)


def run() -> None:
    import uvicorn

    uvicorn.run("src.main:app", host=settings.host, port=settings.port, log_level=settings.log_level)

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import router as api_router
from app.core.config import settings
from app.core.errors import InvalidRequest, NotesServiceError
from app.core.logging import configure_logging, get_logger
from app.database import init_db
from app.middleware import RequestTracingMiddleware, get_request_id

configure_logging()
logger = get_logger("app.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    logger.info("Starting %s...", settings.app_title)

    await init_db()
    logger.info("Database initialisation complete")

    yield

    logger.info("Shutting down %s...", settings.app_title)


app = FastAPI(
    title=settings.app_title,
    version=settings.app_version,
    description="Study notes with model-assisted formatting, key terms and definitions",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.frontend_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestTracingMiddleware)

app.include_router(api_router)


def _validation_details(exc: RequestValidationError) -> List[Dict[str, Any]]:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        details.append(
            {
                "field": ".".join(loc),
                "message": err.get("msg", ""),
                "type": err.get("type", ""),
            }
        )
    return details


@app.exception_handler(NotesServiceError)
async def notes_service_error_handler(request: Request, exc: NotesServiceError) -> JSONResponse:
    logger.warning(
        "[%s] %s %s failed with %s: %s",
        get_request_id(request),
        request.method,
        request.url.path,
        exc.error_code.value,
        exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = InvalidRequest(details=_validation_details(exc))
    return await notes_service_error_handler(request, error)

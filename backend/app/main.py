"""
Webmail Backend API
FastAPI application for account login and flat-file email storage.

Run locally with:

    uvicorn app.main:app --reload --app-dir backend
"""

import logging
import os
from typing import List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import db
from app.auth import token_mode_enabled
from app.errors import StorageUnavailableError, WebmailError
from app.routers import accounts, attachments, emails

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Webmail API",
    description="Minimal webmail backend with inbox, outbox and trash",
    version="0.1.0",
)


def get_cors_origins() -> List[str]:
    """
    Build the list of allowed CORS origins.

    Always includes http://localhost:3000 and http://localhost:3001.
    Additional origins are read from the CORS_ORIGINS environment variable
    as a comma-separated list, e.g.:
        CORS_ORIGINS=https://mail.example.com,https://staging.mail.example.com

    Duplicates are removed while preserving order.
    """
    always_included = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]

    extra_origins: List[str] = []
    cors_env = os.getenv("CORS_ORIGINS", "").strip()
    if cors_env:
        extra_origins = [o.strip() for o in cors_env.split(",") if o.strip()]

    # Deduplicate while preserving order
    seen: set = set()
    origins: List[str] = []
    for origin in always_included + extra_origins:
        if origin not in seen:
            seen.add(origin)
            origins.append(origin)

    return origins


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WebmailError)
async def webmail_error_handler(request: Request, exc: WebmailError) -> JSONResponse:
    """Report domain errors as ``{"error": message}`` with their status code."""
    logger.info(
        f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}"
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report unparseable or wrongly typed request data as a 400.

    A body that is not valid JSON or carries a non-string field is treated
    like a missing field.
    """
    error_types = [e["type"] for e in exc.errors()]
    logger.info(f"{request.method} {request.url.path} -> 400: {error_types}")
    return JSONResponse(status_code=400, content={"error": "Missing fields"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes and wrong methods keep the ``{"error": message}`` shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


# Include routers
app.include_router(accounts.router, tags=["accounts"])
app.include_router(emails.router, tags=["emails"])
app.include_router(attachments.router, tags=["attachments"])


@app.on_event("startup")
async def prepare_storage() -> None:
    """
    Create the data directory layout and log where the API can be reached.

    Example output:

        Webmail API running at http://localhost:8000
          Data dir:   /srv/webmail/data
          Token mode: off
    """
    db.ensure_storage()

    host_port = os.getenv("HOST_PORT", "8000")
    logger.info(
        "Webmail API running at http://localhost:%s\n"
        "  Data dir:   %s\n"
        "  Token mode: %s",
        host_port,
        db.DATA_DIR,
        "on" if token_mode_enabled() else "off",
    )


@app.get("/")
async def root():
    return {"message": "Webmail API", "version": "0.1.0"}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/health/storage")
async def health_storage():
    """
    Check that the data directory layout exists and is writable.

    Returns 503 if any part of it is missing or read-only.
    """
    required = [db.EMAILS_DIR, db.ATTACHMENTS_DIR]
    missing = [str(p) for p in required if not p.is_dir()]
    if not db.USERS_FILE.is_file():
        missing.append(str(db.USERS_FILE))

    if missing:
        logger.error(f"Storage health check failed, missing: {missing}")
        raise StorageUnavailableError(f"Storage not initialised: {', '.join(missing)}")

    if not all(os.access(p, os.W_OK) for p in required + [db.USERS_FILE]):
        logger.error("Storage health check failed: data directory is read-only")
        raise StorageUnavailableError("Storage is not writable")

    return {"status": "ok", "storage": "writable", "data_dir": str(db.DATA_DIR)}

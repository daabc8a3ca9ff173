# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the MediaVault API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    MediaVaultException,
    mediavault_exception_handler,
    validation_exception_handler,
)
from app.routers import files, health, metadata, search, upload

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Nothing is warmed up: store clients are created lazily on first request.
    """
    logger.info(f"Starting MediaVault API in {settings.ENVIRONMENT} mode")
    logger.info(f"Bucket: {settings.STORAGE_BUCKET}, metadata table: {settings.METADATA_TABLE}")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    yield

    logger.info("Shutting down MediaVault API")


# Create FastAPI application
app = FastAPI(
    title="MediaVault API",
    description="""
## Media Library with AI Metadata

Upload audio, video and image files; browse them alongside the tags,
transcripts, topics and extracted text produced by an external analysis
pipeline.

### How It Works

1. **Upload** - `POST /api/upload` stores the file under a timestamped key
2. **Wait** - the analysis pipeline writes a metadata document for that key
3. **Browse** - `GET /api/files` joins bucket and metadata on every call;
   status moves from `uploaded` to `processing` (after 10 minutes) or
   `completed` (once metadata exists)
4. **Inspect** - `GET /api/files/{id}` and `GET /api/metadata/{fileName}`

### Quick Start

```bash
curl -X POST http://localhost:8000/api/upload -F "file=@sunset.jpg"
curl "http://localhost:8000/api/files?fileType=image&searchText=sunset"
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Files",
            "description": "List, search, inspect, download and delete library files",
        },
        {
            "name": "Upload",
            "description": "Upload audio, video and image files",
        },
        {
            "name": "Metadata",
            "description": "AI analysis results for a file",
        },
        {
            "name": "Search",
            "description": "Proxy to the external search function",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(MediaVaultException)
async def handle_mediavault_exception(request: Request, exc: MediaVaultException):
    """Handle custom MediaVault exceptions."""
    return await mediavault_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle malformed query parameters and form fields."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
            "details": str(exc),
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(
    health.router,
    prefix="/api",
    tags=["Health"]
)

app.include_router(
    files.router,
    prefix="/api",
    tags=["Files"]
)

app.include_router(
    upload.router,
    prefix="/api",
    tags=["Upload"]
)

app.include_router(
    metadata.router,
    prefix="/api",
    tags=["Metadata"]
)

app.include_router(
    search.router,
    prefix="/api",
    tags=["Search"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "MediaVault API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }

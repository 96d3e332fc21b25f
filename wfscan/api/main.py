"""
WFScan API - FastAPI Backend

REST API around the workflow scanner:
- /api/scan                  scan a workflow JSON
- /api/check-availability    cross-check a scan result against the bucket
- /api/upload                persist workflow + scan result
- /api/run-downloader        stream the provisioning script output (SSE)
"""

import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config.settings import configure_logging, get_config
from .routers import availability, provision, scan, upload

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()
    logger.info("=" * 50)
    logger.info(f"  WFSCAN API v{__version__}")
    logger.info(f"  Bucket: {config.storage.bucket_name} ({config.storage.endpoint_url})")
    logger.info(f"  Provisioner: {config.provisioning.script_path}")
    logger.info("=" * 50)
    yield


app = FastAPI(
    title="WFScan API",
    description="ComfyUI workflow dependency scanner and provisioning trigger.",
    version=__version__,
    lifespan=lifespan,
)


# Global exception handler - logs ALL errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all exceptions and log them with full traceback."""
    error_msg = str(exc)
    tb = traceback.format_exc()

    logger.error("=" * 60)
    logger.error(f"UNHANDLED EXCEPTION: {error_msg}")
    logger.error(f"URL: {request.url}")
    logger.error(f"Method: {request.method}")
    logger.error(f"Traceback:\n{tb}")
    logger.error("=" * 60)

    return JSONResponse(
        status_code=500,
        content={"detail": error_msg},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(scan.router, prefix="/api/scan", tags=["Scan"])
app.include_router(availability.router, prefix="/api/check-availability", tags=["Availability"])
app.include_router(upload.router, prefix="/api/upload", tags=["Upload"])
app.include_router(provision.router, prefix="/api/run-downloader", tags=["Provisioning"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": f"WFScan API v{__version__}", "version": __version__}

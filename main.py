"""
FastAPI backend for WebPlot.

Receives fitted EIS spectra from an external fitting process over a
webhook, keeps them in memory and serves them to the dashboard:

- POST /webhook: ingest one fitted spectrum
- GET /latest-webhook: most recent spectrum
- GET /all-webhooks: every spectrum in arrival order
"""

import os

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, ORJSONResponse

from api.config import ServerSettings
from api.shared.logger import get_logger, setup_logging
from api.system import router as system_router
from api.webhooks import router as webhooks_router

settings = ServerSettings.from_env()

setup_logging(settings.log_level)
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="WebPlot API",
    description="Webhook receiver and query API for EIS fitting results",
    version="1.0.0",
    default_response_class=ORJSONResponse,
)


# ============= Exception Handlers for Error Logging =============


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Log HTTP exceptions and return JSON response."""
    # Only log 5xx errors (server errors)
    if exc.status_code >= 500:
        logger.error("%s failed with %d: %s", request.url.path, exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Log unexpected exceptions and return JSON response."""
    logger.error(
        "Unhandled %s on %s: %s",
        type(exc).__name__,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# CORS for the dashboard and the fitting process
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # Must be False when using allow_origins=["*"]
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include API routes
app.include_router(webhooks_router, tags=["webhooks"])
app.include_router(system_router, prefix="/api", tags=["system"])


# ============= Startup Events =============


@app.on_event("startup")
async def startup_event():
    """Log where the fitting process should send its results."""
    logger.info("WebPlot webhook server starting...")
    logger.info("Send webhooks to: http://%s:%d/webhook", settings.host, settings.port)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="WebPlot webhook server")
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help="Port to run the server on (default: 3001 or WEBPLOT_PORT env var)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=settings.host,
        help="Host to bind to (default: 127.0.0.1 or WEBPLOT_HOST env var)",
    )
    parser.add_argument(
        "--reload",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Enable auto-reload (default: off)",
    )
    args = parser.parse_args()

    # uvicorn re-imports "main", which reads its settings from the environment
    os.environ["WEBPLOT_HOST"] = args.host
    os.environ["WEBPLOT_PORT"] = str(args.port)

    uvicorn.run(
        "main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )

"""FastAPI application for the LMSR pool quote service.

The service is stateless: every request carries the pool snapshot it should be
quoted against, and nothing is committed.
"""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from lmsr_pool import __version__
from lmsr_pool.api.endpoints import APPROXIMATION_ENABLED, router
from lmsr_pool.errors import KernelError

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("LMSR_HOST", "0.0.0.0")
PORT = int(os.environ.get("LMSR_PORT", "8000"))
DEBUG = os.environ.get("LMSR_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if DEBUG else logging.INFO),
)

logger = structlog.get_logger()

app = FastAPI(
    title="LMSR Pool Quotes",
    description="Quotes for a multi-asset LMSR pool with state-dependent liquidity",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(KernelError)
async def kernel_error_handler(request: Request, exc: KernelError) -> JSONResponse:
    """Map kernel rejections to 422 with the error kind."""
    logger.info("quote_rejected", path=request.url.path, error=type(exc).__name__, detail=str(exc))
    return JSONResponse(
        status_code=422,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


@app.exception_handler(ValueError)
@app.exception_handler(IndexError)
async def invalid_argument_handler(request: Request, exc: Exception) -> JSONResponse:
    """Invalid indices, self-swaps and zero amounts are caller errors too."""
    logger.info("quote_rejected", path=request.url.path, error=type(exc).__name__, detail=str(exc))
    return JSONResponse(
        status_code=422,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__, "approximation": APPROXIMATION_ENABLED}


def run() -> None:
    """Run the quote API server.

    Configuration via environment variables:
    - LMSR_HOST: Host to bind to (default: 0.0.0.0)
    - LMSR_PORT: Port to bind to (default: 8000)
    - LMSR_DEBUG: Enable debug logging and reload mode (default: false)
    - LMSR_APPROXIMATION: Enable the balanced-regime surrogate (default: true)
    """
    uvicorn.run(
        "lmsr_pool.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()

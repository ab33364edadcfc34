"""
FastAPI application entry point for the shipping rate service.

Run with:
    python -m src.webapp.main        (host/port from config, PORT overrides)
or:
    uvicorn src.webapp.main:app --reload

Open: http://127.0.0.1:8000/docs
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.utils.config_loader import get_server_port, load_config, load_env
from src.utils.logging_config import setup_logging
from src.webapp.exceptions import AppException
from src.webapp.routes import close_carrier_client, router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    load_env()
    config = load_config()

    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file,
    )

    logger.info("Shipping rate service starting...")
    yield
    logger.info("Shipping rate service shutting down...")
    close_carrier_client()


# Initialize FastAPI app
app = FastAPI(
    title="Shipping Rate Service",
    description="Lettermail and Canada Post parcel rates, presented in USD",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render application errors as {"error": ..., "code": ...}."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are client errors like any other validation failure."""
    logger.info(f"Invalid request body for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request",
            "code": "VALIDATION_ERROR",
            "details": {"errors": jsonable_errors(exc)},
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


@app.middleware("http")
async def error_handling_middleware(request: Request, call_next):
    """Global error handling middleware."""
    start_time = time.time()
    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.exception(f"Unhandled error processing {request.url.path}: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "details": str(e),
            },
            headers={"X-Process-Time": str(process_time)},
        )


@app.get("/health/simple")
async def simple_health_check() -> dict[str, Any]:
    """Simple health check for load balancers."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health/ready")
async def readiness_check() -> dict[str, Any]:
    """Readiness check - verifies app can serve requests."""
    return {
        "status": "ready",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=load_config().server.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routes
app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    load_env()
    config = load_config()
    uvicorn.run(
        "src.webapp.main:app",
        host=config.server.host,
        port=get_server_port(config),
        reload=config.server.reload,
    )

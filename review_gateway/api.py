"""
FastAPI application for the AI review gateway.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import Settings
from .logger import get_logger
from .models import Entity
from .reviewer import review_merge
from .schema import EXPECTED_FORMAT, validate_review_request

SERVICE_NAME = "ai-review-gateway"

AVAILABLE_ENDPOINTS = [
    "GET /health - Health check",
    "POST /review - Entity resolution review",
]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _invalid_request(errors) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": EXPECTED_FORMAT, "details": errors})


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    get_logger().log_metrics_summary()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the gateway application.

    Args:
        settings: Runtime settings (default: .env plus environment variables)

    Returns:
        FastAPI app serving /health and /review
    """
    if settings is None:
        settings = Settings.default()
    get_logger(level=settings.log_level, log_dir=settings.log_dir)

    app = FastAPI(
        title="AI Review Gateway",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
    )
    app.state.settings = settings

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        """Answer preflight requests and add CORS headers to every response."""
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)
        response = await call_next(request)
        for key, value in CORS_HEADERS.items():
            response.headers[key] = value
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown paths and unsupported methods both read as "not found"
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content={"error": "Not found", "availableEndpoints": AVAILABLE_ENDPOINTS},
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok", "service": SERVICE_NAME, "timestamp": _utc_timestamp()}

    @app.post("/review")
    async def review(request: Request):
        """
        Decide whether two entity records are the same entity.

        Returns:
            decision plus input, output and total token counts
        """
        logger = get_logger()
        try:
            body = await request.json()
        except ValueError:
            logger.warning("Rejected review request with unparseable body")
            return _invalid_request(["Request body must be valid JSON"])

        errors = validate_review_request(body)
        if errors:
            logger.warning("Rejected invalid review request", errors=errors)
            return _invalid_request(errors)

        try:
            result = await run_in_threadpool(
                review_merge,
                settings.api_key,
                settings.model,
                Entity.from_dict(body["entity1"]),
                Entity.from_dict(body["entity2"]),
                body["similarity"],
                api_url=settings.api_url,
            )
        except Exception as e:
            logger.error("Error processing review", error_type=type(e).__name__, error=str(e))
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "message": str(e) or type(e).__name__,
                },
            )

        return result.to_dict()

    return app


app = create_app()

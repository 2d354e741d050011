import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from api.router import limiter, router
from config import settings
from models.responses import ErrorDetail, ErrorResponse
from services.errors import (
    CatalogValidationError,
    ConfigurationError,
    EngineError,
    RateLimitedError,
    ResponseParseError,
    ServiceTimeoutError,
    UpstreamServiceError,
)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[EngineError], int] = {
    ConfigurationError: 500,
    CatalogValidationError: 503,
    ResponseParseError: 502,
    RateLimitedError: 429,
    ServiceTimeoutError: 504,
    UpstreamServiceError: 502,
}

app = FastAPI(
    title="Career Compass API",
    description="Career recommendations from a resume profile and questionnaire",
    version="1.0.0",
)
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, code: str, message: str, headers: dict | None = None):
    body = ErrorResponse(error=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    status_code = ERROR_STATUS.get(type(exc), 500)
    if status_code >= 500:
        logger.error("Matching failed with %s: %s", type(exc).__name__, exc)
    else:
        logger.warning("Matching failed with %s: %s", type(exc).__name__, exc)

    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after)}
    return _error_response(status_code, exc.code, exc.user_message, headers)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return _error_response(
        429,
        "RATE_LIMITED",
        f"Too many requests ({exc.detail}). Please slow down.",
        headers={"Retry-After": "60"},
    )


app.include_router(router)

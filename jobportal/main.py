"""
Job Portal authentication backend.

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobportal.api.errors import AuthHTTPException
from jobportal.api.middleware.rate_limit import RateLimitMiddleware
from jobportal.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from jobportal.api.v1 import router as api_router
from jobportal.config import get_settings
from jobportal.database import close_db, init_db
from jobportal.kernel.identity.errors import AuthErrorKind
from jobportal.logging_config import configure_logging, get_logger
from jobportal.schemas.common import ErrorResponse, HealthResponse

settings = get_settings()
logger = get_logger(__name__)

# Error kind for HTTP errors raised outside the auth service (unknown route etc.)
_KIND_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: AuthErrorKind.VALIDATION_FAILED.value,
    status.HTTP_401_UNAUTHORIZED: AuthErrorKind.INVALID_SIGNATURE.value,
    status.HTTP_404_NOT_FOUND: AuthErrorKind.NOT_FOUND.value,
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_429_TOO_MANY_REQUESTS: "rate_limited",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    if not settings.email_configured:
        logger.warning("SMTP_HOST not set; emails will not be delivered")
    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    Job Portal authentication API

    ## Features

    - **Registration**: accounts start unverified; a 6-digit code is emailed
    - **Email verification**: codes expire after a few minutes and can be resent
    - **Login**: signed session tokens for verified accounts
    - **Password reset**: single-use emailed links
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# add_middleware stacks innermost-first, so the last one added is outermost.
# Request ids wrap rate limiting so 429s carry an id; CORS wraps everything.
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _cors_headers(request: Request) -> Dict[str, str]:
    """CORS headers for error responses produced outside the CORS middleware."""
    origin = request.headers.get("origin") or ""
    if origin not in settings.cors_origins:
        return {}
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Credentials": "true",
    }


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    error: str,
    *,
    field: Optional[str] = None,
    errors: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    body = ErrorResponse(
        message=message,
        error=error,
        field=field,
        errors=errors or None,
        request_id=request_id,
    )
    response_headers = _cors_headers(request)
    response_headers.update(headers or {})
    if request_id:
        response_headers[REQUEST_ID_HEADER] = request_id
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=response_headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors in the standard envelope."""
    if isinstance(exc, AuthHTTPException):
        return _error_response(
            request,
            exc.status_code,
            exc.error.message,
            exc.error.kind.value,
            field=exc.error.field,
            errors=exc.error.field_errors,
            headers=exc.headers,
        )

    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Route {request.url.path} not found"
    else:
        message = str(exc.detail)
    error = _KIND_BY_STATUS.get(exc.status_code, "http_error")
    return _error_response(request, exc.status_code, message, error, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are reported like any other validation failure."""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error["loc"] if part != "body"]
        errors[".".join(loc) or "body"] = error["msg"]
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "Validation failed",
        AuthErrorKind.VALIDATION_FAILED.value,
        errors=errors,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Log unexpected exceptions; clients only see details in debug mode."""
    logger.exception("Unhandled exception: %s", exc)
    message = f"{type(exc).__name__}: {exc}" if settings.debug else "Server Error"
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        message,
        AuthErrorKind.UNEXPECTED.value,
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(
        status="ok",
        service=settings.service_name,
        environment=settings.environment,
        version=settings.version,
        email_configured=settings.email_configured,
    )


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.project_name,
        "version": settings.version,
        "docs": "/docs" if settings.debug else "disabled",
        "api": settings.api_prefix,
    }


app.include_router(api_router, prefix=settings.api_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "jobportal.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )

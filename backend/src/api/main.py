"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import admin, health, personal_bookmarks, public_bookmarks
from core.config import get_settings
from services.exceptions import BookmarkServiceError, UnclassifiedError

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        # HSTS: enforce HTTPS for 1 year, including subdomains
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response


app_settings = get_settings()

app = FastAPI(
    title="Bookmarks API",
    description="Personal and shared bookmarks with tags, search and administration.",
    version="0.1.0",
)


@app.exception_handler(BookmarkServiceError)
async def bookmark_error_handler(
    _request: Request, exc: BookmarkServiceError,
) -> JSONResponse:
    """Map classified service errors to their HTTP status."""
    if isinstance(exc, UnclassifiedError):
        logger.error("Unclassified error: %s", exc, exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """
    Malformed bodies and query parameters are client errors (400).

    Covers wrongly typed fields (e.g. `tags` sent as a string, `shared: null`) and
    out-of-range query values such as `limit=0`.
    """
    problems = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    logger.info(
        "Malformed request on %s %s: %s", request.method, request.url.path, problems,
    )
    return JSONResponse(
        status_code=400,
        content={"detail": "Malformed request: " + "; ".join(problems)},
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Storage failures the service layer did not classify."""
    logger.error("Storage failure: %s", exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Unknown server error"})


# Security headers middleware (runs after CORS, adds headers to responses)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Location"],
)

app.include_router(health.router)
app.include_router(personal_bookmarks.router)
app.include_router(public_bookmarks.router)
app.include_router(admin.router)

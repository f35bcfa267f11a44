from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import traceback
from flashcards.core.config import settings
from flashcards.core.database import init_db
from flashcards.core.exceptions import FlashcardsException, GatewayError

# Import models to register them with SQLModel
from flashcards import models  # noqa: F401

# Import API router
from flashcards.api.v1 import api_router
from flashcards.api.v1.endpoints.utils import error_response, map_gateway_error

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="AI Flashcards API", version="1.0.0")

_HTTP_ERROR_CODES = {
    400: "invalid_request",
    401: "unauthorized",
    404: "not_found",
    405: "invalid_request",
    409: "conflict",
}


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    message = str(first.get("msg", "Invalid request body"))
    # Messages raised from model validators come prefixed
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    fields = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "header")]
    return f"{'.'.join(fields)}: {message}" if fields else message


# Add exception handler for validation errors to log details
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors and answer with the first one."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return error_response(status.HTTP_400_BAD_REQUEST, "invalid_request", _first_validation_message(exc))


@app.exception_handler(GatewayError)
async def gateway_exception_handler(request: Request, exc: GatewayError):
    """Gateway failures that escape an endpoint, e.g. a bad gateway configuration."""
    status_code, code, message = map_gateway_error(exc)
    logger.error(f"Gateway error on {request.method} {request.url.path}: {exc.code}: {exc.message}")
    return error_response(status_code, code, message)


# Add exception handler for custom application exceptions
@app.exception_handler(FlashcardsException)
async def flashcards_exception_handler(request: Request, exc: FlashcardsException):
    """Handle custom application exceptions."""
    logger.warning(f"Application exception on {request.method} {request.url.path}: {type(exc).__name__}: {str(exc)}")
    return error_response(exc.status_code or 500, exc.code, str(exc) or "Internal server error")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = _HTTP_ERROR_CODES.get(exc.status_code, "internal_error")
    return error_response(exc.status_code, code, str(exc.detail))


# Add global exception handler for unhandled errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)

    # In development, show full error details
    if settings.is_development:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {"code": "internal_error", "message": str(exc)},
                "traceback": traceback.format_exc(),
            },
        )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "Internal server error")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    init_db()


@app.get("/")
async def root():
    return {
        "message": "AI Flashcards API",
        "status": "running",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        }
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


# Include API router
app.include_router(api_router, prefix=settings.api_v1_prefix)

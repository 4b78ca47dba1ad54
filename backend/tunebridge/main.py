import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tunebridge.api.routes import health, recommend, youtube
from tunebridge.api.routes.health import VERSION
from tunebridge.errors import TunebridgeError
from tunebridge.logging import configure_logging
from tunebridge.models.contracts import ErrorResponse

configure_logging()

logger = structlog.get_logger()

app = FastAPI(
    title="Tunebridge API",
    version=VERSION,
    docs_url="/docs",
    redoc_url=None,
)


def _error_response(request: Request, status: int, body: ErrorResponse) -> JSONResponse:
    """ErrorResponse JSON carrying the request's X-Request-ID."""
    response = JSONResponse(status_code=status, content=body.model_dump())
    response.headers["X-Request-ID"] = getattr(
        request.state, "request_id", request.headers.get("X-Request-ID", "")
    )
    return response


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Attach a request ID to every request and bind it into the structlog context."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(TunebridgeError)
async def tunebridge_exception_handler(request: Request, exc: TunebridgeError) -> JSONResponse:
    """Render pipeline errors (upstream, input, auth, config) as ErrorResponse."""
    logger.warning(
        "request_failed",
        path=request.url.path,
        status=exc.status_code,
        error=exc.error_code,
        message=exc.message,
    )
    return _error_response(
        request,
        exc.status_code,
        ErrorResponse(
            error=exc.error_code,
            message=exc.message,
            retryable=exc.retryable,
            detail=exc.details,
        ),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Return ErrorResponse JSON instead of FastAPI's default ``{"detail": [...]}``."""
    messages = []
    for err in exc.errors():
        loc = " → ".join(str(part) for part in err["loc"])
        messages.append(f"{loc}: {err['msg']}")
    return _error_response(
        request,
        422,
        ErrorResponse(error="validation_error", message="; ".join(messages), retryable=False),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return ErrorResponse JSON for anything unexpected instead of a bare 500."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return _error_response(
        request,
        500,
        ErrorResponse(
            error="internal_error",
            message="An unexpected error occurred",
            retryable=True,
        ),
    )


app.include_router(health.router)
app.include_router(youtube.router, prefix="/api/v1")
app.include_router(recommend.router, prefix="/api/v1")

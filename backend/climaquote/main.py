import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from .api import api_catalog, api_customer, api_public_quote, api_quote
from .core.config import settings
from .core.observability import setup_logging
from .database import Base, engine
from .utils.errors import QuoteEngineError
from .utils.status_logger import register_status_listeners

setup_logging()
logger = logging.getLogger(__name__)

# ORJSONResponse for every JSON payload
app = FastAPI(title="ClimaQuote API", default_response_class=ORJSONResponse)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.info("CORS origins set to: %s", settings.CORS_ORIGINS)


@app.exception_handler(QuoteEngineError)
async def quote_engine_exception_handler(request: Request, exc: QuoteEngineError):
    """Map engine errors to their HTTP status with per-field details."""
    if exc.recoverable:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    elif exc.status_code == status.HTTP_404_NOT_FOUND:
        logger.info("Not found at %s: %s", request.url.path, exc.message)
    else:
        logger.error("%s at %s: %s", type(exc).__name__, request.url.path, exc.message)
    return ORJSONResponse(
        status_code=exc.status_code,
        content={
            "detail": {
                "message": exc.message,
                "field_errors": exc.field_errors(),
                "code": exc.code,
            }
        },
    )


@app.exception_handler(IntegrityError)
@app.exception_handler(StaleDataError)
async def store_conflict_handler(request: Request, exc: Exception):
    logger.warning("Store conflict at %s: %s", request.url.path, exc)
    return ORJSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": {
                "message": "The quote was changed by another request; reload and try again",
                "field_errors": {},
                "code": "conflict",
            }
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return validation errors with details and log them for debugging.

    A missing upload gets the same ``{message, field_errors}`` shape the
    engine errors use so clients can show it next to the file input.
    """
    errors = exc.errors()
    logger.warning("Validation error at %s: %s", request.url.path, errors)

    for err in errors:
        if err.get("loc") == ("body", "file"):
            return ORJSONResponse(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                content={
                    "detail": {
                        "message": "No file provided",
                        "field_errors": {"file": "required"},
                    }
                },
            )

    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": _jsonable_errors(errors)},
    )


def _jsonable_errors(errors):  # noqa: ANN001
    # pydantic puts the raising exception object under ctx.error
    out = []
    for err in errors:
        err = dict(err)
        ctx = err.get("ctx")
        if isinstance(ctx, dict):
            err["ctx"] = {k: str(v) for k, v in ctx.items()}
        out.append(err)
    return out


api_prefix = settings.API_V1_STR  # usually "/api/v1"

app.include_router(api_catalog.router, prefix=f"{api_prefix}")
app.include_router(api_customer.router, prefix=f"{api_prefix}")
app.include_router(api_quote.router, prefix=f"{api_prefix}")
app.include_router(api_public_quote.router, prefix=f"{api_prefix}")


@app.on_event("startup")
def init_database() -> None:
    """Create tables for local SQLite runs; deployed databases use alembic."""
    Base.metadata.create_all(bind=engine)
    register_status_listeners()


@app.get("/healthz", tags=["health"])
def healthz():
    return {"status": "ok"}

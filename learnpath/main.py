import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from uuid import uuid4

from dotenv import load_dotenv


# Load .env before anything reads settings
PROJECT_DIR = Path(__file__).parent.parent
load_dotenv(PROJECT_DIR / ".env")

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from pydantic import ValidationError  # noqa: E402
from slowapi import _rate_limit_exceeded_handler  # noqa: E402
from slowapi.errors import RateLimitExceeded  # noqa: E402
from sqlalchemy.exc import OperationalError  # noqa: E402
from starlette.requests import Request  # noqa: E402

from .catalog.provider import get_catalog_snapshot  # noqa: E402
from .catalog.router import router as catalog_router  # noqa: E402
from .config.logging import setup_logging  # noqa: E402
from .config.settings import get_settings  # noqa: E402
from .documents import DocumentStoreError  # noqa: E402
from .exceptions import (  # noqa: E402
    AuthenticationRequiredError,
    MergeInProgressError,
    ResourceNotFoundError,
    ValidationError as DomainValidationError,
)
from .gamification.router import router as gamification_router  # noqa: E402
from .middleware.error_handlers import (  # noqa: E402
    ErrorCategory,
    ErrorCode,
    format_error_response,
    handle_authentication_errors,
    handle_merge_conflict_errors,
    handle_not_found_errors,
    handle_storage_errors,
    handle_validation_errors,
    log_error_context,
)
from .middleware.security import SimpleSecurityMiddleware, limiter  # noqa: E402
from .progress.router import router as progress_router  # noqa: E402
from .storage import StorageError  # noqa: E402


setup_logging(get_settings().LOG_LEVEL, sql_echo=get_settings().DATABASE_ECHO)
logger = logging.getLogger(__name__)


def _register_routers(app: FastAPI) -> None:
    """Register all application routers."""
    app.include_router(catalog_router)
    app.include_router(progress_router)
    app.include_router(gamification_router)


async def _create_document_table(attempts: int = 5) -> None:
    """Create the document table, waiting for the database to come up."""
    from .database.base import create_all_tables
    from .documents import db_models  # noqa: F401

    delay = 1.0
    for attempt in range(1, attempts + 1):
        try:
            await create_all_tables()
        except OperationalError:
            if attempt == attempts:
                logger.exception(f"Document table not created after {attempts} attempts")
                raise
            logger.warning(f"Database not reachable (attempt {attempt}/{attempts}), retrying in {delay:.0f}s")
            await asyncio.sleep(delay)
            delay *= 2
        else:
            logger.info("Document table ready")
            return


async def _dispose_engine() -> None:
    """Close pooled connections if the database was ever used."""
    from .database.engine import get_engine

    if not get_engine.cache_info().currsize:
        return
    try:
        await get_engine().dispose()
    except OperationalError as e:
        logger.warning(f"Error disposing database engine: {e}")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    settings = get_settings()

    # Fail fast on a broken catalog file
    get_catalog_snapshot()

    if settings.DOCUMENT_STORE_PROVIDER == "database":
        await _create_document_table()

    yield

    await _dispose_engine()
    logger.info("Shutdown complete")


def _register_exception_handlers(app: FastAPI) -> None:
    """Map domain and storage errors onto the JSON error envelope."""
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(ResourceNotFoundError, handle_not_found_errors)
    app.add_exception_handler(AuthenticationRequiredError, handle_authentication_errors)
    app.add_exception_handler(MergeInProgressError, handle_merge_conflict_errors)
    app.add_exception_handler(ValidationError, handle_validation_errors)
    app.add_exception_handler(DomainValidationError, handle_validation_errors)
    app.add_exception_handler(DocumentStoreError, handle_storage_errors)
    app.add_exception_handler(StorageError, handle_storage_errors)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler for unhandled errors."""
        error_id = uuid4()
        log_error_context(request, exc, error_id)

        return format_error_response(
            category=ErrorCategory.INTERNAL,
            code=ErrorCode.INTERNAL,
            detail="An unexpected error occurred",
            status_code=500,
            metadata={"error_id": str(error_id)},
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="LearnPath API",
        description="Learning catalog, watch progress and rewards",
        version="0.1.0",
        debug=settings.DEBUG,
        lifespan=lifespan if settings.ENVIRONMENT != "test" else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SimpleSecurityMiddleware)
    app.state.limiter = limiter

    _register_exception_handlers(app)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Check application health status."""
        return {"status": "healthy"}

    _register_routers(app)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)

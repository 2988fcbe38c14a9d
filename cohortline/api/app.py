"""FastAPI application factory.

Creates the query API with exception handlers, cohort routes, health and
Prometheus metrics.
"""

import sys

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cohortline import __version__
from cohortline.api.dependencies import get_settings
from cohortline.api.exceptions import CohortlineAPIError
from cohortline.api.models import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from cohortline.api.routes import register_routes
from cohortline.api.routes.health import get_metrics
from cohortline.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Cohortline API",
        description="Customer cohort classification queries",
        version=__version__,
    )

    _register_exception_handlers(app)
    register_routes(app)

    metrics_config = settings.observability.metrics
    if metrics_config.enabled:
        app.add_api_route(
            metrics_config.path,
            get_metrics,
            methods=["GET"],
            tags=["Health"],
        )

    logger.info("app_created", debug=settings.debug, metrics_enabled=metrics_config.enabled)
    return app


def _error_response(status_code: int, body: ErrorBody) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=body).model_dump(mode="json", exclude_none=True),
    )


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CohortlineAPIError)
    async def cohortline_api_error_handler(
        request: Request, exc: CohortlineAPIError
    ) -> JSONResponse:
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        details = [ErrorDetail(field=exc.field, message=exc.message)] if exc.field else None
        return _error_response(
            exc.status_code,
            ErrorBody(code=exc.error_code, message=exc.message, details=details),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("validation_error", errors=exc.errors(), path=request.url.path)

        details = [
            ErrorDetail(
                field=".".join(str(loc) for loc in error["loc"]),
                message=error["msg"],
            )
            for error in exc.errors()
        ]
        return _error_response(
            400,
            ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Request validation failed",
                details=details,
            ),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(
            500,
            ErrorBody(code=ErrorCode.INTERNAL_ERROR, message="An unexpected error occurred"),
        )


def main() -> None:
    """CLI entrypoint: serve the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    logging_config = settings.observability.logging
    setup_logging(
        level=logging_config.level,
        format=logging_config.format,
        redact_secrets=logging_config.redact_secrets,
    )

    try:
        uvicorn.run(create_app(), host=settings.api.host, port=settings.api.port)
    except Exception as e:
        logger.error("api_startup_failed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    main()

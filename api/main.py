from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from api.routes import router
from core.config import get_settings
from core.errors import (
    InvalidPlanFormatError,
    PlanEngineError,
    PlanNotFoundError,
    UnsupportedConfigurationError,
    VersionConflictError,
)
from core.logging_config import bind_log_context, monotonic_ms, new_request_id, reset_log_context, setup_logging

logger = logging.getLogger(__name__)


def _error_body(exc: PlanEngineError, **fields) -> dict:
    return {"detail": {"code": exc.code, "message": str(exc), "retryable": exc.retryable, **fields}}


async def version_conflict_handler(request: Request, exc: VersionConflictError) -> JSONResponse:
    logger.warning(
        "version_conflict",
        extra={"ctx_plan_id": exc.plan_id, "ctx_expected": exc.expected_version, "ctx_actual": exc.actual_version},
    )
    return JSONResponse(
        status_code=409,
        content=_error_body(exc, expected_version=exc.expected_version, actual_version=exc.actual_version),
    )


async def plan_not_found_handler(request: Request, exc: PlanNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=_error_body(exc))


async def invalid_plan_format_handler(request: Request, exc: InvalidPlanFormatError) -> JSONResponse:
    return JSONResponse(status_code=422, content=_error_body(exc, errors=exc.errors))


async def unsupported_configuration_handler(request: Request, exc: UnsupportedConfigurationError) -> JSONResponse:
    return JSONResponse(status_code=422, content=_error_body(exc))


def _request_fields(request: Request, status_code: int, started_ms: float) -> dict:
    return {
        "ctx_method": request.method,
        "ctx_path": request.url.path,
        "ctx_status_code": status_code,
        "ctx_duration_ms": round(monotonic_ms() - started_ms, 2),
    }


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Run Plan Engine API", version="1.0.0")
    app.add_exception_handler(VersionConflictError, version_conflict_handler)
    app.add_exception_handler(PlanNotFoundError, plan_not_found_handler)
    app.add_exception_handler(InvalidPlanFormatError, invalid_plan_format_handler)
    app.add_exception_handler(UnsupportedConfigurationError, unsupported_configuration_handler)
    app.include_router(router)

    header_name = settings.request_id_header_name or "X-Request-ID"

    @app.middleware("http")
    async def request_id_and_access_log(request: Request, call_next: Callable) -> Response:
        request_id = (request.headers.get(header_name) or "").strip() or new_request_id()
        token = bind_log_context(request_id=request_id)
        started_ms = monotonic_ms()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("http_request_error", extra=_request_fields(request, 500, started_ms))
            raise
        else:
            response.headers[header_name] = request_id
            logger.info("http_request", extra=_request_fields(request, response.status_code, started_ms))
            return response
        finally:
            reset_log_context(token)

    return app


app = create_app()

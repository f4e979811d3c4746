# app/routers/utils.py
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from depth_charts.errors import DepthChartError, Internal, ValidationError
from depth_charts.app.services.assignment import AssignmentService
from depth_charts.app.services.chart import ChartService
from depth_charts.app.services.position import PositionService
from depth_charts.app.services.recommendation import RecommendationService

logger = logging.getLogger(__name__)


def ok(data: Any = None, *, message: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return body


def _field_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        # drop the "body"/"path"/"query" prefix
        field = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc)
        errors.append({"field": field, "location": loc[0] if loc else None, "message": err.get("msg")})
    return errors


async def _domain_error(_request: Request, exc: DepthChartError) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "message": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        body["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=body)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await _domain_error(request, ValidationError(errors=_field_errors(exc)))


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return await _domain_error(request, Internal())


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DepthChartError, _domain_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(Exception, _unexpected_error)


# --- service providers (one per request, the DataBase facade is shared) ---

def chart_service() -> ChartService:
    return ChartService()


def position_service() -> PositionService:
    return PositionService()


def assignment_service() -> AssignmentService:
    return AssignmentService()


def recommendation_service() -> RecommendationService:
    return RecommendationService()

"""Labour cost analytics endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from labour_cost.api.dependencies import AppSettings, CallerRole
from labour_cost.api.schemas import (
    ErrorResponse,
    ForecastRequest,
    ForecastResponse,
    StaffCostRequest,
    StaffCostResponse,
)
from labour_cost.calculators.engine import LabourCostEngine
from labour_cost.calculators.periods import parse_month, parse_week_start

router = APIRouter(prefix="/analytics", tags=["analytics"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
}


@router.post(
    "/staff-costs",
    response_model=StaffCostResponse,
    responses=_ERROR_RESPONSES,
)
async def staff_costs(
    payload: StaffCostRequest,
    caller_role: CallerRole,
    settings: AppSettings,
    month: Annotated[str | None, Query(description="Month as YYYY-MM")] = None,
    location_id: Annotated[str | None, Query()] = None,
) -> StaffCostResponse:
    """Per-staff labour cost for a month with breakdowns and monthly variance.

    Managers see rows for employees only; totals always cover everyone.
    """
    period = parse_month(month)
    engine = LabourCostEngine(payload.payroll_config(settings), settings.engine_version)
    report = engine.staff_costs_for(
        payload.to_snapshot(),
        period,
        location_id=location_id or None,
        caller_role=caller_role,
    )
    return StaffCostResponse.from_report(report)


@router.post(
    "/weekly-forecast",
    response_model=ForecastResponse,
    responses=_ERROR_RESPONSES,
)
async def weekly_forecast(
    payload: ForecastRequest,
    caller_role: CallerRole,
    settings: AppSettings,
    week_start: Annotated[str | None, Query(description="ISO date; defaults to this Monday")] = None,
    location_id: Annotated[str | None, Query()] = None,
) -> ForecastResponse:
    """Contracted against scheduled labour cost for one week."""
    start = parse_week_start(week_start)
    engine = LabourCostEngine(payload.payroll_config(settings), settings.engine_version)
    result = engine.weekly_forecast(payload.to_snapshot(), start, location_id=location_id or None)
    return ForecastResponse.from_result(result)

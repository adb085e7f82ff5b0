"""Report endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends

from pharmapos.api.dependencies import get_reporting_service
from pharmapos.application.dto.responses import ProfitReportResponse
from pharmapos.core.services import ReportingService

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/profit", response_model=ProfitReportResponse)
async def profit_report(
    start: datetime | None = None,
    end: datetime | None = None,
    reporting: ReportingService = Depends(get_reporting_service),
) -> ProfitReportResponse:
    """Profit split into base, supplier-discount and rounding parts."""
    breakdown = await reporting.profit_report(start, end)
    return ProfitReportResponse(**breakdown.to_dict(), start=start, end=end)

"""Report router - report data and file exports"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from ...auth import require_capability
from ...database import get_db
from ...models import User
from ...services.report_csv import generate_report_csv
from ...services.report_pdf import generate_report_pdf
from ...shared.errors import DomainError
from ...shared.permissions import Capability
from .service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])

EXPORT_FORMATS = {
    "csv": (generate_report_csv, "text/csv; charset=utf-8", "csv", "CSV"),
    "pdf": (generate_report_pdf, "application/pdf", "pdf", "PDF"),
}


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    """Dependency injection for ReportService"""
    return ReportService(db)


@router.get("/data")
async def get_report_data(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    period: Optional[str] = Query(None),
    current_user: User = Depends(require_capability(Capability.EXPORT_REPORTS)),
    reports: ReportService = Depends(get_report_service),
):
    """Assembled report data as JSON"""
    return reports.assemble_report(start, end, period)


def _export(reports: ReportService, export_format: str, start, end, period) -> Response:
    renderer, media_type, extension, label = EXPORT_FORMATS[export_format]

    # Bad parameters stay client errors; only rendering failures become 500
    start_date, end_date, period = reports.validate_params(start, end, period)
    try:
        content = renderer(reports.build_report(start_date, end_date, period))
    except DomainError:
        raise
    except Exception as e:
        logger.exception(f"❌ {label} report generation failed for {start}..{end}: {e}")
        return JSONResponse(status_code=500, content={"detail": f"Failed to generate {label} report"})

    filename = f"report_{start}_{end}.{extension}"
    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache",
        },
    )


@router.get("/csv")
async def export_report_csv(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    period: Optional[str] = Query(None),
    current_user: User = Depends(require_capability(Capability.EXPORT_REPORTS)),
    reports: ReportService = Depends(get_report_service),
):
    return _export(reports, "csv", start, end, period)


@router.get("/pdf")
async def export_report_pdf(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    period: Optional[str] = Query(None),
    current_user: User = Depends(require_capability(Capability.EXPORT_REPORTS)),
    reports: ReportService = Depends(get_report_service),
):
    return _export(reports, "pdf", start, end, period)

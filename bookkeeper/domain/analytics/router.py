"""Analytics router - admin dashboards"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_capability
from ...database import get_db
from ...models import User
from ...shared.permissions import Capability
from .schemas import MonthlyAnalyticsResponse
from .service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    """Dependency injection for AnalyticsService"""
    return AnalyticsService(db)


@router.get("/month", response_model=MonthlyAnalyticsResponse)
async def get_monthly_analytics(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    current_user: User = Depends(require_capability(Capability.VIEW_ANALYTICS)),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    """Totals, unique clients and per-employee revenue for [start, end]"""
    return analytics.monthly_analytics(start, end)


@router.get("/income")
async def get_income_analytics(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    current_user: User = Depends(require_capability(Capability.VIEW_ANALYTICS)),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    return analytics.detailed_income(start, end)


@router.get("/expense")
async def get_expense_analytics(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    current_user: User = Depends(require_capability(Capability.VIEW_ANALYTICS)),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    return analytics.detailed_expense(start, end)


@router.get("/clients")
async def get_client_analytics(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    current_user: User = Depends(require_capability(Capability.VIEW_ANALYTICS)),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    return analytics.detailed_clients(start, end)


@router.get("/employees/{employee_id}")
async def get_employee_analytics(
    employee_id: int,
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    serviceId: Optional[int] = Query(None),
    current_user: User = Depends(require_capability(Capability.VIEW_ANALYTICS)),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    return analytics.employee_daily_analytics(employee_id, startDate, endDate, serviceId)

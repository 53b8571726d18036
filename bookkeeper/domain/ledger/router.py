"""Ledger router - incomes, expenses and daily earnings"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_capability
from ...database import get_db
from ...models import User
from ...shared.permissions import Capability
from .schemas import ExpenseResponse, IncomeResponse, LedgerEntryCreate
from .service import LedgerService, expense_to_dict, income_to_dict

router = APIRouter(tags=["Ledger"])


def get_ledger_service(db: Session = Depends(get_db)) -> LedgerService:
    """Dependency injection for LedgerService"""
    return LedgerService(db)


@router.get("/incomes", response_model=list[IncomeResponse])
async def get_incomes(
    date: str = Query(...),
    current_user: User = Depends(require_capability(Capability.MANAGE_LEDGER)),
    ledger: LedgerService = Depends(get_ledger_service),
):
    return ledger.list_incomes(date)


@router.post("/incomes", response_model=IncomeResponse)
async def create_income(
    data: LedgerEntryCreate,
    current_user: User = Depends(require_capability(Capability.MANAGE_LEDGER)),
    ledger: LedgerService = Depends(get_ledger_service),
):
    return income_to_dict(ledger.create_income(data))


@router.delete("/incomes/{income_id}")
async def delete_income(
    income_id: int,
    current_user: User = Depends(require_capability(Capability.MANAGE_LEDGER)),
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Delete a manual income; record incomes go away with their record"""
    return ledger.delete_income(income_id)


@router.get("/expenses", response_model=list[ExpenseResponse])
async def get_expenses(
    date: str = Query(...),
    current_user: User = Depends(require_capability(Capability.MANAGE_LEDGER)),
    ledger: LedgerService = Depends(get_ledger_service),
):
    return [expense_to_dict(e) for e in ledger.list_expenses(date)]


@router.post("/expenses", response_model=ExpenseResponse)
async def create_expense(
    data: LedgerEntryCreate,
    current_user: User = Depends(require_capability(Capability.MANAGE_LEDGER)),
    ledger: LedgerService = Depends(get_ledger_service),
):
    return expense_to_dict(ledger.create_expense(data))


@router.delete("/expenses/{expense_id}")
async def delete_expense(
    expense_id: int,
    current_user: User = Depends(require_capability(Capability.MANAGE_LEDGER)),
    ledger: LedgerService = Depends(get_ledger_service),
):
    return ledger.delete_expense(expense_id)


@router.get("/earnings/{year_month}")
async def get_earnings(
    year_month: str,
    current_user: User = Depends(require_capability(Capability.VIEW_RECORDS)),
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Income per day for the calendar view, e.g. /earnings/2025-03"""
    return ledger.earnings_by_month(year_month)

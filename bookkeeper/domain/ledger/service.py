"""Ledger service - Derived and manual incomes, expenses"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Expense, Income, Record
from ...shared.errors import ConcurrencyError, NotFoundError, ValidationError
from ...shared.validators import month_bounds, parse_date, parse_time, parse_year_month
from .repository import LedgerRepository
from .schemas import LedgerEntryCreate

logger = logging.getLogger(__name__)


def record_income_name(service_name: str, patient_count: int) -> str:
    return f"{service_name} ({patient_count} pat.)"


class LedgerService:
    """
    Keeps the income ledger in step with completed work.

    Each record produces at most one auto-generated income, sized by the
    record's full capacity (service price × record patient count), no matter
    how many completions it receives.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = LedgerRepository()

    # ==========================================================================
    # AUTO-GENERATED INCOME
    # ==========================================================================

    def ensure_record_income(self, record: Record) -> tuple[Income, bool]:
        """
        Make sure the record has its income, creating it on first call.

        Runs inside the caller's transaction and does not commit.

        Returns:
            (income, created) where created is False when it already existed

        Raises:
            ConcurrencyError: If no income is visible after the insert attempt
        """
        service = record.service
        created = self.repo.insert_record_income(
            self.db,
            date=record.date,
            time=record.time,
            name=record_income_name(service.name, record.patient_count),
            amount=service.price * record.patient_count,
            record_id=record.id,
            reminder=False,
        )

        income = self.repo.get_income_for_record(self.db, record.id)
        if income is None:
            logger.error(f"❌ Income for record {record.id} missing after insert")
            raise ConcurrencyError("Concurrent update, please retry")

        if created:
            logger.info(f"💰 Income {income.id} generated for record {record.id}: {income.amount}")
        else:
            logger.debug(f"Income for record {record.id} already exists ({income.id})")
        return income, created

    # ==========================================================================
    # INCOMES
    # ==========================================================================

    def list_incomes(self, on_date: str) -> list[dict]:
        """Incomes of a day, each with the names of employees who did the work"""
        day = parse_date(on_date)
        incomes = self.repo.get_incomes(self.db, day, day)
        names = self.repo.get_completing_employee_names(
            self.db, [i.record_id for i in incomes if i.record_id is not None]
        )
        return [income_to_dict(i, names.get(i.record_id)) for i in incomes]

    def create_income(self, data: LedgerEntryCreate) -> Income:
        income = self.repo.create_income(
            self.db,
            date=parse_date(data.date),
            time=parse_time(data.time),
            name=data.name,
            amount=data.amount,
            reminder=data.reminder,
        )
        logger.info(f"✅ Manual income {income.id} recorded: {income.amount}")
        return income

    def delete_income(self, income_id: int) -> dict:
        income = self.repo.get_income_by_id(self.db, income_id)
        if not income:
            raise NotFoundError("Income not found")
        if income.record_id is not None:
            # Removed together with its record
            raise ValidationError("Income generated from a record cannot be deleted directly")

        self.repo.delete_income(self.db, income)
        logger.info(f"🗑️ Deleted income {income_id}")
        return {"success": True}

    def earnings_by_month(self, year_month: str) -> dict[str, int]:
        """Income totals per day of a month, keyed by ISO date"""
        year, month = parse_year_month(year_month)
        start, end = month_bounds(year, month)
        return {day.isoformat(): int(total or 0) for day, total in self.repo.income_by_day(self.db, start, end)}

    # ==========================================================================
    # EXPENSES
    # ==========================================================================

    def list_expenses(self, on_date: str) -> list[Expense]:
        day = parse_date(on_date)
        return self.repo.get_expenses(self.db, day, day)

    def create_expense(self, data: LedgerEntryCreate) -> Expense:
        expense = self.repo.create_expense(
            self.db,
            date=parse_date(data.date),
            time=parse_time(data.time),
            name=data.name,
            amount=data.amount,
            reminder=data.reminder,
        )
        logger.info(f"✅ Expense {expense.id} recorded: {expense.amount}")
        return expense

    def delete_expense(self, expense_id: int) -> dict:
        expense = self.repo.get_expense_by_id(self.db, expense_id)
        if not expense:
            raise NotFoundError("Expense not found")

        self.repo.delete_expense(self.db, expense)
        logger.info(f"🗑️ Deleted expense {expense_id}")
        return {"success": True}


def income_to_dict(income: Income, employee_names: Optional[list[str]] = None) -> dict:
    return {
        "id": income.id,
        "date": income.date.isoformat(),
        "time": income.time,
        "name": income.name,
        "amount": income.amount,
        "recordId": income.record_id,
        "reminder": income.reminder,
        "employeeName": ", ".join(employee_names) if employee_names else None,
    }


def expense_to_dict(expense: Expense) -> dict:
    return {
        "id": expense.id,
        "date": expense.date.isoformat(),
        "time": expense.time,
        "name": expense.name,
        "amount": expense.amount,
        "reminder": expense.reminder,
    }

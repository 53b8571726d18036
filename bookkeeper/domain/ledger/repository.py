"""Ledger repository - Database operations for incomes and expenses"""

from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, joinedload

from ...models import Expense, Income, InventoryHistory, Record, RecordCompletion, User

# Dialects whose INSERT supports ON CONFLICT DO NOTHING
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class LedgerRepository:
    """Repository for income/expense database operations"""

    # Income Methods
    @staticmethod
    def get_income_for_record(db: Session, record_id: int) -> Optional[Income]:
        return db.query(Income).filter(Income.record_id == record_id).first()

    @staticmethod
    def insert_record_income(db: Session, **income_data) -> bool:
        """
        Insert the income generated for a record unless one already exists.

        Backed by the unique index on incomes.record_id: the insert is issued as
        INSERT ... ON CONFLICT (record_id) DO NOTHING, so concurrent callers
        cannot both create a row. Does not commit.

        Returns:
            True if this call inserted the row, False if it already existed
        """
        dialect = db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)

        if insert is None:
            # No native upsert; callers hold the record row lock, and the
            # unique index still rejects a duplicate at flush time
            if LedgerRepository.get_income_for_record(db, income_data["record_id"]):
                return False
            db.add(Income(**income_data))
            db.flush()
            return True

        stmt = insert(Income).values(**income_data).on_conflict_do_nothing(index_elements=["record_id"])
        result = db.execute(stmt)
        return result.rowcount == 1

    @staticmethod
    def get_incomes(db: Session, start: date, end: date) -> list[Income]:
        """Incomes dated within [start, end], with the source record and service loaded"""
        return (
            db.query(Income)
            .options(joinedload(Income.record).joinedload(Record.service))
            .filter(Income.date >= start, Income.date <= end)
            .order_by(Income.date, Income.time, Income.id)
            .all()
        )

    @staticmethod
    def get_income_by_id(db: Session, income_id: int) -> Optional[Income]:
        return db.query(Income).filter(Income.id == income_id).first()

    @staticmethod
    def get_completing_employee_names(db: Session, record_ids: list[int]) -> dict[int, list[str]]:
        """Map record id → names of employees who completed it, in completion order"""
        if not record_ids:
            return {}

        rows = (
            db.query(RecordCompletion.record_id, User.full_name)
            .join(User, RecordCompletion.employee_id == User.id)
            .filter(RecordCompletion.record_id.in_(record_ids))
            .order_by(RecordCompletion.id)
            .all()
        )
        names: dict[int, list[str]] = {}
        for record_id, full_name in rows:
            names.setdefault(record_id, []).append(full_name)
        return names

    @staticmethod
    def create_income(db: Session, **income_data) -> Income:
        income = Income(**income_data)
        db.add(income)
        db.commit()
        db.refresh(income)
        return income

    @staticmethod
    def delete_income(db: Session, income: Income) -> None:
        db.delete(income)
        db.commit()

    @staticmethod
    def income_by_day(db: Session, start: date, end: date) -> list[tuple[date, int]]:
        return (
            db.query(Income.date, func.sum(Income.amount))
            .filter(Income.date >= start, Income.date <= end)
            .group_by(Income.date)
            .all()
        )

    # Expense Methods
    @staticmethod
    def get_expenses(db: Session, start: date, end: date) -> list[Expense]:
        return (
            db.query(Expense)
            .filter(Expense.date >= start, Expense.date <= end)
            .order_by(Expense.date, Expense.time, Expense.id)
            .all()
        )

    @staticmethod
    def get_expense_by_id(db: Session, expense_id: int) -> Optional[Expense]:
        return db.query(Expense).filter(Expense.id == expense_id).first()

    @staticmethod
    def add_expense(db: Session, **expense_data) -> Expense:
        """Stage an expense without committing (used inside larger transactions)"""
        expense = Expense(**expense_data)
        db.add(expense)
        db.flush()
        return expense

    @staticmethod
    def create_expense(db: Session, **expense_data) -> Expense:
        expense = LedgerRepository.add_expense(db, **expense_data)
        db.commit()
        db.refresh(expense)
        return expense

    @staticmethod
    def delete_expense(db: Session, expense: Expense) -> None:
        """Delete an expense; purchase history keeps its quantity change but loses the link"""
        db.query(InventoryHistory).filter(InventoryHistory.expense_id == expense.id).update(
            {InventoryHistory.expense_id: None}, synchronize_session=False
        )
        db.delete(expense)
        db.commit()

"""Analytics repository - read-only range queries"""

from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Expense, Income, Record, RecordCompletion


class AnalyticsRepository:
    """Range queries backing analytics and reports; bounds are inclusive"""

    @staticmethod
    def sum_incomes(db: Session, start: date, end: date) -> int:
        total = db.query(func.sum(Income.amount)).filter(Income.date >= start, Income.date <= end).scalar()
        return int(total or 0)

    @staticmethod
    def sum_expenses(db: Session, start: date, end: date) -> int:
        total = db.query(func.sum(Expense.amount)).filter(Expense.date >= start, Expense.date <= end).scalar()
        return int(total or 0)

    @staticmethod
    def get_completions_in_range(db: Session, start: date, end: date) -> list[RecordCompletion]:
        """
        Completions on records dated within [start, end], oldest first,
        with record, service, client and employee loaded.
        """
        return (
            db.query(RecordCompletion)
            .join(Record, RecordCompletion.record_id == Record.id)
            .options(
                joinedload(RecordCompletion.employee),
                joinedload(RecordCompletion.record).joinedload(Record.service),
                joinedload(RecordCompletion.record).joinedload(Record.client),
            )
            .filter(Record.date >= start, Record.date <= end)
            .order_by(Record.date, RecordCompletion.id)
            .all()
        )

"""Record repository - Database operations for records and completions"""

from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Income, Record, RecordCompletion


def _with_relations(query):
    return query.options(
        joinedload(Record.client),
        joinedload(Record.service),
        selectinload(Record.completions).joinedload(RecordCompletion.employee),
    )


class RecordRepository:
    """Repository for record database operations"""

    @staticmethod
    def get_record_by_id(db: Session, record_id: int) -> Optional[Record]:
        """Get a record with client, service and completions loaded"""
        return _with_relations(db.query(Record)).filter(Record.id == record_id).first()

    @staticmethod
    def lock_record(db: Session, record_id: int) -> Optional[Record]:
        """
        Load a record with a row lock (SELECT ... FOR UPDATE) so concurrent
        completions of the same record are serialized until commit.
        SQLite ignores the lock clause and serializes writers itself.
        """
        return (
            db.query(Record)
            .filter(Record.id == record_id)
            .populate_existing()
            .with_for_update()
            .first()
        )

    @staticmethod
    def get_records(
        db: Session,
        on_date: Optional[date] = None,
        client_id: Optional[int] = None,
    ) -> list[Record]:
        query = _with_relations(db.query(Record))
        if on_date is not None:
            query = query.filter(Record.date == on_date)
        if client_id is not None:
            query = query.filter(Record.client_id == client_id)
        return query.order_by(Record.date, Record.time, Record.id).all()

    @staticmethod
    def get_records_in_range(
        db: Session, start: date, end: date, status: Optional[str] = None
    ) -> list[Record]:
        """Records dated within [start, end], bounds inclusive"""
        query = _with_relations(db.query(Record)).filter(Record.date >= start, Record.date <= end)
        if status is not None:
            query = query.filter(Record.status == status)
        return query.order_by(Record.date, Record.time, Record.id).all()

    @staticmethod
    def get_records_completed_by(
        db: Session, employee_id: int, on_date: Optional[date] = None
    ) -> list[Record]:
        """Records on which the employee has at least one completion"""
        completed_ids = select(RecordCompletion.record_id).where(
            RecordCompletion.employee_id == employee_id
        )
        query = _with_relations(db.query(Record)).filter(Record.id.in_(completed_ids))
        if on_date is not None:
            query = query.filter(Record.date == on_date)
        return query.order_by(Record.date, Record.time, Record.id).all()

    @staticmethod
    def count_by_day(db: Session, start: date, end: date) -> list[tuple[date, int]]:
        return (
            db.query(Record.date, func.count(Record.id))
            .filter(Record.date >= start, Record.date <= end)
            .group_by(Record.date)
            .all()
        )

    @staticmethod
    def create_record(db: Session, **record_data) -> Record:
        record = Record(**record_data)
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    # Completion Methods
    @staticmethod
    def add_completion(
        db: Session, record_id: int, employee_id: int, patient_count: int
    ) -> RecordCompletion:
        """Append a completion; the caller commits"""
        completion = RecordCompletion(
            record_id=record_id, employee_id=employee_id, patient_count=patient_count
        )
        db.add(completion)
        db.flush()
        return completion

    @staticmethod
    def get_completions(db: Session, record_id: int) -> list[RecordCompletion]:
        return (
            db.query(RecordCompletion)
            .options(joinedload(RecordCompletion.employee))
            .filter(RecordCompletion.record_id == record_id)
            .order_by(RecordCompletion.id)
            .all()
        )

    @staticmethod
    def get_completion_by_id(db: Session, completion_id: int) -> Optional[RecordCompletion]:
        return db.query(RecordCompletion).filter(RecordCompletion.id == completion_id).first()

    @staticmethod
    def max_completion_patients(db: Session, record_id: int) -> int:
        return (
            db.query(func.max(RecordCompletion.patient_count))
            .filter(RecordCompletion.record_id == record_id)
            .scalar()
            or 0
        )

    @staticmethod
    def get_employee_completion_rows(
        db: Session,
        employee_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
        service_id: Optional[int] = None,
    ) -> list[RecordCompletion]:
        """An employee's completions with record and service loaded, filtered by record date"""
        query = (
            db.query(RecordCompletion)
            .join(Record, RecordCompletion.record_id == Record.id)
            .options(joinedload(RecordCompletion.record).joinedload(Record.service))
            .filter(RecordCompletion.employee_id == employee_id)
        )
        if start is not None:
            query = query.filter(Record.date >= start)
        if end is not None:
            query = query.filter(Record.date <= end)
        if service_id is not None:
            query = query.filter(Record.service_id == service_id)
        return query.order_by(Record.date, Record.time, RecordCompletion.id).all()

    @staticmethod
    def delete_completion(db: Session, completion: RecordCompletion) -> None:
        db.delete(completion)
        db.commit()

    # Deletion
    @staticmethod
    def delete_records_cascade(db: Session, record_ids: list[int]) -> int:
        """
        Delete records together with their incomes and completions.
        Dependents go first so no income ever points at a missing record.
        Does not commit; returns the number of records deleted.
        """
        if not record_ids:
            return 0

        db.query(Income).filter(Income.record_id.in_(record_ids)).delete(synchronize_session=False)
        db.query(RecordCompletion).filter(RecordCompletion.record_id.in_(record_ids)).delete(
            synchronize_session=False
        )
        deleted = (
            db.query(Record).filter(Record.id.in_(record_ids)).delete(synchronize_session=False)
        )
        db.expire_all()
        return deleted

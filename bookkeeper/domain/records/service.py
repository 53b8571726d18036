"""Record service - Record lifecycle, completions and calendar views"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import (
    RECORD_STATUS_CANCELED,
    RECORD_STATUS_DONE,
    RECORD_STATUS_PENDING,
    RECORD_STATUSES,
    Client,
    Record,
    RecordCompletion,
    Service,
    User,
)
from ...shared.errors import NotFoundError, ValidationError
from ...shared.validators import (
    month_bounds,
    parse_date,
    parse_optional_date,
    parse_time,
    parse_year_month,
)
from ..ledger.service import LedgerService
from .repository import RecordRepository
from .schemas import RecordCreate, RecordUpdate

logger = logging.getLogger(__name__)

# Allowed status changes; setting the current status again is a no-op
STATUS_TRANSITIONS = {
    RECORD_STATUS_PENDING: {RECORD_STATUS_DONE, RECORD_STATUS_CANCELED},
    RECORD_STATUS_DONE: set(),
    RECORD_STATUS_CANCELED: set(),
}


class RecordService:
    """
    Service layer for the record lifecycle.

    A record is booked without an assignee and with a patient capacity.
    Any employee may complete a portion of it; every completion is bounded by
    the record's capacity, and the first one moves a pending record to done.
    Whenever a record reaches done its single income is generated in the same
    transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = RecordRepository()
        self.ledger = LedgerService(db)

    # ==========================================================================
    # QUERIES
    # ==========================================================================

    def get_record(self, record_id: int) -> Record:
        record = self.repo.get_record_by_id(self.db, record_id)
        if not record:
            raise NotFoundError("Record not found")
        return record

    def list_records(self, on_date: Optional[str] = None, client_id: Optional[int] = None) -> list[Record]:
        """Records of one client, or of one day; nothing without a filter"""
        if client_id is not None:
            return self.repo.get_records(self.db, client_id=client_id)
        if on_date:
            return self.repo.get_records(self.db, on_date=parse_date(on_date))
        return []

    def list_all_records(self, on_date: Optional[str] = None) -> list[Record]:
        return self.repo.get_records(self.db, on_date=parse_optional_date(on_date))

    def list_records_for_employee(self, employee_id: int, on_date: Optional[str] = None) -> list[Record]:
        """Records on which the employee has recorded at least one completion"""
        return self.repo.get_records_completed_by(self.db, employee_id, parse_optional_date(on_date))

    def record_counts_by_month(self, year_month: str) -> dict[str, int]:
        year, month = parse_year_month(year_month)
        start, end = month_bounds(year, month)
        return {day.isoformat(): count for day, count in self.repo.count_by_day(self.db, start, end)}

    def get_completions(self, record_id: int) -> list[RecordCompletion]:
        self.get_record(record_id)
        return self.repo.get_completions(self.db, record_id)

    def employee_completion_summary(
        self, employee_id: int, start: Optional[str] = None, end: Optional[str] = None
    ) -> dict:
        """
        Patients and revenue per service for records an employee worked on.

        Each record counts once with its full patient count, however many
        completions the employee logged on it.
        """
        rows = self.repo.get_employee_completion_rows(
            self.db,
            employee_id,
            parse_optional_date(start, "startDate"),
            parse_optional_date(end, "endDate"),
        )

        counted_records = set()
        by_service: dict[int, dict] = {}
        total_patients = 0
        for completion in rows:
            record = completion.record
            if record.id in counted_records:
                continue
            counted_records.add(record.id)

            total_patients += record.patient_count
            entry = by_service.setdefault(
                record.service_id,
                {
                    "serviceId": record.service_id,
                    "serviceName": record.service.name,
                    "patientCount": 0,
                    "revenue": 0,
                },
            )
            entry["patientCount"] += record.patient_count
            entry["revenue"] += record.service.price * record.patient_count

        return {
            "totalPatients": total_patients,
            "byService": sorted(by_service.values(), key=lambda s: s["patientCount"], reverse=True),
        }

    # ==========================================================================
    # MUTATIONS
    # ==========================================================================

    def create_record(self, data: RecordCreate) -> Record:
        """Book a record; nobody is assigned, any employee may complete it"""
        if data.serviceId is None:
            raise ValidationError("Service is required")
        if not self.db.get(Service, data.serviceId):
            raise ValidationError("Unknown service")
        if data.clientId is not None and not self.db.get(Client, data.clientId):
            raise ValidationError("Unknown client")
        if data.patientCount < 1:
            raise ValidationError("Patient count must be at least 1")

        record = self.repo.create_record(
            self.db,
            client_id=data.clientId,
            service_id=data.serviceId,
            employee_id=None,
            date=parse_date(data.date),
            time=parse_time(data.time),
            status=RECORD_STATUS_PENDING,
            reminder=data.reminder,
            patient_count=data.patientCount,
        )
        logger.info(
            f"📅 Created record {record.id} for {record.date} {record.time or ''} "
            f"(service {record.service_id}, {record.patient_count} patients)"
        )
        return self.get_record(record.id)

    def update_record(self, record_id: int, data: RecordUpdate) -> Record:
        """
        Apply a partial update.

        Status follows pending → done | canceled. Reaching done generates the
        record's income in the same transaction.

        Raises:
            NotFoundError: If the record does not exist
            ValidationError: On an illegal transition or out-of-range value
        """
        changes = data.model_dump(exclude_unset=True)

        try:
            record = self.repo.lock_record(self.db, record_id)
            if not record:
                raise NotFoundError("Record not found")

            previous_status = record.status
            schedule_changed = False

            if "serviceId" in changes:
                if changes["serviceId"] is None or not self.db.get(Service, changes["serviceId"]):
                    raise ValidationError("Unknown service")
                record.service_id = changes["serviceId"]

            if "clientId" in changes:
                client_id = changes["clientId"]
                if client_id is not None and not self.db.get(Client, client_id):
                    raise ValidationError("Unknown client")
                record.client_id = client_id

            if "date" in changes:
                new_date = parse_date(changes["date"])
                schedule_changed |= new_date != record.date
                record.date = new_date

            if "time" in changes:
                new_time = parse_time(changes["time"])
                schedule_changed |= new_time != record.time
                record.time = new_time

            if changes.get("reminder") is not None:
                record.reminder = changes["reminder"]

            if "patientCount" in changes:
                record.patient_count = self._validate_capacity(record, changes["patientCount"])

            if changes.get("status") is not None:
                self._apply_status(record, changes["status"])

            if schedule_changed:
                # A rescheduled record gets a fresh reminder
                record.notification_sent_at = None

            self.db.flush()
            if previous_status != RECORD_STATUS_DONE and record.status == RECORD_STATUS_DONE:
                # Relationship may be stale after a serviceId change
                self.db.expire(record, ["service"])
                self.ledger.ensure_record_income(record)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"✏️ Updated record {record_id}: {sorted(changes)}")
        return self.get_record(record_id)

    def complete_record(self, record_id: int, employee: User, patient_count: int) -> RecordCompletion:
        """
        Log that an employee served patient_count patients of a record.

        Appends a completion bounded by the record's capacity, moves a pending
        record to done and makes sure its income exists, all in one transaction.
        The record row stays locked until commit so concurrent completions of
        the same record run one after another.

        Raises:
            NotFoundError: If the record does not exist
            ValidationError: If the record is canceled or patient_count is out of range
        """
        try:
            record = self.repo.lock_record(self.db, record_id)
            if not record:
                raise NotFoundError("Record not found")

            if record.status == RECORD_STATUS_CANCELED:
                raise ValidationError("Cannot complete a canceled record")
            if not 1 <= patient_count <= record.patient_count:
                raise ValidationError(f"Patient count must be between 1 and {record.patient_count}")

            completion = self.repo.add_completion(self.db, record.id, employee.id, patient_count)

            if record.status == RECORD_STATUS_PENDING:
                record.status = RECORD_STATUS_DONE
                logger.info(f"✅ Record {record.id} moved to done by first completion")

            self.ledger.ensure_record_income(record)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"👩‍⚕️ Employee {employee.id} completed {patient_count}/{record.patient_count} "
            f"patients on record {record_id} (completion {completion.id})"
        )
        self.db.refresh(completion)
        return completion

    def delete_record(self, record_id: int) -> dict:
        """
        Delete a record with its completions and income.
        Holds the record row lock so a concurrent completion cannot add an
        income between the cascade's deletes.
        """
        try:
            record = self.repo.lock_record(self.db, record_id)
            if not record:
                raise NotFoundError("Record not found")
            self.repo.delete_records_cascade(self.db, [record.id])
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"🗑️ Deleted record {record_id} with its completions and income")
        return {"success": True}

    def delete_completion(self, completion_id: int) -> dict:
        completion = self.repo.get_completion_by_id(self.db, completion_id)
        if not completion:
            raise NotFoundError("Completion not found")

        record_id = completion.record_id
        self.repo.delete_completion(self.db, completion)
        logger.info(f"🗑️ Deleted completion {completion_id} of record {record_id}")
        return {"success": True}

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    def _validate_capacity(self, record: Record, patient_count: Optional[int]) -> int:
        if patient_count is None or patient_count < 1:
            raise ValidationError("Patient count must be at least 1")

        largest = self.repo.max_completion_patients(self.db, record.id)
        if patient_count < largest:
            raise ValidationError(
                f"Patient count cannot be lower than an existing completion ({largest})"
            )
        return patient_count

    def _apply_status(self, record: Record, status: str) -> None:
        if status not in RECORD_STATUSES:
            raise ValidationError(f"Invalid status: {status}")
        if status == record.status:
            return
        if status not in STATUS_TRANSITIONS[record.status]:
            logger.warning(f"⚠️ Rejected status change {record.status} → {status} on record {record.id}")
            raise ValidationError(f"Cannot change status from {record.status} to {status}")

        logger.info(f"🔄 Record {record.id}: {record.status} → {status}")
        record.status = status

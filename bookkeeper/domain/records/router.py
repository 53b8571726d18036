"""Record router - FastAPI endpoints for records and completions"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_capability
from ...database import get_db
from ...models import Record, RecordCompletion, User
from ...shared.errors import AuthorizationError
from ...shared.permissions import Capability, has_capability
from ..catalog.router import to_service_response
from ..clients.router import to_client_response
from .schemas import (
    CompletionCreate,
    CompletionResponse,
    EmployeeCompletionSummary,
    EmployeeRef,
    RecordCreate,
    RecordResponse,
    RecordUpdate,
)
from .service import RecordService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/records", tags=["Records"])
completions_router = APIRouter(tags=["Completions"])


def get_record_service(db: Session = Depends(get_db)) -> RecordService:
    """Dependency injection for RecordService"""
    return RecordService(db)


def to_completion_response(completion: RecordCompletion) -> CompletionResponse:
    employee = completion.employee
    return CompletionResponse(
        id=completion.id,
        recordId=completion.record_id,
        employeeId=completion.employee_id,
        patientCount=completion.patient_count,
        createdAt=completion.created_at,
        employee=EmployeeRef(id=employee.id, fullName=employee.full_name) if employee else None,
    )


def to_record_response(record: Record) -> RecordResponse:
    completions = list(record.completions)
    return RecordResponse(
        id=record.id,
        clientId=record.client_id,
        serviceId=record.service_id,
        employeeId=record.employee_id,
        date=record.date.isoformat(),
        time=record.time,
        status=record.status,
        reminder=record.reminder,
        patientCount=record.patient_count,
        notificationSentAt=record.notification_sent_at,
        client=to_client_response(record.client) if record.client else None,
        service=to_service_response(record.service) if record.service else None,
        completions=[to_completion_response(c) for c in completions],
        completedPatients=sum(c.patient_count for c in completions),
    )


def ensure_can_view_employee(current_user: User, employee_id: int) -> None:
    """Staff see their own work; other employees' work needs VIEW_EMPLOYEE_RECORDS"""
    if employee_id != current_user.id and not has_capability(
        current_user.role, Capability.VIEW_EMPLOYEE_RECORDS
    ):
        logger.warning(f"⚠️ User {current_user.id} denied access to employee {employee_id} records")
        raise AuthorizationError("Access denied")


# ============================================================================
# LISTINGS (static paths before /{record_id})
# ============================================================================


@router.get("", response_model=list[RecordResponse])
async def get_records(
    date: Optional[str] = Query(None),
    clientId: Optional[int] = Query(None),
    current_user: User = Depends(require_capability(Capability.VIEW_RECORDS)),
    service: RecordService = Depends(get_record_service),
):
    """Records of a day (?date=YYYY-MM-DD) or of a client (?clientId=)"""
    return [to_record_response(r) for r in service.list_records(date, clientId)]


@router.get("/all", response_model=list[RecordResponse])
async def get_all_records(
    date: Optional[str] = Query(None),
    current_user: User = Depends(require_capability(Capability.VIEW_RECORDS)),
    service: RecordService = Depends(get_record_service),
):
    return [to_record_response(r) for r in service.list_all_records(date)]


@router.get("/my", response_model=list[RecordResponse])
async def get_my_records(
    date: Optional[str] = Query(None),
    current_user: User = Depends(require_capability(Capability.VIEW_RECORDS)),
    service: RecordService = Depends(get_record_service),
):
    """Records the current user has completed work on"""
    return [to_record_response(r) for r in service.list_records_for_employee(current_user.id, date)]


@router.get("/employee/{employee_id}", response_model=list[RecordResponse])
async def get_employee_records(
    employee_id: int,
    date: Optional[str] = Query(None),
    current_user: User = Depends(require_capability(Capability.VIEW_RECORDS)),
    service: RecordService = Depends(get_record_service),
):
    ensure_can_view_employee(current_user, employee_id)
    return [to_record_response(r) for r in service.list_records_for_employee(employee_id, date)]


@router.get("/counts/{year_month}")
async def get_record_counts(
    year_month: str,
    current_user: User = Depends(require_capability(Capability.VIEW_RECORDS)),
    service: RecordService = Depends(get_record_service),
):
    """Number of records per day of a month, e.g. /records/counts/2025-03"""
    return service.record_counts_by_month(year_month)


# ============================================================================
# SINGLE RECORD
# ============================================================================


@router.post("", response_model=RecordResponse)
async def create_record(
    data: RecordCreate,
    current_user: User = Depends(require_capability(Capability.CREATE_RECORDS)),
    service: RecordService = Depends(get_record_service),
):
    return to_record_response(service.create_record(data))


@router.get("/{record_id}", response_model=RecordResponse)
async def get_record(
    record_id: int,
    current_user: User = Depends(require_capability(Capability.VIEW_RECORDS)),
    service: RecordService = Depends(get_record_service),
):
    return to_record_response(service.get_record(record_id))


@router.patch("/{record_id}", response_model=RecordResponse)
async def update_record(
    record_id: int,
    data: RecordUpdate,
    current_user: User = Depends(require_capability(Capability.EDIT_RECORDS)),
    service: RecordService = Depends(get_record_service),
):
    """Partial update; moving status to done generates the record's income"""
    return to_record_response(service.update_record(record_id, data))


@router.delete("/{record_id}")
async def delete_record(
    record_id: int,
    current_user: User = Depends(require_capability(Capability.DELETE_RECORDS)),
    service: RecordService = Depends(get_record_service),
):
    return service.delete_record(record_id)


@router.post("/{record_id}/complete", response_model=CompletionResponse)
async def complete_record(
    record_id: int,
    data: CompletionCreate,
    current_user: User = Depends(require_capability(Capability.COMPLETE_RECORDS)),
    service: RecordService = Depends(get_record_service),
):
    """Log patients served by the current user on this record"""
    return to_completion_response(service.complete_record(record_id, current_user, data.patientCount))


@router.get("/{record_id}/completions", response_model=list[CompletionResponse])
async def get_record_completions(
    record_id: int,
    current_user: User = Depends(require_capability(Capability.VIEW_RECORDS)),
    service: RecordService = Depends(get_record_service),
):
    return [to_completion_response(c) for c in service.get_completions(record_id)]


# ============================================================================
# COMPLETIONS
# ============================================================================


@completions_router.delete("/completions/{completion_id}")
async def delete_completion(
    completion_id: int,
    current_user: User = Depends(require_capability(Capability.EDIT_RECORDS)),
    service: RecordService = Depends(get_record_service),
):
    return service.delete_completion(completion_id)


@completions_router.get("/employees/{employee_id}/completions", response_model=EmployeeCompletionSummary)
async def get_employee_completions(
    employee_id: int,
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    current_user: User = Depends(require_capability(Capability.VIEW_RECORDS)),
    service: RecordService = Depends(get_record_service),
):
    """Patients served and revenue per service, each record counted once"""
    ensure_can_view_employee(current_user, employee_id)
    return service.employee_completion_summary(employee_id, startDate, endDate)

"""Record domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ..catalog.schemas import ServiceResponse
from ..clients.schemas import ClientResponse

# Range checks (patientCount >= 1, known ids, date format) happen in RecordService
# so they surface as 400 validation errors rather than schema errors.


class RecordCreate(BaseModel):
    """Schema for booking a record; no employee is assigned at creation"""

    clientId: Optional[int] = None
    serviceId: Optional[int] = None
    date: str
    time: Optional[str] = None
    reminder: bool = False
    patientCount: int = 1


class RecordUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied"""

    clientId: Optional[int] = None
    serviceId: Optional[int] = None
    date: Optional[str] = None
    time: Optional[str] = None
    status: Optional[str] = None
    reminder: Optional[bool] = None
    patientCount: Optional[int] = None


class CompletionCreate(BaseModel):
    patientCount: int = 1


class EmployeeRef(BaseModel):
    id: int
    fullName: str


class CompletionResponse(BaseModel):
    id: int
    recordId: int
    employeeId: int
    patientCount: int
    createdAt: Optional[datetime] = None
    employee: Optional[EmployeeRef] = None


class RecordResponse(BaseModel):
    id: int
    clientId: Optional[int] = None
    serviceId: int
    employeeId: Optional[int] = None
    date: str
    time: Optional[str] = None
    status: str
    reminder: bool
    patientCount: int
    notificationSentAt: Optional[datetime] = None
    client: Optional[ClientResponse] = None
    service: Optional[ServiceResponse] = None
    completions: list[CompletionResponse] = []
    completedPatients: int = 0


class ServiceCompletionSummary(BaseModel):
    serviceId: int
    serviceName: str
    patientCount: int
    revenue: int


class EmployeeCompletionSummary(BaseModel):
    totalPatients: int
    byService: list[ServiceCompletionSummary]

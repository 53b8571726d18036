"""Client router - FastAPI endpoints for client operations"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_capability
from ...database import get_db
from ...models import Client, User
from ...shared.permissions import Capability
from .schemas import ClientCreate, ClientResponse, ClientUpdate
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


def to_client_response(client: Client) -> ClientResponse:
    return ClientResponse(id=client.id, fullName=client.full_name, phone=client.phone)


@router.get("", response_model=list[ClientResponse])
async def get_clients(
    current_user: User = Depends(require_capability(Capability.VIEW_CATALOG)),
    service: ClientService = Depends(get_client_service),
):
    return [to_client_response(c) for c in service.get_clients()]


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    current_user: User = Depends(require_capability(Capability.VIEW_CATALOG)),
    service: ClientService = Depends(get_client_service),
):
    return to_client_response(service.get_client(client_id))


@router.post("", response_model=ClientResponse)
async def create_client(
    data: ClientCreate,
    current_user: User = Depends(require_capability(Capability.CREATE_CLIENTS)),
    service: ClientService = Depends(get_client_service),
):
    return to_client_response(service.create_client(data))


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    current_user: User = Depends(require_capability(Capability.EDIT_CLIENTS)),
    service: ClientService = Depends(get_client_service),
):
    return to_client_response(service.update_client(client_id, data))


@router.get("/{client_id}/records-count")
async def get_client_records_count(
    client_id: int,
    current_user: User = Depends(require_capability(Capability.DELETE_CLIENTS)),
    service: ClientService = Depends(get_client_service),
):
    """Number of records that would be removed by a cascading delete"""
    return {"count": service.get_records_count(client_id)}


@router.delete("/{client_id}")
async def delete_client(
    client_id: int,
    cascade: bool = Query(False),
    current_user: User = Depends(require_capability(Capability.DELETE_CLIENTS)),
    service: ClientService = Depends(get_client_service),
):
    """Delete a client; pass cascade=true to also remove its records"""
    return service.delete_client(client_id, cascade=cascade)

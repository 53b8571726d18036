"""Service catalog router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_capability
from ...database import get_db
from ...models import Service, User
from ...shared.permissions import Capability
from .schemas import ServiceCreate, ServiceResponse, ServiceUpdate
from .service import CatalogService

router = APIRouter(prefix="/services", tags=["Services"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


def to_service_response(service: Service) -> ServiceResponse:
    return ServiceResponse(id=service.id, name=service.name, price=service.price)


@router.get("", response_model=list[ServiceResponse])
async def get_services(
    current_user: User = Depends(require_capability(Capability.VIEW_CATALOG)),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return [to_service_response(s) for s in catalog.get_services()]


@router.post("", response_model=ServiceResponse)
async def create_service(
    data: ServiceCreate,
    current_user: User = Depends(require_capability(Capability.MANAGE_SERVICES)),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return to_service_response(catalog.create_service(data))


@router.patch("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    current_user: User = Depends(require_capability(Capability.MANAGE_SERVICES)),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return to_service_response(catalog.update_service(service_id, data))


@router.delete("/{service_id}")
async def delete_service(
    service_id: int,
    current_user: User = Depends(require_capability(Capability.MANAGE_SERVICES)),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return catalog.delete_service(service_id)

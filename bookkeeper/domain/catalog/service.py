"""Service catalog business logic"""

import logging

from sqlalchemy.orm import Session

from ...models import Service
from ...shared.errors import NotFoundError, ReferentialIntegrityError
from .repository import ServiceRepository
from .schemas import ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Priced offerings. A price change only affects incomes generated afterwards;
    existing incomes keep the amount captured when they were created.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceRepository()

    def get_services(self) -> list[Service]:
        return self.repo.get_services(self.db)

    def get_service(self, service_id: int) -> Service:
        service = self.repo.get_service_by_id(self.db, service_id)
        if not service:
            raise NotFoundError("Service not found")
        return service

    def create_service(self, data: ServiceCreate) -> Service:
        service = self.repo.create_service(self.db, name=data.name, price=data.price)
        logger.info(f"✅ Created service {service.id} '{service.name}' at {service.price}")
        return service

    def update_service(self, service_id: int, data: ServiceUpdate) -> Service:
        service = self.get_service(service_id)
        updates = {}
        if data.name is not None and data.name.strip():
            updates["name"] = data.name.strip()
        if data.price is not None:
            updates["price"] = data.price
        return self.repo.update_service(self.db, service, **updates)

    def delete_service(self, service_id: int) -> dict:
        service = self.get_service(service_id)
        if self.repo.count_records(self.db, service.id):
            logger.warning(f"⚠️ Deletion of service {service.id} blocked: referenced by records")
            raise ReferentialIntegrityError("Cannot delete a service with records")

        self.repo.delete_service(self.db, service)
        return {"success": True}

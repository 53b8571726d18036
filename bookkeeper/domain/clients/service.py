"""Client service - Business logic for client operations"""

import logging

from sqlalchemy.orm import Session

from ...models import Client
from ...shared.errors import NotFoundError, ReferentialIntegrityError
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_clients(self) -> list[Client]:
        return self.repo.get_clients(self.db)

    def get_client(self, client_id: int) -> Client:
        client = self.repo.get_client_by_id(self.db, client_id)
        if not client:
            raise NotFoundError("Client not found")
        return client

    def create_client(self, data: ClientCreate) -> Client:
        client = self.repo.create_client(self.db, full_name=data.fullName, phone=data.phone)
        logger.info(f"✅ Created client {client.id}")
        return client

    def update_client(self, client_id: int, data: ClientUpdate) -> Client:
        client = self.get_client(client_id)

        updates = {}
        if data.fullName is not None and data.fullName.strip():
            updates["full_name"] = data.fullName.strip()
        if data.phone is not None:
            updates["phone"] = data.phone

        return self.repo.update_client(self.db, client, **updates)

    def get_records_count(self, client_id: int) -> int:
        return self.repo.count_records(self.db, client_id)

    def delete_client(self, client_id: int, cascade: bool = False) -> dict:
        """
        Delete a client.
        Blocked while records reference the client unless cascade=True, in which
        case the records (and their completions and incomes) are deleted as well.
        """
        client = self.get_client(client_id)

        records_count = self.repo.count_records(self.db, client.id)
        if records_count and not cascade:
            logger.warning(f"⚠️ Deletion of client {client.id} blocked: {records_count} records")
            raise ReferentialIntegrityError("Cannot delete a client with records")

        removed = self.repo.delete_client(self.db, client, with_records=cascade)
        logger.info(f"🗑️ Deleted client {client_id} with {removed} records")
        return {"success": True}

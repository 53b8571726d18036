"""Client repository - Database operations for clients"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Client, Record
from ..records.repository import RecordRepository


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def get_clients(db: Session) -> list[Client]:
        return db.query(Client).order_by(Client.full_name).all()

    @staticmethod
    def get_client_by_id(db: Session, client_id: int) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id).first()

    @staticmethod
    def create_client(db: Session, **client_data) -> Client:
        client = Client(**client_data)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def update_client(db: Session, client: Client, **updates) -> Client:
        """Update a client with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(client, key):
                setattr(client, key, value)

        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def count_records(db: Session, client_id: int) -> int:
        return db.query(func.count(Record.id)).filter(Record.client_id == client_id).scalar() or 0

    @staticmethod
    def delete_client(db: Session, client: Client, with_records: bool = False) -> int:
        """
        Delete a client. With with_records=True the client's records, their
        completions and their incomes go in the same transaction.
        Returns the number of records removed.
        """
        removed = 0
        if with_records:
            record_ids = [r.id for r in db.query(Record.id).filter(Record.client_id == client.id)]
            removed = RecordRepository.delete_records_cascade(db, record_ids)

        db.delete(client)
        db.commit()
        return removed

"""Inventory repository - Database operations for stock items"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import InventoryHistory, InventoryItem


class InventoryRepository:
    """Repository for inventory database operations"""

    @staticmethod
    def get_items(db: Session) -> list[InventoryItem]:
        return db.query(InventoryItem).order_by(InventoryItem.name).all()

    @staticmethod
    def get_item_by_id(db: Session, item_id: int) -> Optional[InventoryItem]:
        return db.query(InventoryItem).filter(InventoryItem.id == item_id).first()

    @staticmethod
    def lock_item(db: Session, item_id: int) -> Optional[InventoryItem]:
        return (
            db.query(InventoryItem)
            .filter(InventoryItem.id == item_id)
            .populate_existing()
            .with_for_update()
            .first()
        )

    @staticmethod
    def create_item(db: Session, **item_data) -> InventoryItem:
        item = InventoryItem(**item_data)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def update_item(db: Session, item: InventoryItem, **updates) -> InventoryItem:
        for key, value in updates.items():
            if value is not None and hasattr(item, key):
                setattr(item, key, value)

        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def delete_item(db: Session, item: InventoryItem) -> None:
        # History rows go with the item (delete-orphan cascade)
        db.delete(item)
        db.commit()

    @staticmethod
    def add_history(db: Session, **history_data) -> InventoryHistory:
        """Stage a history entry; the caller commits"""
        entry = InventoryHistory(**history_data)
        db.add(entry)
        db.flush()
        return entry

    @staticmethod
    def get_history(db: Session, item_id: int) -> list[InventoryHistory]:
        return (
            db.query(InventoryHistory)
            .filter(InventoryHistory.item_id == item_id)
            .order_by(InventoryHistory.id.desc())
            .all()
        )

"""Inventory service - stock levels, adjustments and purchases"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from ...models import INVENTORY_CHANGE_MANUAL, INVENTORY_CHANGE_PURCHASE, InventoryHistory, InventoryItem
from ...shared.errors import NotFoundError, ValidationError
from ...shared.validators import parse_optional_date
from ..ledger.repository import LedgerRepository
from .repository import InventoryRepository
from .schemas import InventoryAdjust, InventoryItemCreate, InventoryItemUpdate, InventoryPurchase

logger = logging.getLogger(__name__)


class InventoryService:
    """Service layer for stock items; every quantity change leaves a history entry"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InventoryRepository()
        self.ledger_repo = LedgerRepository()

    def get_items(self) -> list[InventoryItem]:
        return self.repo.get_items(self.db)

    def get_item(self, item_id: int) -> InventoryItem:
        item = self.repo.get_item_by_id(self.db, item_id)
        if not item:
            raise NotFoundError("Inventory item not found")
        return item

    def create_item(self, data: InventoryItemCreate) -> InventoryItem:
        item = self.repo.create_item(self.db, name=data.name, quantity=data.quantity, unit=data.unit)
        logger.info(f"✅ Created inventory item {item.id} '{item.name}' ({item.quantity} {item.unit})")
        return item

    def update_item(self, item_id: int, data: InventoryItemUpdate) -> InventoryItem:
        item = self.get_item(item_id)
        updates = {}
        if data.name is not None and data.name.strip():
            updates["name"] = data.name.strip()
        if data.unit is not None and data.unit.strip():
            updates["unit"] = data.unit.strip()
        return self.repo.update_item(self.db, item, **updates)

    def delete_item(self, item_id: int) -> dict:
        item = self.get_item(item_id)
        self.repo.delete_item(self.db, item)
        logger.info(f"🗑️ Deleted inventory item {item_id}")
        return {"success": True}

    def get_history(self, item_id: int) -> list[InventoryHistory]:
        self.get_item(item_id)
        return self.repo.get_history(self.db, item_id)

    def adjust(self, item_id: int, data: InventoryAdjust) -> InventoryItem:
        """Set a counted quantity and log the signed difference"""
        if data.quantity < 0:
            raise ValidationError("Quantity must not be negative")

        try:
            item = self.repo.lock_item(self.db, item_id)
            if not item:
                raise NotFoundError("Inventory item not found")

            change = data.quantity - item.quantity
            if change:
                item.quantity = data.quantity
                self.repo.add_history(
                    self.db,
                    item_id=item.id,
                    change=change,
                    change_type=INVENTORY_CHANGE_MANUAL,
                    note=data.note,
                )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"📦 Inventory item {item_id} adjusted by {change:+d} to {data.quantity}")
        self.db.refresh(item)
        return item

    def purchase(self, item_id: int, data: InventoryPurchase) -> InventoryItem:
        """
        Buy stock: record the expense, raise the quantity and log history.
        All three happen in one transaction or not at all.
        """
        if data.quantity < 1:
            raise ValidationError("Purchase quantity must be at least 1")
        if data.pricePerUnit < 0:
            raise ValidationError("Price must not be negative")
        purchase_date = parse_optional_date(data.date) or date.today()

        try:
            item = self.repo.lock_item(self.db, item_id)
            if not item:
                raise NotFoundError("Inventory item not found")

            amount = data.quantity * data.pricePerUnit
            expense = self.ledger_repo.add_expense(
                self.db,
                date=purchase_date,
                name=f"Purchase: {item.name} ({data.quantity} {item.unit})",
                amount=amount,
                reminder=False,
            )
            item.quantity += data.quantity
            self.repo.add_history(
                self.db,
                item_id=item.id,
                change=data.quantity,
                change_type=INVENTORY_CHANGE_PURCHASE,
                expense_id=expense.id,
                note=data.note,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"🛒 Purchased {data.quantity} of item {item_id} for {amount} (expense {expense.id})")
        self.db.refresh(item)
        return item

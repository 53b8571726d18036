"""Inventory router - stock items, adjustments and purchases"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_capability
from ...database import get_db
from ...models import InventoryHistory, InventoryItem, User
from ...shared.permissions import Capability
from .schemas import (
    InventoryAdjust,
    InventoryHistoryResponse,
    InventoryItemCreate,
    InventoryItemResponse,
    InventoryItemUpdate,
    InventoryPurchase,
)
from .service import InventoryService

router = APIRouter(prefix="/inventory", tags=["Inventory"])


def get_inventory_service(db: Session = Depends(get_db)) -> InventoryService:
    """Dependency injection for InventoryService"""
    return InventoryService(db)


def to_item_response(item: InventoryItem) -> InventoryItemResponse:
    return InventoryItemResponse(id=item.id, name=item.name, quantity=item.quantity, unit=item.unit)


def to_history_response(entry: InventoryHistory) -> InventoryHistoryResponse:
    return InventoryHistoryResponse(
        id=entry.id,
        itemId=entry.item_id,
        change=entry.change,
        changeType=entry.change_type,
        expenseId=entry.expense_id,
        note=entry.note,
        createdAt=entry.created_at,
    )


@router.get("", response_model=list[InventoryItemResponse])
async def get_items(
    current_user: User = Depends(require_capability(Capability.MANAGE_INVENTORY)),
    service: InventoryService = Depends(get_inventory_service),
):
    return [to_item_response(i) for i in service.get_items()]


@router.post("", response_model=InventoryItemResponse)
async def create_item(
    data: InventoryItemCreate,
    current_user: User = Depends(require_capability(Capability.MANAGE_INVENTORY)),
    service: InventoryService = Depends(get_inventory_service),
):
    return to_item_response(service.create_item(data))


@router.get("/{item_id}", response_model=InventoryItemResponse)
async def get_item(
    item_id: int,
    current_user: User = Depends(require_capability(Capability.MANAGE_INVENTORY)),
    service: InventoryService = Depends(get_inventory_service),
):
    return to_item_response(service.get_item(item_id))


@router.patch("/{item_id}", response_model=InventoryItemResponse)
async def update_item(
    item_id: int,
    data: InventoryItemUpdate,
    current_user: User = Depends(require_capability(Capability.MANAGE_INVENTORY)),
    service: InventoryService = Depends(get_inventory_service),
):
    return to_item_response(service.update_item(item_id, data))


@router.delete("/{item_id}")
async def delete_item(
    item_id: int,
    current_user: User = Depends(require_capability(Capability.MANAGE_INVENTORY)),
    service: InventoryService = Depends(get_inventory_service),
):
    return service.delete_item(item_id)


@router.post("/{item_id}/adjust", response_model=InventoryItemResponse)
async def adjust_item(
    item_id: int,
    data: InventoryAdjust,
    current_user: User = Depends(require_capability(Capability.MANAGE_INVENTORY)),
    service: InventoryService = Depends(get_inventory_service),
):
    """Correct the stock level after a count"""
    return to_item_response(service.adjust(item_id, data))


@router.post("/{item_id}/purchase", response_model=InventoryItemResponse)
async def purchase_item(
    item_id: int,
    data: InventoryPurchase,
    current_user: User = Depends(require_capability(Capability.MANAGE_INVENTORY)),
    service: InventoryService = Depends(get_inventory_service),
):
    """Buy stock; also books the cost as an expense"""
    return to_item_response(service.purchase(item_id, data))


@router.get("/{item_id}/history", response_model=list[InventoryHistoryResponse])
async def get_item_history(
    item_id: int,
    current_user: User = Depends(require_capability(Capability.MANAGE_INVENTORY)),
    service: InventoryService = Depends(get_inventory_service),
):
    return [to_history_response(h) for h in service.get_history(item_id)]

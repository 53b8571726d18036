"""Inventory schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class InventoryItemCreate(BaseModel):
    name: str
    quantity: int = 0
    unit: str = "pcs"

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Quantity must not be negative")
        return v


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = None
    unit: Optional[str] = None


class InventoryAdjust(BaseModel):
    """Set the counted quantity; the difference is logged as a manual change"""

    quantity: int
    note: Optional[str] = None


class InventoryPurchase(BaseModel):
    quantity: int
    pricePerUnit: int
    date: Optional[str] = None
    note: Optional[str] = None


class InventoryItemResponse(BaseModel):
    id: int
    name: str
    quantity: int
    unit: str


class InventoryHistoryResponse(BaseModel):
    id: int
    itemId: int
    change: int
    changeType: str
    expenseId: Optional[int] = None
    note: Optional[str] = None
    createdAt: Optional[datetime] = None

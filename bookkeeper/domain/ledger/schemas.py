"""Ledger schemas - incomes and expenses"""

from typing import Optional

from pydantic import BaseModel, field_validator


class LedgerEntryCreate(BaseModel):
    """Manual income or expense entry"""

    date: str
    time: Optional[str] = None
    name: str
    amount: int
    reminder: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Amount must not be negative")
        return v


class IncomeResponse(BaseModel):
    id: int
    date: str
    time: Optional[str] = None
    name: str
    amount: int
    recordId: Optional[int] = None
    reminder: bool
    employeeName: Optional[str] = None


class ExpenseResponse(BaseModel):
    id: int
    date: str
    time: Optional[str] = None
    name: str
    amount: int
    reminder: bool

"""Service catalog schemas"""

from typing import Optional

from pydantic import BaseModel, field_validator


class ServiceCreate(BaseModel):
    name: str
    price: int

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Service name must not be empty")
        return v.strip()

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        if v < 0:
            raise ValueError("Price must not be negative")
        return v


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[int] = None

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        if v is not None and v < 0:
            raise ValueError("Price must not be negative")
        return v


class ServiceResponse(BaseModel):
    id: int
    name: str
    price: int

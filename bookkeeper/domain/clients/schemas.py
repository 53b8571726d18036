"""Client domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_phone


class ClientCreate(BaseModel):
    """Schema for creating a new client"""

    fullName: str
    phone: Optional[str] = None

    @field_validator("fullName")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Client name must not be empty")
        return v.strip()

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_phone(v)
        return v


class ClientUpdate(BaseModel):
    """Schema for updating an existing client"""

    fullName: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_phone(v)
        return v


class ClientResponse(BaseModel):
    """Schema for client response"""

    id: int
    fullName: str
    phone: Optional[str] = None

"""User domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.permissions import Role


def _validate_role(v):
    if v is None:
        return v
    try:
        return Role(v).value
    except ValueError as e:
        raise ValueError("Role must be one of: admin, manager, employee") from e


class UserCreate(BaseModel):
    """Schema for creating a staff account"""

    fullName: str
    login: str
    password: str
    role: Optional[str] = "employee"

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return _validate_role(v) or Role.EMPLOYEE.value

    @field_validator("login", "fullName")
    @classmethod
    def validate_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Field must not be empty")
        return v.strip()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long")
        return v


class UserUpdate(BaseModel):
    """Schema for updating login, password, name or role"""

    fullName: Optional[str] = None
    login: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return _validate_role(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if v is not None and len(v) < 6:
            raise ValueError("Password must be at least 6 characters long")
        return v


class UserResponse(BaseModel):
    """Public view of a user (never includes the password hash)"""

    id: int
    fullName: str
    login: str
    role: str


class LoginRequest(BaseModel):
    login: str
    password: str


class TokenResponse(BaseModel):
    accessToken: str
    tokenType: str = "bearer"
    user: UserResponse

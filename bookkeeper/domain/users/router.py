"""User router - FastAPI endpoints for staff accounts"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_capability
from ...database import get_db
from ...models import User
from ...shared.permissions import Capability
from .schemas import UserCreate, UserResponse, UserUpdate
from .service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db)


def to_user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, fullName=user.full_name, login=user.login, role=user.role)


@router.get("", response_model=list[UserResponse])
async def get_users(
    current_user: User = Depends(require_capability(Capability.VIEW_USERS)),
    service: UserService = Depends(get_user_service),
):
    """List all staff accounts"""
    return [to_user_response(u) for u in service.get_users()]


@router.post("", response_model=UserResponse)
async def create_user(
    data: UserCreate,
    current_user: User = Depends(require_capability(Capability.MANAGE_USERS)),
    service: UserService = Depends(get_user_service),
):
    return to_user_response(service.create_user(data))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    current_user: User = Depends(require_capability(Capability.VIEW_USERS)),
    service: UserService = Depends(get_user_service),
):
    return to_user_response(service.get_user(user_id))


@router.get("/{user_id}/records-count")
async def get_user_records_count(
    user_id: int,
    current_user: User = Depends(require_capability(Capability.MANAGE_USERS)),
    service: UserService = Depends(get_user_service),
):
    """Count of completions attributed to the user (shown before deletion)"""
    return {"count": service.get_records_count(user_id)}


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    data: UserUpdate,
    current_user: User = Depends(require_capability(Capability.MANAGE_USERS)),
    service: UserService = Depends(get_user_service),
):
    """Update login, password, name or role"""
    return to_user_response(service.update_user(user_id, data))


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    cascade: bool = Query(False),
    current_user: User = Depends(require_capability(Capability.MANAGE_USERS)),
    service: UserService = Depends(get_user_service),
):
    return service.delete_user(user_id, current_user, cascade=cascade)

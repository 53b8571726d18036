"""User service - Business logic for staff accounts"""

import logging

from sqlalchemy.orm import Session

from ...auth import hash_password
from ...models import User
from ...shared.errors import NotFoundError, ReferentialIntegrityError, ValidationError
from .repository import UserRepository
from .schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def get_users(self) -> list[User]:
        return self.repo.get_users(self.db)

    def get_user(self, user_id: int) -> User:
        user = self.repo.get_user_by_id(self.db, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def create_user(self, data: UserCreate) -> User:
        """Create a staff account with a hashed password"""
        if self.repo.get_user_by_login(self.db, data.login):
            raise ValidationError("Login is already taken")

        user = self.repo.create_user(
            self.db,
            full_name=data.fullName,
            login=data.login,
            password_hash=hash_password(data.password),
            role=data.role,
        )
        logger.info(f"✅ Created user {user.id} ({user.role})")
        return user

    def update_user(self, user_id: int, data: UserUpdate) -> User:
        user = self.get_user(user_id)

        updates = {}
        if data.login:
            existing = self.repo.get_user_by_login(self.db, data.login)
            if existing and existing.id != user.id:
                raise ValidationError("Login is already taken")
            updates["login"] = data.login
        if data.fullName:
            updates["full_name"] = data.fullName
        if data.role:
            updates["role"] = data.role
        if data.password:
            updates["password_hash"] = hash_password(data.password)

        return self.repo.update_user(self.db, user, **updates)

    def get_records_count(self, user_id: int) -> int:
        """Number of completions (work items) attributed to the user"""
        return self.repo.count_completions(self.db, user_id)

    def delete_user(self, user_id: int, current_user: User, cascade: bool = False) -> dict:
        """
        Delete a user.
        Blocked while the user has completions unless cascade=True, which removes them too.
        """
        user = self.get_user(user_id)
        if user.id == current_user.id:
            raise ValidationError("You cannot delete your own account")

        completions = self.repo.count_completions(self.db, user.id)
        if completions and not cascade:
            logger.warning(f"⚠️ Deletion of user {user.id} blocked: {completions} completions")
            raise ReferentialIntegrityError("Cannot delete an employee with completed records")

        self.repo.delete_user(self.db, user, with_completions=cascade)
        logger.info(f"🗑️ Deleted user {user_id} (cascade={cascade}, completions={completions})")
        return {"success": True}

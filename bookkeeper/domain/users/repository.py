"""User repository - Database operations for staff accounts"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import PushSubscription, RecordCompletion, User


class UserRepository:
    """Repository for user database operations"""

    @staticmethod
    def get_users(db: Session) -> list[User]:
        return db.query(User).order_by(User.full_name).all()

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_login(db: Session, login: str) -> Optional[User]:
        return db.query(User).filter(User.login == login).first()

    @staticmethod
    def create_user(db: Session, **user_data) -> User:
        user = User(**user_data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update_user(db: Session, user: User, **updates) -> User:
        """Update a user with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(user, key):
                setattr(user, key, value)

        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def count_completions(db: Session, user_id: int) -> int:
        """Number of completions attributed to the user"""
        return (
            db.query(func.count(RecordCompletion.id))
            .filter(RecordCompletion.employee_id == user_id)
            .scalar()
            or 0
        )

    @staticmethod
    def delete_user(db: Session, user: User, with_completions: bool = False) -> None:
        """Delete a user, optionally removing their completions in the same transaction"""
        if with_completions:
            db.query(RecordCompletion).filter(RecordCompletion.employee_id == user.id).delete(
                synchronize_session=False
            )
        db.query(PushSubscription).filter(PushSubscription.user_id == user.id).delete(
            synchronize_session=False
        )
        db.delete(user)
        db.commit()

"""Repository for User database operations."""

import logging
from typing import Optional
from sqlalchemy import asc
from sqlalchemy.orm import Session

from lrhflow.models.user import User, UserRole
from lrhflow.database.models import UserDB, enum_to_value

logger = logging.getLogger(__name__)


class UserRepository:
    """Users and their reporting lines."""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, *criteria) -> Optional[User]:
        user_db = self.db.query(UserDB).filter(*criteria).first()
        return user_db.to_pydantic() if user_db else None

    def get(self, user_id: str) -> Optional[User]:
        return self._find(UserDB.id == user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self._find(UserDB.email == email)

    def find_first_by_role(self, role: UserRole) -> Optional[User]:
        """Longest-standing user holding a role."""
        user_db = (
            self.db.query(UserDB)
            .filter(UserDB.role == enum_to_value(role))
            .order_by(asc(UserDB.created_at))
            .first()
        )
        return user_db.to_pydantic() if user_db else None

    def create_or_update(self, user: User) -> User:
        """Insert the user, or overwrite profile, role and supervisor if the id exists."""
        user_db = self.db.query(UserDB).filter(UserDB.id == user.id).first()
        is_new = user_db is None
        if is_new:
            user_db = UserDB.from_pydantic(user)
            self.db.add(user_db)
        else:
            user_db.email = user.email
            user_db.name = user.name
            user_db.role = enum_to_value(user.role)
            user_db.supervisor_id = user.supervisor_id
            user_db.updated_at = user.updated_at

        try:
            self.db.commit()
            self.db.refresh(user_db)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save user {user.id}: {type(e).__name__}: {str(e)}")
            raise
        logger.debug(f"{'Created' if is_new else 'Updated'} user {user.id} ({user_db.role})")
        return user_db.to_pydantic()

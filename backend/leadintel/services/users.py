"""User directory - existence and lookup of platform users."""

import uuid
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from leadintel.models.user import User


class UserDirectory(Protocol):
    def exists(self, user_id: uuid.UUID) -> bool: ...

    def display_name(self, user_id: uuid.UUID) -> str | None: ...


class SqlUserDirectory:
    """UserDirectory backed by the users table; inactive users count as missing."""

    def __init__(self, session: Session):
        self.session = session

    def _get_active(self, user_id: uuid.UUID) -> User | None:
        result = self.session.execute(
            select(User).where(User.id == user_id, User.is_active == True)  # noqa: E712
        )
        return result.scalar_one_or_none()

    def exists(self, user_id: uuid.UUID) -> bool:
        return self._get_active(user_id) is not None

    def display_name(self, user_id: uuid.UUID) -> str | None:
        user = self._get_active(user_id)
        return user.name if user else None

    def id_for_email(self, email: str) -> uuid.UUID | None:
        result = self.session.execute(
            select(User.id).where(User.email == email, User.is_active == True)  # noqa: E712
        )
        return result.scalar_one_or_none()

from __future__ import annotations
"""server/storefront/infrastructure/persistence/repositories/user_repository.py
~~~~~~~~~~~~~~~~~~~~~~~~
Repository utilisateurs (pas de commit ici).
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.infrastructure.persistence.database.models.user import User
from storefront.infrastructure.persistence.errors import NotFoundError


class UserRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_by_id(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("users", user_id)
        return user

    def get_by_tid(self, tid: int) -> User:
        user = self.db.execute(select(User).where(User.tid == tid).limit(1)).scalar_one_or_none()
        if user is None:
            raise NotFoundError("users", tid)
        return user

    def add(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user

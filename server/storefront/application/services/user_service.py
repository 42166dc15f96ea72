from __future__ import annotations
"""server/storefront/application/services/user_service.py
~~~~~~~~~~~~~~~~~~~~~~~~
Utilisateurs Telegram : upsert par identifiant externe (tid).
"""

import datetime as dt
import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from storefront.domain.enums import UserRole
from storefront.infrastructure.persistence.database.models.user import User
from storefront.infrastructure.persistence.database.session import get_sync_session
from storefront.infrastructure.persistence.errors import NotFoundError
from storefront.infrastructure.persistence.repositories.user_repository import UserRepository

log = logging.getLogger(__name__)


class UserStorage:
    def get_or_create(self, principal: Any) -> User:
        """
        Retourne l'utilisateur local du principal Telegram, en le créant au besoin
        (rôle par défaut : USER, donc sans privilège).
        `principal` expose id / first_name / last_name / username.
        """
        with get_sync_session() as session:
            repo = UserRepository(session)
            try:
                return repo.get_by_tid(principal.id)
            except NotFoundError:
                pass

            now = dt.datetime.now(dt.timezone.utc)
            user = User(
                tid=principal.id,
                first_name=principal.first_name or "",
                last_name=getattr(principal, "last_name", None),
                username=getattr(principal, "username", None),
                role=UserRole.USER,
                created_at=now,
                updated_at=now,
            )
            try:
                repo.add(user)
                session.commit()
            except IntegrityError:
                # Création concurrente du même tid : on relit la ligne gagnante.
                session.rollback()
                return repo.get_by_tid(principal.id)

            log.info("Telegram user created", extra={"user_id": user.id, "tid": principal.id})
            return user

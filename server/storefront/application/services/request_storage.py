from __future__ import annotations
"""server/storefront/application/services/request_storage.py
~~~~~~~~~~~~~~~~~~~~~~~~
Accès stockage utilisé par la synchro Telegram et les actions de statut.

Une instance par sorte de demande (commande / retour). Chaque appel ouvre sa
propre session, commit si besoin, et la referme : les handlers tournent dans
les threads du WorkerPool et ne partagent aucune session.

- `NotFoundError` remonte telle quelle (cas attendu, distinct d'une panne).
- Toute autre erreur SQLAlchemy remonte aussi : c'est à l'appelant de journaliser.
"""

from dataclasses import dataclass
from typing import Optional

from storefront.domain.enums import RequestKind
from storefront.infrastructure.notifications.templates.request_card import Author
from storefront.infrastructure.persistence.database.session import get_sync_session
from storefront.infrastructure.persistence.repositories.service_request_repository import (
    FeedbackRepository,
    OrderRepository,
)
from storefront.infrastructure.persistence.repositories.telegram_message_repository import (
    TelegramMessageRepository,
)
from storefront.infrastructure.persistence.repositories.user_repository import UserRepository


@dataclass(frozen=True)
class MessageRef:
    entity_id: int
    chat_id: int
    message_id: int


class RequestStorage:
    _REPOSITORIES = {
        RequestKind.ORDER: OrderRepository,
        RequestKind.FEEDBACK: FeedbackRepository,
    }

    def __init__(self, kind: RequestKind):
        self.kind = kind
        self._repository = self._REPOSITORIES[kind]

    def create_mapping(self, entity_id: int, chat_id: int, message_id: int) -> MessageRef:
        with get_sync_session() as session:
            TelegramMessageRepository(session, self.kind).add(
                entity_id=entity_id, chat_id=chat_id, message_id=message_id
            )
            session.commit()
        return MessageRef(entity_id=entity_id, chat_id=chat_id, message_id=message_id)

    def get_mapping(self, entity_id: int) -> MessageRef:
        with get_sync_session() as session:
            row = TelegramMessageRepository(session, self.kind).latest(entity_id)
            return MessageRef(entity_id=entity_id, chat_id=row.chat_id, message_id=row.message_id)

    def load_entity(self, entity_id: int):
        with get_sync_session() as session:
            return self._repository(session).get_by_id(entity_id)

    def save_status(self, entity) -> None:
        with get_sync_session() as session:
            self._repository(session).update_status(entity.id, entity.status, entity.updated_at)
            session.commit()

    def resolve_author(self, user_id: Optional[int]) -> Optional[Author]:
        """None pour une demande invitée ; NotFoundError si le propriétaire a disparu."""
        if user_id is None:
            return None
        with get_sync_session() as session:
            user = UserRepository(session).get_by_id(user_id)
            return Author(name=user.full_name or (user.username or ""), username=user.username)

# server/storefront/infrastructure/persistence/repositories/telegram_message_repository.py

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.domain.enums import RequestKind
from storefront.infrastructure.persistence.database.models.telegram_message import (
    FeedbackTelegramMessage,
    OrderTelegramMessage,
)
from storefront.infrastructure.persistence.errors import NotFoundError

TelegramMessage = OrderTelegramMessage | FeedbackTelegramMessage


class TelegramMessageRepository:
    """
    Repository des correspondances (demande -> message Telegram).

    - Une table par sorte de demande ; le repo choisit la sienne via `kind`.
    - add() n'empêche PAS les doublons : latest() prend la ligne au message_id max.
    - Pas de commit ici (responsabilité de l'appelant).
    """

    _MODELS = {
        RequestKind.ORDER: (OrderTelegramMessage, "order_id"),
        RequestKind.FEEDBACK: (FeedbackTelegramMessage, "feedback_id"),
    }

    def __init__(self, db: Session, kind: RequestKind) -> None:
        self.db = db
        self.kind = kind
        self.model, self._fk = self._MODELS[kind]

    def add(self, *, entity_id: int, chat_id: int, message_id: int) -> TelegramMessage:
        row = self.model(chat_id=chat_id, message_id=message_id, **{self._fk: entity_id})
        self.db.add(row)
        self.db.flush()
        return row

    def latest(self, entity_id: int) -> TelegramMessage:
        fk = getattr(self.model, self._fk)
        row = self.db.execute(
            select(self.model)
            .where(fk == entity_id)
            .order_by(self.model.message_id.desc())
            .limit(1)
        ).scalar_one_or_none()
        if row is None:
            raise NotFoundError(self.model.__tablename__, entity_id)
        return row

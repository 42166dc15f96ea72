from __future__ import annotations

"""server/storefront/infrastructure/persistence/repositories/service_request_repository.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Repositories des "demandes" (commandes et retours clients).

Principes :
- Le repo **reçoit** une Session SQLAlchemy gérée par l'appelant.
- Il ne crée ni ne ferme la session, et **ne commit pas**.
- Les lectures unitaires lèvent `NotFoundError` si la ligne n'existe pas.
"""

import datetime as dt
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.domain.enums import RequestStatus
from storefront.infrastructure.persistence.database.models.feedback import Feedback
from storefront.infrastructure.persistence.database.models.order import Order
from storefront.infrastructure.persistence.errors import NotFoundError

M = TypeVar("M", Order, Feedback)


class ServiceRequestRepository(Generic[M]):
    model: type[M]

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_by_id(self, entity_id: int) -> M:
        row = self.db.get(self.model, entity_id)
        if row is None:
            raise NotFoundError(self.model.__tablename__, entity_id)
        return row

    def get_by_uuid(self, entity_uuid: UUID) -> M:
        row = self.db.execute(
            select(self.model).where(self.model.uuid == entity_uuid).limit(1)
        ).scalar_one_or_none()
        if row is None:
            raise NotFoundError(self.model.__tablename__, str(entity_uuid))
        return row

    def add(self, row: M) -> M:
        self.db.add(row)
        self.db.flush()
        return row

    def update_status(self, entity_id: int, status: RequestStatus, updated_at: dt.datetime) -> M:
        """Applique statut + updated_at sur la ligne persistée et la retourne."""
        row = self.get_by_id(entity_id)
        row.status = status
        row.updated_at = updated_at
        self.db.flush()
        return row


class OrderRepository(ServiceRequestRepository[Order]):
    model = Order


class FeedbackRepository(ServiceRequestRepository[Feedback]):
    model = Feedback

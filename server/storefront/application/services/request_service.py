from __future__ import annotations
"""server/storefront/application/services/request_service.py
~~~~~~~~~~~~~~~~~~~~~~~~
Producteurs des évènements de demandes (commandes / retours).

Règle : on persiste ET on commit d'abord, on publie ensuite, avec un
contexte détaché. Un listener ne voit donc jamais une demande non commitée,
et l'annulation de la requête HTTP ne supprime pas la notification.
"""

import datetime as dt
import logging
from uuid import UUID

from sqlalchemy.orm import Session

from storefront.api.schemas.request import FeedbackIn, OrderIn
from storefront.core.context import RequestContext
from storefront.domain.enums import RequestKind, RequestStatus
from storefront.infrastructure.messaging.event_bus import EventBus
from storefront.infrastructure.persistence.database.models.feedback import Feedback
from storefront.infrastructure.persistence.database.models.order import Order
from storefront.infrastructure.persistence.repositories.service_request_repository import (
    FeedbackRepository,
    OrderRepository,
)

log = logging.getLogger(__name__)

_REPOSITORIES = {
    RequestKind.ORDER: OrderRepository,
    RequestKind.FEEDBACK: FeedbackRepository,
}


class RequestService:
    def __init__(self, bus: EventBus):
        self.bus = bus

    def create_order(self, db: Session, ctx: RequestContext, payload: OrderIn, *, user_id: int | None = None) -> Order:
        now = dt.datetime.now(dt.timezone.utc)
        order = Order(
            status=RequestStatus.CREATED,
            source=payload.source,
            name=payload.name,
            phone=payload.phone,
            content=payload.content,
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        OrderRepository(db).add(order)
        db.commit()
        log.info("Order created", extra={"order_id": order.id, "source": order.source.value})

        self.bus.order_created.publish(ctx.detached(), order)
        return order

    def create_feedback(
        self, db: Session, ctx: RequestContext, payload: FeedbackIn, *, user_id: int | None = None
    ) -> Feedback:
        now = dt.datetime.now(dt.timezone.utc)
        feedback = Feedback(
            status=RequestStatus.CREATED,
            type=payload.type,
            name=payload.name,
            phone=payload.phone,
            content=payload.content,
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        FeedbackRepository(db).add(feedback)
        db.commit()
        log.info("Feedback created", extra={"feedback_id": feedback.id, "type": feedback.type.value})

        self.bus.feedback_created.publish(ctx.detached(), feedback)
        return feedback

    def get(self, db: Session, kind: RequestKind, entity_uuid: UUID):
        """NotFoundError si l'uuid est inconnu."""
        return _REPOSITORIES[kind](db).get_by_uuid(entity_uuid)

    def change_status(self, db: Session, ctx: RequestContext, kind: RequestKind, entity_uuid: UUID, status: RequestStatus):
        repo = _REPOSITORIES[kind](db)
        entity = repo.get_by_uuid(entity_uuid)
        entity = repo.update_status(entity.id, status, dt.datetime.now(dt.timezone.utc))
        db.commit()
        log.info("Status changed", extra={"kind": kind.value, "entity_id": entity.id, "status": status.value})

        self.bus.changed(kind).publish(ctx.detached(), entity)
        return entity

from __future__ import annotations
"""
server/storefront/api/v1/endpoints/orders.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Commandes.

- POST  /guest/orders              : commande invitée (statut created) + OrderCreated
- GET   /orders/{uuid}             : fiche (X-API-Key)
- PATCH /orders/{uuid}/status      : changement de statut (X-API-Key) + OrderChanged

Endpoints synchrones (def) : ils font de l'I/O DB et publish() peut bloquer
quand la file du pool est pleine ; FastAPI les exécute dans son threadpool.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from storefront.api.deps import get_request_context, get_services
from storefront.api.schemas.request import OrderIn, OrderOut, StatusIn
from storefront.core.bootstrap import Services
from storefront.core.context import RequestContext
from storefront.core.security import require_admin_key
from storefront.domain.enums import RequestKind
from storefront.infrastructure.persistence.database.session import get_db
from storefront.infrastructure.persistence.errors import NotFoundError

router = APIRouter()


@router.post("/guest/orders", status_code=status.HTTP_201_CREATED, response_model=OrderOut)
def create_order(
    payload: OrderIn,
    ctx: RequestContext = Depends(get_request_context),
    services: Services = Depends(get_services),
    db: Session = Depends(get_db),
):
    return services.requests.create_order(db, ctx, payload)


@router.get("/orders/{order_uuid}", response_model=OrderOut, dependencies=[Depends(require_admin_key)])
def get_order(
    order_uuid: UUID,
    services: Services = Depends(get_services),
    db: Session = Depends(get_db),
):
    try:
        return services.requests.get(db, RequestKind.ORDER, order_uuid)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")


@router.patch("/orders/{order_uuid}/status", response_model=OrderOut, dependencies=[Depends(require_admin_key)])
def change_order_status(
    order_uuid: UUID,
    payload: StatusIn,
    ctx: RequestContext = Depends(get_request_context),
    services: Services = Depends(get_services),
    db: Session = Depends(get_db),
):
    try:
        return services.requests.change_status(db, ctx, RequestKind.ORDER, order_uuid, payload.status)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

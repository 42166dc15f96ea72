from __future__ import annotations
"""server/storefront/api/v1/endpoints/feedback.py
~~~~~~~~~~~~~~~~~~~~~~~~
Retours clients (contact manager, partenariat, feedback). Même contrat que
les commandes.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from storefront.api.deps import get_request_context, get_services
from storefront.api.schemas.request import FeedbackIn, FeedbackOut, StatusIn
from storefront.core.bootstrap import Services
from storefront.core.context import RequestContext
from storefront.core.security import require_admin_key
from storefront.domain.enums import RequestKind
from storefront.infrastructure.persistence.database.session import get_db
from storefront.infrastructure.persistence.errors import NotFoundError

router = APIRouter()


@router.post("/guest/feedback", status_code=status.HTTP_201_CREATED, response_model=FeedbackOut)
def create_feedback(
    payload: FeedbackIn,
    ctx: RequestContext = Depends(get_request_context),
    services: Services = Depends(get_services),
    db: Session = Depends(get_db),
):
    return services.requests.create_feedback(db, ctx, payload)


@router.get("/feedback/{feedback_uuid}", response_model=FeedbackOut, dependencies=[Depends(require_admin_key)])
def get_feedback(
    feedback_uuid: UUID,
    services: Services = Depends(get_services),
    db: Session = Depends(get_db),
):
    try:
        return services.requests.get(db, RequestKind.FEEDBACK, feedback_uuid)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feedback not found")


@router.patch("/feedback/{feedback_uuid}/status", response_model=FeedbackOut, dependencies=[Depends(require_admin_key)])
def change_feedback_status(
    feedback_uuid: UUID,
    payload: StatusIn,
    ctx: RequestContext = Depends(get_request_context),
    services: Services = Depends(get_services),
    db: Session = Depends(get_db),
):
    try:
        return services.requests.change_status(db, ctx, RequestKind.FEEDBACK, feedback_uuid, payload.status)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feedback not found")

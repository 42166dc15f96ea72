from __future__ import annotations
"""server/storefront/api/v1/endpoints/telegram.py
~~~~~~~~~~~~~~~~~~~~~~~~
Webhook Telegram.

Réponse immédiate {"ok": true} ; l'Update (upsert, changement de statut,
accusé de réception) est traité en tâche de fond FastAPI, HORS du
WorkerPool : le traitement publie lui-même dans le pool, et un worker
bloqué sur une file pleine ne pourrait plus la vider.
"""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, status

from storefront.api.deps import get_request_context, get_services
from storefront.api.schemas.telegram import Update
from storefront.core.bootstrap import Services
from storefront.core.context import RequestContext
from storefront.core.security import verify_telegram_secret

router = APIRouter(prefix="/telegram")


@router.post("/webhook")
def telegram_webhook(
    update: Update,
    background: BackgroundTasks,
    ctx: RequestContext = Depends(get_request_context),
    services: Services = Depends(get_services),
    secret: Optional[str] = Header(default=None, alias="X-Telegram-Bot-Api-Secret-Token"),
) -> dict:
    if services.gateway is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Telegram bot disabled")
    verify_telegram_secret(secret, services.settings.TELEGRAM_WEBHOOK_SECRET)

    background.add_task(services.dispatcher.dispatch, ctx.detached(), update)
    return {"ok": True}

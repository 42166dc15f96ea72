from __future__ import annotations
"""server/storefront/application/services/telegram_sync_service.py
~~~~~~~~~~~~~~~~~~~~~~~~
Synchronisation demandes -> chat Telegram des modérateurs.

Quatre listeners (commande/retour x créé/modifié), abonnés au démarrage :
- Created : envoie la carte de la demande puis enregistre (chat_id, message_id).
- Changed : édite la carte existante ; sans correspondance en base
  (ex: bot désactivé à la création), ne fait rien.

Les erreurs aval (DB, Bot API) remontent en `SyncError` : le WorkerPool les
journalise. Pas de retry, pas de compensation (la demande est déjà commitée).
Deux Changed rapprochés sur une même demande ne sont pas séquencés : la
dernière édition reçue par Telegram l'emporte.
"""

import logging
from typing import Callable, Dict, Optional

from storefront.core.context import RequestContext
from storefront.domain.enums import RequestKind
from storefront.infrastructure.messaging.event_bus import EventBus
from storefront.infrastructure.notifications.providers.telegram_provider import TelegramProvider
from storefront.infrastructure.notifications.templates.request_card import (
    build_keyboard,
    render_request_text,
)
from storefront.infrastructure.persistence.errors import NotFoundError

from storefront.application.services.request_storage import RequestStorage

log = logging.getLogger(__name__)


class SyncError(Exception):
    """Échec aval d'un listener (envoi, édition, persistance de la correspondance)."""


class TelegramSyncService:
    def __init__(
        self,
        gateway: Optional[TelegramProvider],
        storages: Dict[RequestKind, RequestStorage],
        *,
        chat_id: int,
        deep_link_url: str,
    ):
        self.gateway = gateway
        self.storages = storages
        self.chat_id = chat_id
        self.deep_link_url = deep_link_url

    def register(self, bus: EventBus) -> list[Callable[[], None]]:
        """Abonne les 4 listeners ; retourne les fonctions de désabonnement."""
        unsubscribers = []
        for kind in RequestKind:
            unsubscribers.append(bus.created(kind).subscribe(self.on_created))
            unsubscribers.append(bus.changed(kind).subscribe(self.on_changed))
        log.info("Telegram listeners registered", extra={"listeners": len(unsubscribers)})
        return unsubscribers

    def _render(self, entity, author) -> tuple[str, dict]:
        return render_request_text(entity, author), build_keyboard(entity, self.deep_link_url)

    def _skip(self, ctx: RequestContext, entity) -> bool:
        if self.gateway is None or entity is None:
            return True
        if ctx.is_cancelled:
            log.debug("Telegram sync skipped (context cancelled)", extra={"request_id": ctx.request_id})
            return True
        return False

    def _resolve_author(self, entity):
        try:
            return self.storages[entity.kind].resolve_author(entity.user_id)
        except Exception as exc:
            raise SyncError(f"failed to resolve {entity.kind.value} author: {exc}") from exc

    def on_created(self, ctx: RequestContext, entity) -> None:
        if self._skip(ctx, entity):
            return
        kind = entity.kind
        author = self._resolve_author(entity)
        text, markup = self._render(entity, author)

        try:
            sent = self.gateway.send_message(self.chat_id, text, markup)
        except Exception as exc:
            raise SyncError(f"failed to send {kind.value} telegram message: {exc}") from exc

        try:
            self.storages[kind].create_mapping(entity.id, sent.chat_id, sent.message_id)
        except Exception as exc:
            raise SyncError(f"failed to save {kind.value} telegram message: {exc}") from exc

        log.info(
            "Telegram message sent",
            extra={"kind": kind.value, "entity_id": entity.id, "message_id": sent.message_id},
        )

    def on_changed(self, ctx: RequestContext, entity) -> None:
        if self._skip(ctx, entity):
            return
        kind = entity.kind
        author = self._resolve_author(entity)

        try:
            ref = self.storages[kind].get_mapping(entity.id)
        except NotFoundError:
            log.debug("No telegram message to edit", extra={"kind": kind.value, "entity_id": entity.id})
            return
        except Exception as exc:
            raise SyncError(f"failed to load {kind.value} telegram message: {exc}") from exc

        text, markup = self._render(entity, author)
        try:
            self.gateway.edit_message_text(ref.chat_id, ref.message_id, text, markup)
        except Exception as exc:
            raise SyncError(f"failed to edit {kind.value} telegram message: {exc}") from exc

        log.info(
            "Telegram message edited",
            extra={"kind": kind.value, "entity_id": entity.id, "message_id": ref.message_id},
        )

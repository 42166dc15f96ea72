from __future__ import annotations
"""server/storefront/application/services/status_action_service.py
~~~~~~~~~~~~~~~~~~~~~~~~
Boutons de statut du chat des modérateurs (callback queries Telegram).

Charge utile : "{kind}_status:{id}:{statut}" (ex: "order_status:42:reviewed").

Séquence pour UNE pression de bouton :
  1) upsert du principal Telegram (rôle USER par défaut) ;
  2) contrôle du rôle (moderator / admin par défaut) ;
  3) parse -> chargement -> mise à jour statut + updated_at ;
  4) publication Changed avec un contexte détaché (la requête d'origine
     peut être annulée, la notification part quand même) ;
  5) UN SEUL accusé de réception (answerCallbackQuery), quel que soit le chemin.

Les textes d'accusé sont destinés au modérateur ; les erreurs techniques
sont journalisées, jamais renvoyées telles quelles.
"""

import datetime as dt
import logging
import re
from typing import Any, Dict, Iterable, Optional, Tuple

from storefront.core.context import RequestContext
from storefront.domain.enums import RequestKind, RequestStatus, UserRole, parse_request_status
from storefront.infrastructure.messaging.event_bus import Event
from storefront.infrastructure.notifications.providers.telegram_provider import TelegramProvider
from storefront.infrastructure.persistence.errors import NotFoundError

from storefront.application.services.request_storage import RequestStorage
from storefront.application.services.user_service import UserStorage

log = logging.getLogger(__name__)

PARSE_FAILED_TEXT = "Could not parse data"
UNAVAILABLE_TEXT = "Action unavailable to you"
UPDATE_FAILED_TEXT = "Failed to update status"
IDENTIFY_FAILED_TEXT = "Failed to identify you"

DEFAULT_ALLOWED_ROLES = frozenset({UserRole.MODERATOR, UserRole.ADMIN})

_DECIMAL_ID = re.compile(r"[+-]?[0-9]+")


class CallbackDataError(ValueError):
    """Charge utile de bouton illisible (préfixe, id ou statut)."""


def parse_status_callback(data: str, prefix: str) -> Tuple[int, RequestStatus]:
    parts = (data or "").split(":")
    if len(parts) != 3 or parts[0] != prefix:
        raise CallbackDataError(f"unexpected callback data: {data!r}")
    # int() seul accepterait espaces, "_" et chiffres non ASCII
    if not parts[1].isascii() or _DECIMAL_ID.fullmatch(parts[1]) is None:
        raise CallbackDataError(f"invalid entity id in callback data: {data!r}")
    entity_id = int(parts[1])
    try:
        status = parse_request_status(parts[2])
    except ValueError as exc:
        raise CallbackDataError(str(exc)) from None
    return entity_id, status


class StatusActionService:
    """Machine à états d'une sorte de demande : tout statut -> un des deux autres."""

    def __init__(self, kind: RequestKind, storage: RequestStorage, changed: Event):
        self.kind = kind
        self.storage = storage
        self.changed = changed

    def apply(self, ctx: RequestContext, payload: str) -> str:
        try:
            entity_id, status = parse_status_callback(payload, self.kind.callback_prefix)
        except CallbackDataError:
            log.debug("Callback data rejected", extra={"kind": self.kind.value, "data": payload})
            return PARSE_FAILED_TEXT

        try:
            entity = self.storage.load_entity(entity_id)
        except NotFoundError:
            log.debug("Callback target not found", extra={"kind": self.kind.value, "entity_id": entity_id})
            return self.kind.not_found_text
        except Exception:
            log.error(
                "Failed to load %s after telegram callback", self.kind.value,
                exc_info=True, extra={"entity_id": entity_id},
            )
            return self.kind.load_failed_text

        entity.status = status
        entity.updated_at = dt.datetime.now(dt.timezone.utc)
        try:
            self.storage.save_status(entity)
        except Exception:
            log.error(
                "Failed to update %s status from telegram callback", self.kind.value,
                exc_info=True, extra={"entity_id": entity_id, "status": status.value},
            )
            return UPDATE_FAILED_TEXT

        self.changed.publish(ctx.detached(), entity)
        log.info(
            "Status changed from telegram",
            extra={"kind": self.kind.value, "entity_id": entity_id, "status": status.value},
        )
        return f"Status: {status.label}"


class CallbackQueryHandler:
    def __init__(
        self,
        users: UserStorage,
        services: Dict[str, StatusActionService],
        gateway: Optional[TelegramProvider],
        allowed_roles: Iterable[UserRole] = DEFAULT_ALLOWED_ROLES,
    ):
        self.users = users
        self.services = services
        self.gateway = gateway
        self.allowed_roles = frozenset(allowed_roles)

    def on_action(self, ctx: RequestContext, principal: Any, payload: str) -> str:
        """Texte d'accusé pour une pression de bouton (sans l'envoyer)."""
        try:
            user = self.users.get_or_create(principal)
        except Exception:
            log.error("Failed to create user", exc_info=True, extra={"tid": getattr(principal, "id", None)})
            return IDENTIFY_FAILED_TEXT

        if user.role not in self.allowed_roles:
            log.debug("Callback denied", extra={"user_id": user.id, "role": user.role.value})
            return UNAVAILABLE_TEXT

        prefix = (payload or "").split(":", 1)[0]
        service = self.services.get(prefix)
        if service is None:
            log.debug("Unknown callback prefix", extra={"data": payload})
            return PARSE_FAILED_TEXT
        return service.apply(ctx, payload)

    def handle(self, ctx: RequestContext, callback_query: Any) -> None:
        if callback_query is None:
            return
        text = self.on_action(ctx, callback_query.from_, callback_query.data or "")
        if self.gateway is None:
            return
        try:
            self.gateway.answer_callback_query(callback_query.id, text)
        except Exception:
            log.error("Failed to answer callback query", exc_info=True, extra={"callback_id": callback_query.id})

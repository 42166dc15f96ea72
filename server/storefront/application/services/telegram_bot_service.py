from __future__ import annotations
"""server/storefront/application/services/telegram_bot_service.py
~~~~~~~~~~~~~~~~~~~~~~~~
Aiguillage des Updates Telegram reçus par le webhook.

- callback_query -> CallbackQueryHandler (boutons de statut) ;
- message        -> upsert de l'expéditeur ; en conversation privée,
                    message d'accueil avec les boutons de la mini-app.
Les autres types d'Update sont ignorés.
"""

import logging
from typing import Optional

from storefront.api.schemas.telegram import Message, Update
from storefront.core.context import RequestContext
from storefront.infrastructure.notifications.providers.telegram_provider import TelegramProvider

from storefront.application.services.status_action_service import CallbackQueryHandler
from storefront.application.services.user_service import UserStorage

log = logging.getLogger(__name__)

WELCOME_TEXT = "*Let's place an order 🎈*\n\nTap the button below to make your celebration happen\\!"
ORDER_BUTTON_TEXT = "Order a product"
PARTNERSHIP_BUTTON_TEXT = "Become a partner"


def welcome_keyboard(mini_app_url: str, partnership_url: str) -> dict:
    return {
        "inline_keyboard": [[
            {"text": ORDER_BUTTON_TEXT, "web_app": {"url": mini_app_url}},
            {"text": PARTNERSHIP_BUTTON_TEXT, "web_app": {"url": partnership_url}},
        ]]
    }


class TelegramUpdateDispatcher:
    def __init__(
        self,
        gateway: Optional[TelegramProvider],
        users: UserStorage,
        callbacks: CallbackQueryHandler,
        *,
        mini_app_url: str,
        partnership_url: str,
    ):
        self.gateway = gateway
        self.users = users
        self.callbacks = callbacks
        self.mini_app_url = mini_app_url
        self.partnership_url = partnership_url

    def dispatch(self, ctx: RequestContext, update: Update) -> None:
        if update.callback_query is not None:
            self.callbacks.handle(ctx, update.callback_query)
        elif update.message is not None:
            self.on_message(ctx, update.message)
        else:
            log.debug("Telegram update ignored", extra={"update_id": update.update_id})

    def on_message(self, ctx: RequestContext, message: Message) -> None:
        if message.from_ is None:
            return
        try:
            self.users.get_or_create(message.from_)
        except Exception:
            log.error("Failed to create user", exc_info=True, extra={"tid": message.from_.id})
            return

        if message.chat.type != "private" or self.gateway is None:
            return
        try:
            self.gateway.send_message(
                message.chat.id,
                WELCOME_TEXT,
                welcome_keyboard(self.mini_app_url, self.partnership_url),
            )
        except Exception:
            log.error("Failed to send telegram message", exc_info=True, extra={"chat_id": message.chat.id})

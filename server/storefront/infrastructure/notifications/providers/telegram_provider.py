from __future__ import annotations
"""server/storefront/infrastructure/notifications/providers/telegram_provider.py
~~~~~~~~~~~~~~~~~~~~~~~~
TelegramProvider : client minimal de la Bot API (sendMessage, editMessageText,
answerCallbackQuery, setWebhook).

Contrairement au webhook Slack, on a besoin des identifiants retournés
(chat_id, message_id) pour éditer le message plus tard : toute erreur
(réseau, HTTP, `ok: false`) lève donc `TelegramError` au lieu de renvoyer False.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

PARSE_MODE = "MarkdownV2"

_MARKDOWN_SPECIAL = re.compile(r"([_*\[\]()~`>#+\-=|{}.!\\])")


def escape_markdown(text: str) -> str:
    """Échappe les caractères réservés MarkdownV2 (texte utilisateur)."""
    return _MARKDOWN_SPECIAL.sub(r"\\\1", text or "")


class TelegramError(Exception):
    def __init__(self, method: str, description: str, error_code: Optional[int] = None):
        super().__init__(f"telegram {method} failed: {description}")
        self.method = method
        self.description = description
        self.error_code = error_code


@dataclass(frozen=True)
class SentMessage:
    chat_id: int
    message_id: int


class TelegramProvider:
    def __init__(self, token: str, *, api_url: str = "https://api.telegram.org", timeout: float = 5.0):
        if not token:
            raise ValueError("Telegram bot token must be provided")
        self.base_url = f"{api_url.rstrip('/')}/bot{token}"
        self.timeout = timeout

    def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: Optional[Dict[str, Any]] = None,
    ) -> SentMessage:
        payload: Dict[str, Any] = {"chat_id": chat_id, "text": text, "parse_mode": PARSE_MODE}
        if reply_markup:
            payload["reply_markup"] = reply_markup
        result = self._call("sendMessage", payload)
        return SentMessage(chat_id=int(result["chat"]["id"]), message_id=int(result["message_id"]))

    def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        reply_markup: Optional[Dict[str, Any]] = None,
    ) -> None:
        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "message_id": message_id,
            "text": text,
            "parse_mode": PARSE_MODE,
        }
        if reply_markup:
            payload["reply_markup"] = reply_markup
        try:
            self._call("editMessageText", payload)
        except TelegramError as exc:
            # Même contenu qu'avant (évènements Changed en double) : rien à faire.
            if "message is not modified" in exc.description:
                return
            raise

    def answer_callback_query(self, callback_query_id: str, text: str, *, show_alert: bool = False) -> None:
        self._call(
            "answerCallbackQuery",
            {"callback_query_id": callback_query_id, "text": text, "show_alert": show_alert},
        )

    def set_webhook(self, url: str, *, secret_token: Optional[str] = None) -> None:
        payload: Dict[str, Any] = {"url": url, "allowed_updates": ["message", "callback_query"]}
        if secret_token:
            payload["secret_token"] = secret_token
        self._call("setWebhook", payload)

    def _call(self, method: str, payload: Dict[str, Any]) -> Any:
        try:
            r = requests.post(
                f"{self.base_url}/{method}",
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TelegramError(method, str(exc)) from exc

        try:
            body = r.json()
        except ValueError:
            raise TelegramError(method, f"HTTP {r.status_code}: invalid JSON", r.status_code) from None

        if r.status_code != 200 or not body.get("ok"):
            raise TelegramError(
                method,
                str(body.get("description") or f"HTTP {r.status_code}"),
                body.get("error_code", r.status_code),
            )
        return body.get("result")

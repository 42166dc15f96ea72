from __future__ import annotations
"""server/storefront/infrastructure/notifications/templates/request_card.py
~~~~~~~~~~~~~~~~~~~~~~~~
Rendu "carte" d'une demande (commande / retour) pour le chat des modérateurs.

- Texte MarkdownV2 déterministe : tout texte saisi par l'utilisateur est échappé.
- Clavier inline : une ligne avec les DEUX autres statuts (jamais le statut
  courant), puis un bouton lien "voir la fiche" (base64 url-safe de
  "{kind}:{uuid}").
"""

import base64
from dataclasses import dataclass
from typing import Any, Dict, Optional

from storefront.infrastructure.notifications.providers.telegram_provider import escape_markdown


@dataclass(frozen=True)
class Author:
    """Auteur lisible d'une demande (utilisateur propriétaire)."""
    name: str
    username: Optional[str] = None


def render_author(author: Optional[Author]) -> str:
    if author is None:
        return "Guest"
    name = escape_markdown(author.name or "?")
    if author.username:
        return f"[{name}](https://t.me/{author.username})"
    return name


def render_request_text(entity: Any, author: Optional[Author] = None) -> str:
    kind = entity.kind
    status = entity.status
    lines = [
        f"{status.emoji} {kind.display_name} \\#{escape_markdown(str(entity.id))}",
        "",
        f"*– UUID\\:* {escape_markdown(str(entity.uuid))}",
        f"*– Status\\:* {escape_markdown(status.label)}",
    ]
    feedback_type = getattr(entity, "type", None)
    if feedback_type is not None:
        lines.append(f"*– Type\\:* {escape_markdown(feedback_type.label)}")
    lines += [
        f"*– Author\\:* {render_author(author)}",
        f"*– Name\\:* {escape_markdown(entity.name)}",
        f"*– Phone\\:* {escape_markdown(entity.phone)}",
        f"*– Comment\\:* {escape_markdown(entity.content)}",
    ]
    return "\n".join(lines)


def deep_link_payload(entity: Any) -> str:
    raw = f"{entity.kind.value}:{entity.uuid}".encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def status_callback_data(entity: Any, target) -> str:
    return f"{entity.kind.callback_prefix}:{entity.id}:{target.value}"


def build_keyboard(entity: Any, deep_link_url: str) -> Dict[str, Any]:
    transitions = [
        {"text": target.button_text, "callback_data": status_callback_data(entity, target)}
        for target in entity.status.others()
    ]
    link = {"text": entity.kind.link_text, "url": deep_link_url + deep_link_payload(entity)}
    return {"inline_keyboard": [transitions, [link]]}

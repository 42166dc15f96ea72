from __future__ import annotations
"""server/storefront/core/security.py
~~~~~~~~~~~~~~~~~~~~~~~~
Sécurité API key (header X-API-Key) pour les appels privilégiés.

- ADMIN_API_KEY non configurée => tout appel privilégié est refusé (403).
- Comparaison en octets : Starlette décode les headers en latin-1 et
  compare_digest refuse les str non ASCII.
"""
import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from storefront.core.config import settings


def _same_secret(received: str, expected: str) -> bool:
    return secrets.compare_digest(received.encode("utf-8"), expected.encode("utf-8"))


async def require_admin_key(
    x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
) -> None:
    if not settings.ADMIN_API_KEY:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Privileged API disabled")
    if not x_api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")
    if not _same_secret(x_api_key, settings.ADMIN_API_KEY):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid API key")


def verify_telegram_secret(received: Optional[str], expected: Optional[str]) -> None:
    """Webhook Telegram : contrôle du secret uniquement s'il est configuré."""
    if not expected:
        return
    if not received or not _same_secret(received, expected):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid webhook secret")

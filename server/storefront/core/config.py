from __future__ import annotations
"""server/storefront/core/config.py
~~~~~~~~~~~~~~~~~~~~~~~~
Paramètres (pydantic-settings).
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront.domain.enums import UserRole, parse_user_role


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+psycopg://postgres:postgres@db:5432/storefront"
    DB_CONNECT_TIMEOUT: int = Field(5)
    DB_AUTO_CREATE: bool = False

    # Pool de workers in-process (livraison des évènements)
    WORKER_POOL_SIZE: int = Field(4, ge=1)
    WORKER_QUEUE_CAPACITY: int = Field(100, ge=1)

    # Bot Telegram (chat des modérateurs)
    TELEGRAM_BOT_ENABLED: bool = False
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_API_URL: str = "https://api.telegram.org"
    TELEGRAM_GROUP_ID: int = 0
    TELEGRAM_DEEP_LINK_URL: str = "https://t.me/ola_studio_bot?startapp="
    TELEGRAM_MINI_APP_URL: str = "https://ola.creavo.ru/tma"
    TELEGRAM_PARTNERSHIP_URL: str = "https://ola.creavo.ru/spa/settings/partnership"
    TELEGRAM_WEBHOOK_URL: Optional[str] = None
    TELEGRAM_WEBHOOK_SECRET: Optional[str] = None
    TELEGRAM_TIMEOUT_SECONDS: float = 5.0
    TELEGRAM_ALLOWED_ROLES: str = "moderator,admin"  # rôles autorisés sur les boutons de statut

    ADMIN_API_KEY: Optional[str] = None  # non configurée => API privilégiée désactivée
    CORS_ALLOW_ORIGINS: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    @property
    def telegram_enabled(self) -> bool:
        """Bot actif uniquement si le flag ET le token sont présents."""
        return bool(self.TELEGRAM_BOT_ENABLED and self.TELEGRAM_BOT_TOKEN)

    @property
    def telegram_allowed_roles(self) -> frozenset[UserRole]:
        """ValueError sur un rôle inconnu."""
        return frozenset(parse_user_role(r.strip()) for r in self.TELEGRAM_ALLOWED_ROLES.split(",") if r.strip())


settings = Settings()

from __future__ import annotations
"""server/storefront/core/bootstrap.py
~~~~~~~~~~~~~~~~~~~~~~~~
Assemblage des services (pool, bus, bot, listeners) et cycle de vie.

Ordre au démarrage : logs -> tables (optionnel) -> abonnements -> pool ->
webhook (optionnel). À l'arrêt : drapeau stop, attente des workers ; les
tâches encore en file sont abandonnées.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from storefront.application.services.request_service import RequestService
from storefront.application.services.request_storage import RequestStorage
from storefront.application.services.status_action_service import (
    CallbackQueryHandler,
    StatusActionService,
)
from storefront.application.services.telegram_bot_service import TelegramUpdateDispatcher
from storefront.application.services.telegram_sync_service import TelegramSyncService
from storefront.application.services.user_service import UserStorage
from storefront.core.config import Settings
from storefront.core.logging import setup_logging
from storefront.domain.enums import RequestKind
from storefront.infrastructure.messaging.event_bus import EventBus
from storefront.infrastructure.notifications.providers.telegram_provider import TelegramProvider
from storefront.infrastructure.persistence.database.session import init_db
from storefront.workers.worker_pool import WorkerPool

log = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    pool: WorkerPool
    bus: EventBus
    gateway: Optional[TelegramProvider]
    storages: Dict[RequestKind, RequestStorage]
    users: UserStorage
    sync: TelegramSyncService
    callbacks: CallbackQueryHandler
    dispatcher: TelegramUpdateDispatcher
    requests: RequestService
    stop: threading.Event = field(default_factory=threading.Event)
    _pool_thread: Optional[threading.Thread] = field(default=None, repr=False)
    _unsubscribers: list[Callable[[], None]] = field(default_factory=list, repr=False)

    def start(self, *, configure_logging: bool = True) -> None:
        if configure_logging:
            setup_logging(self.settings.LOG_LEVEL)
        if self.settings.DB_AUTO_CREATE:
            init_db()

        if self.gateway is None:
            log.info("Telegram bot disabled: listeners are no-ops")
        self._unsubscribers = self.sync.register(self.bus)
        self._pool_thread = self.pool.start(self.stop)

        if self.gateway is not None and self.settings.TELEGRAM_WEBHOOK_URL:
            try:
                self.gateway.set_webhook(
                    self.settings.TELEGRAM_WEBHOOK_URL,
                    secret_token=self.settings.TELEGRAM_WEBHOOK_SECRET,
                )
                log.info("Telegram webhook registered", extra={"url": self.settings.TELEGRAM_WEBHOOK_URL})
            except Exception:
                log.error("Failed to register telegram webhook", exc_info=True)

    def shutdown(self, timeout: float | None = 5.0) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.stop.set()
        if self._pool_thread is not None:
            self._pool_thread.join(timeout)
            self._pool_thread = None


def build_services(settings: Settings) -> Services:
    pool = WorkerPool(settings.WORKER_POOL_SIZE, settings.WORKER_QUEUE_CAPACITY)
    bus = EventBus.create(pool)

    gateway: Optional[TelegramProvider] = None
    if settings.telegram_enabled:
        gateway = TelegramProvider(
            settings.TELEGRAM_BOT_TOKEN,
            api_url=settings.TELEGRAM_API_URL,
            timeout=settings.TELEGRAM_TIMEOUT_SECONDS,
        )

    storages = {kind: RequestStorage(kind) for kind in RequestKind}
    users = UserStorage()
    sync = TelegramSyncService(
        gateway,
        storages,
        chat_id=settings.TELEGRAM_GROUP_ID,
        deep_link_url=settings.TELEGRAM_DEEP_LINK_URL,
    )
    callbacks = CallbackQueryHandler(
        users,
        {
            kind.callback_prefix: StatusActionService(kind, storages[kind], bus.changed(kind))
            for kind in RequestKind
        },
        gateway,
        allowed_roles=settings.telegram_allowed_roles,
    )
    dispatcher = TelegramUpdateDispatcher(
        gateway,
        users,
        callbacks,
        mini_app_url=settings.TELEGRAM_MINI_APP_URL,
        partnership_url=settings.TELEGRAM_PARTNERSHIP_URL,
    )
    return Services(
        settings=settings,
        pool=pool,
        bus=bus,
        gateway=gateway,
        storages=storages,
        users=users,
        sync=sync,
        callbacks=callbacks,
        dispatcher=dispatcher,
        requests=RequestService(bus),
    )

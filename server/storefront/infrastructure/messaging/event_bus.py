from __future__ import annotations
"""server/storefront/infrastructure/messaging/event_bus.py
~~~~~~~~~~~~~~~~~~~~~~~~
Évènements typés (pub/sub) adossés au WorkerPool.

- Chaque `Event[T]` possède son propre registre {id d'abonnement -> handler},
  protégé par un verrou tenu uniquement le temps de l'opération sur le dict.
- publish() copie le registre (snapshot) puis soumet UNE tâche au pool par
  handler : aucun handler ne s'exécute dans le thread qui publie.
- Un handler ajouté après publish() ne voit pas cet évènement ; un handler
  retiré pendant publish() peut avoir déjà été planifié.
- Les erreurs des handlers sont journalisées par le pool, jamais remontées.
"""

import functools
import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

from storefront.core.context import RequestContext
from storefront.domain.enums import RequestKind
from storefront.infrastructure.persistence.database.models.feedback import Feedback
from storefront.infrastructure.persistence.database.models.order import Order
from storefront.workers.worker_pool import WorkerPool

log = logging.getLogger(__name__)

T = TypeVar("T")
Handler = Callable[[RequestContext, T], None]


class Event(Generic[T]):
    def __init__(self, pool: WorkerPool, name: str = "event"):
        self.name = name
        self._pool = pool
        self._subs: dict[int, Handler[T]] = {}
        self._ids = itertools.count()
        self._lock = threading.Lock()

    def subscribe(self, handler: Handler[T]) -> Callable[[], None]:
        """Enregistre `handler` et retourne la fonction de désabonnement."""
        with self._lock:
            sub_id = next(self._ids)
            self._subs[sub_id] = handler

        def unsubscribe() -> None:
            with self._lock:
                self._subs.pop(sub_id, None)

        return unsubscribe

    def publish(self, ctx: RequestContext, payload: T) -> None:
        with self._lock:
            handlers = list(self._subs.values())

        log.debug("Event published", extra={"event": self.name, "handlers": len(handlers)})
        for handler in handlers:
            self._pool.submit(functools.partial(handler, ctx, payload))

    def __len__(self) -> int:
        with self._lock:
            return len(self._subs)


@dataclass
class EventBus:
    order_created: Event[Order]
    order_changed: Event[Order]
    feedback_created: Event[Feedback]
    feedback_changed: Event[Feedback]
    _by_kind: dict = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._by_kind = {
            RequestKind.ORDER: (self.order_created, self.order_changed),
            RequestKind.FEEDBACK: (self.feedback_created, self.feedback_changed),
        }

    @classmethod
    def create(cls, pool: WorkerPool) -> "EventBus":
        return cls(
            order_created=Event(pool, "order_created"),
            order_changed=Event(pool, "order_changed"),
            feedback_created=Event(pool, "feedback_created"),
            feedback_changed=Event(pool, "feedback_changed"),
        )

    def created(self, kind: RequestKind) -> Event:
        return self._by_kind[kind][0]

    def changed(self, kind: RequestKind) -> Event:
        return self._by_kind[kind][1]

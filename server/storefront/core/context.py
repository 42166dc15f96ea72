from __future__ import annotations
"""server/storefront/core/context.py
~~~~~~~~~~~~~~~~~~~~~~~~
Contexte d'exécution transmis aux handlers d'évènements.

- `request_id` : identifiant de corrélation (logs).
- `cancelled`  : drapeau d'annulation de la requête d'origine.

`detached()` renvoie un contexte dont la durée de vie est indépendante de la
requête déclenchante : c'est ce qu'on passe à `Event.publish()` après un commit,
pour que la notification parte même si la requête HTTP est annulée ensuite.
"""

import threading
import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True)
class RequestContext:
    request_id: str
    cancelled: threading.Event = field(default_factory=threading.Event, compare=False, repr=False)

    @classmethod
    def background(cls) -> "RequestContext":
        return cls(request_id=uuid.uuid4().hex)

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled.is_set()

    def cancel(self) -> None:
        self.cancelled.set()

    def detached(self) -> "RequestContext":
        """Même request_id, annulation découplée (nouveau drapeau jamais levé)."""
        return RequestContext(request_id=self.request_id)

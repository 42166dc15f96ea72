from __future__ import annotations
"""server/storefront/infrastructure/persistence/errors.py
~~~~~~~~~~~~~~~~~~~~~~~~
Erreurs de persistance.
"""


class NotFoundError(LookupError):
    """Ligne absente : cas attendu, distinct d'une panne DB."""

    def __init__(self, entity: str, key: object):
        super().__init__(f"{entity} not found: {key!r}")
        self.entity = entity
        self.key = key

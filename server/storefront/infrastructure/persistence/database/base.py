from __future__ import annotations
"""
server/storefront/infrastructure/persistence/database/base.py

Base ORM SQLAlchemy 2.x.

Le `from storefront.infrastructure.persistence.database.models import *` ci-dessous
est volontaire : il “remplit” Base.metadata avec TOUTES les tables.
Ainsi n’importe quel `Base.metadata.create_all(bind=engine)` (p.ex. en SQLite
pendant les tests) créera le schéma complet.
"""

from enum import Enum

from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base declarative pour tous les modèles."""
    pass


def slug_enum(enum_cls: type[Enum]) -> SAEnum:
    """Colonne VARCHAR stockant le slug (`.value`) d'une Enum fermée, relue en membre d'Enum."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=32,
        validate_strings=True,
        values_callable=lambda members: [m.value for m in members],
    )


# Effet de bord voulu : en important ce package on enregistre toutes les tables.
# Les noqa évitent les warnings “unused import”.
from storefront.infrastructure.persistence.database.models import *  # noqa: F403,F401,E402

__all__ = ["Base", "slug_enum"]

from __future__ import annotations
"""server/storefront/infrastructure/persistence/database/models/user.py
~~~~~~~~~~~~~~~~~~~~~~~~
Table users.
"""
import uuid as uuidlib
import datetime as dt

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from storefront.domain.enums import UserRole
from storefront.infrastructure.persistence.database.base import Base, slug_enum


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tid: Mapped[int | None] = mapped_column(BigInteger, nullable=True, unique=True, index=True)
    uuid: Mapped[uuidlib.UUID] = mapped_column(UUID(as_uuid=True), unique=True, default=uuidlib.uuid4)
    first_name: Mapped[str] = mapped_column(String(255), default="")
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[UserRole] = mapped_column(slug_enum(UserRole), default=UserRole.USER)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc))
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc))

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p).strip()

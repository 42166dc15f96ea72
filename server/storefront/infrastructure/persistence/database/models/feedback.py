from __future__ import annotations
"""server/storefront/infrastructure/persistence/database/models/feedback.py
~~~~~~~~~~~~~~~~~~~~~~~~
Table feedback.
"""
import uuid as uuidlib
import datetime as dt

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from storefront.domain.enums import FeedbackType, RequestKind, RequestStatus
from storefront.infrastructure.persistence.database.base import Base, slug_enum


class Feedback(Base):
    __tablename__ = "feedback"

    kind = RequestKind.FEEDBACK

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[uuidlib.UUID] = mapped_column(UUID(as_uuid=True), unique=True, default=uuidlib.uuid4)
    status: Mapped[RequestStatus] = mapped_column(slug_enum(RequestStatus), default=RequestStatus.CREATED)
    type: Mapped[FeedbackType] = mapped_column(slug_enum(FeedbackType), default=FeedbackType.FEEDBACK_REQUEST)
    name: Mapped[str] = mapped_column(String(255))
    phone: Mapped[str] = mapped_column(String(255))
    content: Mapped[str] = mapped_column(Text, default="")
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc))
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc))

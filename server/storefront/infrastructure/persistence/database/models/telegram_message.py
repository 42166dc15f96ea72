from __future__ import annotations
"""server/storefront/infrastructure/persistence/database/models/telegram_message.py
~~~~~~~~~~~~~~~~~~~~~~~~
Tables order_telegram_messages / feedback_telegram_messages.

Correspondance (demande -> message Telegram). Plusieurs lignes peuvent exister
pour une même demande ; seule la plus récente (message_id max) fait foi.
"""
from sqlalchemy import BigInteger, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from storefront.infrastructure.persistence.database.base import Base


class OrderTelegramMessage(Base):
    __tablename__ = "order_telegram_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    chat_id: Mapped[int] = mapped_column(BigInteger)
    message_id: Mapped[int] = mapped_column(BigInteger)


class FeedbackTelegramMessage(Base):
    __tablename__ = "feedback_telegram_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    feedback_id: Mapped[int] = mapped_column(ForeignKey("feedback.id", ondelete="CASCADE"), index=True)
    chat_id: Mapped[int] = mapped_column(BigInteger)
    message_id: Mapped[int] = mapped_column(BigInteger)
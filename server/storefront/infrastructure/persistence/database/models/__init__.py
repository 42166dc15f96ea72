from __future__ import annotations
"""server/storefront/infrastructure/persistence/database/models/__init__.py
~~~~~~~~~~~~~~~~~~~~~~~~
Modèles ORM (register for create_all).
"""

from .user import User
from .order import Order
from .feedback import Feedback
from .telegram_message import FeedbackTelegramMessage, OrderTelegramMessage

__all__ = ["User", "Order", "Feedback", "OrderTelegramMessage", "FeedbackTelegramMessage"]

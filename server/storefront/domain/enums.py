# server/storefront/domain/enums.py

from __future__ import annotations
"""
Énumérations fermées du domaine.

Chaque slug texte est converti UNE fois, à la frontière (DB, JSON, callback
Telegram), via une fonction `parse_*` qui lève `ValueError` sur une valeur
inconnue. Au-delà, le code ne manipule que les membres d'Enum.
"""

from enum import Enum


class RequestStatus(str, Enum):
    CREATED = "created"
    IN_PROGRESS = "in_progress"
    REVIEWED = "reviewed"

    @property
    def emoji(self) -> str:
        return _STATUS_EMOJI[self]

    @property
    def label(self) -> str:
        return _STATUS_LABEL[self]

    @property
    def button_text(self) -> str:
        """Libellé du bouton qui fait passer une demande VERS ce statut."""
        return _STATUS_BUTTON[self]

    def others(self) -> list["RequestStatus"]:
        """Statuts atteignables : tous sauf soi-même (graphe complet, pas d'auto-transition)."""
        return [s for s in RequestStatus if s is not self]


_STATUS_EMOJI = {
    RequestStatus.CREATED: "🆕",
    RequestStatus.IN_PROGRESS: "💼",
    RequestStatus.REVIEWED: "✅",
}
_STATUS_LABEL = {
    RequestStatus.CREATED: "New",
    RequestStatus.IN_PROGRESS: "In progress",
    RequestStatus.REVIEWED: "Completed",
}
_STATUS_BUTTON = {
    RequestStatus.CREATED: "Reopen",
    RequestStatus.IN_PROGRESS: "Take in progress",
    RequestStatus.REVIEWED: "Complete",
}


class UserRole(str, Enum):
    USER = "user"
    MANAGER = "manager"
    MODERATOR = "moderator"
    ADMIN = "admin"


class FeedbackType(str, Enum):
    MANAGER_CONTACT = "manager_contact"
    PARTNERSHIP_OFFER = "partnership_offer"
    FEEDBACK_REQUEST = "feedback_request"

    @property
    def label(self) -> str:
        return {
            FeedbackType.MANAGER_CONTACT: "Contact a manager",
            FeedbackType.PARTNERSHIP_OFFER: "Partnership offer",
            FeedbackType.FEEDBACK_REQUEST: "Feedback",
        }[self]


class OrderSource(str, Enum):
    LANDING = "landing"
    SPA = "spa"
    TMA = "tma"


class RequestKind(str, Enum):
    """Les deux sortes de "demandes" synchronisées avec Telegram."""
    ORDER = "order"
    FEEDBACK = "feedback"

    @property
    def callback_prefix(self) -> str:
        return f"{self.value}_status"

    @property
    def display_name(self) -> str:
        return "Order" if self is RequestKind.ORDER else "Feedback"

    @property
    def link_text(self) -> str:
        return "View order" if self is RequestKind.ORDER else "View request"

    @property
    def not_found_text(self) -> str:
        return "Order not found" if self is RequestKind.ORDER else "Feedback not found"

    @property
    def load_failed_text(self) -> str:
        return "Failed to load order" if self is RequestKind.ORDER else "Failed to load feedback"


def _parse(enum_cls, value, what: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValueError(f"unknown {what}: {value!r}") from None


def parse_request_status(value: str) -> RequestStatus:
    return _parse(RequestStatus, value, "request status")


def parse_user_role(value: str) -> UserRole:
    return _parse(UserRole, value, "user role")


def parse_feedback_type(value: str) -> FeedbackType:
    return _parse(FeedbackType, value, "feedback type")


def parse_order_source(value: str) -> OrderSource:
    return _parse(OrderSource, value, "order source")

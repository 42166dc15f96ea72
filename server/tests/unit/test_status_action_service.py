# server/tests/unit/test_status_action_service.py
import datetime as dt
import uuid
from types import SimpleNamespace

import pytest

from storefront.application.services.status_action_service import (
    CallbackDataError,
    CallbackQueryHandler,
    StatusActionService,
    parse_status_callback,
)
from storefront.core.context import RequestContext
from storefront.domain.enums import OrderSource, RequestKind, RequestStatus, UserRole
from storefront.infrastructure.persistence.database.models.order import Order
from storefront.infrastructure.persistence.errors import NotFoundError

pytestmark = pytest.mark.unit

T0 = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)


class RecordingEvent:
    def __init__(self):
        self.published = []

    def publish(self, ctx, payload):
        self.published.append((ctx, payload))


class MemoryEntities:
    def __init__(self, *entities):
        self.entities = {e.id: e for e in entities}
        self.saved = []
        self.fail_load = False
        self.fail_save = False

    def load_entity(self, entity_id):
        if self.fail_load:
            raise RuntimeError("db down")
        if entity_id not in self.entities:
            raise NotFoundError("orders", entity_id)
        stored = self.entities[entity_id]
        # copie : le service ne doit pas muter l'état "persisté"
        return Order(**{k: getattr(stored, k) for k in (
            "id", "uuid", "status", "source", "name", "phone", "content", "user_id", "created_at", "updated_at",
        )})

    def save_status(self, entity):
        if self.fail_save:
            raise RuntimeError("db down")
        stored = self.entities[entity.id]
        stored.status = entity.status
        stored.updated_at = entity.updated_at
        self.saved.append((entity.id, entity.status))


class MemoryUsers:
    def __init__(self, role=UserRole.MODERATOR, fail=False):
        self.role = role
        self.fail = fail
        self.seen = []

    def get_or_create(self, principal):
        if self.fail:
            raise RuntimeError("db down")
        self.seen.append(principal.id)
        return SimpleNamespace(id=1, tid=principal.id, role=self.role)


def _order(**kw):
    data = dict(
        id=42, uuid=uuid.uuid4(), status=RequestStatus.CREATED, source=OrderSource.LANDING,
        name="Anna", phone="1", content="", user_id=None, created_at=T0, updated_at=T0,
    )
    data.update(kw)
    return Order(**data)


@pytest.fixture
def entities():
    return MemoryEntities(_order())


@pytest.fixture
def changed():
    return RecordingEvent()


@pytest.fixture
def service(entities, changed):
    return StatusActionService(RequestKind.ORDER, entities, changed)


PRINCIPAL = SimpleNamespace(id=777, first_name="Mila", last_name=None, username="mila")


# --- parse ---------------------------------------------------------------

def test_parse_valid_payload():
    assert parse_status_callback("order_status:42:reviewed", "order_status") == (42, RequestStatus.REVIEWED)


@pytest.mark.parametrize(
    "data",
    [
        "",
        "garbage",
        "order_status:42",
        "order_status:42:reviewed:extra",
        "feedback_status:42:reviewed",
        "order_status:abc:reviewed",
        "order_status:42:done",
        "order_status: 42:reviewed",
        "order_status:42 :reviewed",
        "order_status:4_2:reviewed",
        "order_status:\u0664\u0662:reviewed",
        "order_status:42\n:reviewed",
        "order_status::reviewed",
    ],
)
def test_parse_rejects_malformed_payload(data):
    with pytest.raises(CallbackDataError):
        parse_status_callback(data, "order_status")


# --- state machine -------------------------------------------------------

def test_apply_changes_status_and_publishes_once(service, entities, changed):
    entities.entities[42].status = RequestStatus.IN_PROGRESS
    ctx = RequestContext.background()
    ack = service.apply(ctx, "order_status:42:reviewed")

    assert ack == "Status: Completed"
    stored = entities.entities[42]
    assert stored.status is RequestStatus.REVIEWED
    assert stored.updated_at > T0
    assert len(changed.published) == 1
    pub_ctx, payload = changed.published[0]
    assert payload.status is RequestStatus.REVIEWED
    assert pub_ctx.request_id == ctx.request_id


def test_published_context_survives_cancellation_of_trigger(service, changed):
    ctx = RequestContext.background()
    service.apply(ctx, "order_status:42:in_progress")
    ctx.cancel()

    pub_ctx, _ = changed.published[0]
    assert pub_ctx is not ctx
    assert not pub_ctx.is_cancelled


def test_bogus_payload_acks_parse_failure_without_mutation(service, entities, changed):
    assert service.apply(RequestContext.background(), "hello:world") == "Could not parse data"
    assert entities.entities[42].status is RequestStatus.CREATED
    assert entities.saved == []
    assert changed.published == []


def test_unknown_entity(service, changed):
    assert service.apply(RequestContext.background(), "order_status:999:reviewed") == "Order not found"
    assert changed.published == []


def test_load_failure(service, entities, changed):
    entities.fail_load = True
    assert service.apply(RequestContext.background(), "order_status:42:reviewed") == "Failed to load order"
    assert changed.published == []


def test_save_failure_is_logged_and_not_published(service, entities, changed, caplog):
    entities.fail_save = True
    ack = service.apply(RequestContext.background(), "order_status:42:reviewed")

    assert ack == "Failed to update status"
    assert changed.published == []
    assert any(r.levelname == "ERROR" for r in caplog.records)


# --- callback handler ----------------------------------------------------

@pytest.fixture
def handler_factory(service, gateway):
    def _make(users):
        return CallbackQueryHandler(users, {"order_status": service}, gateway)
    return _make


def test_unauthorized_principal_gets_unavailable(handler_factory, entities, changed):
    users = MemoryUsers(role=UserRole.USER)
    handler = handler_factory(users)

    ack = handler.on_action(RequestContext.background(), PRINCIPAL, "order_status:42:reviewed")

    assert ack == "Action unavailable to you"
    assert users.seen == [777]  # principal enregistré malgré le refus
    assert entities.entities[42].status is RequestStatus.CREATED
    assert changed.published == []


@pytest.mark.parametrize("role", [UserRole.MODERATOR, UserRole.ADMIN])
def test_authorized_principal_changes_status(handler_factory, entities, changed, role):
    handler = handler_factory(MemoryUsers(role=role))
    ack = handler.on_action(RequestContext.background(), PRINCIPAL, "order_status:42:reviewed")

    assert ack == "Status: Completed"
    assert entities.entities[42].status is RequestStatus.REVIEWED
    assert len(changed.published) == 1


def test_manager_is_not_allowed_by_default(handler_factory):
    handler = handler_factory(MemoryUsers(role=UserRole.MANAGER))
    assert handler.on_action(RequestContext.background(), PRINCIPAL, "order_status:42:reviewed") == "Action unavailable to you"


def test_unknown_prefix(handler_factory):
    handler = handler_factory(MemoryUsers())
    assert handler.on_action(RequestContext.background(), PRINCIPAL, "invoice_status:1:reviewed") == "Could not parse data"


def test_principal_upsert_failure(handler_factory, changed):
    handler = handler_factory(MemoryUsers(fail=True))
    assert handler.on_action(RequestContext.background(), PRINCIPAL, "order_status:42:reviewed") == "Failed to identify you"
    assert changed.published == []


def test_handle_acknowledges_exactly_once(handler_factory, gateway):
    handler = handler_factory(MemoryUsers())
    query = SimpleNamespace(id="cb-1", from_=PRINCIPAL, data="order_status:42:in_progress")

    handler.handle(RequestContext.background(), query)

    assert gateway.answers == [{"id": "cb-1", "text": "Status: In progress"}]


def test_handle_acknowledges_denial_too(handler_factory, gateway):
    handler = handler_factory(MemoryUsers(role=UserRole.USER))
    handler.handle(RequestContext.background(), SimpleNamespace(id="cb-2", from_=PRINCIPAL, data="order_status:42:reviewed"))
    assert gateway.answers == [{"id": "cb-2", "text": "Action unavailable to you"}]


def test_ack_failure_is_logged_not_raised(handler_factory, gateway, entities, caplog):
    gateway.fail_with = RuntimeError("telegram down")
    handler = handler_factory(MemoryUsers())

    handler.handle(RequestContext.background(), SimpleNamespace(id="cb-3", from_=PRINCIPAL, data="order_status:42:reviewed"))

    assert entities.entities[42].status is RequestStatus.REVIEWED
    assert any(r.getMessage() == "Failed to answer callback query" for r in caplog.records)

# server/tests/unit/test_telegram_sync_service.py
"""
Listeners de synchro Telegram, avec stockage en mémoire et gateway factice
(aucun appel réseau, aucune DB).
"""
import logging
import threading
import uuid

import pytest

from storefront.application.services.request_storage import MessageRef
from storefront.application.services.telegram_sync_service import SyncError, TelegramSyncService
from storefront.core.context import RequestContext
from storefront.domain.enums import FeedbackType, OrderSource, RequestKind, RequestStatus
from storefront.infrastructure.notifications.templates.request_card import Author
from storefront.infrastructure.persistence.database.models.feedback import Feedback
from storefront.infrastructure.persistence.database.models.order import Order
from storefront.infrastructure.persistence.errors import NotFoundError

pytestmark = pytest.mark.unit

CHAT_ID = -100


class MemoryStorage:
    def __init__(self, kind):
        self.kind = kind
        self.mappings = {}
        self.authors = {}
        self.fail_author = False
        self._lock = threading.Lock()

    def create_mapping(self, entity_id, chat_id, message_id):
        with self._lock:
            self.mappings.setdefault(entity_id, []).append((chat_id, message_id))
        return MessageRef(entity_id, chat_id, message_id)

    def get_mapping(self, entity_id):
        with self._lock:
            rows = self.mappings.get(entity_id)
            if not rows:
                raise NotFoundError("mapping", entity_id)
            chat_id, message_id = max(rows, key=lambda r: r[1])
        return MessageRef(entity_id, chat_id, message_id)

    def resolve_author(self, user_id):
        if self.fail_author:
            raise RuntimeError("db down")
        if user_id is None:
            return None
        return self.authors[user_id]


@pytest.fixture
def storages():
    return {kind: MemoryStorage(kind) for kind in RequestKind}


@pytest.fixture
def sync(gateway, storages):
    return TelegramSyncService(gateway, storages, chat_id=CHAT_ID, deep_link_url="https://t.me/bot?startapp=")


def _order(status=RequestStatus.CREATED, **kw):
    data = dict(
        id=1, uuid=uuid.uuid4(), status=status, source=OrderSource.SPA,
        name="Anna", phone="123", content="hi", user_id=None,
    )
    data.update(kw)
    return Order(**data)


def _ctx():
    return RequestContext.background()


def test_created_sends_card_and_records_mapping(sync, gateway, storages):
    order = _order()
    sync.on_created(_ctx(), order)

    assert len(gateway.sent) == 1
    sent = gateway.sent[0]
    assert sent["chat_id"] == CHAT_ID
    assert sent["text"].startswith("🆕 Order \\#1")
    assert storages[RequestKind.ORDER].mappings == {1: [(CHAT_ID, 500)]}


def test_created_then_changed_edits_the_same_message(sync, gateway, storages):
    order = _order()
    sync.on_created(_ctx(), order)

    order.status = RequestStatus.IN_PROGRESS
    sync.on_changed(_ctx(), order)

    assert len(storages[RequestKind.ORDER].mappings[1]) == 1
    assert len(gateway.edits) == 1
    edit = gateway.edits[0]
    assert (edit["chat_id"], edit["message_id"]) == (CHAT_ID, 500)
    assert "*– Status\\:* In progress" in edit["text"]
    targets = {b["callback_data"] for b in edit["reply_markup"]["inline_keyboard"][0]}
    assert targets == {"order_status:1:created", "order_status:1:reviewed"}


def test_changed_without_mapping_makes_no_gateway_call(sync, gateway):
    sync.on_changed(_ctx(), _order(status=RequestStatus.REVIEWED))
    assert gateway.sent == []
    assert gateway.edits == []


def test_feedback_changed_without_mapping_is_quiet_on_the_pool(sync, bus, gateway, caplog):
    finished = threading.Event()

    def listener(ctx, entity):
        sync.on_changed(ctx, entity)
        finished.set()

    bus.feedback_changed.subscribe(listener)
    feedback = Feedback(
        id=3, uuid=uuid.uuid4(), status=RequestStatus.REVIEWED, type=FeedbackType.MANAGER_CONTACT,
        name="Mila", phone="1", content="call me", user_id=None,
    )

    with caplog.at_level(logging.DEBUG, logger="storefront"):
        bus.feedback_changed.publish(_ctx(), feedback)
        assert finished.wait(3)

    assert gateway.sent == []
    assert gateway.edits == []
    assert any(r.getMessage() == "No telegram message to edit" for r in caplog.records)
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]


def test_changed_uses_latest_mapping(sync, gateway, storages):
    storage = storages[RequestKind.ORDER]
    storage.create_mapping(1, CHAT_ID, 10)
    storage.create_mapping(1, CHAT_ID, 12)

    sync.on_changed(_ctx(), _order())

    assert gateway.edits[0]["message_id"] == 12


def test_disabled_bot_is_noop(storages):
    sync = TelegramSyncService(None, storages, chat_id=CHAT_ID, deep_link_url="x")
    sync.on_created(_ctx(), _order())
    sync.on_changed(_ctx(), _order())
    assert storages[RequestKind.ORDER].mappings == {}


def test_none_payload_is_noop(sync, gateway):
    sync.on_created(_ctx(), None)
    sync.on_changed(_ctx(), None)
    assert gateway.sent == [] and gateway.edits == []


def test_send_failure_raises_sync_error_without_mapping(sync, gateway, storages):
    gateway.fail_with = RuntimeError("network down")
    with pytest.raises(SyncError, match="failed to send order telegram message"):
        sync.on_created(_ctx(), _order())
    assert storages[RequestKind.ORDER].mappings == {}


def test_author_failure_aborts_before_sending(sync, gateway, storages):
    storages[RequestKind.ORDER].fail_author = True
    with pytest.raises(SyncError):
        sync.on_created(_ctx(), _order())
    assert gateway.sent == []


def test_author_is_rendered_with_link(sync, gateway, storages):
    storages[RequestKind.FEEDBACK].authors[5] = Author(name="Mila", username="mila")
    feedback = Feedback(
        id=3, uuid=uuid.uuid4(), status=RequestStatus.CREATED, type=FeedbackType.MANAGER_CONTACT,
        name="Mila", phone="1", content="call me", user_id=5,
    )
    sync.on_created(_ctx(), feedback)

    text = gateway.sent[0]["text"]
    assert "*– Author\\:* [Mila](https://t.me/mila)" in text
    assert storages[RequestKind.FEEDBACK].mappings == {3: [(CHAT_ID, 500)]}


def test_cancelled_context_skips_sync(sync, gateway):
    ctx = _ctx()
    ctx.cancel()
    sync.on_created(ctx, _order())
    assert gateway.sent == []


def test_register_wires_four_listeners(sync, bus):
    unsubscribers = sync.register(bus)
    assert len(unsubscribers) == 4
    for event in (bus.order_created, bus.order_changed, bus.feedback_created, bus.feedback_changed):
        assert len(event) == 1
    for unsubscribe in unsubscribers:
        unsubscribe()
    assert len(bus.order_created) == 0


def test_end_to_end_through_bus(sync, bus, gateway, wait_until):
    sync.register(bus)
    order = _order()
    bus.order_created.publish(_ctx(), order)
    assert wait_until(lambda: len(gateway.sent) == 1)

    changed = _order(status=RequestStatus.REVIEWED, uuid=order.uuid)
    bus.order_changed.publish(_ctx(), changed)
    assert wait_until(lambda: len(gateway.edits) == 1)
    assert "*– Status\\:* Completed" in gateway.edits[0]["text"]


def test_concurrent_changed_events_both_edit(sync, bus, gateway, storages, wait_until):
    sync.register(bus)
    storages[RequestKind.ORDER].create_mapping(1, CHAT_ID, 900)

    bus.order_changed.publish(_ctx(), _order(status=RequestStatus.IN_PROGRESS))
    bus.order_changed.publish(_ctx(), _order(status=RequestStatus.REVIEWED))

    assert wait_until(lambda: len(gateway.edits) == 2)
    assert {e["message_id"] for e in gateway.edits} == {900}
    statuses = {("In progress" in e["text"], "Completed" in e["text"]) for e in gateway.edits}
    assert statuses == {(True, False), (False, True)}

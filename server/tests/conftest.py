# server/tests/conftest.py
"""
Conftest *global* pour la suite de tests.

Points clés :
- ENV sûres posées dans pytest_configure, AVANT tout import de `storefront`
  (le module config instancie `settings` à l'import) : bot désactivé,
  DATABASE_URL SQLite sur fichier temporaire (partagé entre les threads du pool).
- Schéma créé une fois (init_db), tables purgées après chaque test.
- Fixtures communes : pool démarré, bus, gateway Telegram factice, wait_until.
"""

import itertools
import os
import shutil
import tempfile
import threading
import time

import pytest

_TMP_DIR = None


def pytest_configure(config):
    global _TMP_DIR
    _TMP_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
    os.environ["DATABASE_URL"] = f"sqlite+pysqlite:///{os.path.join(_TMP_DIR, 'unit.db')}"
    os.environ["TELEGRAM_BOT_ENABLED"] = "false"
    os.environ["ADMIN_API_KEY"] = "test-admin-key"
    os.environ.pop("TELEGRAM_BOT_TOKEN", None)
    os.environ.pop("TELEGRAM_WEBHOOK_SECRET", None)


def pytest_unconfigure(config):
    if _TMP_DIR:
        shutil.rmtree(_TMP_DIR, ignore_errors=True)


# ============================================================================
# DB SQLite (fichier) + purge entre tests
# ============================================================================
@pytest.fixture(scope="session", autouse=True)
def _schema():
    from storefront.infrastructure.persistence.database.session import init_db

    init_db()


@pytest.fixture(autouse=True)
def _clear_db_between_tests(_schema):
    yield
    from storefront.infrastructure.persistence.database.base import Base
    from storefront.infrastructure.persistence.database.session import get_sync_session

    with get_sync_session() as s:
        for table in reversed(Base.metadata.sorted_tables):
            s.execute(table.delete())
        s.commit()


@pytest.fixture
def db_session():
    from storefront.infrastructure.persistence.database.session import get_sync_session

    with get_sync_session() as s:
        yield s


@pytest.fixture
def make_order(db_session):
    from storefront.domain.enums import OrderSource, RequestStatus
    from storefront.infrastructure.persistence.database.models.order import Order

    def _make(**overrides):
        data = dict(
            status=RequestStatus.CREATED,
            source=OrderSource.LANDING,
            name="Anna",
            phone="+7 900 000-00-00",
            content="Balloons for Saturday",
        )
        data.update(overrides)
        order = Order(**data)
        db_session.add(order)
        db_session.commit()
        return order

    return _make


@pytest.fixture
def make_feedback(db_session):
    from storefront.domain.enums import FeedbackType, RequestStatus
    from storefront.infrastructure.persistence.database.models.feedback import Feedback

    def _make(**overrides):
        data = dict(
            status=RequestStatus.CREATED,
            type=FeedbackType.PARTNERSHIP_OFFER,
            name="Oleg",
            phone="+7 911 111-11-11",
            content="Let's work together",
        )
        data.update(overrides)
        feedback = Feedback(**data)
        db_session.add(feedback)
        db_session.commit()
        return feedback

    return _make


@pytest.fixture
def make_user(db_session):
    from storefront.domain.enums import UserRole
    from storefront.infrastructure.persistence.database.models.user import User

    def _make(**overrides):
        data = dict(tid=1001, first_name="Mila", last_name="Petrova", username="mila", role=UserRole.USER)
        data.update(overrides)
        user = User(**data)
        db_session.add(user)
        db_session.commit()
        return user

    return _make


# ============================================================================
# Pool / bus
# ============================================================================
@pytest.fixture
def pool():
    from storefront.workers.worker_pool import WorkerPool

    p = WorkerPool(2, 16, poll_interval=0.01)
    stop = threading.Event()
    thread = p.start(stop)
    yield p
    stop.set()
    thread.join(5)


@pytest.fixture
def bus(pool):
    from storefront.infrastructure.messaging.event_bus import EventBus

    return EventBus.create(pool)


@pytest.fixture
def wait_until():
    """Poll `fn` jusqu'à une valeur truthy (ou timeout) ; retourne la dernière valeur."""
    def _wait(fn, timeout=3.0, every=0.01):
        deadline = time.monotonic() + timeout
        val = fn()
        while not val and time.monotonic() < deadline:
            time.sleep(every)
            val = fn()
        return val
    return _wait


# ============================================================================
# Gateway Telegram factice (enregistre les appels)
# ============================================================================
class FakeGateway:
    def __init__(self, chat_id: int = -100):
        from storefront.infrastructure.notifications.providers.telegram_provider import SentMessage

        self._sent_cls = SentMessage
        self.chat_id = chat_id
        self.sent = []
        self.edits = []
        self.answers = []
        self.fail_with = None
        self._ids = itertools.count(500)
        self._lock = threading.Lock()

    def send_message(self, chat_id, text, reply_markup=None):
        if self.fail_with:
            raise self.fail_with
        with self._lock:
            message_id = next(self._ids)
            self.sent.append({"chat_id": chat_id, "text": text, "reply_markup": reply_markup})
        return self._sent_cls(chat_id=chat_id, message_id=message_id)

    def edit_message_text(self, chat_id, message_id, text, reply_markup=None):
        if self.fail_with:
            raise self.fail_with
        with self._lock:
            self.edits.append(
                {"chat_id": chat_id, "message_id": message_id, "text": text, "reply_markup": reply_markup}
            )

    def answer_callback_query(self, callback_query_id, text, *, show_alert=False):
        if self.fail_with:
            raise self.fail_with
        with self._lock:
            self.answers.append({"id": callback_query_id, "text": text})


@pytest.fixture
def gateway():
    return FakeGateway()

import time
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from app.database import get_db
from app.main import app
from app.config import settings
from app.models.category import Category
from app.models.user import Role, User
from app.services.auth_service import auth_service
from app.services.notification_service import MemoryBackend, Notifier, get_notifier
from app.utils.security import generate_token, hash_password

PASSWORD = "correct-horse-battery"

DESCRIPTION = (
    "Looking for a clean, modern logo for a small coffee roastery. "
    "Deliver vector files plus PNG exports in light and dark variants."
)


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _now():
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@pytest.fixture(scope="session")
def password_hash():
    return hash_password(PASSWORD)


@pytest.fixture
def tmp_storage(tmp_path):
    storage_path = tmp_path / "JobBoard"
    storage_path.mkdir()
    (storage_path / "banners").mkdir()
    return storage_path


@pytest.fixture
def test_db(tmp_storage):
    db_path = tmp_storage / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    from app.database import init_db
    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def outbox(test_db):
    """Mail sent during the test, captured instead of delivered."""
    backend = MemoryBackend()
    app.dependency_overrides[get_notifier] = lambda: Notifier(backend)
    yield backend.outbox
    app.dependency_overrides.pop(get_notifier, None)


@pytest.fixture
def fresh_auth_service():
    original = auth_service.__dict__.copy()
    auth_service._active_tokens = {}
    yield auth_service
    auth_service.__dict__.update(original)


@pytest.fixture
def client(tmp_storage, test_db, outbox, fresh_auth_service):
    original_storage_path = settings.storage_path
    settings.storage_path = tmp_storage
    c = TestClient(app)
    yield c
    settings.storage_path = original_storage_path


@pytest.fixture
def make_user(test_db, password_hash, fresh_auth_service):
    """Create a user straight in the database and hand back a logged-in
    namespace with ``id``, ``email`` and auth ``headers``."""
    counter = iter(range(1, 1000))

    def _make(
        name: str = "Client",
        verified: bool = True,
        paypal_email: str | None = "payments@example.com",
        roles: tuple[str, ...] = (),
    ):
        email = f"user{next(counter)}@example.com"
        db = test_db()
        try:
            now = _now()
            user = User(
                email=email,
                name=name,
                password_hash=password_hash,
                verified=verified,
                paypal_email=paypal_email,
                created_at=now,
                updated_at=now,
            )
            if roles:
                user.roles = db.query(Role).filter(Role.name.in_(roles)).all()
            db.add(user)
            db.commit()
            user_id = user.id
        finally:
            db.close()

        token = generate_token()
        fresh_auth_service._active_tokens[token] = (user_id, time.time() + 3600)
        return SimpleNamespace(
            id=user_id,
            email=email,
            headers={"Authorization": f"Bearer {token}"},
        )

    return _make


@pytest.fixture
def make_category(test_db):
    def _make(title="Design", status="active", min_rate=0, min_expedite_rate=0) -> int:
        db = test_db()
        try:
            category = Category(
                title=title,
                status=status,
                min_rate=min_rate,
                min_expedite_rate=min_expedite_rate,
                created_at=_now(),
            )
            db.add(category)
            db.commit()
            return category.id
        finally:
            db.close()

    return _make


@pytest.fixture
def job_payload():
    def _payload(category_id: int, **overrides) -> dict:
        payload = {
            "title": "Logo Design Request",
            "description": DESCRIPTION,
            "rate": 50,
            "minWords": 500,
            "revision_number": 2,
            "delivery_guarantee": 3,
            "category": category_id,
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture
def create_job(client, job_payload):
    """POST a valid job for ``user`` and return the response JSON."""

    def _create(user, category_id: int, **overrides) -> dict:
        r = client.post("/api/v1/jobs", json=job_payload(category_id, **overrides), headers=user.headers)
        assert r.status_code == 201, r.text
        return r.json()

    return _create


@pytest.fixture
def job_status(test_db):
    def _status(job_id: int) -> str | None:
        from app.models.job import Job
        db = test_db()
        try:
            job = db.query(Job).filter(Job.id == job_id).first()
            return job.status if job else None
        finally:
            db.close()

    return _status

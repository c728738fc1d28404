"""
Pytest fixtures for Pipe Catalog tests.

Uses an in-memory SQLite database through the DatabaseManager and an
in-memory stand-in for the redis-py client with a controllable clock.
"""

import fnmatch
import os

import pytest
import redis

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-pipe-catalog-sessions")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from catalog.cache import RedisCache  # noqa: E402
from catalog.config import get_settings  # noqa: E402
from catalog.db import db  # noqa: E402
from catalog.models import Accessory, Image, Pipe, Tobacco  # noqa: E402


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """The subset of redis.Redis used by RedisCache, with expiry driven by a clock."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.store: dict[str, tuple[str, float | None]] = {}
        self.calls: list[tuple] = []
        self.closed = False

    def _expired(self, key: str) -> bool:
        _, expires_at = self.store[key]
        return expires_at is not None and self.clock() >= expires_at

    def _live_keys(self) -> list[str]:
        return [k for k in list(self.store) if not self._expired(k)]

    def get(self, key):
        self.calls.append(("get", key))
        if key not in self.store or self._expired(key):
            self.store.pop(key, None)
            return None
        return self.store[key][0]

    def set(self, key, value):
        self.store[key] = (value, None)
        return True

    def setex(self, key, ttl, value):
        self.calls.append(("setex", key, ttl))
        self.store[key] = (value, self.clock() + ttl)
        return True

    def delete(self, *keys):
        self.calls.append(("delete", *keys))
        removed = 0
        for key in keys:
            if key in self.store:
                removed += 0 if self._expired(key) else 1
                del self.store[key]
        return removed

    def scan_iter(self, match="*", count=None):
        self.calls.append(("scan_iter", match))
        for key in self._live_keys():
            if fnmatch.fnmatchcase(key, match):
                yield key

    def ping(self):
        return True

    def info(self, section=None):
        return {"used_memory_human": "1.00M"}

    def close(self):
        self.closed = True

    def live_keys(self) -> list[str]:
        return sorted(self._live_keys())


class FailingRedis:
    """Client whose every call fails as if the server were down."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise redis.ConnectionError("Connection refused")

        return fail


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_redis(clock):
    return FakeRedis(clock)


@pytest.fixture
def cache(fake_redis):
    return RedisCache(get_settings(), client=fake_redis)


@pytest.fixture
def failing_cache():
    return RedisCache(get_settings(), client=FailingRedis())


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Point uploads at a temporary directory."""
    path = tmp_path / "uploads"
    monkeypatch.setenv("UPLOAD_DIR", str(path))
    get_settings.cache_clear()
    yield path
    get_settings.cache_clear()


@pytest.fixture
def test_db():
    """Fresh in-memory database for each test."""
    db.reset()
    db.initialize("sqlite://")
    db.create_all_tables()
    yield db
    db.drop_all_tables()
    db.reset()


@pytest.fixture
def test_session(test_db):
    session = test_db.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_pipe(test_session):
    def _make(**overrides) -> Pipe:
        data = {
            "name": "Billiard",
            "brand": "Peterson",
            "material": "Briar",
            "shape": "Billiard",
            "finish": "Smooth",
            "filter_type": "None",
            "stem_material": "Vulcanite",
            "country": "Ireland",
        }
        data.update(overrides)
        pipe = Pipe(**data)
        test_session.add(pipe)
        test_session.commit()
        return pipe

    return _make


@pytest.fixture
def make_tobacco(test_session):
    def _make(**overrides) -> Tobacco:
        data = {
            "name": "Early Morning",
            "brand": "Peterson",
            "blend_type": "English",
            "contents": "Latakia, Virginia, Oriental",
            "cut": "Ribbon",
            "strength": 4,
            "room_note": 5,
            "taste": 7,
        }
        data.update(overrides)
        tobacco = Tobacco(**data)
        test_session.add(tobacco)
        test_session.commit()
        return tobacco

    return _make


@pytest.fixture
def make_accessory(test_session):
    def _make(**overrides) -> Accessory:
        data = {
            "name": "Pipe Tamper",
            "brand": "Savinelli",
            "category": "Tools",
            "description": "Three-in-one pipe tool",
        }
        data.update(overrides)
        accessory = Accessory(**data)
        test_session.add(accessory)
        test_session.commit()
        return accessory

    return _make


@pytest.fixture
def make_image(test_session):
    def _make(item, **overrides) -> Image:
        data = {
            "item_id": item.id,
            "item_type": item.item_type.value,
            "filename": "processed-test.webp",
            "original_name": "photo.jpg",
            "file_size": 1024,
            "mime_type": "image/webp",
            "width": 1200,
            "height": 800,
            "alt_text": "photo",
            "sort_order": 1,
        }
        data.update(overrides)
        image = Image(**data)
        test_session.add(image)
        test_session.commit()
        return image

    return _make

"""
Root pytest configuration for backend tests.

Provides:
- --run-integration switch for tests marked integration
- Shared fixtures (app, client, auth headers)
- FakeClock for deterministic TTL tests
- FakeRollupRepository standing in for the Postgres rollup functions
"""

import sys
import threading
from pathlib import Path

# Add backend directory to Python path so imports like
# `from services.cache_service import ...` and `from utils.normalize import ...` work
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import pytest

from services.errors import RollupQueryError
from services.rollup_repository import PlatformRow, ProductRow, ProvinceRow, RollupRepository


def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run tests marked as integration (requires PostgreSQL with the rollup functions).",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="integration test (use --run-integration to run)"
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRollupRepository(RollupRepository):
    """
    In-memory rollup collaborator.

    Set `fail` to a set of query names ('top_products', 'top_provinces',
    'top_platforms', 'product_images') that should raise RollupQueryError.
    Every call is recorded in `calls`.
    """

    def __init__(self, products=None, provinces=None, platforms=None, images=None):
        self.products = [ProductRow(**p) for p in (products or [])]
        self.provinces = [ProvinceRow(**p) for p in (provinces or [])]
        self.platforms = [PlatformRow(**p) for p in (platforms or [])]
        self.images = dict(images or {})
        self.fail = set()
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, name, *args):
        with self._lock:
            self.calls.append((name,) + args)
        if name in self.fail:
            raise RollupQueryError(name, f"{name} exploded")

    def call_count(self, name):
        return sum(1 for c in self.calls if c[0] == name)

    def top_products(self, platform, start, end):
        self._record('top_products', platform, start, end)
        return list(self.products)

    def top_provinces(self, platform, start, end):
        self._record('top_provinces', platform, start, end)
        return list(self.provinces)

    def top_platforms(self, platform, start, end):
        self._record('top_platforms', platform, start, end)
        return list(self.platforms)

    def product_images(self, names):
        self._record('product_images', tuple(names))
        return {n: self.images[n] for n in names if n in self.images}


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_repository():
    return FakeRollupRepository(
        products=[
            {"name": "Serum A", "variant": "30ml", "revenue": 5000, "qty": 50, "returned": 1,
             "platforms": ["shopee", "TIK TOK"], "latest_at": "2025-02-03T10:00:00"},
            {"name": "Serum B", "variant": None, "revenue": 4000, "qty": 40, "platforms": ["Lazada"]},
        ],
        provinces=[
            {"name": "กรุงเทพมหานคร", "revenue": 7000, "qty": 70},
            {"name": "เชียงใหม่", "revenue": 2000, "qty": 20},
        ],
        platforms=[
            {"platform": "shopee", "variant": "30ml", "revenue": 3000, "qty": 30},
            {"platform": "tiktok", "variant": "50ml", "revenue": 2000, "qty": 20},
        ],
        images={"Serum A": "https://cdn.example.com/serum-a.png"},
    )


@pytest.fixture
def app():
    """Create test Flask application on an in-memory SQLite database."""
    from app import create_app
    from config import TestConfig
    from models.database import db

    app = create_app(TestConfig)
    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def _auth_headers(app, role):
    from utils.auth import generate_token

    with app.app_context():
        token = generate_token(f"{role}@example.com", role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def viewer_headers(app):
    return _auth_headers(app, "viewer")


@pytest.fixture
def admin_headers(app):
    return _auth_headers(app, "admin")

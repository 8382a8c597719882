"""
Pytest configuration and shared fixtures.

This file adds the parent directory to the Python path so that tests
can import from the domain, repositories, services and api packages.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(Path(__file__).parent))

from fakes import FakeSupabase  # noqa: E402
from repositories.client import StoreSettings  # noqa: E402
from services.session_service import SessionManager  # noqa: E402


@pytest.fixture
def store() -> FakeSupabase:
    """Fresh in-memory Supabase stand-in per test."""
    return FakeSupabase()


@pytest.fixture
def settings() -> StoreSettings:
    return StoreSettings(url="https://fake.supabase.co", key="test-key", max_image_size_mb=1)


@pytest.fixture
def manager(store):
    session_manager = SessionManager(store)
    yield session_manager
    session_manager.close()


@pytest.fixture
def phases(manager):
    """Every phase the manager publishes, in order."""
    seen = []
    manager.subscribe(lambda state: seen.append(state.phase))
    return seen


@pytest.fixture
def api_client(store, settings):
    """TestClient wired to the app with the fake store in place of Supabase."""
    from fastapi.testclient import TestClient

    from api.dependencies import get_settings, get_store_client
    from api.main import app

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_store_client] = lambda: store
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()

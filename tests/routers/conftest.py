import uuid
from types import SimpleNamespace

import anyio
import pytest
from fastapi.testclient import TestClient

from inventory_tracker.core.auth import current_active_user
from inventory_tracker.main import app
from inventory_tracker.routers.deps import get_inventory
from tests.fakes import seed


def make_user(role: str = "editor", is_superuser: bool = False):
    return SimpleNamespace(id=uuid.uuid4(), email=f"{role}@example.com", role=role, is_superuser=is_superuser, is_active=True)


@pytest.fixture
def user():
    return make_user()


@pytest.fixture
def client(inventory, user):
    anyio.run(seed, inventory)
    app.dependency_overrides[get_inventory] = lambda: inventory
    app.dependency_overrides[current_active_user] = lambda: user
    yield TestClient(app)
    app.dependency_overrides.clear()

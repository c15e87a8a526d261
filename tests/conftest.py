import pytest

from inventory_tracker.services import InventoryService
from inventory_tracker.stores.memory import MemoryInventoryStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store():
    return MemoryInventoryStore()


@pytest.fixture
def inventory(store):
    return InventoryService(store)

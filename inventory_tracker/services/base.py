"""Shared plumbing for services that talk to a store."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import Optional, TypeVar

from inventory_tracker.core.errors import InvalidQuantityError, StorageTimeoutError
from inventory_tracker.stores.base import InventoryStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreService:
    """Base for services bound to one ``InventoryStore``.

    Every store call goes through ``_call`` so it is bounded by ``timeout``.
    A timeout is a failure, not a success, and says nothing about whether the
    remote write applied.
    """

    def __init__(self, store: InventoryStore, timeout: Optional[float] = None) -> None:
        self._store = store
        self._timeout = timeout

    async def _call(self, awaitable: Awaitable[T], operation: str) -> T:
        if self._timeout is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, self._timeout)
        except asyncio.TimeoutError as exc:
            logger.error("%s timed out after %ss", operation, self._timeout)
            raise StorageTimeoutError(operation, self._timeout) from exc


def whole_number(value: object, *, allow_zero: bool = False) -> int:
    """Coerce a quantity to ``int`` or raise InvalidQuantityError.

    Integral floats (``3.0``) are accepted, fractions, bools and strings are not.
    """
    if isinstance(value, bool):
        raise InvalidQuantityError(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise InvalidQuantityError(value)
    if value < 0 or (value == 0 and not allow_zero):
        raise InvalidQuantityError(value)
    return value

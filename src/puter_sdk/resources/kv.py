"""Key-value store."""

from __future__ import annotations

from typing import Any

from ..config import INTERFACE_KVSTORE, MAX_KEY_LENGTH
from ..exceptions import ValidationError
from ._base import Resource


def _check_key(key: Any) -> None:
    if not key or not isinstance(key, str):
        raise ValidationError("Invalid key", field="key")


class PuterKV(Resource):
    """Per-user key-value storage.

    Values are any JSON-serializable data. Reads have no side effects.
    """

    async def set(self, key: str, value: Any) -> bool:
        """Store a value.

        Raises:
            ValidationError: If the key is empty or longer than 1024 characters.
        """
        _check_key(key)
        if len(key) > MAX_KEY_LENGTH:
            raise ValidationError("Key too large", field="key")

        await self._transport.call(
            INTERFACE_KVSTORE,
            "set",
            {"key": key, "value": value},
            expect_success=True,
            failure_message="Failed to set value",
        )
        return True

    async def get(self, key: str) -> Any:
        """Get a value, or None if the key doesn't exist."""
        _check_key(key)
        envelope = await self._transport.call(
            INTERFACE_KVSTORE,
            "get",
            {"key": key},
            expect_success=True,
            failure_message="Failed to get value",
        )
        return envelope.get("result")

    async def delete(self, key: str) -> bool:
        """Delete a key."""
        _check_key(key)
        await self._transport.call(
            INTERFACE_KVSTORE,
            "del",
            {"key": key},
            expect_success=True,
            failure_message="Failed to delete key",
        )
        return True

    async def incr(self, key: str, amount: int = 1) -> Any:
        """Increment a numeric value and return the new value."""
        _check_key(key)
        envelope = await self._transport.call(
            INTERFACE_KVSTORE,
            "incr",
            {"key": key, "amount": amount},
            expect_success=True,
            failure_message="Failed to increment value",
        )
        return envelope.get("result")

    async def decr(self, key: str, amount: int = 1) -> Any:
        """Decrement a numeric value and return the new value."""
        _check_key(key)
        envelope = await self._transport.call(
            INTERFACE_KVSTORE,
            "decr",
            {"key": key, "amount": amount},
            expect_success=True,
            failure_message="Failed to decrement value",
        )
        return envelope.get("result")

    async def flush(self) -> bool:
        """Remove every key."""
        await self._transport.call(
            INTERFACE_KVSTORE,
            "flush",
            expect_success=True,
            failure_message="Failed to flush storage",
        )
        return True

    async def list(self, pattern: str = "*") -> Any:
        """List keys matching a glob pattern."""
        envelope = await self._transport.call(
            INTERFACE_KVSTORE,
            "list",
            {"pattern": pattern},
            expect_success=True,
            failure_message="Failed to list keys",
        )
        return envelope.get("result")

"""Disk and driver usage."""

from __future__ import annotations

from typing import Any

from ._base import Resource


class PuterUsage(Resource):
    async def get_disk_usage(self) -> dict[str, Any]:
        """Get storage capacity and usage of the account."""
        return await self._transport.post("/df")

    async def get_usage_info(self) -> dict[str, Any]:
        """Get metered usage of the platform drivers."""
        return await self._transport.get("/drivers/usage")

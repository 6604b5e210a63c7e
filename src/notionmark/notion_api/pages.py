"""Wrappers for the Notion ``/pages`` endpoints."""

from __future__ import annotations

from typing import Any

from .transport import AsyncNotionTransport


class AsyncPageAPI:
    """Page reads over an :class:`AsyncNotionTransport`."""

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def retrieve(self, page_id: str) -> dict[str, Any]:
        """Fetch a page object, properties included."""
        return await self._transport.request("GET", f"/pages/{page_id}")

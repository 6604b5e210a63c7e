"""Wrappers for the Notion ``/blocks`` endpoints."""

from __future__ import annotations

from typing import Any

from .transport import AsyncNotionTransport

# Notion rejects append requests with more children than this.
MAX_CHILDREN_PER_APPEND = 100


class AsyncBlockAPI:
    """Block reads and appends over an :class:`AsyncNotionTransport`.

    :meth:`get_children` has the shape the block renderer expects from its
    ``fetch_children`` capability, so a bound method can be passed straight
    to :func:`notionmark.converter.notion_to_md.render`.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def get_children(self, block_id: str) -> list[dict[str, Any]]:
        """Fetch every child of a block or page, following pagination.

        Parameters
        ----------
        block_id:
            Parent block or page UUID.

        Returns
        -------
        list[dict]
            Child block objects in document order.
        """
        return [
            item
            async for item in self._transport.paginate(f"/blocks/{block_id}/children")
        ]

    async def append_children(
        self,
        block_id: str,
        children: list[dict[str, Any]],
        after: str | None = None,
    ) -> dict[str, Any]:
        """Append up to :data:`MAX_CHILDREN_PER_APPEND` blocks to a parent.

        Parameters
        ----------
        block_id:
            Parent block or page UUID.
        children:
            Block payloads, e.g. the output of
            :func:`notionmark.converter.md_to_notion.parse`.
        after:
            Insert after this existing child instead of at the end.
        """
        if len(children) > MAX_CHILDREN_PER_APPEND:
            raise ValueError(
                f"at most {MAX_CHILDREN_PER_APPEND} children per request, got {len(children)}"
            )
        body: dict[str, Any] = {"children": children}
        if after is not None:
            body["after"] = after
        return await self._transport.request(
            "PATCH", f"/blocks/{block_id}/children", json=body,
        )

"""Asynchronous Notion client built on the conversion engine.

:class:`AsyncNotionmarkClient` wires the block renderer, the block parser
and the property flattener to the Notion API.  The renderer's
``fetch_children`` capability is :meth:`AsyncBlockAPI.get_children`.

Usage::

    import asyncio
    from notionmark import AsyncNotionmarkClient

    async def main():
        async with AsyncNotionmarkClient(token="secret_xxx") as client:
            print(await client.page_to_markdown("<page_id>"))
            await client.append_markdown("<page_id>", "## Notes\\n\\n- one\\n- two")

    asyncio.run(main())
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from notionmark.config import NotionmarkConfig
from notionmark.converter.md_to_notion import MarkdownToNotionConverter
from notionmark.converter.notion_to_md import NotionToMarkdownRenderer
from notionmark.converter.properties import flatten_properties, page_to_simple
from notionmark.models import AppendResult, ConvertOptions, PropertyValue, SimplePage
from notionmark.notion_api.blocks import MAX_CHILDREN_PER_APPEND, AsyncBlockAPI
from notionmark.notion_api.pages import AsyncPageAPI
from notionmark.notion_api.transport import AsyncNotionTransport
from notionmark.observability import get_logger, log_event

log = get_logger("notionmark.client")


class AsyncNotionmarkClient:
    """Asynchronous Notion client.

    Parameters
    ----------
    token:
        Notion integration token.
    transport:
        Optional ``httpx`` transport forwarded to the HTTP client.
    **kwargs:
        Forwarded to :class:`NotionmarkConfig`.
    """

    def __init__(
        self,
        token: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: Any,
    ) -> None:
        self._config = NotionmarkConfig(token=token, **kwargs)
        self._transport = AsyncNotionTransport(self._config, transport=transport)
        self._pages = AsyncPageAPI(self._transport)
        self._blocks = AsyncBlockAPI(self._transport)
        self._converter = MarkdownToNotionConverter(self._config)
        self._renderer = NotionToMarkdownRenderer(self._config)

    # ------------------------------------------------------------------
    # Export (Notion -> Markdown)
    # ------------------------------------------------------------------

    async def page_to_markdown(self, page_id: str) -> str:
        """Render a page's content, nested blocks included, as Markdown.

        Children are fetched one block at a time in document order.
        """
        blocks = await self._blocks.get_children(page_id)
        options = ConvertOptions(fetch_children=self._blocks.get_children)
        return await self._renderer.render_blocks(blocks, options)

    async def get_page_properties(self, page_id: str) -> dict[str, PropertyValue]:
        """Fetch a page and flatten its properties."""
        page = await self._pages.retrieve(page_id)
        return flatten_properties(page.get("properties"))

    async def get_page_simple(self, page_id: str) -> SimplePage:
        """Fetch a page reduced to id, URL and flattened properties."""
        return page_to_simple(await self._pages.retrieve(page_id))

    # ------------------------------------------------------------------
    # Import (Markdown -> Notion)
    # ------------------------------------------------------------------

    async def append_markdown(
        self, block_id: str, markdown: str, *, after: str | None = None,
    ) -> AppendResult:
        """Parse *markdown* and append the blocks to a page or block.

        Blocks are sent in batches of :data:`MAX_CHILDREN_PER_APPEND`, in
        order, one request at a time.  With *after*, each batch is inserted
        after the last block created by the previous one, so the blocks
        land contiguously after that child.

        Parameters
        ----------
        block_id:
            Target page or block UUID.
        markdown:
            Markdown text.
        after:
            Existing child block to insert after instead of at the end.

        Returns
        -------
        AppendResult
        """
        conversion = self._converter.convert(markdown)
        batches = _batches(conversion.blocks, MAX_CHILDREN_PER_APPEND)

        for batch in batches:
            response = await self._blocks.append_children(block_id, batch, after=after)
            if after is not None:
                after = response["results"][-1]["id"]

        log_event(
            log, logging.INFO, "Appended Markdown",
            op="append_markdown", block_id=block_id,
            blocks=len(conversion.blocks), requests=len(batches),
        )
        return AppendResult(
            blocks_appended=len(conversion.blocks),
            requests=len(batches),
            warnings=list(conversion.warnings),
        )

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the HTTP transport."""
        await self._transport.close()

    async def __aenter__(self) -> AsyncNotionmarkClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


def _batches(blocks: list[dict], size: int) -> list[list[dict]]:
    return [blocks[i:i + size] for i in range(0, len(blocks), size)]

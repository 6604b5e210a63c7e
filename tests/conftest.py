"""Shared test fixtures for the notionmark test suite."""

from __future__ import annotations

import pytest

from notionmark.config import NotionmarkConfig
from notionmark.converter.md_to_notion import MarkdownToNotionConverter
from notionmark.converter.notion_to_md import NotionToMarkdownRenderer


class RecordingMetrics:
    """MetricsHook that keeps every data point for assertions."""

    def __init__(self) -> None:
        self.increments: list[tuple[str, int, dict | None]] = []
        self.timings: list[tuple[str, float, dict | None]] = []

    def increment(self, name, value=1, tags=None):
        self.increments.append((name, value, tags))

    def timing(self, name, ms, tags=None):
        self.timings.append((name, ms, tags))

    def total(self, name: str) -> int:
        return sum(value for n, value, _ in self.increments if n == name)


class FakeChildren:
    """In-memory ``fetch_children`` capability backed by a dict.

    Records every requested id in ``calls`` so tests can check fetch order.
    """

    def __init__(self, tree: dict[str, list[dict]]) -> None:
        self.tree = tree
        self.calls: list[str] = []

    async def __call__(self, block_id: str) -> list[dict]:
        self.calls.append(block_id)
        return self.tree.get(block_id, [])


@pytest.fixture
def config() -> NotionmarkConfig:
    """Default test configuration with a dummy token."""
    return NotionmarkConfig(token="test_token_1234")


@pytest.fixture
def metrics() -> RecordingMetrics:
    return RecordingMetrics()


@pytest.fixture
def converter(config: NotionmarkConfig) -> MarkdownToNotionConverter:
    """Markdown-to-Notion converter using the default test config."""
    return MarkdownToNotionConverter(config)


@pytest.fixture
def renderer(config: NotionmarkConfig) -> NotionToMarkdownRenderer:
    """Notion-to-Markdown renderer using the default test config."""
    return NotionToMarkdownRenderer(config)


@pytest.fixture
def make_fetcher():
    """Factory for :class:`FakeChildren` capabilities."""
    return FakeChildren

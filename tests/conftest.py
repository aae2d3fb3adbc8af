"""
Fixtures for html_transformer tests.

Provides common rules, adapters and a call-recording mutation.
"""

import asyncio
from typing import List

import pytest
from bs4 import BeautifulSoup, Tag

from html_transformer import DocumentAdapter, Transformer


# ============================================================================
# HELPERS
# ============================================================================


class RecordingMutation:
    """Async mutate callable that records every node it is called with."""

    def __init__(self, delay: float = 0.0):
        self.calls: List[Tag] = []
        self.delay = delay

    async def __call__(self, node: Tag, soup: BeautifulSoup) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        self.calls.append(node)

    @property
    def call_count(self) -> int:
        return len(self.calls)


async def failing_mutation(node: Tag, soup: BeautifulSoup) -> None:
    raise RuntimeError("boom")


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def adapter():
    """DocumentAdapter with default settings."""
    return DocumentAdapter()


@pytest.fixture
def transformer():
    """Transformer with no rules."""
    return Transformer()


@pytest.fixture
def recorder():
    """Fresh RecordingMutation."""
    return RecordingMutation()

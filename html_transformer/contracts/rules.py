"""
Rules - The TransformationRule data structure.

A rule pairs CSS selectors with an asynchronous mutation:

    async def mark(node, soup):
        node["data-seen"] = "true"

    rule = TransformationRule(selectors=["h1", "h2"], mutate=mark)
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Sequence, Tuple, Union

from bs4 import BeautifulSoup, Tag


MutateFn = Callable[[Tag, BeautifulSoup], Union[Awaitable[Any], Any]]
"""Callable invoked as mutate(node, soup); usually a coroutine function."""


@dataclass(frozen=True, eq=False)
class TransformationRule:
    """
    Selectors plus the mutation applied to every node they resolve to.

    Rules compare by identity: two rules with the same selectors and
    callable are still distinct entries in a collection.
    """

    selectors: Tuple[str, ...]
    """CSS selectors, resolved in order against the current tree."""

    mutate: MutateFn
    """Called once per selector match as mutate(node, soup)."""

    name: Optional[str] = None
    """Optional label used in logs and failure reports."""

    def __post_init__(self) -> None:
        selectors: Union[str, Sequence[str]] = self.selectors
        if isinstance(selectors, str):
            selectors = (selectors,)
        selectors = tuple(selectors)
        for selector in selectors:
            if not isinstance(selector, str):
                raise TypeError(
                    f"Selectors must be strings, got {type(selector).__name__}"
                )
        if not callable(self.mutate):
            raise TypeError("mutate must be callable")
        object.__setattr__(self, "selectors", selectors)

    @property
    def label(self) -> str:
        """Name for logging; falls back to the mutate callable's name."""
        if self.name:
            return self.name
        return getattr(self.mutate, "__name__", type(self.mutate).__name__)

    def targets(self, selector: str) -> bool:
        """True if selector is one of this rule's selectors, verbatim."""
        return selector in self.selectors

    def __repr__(self) -> str:
        return f"TransformationRule(selectors={list(self.selectors)}, mutate={self.label})"

"""
Mutations - Ready-made mutate callables for TransformationRule.

Each factory returns a coroutine function taking (node, soup). All edits use
synchronous BeautifulSoup primitives, so a mutation never suspends halfway
through changing the tree.

Usage:
    from html_transformer import mutations

    TransformationRule(selectors=[".item"], mutate=mutations.add_class("processed"))
    TransformationRule(selectors=["div"], mutate=mutations.wrap_in('<section class="wrapper"></section>'))
"""

from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .contracts.rules import MutateFn
from .core.config import settings


def _parse_fragment(markup: str) -> List:
    """Parse markup as a fragment and return its detached top-level nodes."""
    fragment = BeautifulSoup(markup, settings.FRAGMENT_PARSER)
    return [child.extract() for child in list(fragment.contents)]


def _class_list(node: Tag) -> List[str]:
    value = node.get("class")
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return list(value)


def _innermost(tag: Tag) -> Tag:
    # Descend through first element children, the way jQuery-style wrap does
    current = tag
    while True:
        child = next((c for c in current.children if isinstance(c, Tag)), None)
        if child is None:
            return current
        current = child


# =============================================================================
# TEXT AND ATTRIBUTES
# =============================================================================


def set_text(text: str) -> MutateFn:
    """Replace the node's children with a single text node."""

    async def set_text_mutation(node: Tag, soup: BeautifulSoup) -> None:
        node.string = text

    return set_text_mutation


def set_attr(name: str, value: str) -> MutateFn:
    async def set_attr_mutation(node: Tag, soup: BeautifulSoup) -> None:
        node[name] = value

    return set_attr_mutation


def remove_attr(name: str) -> MutateFn:
    async def remove_attr_mutation(node: Tag, soup: BeautifulSoup) -> None:
        if name in node.attrs:
            del node[name]

    return remove_attr_mutation


def add_class(*classes: str) -> MutateFn:
    """Append classes not already present, keeping existing order."""

    async def add_class_mutation(node: Tag, soup: BeautifulSoup) -> None:
        current = _class_list(node)
        for cls in classes:
            if cls not in current:
                current.append(cls)
        node["class"] = current

    return add_class_mutation


def remove_class(*classes: str) -> MutateFn:
    """Remove classes; drops the attribute when nothing is left."""

    async def remove_class_mutation(node: Tag, soup: BeautifulSoup) -> None:
        remaining = [c for c in _class_list(node) if c not in classes]
        if remaining:
            node["class"] = remaining
        elif "class" in node.attrs:
            del node["class"]

    return remove_class_mutation


# =============================================================================
# TREE STRUCTURE
# =============================================================================


def append_html(markup: str) -> MutateFn:
    """Parse markup and append it as the node's last children."""

    async def append_html_mutation(node: Tag, soup: BeautifulSoup) -> None:
        for child in _parse_fragment(markup):
            node.append(child)

    return append_html_mutation


def prepend_html(markup: str) -> MutateFn:
    """Parse markup and insert it before the node's first child."""

    async def prepend_html_mutation(node: Tag, soup: BeautifulSoup) -> None:
        for index, child in enumerate(_parse_fragment(markup)):
            node.insert(index, child)

    return prepend_html_mutation


def wrap_in(markup: str) -> MutateFn:
    """
    Wrap the node in the first element of markup.

    For nested wrappers the node goes inside the innermost first element,
    e.g. '<div><span></span></div>' puts the node inside the span.

    Raises (when applied):
        ValueError: markup contains no element
    """

    async def wrap_in_mutation(node: Tag, soup: BeautifulSoup) -> None:
        wrapper: Optional[Tag] = next(
            (n for n in _parse_fragment(markup) if isinstance(n, Tag)), None
        )
        if wrapper is None:
            raise ValueError(f"No element to wrap with in {markup!r}")
        node.replace_with(wrapper)
        _innermost(wrapper).append(node)

    return wrap_in_mutation


def replace_with_html(markup: str) -> MutateFn:
    """Replace the node with the parsed markup."""

    async def replace_with_html_mutation(node: Tag, soup: BeautifulSoup) -> None:
        replacements = _parse_fragment(markup)
        if replacements:
            node.replace_with(*replacements)
        else:
            node.extract()

    return replace_with_html_mutation


def remove_node() -> MutateFn:
    """Remove the node and its subtree from the document."""

    async def remove_node_mutation(node: Tag, soup: BeautifulSoup) -> None:
        node.decompose()

    return remove_node_mutation

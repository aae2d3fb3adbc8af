"""
Inputs - Tagged union over the document shapes accepted by transform().

    TreeInput    an already-parsed BeautifulSoup, used as-is
    TextInput    markup as str
    BufferInput  markup as bytes, decoded before parsing
    StreamInput  a byte source drained completely before parsing

coerce_input() maps a raw Python value onto its variant once, at the public
edge. Everything downstream dispatches on the variant type.
"""

from dataclasses import dataclass
from typing import Any, AsyncIterable, Iterable, Union

from bs4 import BeautifulSoup


@dataclass(frozen=True)
class TreeInput:
    """An existing tree; mutated in place by transform()."""

    soup: BeautifulSoup


@dataclass(frozen=True)
class TextInput:
    """Markup already decoded to text."""

    text: str


@dataclass(frozen=True)
class BufferInput:
    """Raw markup bytes."""

    data: bytes


@dataclass(frozen=True)
class StreamInput:
    """
    A streaming byte source.

    Accepted sources:
    - async iterables of chunks (async generators, aiofiles handles, ...)
    - sync iterables of chunks (lists, generators)
    - binary file-like objects exposing read()

    Chunks may be bytes-like or str; str chunks are encoded with the
    configured encoding so concatenation stays byte-exact.
    """

    source: Any


DocumentSource = Union[TreeInput, TextInput, BufferInput, StreamInput]

RawInput = Union[
    DocumentSource,
    BeautifulSoup,
    str,
    bytes,
    bytearray,
    memoryview,
    AsyncIterable[Any],
    Iterable[Any],
]


def coerce_input(raw: RawInput) -> DocumentSource:
    """
    Wrap a raw input value in its DocumentSource variant.

    Args:
        raw: A variant instance (returned unchanged) or a BeautifulSoup,
             str, bytes-like, async/sync iterable or readable object

    Returns:
        The matching DocumentSource variant

    Raises:
        TypeError: If raw is none of the accepted shapes
    """
    if isinstance(raw, (TreeInput, TextInput, BufferInput, StreamInput)):
        return raw
    if isinstance(raw, BeautifulSoup):
        return TreeInput(raw)
    if isinstance(raw, str):
        return TextInput(raw)
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return BufferInput(bytes(raw))
    if (
        hasattr(raw, "__aiter__")
        or hasattr(raw, "read")
        or hasattr(raw, "__iter__")
    ):
        return StreamInput(raw)
    raise TypeError(f"Unsupported transform input: {type(raw).__name__}")

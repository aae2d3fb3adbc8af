"""
DocumentAdapter - Turns any accepted input shape into a BeautifulSoup tree.

Parsing, selector matching and serialization belong to BeautifulSoup; this
module only normalizes input and forwards configuration:

- TreeInput is returned as-is (no copy)
- TextInput is parsed directly
- BufferInput is decoded, then parsed
- StreamInput is drained in chunk order into one buffer, decoded, then parsed

Usage:
    adapter = DocumentAdapter()
    soup = await adapter.load(coerce_input(raw_html), is_document=False)
    html = adapter.serialize(soup)
"""

import asyncio
import inspect
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from bs4 import BeautifulSoup
from bs4.dammit import EntitySubstitution
from bs4.formatter import Formatter, HTMLFormatter

from ..contracts.errors import ParseFailure, StreamReadFailure, TransformError
from ..contracts.inputs import (
    BufferInput,
    DocumentSource,
    StreamInput,
    TextInput,
    TreeInput,
)
from ..core.config import settings


logger = logging.getLogger(__name__)


SOURCE_ORDER = "source-order"


class SourceOrderFormatter(HTMLFormatter):
    """
    HTML output that leaves the document as parsed.

    bs4's named formatters sort attributes and the "html" ones turn non-ASCII
    characters into named entities. This one keeps attributes in source
    order, escapes only &, < and >, and renders void elements as <br>.
    """

    def __init__(self):
        super().__init__(
            entity_substitution=EntitySubstitution.substitute_xml,
            void_element_close_prefix=None,
            empty_attributes_are_booleans=True,
        )

    def attributes(self, tag):
        if tag.attrs is None:
            return []
        return [
            (key, None if self.empty_attributes_are_booleans and value == "" else value)
            for key, value in tag.attrs.items()
        ]


def resolve_formatter(formatter: Union[str, Formatter]) -> Union[str, Formatter]:
    """Map SOURCE_ORDER to a SourceOrderFormatter; pass anything else to bs4."""
    if formatter == SOURCE_ORDER:
        return SourceOrderFormatter()
    return formatter


class DocumentAdapter:
    """
    Normalizes input into a BeautifulSoup tree and serializes it back.

    Parse mode:
    - is_document=True parses with the document builder (html5lib), which
      synthesizes missing <html>/<head>/<body>
    - is_document=False parses with the fragment builder (html.parser)
    - is_document=None leaves the choice to settings.DEFAULT_IS_DOCUMENT
    """

    def __init__(
        self,
        encoding: Optional[str] = None,
        document_parser: Optional[str] = None,
        fragment_parser: Optional[str] = None,
        formatter: Optional[Union[str, Formatter]] = None,
        chunk_size: Optional[int] = None,
    ):
        """
        Initialize the adapter.

        Args:
            encoding: Text encoding for bytes and streams
            document_parser: bs4 tree builder for document mode
            fragment_parser: bs4 tree builder for fragment mode
            formatter: "source-order", a bs4 formatter name, or a Formatter
            chunk_size: read() size for file-like stream sources
        """
        self._encoding = encoding or settings.DEFAULT_ENCODING
        self._document_parser = document_parser or settings.DOCUMENT_PARSER
        self._fragment_parser = fragment_parser or settings.FRAGMENT_PARSER
        self._formatter = resolve_formatter(formatter or settings.OUTPUT_FORMATTER)
        self._chunk_size = chunk_size or settings.STREAM_CHUNK_SIZE

    @property
    def encoding(self) -> str:
        return self._encoding

    # =========================================================================
    # LOADING
    # =========================================================================

    async def load(
        self,
        source: DocumentSource,
        parse_options: Optional[Mapping[str, Any]] = None,
        is_document: Optional[bool] = None,
    ) -> BeautifulSoup:
        """
        Produce exactly one tree from a DocumentSource.

        Args:
            source: One of the DocumentSource variants
            parse_options: Keyword arguments forwarded verbatim to BeautifulSoup
            is_document: Full-document vs fragment parsing; None means unset

        Returns:
            The parsed (or supplied) BeautifulSoup tree

        Raises:
            ParseFailure: Decoding or parsing failed
            StreamReadFailure: The stream source failed mid-drain
        """
        if isinstance(source, TreeInput):
            if parse_options or is_document is not None:
                logger.debug("Parse options ignored for an already-parsed tree")
            return source.soup

        if isinstance(source, TextInput):
            return self.parse(source.text, parse_options, is_document)

        if isinstance(source, BufferInput):
            text = self.decode(source.data)
            return self.parse(text, parse_options, is_document)

        if isinstance(source, StreamInput):
            data = await self.drain(source.source)
            text = self.decode(data)
            return self.parse(text, parse_options, is_document)

        raise TypeError(f"Unsupported document source: {type(source).__name__}")

    def parse(
        self,
        markup: str,
        parse_options: Optional[Mapping[str, Any]] = None,
        is_document: Optional[bool] = None,
    ) -> BeautifulSoup:
        """
        Parse markup with BeautifulSoup.

        A "features" key in parse_options overrides the builder picked from
        is_document; every other key is passed through untouched.
        """
        options: Dict[str, Any] = dict(parse_options) if parse_options else {}
        if is_document is None:
            is_document = settings.DEFAULT_IS_DOCUMENT

        features = options.pop("features", None)
        if features is None:
            features = self._document_parser if is_document else self._fragment_parser

        try:
            soup = BeautifulSoup(markup, features, **options)
        except Exception as e:
            raise ParseFailure(f"Failed to parse input with {features}: {e}", cause=e) from e

        logger.debug(
            f"Parsed {len(markup)} chars with {features} "
            f"({'document' if is_document else 'fragment'} mode)"
        )
        return soup

    def decode(self, data: bytes) -> str:
        """Decode bytes strictly; malformed sequences raise ParseFailure."""
        try:
            return data.decode(self._encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise ParseFailure(f"Failed to decode input as {self._encoding}: {e}", cause=e) from e

    async def drain(self, source: Any) -> bytes:
        """
        Read a stream source to exhaustion.

        Chunks are concatenated in arrival order with nothing inserted
        between them. The source is consumed.

        Raises:
            StreamReadFailure: The source raised or yielded a non-bytes chunk
        """
        chunks: List[bytes] = []
        try:
            if hasattr(source, "__aiter__"):
                async for chunk in source:
                    chunks.append(self._to_bytes(chunk))
            elif hasattr(source, "read"):
                while True:
                    chunk = source.read(self._chunk_size)
                    if inspect.isawaitable(chunk):
                        chunk = await chunk
                    if not chunk:
                        break
                    chunks.append(self._to_bytes(chunk))
                    await asyncio.sleep(0)
            else:
                for chunk in source:
                    chunks.append(self._to_bytes(chunk))
                    await asyncio.sleep(0)
        except TransformError:
            raise
        except Exception as e:
            raise StreamReadFailure(
                f"Stream failed after {len(chunks)} chunk(s): {e}",
                chunks_read=len(chunks),
                cause=e,
            ) from e

        logger.debug(f"Drained {len(chunks)} chunk(s) from stream")
        return b"".join(chunks)

    def _to_bytes(self, chunk: Any) -> bytes:
        if isinstance(chunk, (bytes, bytearray, memoryview)):
            return bytes(chunk)
        if isinstance(chunk, str):
            return chunk.encode(self._encoding)
        raise TypeError(f"Stream yielded unsupported chunk type {type(chunk).__name__}")

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def serialize(self, soup: BeautifulSoup) -> str:
        """Render the whole tree back to a string."""
        return soup.decode(formatter=self._formatter)

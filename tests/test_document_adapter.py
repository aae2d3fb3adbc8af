"""
Tests for DocumentAdapter.

Covers input normalization, stream draining, parse configuration and
serialization.
"""

import io
from unittest.mock import patch

import pytest
from bs4 import BeautifulSoup

from html_transformer import (
    BufferInput,
    DocumentAdapter,
    ParseFailure,
    StreamInput,
    StreamReadFailure,
    TextInput,
    TreeInput,
    coerce_input,
)
from html_transformer.adapters import document_adapter as adapter_module
from html_transformer.adapters.document_adapter import SourceOrderFormatter


# ============================================================================
# INPUT COERCION
# ============================================================================


class TestCoerceInput:
    """Raw values map onto exactly one DocumentSource variant."""

    def test_soup_becomes_tree_input(self):
        soup = BeautifulSoup("<p>x</p>", "html.parser")
        source = coerce_input(soup)

        assert isinstance(source, TreeInput)
        assert source.soup is soup

    def test_str_becomes_text_input(self):
        assert coerce_input("<p>x</p>") == TextInput("<p>x</p>")

    @pytest.mark.parametrize("raw", [b"<p>x</p>", bytearray(b"<p>x</p>"), memoryview(b"<p>x</p>")])
    def test_bytes_like_becomes_buffer_input(self, raw):
        assert coerce_input(raw) == BufferInput(b"<p>x</p>")

    def test_iterables_and_readers_become_stream_input(self):
        reader = io.BytesIO(b"<p>x</p>")

        assert isinstance(coerce_input([b"<p>", b"x</p>"]), StreamInput)
        assert coerce_input(reader).source is reader

    def test_variant_passes_through(self):
        source = TextInput("<p>x</p>")

        assert coerce_input(source) is source

    def test_unsupported_type_raises(self):
        with pytest.raises(TypeError):
            coerce_input(42)


# ============================================================================
# LOADING
# ============================================================================


class TestLoad:
    """load() produces one tree per source."""

    @pytest.mark.asyncio
    async def test_tree_input_is_not_copied(self, adapter):
        soup = BeautifulSoup("<p>x</p>", "html.parser")

        assert await adapter.load(TreeInput(soup)) is soup

    @pytest.mark.asyncio
    async def test_text_input(self, adapter):
        soup = await adapter.load(TextInput("<p>hello</p>"), is_document=False)

        assert soup.p.string == "hello"

    @pytest.mark.asyncio
    async def test_buffer_input_decoded(self, adapter):
        soup = await adapter.load(BufferInput("<p>café</p>".encode("utf-8")), is_document=False)

        assert soup.p.string == "café"

    @pytest.mark.asyncio
    async def test_buffer_with_custom_encoding(self):
        adapter = DocumentAdapter(encoding="latin-1")

        soup = await adapter.load(BufferInput("<p>café</p>".encode("latin-1")), is_document=False)

        assert soup.p.string == "café"

    @pytest.mark.asyncio
    async def test_malformed_bytes_raise_parse_failure(self, adapter):
        with pytest.raises(ParseFailure) as exc_info:
            await adapter.load(BufferInput(b"\xff\xfe<p>x</p>"))

        assert isinstance(exc_info.value.cause, UnicodeDecodeError)

    @pytest.mark.asyncio
    async def test_unknown_parser_raises_parse_failure(self, adapter):
        with pytest.raises(ParseFailure):
            await adapter.load(TextInput("<p>x</p>"), parse_options={"features": "no-such-parser"})


# ============================================================================
# STREAM DRAINING
# ============================================================================


class TestDrain:
    """Streams are drained fully, in order, with nothing inserted."""

    @pytest.mark.asyncio
    async def test_async_chunks_joined_in_order(self, adapter):
        async def chunks():
            yield b"<p>ca"
            yield "fé".encode("utf-8")[:2]
            yield "fé".encode("utf-8")[2:] + b"</p>"

        soup = await adapter.load(StreamInput(chunks()), is_document=False)

        assert soup.p.string == "café"

    @pytest.mark.asyncio
    async def test_sync_iterable_of_str_chunks(self, adapter):
        data = await adapter.drain(["<div>", "Test", "</div>"])

        assert data == b"<div>Test</div>"

    @pytest.mark.asyncio
    async def test_file_like_read_in_chunks(self):
        adapter = DocumentAdapter(chunk_size=3)

        data = await adapter.drain(io.BytesIO(b"<section>abc</section>"))

        assert data == b"<section>abc</section>"

    @pytest.mark.asyncio
    async def test_source_is_consumed(self, adapter):
        stream = iter([b"<p>", b"x</p>"])

        await adapter.drain(stream)

        assert list(stream) == []

    @pytest.mark.asyncio
    async def test_error_mid_stream_raises_stream_read_failure(self, adapter):
        async def broken():
            yield b"<p>partial"
            raise ConnectionResetError("peer went away")

        with pytest.raises(StreamReadFailure) as exc_info:
            await adapter.load(StreamInput(broken()))

        assert exc_info.value.chunks_read == 1
        assert isinstance(exc_info.value.cause, ConnectionResetError)

    @pytest.mark.asyncio
    async def test_bad_chunk_type_raises_stream_read_failure(self, adapter):
        with pytest.raises(StreamReadFailure):
            await adapter.drain([b"<p>", 7])


# ============================================================================
# PARSE CONFIGURATION
# ============================================================================


class TestParse:
    """Parse mode selection and option pass-through."""

    def test_fragment_mode_has_no_wrappers(self, adapter):
        soup = adapter.parse("<p>x</p>", is_document=False)

        assert soup.html is None
        assert adapter.serialize(soup) == "<p>x</p>"

    def test_document_mode_synthesizes_wrappers(self, adapter):
        soup = adapter.parse("<p>x</p>", is_document=True)

        assert soup.html is not None
        assert soup.head is not None
        assert soup.body.p.string == "x"

    def test_unset_mode_uses_configured_default(self, adapter):
        with patch.object(adapter_module.settings, "DEFAULT_IS_DOCUMENT", False):
            soup = adapter.parse("<p>x</p>")

        assert soup.html is None

    def test_options_forwarded_verbatim(self, adapter):
        with patch.object(adapter_module, "BeautifulSoup", wraps=BeautifulSoup) as spy:
            adapter.parse("<h1>Title</h1>", {"multi_valued_attributes": None}, False)

        spy.assert_called_once_with("<h1>Title</h1>", "html.parser", multi_valued_attributes=None)

    def test_options_change_parse_behaviour(self, adapter):
        soup = adapter.parse('<p class="a b">x</p>', {"multi_valued_attributes": None}, False)

        assert soup.p["class"] == "a b"

    def test_features_option_overrides_mode(self, adapter):
        soup = adapter.parse("<p>x</p>", {"features": "html.parser"}, True)

        assert soup.html is None

    def test_caller_options_not_mutated(self, adapter):
        options = {"features": "html.parser"}

        adapter.parse("<p>x</p>", options)

        assert options == {"features": "html.parser"}


# ============================================================================
# SERIALIZATION
# ============================================================================


class TestSerialize:
    """serialize() renders the tree with the configured formatter."""

    def test_void_elements_without_slash(self, adapter):
        soup = adapter.parse('<p>a<br>b<img src="x.png"></p>', is_document=False)

        assert adapter.serialize(soup) == '<p>a<br>b<img src="x.png"></p>'

    def test_unmutated_tree_serializes_identically_twice(self, adapter):
        soup = adapter.parse("<ul><li>1</li><li>2</li></ul>")

        assert adapter.serialize(soup) == adapter.serialize(soup)

    def test_custom_formatter(self):
        adapter = DocumentAdapter(formatter="minimal")
        soup = adapter.parse("<p>a<br>b</p>", is_document=False)

        assert adapter.serialize(soup) == "<p>a<br/>b</p>"

    def test_attributes_keep_source_order(self, adapter):
        html = '<div id="a" class="b" data-x="1"><meta name="description" content="c"></div>'
        soup = adapter.parse(html, is_document=False)

        assert adapter.serialize(soup) == html

    def test_non_ascii_is_not_turned_into_entities(self, adapter):
        html = "<p>café – naïve &amp; &lt;tag&gt;</p>"
        soup = adapter.parse(html, is_document=False)

        assert adapter.serialize(soup) == html

    def test_empty_attributes_render_as_booleans(self, adapter):
        soup = adapter.parse('<input type="checkbox" checked>', is_document=False)

        assert adapter.serialize(soup) == '<input type="checkbox" checked>'

    def test_formatter_instance_accepted(self):
        adapter = DocumentAdapter(formatter=SourceOrderFormatter())
        soup = adapter.parse('<a title="t" href="/x">x</a>', is_document=False)

        assert adapter.serialize(soup) == '<a title="t" href="/x">x</a>'

"""
Configuration module - centralized settings for html_transformer.
Uses pydantic-settings to load values from environment variables and .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Transformer settings loaded from environment variables.

    Pydantic-settings automatically:
    1. Reads from environment variables (HTML_TRANSFORMER_ prefix)
    2. Falls back to .env file values
    3. Uses default values if neither exists

    To override:
        export HTML_TRANSFORMER_DOCUMENT_PARSER=lxml
        export HTML_TRANSFORMER_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="HTML_TRANSFORMER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------------------------------------------------------------------------
    # INPUT DECODING
    # ---------------------------------------------------------------------------
    # DEFAULT_ENCODING: Used for bytes and streamed input before parsing
    DEFAULT_ENCODING: str = "utf-8"

    # STREAM_CHUNK_SIZE: Bytes per read() when draining a file-like source
    STREAM_CHUNK_SIZE: int = 64 * 1024

    # ---------------------------------------------------------------------------
    # PARSING
    # ---------------------------------------------------------------------------
    # DOCUMENT_PARSER: Tree builder for full documents
    # - html5lib synthesizes missing <html>/<head>/<body> like a browser
    DOCUMENT_PARSER: str = "html5lib"

    # FRAGMENT_PARSER: Tree builder for fragments (no wrapper synthesis)
    FRAGMENT_PARSER: str = "html.parser"

    # DEFAULT_IS_DOCUMENT: Mode used when a caller leaves is_document unset
    DEFAULT_IS_DOCUMENT: bool = True

    # ---------------------------------------------------------------------------
    # SERIALIZATION
    # ---------------------------------------------------------------------------
    # OUTPUT_FORMATTER: "source-order" or any BeautifulSoup formatter name
    # - "source-order" keeps attribute order, renders <br> and escapes only &, <, >
    # - bs4's named formatters ("html5", "minimal", ...) sort attributes
    OUTPUT_FORMATTER: str = "source-order"

    # ---------------------------------------------------------------------------
    # LOGGING
    # ---------------------------------------------------------------------------
    LOG_LEVEL: str = "WARNING"


# Usage: from html_transformer.core.config import settings
settings = Settings()

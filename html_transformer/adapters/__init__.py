"""Adapters between raw input and the BeautifulSoup document tree."""

from .document_adapter import DocumentAdapter

__all__ = ["DocumentAdapter"]

"""
Errors - Exception taxonomy for html_transformer.

Call-level failures (abort transform):
- ParseFailure: input could not be decoded or parsed
- StreamReadFailure: a streamed source failed while being drained

Rule-level failures (recorded, never abort transform):
- SelectorResolutionFailure: a selector was rejected by the selector engine
- MutationFailure: a rule's mutate callable raised for one node
"""

from typing import Any, Optional


class TransformError(Exception):
    """Base class for every error raised by html_transformer."""


class ParseFailure(TransformError):
    """Input could not be decoded or parsed into a document tree."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class StreamReadFailure(TransformError):
    """The stream source raised before it was fully drained."""

    def __init__(
        self,
        message: str,
        chunks_read: int = 0,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.chunks_read = chunks_read
        self.cause = cause


class SelectorResolutionFailure(TransformError):
    """A selector string could not be resolved against the tree."""

    def __init__(self, selector: str, cause: Optional[BaseException] = None):
        super().__init__(f"Invalid selector '{selector}': {cause}")
        self.selector = selector
        self.cause = cause


class MutationFailure(TransformError):
    """A rule's mutate callable failed for a single node."""

    def __init__(
        self,
        selector: str,
        node: Any,
        cause: BaseException,
        rule_name: Optional[str] = None,
    ):
        node_name = getattr(node, "name", None) or type(node).__name__
        super().__init__(
            f"Rule {rule_name or '<anonymous>'} failed on <{node_name}> "
            f"matched by '{selector}': {cause}"
        )
        self.selector = selector
        self.node = node
        self.cause = cause
        self.rule_name = rule_name

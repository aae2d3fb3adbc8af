"""
html_transformer - Apply declarative CSS-selector rules to HTML documents.

Usage:
    from html_transformer import Transformer, TransformationRule, mutations

    transformer = Transformer([
        TransformationRule(selectors=["h1"], mutate=mutations.set_text("Hello")),
    ])
    html = await transformer.transform("<h1>Original</h1>")
"""

from . import mutations
from .adapters import DocumentAdapter
from .contracts import (
    BufferInput,
    DocumentSource,
    MutationFailure,
    ParseFailure,
    RuleOutcome,
    SelectorResolutionFailure,
    StreamInput,
    StreamReadFailure,
    TextInput,
    TransformationRule,
    TransformError,
    TransformResult,
    TreeInput,
    coerce_input,
)
from .engine import RuleCollection, Transformer, apply_rules

__all__ = [
    "mutations",
    "DocumentAdapter",
    "BufferInput",
    "DocumentSource",
    "MutationFailure",
    "ParseFailure",
    "RuleOutcome",
    "SelectorResolutionFailure",
    "StreamInput",
    "StreamReadFailure",
    "TextInput",
    "TransformationRule",
    "TransformError",
    "TransformResult",
    "TreeInput",
    "coerce_input",
    "RuleCollection",
    "Transformer",
    "apply_rules",
]

"""
Contracts - Data structures for html_transformer.

Provides:
- TransformationRule: selectors plus an async mutation
- DocumentSource variants: the accepted input shapes
- RuleOutcome / TransformResult: what a run did
- The error taxonomy
"""

from .errors import (
    TransformError,
    ParseFailure,
    StreamReadFailure,
    SelectorResolutionFailure,
    MutationFailure,
)
from .inputs import (
    TreeInput,
    TextInput,
    BufferInput,
    StreamInput,
    DocumentSource,
    coerce_input,
)
from .results import RuleOutcome, TransformResult
from .rules import TransformationRule, MutateFn

__all__ = [
    "TransformError",
    "ParseFailure",
    "StreamReadFailure",
    "SelectorResolutionFailure",
    "MutationFailure",
    "TreeInput",
    "TextInput",
    "BufferInput",
    "StreamInput",
    "DocumentSource",
    "coerce_input",
    "RuleOutcome",
    "TransformResult",
    "TransformationRule",
    "MutateFn",
]

"""Doc-comment parsing stages: blocks, classification, signatures, references."""

from .blocks import Line, RawBlock, iter_blocks, tokenize
from .classifier import ClassifiedLine, LineKind, classify
from .references import extract_references, resolve_references
from .signature import (
    MalformedSignature,
    Signature,
    format_parameters,
    format_signature,
    parse_signature,
)

__all__ = [
    "ClassifiedLine",
    "Line",
    "LineKind",
    "MalformedSignature",
    "RawBlock",
    "Signature",
    "classify",
    "extract_references",
    "format_parameters",
    "format_signature",
    "iter_blocks",
    "parse_signature",
    "resolve_references",
    "tokenize",
]

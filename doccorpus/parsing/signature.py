"""Parsing and formatting of documentation signature lines.

A signature line declares a callable in one of these shapes::

    new ReferenceError([message][, fileName][, lineNumber])
    tty.getWindowSize(fd) -> Array
    zlib#gzip(buf, callback(error, result))

Square brackets mark optional parameters and may nest (``a[, b[, c]]``).
Parentheses inside the parameter list introduce a callback's argument names.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import EntityKind, ParamSpec

_HEAD_PATTERN = re.compile(
    r"^(?P<new>new\s+)?(?P<path>[A-Za-z_$][\w$]*(?:[.#][A-Za-z_$][\w$]*)*)\s*\("
)
_PARAM_NAME_PATTERN = re.compile(r"^(?:\.\.\.)?[A-Za-z_$][\w$]*$")
_MAX_CALLBACK_NESTING = 16


class MalformedSignature(ValueError):
    """Raised when a signature line cannot be parsed."""

    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"{reason}: {text!r}")
        self.text = text
        self.reason = reason


@dataclass
class Signature:
    """Structured form of one signature line."""

    name: str
    kind: EntityKind
    qualifier: Optional[str] = None
    separator: Optional[str] = None
    parameters: List[ParamSpec] = field(default_factory=list)
    returns: Optional[str] = None

    @property
    def path(self) -> str:
        """Qualified callable path such as ``tty.isatty`` or ``zlib#gzip``."""
        if self.qualifier:
            return f"{self.qualifier}{self.separator}{self.name}"
        return self.name


def parse_signature(text: str) -> Signature:
    """Parse ``text`` into a :class:`Signature` or raise :class:`MalformedSignature`."""
    line = text.strip()
    match = _HEAD_PATTERN.match(line)
    if match is None:
        raise MalformedSignature(line, "not a signature")

    open_index = match.end() - 1
    close_index = _find_closing_paren(line, open_index)
    if close_index is None:
        raise MalformedSignature(line, "unbalanced parentheses")

    parameters = _parse_parameters(line[open_index + 1 : close_index], line)

    rest = line[close_index + 1 :].strip()
    returns: Optional[str] = None
    if rest:
        if not rest.startswith("->"):
            raise MalformedSignature(line, f"unexpected text after parameter list {rest!r}")
        returns = rest[2:].strip()
        if not returns:
            raise MalformedSignature(line, "missing return type after '->'")
        if returns.count("(") != returns.count(")"):
            raise MalformedSignature(line, "unbalanced parentheses in return type")

    path = match.group("path")
    qualifier: Optional[str] = None
    separator: Optional[str] = None
    name = path
    split_at = max(path.rfind("."), path.rfind("#"))
    if split_at != -1:
        qualifier = path[:split_at]
        separator = path[split_at]
        name = path[split_at + 1 :]

    kind = EntityKind.CONSTRUCTOR if match.group("new") else EntityKind.METHOD
    return Signature(
        name=name,
        kind=kind,
        qualifier=qualifier,
        separator=separator,
        parameters=parameters,
        returns=returns,
    )


def format_signature(signature: Signature) -> str:
    """Render ``signature`` back to its canonical line form."""
    prefix = "new " if signature.kind is EntityKind.CONSTRUCTOR else ""
    text = f"{prefix}{signature.path}({format_parameters(signature.parameters)})"
    if signature.returns:
        text = f"{text} -> {signature.returns}"
    return text


def format_parameters(parameters: List[ParamSpec]) -> str:
    """Render a parameter list, restoring its optional-bracket layout."""
    parts: List[str] = []
    current = 0
    for index, param in enumerate(parameters):
        base = param.depth - param.opens
        if current > base:
            parts.append("]" * (current - base))
        parts.append("[" * param.opens)
        if index:
            parts.append(", ")
        parts.append(_format_parameter(param))
        current = param.depth
    parts.append("]" * current)
    return "".join(parts)


def _format_parameter(param: ParamSpec) -> str:
    text = param.name
    if param.parameters is not None:
        text = f"{text}({format_parameters(param.parameters)})"
    if param.default is not None:
        text = f"{text} = {param.default}"
    return text


def _find_closing_paren(text: str, open_index: int) -> Optional[int]:
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return None


def _parse_parameters(inner: str, line: str, nesting: int = 0) -> List[ParamSpec]:
    if nesting > _MAX_CALLBACK_NESTING:
        raise MalformedSignature(line, "callback parameters nested too deeply")
    params: List[ParamSpec] = []
    token: List[str] = []
    token_depth = 0
    token_opens = 0
    paren_depth = 0
    bracket_depth = 0
    pending_opens = 0
    separators = 0

    def _flush() -> None:
        raw = "".join(token).strip()
        if not raw:
            raise MalformedSignature(line, "empty parameter")
        params.append(_parse_parameter(raw, line, token_depth, token_opens, nesting))
        token.clear()

    for char in inner:
        if paren_depth:
            token.append(char)
            if char == "(":
                paren_depth += 1
            elif char == ")":
                paren_depth -= 1
            continue
        if char == "[":
            bracket_depth += 1
            pending_opens += 1
        elif char == "]":
            if bracket_depth == 0:
                raise MalformedSignature(line, "unbalanced brackets")
            bracket_depth -= 1
        elif char == ",":
            separators += 1
            _flush()
        elif char.isspace() and not token:
            continue
        else:
            if not token:
                token_depth = bracket_depth
                token_opens = pending_opens
                pending_opens = 0
            if char == "(":
                paren_depth += 1
            token.append(char)

    if bracket_depth:
        raise MalformedSignature(line, "unbalanced brackets")
    if token or separators:
        _flush()
    return params


def _parse_parameter(
    raw: str, line: str, depth: int, opens: int, nesting: int
) -> ParamSpec:
    default: Optional[str] = None
    if "=" in raw and "(" not in raw.split("=", 1)[0]:
        raw, default = (part.strip() for part in raw.split("=", 1))
        if not default:
            raise MalformedSignature(line, "empty default value")

    nested: Optional[List[ParamSpec]] = None
    name = raw
    if "(" in raw:
        open_index = raw.index("(")
        if not raw.endswith(")") or _find_closing_paren(raw, open_index) != len(raw) - 1:
            raise MalformedSignature(line, f"unparsable parameter {raw!r}")
        name = raw[:open_index].strip()
        nested = _parse_parameters(raw[open_index + 1 : -1], line, nesting + 1)

    if not _PARAM_NAME_PATTERN.match(name):
        raise MalformedSignature(line, f"unparsable parameter {raw!r}")
    return ParamSpec(
        name=name,
        optional=depth > 0,
        default=default,
        parameters=nested,
        depth=depth,
        opens=opens,
    )


__all__ = [
    "MalformedSignature",
    "Signature",
    "format_parameters",
    "format_signature",
    "parse_signature",
]

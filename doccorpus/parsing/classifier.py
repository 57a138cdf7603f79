"""Rule-based classification of tokenized comment lines."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional

from .blocks import Line
from .signature import MalformedSignature, parse_signature

_CLASS_PATTERN = re.compile(
    r"^class\s+(?P<name>[A-Za-z_$][\w$.]*)(?:\s*<\s*(?P<superclass>[A-Za-z_$][\w$.]*))?\s*$"
)
_SECTION_TAG_PATTERN = re.compile(r"^section:\s*(?P<title>\S.*)$")
_HEADING_PATTERN = re.compile(r"^(?P<level>#{1,6})\s+(?P<title>\S.*)$")
_SIGNATURE_HEAD_PATTERN = re.compile(
    r"^(?:new\s+)?[A-Za-z_$][\w$]*(?:[.#][A-Za-z_$][\w$]*)*\s*\("
)
_BULLET_PATTERN = re.compile(
    r"^-\s+(?P<name>(?:\.\.\.)?[A-Za-z_$][\w$.]*)\s*"
    r"(?:\((?P<type>[^)]*)\))?\s*(?::\s*(?P<description>.*))?$"
)


class LineKind(str, Enum):
    """Tags assigned to comment lines."""

    CLASS_HEADER = "class_header"
    SECTION_HEADER = "section_header"
    SIGNATURE = "signature"
    PARAM_BULLET = "param_bullet"
    PROSE = "prose"


@dataclass(frozen=True)
class ClassifiedLine:
    """A line with its tag and the regex match that justified it."""

    kind: LineKind
    line: Line
    match: Optional[re.Match[str]] = None

    @property
    def text(self) -> str:
        return self.line.text


def classify(lines: Iterable[Line]) -> Iterator[ClassifiedLine]:
    """Tag each line of one block.

    Ambiguous lines are tagged as prose: losing a signature is less harmful
    than turning documentation text into a bogus member.
    """
    first_content = True
    in_parameters = False
    for line in lines:
        if line.is_blank:
            yield ClassifiedLine(LineKind.PROSE, line)
            continue

        is_first = first_content
        first_content = False
        text = line.text

        if line.indent == 0:
            match = _CLASS_PATTERN.match(text)
            if match:
                in_parameters = False
                yield ClassifiedLine(LineKind.CLASS_HEADER, line, match)
                continue

            match = _SECTION_TAG_PATTERN.match(text)
            if match:
                # The tag only annotates the block; the declaration follows it.
                first_content = is_first
                in_parameters = False
                yield ClassifiedLine(LineKind.SECTION_HEADER, line, match)
                continue

            match = _HEADING_PATTERN.match(text)
            if match:
                in_parameters = False
                yield ClassifiedLine(LineKind.SECTION_HEADER, line, match)
                continue

            if _looks_like_signature(text, is_first=is_first):
                in_parameters = True
                yield ClassifiedLine(LineKind.SIGNATURE, line)
                continue

            if in_parameters:
                match = _BULLET_PATTERN.match(text)
                if match:
                    yield ClassifiedLine(LineKind.PARAM_BULLET, line, match)
                    continue

        in_parameters = False
        yield ClassifiedLine(LineKind.PROSE, line)


def _looks_like_signature(text: str, *, is_first: bool) -> bool:
    if not _SIGNATURE_HEAD_PATTERN.match(text):
        return False
    if "->" in text:
        return _looks_like_type(text.rsplit("->", 1)[1])
    if text.startswith("new "):
        return True
    # Without a return arrow only the block's leading line may declare a
    # callable, and only when it parses cleanly: `require('tty')` is prose.
    if not is_first or not text.rstrip().endswith(")"):
        return False
    try:
        parse_signature(text)
    except MalformedSignature:
        return False
    return True


def _looks_like_type(text: str) -> bool:
    # "Array", "String | Buffer"; prose after an arrow has spaced words.
    alternatives = [part.strip() for part in text.split("|")]
    return all(part and " " not in part for part in alternatives)


__all__ = ["ClassifiedLine", "LineKind", "classify"]

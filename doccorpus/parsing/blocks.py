"""Comment block extraction and line tokenization."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List

_OPENER = "/**"
_CLOSER = "*/"
_TAB_SIZE = 4


@dataclass
class RawBlock:
    """Body of one ``/** ... **/`` comment with the opener's line number."""

    start_line: int
    lines: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Line:
    """A logical comment line with its marker stripped."""

    number: int
    text: str
    indent: int = 0

    @property
    def is_blank(self) -> bool:
        return not self.text


def iter_blocks(text: str) -> Iterator[RawBlock]:
    """Yield every documentation comment block found in ``text``.

    The remainder of the opener line (``/** section: Errors``) belongs to the
    block, and one line may hold several complete blocks. A block left open at
    end of input runs to the last line.
    """
    current: RawBlock | None = None
    for number, raw in enumerate(text.splitlines(), start=1):
        rest = raw
        opened_here = False
        while True:
            if current is None:
                start = rest.find(_OPENER)
                if start == -1:
                    break
                rest = rest[start + len(_OPENER):]
                current = RawBlock(start_line=number)
                opened_here = True
            end = rest.find(_CLOSER)
            if end == -1:
                current.lines.append(rest)
                break
            body = _trim_closer(rest[:end])
            # A bare closing line adds nothing to the block body.
            if opened_here or body.strip(" *\t"):
                current.lines.append(body)
            yield current
            current = None
            rest = rest[end + len(_CLOSER):]

    if current is not None:
        yield current


def tokenize(block: RawBlock) -> Iterator[Line]:
    """Yield logical lines of ``block`` with comment markers stripped."""
    for offset, raw in enumerate(block.lines):
        expanded = raw.expandtabs(_TAB_SIZE).rstrip()
        stripped = expanded.lstrip()
        if stripped.startswith("*"):
            content = stripped[1:]
            if content.startswith(" "):
                content = content[1:]
            body = content.lstrip(" ")
            yield Line(
                number=block.start_line + offset,
                text=body,
                indent=len(content) - len(body) if body else 0,
            )
            continue
        yield Line(number=block.start_line + offset, text=stripped)


def _trim_closer(text: str) -> str:
    # "**/" closers leave a trailing star on the body.
    return text.rstrip().rstrip("*").rstrip()


__all__ = ["Line", "RawBlock", "iter_blocks", "tokenize"]

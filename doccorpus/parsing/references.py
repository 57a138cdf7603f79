"""Cross-reference extraction and render-time resolution."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import TYPE_CHECKING, List, Sequence, Tuple

from ..models import CrossReference

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..corpus import Corpus

_INTERNAL_PATTERN = re.compile(r"\[\[(?P<body>[^\[\]]+)\]\]")
_LINK_PATTERN = re.compile(r"\[(?P<label>[^\[\]]+)\]\((?P<url>[^()\s]+)\)")
_AUTOLINK_PATTERN = re.compile(r"<(?P<url>(?:https?://|mailto:)[^>\s]+)>")


def extract_references(text: str, source: str) -> List[CrossReference]:
    """Return the links found in ``text`` in order of appearance.

    ``[[target label]]`` and ``[label](#anchor)`` are internal references;
    ``[label](url)`` and ``<url>`` are external. The text is left untouched.
    """
    found: List[Tuple[int, CrossReference]] = []

    for match in _INTERNAL_PATTERN.finditer(text):
        body = match.group("body").strip()
        if not body:
            continue
        target, _, label = body.partition(" ")
        found.append(
            (
                match.start(),
                CrossReference(source=source, target=target, label=label.strip() or target),
            )
        )

    for match in _LINK_PATTERN.finditer(text):
        label = match.group("label").strip()
        url = match.group("url").strip()
        if url.startswith("#"):
            reference = CrossReference(source=source, target=url[1:], label=label)
        else:
            reference = CrossReference(source=source, target=url, label=label, external=True)
        found.append((match.start(), reference))

    for match in _AUTOLINK_PATTERN.finditer(text):
        url = match.group("url")
        found.append(
            (match.start(), CrossReference(source=source, target=url, label=url, external=True))
        )

    found.sort(key=lambda item: item[0])
    return [reference for _, reference in found]


def resolve_references(
    references: Sequence[CrossReference], corpus: "Corpus"
) -> List[CrossReference]:
    """Return copies of ``references`` with ``dangling`` set against ``corpus``."""
    resolved: List[CrossReference] = []
    for reference in references:
        if reference.external:
            resolved.append(replace(reference, dangling=False))
            continue
        found = any(corpus.knows(candidate) for candidate in _candidates(reference.target))
        resolved.append(replace(reference, dangling=not found))
    return resolved


def _candidates(target: str) -> List[str]:
    # "zlib#gzip" and "zlib.gzip" are both used to point at members.
    candidates = [target]
    for old, new in ((".", "#"), ("#", ".")):
        if old in target:
            head, _, tail = target.rpartition(old)
            candidates.append(f"{head}{new}{tail}")
    return candidates


__all__ = ["extract_references", "resolve_references"]

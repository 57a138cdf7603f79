"""Read-only corpus model and build report."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, List, Mapping, Optional, Sequence, Tuple

from .models import BuildWarning, CrossReference, DocEntity, WarningKind
from .parsing.references import resolve_references


class Corpus:
    """Immutable index of documented entities keyed by fully-qualified name."""

    def __init__(self, entities: Mapping[str, DocEntity], roots: Sequence[str]) -> None:
        self._entities: Mapping[str, DocEntity] = MappingProxyType(dict(entities))
        self._roots: Tuple[str, ...] = tuple(roots)
        self._anchors: FrozenSet[str] = frozenset(
            anchor for entity in self._entities.values() for anchor in entity.anchors
        )

    def lookup(self, fqn: str) -> Optional[DocEntity]:
        """Return the entity registered under ``fqn``, if any."""
        return self._entities.get(fqn)

    def children(self, fqn: str) -> Tuple[DocEntity, ...]:
        """Return the members of ``fqn`` in source order."""
        entity = self._entities.get(fqn)
        if entity is None:
            return ()
        return tuple(entity.members)

    def roots(self) -> Tuple[DocEntity, ...]:
        return tuple(self._entities[fqn] for fqn in self._roots)

    def knows(self, name: str) -> bool:
        """Return True when ``name`` is an entity name or a declared anchor."""
        return name in self._entities or name in self._anchors

    def references(self) -> List[CrossReference]:
        """Return every cross-reference resolved against this corpus."""
        resolved: List[CrossReference] = []
        for entity in self._entities.values():
            resolved.extend(resolve_references(entity.references, self))
        return resolved

    def dangling_references(self) -> List[CrossReference]:
        return [reference for reference in self.references() if reference.dangling]

    def __contains__(self, fqn: object) -> bool:
        return fqn in self._entities

    def __iter__(self) -> Iterator[DocEntity]:
        return iter(self._entities.values())

    def __len__(self) -> int:
        return len(self._entities)


@dataclass
class BuildReport:
    """Warnings and bookkeeping returned alongside a corpus."""

    files: List[str] = field(default_factory=list)
    warnings: List[BuildWarning] = field(default_factory=list)
    entity_count: int = 0

    def of_kind(self, kind: WarningKind) -> List[BuildWarning]:
        return [warning for warning in self.warnings if warning.kind is kind]

    def summary(self) -> Dict[str, int]:
        """Return warning counts keyed by warning kind value."""
        counts = Counter(warning.kind.value for warning in self.warnings)
        return dict(sorted(counts.items()))


@dataclass
class BuildResult:
    """A corpus and the report describing how it was built."""

    corpus: Corpus
    report: BuildReport


__all__ = ["BuildReport", "BuildResult", "Corpus"]

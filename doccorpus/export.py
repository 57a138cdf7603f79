"""JSON Lines interchange format, one record per entity."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, TextIO

from .corpus import Corpus
from .models import DocEntity, ParamSpec


def entity_to_record(entity: DocEntity) -> Dict[str, Any]:
    """Return a flat JSON-serialisable record; members are referenced by parent."""
    return {
        "fqn": entity.fqn,
        "parent": entity.parent,
        "kind": entity.kind.value,
        "name": entity.name,
        "section": entity.section,
        "superclass": entity.superclass,
        "summary": entity.summary,
        "parameters": [_param_to_dict(param) for param in entity.parameters],
        "returns": entity.returns,
        "examples": list(entity.examples),
        "sections": list(entity.sections),
        "anchors": list(entity.anchors),
        "references": [asdict(reference) for reference in entity.references],
        "source": asdict(entity.source) if entity.source else None,
    }


def iter_records(corpus: Corpus) -> Iterator[Dict[str, Any]]:
    """Yield records tree by tree so parents precede their members."""
    for root in corpus.roots():
        for entity in root.walk():
            yield entity_to_record(entity)


def write_records(corpus: Corpus, handle: TextIO) -> int:
    count = 0
    for record in iter_records(corpus):
        handle.write(json.dumps(record, sort_keys=True))
        handle.write("\n")
        count += 1
    return count


def dump_corpus(corpus: Corpus, path: Path) -> int:
    """Write ``corpus`` to ``path`` as JSON Lines and return the record count."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        return write_records(corpus, handle)


def load_records(lines: Iterable[str]) -> List[Dict[str, Any]]:
    """Parse JSON Lines produced by :func:`write_records`, skipping blank lines."""
    records: List[Dict[str, Any]] = []
    for line in lines:
        line = line.strip()
        if not line:
            continue
        payload = json.loads(line)
        if isinstance(payload, dict):
            records.append(payload)
    return records


def _param_to_dict(param: ParamSpec) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": param.name,
        "type_hint": param.type_hint,
        "optional": param.optional,
        "description": param.description,
    }
    if param.default is not None:
        data["default"] = param.default
    if param.parameters is not None:
        data["parameters"] = [_param_to_dict(nested) for nested in param.parameters]
    return data


__all__ = ["dump_corpus", "entity_to_record", "iter_records", "load_records", "write_records"]

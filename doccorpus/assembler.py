"""Fold classified comment blocks into entity trees and merge them into a corpus."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Dict, List, Optional

from .corpus import BuildReport, BuildResult, Corpus
from .logging import get_logger, log_build_warning
from .models import (
    BuildWarning,
    CrossReference,
    DocEntity,
    EntityKind,
    ParamSpec,
    SourceLocation,
    WarningKind,
)
from .parsing.blocks import Line, RawBlock, iter_blocks, tokenize
from .parsing.classifier import ClassifiedLine, LineKind, classify
from .parsing.references import extract_references
from .parsing.signature import MalformedSignature, Signature, parse_signature

_ANCHOR_PATTERN = re.compile(r"""<a\s+(?:id|name)\s*=\s*["']([^"']+)["']""", re.IGNORECASE)
_FENCE = "```"
_CODE_INDENT = 4

logger = get_logger("assembler")


@dataclass
class FileResult:
    """Entity tree and warnings produced from one source file."""

    path: str
    root: DocEntity
    warnings: List[BuildWarning] = field(default_factory=list)


@dataclass
class _Draft:
    entity: DocEntity
    prose: List[Line] = field(default_factory=list)


def assemble_file(path: str, text: str) -> FileResult:
    """Parse every comment block of one file into a single entity tree.

    A file with one ``class`` header is rooted at that class. Otherwise the
    root is a synthetic module named after the first qualified signature, or
    after the file stem. A block whose signature cannot be parsed is skipped
    as a whole and reported; the remaining blocks still contribute.
    """
    warnings: List[BuildWarning] = []
    drafts: List[_Draft] = []
    for block in iter_blocks(text):
        try:
            drafts.extend(_assemble_block(path, block))
        except MalformedSignature as exc:
            warning = BuildWarning(
                kind=WarningKind.MALFORMED_SIGNATURE,
                message=f"skipped block: {exc}",
                path=path,
                line=block.start_line,
                subject=exc.text,
            )
            log_build_warning(logger, warning)
            warnings.append(warning)

    root = _build_tree(path, drafts, warnings)
    return FileResult(path=path, root=root, warnings=warnings)


def _assemble_block(path: str, block: RawBlock) -> List[_Draft]:
    drafts: List[_Draft] = []
    current: Optional[_Draft] = None
    block_section: Optional[str] = None
    # Prose seen before any declaration belongs to whatever entity is current
    # when the file is folded together.
    orphan = _Draft(entity=DocEntity(kind=EntityKind.MODULE, name="", fqn=""))

    for classified in classify(tokenize(block)):
        kind = classified.kind
        match = classified.match
        if kind is LineKind.CLASS_HEADER and match is not None:
            current = _Draft(
                entity=DocEntity(
                    kind=EntityKind.CLASS,
                    name=match.group("name"),
                    fqn=match.group("name"),
                    superclass=match.group("superclass"),
                    section=block_section,
                    source=SourceLocation(path=path, line=classified.line.number),
                )
            )
            drafts.append(current)
        elif kind is LineKind.SIGNATURE:
            signature = parse_signature(classified.text)
            current = _Draft(entity=_entity_from_signature(signature, path, classified))
            current.entity.section = block_section
            drafts.append(current)
        elif kind is LineKind.SECTION_HEADER and match is not None:
            if "level" in match.groupdict():
                target = current or orphan
                target.entity.sections.append(match.group("title").strip())
                target.prose.append(classified.line)
            else:
                block_section = match.group("title").strip()
                for draft in drafts:
                    draft.entity.section = block_section
        elif kind is LineKind.PARAM_BULLET:
            if current is not None:
                _apply_bullet(current.entity, classified)
        else:
            (current or orphan).prose.append(classified.line)

    if orphan.prose or orphan.entity.sections:
        drafts.insert(0, orphan)
    return drafts


def _entity_from_signature(
    signature: Signature, path: str, classified: ClassifiedLine
) -> DocEntity:
    fqn = signature.path
    if signature.kind is EntityKind.CONSTRUCTOR:
        fqn = f"new {signature.path}"
    return DocEntity(
        kind=signature.kind,
        name=signature.name,
        fqn=fqn,
        parameters=signature.parameters,
        returns=signature.returns,
        source=SourceLocation(path=path, line=classified.line.number),
    )


def _apply_bullet(entity: DocEntity, classified: ClassifiedLine) -> None:
    match = classified.match
    if match is None:
        return
    name = match.group("name")
    param = _find_param(entity.parameters, name)
    if param is None:
        logger.debug("Ignoring bullet for unknown parameter %r of %s", name, entity.fqn)
        return
    type_hint = match.group("type")
    if type_hint is not None and type_hint.strip():
        param.type_hint = type_hint.strip()
    description = match.group("description")
    if description:
        param.description = description.strip()


def _find_param(parameters: Optional[List[ParamSpec]], name: str) -> Optional[ParamSpec]:
    if not parameters:
        return None
    for param in parameters:
        if param.name == name:
            return param
    for param in parameters:
        nested = _find_param(param.parameters, name)
        if nested is not None:
            return nested
    return None


def _build_tree(path: str, drafts: List[_Draft], warnings: List[BuildWarning]) -> DocEntity:
    classes = [draft for draft in drafts if draft.entity.kind is EntityKind.CLASS]
    if len(classes) == 1:
        root = classes[0].entity
    else:
        root = DocEntity(
            kind=EntityKind.MODULE,
            name=_module_name(path, drafts, use_qualifier=not classes),
            fqn="",
            source=SourceLocation(path=path, line=1),
        )
        root.fqn = root.name

    container = root
    for draft in drafts:
        entity = draft.entity
        if not entity.name:
            # Prose-only block: it documents whatever is in scope.
            _merge_prose(container, draft.prose)
            container.sections.extend(entity.sections)
            continue
        _merge_prose(entity, draft.prose)
        if entity is root:
            continue
        if entity.kind is EntityKind.CLASS:
            _attach(root, entity, warnings)
            container = entity
        else:
            if not entity.fqn.startswith("new ") and "." not in entity.fqn and "#" not in entity.fqn:
                entity.fqn = f"{container.fqn}.{entity.name}"
            _attach(container, entity, warnings)

    for entity in root.walk():
        entity.references = _collect_references(entity)
    return root


def _module_name(path: str, drafts: List[_Draft], *, use_qualifier: bool) -> str:
    if use_qualifier:
        for draft in drafts:
            fqn = draft.entity.fqn
            if fqn.startswith("new "):
                fqn = fqn[4:]
            head = re.split(r"[.#]", fqn, maxsplit=1)
            if len(head) == 2 and head[0]:
                return head[0]
    stem = PurePosixPath(path).stem
    return stem or "module"


def _attach(parent: DocEntity, entity: DocEntity, warnings: List[BuildWarning]) -> None:
    entity.parent = parent.fqn
    for index, member in enumerate(parent.members):
        if member.fqn == entity.fqn:
            warning = BuildWarning(
                kind=WarningKind.DUPLICATE_ENTITY,
                message=f"{entity.fqn} is declared more than once in {parent.fqn}; keeping the later one",
                path=entity.source.path if entity.source else None,
                line=entity.source.line if entity.source else None,
                subject=entity.fqn,
            )
            log_build_warning(logger, warning)
            warnings.append(warning)
            del parent.members[index]
            break
    parent.members.append(entity)


def _merge_prose(target: DocEntity, prose: List[Line]) -> None:
    summary, examples = _split_prose(prose)
    if summary:
        target.summary = f"{target.summary}\n\n{summary}".strip()
    target.examples.extend(examples)
    target.anchors.extend(_ANCHOR_PATTERN.findall(summary))


def _collect_references(entity: DocEntity) -> List[CrossReference]:
    references: List[CrossReference] = []
    for param in _iter_params(entity.parameters):
        if param.description:
            references.extend(extract_references(param.description, entity.fqn))
    references.extend(extract_references(entity.summary, entity.fqn))
    return references


def _iter_params(parameters: Optional[List[ParamSpec]]) -> List[ParamSpec]:
    flat: List[ParamSpec] = []
    for param in parameters or []:
        flat.append(param)
        flat.extend(_iter_params(param.parameters))
    return flat


def _split_prose(lines: List[Line]) -> tuple[str, List[str]]:
    """Separate paragraphs from indented or fenced code examples."""
    paragraphs: List[str] = []
    examples: List[str] = []
    code: List[str] = []
    fenced = False
    previous_blank = True

    def _close_code() -> None:
        while code and not code[-1].strip():
            code.pop()
        if code:
            examples.append("\n".join(code))
        code.clear()

    for line in lines:
        if line.text.startswith(_FENCE):
            if fenced:
                _close_code()
            fenced = not fenced
            previous_blank = False
            continue
        if fenced:
            code.append(" " * line.indent + line.text)
            continue
        if code and (line.is_blank or line.indent >= _CODE_INDENT):
            code.append(" " * max(line.indent - _CODE_INDENT, 0) + line.text)
            continue
        if not code and previous_blank and line.indent >= _CODE_INDENT and not line.is_blank:
            code.append(" " * (line.indent - _CODE_INDENT) + line.text)
            continue
        _close_code()
        paragraphs.append(" " * line.indent + line.text if line.text else "")
        previous_blank = line.is_blank
    _close_code()

    summary = "\n".join(paragraphs)
    summary = re.sub(r"\n{3,}", "\n\n", summary).strip()
    return summary, examples


class CorpusAssembler:
    """Merges per-file trees into one corpus keyed by fully-qualified name.

    Files must be merged in a deterministic order. When two files declare the
    same name, the file merged later wins and replaces the earlier entity
    together with everything it owns.
    """

    def __init__(self) -> None:
        self._entities: Dict[str, DocEntity] = {}
        self._roots: List[str] = []
        self._report = BuildReport()

    def merge(self, result: FileResult) -> None:
        self._report.files.append(result.path)
        self._report.warnings.extend(result.warnings)
        self._register(result.root)
        self._roots.append(result.root.fqn)

    def add_warning(self, warning: BuildWarning) -> None:
        self._report.warnings.append(warning)

    def build(self) -> BuildResult:
        """Freeze the merged entities and report dangling references.

        Each call returns a new report, so results from earlier calls are not
        changed by later merges or builds.
        """
        corpus = Corpus(self._entities, self._roots)
        report = BuildReport(
            files=list(self._report.files),
            warnings=list(self._report.warnings),
            entity_count=len(corpus),
        )
        for reference in corpus.dangling_references():
            report.warnings.append(
                BuildWarning(
                    kind=WarningKind.DANGLING_REFERENCE,
                    message=f"{reference.source} links to unknown target {reference.target!r}",
                    subject=reference.target,
                )
            )
        return BuildResult(corpus=corpus, report=report)

    def _register(self, entity: DocEntity) -> None:
        previous = self._entities.get(entity.fqn)
        if previous is not None and previous is not entity:
            warning = BuildWarning(
                kind=WarningKind.DUPLICATE_ENTITY,
                message=(
                    f"{entity.fqn} from {_where(entity)} replaces the definition "
                    f"from {_where(previous)}"
                ),
                path=entity.source.path if entity.source else None,
                line=entity.source.line if entity.source else None,
                subject=entity.fqn,
            )
            log_build_warning(logger, warning)
            self._report.warnings.append(warning)
            self._discard(previous)
        self._entities[entity.fqn] = entity
        for member in entity.members:
            self._register(member)

    def _discard(self, entity: DocEntity) -> None:
        for member in entity.members:
            self._discard(member)
        if self._entities.get(entity.fqn) is entity:
            del self._entities[entity.fqn]
        if entity.fqn in self._roots and entity.parent is None:
            self._roots.remove(entity.fqn)
        parent = self._entities.get(entity.parent) if entity.parent else None
        if parent is not None:
            parent.members = [member for member in parent.members if member is not entity]


def _where(entity: DocEntity) -> str:
    if entity.source is None:
        return "<unknown>"
    return f"{entity.source.path}:{entity.source.line}"


__all__ = ["CorpusAssembler", "FileResult", "assemble_file"]

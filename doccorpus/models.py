"""Core data models shared across doccorpus components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

# Documentation type hints are free text ("Number", "String | Buffer").
TypeRef = str


class EntityKind(str, Enum):
    """Kinds of documented API elements."""

    MODULE = "module"
    CLASS = "class"
    METHOD = "method"
    CONSTRUCTOR = "constructor"


class WarningKind(str, Enum):
    """Non-fatal conditions surfaced in the build report."""

    MALFORMED_SIGNATURE = "malformed_signature"
    DUPLICATE_ENTITY = "duplicate_entity"
    DANGLING_REFERENCE = "dangling_reference"
    UNREADABLE_FILE = "unreadable_file"
    PARSE_FAILURE = "parse_failure"


@dataclass
class SourceLocation:
    """Where an entity was declared."""

    path: str
    line: int


@dataclass
class ParamSpec:
    """One parameter of a documented callable.

    ``depth`` is the number of optional brackets enclosing the parameter and
    ``opens`` how many of those were opened right before it; together they let
    the signature be written back in its original bracket layout.
    """

    name: str
    type_hint: Optional[TypeRef] = None
    optional: bool = False
    description: str = ""
    default: Optional[str] = None
    parameters: Optional[List["ParamSpec"]] = None
    depth: int = 0
    opens: int = 0


@dataclass
class CrossReference:
    """Link from an entity's prose to another entity, anchor or URL."""

    source: str
    target: str
    label: str
    external: bool = False
    dangling: bool = False


@dataclass
class DocEntity:
    """A documented module, class, method or constructor."""

    kind: EntityKind
    name: str
    fqn: str
    parent: Optional[str] = None
    summary: str = ""
    parameters: List[ParamSpec] = field(default_factory=list)
    returns: Optional[TypeRef] = None
    examples: List[str] = field(default_factory=list)
    members: List["DocEntity"] = field(default_factory=list)
    section: Optional[str] = None
    superclass: Optional[str] = None
    sections: List[str] = field(default_factory=list)
    anchors: List[str] = field(default_factory=list)
    references: List[CrossReference] = field(default_factory=list)
    source: Optional[SourceLocation] = None

    def walk(self) -> List["DocEntity"]:
        """Return this entity followed by all descendants in source order."""
        entities = [self]
        for member in self.members:
            entities.extend(member.walk())
        return entities


@dataclass
class BuildWarning:
    """Data-quality problem recorded while building a corpus."""

    kind: WarningKind
    message: str
    path: Optional[str] = None
    line: Optional[int] = None
    subject: Optional[str] = None


__all__ = [
    "BuildWarning",
    "CrossReference",
    "DocEntity",
    "EntityKind",
    "ParamSpec",
    "SourceLocation",
    "TypeRef",
    "WarningKind",
]

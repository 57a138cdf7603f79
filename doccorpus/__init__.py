"""Parse PDoc-style documentation comments into a queryable corpus."""

from .builder import CorpusBuild, build_corpus
from .corpus import BuildReport, BuildResult, Corpus
from .models import CrossReference, DocEntity, EntityKind, ParamSpec, WarningKind

__all__ = [
    "BuildReport",
    "BuildResult",
    "Corpus",
    "CorpusBuild",
    "CrossReference",
    "DocEntity",
    "EntityKind",
    "ParamSpec",
    "WarningKind",
    "build_corpus",
]

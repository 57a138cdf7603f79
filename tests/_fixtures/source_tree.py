"""Helper utilities for constructing temporary documentation trees in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from doccorpus.builder import CorpusBuild
from doccorpus.corpus import BuildResult

FIXTURE_SOURCES = Path(__file__).parent / "sources"


class SourceTree:
    """Utility for writing doc sources into a throwaway directory and building them."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "docs"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the tree."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def build(self, *, workers: int | None = None) -> BuildResult:
        """Return a fresh corpus built from the tree contents."""
        return CorpusBuild(max_workers=workers).run(self.root)

    def path(self) -> Path:
        """Return the tree root path."""
        return self.root


__all__ = ["FIXTURE_SOURCES", "SourceTree"]

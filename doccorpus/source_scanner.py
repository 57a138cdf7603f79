"""Input tree scanning for documentation sources."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .config import DocCorpusConfig, load_config
from .logging import get_logger

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
}

logger = get_logger("scanner")


@dataclass
class SourceFile:
    """A documentation source discovered under the input root."""

    path: str
    size: int


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .doccorpus.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _iter_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept = []
        for name in dirnames:
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _should_ignore(rel_path, True, rules):
                continue
            kept.append(name)
        dirnames[:] = kept

        for filename in filenames:
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _should_ignore(rel_path, False, rules):
                continue
            yield current_dir / filename


class SourceScanner:
    """Walks an input tree and lists the files worth parsing."""

    def __init__(self, config: DocCorpusConfig | None = None) -> None:
        self._config = config

    def scan(self, root: str) -> List[SourceFile]:
        """Return source files under ``root`` sorted by relative path."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Input path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Input path is not a directory: {root}")

        config = self._config or load_config(root_path)
        suffixes = {suffix.lower() for suffix in config.suffixes}
        rules = _parse_gitignore(root_path / ".gitignore")
        rules.extend(
            rule
            for rule in (_build_ignore_rule(pattern) for pattern in config.exclude_paths)
            if rule is not None
        )

        files: List[SourceFile] = []
        for path in _iter_files(root_path, rules):
            if path.suffix.lower() not in suffixes:
                continue
            files.append(
                SourceFile(
                    path=path.relative_to(root_path).as_posix(),
                    size=path.stat().st_size,
                )
            )
        files.sort(key=lambda item: item.path)
        logger.debug("Discovered %d source files under %s", len(files), root_path)
        return files


__all__ = ["IgnoreRule", "SourceFile", "SourceScanner"]

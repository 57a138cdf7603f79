"""Corpus build pipeline: scan, parse files in parallel, merge in order."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Mapping, Optional, Union

from .assembler import CorpusAssembler, FileResult, assemble_file
from .config import DocCorpusConfig, load_config
from .corpus import BuildResult
from .logging import get_logger, log_build_warning
from .models import BuildWarning, WarningKind
from .source_scanner import SourceScanner


class CorpusBuild:
    """Builds a corpus from a directory of documentation sources."""

    def __init__(
        self,
        config: DocCorpusConfig | None = None,
        scanner: SourceScanner | None = None,
        max_workers: Optional[int] = None,
    ) -> None:
        self._config = config
        self._scanner = scanner
        self._max_workers = max_workers
        self.logger = get_logger("builder")

    def run(self, path: Union[str, Path]) -> BuildResult:
        """Parse every source file under ``path`` and return the merged corpus."""
        root = Path(path).expanduser().resolve()
        config = self._config or load_config(root)
        scanner = self._scanner or SourceScanner(config)
        sources = scanner.scan(str(root))
        self.logger.info("Building corpus from %d files under %s", len(sources), root)

        workers = self._max_workers or config.workers
        outcomes = self._parse_all(root, [source.path for source in sources], workers)

        assembler = CorpusAssembler()
        # Merge order is file order, not completion order, so the later file
        # deterministically wins on duplicate names.
        for outcome in outcomes:
            if isinstance(outcome, BuildWarning):
                assembler.add_warning(outcome)
                continue
            assembler.merge(outcome)

        result = assembler.build()
        self.logger.info(
            "Corpus built with %d entities and %d warnings",
            result.report.entity_count,
            len(result.report.warnings),
        )
        return result

    def _parse_all(
        self, root: Path, rel_paths: List[str], workers: Optional[int]
    ) -> List[Union[FileResult, BuildWarning]]:
        if not rel_paths:
            return []
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="doccorpus-parse") as pool:
            return list(pool.map(lambda rel: self._parse_one(root, rel), rel_paths))

    def _parse_one(self, root: Path, rel_path: str) -> Union[FileResult, BuildWarning]:
        try:
            text = (root / rel_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return _skip(
                WarningKind.UNREADABLE_FILE, rel_path, f"could not read file: {exc}", self.logger
            )
        self.logger.debug("Parsing %s", rel_path)
        return _assemble_guarded(rel_path, text, self.logger)


def _assemble_guarded(
    rel_path: str, text: str, logger: logging.Logger
) -> Union[FileResult, BuildWarning]:
    try:
        return assemble_file(rel_path, text)
    except Exception as exc:  # a parser bug in one file skips only that file
        logger.debug("Parse of %s failed", rel_path, exc_info=True)
        return _skip(
            WarningKind.PARSE_FAILURE,
            rel_path,
            f"parser failed: {type(exc).__name__}: {exc}",
            logger,
        )


def _skip(
    kind: WarningKind, rel_path: str, message: str, logger: logging.Logger
) -> BuildWarning:
    warning = BuildWarning(kind=kind, message=message, path=rel_path)
    log_build_warning(logger, warning)
    return warning


def build_corpus(sources: Mapping[str, str]) -> BuildResult:
    """Build a corpus from in-memory ``path -> text`` sources in iteration order."""
    assembler = CorpusAssembler()
    logger = get_logger("builder")
    for rel_path, text in sources.items():
        outcome = _assemble_guarded(rel_path, text, logger)
        if isinstance(outcome, BuildWarning):
            assembler.add_warning(outcome)
            continue
        assembler.merge(outcome)
    return assembler.build()


__all__ = ["CorpusBuild", "build_corpus"]

# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Compute the external dependency closure of a set of entrypoints."""

import logging
from collections import deque
from dataclasses import dataclass
from pathlib import Path

from vendorsplit.comments import strip_comments
from vendorsplit.resolver import resolve_local_module
from vendorsplit.specifiers import (
    ExternalPredicate,
    default_is_external,
    extract_valid_specifiers,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencyClosure:
    """Represent the result of one closure scan.

    Attributes:
        externals: Unique external specifiers in first-seen order.
        scanned_files: Files read and scanned, each at most once, in scan order.
        unresolved: ``(file, specifier)`` pairs of local specifiers without a file.
        skipped_files: Files that could not be read.
    """

    externals: tuple[str, ...]
    scanned_files: tuple[Path, ...]
    unresolved: tuple[tuple[Path, str], ...]
    skipped_files: tuple[Path, ...]


def collect_external_dependencies(
    entrypoints: list[Path] | list[str],
    is_external: ExternalPredicate = default_is_external,
    preserve_strings: bool = False,
) -> DependencyClosure:
    """Scan the local module graph and collect every external specifier.

    Args:
        entrypoints: Entrypoint source files.
        is_external: Predicate classifying a specifier as external.
        preserve_strings: Keep string literal contents when stripping comments.

    Returns:
        Dependency closure of the entrypoints.
    """
    queue: deque[Path] = deque(Path(entry).resolve() for entry in entrypoints)
    visited: set[Path] = set()
    externals: dict[str, None] = {}
    scanned: list[Path] = []
    unresolved: list[tuple[Path, str]] = []
    skipped: list[Path] = []

    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        if not current.is_file():
            continue

        try:
            content = current.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                "Skipping file during closure scan due to read failure",
                extra={"path": str(current), "error": str(exc)},
            )
            skipped.append(current)
            continue
        scanned.append(current)

        stripped = strip_comments(content, preserve_strings=preserve_strings)
        for spec in extract_valid_specifiers(stripped):
            if is_external(spec):
                externals.setdefault(spec, None)
                continue
            resolution = resolve_local_module(spec, current)
            if resolution.path is None:
                if resolution.kind == "unresolved":
                    unresolved.append((current, spec))
                continue
            if resolution.path not in visited:
                queue.append(resolution.path)

    logger.info(
        "Closure scan finished (files=%d externals=%d unresolved=%d)",
        len(scanned),
        len(externals),
        len(unresolved),
    )
    return DependencyClosure(
        externals=tuple(externals),
        scanned_files=tuple(scanned),
        unresolved=tuple(unresolved),
        skipped_files=tuple(skipped),
    )

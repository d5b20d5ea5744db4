# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Resolve relative and absolute module specifiers to files on disk."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from vendorsplit.specifiers import PATH_ROOT_MARKER, is_local_specifier

logger = logging.getLogger(__name__)

ResolutionKind = Literal["resolved", "not_local", "unresolved"]

SOURCE_EXTENSIONS: tuple[str, ...] = (
    "",
    ".ts",
    ".tsx",
    ".mts",
    ".cts",
    ".js",
    ".jsx",
    ".mjs",
    ".cjs",
)
INDEX_FILES: tuple[str, ...] = (
    "index.ts",
    "index.tsx",
    "index.mts",
    "index.js",
    "index.jsx",
    "index.mjs",
    "index.cjs",
)


@dataclass(frozen=True)
class ModuleResolution:
    """Represent the outcome of resolving one specifier.

    Attributes:
        kind: Resolution outcome.
        path: Absolute file path when ``kind`` is ``resolved``.
    """

    kind: ResolutionKind
    path: Path | None = None

    @property
    def resolved(self) -> bool:
        return self.kind == "resolved"


def resolve_local_module(spec: str, containing_file: Path) -> ModuleResolution:
    """Resolve a local specifier relative to the file that references it.

    Args:
        spec: Module specifier as written in source.
        containing_file: Absolute path of the referencing file.

    Returns:
        Resolution outcome. Package specifiers are reported as ``not_local``;
        path-root aliases such as ``~/lib`` are local but ``unresolved``.
    """
    if not is_local_specifier(spec):
        return ModuleResolution(kind="not_local")
    if spec.startswith(PATH_ROOT_MARKER):
        logger.debug("Path-root alias has no configured root (spec=%s)", spec)
        return ModuleResolution(kind="unresolved")

    base = containing_file.parent / spec
    for extension in SOURCE_EXTENSIONS:
        candidate = Path(f"{base}{extension}")
        if candidate.is_file():
            return ModuleResolution(kind="resolved", path=candidate.resolve())

    if base.is_dir():
        for index_name in INDEX_FILES:
            candidate = base / index_name
            if candidate.is_file():
                return ModuleResolution(kind="resolved", path=candidate.resolve())

    logger.debug(
        "Local specifier did not resolve (spec=%s from=%s)", spec, containing_file
    )
    return ModuleResolution(kind="unresolved")

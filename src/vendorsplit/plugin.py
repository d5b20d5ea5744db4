# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Single-phase build plugin that obfuscates matching files."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import pathspec

from vendorsplit.bundler import PluginLoadResult
from vendorsplit.engine import (
    INPUT_FILE_NAME_OPTION,
    JavaScriptObfuscatorEngine,
    ObfuscatorOptions,
    TransformEngine,
    TransformError,
)

logger = logging.getLogger(__name__)

PLUGIN_NAME = "vendorsplit-javascript-obfuscator"
DEFAULT_INCLUDE: tuple[str, ...] = ("*.js", "*.mjs")


@dataclass(frozen=True)
class ObfuscatorPlugin:
    """Obfuscate source files matching the include and not the exclude patterns.

    Args:
        name: Plugin name reported to the host bundler.
        options: Transformation engine options.
        include: Compiled include patterns.
        exclude: Compiled exclude patterns, if any.
        engine: Transformation engine.
    """

    name: str
    options: ObfuscatorOptions
    include: pathspec.GitIgnoreSpec
    exclude: pathspec.GitIgnoreSpec | None
    engine: TransformEngine

    def matches(self, path: Path) -> bool:
        """Check whether a source path, relative to the project root, is selected."""
        posix = Path(path).as_posix().lstrip("/")
        if not self.include.match_file(posix):
            return False
        if self.exclude is not None and self.exclude.match_file(posix):
            return False
        return True

    def on_load(self, path: Path) -> PluginLoadResult | None:
        """Obfuscate one source file selected by :meth:`matches`.

        Args:
            path: File being loaded by the host bundler.

        Returns:
            Obfuscated contents, or ``None`` for empty files.

        Raises:
            TransformError: If the engine rejects the file.
        """
        source = Path(path).read_text(encoding="utf-8")
        if not source.strip():
            return None
        try:
            contents = self.engine.transform(
                source, {**self.options, INPUT_FILE_NAME_OPTION: str(path)}
            )
        except TransformError as exc:
            logger.error("Error obfuscating file (path=%s error=%s)", path, exc)
            raise
        return PluginLoadResult(contents=contents, loader="js")


def javascript_obfuscator(
    options: ObfuscatorOptions | None = None,
    *,
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
    engine: TransformEngine | None = None,
) -> ObfuscatorPlugin:
    """Create a plugin that obfuscates matching files during compilation.

    Args:
        options: Transformation engine options.
        include: Gitignore-style patterns selecting files; defaults to
            ``*.js`` and ``*.mjs``.
        exclude: Gitignore-style patterns removing files from the selection.
        engine: Transformation engine; defaults to javascript-obfuscator.

    Returns:
        Configured plugin.
    """
    include_spec = pathspec.GitIgnoreSpec.from_lines(list(include or DEFAULT_INCLUDE))
    exclude_spec = pathspec.GitIgnoreSpec.from_lines(list(exclude)) if exclude else None
    return ObfuscatorPlugin(
        name=PLUGIN_NAME,
        options=dict(options or {}),
        include=include_spec,
        exclude=exclude_spec,
        engine=engine or JavaScriptObfuscatorEngine(),
    )

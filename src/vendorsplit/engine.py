# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Transformation engine contract and javascript-obfuscator adapter."""

import logging
import re
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence

logger = logging.getLogger(__name__)

ObfuscatorOptions = Mapping[str, Any]

DEFAULT_OBFUSCATOR_COMMAND: tuple[str, ...] = ("npx", "--yes", "javascript-obfuscator")
INPUT_FILE_NAME_OPTION = "inputFileName"

_CAMEL_BOUNDARY_RE = re.compile(r"(?<!^)(?=[A-Z])")


class TransformError(RuntimeError):
    """Represent a transformation engine failure."""


class TransformEngine(Protocol):
    """Define the source-to-source transformation contract."""

    def transform(self, source: str, options: ObfuscatorOptions) -> str:
        """Transform JavaScript source text.

        Args:
            source: JavaScript source.
            options: Engine options; ``inputFileName`` names the source file.

        Returns:
            Transformed source.

        Raises:
            TransformError: If the source cannot be transformed.
        """


class JavaScriptObfuscatorEngine:
    """Obfuscate code by running the javascript-obfuscator command line tool."""

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_OBFUSCATOR_COMMAND,
        timeout: int = 300,
    ) -> None:
        """Initialize the adapter.

        Args:
            command: Executable and leading arguments used to run the obfuscator.
            timeout: Timeout in seconds for one invocation.
        """
        self._command = list(command)
        self._timeout = timeout

    def transform(self, source: str, options: ObfuscatorOptions) -> str:
        """Obfuscate one source text.

        Args:
            source: JavaScript source.
            options: javascript-obfuscator options using their camelCase names.

        Returns:
            Obfuscated source.

        Raises:
            TransformError: If the tool cannot run or rejects the input.
        """
        file_name = Path(str(options.get(INPUT_FILE_NAME_OPTION) or "input.js")).name
        with tempfile.TemporaryDirectory(prefix="vendorsplit-obf-") as work_dir:
            input_path = Path(work_dir) / file_name
            output_path = Path(work_dir) / f"obfuscated-{file_name}"
            input_path.write_text(source, encoding="utf-8")
            cmd = [
                *self._command,
                str(input_path),
                "--output",
                str(output_path),
                *options_to_arguments(options),
            ]
            try:
                completed = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=self._timeout,
                    check=False,
                )
            except FileNotFoundError as exc:
                raise TransformError(
                    f"javascript-obfuscator executable not found: {cmd[0]}"
                ) from exc
            except subprocess.TimeoutExpired as exc:
                raise TransformError(
                    f"javascript-obfuscator timed out after {self._timeout}s"
                ) from exc

            if completed.returncode != 0:
                message = (completed.stderr or completed.stdout).strip()
                logger.warning(
                    "javascript-obfuscator failed (file=%s returncode=%s)",
                    file_name,
                    completed.returncode,
                )
                raise TransformError(message or "javascript-obfuscator failed")
            try:
                return output_path.read_text(encoding="utf-8")
            except OSError as exc:
                raise TransformError(f"Obfuscated output missing: {exc}") from exc


def options_to_arguments(options: ObfuscatorOptions) -> list[str]:
    """Convert camelCase obfuscator options into command line flags.

    Args:
        options: javascript-obfuscator options.

    Returns:
        Flat ``--kebab-name value`` argument list. ``None`` values are skipped.
    """
    arguments: list[str] = []
    for key, value in options.items():
        if key == INPUT_FILE_NAME_OPTION or value is None:
            continue
        flag = "--" + _CAMEL_BOUNDARY_RE.sub("-", key).lower()
        arguments.extend([flag, _format_option_value(value)])
    return arguments


def _format_option_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)

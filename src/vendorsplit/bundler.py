# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Host bundler contracts and the esbuild command line adapter."""

import json
import logging
import os
import shutil
import subprocess
import tempfile
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Literal, Protocol, Sequence

logger = logging.getLogger(__name__)

LogLevel = Literal["error", "warning", "info"]

DEFAULT_ESBUILD_COMMAND: tuple[str, ...] = ("esbuild",)
STAGING_DIR_PREFIX = ".vendorsplit-stage-"
_STAGING_SKIP = {"node_modules"}


class BundlerError(RuntimeError):
    """Represent a host bundler invocation that could not run to completion."""


@dataclass(frozen=True)
class BuildLog:
    """Represent one diagnostic line emitted by the host bundler."""

    level: LogLevel
    message: str


@dataclass(frozen=True)
class BuildArtifact:
    """Represent one file written by the host bundler."""

    path: Path

    def text(self) -> str:
        """Read the current artifact content.

        Raises:
            OSError: If the artifact cannot be read.
        """
        return self.path.read_text(encoding="utf-8")

    @property
    def is_javascript(self) -> bool:
        return self.path.suffix in {".js", ".mjs"}


@dataclass(frozen=True)
class PluginLoadResult:
    """Represent replacement contents produced by a build plugin."""

    contents: str
    loader: str = "js"


class BuildPlugin(Protocol):
    """Define a per-file hook the host bundler applies to matching files."""

    name: str

    def matches(self, path: Path) -> bool:
        """Check whether the plugin handles a source file.

        Args:
            path: Source path relative to the project root.
        """

    def on_load(self, path: Path) -> PluginLoadResult | None:
        """Return replacement contents, or ``None`` to keep the file as is."""


@dataclass(frozen=True)
class BuildRequest:
    """Describe one host bundler invocation.

    Attributes:
        entrypoints: Entry modules to compile.
        outdir: Output directory.
        external: Module names left unbundled.
        minify: Whether to minify output.
        platform: Target platform (``browser``, ``node`` or ``neutral``).
        format: Output module format.
        naming: Output file name for single-entry builds.
        plugins: Per-file hooks applied to source files before compiling.
        extra_args: Additional raw bundler arguments.
    """

    entrypoints: list[Path]
    outdir: Path
    external: list[str] = field(default_factory=list)
    minify: bool = False
    platform: str | None = None
    format: str | None = "esm"
    naming: str | None = None
    plugins: Sequence[BuildPlugin] = ()
    extra_args: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BuildOutput:
    """Represent the result of one host bundler invocation."""

    success: bool
    logs: list[BuildLog]
    outputs: list[BuildArtifact]


class HostBundler(Protocol):
    """Define the host build tool contract."""

    def build(self, request: BuildRequest) -> BuildOutput:
        """Compile a request into output artifacts.

        Raises:
            BundlerError: If the bundler cannot be invoked.
        """


class EsbuildBundler:
    """Compile bundles with the esbuild command line interface."""

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_ESBUILD_COMMAND,
        timeout: int = 300,
        cwd: Path | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            command: Executable and leading arguments used to run esbuild.
            timeout: Timeout in seconds for one invocation.
            cwd: Working directory; defaults to the process working directory.
        """
        self._command = list(command)
        self._timeout = timeout
        self._cwd = cwd

    def health_check(self) -> bool:
        """Check whether the esbuild executable is available."""
        return shutil.which(self._command[0]) is not None

    def build(self, request: BuildRequest) -> BuildOutput:
        """Run esbuild for one request.

        Args:
            request: Build description.

        Returns:
            Build output; unsuccessful when esbuild exits with a non-zero code.

        Raises:
            BundlerError: If esbuild cannot be started or times out.
        """
        cwd = (self._cwd or Path.cwd()).resolve()
        with (
            tempfile.TemporaryDirectory(prefix="vendorsplit-meta-") as meta_dir,
            _staged_sources(request=request, cwd=cwd) as entrypoints,
        ):
            metafile = Path(meta_dir) / "meta.json"
            cmd = self._command_line(
                request=request, metafile=metafile, entrypoints=entrypoints
            )
            logger.debug("Running esbuild (cmd=%s)", cmd)
            try:
                completed = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=self._timeout,
                    cwd=cwd,
                    check=False,
                )
            except FileNotFoundError as exc:
                raise BundlerError(f"esbuild executable not found: {cmd[0]}") from exc
            except subprocess.TimeoutExpired as exc:
                raise BundlerError(f"esbuild timed out after {self._timeout}s") from exc

            logs = _parse_logs(completed.stderr)
            if completed.returncode != 0:
                logger.warning(
                    "esbuild failed (returncode=%s errors=%d)",
                    completed.returncode,
                    sum(1 for log in logs if log.level == "error"),
                )
                return BuildOutput(success=False, logs=logs, outputs=[])
            outputs = _read_metafile_outputs(metafile=metafile, cwd=cwd)

        return BuildOutput(success=True, logs=logs, outputs=outputs)

    def _command_line(
        self, request: BuildRequest, metafile: Path, entrypoints: list[Path]
    ) -> list[str]:
        cmd = list(self._command)
        cmd.extend(str(entry) for entry in entrypoints)
        cmd.append("--bundle")
        if request.naming:
            cmd.append(f"--outfile={request.outdir / request.naming}")
        else:
            cmd.append(f"--outdir={request.outdir}")
        cmd.extend(f"--external:{name}" for name in request.external)
        if request.minify:
            cmd.append("--minify")
        if request.format:
            cmd.append(f"--format={request.format}")
        if request.platform:
            cmd.append(f"--platform={request.platform}")
        cmd.append(f"--metafile={metafile}")
        cmd.append("--log-level=warning")
        cmd.extend(request.extra_args)
        return cmd


def _parse_logs(stderr: str) -> list[BuildLog]:
    """Split esbuild diagnostics into log entries.

    Args:
        stderr: Captured standard error text.

    Returns:
        One entry per non-empty line.
    """
    logs: list[BuildLog] = []
    for line in stderr.splitlines():
        message = line.strip()
        if not message:
            continue
        level: LogLevel = "info"
        if "[ERROR]" in message:
            level = "error"
        elif "[WARNING]" in message:
            level = "warning"
        logs.append(BuildLog(level=level, message=message))
    return logs


def _read_metafile_outputs(metafile: Path, cwd: Path) -> list[BuildArtifact]:
    """List output artifacts recorded in an esbuild metafile.

    Args:
        metafile: Metafile path written by esbuild.
        cwd: Directory esbuild ran in; metafile paths are relative to it.

    Returns:
        Output artifacts in metafile order.

    Raises:
        BundlerError: If the metafile is missing or malformed.
    """
    try:
        meta = json.loads(metafile.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise BundlerError(f"Unable to read esbuild metafile: {exc}") from exc
    outputs = meta.get("outputs") if isinstance(meta, dict) else None
    if not isinstance(outputs, dict):
        raise BundlerError("esbuild metafile does not list outputs")
    return [BuildArtifact(path=(cwd / name).resolve()) for name in outputs]


@contextmanager
def _staged_sources(request: BuildRequest, cwd: Path) -> Iterator[list[Path]]:
    """Yield entrypoints to compile, staging plugin output when plugins are set.

    The project root (``cwd`` and every entrypoint) is copied into a hidden
    staging directory inside itself, without ``node_modules``, dot entries and
    the output directory, so package resolution still walks up to the real
    ``node_modules``. Plugins then rewrite matching staged sources in place.

    Args:
        request: Build description.
        cwd: Directory esbuild runs in.

    Yields:
        Entrypoints inside the staging copy, or the original entrypoints.
    """
    if not request.plugins:
        yield list(request.entrypoints)
        return

    entries = [Path(entry).resolve() for entry in request.entrypoints]
    root = Path(os.path.commonpath([cwd, *entries]))
    outdir = Path(request.outdir).resolve()
    staging = root / f"{STAGING_DIR_PREFIX}{uuid.uuid4().hex}"

    def _ignore(directory: str, names: list[str]) -> set[str]:
        return {
            name
            for name in names
            if name in _STAGING_SKIP
            or name.startswith(".")
            or Path(directory, name).resolve() == outdir
        }

    try:
        shutil.copytree(root, staging, ignore=_ignore)
        _apply_plugins(staging=staging, plugins=request.plugins)
        yield [staging / entry.relative_to(root) for entry in entries]
    finally:
        shutil.rmtree(staging, ignore_errors=True)


def _apply_plugins(staging: Path, plugins: Sequence[BuildPlugin]) -> None:
    """Run plugin hooks over staged source files.

    Args:
        staging: Staging copy of the project root.
        plugins: Hooks to apply in order.
    """
    for path in sorted(staging.rglob("*")):
        if not path.is_file():
            continue
        relative = path.relative_to(staging)
        for plugin in plugins:
            if not plugin.matches(relative):
                continue
            result = plugin.on_load(path)
            if result is None:
                continue
            path.write_text(result.contents, encoding="utf-8")
            logger.debug(
                "Applied build plugin (plugin=%s path=%s)", plugin.name, relative
            )

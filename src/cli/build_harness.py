# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command line harness for dependency scans and split obfuscated builds."""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, TextIO

from rich.console import Console
from rich.logging import RichHandler

from vendorsplit import (
    BundlerError,
    ConfigurationError,
    EsbuildBundler,
    HostBundler,
    JavaScriptObfuscatorEngine,
    ObfuscatedBuildOptions,
    RewriteError,
    TransformEngine,
    TransformError,
    collect_external_dependencies,
    obfuscated_build,
)
from vendorsplit.build import DEFAULT_VENDOR_BUNDLE_NAME

logger = logging.getLogger(__name__)


class ValidationError(RuntimeError):
    """Represent user input validation failure."""


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="vendorsplit")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan")
    scan_parser.add_argument(
        "--entry", action="append", required=True, help="Entrypoint source file."
    )
    scan_parser.add_argument(
        "--preserve-strings",
        action="store_true",
        help="Keep string literal contents while stripping comments.",
    )
    scan_parser.add_argument(
        "--format", choices=("text", "json"), default="text", help="Output format."
    )

    build_cmd = subparsers.add_parser("build")
    build_cmd.add_argument(
        "--entry", action="append", required=True, help="Entrypoint source file."
    )
    build_cmd.add_argument("--outdir", required=True, help="Output directory.")
    build_cmd.add_argument(
        "--no-vendor",
        action="store_true",
        help="Leave external packages out without building a vendor artifact.",
    )
    build_cmd.add_argument(
        "--vendor-name",
        default=DEFAULT_VENDOR_BUNDLE_NAME,
        help="Vendor artifact file name.",
    )
    build_cmd.add_argument(
        "--external",
        action="append",
        default=[],
        help="Module that is never bundled (repeatable).",
    )
    build_cmd.add_argument(
        "--obfuscator-config",
        required=False,
        help="JSON file with javascript-obfuscator options.",
    )
    build_cmd.add_argument("--minify", action="store_true", help="Minify output.")
    build_cmd.add_argument(
        "--format", choices=("esm", "cjs", "iife"), default="esm", help="Module format."
    )
    build_cmd.add_argument(
        "--platform",
        choices=("browser", "node", "neutral"),
        default=None,
        help="Target platform.",
    )
    build_cmd.add_argument(
        "--strict-vendor",
        action="store_true",
        help="Fail the build when the vendor artifact cannot be produced.",
    )
    build_cmd.add_argument(
        "--preserve-strings",
        action="store_true",
        help="Keep string literal contents while stripping comments.",
    )
    build_cmd.add_argument(
        "--esbuild", default="esbuild", help="Command used to run esbuild."
    )
    build_cmd.add_argument(
        "--obfuscator",
        default="npx --yes javascript-obfuscator",
        help="Command used to run javascript-obfuscator.",
    )
    return parser


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    bundler: HostBundler | None = None,
    engine: TransformEngine | None = None,
) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.
        bundler: Host bundler override; defaults to esbuild.
        engine: Transformation engine override; defaults to javascript-obfuscator.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning("Argument parsing failed (argv=%s)", argv)
        return 2
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    _emit_marker(console=console, phase="validation", state="start")
    try:
        entrypoints = _validate_entrypoints(args.entry)
    except ValidationError as exc:
        logger.warning("Validation failed (error=%s)", exc)
        stderr.write(f"{exc}\n")
        return 2
    _emit_marker(console=console, phase="validation", state="done")

    if args.command == "scan":
        return _run_scan(args=args, entrypoints=entrypoints, console=console, stdout=stdout)
    return _run_build(
        args=args,
        entrypoints=entrypoints,
        console=console,
        stderr=stderr,
        bundler=bundler or EsbuildBundler(command=args.esbuild.split()),
        engine=engine or JavaScriptObfuscatorEngine(command=args.obfuscator.split()),
    )


def _run_scan(
    args: argparse.Namespace, entrypoints: list[Path], console: Console, stdout: TextIO
) -> int:
    _emit_marker(console=console, phase="scan", state="start")
    started = time.monotonic()
    closure = collect_external_dependencies(
        entrypoints, preserve_strings=args.preserve_strings
    )
    _emit_marker(console=console, phase="scan", state="done")
    _emit_summary(
        console=console,
        summary={
            "files_scanned": len(closure.scanned_files),
            "files_skipped": len(closure.skipped_files),
            "externals": len(closure.externals),
            "unresolved": len(closure.unresolved),
            "elapsed_ms": _elapsed_ms(started),
        },
    )
    if args.format == "json":
        stdout.write(json.dumps(list(closure.externals), indent=2) + "\n")
    else:
        for spec in closure.externals:
            console.print(f"external={spec}", markup=False, highlight=False)
    console.print("status=success")
    return 0


def _run_build(
    args: argparse.Namespace,
    entrypoints: list[Path],
    console: Console,
    stderr: TextIO,
    bundler: HostBundler,
    engine: TransformEngine,
) -> int:
    try:
        obfuscator_options = _load_obfuscator_options(args.obfuscator_config)
    except ValidationError as exc:
        logger.warning("Validation failed (error=%s)", exc)
        stderr.write(f"{exc}\n")
        return 2

    options = ObfuscatedBuildOptions(
        entrypoints=entrypoints,
        outdir=Path(args.outdir).resolve(),
        bundle_vendor=not args.no_vendor,
        vendor_bundle_name=args.vendor_name,
        always_external=list(args.external),
        obfuscator=obfuscator_options,
        minify=args.minify,
        platform=args.platform,
        format=args.format,
        strict_vendor=args.strict_vendor,
        preserve_strings=args.preserve_strings,
    )

    _emit_marker(console=console, phase="build", state="start")
    started = time.monotonic()
    try:
        result = obfuscated_build(options, bundler=bundler, engine=engine)
    except ConfigurationError as exc:
        logger.warning("Build configuration rejected (error=%s)", exc)
        stderr.write(f"{exc}\n")
        return 2
    except (BundlerError, TransformError, RewriteError) as exc:
        logger.warning("Build failed (error=%s)", exc)
        stderr.write(f"Build failed: {exc}\n")
        console.print("status=failure")
        return 1
    _emit_marker(console=console, phase="build", state="done")

    if result.vendor_error is not None:
        vendor_state = "failed"
    elif result.alias_map is not None:
        vendor_state = "built"
    else:
        vendor_state = "skipped"
    _emit_summary(
        console=console,
        summary={
            "externals": len(result.externals),
            "outputs": len(result.outputs),
            "rewritten": len(result.rewritten),
            "replacements": sum(item.replacements for item in result.rewritten.values()),
            "elapsed_ms": _elapsed_ms(started),
        },
    )
    console.print(f"vendor={vendor_state}")
    for log in result.logs:
        if log.level != "info":
            stderr.write(f"{log.level}: {log.message}\n")
    if not result.success:
        if result.vendor_error is not None:
            stderr.write(f"Vendor build failed: {result.vendor_error}\n")
        console.print("status=failure")
        return 1
    console.print("status=success")
    return 0


def _validate_entrypoints(entries: list[str]) -> list[Path]:
    """Validate entrypoint arguments.

    Args:
        entries: Entrypoint paths from user args.

    Returns:
        Absolute entrypoint paths.

    Raises:
        ValidationError: If an entrypoint is missing or not a file.
    """
    entrypoints: list[Path] = []
    for entry in entries:
        path = Path(entry).resolve()
        if not path.exists():
            raise ValidationError(f"Entrypoint does not exist: {path}")
        if not path.is_file():
            raise ValidationError(f"Entrypoint must be a file: {path}")
        entrypoints.append(path)
    return entrypoints


def _load_obfuscator_options(config_path: str | None) -> dict[str, Any]:
    """Load javascript-obfuscator options from a JSON file.

    Raises:
        ValidationError: If the file cannot be read or is not a JSON object.
    """
    if config_path is None:
        return {}
    path = Path(config_path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ValidationError(f"Invalid obfuscator config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValidationError(f"Obfuscator config must be a JSON object: {path}")
    return data


def _emit_marker(console: Console, phase: str, state: str) -> None:
    console.print(f"{phase}:{state}")


def _emit_summary(console: Console, summary: dict[str, int]) -> None:
    fields = " ".join(f"{key}={value}" for key, value in summary.items())
    console.print(fields)


def _elapsed_ms(started: float) -> int:
    return int(round((time.monotonic() - started) * 1000))


def main() -> None:
    """Run vendorsplit CLI."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()

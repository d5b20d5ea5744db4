# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Run the split build: first-party compile, obfuscation, vendor bundle, rewrite."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from vendorsplit.aliases import AliasMap, build_alias_map
from vendorsplit.bundler import (
    BuildArtifact,
    BuildLog,
    BuildOutput,
    BuildPlugin,
    BuildRequest,
    HostBundler,
)
from vendorsplit.closure import collect_external_dependencies
from vendorsplit.engine import (
    INPUT_FILE_NAME_OPTION,
    ObfuscatorOptions,
    TransformEngine,
    TransformError,
)
from vendorsplit.rewriter import MODULE_FORMATS, RewriteResult, rewrite_artifact
from vendorsplit.specifiers import ExternalPredicate, default_is_external
from vendorsplit.vendor import assemble_vendor_bundle

logger = logging.getLogger(__name__)

DEFAULT_VENDOR_BUNDLE_NAME = "vendor.js"


class ConfigurationError(RuntimeError):
    """Represent invalid build options or an unmet build precondition."""


@dataclass(frozen=True)
class SharedVendor:
    """Describe a vendor artifact produced by an earlier build invocation.

    Attributes:
        path: Vendor artifact path.
        alias_map: Alias map the artifact was generated with.
    """

    path: Path
    alias_map: AliasMap


@dataclass(frozen=True)
class ObfuscatedBuildOptions:
    """Describe one split build.

    Attributes:
        entrypoints: First-party entry source files.
        outdir: Output directory.
        is_external: Predicate classifying specifiers as external.
        bundle_vendor: Whether to produce the vendor artifact and rewrite imports.
        vendor_bundle_name: Vendor artifact file name.
        always_external: Native modules that are never bundled.
        obfuscator: Transformation engine options.
        plugins: Extra plugins applied during the first-party compile.
        minify: Whether to minify output.
        platform: Target platform passed to the bundler.
        format: Output module format.
        shared_vendor: Reuse an existing vendor artifact instead of building one.
        strict_vendor: Report a failed vendor build as a failed build.
        preserve_strings: Keep string literals intact while stripping comments.
    """

    entrypoints: list[Path]
    outdir: Path | None
    is_external: ExternalPredicate = default_is_external
    bundle_vendor: bool = True
    vendor_bundle_name: str = DEFAULT_VENDOR_BUNDLE_NAME
    always_external: list[str] = field(default_factory=list)
    obfuscator: ObfuscatorOptions = field(default_factory=dict)
    plugins: Sequence[BuildPlugin] = ()
    minify: bool = False
    platform: str | None = None
    format: str | None = "esm"
    shared_vendor: SharedVendor | None = None
    strict_vendor: bool = False
    preserve_strings: bool = False


@dataclass(frozen=True)
class ObfuscatedBuildResult:
    """Represent the outcome of one split build.

    Attributes:
        success: Whether the build succeeded.
        logs: First-party build logs.
        outputs: First-party artifacts.
        vendor_output: Vendor build output, when a vendor build ran.
        externals: External specifiers found by the closure scan.
        alias_map: Aliases used for the vendor artifact, when one is wired up.
        vendor_error: Vendor build failure description.
        rewritten: Rewrite results keyed by artifact path.
    """

    success: bool
    logs: list[BuildLog]
    outputs: list[BuildArtifact]
    vendor_output: BuildOutput | None = None
    externals: tuple[str, ...] = ()
    alias_map: AliasMap | None = None
    vendor_error: str | None = None
    rewritten: dict[Path, RewriteResult] = field(default_factory=dict)


def obfuscated_build(
    options: ObfuscatedBuildOptions,
    *,
    bundler: HostBundler,
    engine: TransformEngine,
) -> ObfuscatedBuildResult:
    """Build first-party code, obfuscate it, and wire it to a vendor artifact.

    Args:
        options: Build options.
        bundler: Host bundler used for both compile steps.
        engine: Transformation engine applied to first-party JavaScript.

    Returns:
        Build result.

    Raises:
        ConfigurationError: If options are invalid or a shared vendor artifact
            is unusable.
        TransformError: If the engine rejects a first-party artifact.
    """
    if not options.entrypoints:
        raise ConfigurationError("At least one entrypoint is required")
    if options.outdir is None:
        raise ConfigurationError("outdir is required for obfuscated_build")
    outdir = options.outdir
    module_format = _output_format(options.format, options.platform)
    if options.bundle_vendor and module_format not in MODULE_FORMATS:
        raise ConfigurationError(
            f"Vendor bundling requires esm or cjs output, got {module_format}"
        )
    shared_vendor = options.shared_vendor
    if shared_vendor is not None and not shared_vendor.path.is_file():
        raise ConfigurationError(
            f"Shared vendor artifact does not exist: {shared_vendor.path}"
        )

    outdir.mkdir(parents=True, exist_ok=True)

    closure = collect_external_dependencies(
        options.entrypoints,
        is_external=options.is_external,
        preserve_strings=options.preserve_strings,
    )
    externals = closure.externals
    if (
        shared_vendor is not None
        and options.bundle_vendor
        and not shared_vendor.alias_map.covers(externals)
    ):
        missing = [
            spec for spec in externals if spec not in shared_vendor.alias_map.mapping
        ]
        raise ConfigurationError(
            f"Shared vendor artifact does not provide: {', '.join(missing)}"
        )

    user_output = bundler.build(
        BuildRequest(
            entrypoints=list(options.entrypoints),
            outdir=outdir,
            external=[*options.always_external, *externals],
            minify=options.minify,
            platform=options.platform,
            format=options.format,
            plugins=options.plugins,
        )
    )
    if not user_output.success:
        logger.warning(
            "First-party build failed",
            extra={"errors": [log.message for log in user_output.logs]},
        )
        return ObfuscatedBuildResult(
            success=False, logs=user_output.logs, outputs=[], externals=externals
        )

    _obfuscate_outputs(user_output.outputs, options=options.obfuscator, engine=engine)

    if not options.bundle_vendor or not externals:
        return ObfuscatedBuildResult(
            success=True,
            logs=user_output.logs,
            outputs=user_output.outputs,
            externals=externals,
        )

    if shared_vendor is not None:
        alias_map = shared_vendor.alias_map
        vendor_path = shared_vendor.path
        vendor_output = None
        logger.info("Reusing shared vendor artifact (path=%s)", vendor_path)
    else:
        alias_map = build_alias_map(externals)
        outcome = assemble_vendor_bundle(
            bundler,
            alias_map,
            entrypoint=Path(options.entrypoints[0]),
            outdir=outdir,
            bundle_name=options.vendor_bundle_name,
            always_external=options.always_external,
            minify=options.minify,
            platform=options.platform,
            format=options.format,
        )
        vendor_output = outcome.output
        vendor_path = outcome.vendor_path
        if not outcome.succeeded:
            # First-party output still references the excluded package names.
            logger.warning(
                "Vendor bundle unavailable; first-party imports left unrewritten "
                "(externals=%d strict=%s)",
                len(externals),
                options.strict_vendor,
            )
            return ObfuscatedBuildResult(
                success=not options.strict_vendor,
                logs=user_output.logs,
                outputs=user_output.outputs,
                vendor_output=vendor_output,
                externals=externals,
                vendor_error=outcome.error,
            )

    rewritten: dict[Path, RewriteResult] = {}
    for artifact in user_output.outputs:
        if not artifact.is_javascript:
            continue
        rewritten[artifact.path] = rewrite_artifact(
            artifact.path,
            alias_map=alias_map,
            vendor_path=vendor_path,
            module_format=module_format,
        )

    return ObfuscatedBuildResult(
        success=True,
        logs=user_output.logs,
        outputs=user_output.outputs,
        vendor_output=vendor_output,
        externals=externals,
        alias_map=alias_map,
        rewritten=rewritten,
    )


def _obfuscate_outputs(
    outputs: list[BuildArtifact],
    options: ObfuscatorOptions,
    engine: TransformEngine,
) -> None:
    """Apply the transformation engine to each non-empty JavaScript artifact.

    Args:
        outputs: First-party artifacts, rewritten in place.
        options: Engine options.
        engine: Transformation engine.

    Raises:
        TransformError: If the engine rejects an artifact.
    """
    for artifact in outputs:
        if not artifact.is_javascript:
            continue
        code = artifact.text()
        if not code.strip():
            continue
        try:
            obfuscated = engine.transform(
                code, {**options, INPUT_FILE_NAME_OPTION: artifact.path.name}
            )
        except TransformError as exc:
            logger.error("Error obfuscating artifact (path=%s error=%s)", artifact.path, exc)
            raise
        artifact.path.write_text(obfuscated, encoding="utf-8")


def _output_format(format: str | None, platform: str | None) -> str:
    """Return the module format the bundler emits, applying esbuild's defaults."""
    if format:
        return format
    if platform == "node":
        return "cjs"
    if platform == "neutral":
        return "esm"
    return "iife"

# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Assemble the consolidated vendor artifact through the host bundler."""

import json
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from vendorsplit.aliases import AliasMap
from vendorsplit.bundler import BuildOutput, BuildRequest, HostBundler

logger = logging.getLogger(__name__)

VENDOR_ENTRY_PREFIX = "__vendor_entry_"


@dataclass(frozen=True)
class VendorBuildOutcome:
    """Represent the vendor build step result.

    Attributes:
        vendor_path: Expected vendor artifact path.
        output: Host bundler output, when the bundler returned one.
        error: Failure description; ``None`` when the artifact was produced.
    """

    vendor_path: Path
    output: BuildOutput | None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def render_vendor_entry(alias_map: AliasMap) -> str:
    """Render the synthetic entry re-exporting every external under its alias.

    Args:
        alias_map: Specifier to alias mapping.

    Returns:
        Entry module source, one namespace re-export per line.
    """
    lines = [
        f"export * as {alias} from {json.dumps(spec)};"
        for spec, alias in alias_map.mapping.items()
    ]
    return "\n".join(lines) + "\n"


def vendor_entry_path(entrypoint: Path) -> Path:
    """Choose a unique synthetic entry path next to a real entrypoint."""
    return entrypoint.resolve().parent / f"{VENDOR_ENTRY_PREFIX}{uuid.uuid4().hex}.js"


def assemble_vendor_bundle(
    bundler: HostBundler,
    alias_map: AliasMap,
    *,
    entrypoint: Path,
    outdir: Path,
    bundle_name: str,
    always_external: list[str] | None = None,
    minify: bool = False,
    platform: str | None = None,
    format: str | None = "esm",
) -> VendorBuildOutcome:
    """Bundle all external specifiers into one vendor artifact.

    The synthetic entry is removed on every path. Bundler failures are logged
    as warnings and reported through the outcome instead of being raised.

    Args:
        bundler: Host bundler.
        alias_map: External specifiers and their aliases.
        entrypoint: Real entrypoint the synthetic entry is placed next to.
        outdir: Output directory.
        bundle_name: Vendor artifact file name.
        always_external: Native modules that stay unbundled.
        minify: Whether to minify the vendor artifact.
        platform: Target platform passed to the bundler.
        format: Output module format.

    Returns:
        Vendor build outcome.
    """
    vendor_path = (outdir / bundle_name).resolve()
    entry_path = vendor_entry_path(entrypoint)
    output: BuildOutput | None = None
    try:
        entry_path.write_text(render_vendor_entry(alias_map), encoding="utf-8")
        output = bundler.build(
            BuildRequest(
                entrypoints=[entry_path],
                outdir=outdir,
                external=list(always_external or []),
                minify=minify,
                platform=platform,
                format=format,
                naming=bundle_name,
            )
        )
    except Exception as exc:
        logger.warning("Failed to bundle vendor modules (error=%s)", exc)
        return VendorBuildOutcome(vendor_path=vendor_path, output=output, error=str(exc))
    finally:
        _remove_entry(entry_path)

    if not output.success:
        messages = [log.message for log in output.logs]
        logger.warning("Failed to bundle vendor modules (logs=%s)", messages)
        return VendorBuildOutcome(
            vendor_path=vendor_path,
            output=output,
            error="; ".join(messages) or "vendor build failed",
        )

    logger.info(
        "Bundled vendor modules (path=%s modules=%d)", vendor_path, len(alias_map)
    )
    return VendorBuildOutcome(vendor_path=vendor_path, output=output)


def _remove_entry(entry_path: Path) -> None:
    try:
        entry_path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning(
            "Failed to remove synthetic vendor entry",
            extra={"path": str(entry_path), "error": str(exc)},
        )

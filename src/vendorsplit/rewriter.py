# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Rewrite compiled first-party imports to point into the vendor artifact."""

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from vendorsplit.aliases import AliasMap

logger = logging.getLogger(__name__)

_SOURCE_TAIL = r"\s*(?P<q>['\"]){spec}(?P=q)"
_DEFAULT_IMPORT = r"\bimport\s+(?P<name>[A-Za-z_$][\w$]*)\s+from" + _SOURCE_TAIL + r"\s*;?"
_NAMESPACE_IMPORT = (
    r"\bimport\s*\*\s*as\s+(?P<name>[A-Za-z_$][\w$]*)\s+from" + _SOURCE_TAIL + r"\s*;?"
)
_NAMED_IMPORT = r"\bimport\s*\{(?P<names>[^}]*)\}\s*from" + _SOURCE_TAIL + r"\s*;?"
_REQUIRE_CALL = r"(?<![\w$.])(?:__)?require\s*\(" + _SOURCE_TAIL + r"\s*\)"
_RENAME_RE = re.compile(r"^(?P<imported>.+?)\s+as\s+(?P<local>[A-Za-z_$][\w$]*)$")

MODULE_FORMATS: tuple[str, ...] = ("esm", "cjs")


@dataclass(frozen=True)
class RewriteResult:
    """Store rewritten artifact text and substitution counters.

    Args:
        transformed_source: Rewritten JavaScript text.
        default_imports: Default imports replaced.
        namespace_imports: Namespace imports replaced.
        named_imports: Named import lists replaced.
        require_calls: ``require`` calls replaced.
        leftover_specifiers: Externals still quoted in the output.
    """

    transformed_source: str
    default_imports: int
    namespace_imports: int
    named_imports: int
    require_calls: int
    leftover_specifiers: tuple[str, ...] = ()

    @property
    def replacements(self) -> int:
        return (
            self.default_imports
            + self.namespace_imports
            + self.named_imports
            + self.require_calls
        )


class RewriteError(RuntimeError):
    """Represent an artifact that could not be rewritten."""


def vendor_import_path(artifact_path: Path, vendor_path: Path) -> str:
    """Compute the import path of the vendor artifact from an output file.

    Args:
        artifact_path: Rewritten artifact path.
        vendor_path: Vendor artifact path.

    Returns:
        POSIX relative path starting with ``./`` or ``../``.
    """
    relative = os.path.relpath(vendor_path, start=artifact_path.parent)
    relative = Path(relative).as_posix()
    if not relative.startswith("."):
        relative = f"./{relative}"
    return relative


def rewrite_imports(
    source: str, alias_map: AliasMap, vendor_import: str, module_format: str = "esm"
) -> RewriteResult:
    """Replace external imports with vendor aliases and prepend one vendor import.

    Args:
        source: Compiled first-party JavaScript.
        alias_map: External specifiers and their aliases.
        vendor_import: Import path of the vendor artifact.
        module_format: ``esm`` prepends an ``import`` statement, ``cjs`` a
            destructured ``require`` call.

    Returns:
        Rewritten source and counters.

    Raises:
        RewriteError: If the module format cannot load the vendor artifact.
    """
    if module_format not in MODULE_FORMATS:
        raise RewriteError(f"Unsupported module format for vendor wiring: {module_format}")
    text = source
    counts = {"default": 0, "namespace": 0, "named": 0, "require": 0}

    for spec, alias in alias_map.mapping.items():
        escaped = re.escape(spec)

        def _default(match: re.Match[str], alias: str = alias) -> str:
            counts["default"] += 1
            return f"const {match.group('name')} = {alias}.default ?? {alias};"

        def _namespace(match: re.Match[str], alias: str = alias) -> str:
            counts["namespace"] += 1
            return f"const {match.group('name')} = {alias};"

        def _named(match: re.Match[str], alias: str = alias) -> str:
            counts["named"] += 1
            return f"const {{ {_destructure(match.group('names'))} }} = {alias};"

        def _require(match: re.Match[str], alias: str = alias) -> str:
            counts["require"] += 1
            return alias

        text = _pattern(_DEFAULT_IMPORT, escaped).sub(_default, text)
        text = _pattern(_NAMESPACE_IMPORT, escaped).sub(_namespace, text)
        text = _pattern(_NAMED_IMPORT, escaped).sub(_named, text)
        text = _pattern(_REQUIRE_CALL, escaped).sub(_require, text)

    leftovers = tuple(
        spec
        for spec in alias_map.specifiers
        if f'"{spec}"' in text or f"'{spec}'" in text
    )
    if leftovers:
        logger.warning(
            "External specifiers remain after rewrite",
            extra={"specifiers": list(leftovers)},
        )

    return RewriteResult(
        transformed_source=_prepend_vendor_import(
            text, alias_map, vendor_import, module_format
        ),
        default_imports=counts["default"],
        namespace_imports=counts["namespace"],
        named_imports=counts["named"],
        require_calls=counts["require"],
        leftover_specifiers=leftovers,
    )


def rewrite_artifact(
    artifact_path: Path,
    alias_map: AliasMap,
    vendor_path: Path,
    module_format: str = "esm",
) -> RewriteResult:
    """Rewrite one compiled artifact in place.

    Args:
        artifact_path: Compiled first-party JavaScript file.
        alias_map: External specifiers and their aliases.
        vendor_path: Vendor artifact path.
        module_format: Module format of the artifact.

    Returns:
        Rewrite result for the artifact.

    Raises:
        RewriteError: If the artifact cannot be read or written, or the
            module format is unsupported.
    """
    try:
        source = artifact_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed reading artifact (path=%s error=%s)", artifact_path, exc)
        raise RewriteError(str(exc)) from exc

    result = rewrite_imports(
        source=source,
        alias_map=alias_map,
        vendor_import=vendor_import_path(artifact_path, vendor_path),
        module_format=module_format,
    )

    tmp_path = artifact_path.with_suffix(f"{artifact_path.suffix}.tmp")
    try:
        tmp_path.write_text(result.transformed_source, encoding="utf-8")
        tmp_path.replace(artifact_path)
    except OSError as exc:
        logger.warning("Failed writing artifact (path=%s error=%s)", artifact_path, exc)
        raise RewriteError(str(exc)) from exc
    return result


def _pattern(template: str, escaped_spec: str) -> re.Pattern[str]:
    """Compile one surface-form pattern for an escaped specifier."""
    return re.compile(template.replace("{spec}", escaped_spec))


def _destructure(names: str) -> str:
    """Convert an import binding list into a destructuring pattern body.

    Args:
        names: Text between the braces of a named import.

    Returns:
        Comma separated destructuring properties, ``a as b`` becoming ``a: b``.
    """
    properties: list[str] = []
    for item in names.split(","):
        binding = item.strip()
        if not binding:
            continue
        rename = _RENAME_RE.match(binding)
        if rename is not None:
            properties.append(f"{rename.group('imported')}: {rename.group('local')}")
        else:
            properties.append(binding)
    return ", ".join(properties)


def _prepend_vendor_import(
    text: str, alias_map: AliasMap, vendor_import: str, module_format: str
) -> str:
    """Prepend the vendor import statement, keeping a hashbang line first."""
    names = ", ".join(alias_map.aliases)
    source = json.dumps(vendor_import)
    if module_format == "cjs":
        statement = f"const {{ {names} }} = require({source});\n"
    else:
        statement = f"import {{ {names} }} from {source};\n"
    if text.startswith("#!"):
        first_line, _, rest = text.partition("\n")
        return f"{first_line}\n{statement}{rest}"
    return statement + text

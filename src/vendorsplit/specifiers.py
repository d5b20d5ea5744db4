# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Extract, validate and classify module specifiers from JavaScript sources."""

import logging
import re
from typing import Callable

logger = logging.getLogger(__name__)

ExternalPredicate = Callable[[str], bool]

VENDOR_DIR_MARKER = "node_modules"
PATH_ROOT_MARKER = "~"
LOCAL_PREFIXES: tuple[str, ...] = (".", "/", PATH_ROOT_MARKER)
INTERPOLATION_MARKER = "${"

_STATIC_IMPORT_RE = re.compile(
    r"\b(?:import|export)(?:\s+(?:[\w$*{}\s,]+)\s+from)?\s*['\"]([^'\"]+)['\"]"
)
_REQUIRE_RE = re.compile(r"\brequire\s*\(\s*['\"]([^'\"]+)['\"]\s*\)")
_DYNAMIC_IMPORT_RE = re.compile(r"\bimport\s*\(\s*['\"]([^'\"]+)['\"]\s*\)")

_EXTRACTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    _STATIC_IMPORT_RE,
    _REQUIRE_RE,
    _DYNAMIC_IMPORT_RE,
)
_ALLOWED_RE = re.compile(r"[\w$./\-@:~]+")
_HAS_WORD_CHAR_RE = re.compile(r"[^\W_]")


def extract_specifiers(stripped_text: str) -> list[str]:
    """Extract raw module specifiers from comment-stripped source.

    Matches of the static import/export pattern come first, then
    ``require(...)`` matches, then dynamic ``import(...)`` matches.

    Args:
        stripped_text: Source text after comment stripping.

    Returns:
        Ordered raw specifiers, duplicates included.
    """
    specifiers: list[str] = []
    for pattern in _EXTRACTION_PATTERNS:
        specifiers.extend(match.group(1) for match in pattern.finditer(stripped_text))
    return specifiers


def is_valid_specifier(raw: str) -> bool:
    """Check whether an extracted string is a plausible module specifier.

    Args:
        raw: Raw extracted string.

    Returns:
        True when the string can be used as a specifier.
    """
    if not raw or not raw.strip():
        return False
    if "\r" in raw or "\n" in raw:
        return False
    if INTERPOLATION_MARKER in raw:
        return False
    if raw != raw.strip():
        return False
    if _ALLOWED_RE.fullmatch(raw) is None:
        return False
    if _HAS_WORD_CHAR_RE.search(raw) is None:
        return False
    return True


def extract_valid_specifiers(stripped_text: str) -> list[str]:
    """Extract specifiers and drop the ones failing validation.

    Args:
        stripped_text: Source text after comment stripping.

    Returns:
        Ordered valid specifiers, duplicates included.
    """
    valid: list[str] = []
    for raw in extract_specifiers(stripped_text):
        if not is_valid_specifier(raw):
            logger.debug("Dropping implausible specifier (raw=%r)", raw)
            continue
        valid.append(raw)
    return valid


def is_local_specifier(spec: str) -> bool:
    """Check whether a specifier structurally points into the source tree."""
    return spec.startswith(LOCAL_PREFIXES)


def default_is_external(spec: str) -> bool:
    """Classify vendor-directory and bare package specifiers as external.

    Args:
        spec: Validated module specifier.

    Returns:
        True when the specifier belongs to the vendor artifact.
    """
    return VENDOR_DIR_MARKER in spec or not is_local_specifier(spec)

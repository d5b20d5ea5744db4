# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Build deterministic alias maps for external specifiers."""

import logging
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)

ALIAS_PREFIX = "_dep"


@dataclass(frozen=True)
class AliasMap:
    """Store the specifier to alias mapping for one build.

    Args:
        mapping: External specifier to synthetic identifier mapping. Insertion
            order is the order used for the vendor entry and for rewriting.
    """

    mapping: dict[str, str]

    @property
    def specifiers(self) -> tuple[str, ...]:
        return tuple(self.mapping)

    @property
    def aliases(self) -> tuple[str, ...]:
        return tuple(self.mapping.values())

    def alias_for(self, spec: str) -> str:
        """Return the alias of a specifier.

        Raises:
            KeyError: If the specifier is not mapped.
        """
        return self.mapping[spec]

    def covers(self, specifiers: Iterable[str]) -> bool:
        """Check whether every given specifier has an alias."""
        return all(spec in self.mapping for spec in specifiers)

    def __len__(self) -> int:
        return len(self.mapping)


def build_alias_map(externals: Iterable[str]) -> AliasMap:
    """Assign a unique ``_depN`` alias to each external specifier.

    Args:
        externals: External specifiers in the order aliases should be assigned.

    Returns:
        Injective alias map. Repeated specifiers keep their first alias.
    """
    mapping: dict[str, str] = {}
    for spec in externals:
        if spec in mapping:
            continue
        mapping[spec] = f"{ALIAS_PREFIX}{len(mapping)}"
    logger.debug("Built alias map", extra={"count": len(mapping)})
    return AliasMap(mapping=mapping)

# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for alias map generation."""

import pytest

from vendorsplit import build_alias_map


def test_ali_001_aliases_follow_input_order() -> None:
    alias_map = build_alias_map(["react", "lodash", "@scope/pkg"])

    assert alias_map.mapping == {
        "react": "_dep0",
        "lodash": "_dep1",
        "@scope/pkg": "_dep2",
    }
    assert alias_map.aliases == ("_dep0", "_dep1", "_dep2")


def test_ali_002_mapping_is_injective_and_stable() -> None:
    externals = ["a", "b", "a", "c", "b"]

    first = build_alias_map(externals)
    second = build_alias_map(externals)

    assert first.mapping == second.mapping
    assert len(set(first.aliases)) == len(first.aliases) == 3
    assert first.alias_for("a") == "_dep0"


def test_ali_003_unknown_specifier_raises() -> None:
    alias_map = build_alias_map(["a"])

    with pytest.raises(KeyError):
        alias_map.alias_for("zzz")
    assert alias_map.covers(["a"])
    assert not alias_map.covers(["a", "zzz"])

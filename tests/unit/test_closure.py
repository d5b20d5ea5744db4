# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the dependency closure scanner."""

from pathlib import Path

import pytest

from vendorsplit import collect_external_dependencies


def test_clo_001_collects_direct_and_transitive_externals(
    tmp_path: Path, write_file
) -> None:
    entry = write_file(
        tmp_path / "a.ts",
        "import { pad } from './b.ts';\nimport _ from 'lodash';\n",
    )
    local = write_file(tmp_path / "b.ts", "import leftPad from 'left-pad';\n")

    closure = collect_external_dependencies([entry])

    assert set(closure.externals) == {"left-pad", "lodash"}
    assert len(closure.externals) == 2
    assert local.resolve() in closure.scanned_files
    assert "./b.ts" not in closure.externals


def test_clo_002_shared_local_module_is_scanned_once(tmp_path: Path, write_file) -> None:
    entry = write_file(
        tmp_path / "main.ts", "import './left';\nimport './right';\nimport './shared';\n"
    )
    write_file(tmp_path / "left.ts", "import { s } from './shared';\n")
    write_file(tmp_path / "right.ts", "const s = require('./shared');\n")
    write_file(tmp_path / "shared.ts", "import dayjs from 'dayjs';\n")

    closure = collect_external_dependencies([entry])

    scanned_names = [path.name for path in closure.scanned_files]
    assert sorted(scanned_names) == ["left.ts", "main.ts", "right.ts", "shared.ts"]
    assert len(scanned_names) == len(set(scanned_names))
    assert closure.externals == ("dayjs",)


def test_clo_003_cycles_terminate_and_scan_each_file_once(
    tmp_path: Path, write_file
) -> None:
    a = write_file(tmp_path / "a.ts", "import { b } from './b';\nimport 'react';\n")
    b = write_file(tmp_path / "b.ts", "import { a } from './a';\nimport 'vue';\n")

    closure = collect_external_dependencies([a])

    assert closure.scanned_files == (a.resolve(), b.resolve())
    assert set(closure.externals) == {"react", "vue"}


def test_clo_004_commented_imports_are_ignored(tmp_path: Path, write_file) -> None:
    entry = write_file(
        tmp_path / "a.js",
        "// import _ from 'lodash';\n/* const x = require('moment'); */\nimport 'dayjs';\n",
    )

    closure = collect_external_dependencies([entry])

    assert closure.externals == ("dayjs",)


def test_clo_005_externals_are_unique_in_first_seen_order(
    tmp_path: Path, write_file
) -> None:
    entry = write_file(
        tmp_path / "a.js",
        "import b from 'beta';\nimport a from 'alpha';\nconst again = require('beta');\n",
    )

    closure = collect_external_dependencies([entry])

    assert closure.externals == ("beta", "alpha")


def test_clo_006_unresolved_and_missing_files_are_skipped(
    tmp_path: Path, write_file
) -> None:
    entry = write_file(tmp_path / "a.ts", "import './missing';\nimport 'react';\n")

    closure = collect_external_dependencies([entry, tmp_path / "ghost.ts"])

    assert closure.externals == ("react",)
    assert closure.unresolved == ((entry.resolve(), "./missing"),)
    assert closure.scanned_files == (entry.resolve(),)


def test_clo_007_unreadable_file_does_not_abort_scan(
    tmp_path: Path, write_file, monkeypatch: pytest.MonkeyPatch
) -> None:
    entry = write_file(tmp_path / "a.ts", "import './bad';\nimport './good';\n")
    bad = write_file(tmp_path / "bad.ts", "import 'never';\n")
    write_file(tmp_path / "good.ts", "import 'react';\n")
    original_read_text = Path.read_text

    def _failing_read_text(path: Path, *args, **kwargs) -> str:
        if path.name == "bad.ts":
            raise OSError("read failure")
        return original_read_text(path, *args, **kwargs)

    monkeypatch.setattr("pathlib.Path.read_text", _failing_read_text)

    closure = collect_external_dependencies([entry])

    assert closure.externals == ("react",)
    assert closure.skipped_files == (bad.resolve(),)


def test_clo_008_custom_predicate_controls_classification(
    tmp_path: Path, write_file
) -> None:
    entry = write_file(
        tmp_path / "a.ts", "import ui from '@acme/ui';\nimport lodash from 'lodash';\n"
    )

    closure = collect_external_dependencies(
        [entry], is_external=lambda spec: spec.startswith("@acme/")
    )

    assert closure.externals == ("@acme/ui",)


def test_clo_009_directory_index_modules_are_followed(
    tmp_path: Path, write_file
) -> None:
    entry = write_file(tmp_path / "a.js", "const lib = require('./lib');\n")
    write_file(tmp_path / "lib" / "index.js", "module.exports = require('chalk');\n")

    closure = collect_external_dependencies([entry])

    assert closure.externals == ("chalk",)
    assert len(closure.scanned_files) == 2


def test_clo_010_path_root_alias_is_reported_not_external(
    tmp_path: Path, write_file
) -> None:
    entry = write_file(tmp_path / "a.ts", "import { x } from '~/lib';\nimport 'react';\n")

    closure = collect_external_dependencies([entry])

    assert closure.externals == ("react",)
    assert closure.unresolved == ((entry.resolve(), "~/lib"),)

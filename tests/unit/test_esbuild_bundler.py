# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the esbuild command line adapter."""

import json
import subprocess
from pathlib import Path

import pytest
from fakes import FakeEngine, read

from vendorsplit import BuildRequest, BundlerError, EsbuildBundler, javascript_obfuscator
from vendorsplit.bundler import STAGING_DIR_PREFIX


def _metafile_arg(cmd: list[str]) -> Path:
    for arg in cmd:
        if arg.startswith("--metafile="):
            return Path(arg.split("=", 1)[1])
    raise AssertionError("metafile argument missing")


def test_esb_001_builds_command_and_reads_outputs(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: dict[str, object] = {}
    outdir = tmp_path / "dist"

    def _fake_run(cmd, **kwargs):
        seen["cmd"] = cmd
        seen["cwd"] = kwargs["cwd"]
        outdir.mkdir(parents=True, exist_ok=True)
        (outdir / "index.js").write_text("x", encoding="utf-8")
        _metafile_arg(cmd).write_text(
            json.dumps({"inputs": {}, "outputs": {"dist/index.js": {}}}),
            encoding="utf-8",
        )
        return subprocess.CompletedProcess(
            cmd, 0, stdout="", stderr="▲ [WARNING] Unused import\n"
        )

    monkeypatch.setattr("subprocess.run", _fake_run)
    bundler = EsbuildBundler(cwd=tmp_path)

    output = bundler.build(
        BuildRequest(
            entrypoints=[tmp_path / "src" / "index.ts"],
            outdir=outdir,
            external=["react", "@scope/pkg"],
            minify=True,
            platform="node",
        )
    )

    cmd = seen["cmd"]
    assert cmd[0] == "esbuild"
    assert "--bundle" in cmd
    assert f"--outdir={outdir}" in cmd
    assert "--external:react" in cmd
    assert "--external:@scope/pkg" in cmd
    assert "--minify" in cmd
    assert "--format=esm" in cmd
    assert "--platform=node" in cmd
    assert seen["cwd"] == tmp_path.resolve()
    assert output.success
    assert [artifact.path for artifact in output.outputs] == [
        (tmp_path / "dist" / "index.js").resolve()
    ]
    assert output.logs[0].level == "warning"


def test_esb_002_naming_uses_outfile(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, list[str]] = {}

    def _fake_run(cmd, **kwargs):
        seen["cmd"] = cmd
        _metafile_arg(cmd).write_text(json.dumps({"outputs": {}}), encoding="utf-8")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr("subprocess.run", _fake_run)

    EsbuildBundler(cwd=tmp_path).build(
        BuildRequest(
            entrypoints=[tmp_path / "entry.js"], outdir=tmp_path, naming="vendor.js"
        )
    )

    assert f"--outfile={tmp_path / 'vendor.js'}" in seen["cmd"]
    assert not any(arg.startswith("--outdir=") for arg in seen["cmd"])


def test_esb_003_failure_returns_unsuccessful_output(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(
            cmd, 1, stdout="", stderr='✘ [ERROR] Could not resolve "nope"\n'
        )

    monkeypatch.setattr("subprocess.run", _fake_run)

    output = EsbuildBundler(cwd=tmp_path).build(
        BuildRequest(entrypoints=[tmp_path / "a.js"], outdir=tmp_path)
    )

    assert not output.success
    assert output.outputs == []
    assert output.logs[0].level == "error"


def test_esb_004_missing_executable_raises(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _fake_run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr("subprocess.run", _fake_run)

    with pytest.raises(BundlerError):
        EsbuildBundler(command=["no-esbuild"], cwd=tmp_path).build(
            BuildRequest(entrypoints=[tmp_path / "a.js"], outdir=tmp_path)
        )


def test_esb_005_plugins_transform_sources_before_compiling(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, write_file
) -> None:
    index_source = 'import "./legacy/old.js";\nvar a = 1;\n'
    entry = write_file(tmp_path / "src" / "index.js", index_source)
    write_file(tmp_path / "src" / "legacy" / "old.js", "var legacy = 1;\n")
    write_file(tmp_path / "node_modules" / "pkg" / "index.js", "var lib = 1;\n")
    write_file(tmp_path / "dist" / "stale.js", "var stale = 1;\n")
    seen: dict[str, object] = {}

    def _fake_run(cmd, **kwargs):
        staged_entry = Path(cmd[1])
        staging = staged_entry.parents[1]
        seen["entry"] = staged_entry
        seen["staged"] = {
            path.relative_to(staging).as_posix(): read(path)
            for path in staging.rglob("*")
            if path.is_file()
        }
        (tmp_path / "dist" / "index.js").write_text("bundled\n", encoding="utf-8")
        _metafile_arg(cmd).write_text(
            json.dumps({"outputs": {"dist/index.js": {}}}), encoding="utf-8"
        )
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr("subprocess.run", _fake_run)
    plugin = javascript_obfuscator(exclude=["src/legacy/**"], engine=FakeEngine())

    output = EsbuildBundler(cwd=tmp_path).build(
        BuildRequest(entrypoints=[entry], outdir=tmp_path / "dist", plugins=[plugin])
    )

    staged_entry = seen["entry"]
    staging = staged_entry.parents[1]
    assert staging.name.startswith(STAGING_DIR_PREFIX)
    assert staging.parent == tmp_path.resolve()
    assert seen["staged"] == {
        "src/index.js": f"/*obf*/{index_source}",
        "src/legacy/old.js": "var legacy = 1;\n",
    }
    assert not staging.exists()
    assert read(entry) == index_source
    assert output.success
    assert read(tmp_path / "dist" / "index.js") == "bundled\n"


def test_esb_006_staging_is_removed_when_esbuild_cannot_run(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, write_file
) -> None:
    entry = write_file(tmp_path / "index.js", "var a = 1;\n")

    def _fake_run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr("subprocess.run", _fake_run)
    plugin = javascript_obfuscator(engine=FakeEngine())

    with pytest.raises(BundlerError):
        EsbuildBundler(cwd=tmp_path).build(
            BuildRequest(entrypoints=[entry], outdir=tmp_path / "dist", plugins=[plugin])
        )

    assert list(tmp_path.glob(f"{STAGING_DIR_PREFIX}*")) == []

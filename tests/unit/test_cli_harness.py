# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the extraction CLI harness."""

import io
import json
import re
from pathlib import Path

from cli.extractor_harness import discover_sources, run


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def test_cli_001_requires_path_argument() -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run([], stdout=stdout, stderr=stderr)

    assert exit_code == 2


def test_cli_002_fails_when_path_is_missing(tmp_path: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["--path", str(tmp_path / "missing")], stdout=stdout, stderr=stderr)

    assert exit_code == 2
    assert "Path does not exist" in stderr.getvalue()


def test_cli_003_rejects_non_positive_worker_count(tmp_path: Path) -> None:
    _write_file(tmp_path / "a.ts", "let a = 1;")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["--path", str(tmp_path), "--workers", "0"], stdout=stdout, stderr=stderr
    )

    assert exit_code == 2
    assert "max_workers" in stderr.getvalue()


def test_cli_004_json_output_to_stdout(tmp_path: Path) -> None:
    _write_file(tmp_path / "src" / "shapes.ts", "export interface Shape { area(): number }")
    _write_file(tmp_path / "src" / "util.ts", "namespace Shapes { export const unit = 1; }")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["--path", str(tmp_path), "--format", "json"], stdout=stdout, stderr=stderr
    )

    assert exit_code == 0
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert list(payload["files"]) == ["src/shapes.ts", "src/util.ts"]
    assert [s["name"] for s in payload["symbols"]] == ["Shape", "Shapes"]
    assert payload["symbols"][0]["modifiers"] == ["exported"]
    assert payload["diagnostics"] == []


def test_cli_005_json_output_to_file(tmp_path: Path) -> None:
    source = tmp_path / "one.ts"
    output = tmp_path / "out" / "result.json"
    _write_file(source, 'declare module "pkg" { export function f(): void; }')
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["--path", str(source), "--format", "json", "--output", str(output)],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert stdout.getvalue() == ""
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert list(payload["files"]) == ["one.ts"]
    assert payload["modules"]["pkg"]["members"][0]["name"] == "f"


def test_cli_006_table_output_lists_symbols_per_file(tmp_path: Path) -> None:
    _write_file(
        tmp_path / "greeter.ts",
        "class Greeter {\n  greet(name: string): void {}\n}\n",
    )
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["--path", str(tmp_path)], stdout=stdout, stderr=stderr)

    output = _strip_ansi(stdout.getvalue())
    assert exit_code == 0
    assert "greeter.ts" in output
    assert "Greeter" in output
    assert "greet" in output
    assert "(name: string): void" in output


def test_cli_007_strict_mode_fails_on_error_diagnostics(tmp_path: Path) -> None:
    _write_file(tmp_path / "dup.ts", "let a = 1;\nlet a = 2;\n")
    stdout = io.StringIO()
    stderr = io.StringIO()

    relaxed = run(["--path", str(tmp_path)], stdout=stdout, stderr=stderr)
    strict = run(["--path", str(tmp_path), "--strict"], stdout=io.StringIO(), stderr=io.StringIO())

    assert relaxed == 0
    assert strict == 1
    assert "dup.ts:2:5: error: Duplicate identifier 'a'" in stderr.getvalue()


def test_cli_008_discovery_skips_gitignored_and_vendor_paths(tmp_path: Path) -> None:
    _write_file(tmp_path / ".gitignore", "build/\n*.gen.ts\n")
    _write_file(tmp_path / "main.ts", "")
    _write_file(tmp_path / "types.d.ts", "")
    _write_file(tmp_path / "skip.gen.ts", "")
    _write_file(tmp_path / "build" / "out.ts", "")
    _write_file(tmp_path / "node_modules" / "lib" / "index.ts", "")
    _write_file(tmp_path / "lib" / "nested" / "deep.mts", "")
    _write_file(tmp_path / "lib" / "readme.md", "")

    found = discover_sources(tmp_path, (".ts", ".mts"))

    relative = [path.relative_to(tmp_path).as_posix() for path in found]
    assert relative == ["main.ts", "types.d.ts", "lib/nested/deep.mts"]


def test_cli_009_nested_gitignore_is_relative_to_its_directory(tmp_path: Path) -> None:
    _write_file(tmp_path / "pkg" / ".gitignore", "/generated.ts\n")
    _write_file(tmp_path / "generated.ts", "")
    _write_file(tmp_path / "pkg" / "generated.ts", "")

    found = discover_sources(tmp_path, (".ts",))

    assert [path.relative_to(tmp_path).as_posix() for path in found] == ["generated.ts"]


def test_cli_010_nested_negation_reincludes_file_below_its_directory(tmp_path: Path) -> None:
    _write_file(tmp_path / ".gitignore", "*.gen.ts\n")
    _write_file(tmp_path / "pkg" / ".gitignore", "# keep the public surface\n!api.gen.ts\n")
    _write_file(tmp_path / "api.gen.ts", "")
    _write_file(tmp_path / "pkg" / "api.gen.ts", "")
    _write_file(tmp_path / "pkg" / "internal.gen.ts", "")

    found = discover_sources(tmp_path, (".ts",))

    assert [path.relative_to(tmp_path).as_posix() for path in found] == ["pkg/api.gen.ts"]

# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the documentation test CLI harness."""

import io
import json
import os
import shlex
import sys
from pathlib import Path

import pytest

from cli.doctest_harness import ValidationError, find_project, prepend_path, run


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_cli_requires_a_subcommand() -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run([], stdout=stdout, stderr=stderr)

    assert exit_code == 2


def test_generate_requires_a_source() -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["generate"], stdout=stdout, stderr=stderr)

    assert exit_code == 2
    assert "at least --source or --markdown-source" in stderr.getvalue()


def test_generate_writes_test_file_and_source_map(sample_project: Path, tmp_path: Path) -> None:
    out = tmp_path / "generated" / "test_doc_examples.py"
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "generate",
            "--src",
            str(sample_project / "pkg"),
            "--mdsrc",
            str(sample_project / "README.md"),
            "--out",
            str(out),
        ],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert stdout.getvalue() == ""
    text = out.read_text(encoding="utf-8")
    assert text.endswith("\n# sourceMappingURL=test_doc_examples.py.map\n")
    compile(text, str(out), "exec")
    source_map = json.loads((out.parent / "test_doc_examples.py.map").read_text(encoding="utf-8"))
    assert source_map["version"] == 3
    assert source_map["file"] == "test_doc_examples.py"
    assert source_map["names"] == []
    assert len(source_map["sources"]) == 2


def test_generate_records_sources_relative_to_the_map(
    sample_project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(sample_project)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["generate", "--src", "pkg", "--mdsrc", "README.md", "-o", "build/out.py"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    map_dir = sample_project / "build"
    payload = json.loads((map_dir / "out.py.map").read_text(encoding="utf-8"))
    assert payload["file"] == "out.py"
    assert payload["sources"] == ["../pkg/greeter.py", "../README.md"]
    for source in payload["sources"]:
        assert (map_dir / source).resolve().is_file()


def test_generate_writes_to_stdout_without_out(sample_project: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["generate", "--mdsrc", str(sample_project / "README.md")],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert "    total = sum([1, 2, 3])\n    assert total == 6\n" in stdout.getvalue()
    assert "sourceMappingURL" not in stdout.getvalue()


def test_generate_uses_custom_template(sample_project: Path, tmp_path: Path) -> None:
    template = tmp_path / "names.j2"
    _write_file(template, "{% for e in examples %}# {{ e.name }}\n{% endfor %}")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["generate", "-t", str(template), "--mdsrc", str(sample_project / "README.md")],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert stdout.getvalue() == "# README.md #0\n# README.md #2\n"


def test_generate_fails_when_source_is_missing(tmp_path: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["generate", "--src", str(tmp_path / "missing")],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Generation failed" in stderr.getvalue()


def test_generate_fails_on_unparsable_source(tmp_path: Path) -> None:
    _write_file(tmp_path / "broken.py", "def broken(:\n")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(["generate", "--src", str(tmp_path)], stdout=stdout, stderr=stderr)

    assert exit_code == 2
    assert "Failed parsing" in stderr.getvalue()


def test_exec_exports_test_file_and_returns_command_status(sample_project: Path) -> None:
    check = (
        "import os, sys; "
        "path = os.environ['DOCTEST_FILE']; "
        "root = os.environ['PYTHONPATH'].split(os.pathsep)[0]; "
        "sys.exit(0 if os.path.isfile(path) and os.path.isfile(path + '.map') "
        "and os.path.isfile(os.path.join(root, 'pyproject.toml')) else 7)"
    )
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "exec",
            "--mdsrc",
            str(sample_project / "README.md"),
            "-p",
            str(sample_project),
            "--",
            sys.executable,
            "-c",
            check,
        ],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0


def test_exec_propagates_failing_exit_code(sample_project: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "exec",
            "--mdsrc",
            str(sample_project / "README.md"),
            "-p",
            str(sample_project / "pyproject.toml"),
            "-c",
            f"{shlex.quote(sys.executable)} -c 'raise SystemExit(3)'",
        ],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 3


def test_exec_runs_generated_tests_with_pytest(sample_project: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "exec",
            "--mdsrc",
            str(sample_project / "README.md"),
            "-p",
            str(sample_project),
            "-c",
            f'{shlex.quote(sys.executable)} -m pytest -q -p no:cacheprovider "$DOCTEST_FILE"',
        ],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0


def test_exec_requires_exactly_one_command(sample_project: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["exec", "--mdsrc", str(sample_project / "README.md"), "-p", str(sample_project)],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Please specify a command" in stderr.getvalue()


def test_find_project_searches_parent_directories(sample_project: Path) -> None:
    assert find_project(sample_project / "pkg", try_parents=True) == sample_project.resolve()
    with pytest.raises(ValidationError):
        find_project(sample_project / "pkg")
    with pytest.raises(ValidationError):
        find_project(sample_project / "README.md")


def test_prepend_path_puts_entry_first_once() -> None:
    current = os.pathsep.join(["", "/a", "/root", "/b"])

    assert prepend_path(current, "/root") == os.pathsep.join(["/root", "/a", "/b"])
    assert prepend_path("", "/root") == "/root"


def test_list_json_reports_examples(sample_project: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["list", "--mdsrc", str(sample_project / "README.md"), "--format", "json"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    payload = json.loads(stdout.getvalue())
    assert [item["name"] for item in payload["examples"]] == ["README.md #0", "README.md #2"]
    assert payload["examples"][1] == {
        "code": "value = 42",
        "language": None,
        "meta": None,
        "name": "README.md #2",
        "source_file": str(sample_project / "README.md"),
        "source_line": 12,
    }


def test_list_json_writes_output_file(sample_project: Path, tmp_path: Path) -> None:
    output = tmp_path / "report" / "examples.json"
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "list",
            "--src",
            str(sample_project / "pkg"),
            "--format",
            "json",
            "--output",
            str(output),
        ],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert [item["source_line"] for item in payload["examples"]] == [4, 12, 21]


def test_list_table_renders_example_names(sample_project: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["list", "--mdsrc", str(sample_project / "README.md")],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert "README.md #0" in stdout.getvalue()
    assert "value = 42" in stdout.getvalue()
    assert "None" not in stdout.getvalue()

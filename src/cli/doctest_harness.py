# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command line harness for generating and running documentation tests."""

import argparse
import json
import logging
import os
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import TextIO

import jinja2
from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table
from rich.text import Text

from doctestgen.correlator import CorrelationError, RenderResult
from doctestgen.model import Example
from doctestgen.pipeline import collect_examples, generate_tests
from doctestgen.sourcemap import source_mapping_url_comment

logger = logging.getLogger(__name__)

TEST_FILE_NAME = "test_doc_examples.py"
PROJECT_MARKERS: tuple[str, ...] = ("pyproject.toml", "setup.py")

TABLE_COLUMN_RATIOS: dict[str, int] = {
    "name": 3,
    "line": 1,
    "language": 1,
    "code": 6,
}


class ValidationError(RuntimeError):
    """Represent user input validation failure."""


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler on stderr.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                rich_tracebacks=True,
                show_path=False,
            )
        ],
    )


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-s",
        "--source",
        "--src",
        dest="source",
        action="append",
        default=[],
        help="Python file or directory to search for doc comment examples. Repeatable.",
    )
    parser.add_argument(
        "--mdsrc",
        "--markdown-source",
        dest="markdown_source",
        action="append",
        default=[],
        help="Markdown file or directory to search for examples. Repeatable.",
    )


def _add_template_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-t",
        "--template",
        required=False,
        help="Path of a Jinja2 template used to render the test file.",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="doctestgen")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate", help="Generate a test file and source map from examples."
    )
    _add_template_argument(generate_parser)
    _add_source_arguments(generate_parser)
    generate_parser.add_argument(
        "-o", "--out", required=False, help="Test file path; stdout by default."
    )
    generate_parser.add_argument(
        "-m",
        "--sourcemap",
        required=False,
        help="Source map path; defaults to <out>.map when --out is given.",
    )

    exec_parser = subparsers.add_parser(
        "exec",
        help="Generate the test file in a temporary directory and run a command.",
    )
    _add_template_argument(exec_parser)
    _add_source_arguments(exec_parser)
    exec_parser.add_argument(
        "-p",
        "--project",
        required=False,
        help="Project directory or pyproject.toml; searched upwards by default.",
    )
    exec_parser.add_argument(
        "-c", "--command", dest="shell_command", required=False, help="Shell code to run."
    )
    exec_parser.add_argument(
        "args_command",
        nargs="*",
        help="Command and arguments to run; use -- before options.",
    )

    list_parser = subparsers.add_parser("list", help="List the extracted examples.")
    _add_source_arguments(list_parser)
    list_parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    list_parser.add_argument(
        "--output",
        required=False,
        help="Optional output file path for raw JSON when --format json is used.",
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2

    try:
        if args.command == "generate":
            return _run_generate(args=args, stdout=stdout)
        if args.command == "exec":
            return _run_exec(args=args)
        if args.command == "list":
            return _run_list(args=args, stdout=stdout)
    except ValidationError as exc:
        logger.warning(f"Validation failed (error={exc})")
        stderr.write(f"{exc}\n")
        return 2
    except SyntaxError as exc:
        logger.warning(f"Failed parsing source (file={exc.filename} line={exc.lineno})")
        stderr.write(f"Failed parsing {exc.filename}:{exc.lineno}: {exc.msg}\n")
        return 2
    except (OSError, CorrelationError, jinja2.TemplateError) as exc:
        logger.warning(f"Generation failed (error={exc})")
        stderr.write(f"Generation failed: {exc}\n")
        return 2

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return 2


def _run_generate(args: argparse.Namespace, stdout: TextIO) -> int:
    """Run generate command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.

    Returns:
        Exit code.
    """
    _require_sources(args)
    out = Path(args.out) if args.out else None
    sourcemap = Path(args.sourcemap) if args.sourcemap else None
    if sourcemap is None and out is not None:
        sourcemap = out.with_name(f"{out.name}.map")
    write_test_file(
        args=args,
        out=out,
        sourcemap=sourcemap,
        stdout=stdout,
    )
    return 0


def write_test_file(
    args: argparse.Namespace,
    out: Path | None,
    sourcemap: Path | None,
    stdout: TextIO,
) -> RenderResult:
    """Generate the test file and write it with its source map.

    Args:
        args: Parsed CLI arguments carrying sources and template.
        out: Test file path; written to ``stdout`` when ``None``.
        sourcemap: Source map path; no map is written when ``None``.
        stdout: Standard output stream.

    Returns:
        Generation result.

    Raises:
        OSError: If reading inputs or writing outputs fails.
    """
    map_file = None
    if out is not None and sourcemap is not None:
        map_file = os.path.relpath(out, sourcemap.parent)
    result = generate_tests(
        sources=args.source,
        markdown_sources=args.markdown_source,
        template=_read_template(args.template),
        file=map_file,
    )

    text = result.text
    if sourcemap is not None:
        url = str(sourcemap)
        if out is not None:
            url = os.path.relpath(sourcemap, out.parent)
        text = f"{text}\n{source_mapping_url_comment(url)}"

    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text, encoding="utf-8")
    else:
        stdout.write(text)
    if sourcemap is not None:
        sourcemap.parent.mkdir(parents=True, exist_ok=True)
        sourcemap.write_text(
            result.source_map.to_json(source_root=sourcemap.parent), encoding="utf-8"
        )

    logger.info(
        f"Test file generated (out={out or '<stdout>'} sourcemap={sourcemap} "
        f"mappings={len(result.source_map.mappings)})"
    )
    return result


def _run_exec(args: argparse.Namespace) -> int:
    """Run exec command.

    Args:
        args: Parsed CLI arguments.

    Returns:
        Exit code of the executed command.
    """
    has_args_command = bool(args.args_command)
    has_shell_command = args.shell_command is not None
    if has_args_command == has_shell_command:
        raise ValidationError(
            "Please specify a command either in the arguments or with -c."
        )

    if args.project:
        project_root = find_project(Path(args.project))
    else:
        project_root = find_project(Path.cwd(), try_parents=True)

    with tempfile.TemporaryDirectory(prefix=f"doctestgen-{project_root.name}-") as tmp:
        out = Path(tmp) / TEST_FILE_NAME
        write_test_file(
            args=args,
            out=out,
            sourcemap=out.with_name(f"{out.name}.map"),
            stdout=sys.stdout,
        )
        env = dict(os.environ)
        env["DOCTEST_FILE"] = str(out)
        env["PYTHONPATH"] = prepend_path(env.get("PYTHONPATH", ""), str(project_root))

        logger.info(f"Running command (project={project_root} test_file={out})")
        if has_shell_command:
            completed = subprocess.run(args.shell_command, shell=True, env=env)
        else:
            completed = subprocess.run(args.args_command, env=env)

    if completed.returncode < 0:
        return 128 - completed.returncode
    return completed.returncode


def _run_list(args: argparse.Namespace, stdout: TextIO) -> int:
    """Run list command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.

    Returns:
        Exit code.
    """
    _require_sources(args)
    examples = collect_examples(
        sources=args.source, markdown_sources=args.markdown_source
    )
    if args.format == "json":
        if args.output:
            _write_json_file(examples=examples, output_path=Path(args.output))
        else:
            _write_json(examples=examples, stdout=stdout)
    else:
        _write_table(examples=examples, stdout=stdout)
    return 0


def find_project(path: Path, try_parents: bool = False) -> Path:
    """Find the project root directory.

    Args:
        path: Project marker file or a directory to search.
        try_parents: Also search parent directories of ``path``.

    Returns:
        Resolved directory containing a project marker.

    Raises:
        ValidationError: If no project marker is found.
    """
    resolved = path.resolve()
    if resolved.is_file():
        if resolved.name in PROJECT_MARKERS:
            return resolved.parent
        raise ValidationError(f"Not a project file: {resolved}")

    candidates = [resolved, *resolved.parents] if try_parents else [resolved]
    for candidate in candidates:
        if any((candidate / marker).is_file() for marker in PROJECT_MARKERS):
            return candidate
    raise ValidationError(f"No pyproject.toml or setup.py found for: {resolved}")


def prepend_path(current: str, entry: str) -> str:
    """Prepend ``entry`` to an ``os.pathsep`` separated path list.

    Args:
        current: Existing list; may be empty.
        entry: Entry to put first.

    Returns:
        Updated path list without duplicate or empty entries.
    """
    parts = [part for part in current.split(os.pathsep) if part and part != entry]
    return os.pathsep.join([entry, *parts])


def _require_sources(args: argparse.Namespace) -> None:
    if not args.source and not args.markdown_source:
        raise ValidationError("Please specify at least --source or --markdown-source.")


def _read_template(path: str | None) -> str | None:
    if path is None:
        return None
    return Path(path).read_text(encoding="utf-8")


def _example_payload(example: Example) -> dict[str, object]:
    return {
        "name": example.name,
        "source_file": example.source_file,
        "source_line": example.source_line,
        "language": example.language,
        "meta": example.meta,
        "code": example.code,
    }


def _write_json(examples: list[Example], stdout: TextIO) -> None:
    """Write examples in JSON format.

    Args:
        examples: Extracted examples.
        stdout: Standard output stream.
    """
    payload = {"examples": [_example_payload(example) for example in examples]}
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        json.dumps(payload, indent=2, sort_keys=True),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def _write_json_file(examples: list[Example], output_path: Path) -> None:
    """Write raw JSON payload to an output file.

    Raises:
        OSError: If directory creation or file writing fails.
    """
    payload = {"examples": [_example_payload(example) for example in examples]}
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")


def _write_table(examples: list[Example], stdout: TextIO) -> None:
    """Write examples as one table per source file.

    Args:
        examples: Extracted examples.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    examples_by_file: dict[str, list[Example]] = {}
    for example in examples:
        examples_by_file.setdefault(example.source_file, []).append(example)

    for source_file in sorted(examples_by_file):
        console.rule(source_file, style=Style(color="cyan"), characters="-")
        table = Table(show_header=True, show_lines=True, expand=True)
        table.add_column("name", ratio=TABLE_COLUMN_RATIOS["name"], overflow="fold")
        table.add_column(
            "line",
            ratio=TABLE_COLUMN_RATIOS["line"],
            justify="right",
            overflow="fold",
        )
        table.add_column(
            "language", ratio=TABLE_COLUMN_RATIOS["language"], overflow="fold"
        )
        table.add_column("code", ratio=TABLE_COLUMN_RATIOS["code"], overflow="fold")
        for example in examples_by_file[source_file]:
            table.add_row(
                Text(example.name),
                str(example.source_line),
                Text(example.language or ""),
                Text(example.code),
            )
        console.print(table)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()

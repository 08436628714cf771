import sys
from pathlib import Path

import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()

GREETER_LINES: list[str] = [
    '"""Module summary.',
    "",
    "```python",
    "import math",
    "```",
    '"""',
    "",
    "",
    "class Greeter:",
    '    """Say hello.',
    "",
    "    @example greet = Greeter()",
    "    greet.hello()",
    '    """',
    "",
    "    def hello(self):",
    '        """Return a greeting.',
    "",
    "        Some text.",
    "",
    '            value = "hi"',
    "",
    "        @param none",
    '        """',
    '        return "hi"',
    "",
]

README_LINES: list[str] = [
    "# Sample",
    "",
    "```python",
    "total = sum([1, 2, 3])",
    "assert total == 6",
    "```",
    "",
    "```python noexec",
    "raise SystemExit(1)",
    "```",
    "",
    "    value = 42",
    "",
]


def write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """Create a project with one documented module and one markdown file."""
    project = tmp_path / "project"
    write_file(project / "pyproject.toml", '[project]\nname = "sample"\n')
    write_file(project / "pkg" / "greeter.py", "\n".join(GREETER_LINES))
    write_file(project / "README.md", "\n".join(README_LINES))
    return project

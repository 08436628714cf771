# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Locate documentation source files beneath user supplied paths."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import pathspec

logger = logging.getLogger(__name__)

DOC_SUFFIXES: frozenset[str] = frozenset({".py"})
MARKDOWN_SUFFIXES: frozenset[str] = frozenset({".md", ".markdown"})

IGNORE_FILE_NAME = ".gitignore"

_SKIPPED_DIR_NAMES: frozenset[str] = frozenset({".git", "__pycache__"})


@dataclass(frozen=True)
class IgnoreRules:
    """Patterns of one ignore file, matched relative to its directory."""

    base: Path
    spec: pathspec.GitIgnoreSpec


class IgnoreStack:
    """Ignore rules in effect inside one directory, outermost first.

    Patterns are evaluated in order across all files and the last matching
    pattern decides, so a nested ignore file can re-include what an outer
    one excluded.
    """

    def __init__(self, rules: tuple[IgnoreRules, ...] = ()) -> None:
        self._rules = rules

    def descend(self, directory: Path) -> "IgnoreStack":
        """Return the stack for ``directory``, adding its own ignore file.

        Raises:
            OSError: If the ignore file cannot be read.
            UnicodeDecodeError: If the ignore file is not valid UTF-8.
        """
        ignore_file = directory / IGNORE_FILE_NAME
        if not ignore_file.is_file():
            return self
        lines = ignore_file.read_text(encoding="utf-8").splitlines()
        rules = IgnoreRules(base=directory, spec=pathspec.GitIgnoreSpec.from_lines(lines))
        return IgnoreStack(self._rules + (rules,))

    def ignores(self, path: Path, is_dir: bool) -> bool:
        """Check whether ``path`` is excluded by the stacked rules."""
        ignored = False
        for rules in self._rules:
            relative = path.relative_to(rules.base).as_posix()
            if is_dir:
                relative = f"{relative}/"
            for pattern in rules.spec.patterns:
                if pattern.include is None:
                    continue
                if pattern.match_file(relative) is not None:
                    ignored = pattern.include
        return ignored


def find_files(paths: Iterable[str | Path], suffixes: Iterable[str]) -> list[Path]:
    """Expand files and directories into a flat list of matching files.

    Explicitly named files are kept whatever their suffix. Directories are
    searched recursively for files carrying one of ``suffixes``.

    Args:
        paths: Files or directories to search.
        suffixes: Accepted file suffixes, including the leading dot.

    Returns:
        Sorted list of distinct files.

    Raises:
        FileNotFoundError: If one of ``paths`` does not exist.
    """
    paths = list(paths)
    accepted = frozenset(suffix.lower() for suffix in suffixes)
    found: set[Path] = set()
    for raw_path in paths:
        path = Path(raw_path)
        if path.is_file():
            found.add(path)
        elif path.is_dir():
            found.update(_search_directory(root=path, suffixes=accepted))
        else:
            raise FileNotFoundError(f"Source path does not exist: {path}")
    files = sorted(found)
    logger.debug(
        "File discovery completed",
        extra={"paths": [str(p) for p in paths], "count": len(files)},
    )
    return files


def _search_directory(root: Path, suffixes: frozenset[str]) -> list[Path]:
    files: list[Path] = []
    pending: list[tuple[Path, IgnoreStack]] = [(root, IgnoreStack().descend(root))]
    while pending:
        directory, ignore = pending.pop()
        for child in directory.iterdir():
            if child.is_dir():
                if child.name in _SKIPPED_DIR_NAMES:
                    continue
                if ignore.ignores(child, is_dir=True):
                    logger.debug(f"Skipping ignored directory (path={child})")
                    continue
                pending.append((child, ignore.descend(child)))
            elif child.suffix.lower() in suffixes:
                if ignore.ignores(child, is_dir=False):
                    logger.debug(f"Skipping ignored file (path={child})")
                    continue
                files.append(child)
    return files

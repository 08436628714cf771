# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain model for extracted documentation examples."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Example:
    """Represent one extracted documentation example.

    Attributes:
        name: Test identifier, unique within one rendered batch.
        code: Verbatim example body without fence or comment leader.
        language: Fence language word; ``None`` for indented blocks and tags.
        source_file: Path of the file the example was extracted from.
        source_line: Line in ``source_file`` where ``code`` starts (1-based).
        provenance: Originating mdast code node or doc-comment object.
        meta: Remainder of the fence info string after the language word.
    """

    name: str
    code: str
    language: str | None
    source_file: str
    source_line: int
    provenance: Any = None
    meta: str | None = None

    @property
    def end_line(self) -> int:
        """Last source line covered by ``code`` (1-based)."""
        return self.source_line + line_count(self.code) - 1


def line_count(code: str) -> int:
    """Count newline-delimited lines; the empty string is one line."""
    return code.count("\n") + 1

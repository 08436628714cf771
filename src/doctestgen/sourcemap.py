# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Build version 3 source maps."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SOURCE_MAP_VERSION = 3

_BASE64_DIGITS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_VLQ_SHIFT = 5
_VLQ_CONTINUATION = 1 << _VLQ_SHIFT
_VLQ_MASK = _VLQ_CONTINUATION - 1


@dataclass(frozen=True)
class Mapping:
    """Represent one generated-to-original position pair.

    Attributes:
        generated_line: Line in the generated file (1-based).
        generated_column: Column in the generated file (0-based).
        source: Original file path.
        original_line: Line in the original file (1-based).
        original_column: Column in the original file (0-based).
    """

    generated_line: int
    generated_column: int
    source: str
    original_line: int
    original_column: int


class SourceMapGenerator:
    """Accumulate mappings and serialise them as a source map."""

    def __init__(self, file: str | None = None) -> None:
        """Initialize an empty generator.

        Args:
            file: Optional name of the generated file.
        """
        self.file = file
        self._mappings: list[Mapping] = []

    @property
    def mappings(self) -> list[Mapping]:
        """Mappings in insertion order."""
        return list(self._mappings)

    def add_mapping(
        self,
        generated_line: int,
        generated_column: int,
        source: str,
        original_line: int,
        original_column: int,
    ) -> None:
        """Record one mapping.

        Raises:
            ValueError: If a line is below 1 or a column is negative.
        """
        if generated_line < 1 or original_line < 1:
            raise ValueError("Source map lines are 1-based")
        if generated_column < 0 or original_column < 0:
            raise ValueError("Source map columns must not be negative")
        self._mappings.append(
            Mapping(
                generated_line=generated_line,
                generated_column=generated_column,
                source=source,
                original_line=original_line,
                original_column=original_column,
            )
        )

    def sources(self) -> list[str]:
        """Return source paths in order of first use."""
        return list(dict.fromkeys(mapping.source for mapping in self._mappings))

    def to_dict(self, source_root: str | Path | None = None) -> dict[str, Any]:
        """Serialise to the version 3 source map structure.

        Args:
            source_root: Directory holding the map; sources are made
                relative to it when given.
        """
        payload: dict[str, Any] = {"version": SOURCE_MAP_VERSION}
        if self.file is not None:
            payload["file"] = self.file
        payload["sources"] = [
            _relative_source(source, source_root) for source in self.sources()
        ]
        payload["names"] = []
        payload["mappings"] = self._encode_mappings()
        return payload

    def to_json(self, source_root: str | Path | None = None) -> str:
        """Serialise to source map JSON text."""
        return json.dumps(self.to_dict(source_root=source_root))

    def _encode_mappings(self) -> str:
        source_index = {source: index for index, source in enumerate(self.sources())}
        ordered = sorted(
            self._mappings,
            key=lambda m: (m.generated_line, m.generated_column),
        )

        # Generated columns restart on every line; all other fields are
        # relative to the previous segment in the whole file.
        lines: list[list[str]] = []
        previous_column = 0
        previous_source = 0
        previous_original_line = 0
        previous_original_column = 0
        for mapping in ordered:
            if len(lines) < mapping.generated_line:
                lines.extend([] for _ in range(mapping.generated_line - len(lines)))
                previous_column = 0
            index = source_index[mapping.source]
            original_line = mapping.original_line - 1
            lines[mapping.generated_line - 1].append(
                encode_vlq(mapping.generated_column - previous_column)
                + encode_vlq(index - previous_source)
                + encode_vlq(original_line - previous_original_line)
                + encode_vlq(mapping.original_column - previous_original_column)
            )
            previous_column = mapping.generated_column
            previous_source = index
            previous_original_line = original_line
            previous_original_column = mapping.original_column
        return ";".join(",".join(segments) for segments in lines)


def encode_vlq(value: int) -> str:
    """Encode one integer as a base64 VLQ.

    Args:
        value: Signed integer.

    Returns:
        Base64 VLQ digits.
    """
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    digits: list[str] = []
    while True:
        digit = vlq & _VLQ_MASK
        vlq >>= _VLQ_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUATION
        digits.append(_BASE64_DIGITS[digit])
        if not vlq:
            break
    return "".join(digits)


def source_mapping_url_comment(url: str) -> str:
    """Return the trailer line pointing a generated Python file at its map."""
    return f"# sourceMappingURL={url}\n"


def _relative_source(source: str, source_root: str | Path | None) -> str:
    if source_root is None:
        return source
    return os.path.relpath(source, source_root).replace(os.sep, "/")

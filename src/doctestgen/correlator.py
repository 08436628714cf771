# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Render examples through any text renderer while tracking a source map.

The renderer never sees example code. Each example's ``code`` is swapped for
a single-line placeholder carrying a random token; the placeholders are
located in the rendered text afterwards and expanded back into the original
code, line by line, recording one mapping per line. Renderers may reorder,
wrap, duplicate and indent placeholders freely as long as each occurrence is
reproduced verbatim and preceded only by spaces or tabs on its line.
"""

import logging
import re
import uuid
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Sequence

from doctestgen.model import Example
from doctestgen.sourcemap import SourceMapGenerator

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "<<example:"
PLACEHOLDER_SUFFIX = ">>"

_PLACEHOLDER_RE = re.compile(
    r"^([ \t]*)<<example:"
    r"([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})>>",
    re.MULTILINE,
)

Renderer = Callable[[list[Example]], str]


class CorrelationError(RuntimeError):
    """Represent a failure to map rendered code back to its source."""


@dataclass(frozen=True)
class RenderResult:
    """Store rendered text and its source map.

    Attributes:
        text: Rendered output with example code expanded.
        source_map: Mappings from output lines to original files.
    """

    text: str
    source_map: SourceMapGenerator


def placeholder(token: str) -> str:
    """Return the placeholder line content for ``token``."""
    return f"{PLACEHOLDER_PREFIX}{token}{PLACEHOLDER_SUFFIX}"


def render_with_source_map(
    examples: Sequence[Example],
    render: Renderer,
    file: str | None = None,
) -> RenderResult:
    """Render examples and correlate every emitted code line with its source.

    Args:
        examples: Examples to render.
        render: Function turning an example list into text.
        file: Optional generated file name recorded in the source map.

    Returns:
        Rendered text and source map.

    Raises:
        FileNotFoundError: If an example's source file cannot be found.
        CorrelationError: If an example points past the end of its file.
    """
    by_token: dict[str, Example] = {str(uuid.uuid4()): example for example in examples}
    substituted = [
        replace(example, code=placeholder(token)) for token, example in by_token.items()
    ]
    rendered = render(substituted)

    source_map = SourceMapGenerator(file=file)
    source_cache: dict[str, list[str]] = {}
    chunks: list[str] = []
    out_line = 1
    last_end = 0
    expanded = 0
    for match in _PLACEHOLDER_RE.finditer(rendered):
        preceding = rendered[last_end : match.start()]
        chunks.append(preceding)
        out_line += preceding.count("\n")
        last_end = match.end()

        indent, token = match.group(1), match.group(2)
        example = by_token.get(token)
        if example is None:
            # Rendered content that merely looks like a placeholder.
            logger.debug(f"Leaving unknown placeholder untouched (token={token})")
            chunks.append(match.group(0))
            continue

        for offset, line in enumerate(example.code.split("\n")):
            chunks.append(f"{indent}{line}\n")
            original_line = example.source_line + offset
            source_line = _source_line(
                source_cache=source_cache,
                file=example.source_file,
                line=original_line,
            )
            source_map.add_mapping(
                generated_line=out_line,
                generated_column=len(indent),
                source=example.source_file,
                original_line=original_line,
                original_column=max(0, len(source_line) - len(line)),
            )
            out_line += 1
        expanded += 1

    chunks.append(rendered[last_end:])
    logger.info(
        "Rendered examples",
        extra={
            "examples": len(by_token),
            "expanded": expanded,
            "mappings": len(source_map.mappings),
        },
    )
    return RenderResult(text="".join(chunks), source_map=source_map)


def _source_line(source_cache: dict[str, list[str]], file: str, line: int) -> str:
    """Return line ``line`` (1-based) of ``file``, reading each file once."""
    if file not in source_cache:
        source_cache[file] = Path(file).read_text(encoding="utf-8").split("\n")
    lines = source_cache[file]
    if not 1 <= line <= len(lines):
        raise CorrelationError(
            f"Example line {line} is outside of {file} ({len(lines)} lines)"
        )
    return lines[line - 1]

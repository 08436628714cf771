# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Extract code examples from markdown trees."""

import logging
from pathlib import Path
from typing import Iterable

from doctestgen.discovery import MARKDOWN_SUFFIXES, find_files
from doctestgen.mdast import CodeNode, Node, code_nodes, parse_markdown
from doctestgen.model import Example, line_count

logger = logging.getLogger(__name__)


def extract_markdown_examples(tree: Node, file: str | Path) -> list[Example]:
    """Extract one example per code block in document order.

    Args:
        tree: Parsed markdown tree.
        file: Path of the markdown file the tree was parsed from.

    Returns:
        Examples named ``"<basename> #<index>"``.
    """
    file_path = str(file)
    base_name = Path(file_path).name
    examples: list[Example] = []
    for index, node in enumerate(code_nodes(tree)):
        examples.append(
            Example(
                name=f"{base_name} #{index}",
                code=node.value,
                language=node.lang,
                source_file=file_path,
                source_line=code_start_line(node),
                provenance=node,
                meta=node.meta,
            )
        )
    return examples


def code_start_line(node: CodeNode) -> int:
    """Return the line on which the code body of ``node`` starts.

    A fenced block reports a span that includes its fence lines, so it covers
    more lines than its body has; the opening fence is skipped in that case.

    Args:
        node: Code node with position information.

    Returns:
        Line number (1-based) relative to the parsed text.

    Raises:
        ValueError: If the node carries no position.
    """
    if node.position is None:
        raise ValueError("Code node has no position information")
    start = node.position.start.line
    reported_lines = node.position.end.line - start + 1
    if reported_lines > line_count(node.value):
        return start + 1
    return start


def find_markdown_examples(paths: Iterable[str | Path]) -> list[Example]:
    """Discover markdown files and extract their examples.

    Args:
        paths: Markdown files or directories to search.

    Returns:
        Examples of all files, file by file in discovery order.

    Raises:
        FileNotFoundError: If one of ``paths`` does not exist.
        OSError: If a file cannot be read.
    """
    examples: list[Example] = []
    for file_path in find_files(paths, MARKDOWN_SUFFIXES):
        examples.extend(load_markdown_examples(file_path))
    return examples


def load_markdown_examples(file_path: str | Path) -> list[Example]:
    """Read, parse and extract one markdown file."""
    text = Path(file_path).read_text(encoding="utf-8")
    examples = extract_markdown_examples(parse_markdown(text), file_path)
    logger.debug(f"Extracted markdown examples (path={file_path} count={len(examples)})")
    return examples

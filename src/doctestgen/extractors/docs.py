# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Extract code examples from doc comments."""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterable

from doctestgen.discovery import DOC_SUFFIXES, find_files
from doctestgen.doc_comments import DocComment, load_doc_comments
from doctestgen.extractors.markdown import extract_markdown_examples
from doctestgen.model import Example

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "::"


def extract_doc_examples(doc: DocComment) -> list[Example]:
    """Extract and name the examples of one documented symbol.

    Args:
        doc: Doc comment of the symbol.

    Returns:
        Named examples; ``@example`` tags first, then description code blocks.
    """
    return extract_examples([doc])


def extract_examples(docs: Iterable[DocComment]) -> list[Example]:
    """Extract and name the examples of several documented symbols.

    Examples are grouped by ``(file stem, symbol path)`` before they are
    numbered, so each key gets its own counter even when the key occurs on
    more than one doc comment.

    Args:
        docs: Doc comments, usually all comments of one file.

    Returns:
        Named examples, grouped by key in first-seen order.
    """
    groups: dict[str, list[Example]] = {}
    for doc in docs:
        for example in _raw_examples(doc):
            key = f"{Path(doc.context.file).stem} {doc_path(doc)}"
            groups.setdefault(key, []).append(example)

    named: list[Example] = []
    for key, examples in groups.items():
        for index, example in enumerate(examples):
            named.append(replace(example, name=f"{key} #{index}"))
    return named


def doc_path(doc: DocComment) -> str:
    """Join the symbol path of ``doc`` (``Class::method``)."""
    return PATH_SEPARATOR.join(ancestor.name for ancestor in doc.path)


def _raw_examples(doc: DocComment) -> list[Example]:
    """Collect unnamed examples of one doc comment in encounter order."""
    start_line = doc.loc.start.line
    file = doc.context.file
    examples: list[Example] = []

    description_line = start_line
    for tag in doc.tags:
        if tag.title == "example":
            # Only exact when the example text starts on the tag's own line.
            examples.append(
                Example(
                    name="",
                    code=tag.description,
                    language=None,
                    source_file=file,
                    source_line=tag.line_number + start_line + 1,
                    provenance=doc,
                )
            )
        elif tag.title == "description":
            description_line += tag.line_number

    for block in extract_markdown_examples(doc.description, file):
        examples.append(
            replace(
                block,
                name="",
                source_line=block.source_line + description_line,
                provenance=doc,
            )
        )
    return examples


def find_doc_examples(paths: Iterable[str | Path]) -> list[Example]:
    """Discover Python files and extract the examples of their doc comments.

    Args:
        paths: Python files or directories to search.

    Returns:
        Examples of all files, file by file in discovery order.

    Raises:
        FileNotFoundError: If one of ``paths`` does not exist.
        SyntaxError: If a discovered file is not valid Python.
    """
    examples: list[Example] = []
    for file_path in find_files(paths, DOC_SUFFIXES):
        examples.extend(load_doc_examples(file_path))
    return examples


def load_doc_examples(file_path: str | Path) -> list[Example]:
    """Read, parse and extract one Python file."""
    docs = load_doc_comments(file_path)
    examples = extract_examples(docs)
    logger.debug(
        f"Extracted doc examples (path={file_path} docs={len(docs)} count={len(examples)})"
    )
    return examples

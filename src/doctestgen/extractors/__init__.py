# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Example extractors for markdown files and doc comments."""

from doctestgen.extractors.docs import (
    extract_doc_examples,
    extract_examples,
    find_doc_examples,
)
from doctestgen.extractors.markdown import (
    extract_markdown_examples,
    find_markdown_examples,
)

__all__ = [
    "extract_doc_examples",
    "extract_examples",
    "extract_markdown_examples",
    "find_doc_examples",
    "find_markdown_examples",
]

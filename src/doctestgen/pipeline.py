# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""End-to-end generation of test files from documentation examples."""

import concurrent.futures
import logging
from pathlib import Path
from typing import Callable, Iterable

from doctestgen.correlator import RenderResult, Renderer, render_with_source_map
from doctestgen.discovery import DOC_SUFFIXES, MARKDOWN_SUFFIXES, find_files
from doctestgen.extractors.docs import load_doc_examples
from doctestgen.extractors.markdown import load_markdown_examples
from doctestgen.model import Example
from doctestgen.templates import make_template_renderer

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4
NOEXEC_MARKER = "noexec"

ExampleFilter = Callable[[Example], bool]


def default_accept(example: Example) -> bool:
    """Reject examples whose fence language or meta contains ``noexec``."""
    for value in (example.language, example.meta):
        if value is not None and NOEXEC_MARKER in value:
            return False
    return True


def collect_examples(
    sources: Iterable[str | Path] = (),
    markdown_sources: Iterable[str | Path] = (),
    accept: ExampleFilter | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[Example]:
    """Discover, extract and filter examples.

    Files are read and parsed concurrently; results are reassembled in
    discovery order with doc comment examples before markdown examples.

    Args:
        sources: Python files or directories with documented code.
        markdown_sources: Markdown files or directories.
        accept: Predicate keeping an example; ``default_accept`` when ``None``.
        max_workers: Maximum number of worker threads for reading files.

    Returns:
        Accepted examples.

    Raises:
        ValueError: If ``max_workers`` is not greater than zero.
        FileNotFoundError: If a source path does not exist.
        OSError: If a file cannot be read.
        SyntaxError: If a Python source cannot be parsed.
    """
    if max_workers <= 0:
        raise ValueError("max_workers must be > 0")
    accept = accept or default_accept

    jobs: list[tuple[Callable[[Path], list[Example]], Path]] = [
        (load_doc_examples, path) for path in find_files(sources, DOC_SUFFIXES)
    ]
    jobs.extend(
        (load_markdown_examples, path)
        for path in find_files(markdown_sources, MARKDOWN_SUFFIXES)
    )

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(load, path) for load, path in jobs]
        extracted = [future.result() for future in futures]

    examples = [example for batch in extracted for example in batch]
    accepted = [example for example in examples if accept(example)]
    logger.info(
        f"Example collection completed (files={len(jobs)} examples={len(examples)} "
        f"rejected={len(examples) - len(accepted)})"
    )
    return accepted


def generate_tests(
    sources: Iterable[str | Path] = (),
    markdown_sources: Iterable[str | Path] = (),
    template: str | None = None,
    accept: ExampleFilter | None = None,
    renderer: Renderer | None = None,
    file: str | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> RenderResult:
    """Generate a test file and its source map from documentation examples.

    Args:
        sources: Python files or directories with documented code.
        markdown_sources: Markdown files or directories.
        template: Jinja2 template source; the default pytest template when ``None``.
        accept: Predicate keeping an example; ``default_accept`` when ``None``.
        renderer: Render function overriding ``template``.
        file: Generated file name recorded in the source map.
        max_workers: Maximum number of worker threads for reading files.

    Returns:
        Rendered test file text and its source map.
    """
    examples = collect_examples(
        sources=sources,
        markdown_sources=markdown_sources,
        accept=accept,
        max_workers=max_workers,
    )
    render = renderer or make_template_renderer(template)
    return render_with_source_map(examples, render, file=file)

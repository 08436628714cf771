# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Turn documentation examples into test files with source maps."""

from doctestgen.correlator import CorrelationError, RenderResult, render_with_source_map
from doctestgen.model import Example
from doctestgen.pipeline import collect_examples, default_accept, generate_tests
from doctestgen.sourcemap import SourceMapGenerator
from doctestgen.templates import DEFAULT_TEMPLATE, make_template_renderer

__all__ = [
    "CorrelationError",
    "DEFAULT_TEMPLATE",
    "Example",
    "RenderResult",
    "SourceMapGenerator",
    "collect_examples",
    "default_accept",
    "generate_tests",
    "make_template_renderer",
    "render_with_source_map",
]

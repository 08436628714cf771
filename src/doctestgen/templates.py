# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Jinja2 based rendering of example lists into pytest modules."""

import logging
import re

import jinja2

from doctestgen.correlator import Renderer
from doctestgen.model import Example

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = '''\
"""Documentation examples."""
{% for example in examples %}


def test_{{ loop.index0 }}_{{ example.name | identifier }}() -> None:
    # {{ example.name }}
    {{ example.code }}
{% endfor %}
'''

_IDENTIFIER_RE = re.compile(r"[^0-9a-zA-Z]+")


def identifier_fragment(name: str) -> str:
    """Turn an example name into a lowercase identifier fragment.

    Args:
        name: Example name such as ``"README.md #0"``.

    Returns:
        Fragment such as ``"readme_md_0"``.
    """
    return _IDENTIFIER_RE.sub("_", name).strip("_").lower()


def build_environment() -> jinja2.Environment:
    """Create the Jinja2 environment used for test templates."""
    environment = jinja2.Environment(
        autoescape=False,
        undefined=jinja2.StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    environment.filters["identifier"] = identifier_fragment
    return environment


def make_template_renderer(template: str | None = None) -> Renderer:
    """Compile ``template`` into a render function.

    The template receives the example list as ``examples``.

    Args:
        template: Jinja2 template source; ``DEFAULT_TEMPLATE`` when ``None``.

    Returns:
        Function rendering an example list to text.

    Raises:
        jinja2.TemplateSyntaxError: If the template does not compile.
    """
    compiled = build_environment().from_string(template or DEFAULT_TEMPLATE)

    def render(examples: list[Example]) -> str:
        logger.debug(f"Rendering template (examples={len(examples)})")
        return compiled.render(examples=examples)

    return render

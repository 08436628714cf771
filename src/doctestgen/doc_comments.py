# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Parse Python docstrings into structured doc-comment objects.

Each documented module, class, function and method yields one ``DocComment``.
Line bookkeeping follows one convention throughout: the line holding the
opening quotes is ``loc.start.line``, and offset ``k`` of the docstring body
(the lines after the opening line) lives on ``loc.start.line + 1 + k``.
Tag ``line_number`` values and the description tree both count from the
body, so markdown line ``L`` of the description sits on
``loc.start.line + L``.
"""

import ast
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from doctestgen.mdast import ParentNode, Point, parse_markdown

logger = logging.getLogger(__name__)

MODULE_PATH_NAME = "<module>"

_OPENING_QUOTE_RE = re.compile(r"[rRuU]?(\"\"\"|'''|\"|')")
_TAG_RE = re.compile(r"@(\w+)(?:[ \t]+|$)")
_FENCE_RE = re.compile(r"[ ]{0,3}(`{3,}|~{3,})")

_DocumentedNode = ast.Module | ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef


@dataclass(frozen=True)
class Location:
    """Represent where a doc comment starts."""

    start: Point


@dataclass(frozen=True)
class Context:
    """Represent the file a doc comment belongs to."""

    file: str


@dataclass(frozen=True)
class Tag:
    """Represent one ``@title text`` annotation.

    Attributes:
        title: Annotation name without the ``@``.
        description: Annotation text, verbatim apart from the docstring margin.
        line_number: Offset of the tag line within the docstring body (0-based).
    """

    title: str
    description: str
    line_number: int


@dataclass(frozen=True)
class Ancestor:
    """Represent one element of a documented symbol path."""

    name: str


@dataclass(frozen=True)
class DocComment:
    """Represent the documentation of one symbol.

    Attributes:
        loc: Location of the opening quotes.
        context: Owning source file.
        summary: Text on the opening line.
        description: Markdown tree of the free-text description.
        tags: Annotations in docstring order.
        path: Symbol path from the outermost scope to the symbol.
    """

    loc: Location
    context: Context
    summary: str
    description: ParentNode
    tags: tuple[Tag, ...]
    path: tuple[Ancestor, ...]


def load_doc_comments(file_path: str | Path) -> list[DocComment]:
    """Read and parse the doc comments of one Python file.

    Raises:
        OSError: If the file cannot be read.
        SyntaxError: If the file is not valid Python.
    """
    source = Path(file_path).read_text(encoding="utf-8")
    return parse_doc_comments(source, str(file_path))


def parse_doc_comments(source: str, file: str) -> list[DocComment]:
    """Parse every docstring of a Python module.

    Args:
        source: Python source text.
        file: Path reported in ``context.file``.

    Returns:
        Doc comments in source order (module first, then nested symbols).

    Raises:
        SyntaxError: If ``source`` is not valid Python.
    """
    tree = ast.parse(source, filename=file)
    docs: list[DocComment] = []
    module_doc = _build_doc_comment(
        source=source, file=file, node=tree, path=(Ancestor(MODULE_PATH_NAME),)
    )
    if module_doc is not None:
        docs.append(module_doc)
    docs.extend(_collect_symbols(source=source, file=file, body=tree.body, scope=()))
    return docs


def _collect_symbols(
    source: str,
    file: str,
    body: list[ast.stmt],
    scope: tuple[Ancestor, ...],
) -> list[DocComment]:
    docs: list[DocComment] = []
    for node in body:
        if not isinstance(node, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
            continue
        path = scope + (Ancestor(node.name),)
        doc = _build_doc_comment(source=source, file=file, node=node, path=path)
        if doc is not None:
            docs.append(doc)
        docs.extend(_collect_symbols(source=source, file=file, body=node.body, scope=path))
    return docs


def _build_doc_comment(
    source: str,
    file: str,
    node: _DocumentedNode,
    path: tuple[Ancestor, ...],
) -> DocComment | None:
    literal = _docstring_literal(node)
    if literal is None:
        return None
    text = _docstring_text(source, literal)
    if text is None:
        logger.debug(
            "Skipping docstring that is not a plain string literal",
            extra={"file": file, "line": literal.lineno},
        )
        return None

    summary, *body = text.split("\n")
    body = _remove_margin(body, floor=literal.col_offset)
    tags = _parse_tags(body)
    description_tags = [tag for tag in tags if tag.title == "description"]
    if description_tags:
        description = description_tags[0].description
    else:
        first_tag = tags[0].line_number if tags else len(body)
        description = "\n".join(body[:first_tag])

    return DocComment(
        loc=Location(start=Point(line=literal.lineno)),
        context=Context(file=file),
        summary=summary.strip(),
        description=parse_markdown(description),
        tags=tuple(tags),
        path=path,
    )


def _docstring_literal(node: _DocumentedNode) -> ast.Constant | None:
    if not node.body:
        return None
    first = node.body[0]
    if not isinstance(first, ast.Expr):
        return None
    value = first.value
    if isinstance(value, ast.Constant) and isinstance(value.value, str):
        return value
    return None


def _docstring_text(source: str, literal: ast.Constant) -> str | None:
    """Slice the raw docstring body between its quotes out of ``source``."""
    segment = ast.get_source_segment(source, literal)
    if segment is None:
        return None
    match = _OPENING_QUOTE_RE.match(segment)
    if match is None:
        return None
    quote = match.group(1)
    if len(segment) < match.end() + len(quote) or not segment.endswith(quote):
        return None
    text = segment[match.end() : len(segment) - len(quote)]
    # Implicitly concatenated literals keep inner quotes in the slice.
    if len(quote) == 3 and quote in text:
        return None
    if len(quote) == 1 and re.search(rf"(?<!\\){re.escape(quote)}", text):
        return None
    return text


def _remove_margin(lines: list[str], floor: int = 0) -> list[str]:
    """Strip the common indentation; whitespace-only lines become empty.

    Lines indented less than ``floor`` (the column of the docstring literal)
    do not lower the margin; they lose all of their indentation instead.
    """
    indents = [len(line) - len(line.lstrip()) for line in lines if line.strip()]
    deep = [indent for indent in indents if indent >= floor]
    margin = min(deep or indents) if indents else 0
    return [_dedent(line, margin) if line.strip() else "" for line in lines]


def _dedent(line: str, margin: int) -> str:
    indent = len(line) - len(line.lstrip())
    return line[min(indent, margin) :]


def _parse_tags(body: list[str]) -> list[Tag]:
    """Split ``@title`` annotations out of the docstring body.

    A tag starts on a line beginning with ``@word`` outside fenced blocks
    and runs until the next tag or the end of the body.
    """
    starts: list[tuple[int, str, int]] = []
    open_fence: str | None = None
    for offset, line in enumerate(body):
        fence = _FENCE_RE.match(line)
        if open_fence is not None:
            if fence and _closes_fence(fence.group(1), open_fence, line[fence.end() :]):
                open_fence = None
            continue
        if fence:
            open_fence = fence.group(1)
            continue
        tag = _TAG_RE.match(line)
        if tag:
            starts.append((offset, tag.group(1), tag.end()))

    tags: list[Tag] = []
    for position, (offset, title, text_start) in enumerate(starts):
        stop = starts[position + 1][0] if position + 1 < len(starts) else len(body)
        lines = [body[offset][text_start:], *body[offset + 1 : stop]]
        while len(lines) > 1 and not lines[-1].strip():
            lines.pop()
        tags.append(Tag(title=title, description="\n".join(lines), line_number=offset))
    return tags


def _closes_fence(candidate: str, open_fence: str, rest: str) -> bool:
    return (
        candidate[0] == open_fence[0]
        and len(candidate) >= len(open_fence)
        and not rest.strip()
    )

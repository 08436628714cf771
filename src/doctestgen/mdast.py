# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Parse markdown into a small mdast-shaped node tree.

markdown-it reports block spans as 0-based half-open ``map`` ranges. The
nodes built here expose 1-based inclusive line positions instead, with the
same semantics as remark: a fenced block spans its fence lines and its
``value`` carries no trailing newline.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, Union

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

logger = logging.getLogger(__name__)

_CODE_TYPES: frozenset[str] = frozenset({"fence", "code_block"})


@dataclass(frozen=True)
class Point:
    """Represent a 1-based line location."""

    line: int


@dataclass(frozen=True)
class Position:
    """Represent an inclusive line span."""

    start: Point
    end: Point


@dataclass(frozen=True)
class CodeNode:
    """Represent a fenced or indented code block.

    Attributes:
        value: Block body without fences and without the final newline.
        lang: First word of the fence info string, ``None`` when absent.
        meta: Rest of the fence info string, ``None`` when absent.
        position: Reported span; includes fence lines for fenced blocks.
        fenced: Whether the block was written with fences.
    """

    value: str
    lang: str | None
    meta: str | None
    position: Position | None
    fenced: bool = False
    type: str = field(default="code", init=False)


@dataclass(frozen=True)
class ParentNode:
    """Represent any node holding children (root, paragraph, list...)."""

    type: str
    children: tuple["Node", ...]
    position: Position | None = None


@dataclass(frozen=True)
class LeafNode:
    """Represent a node without children that is not code."""

    type: str
    position: Position | None = None


Node = Union[CodeNode, ParentNode, LeafNode]


def parse_markdown(text: str) -> ParentNode:
    """Parse markdown text into an mdast-shaped tree.

    Args:
        text: Markdown source.

    Returns:
        Root node of the converted tree.
    """
    md = MarkdownIt("commonmark")
    root = SyntaxTreeNode(md.parse(text))
    return ParentNode(
        type="root",
        children=tuple(_convert(child) for child in root.children),
    )


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants in pre-order."""
    yield node
    if isinstance(node, ParentNode):
        for child in node.children:
            yield from walk(child)


def code_nodes(node: Node) -> list[CodeNode]:
    """Collect code nodes in document order."""
    return [item for item in walk(node) if isinstance(item, CodeNode)]


def _convert(node: SyntaxTreeNode) -> Node:
    position = _position(node.map)
    if node.type in _CODE_TYPES:
        lang, meta = _split_info(node.info if node.type == "fence" else "")
        return CodeNode(
            value=_strip_final_newline(node.content),
            lang=lang,
            meta=meta,
            position=position,
            fenced=node.type == "fence",
        )
    if node.children:
        return ParentNode(
            type=node.type,
            children=tuple(_convert(child) for child in node.children),
            position=position,
        )
    return LeafNode(type=node.type, position=position)


def _position(span: tuple[int, int] | list[int] | None) -> Position | None:
    if span is None:
        return None
    start, end = span
    return Position(start=Point(line=start + 1), end=Point(line=end))


def _split_info(info: str) -> tuple[str | None, str | None]:
    """Split a fence info string into language word and meta text."""
    parts = info.strip().split(maxsplit=1)
    if not parts:
        return None, None
    lang = parts[0]
    meta = parts[1].strip() if len(parts) > 1 else None
    return lang, meta or None


def _strip_final_newline(content: str) -> str:
    if content.endswith("\n"):
        return content[:-1]
    return content

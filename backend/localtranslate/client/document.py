"""
Document capability used by page translation.

The translator only needs to enumerate eligible text nodes and swap a
node for a bilingual block. Hosts provide that through the Document
protocol; TreeDocument is an in-memory implementation.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Protocol

EXCLUDED_TAGS = frozenset({"SCRIPT", "STYLE", "NOSCRIPT", "SVG", "CANVAS"})

CONTAINER_CLASS = "ai-translation-container"
ORIGINAL_CLASS = "ai-original-text"
TRANSLATION_CLASS = "ai-translation-text"


class TextNodeLike(Protocol):
    text: str


class Document(Protocol):
    """Host document as seen by the translator."""

    def text_nodes(self) -> list[TextNodeLike]:
        """Visible text nodes in document order."""
        ...

    def replace_with_bilingual(self, node: TextNodeLike, original: str, translation: str) -> None:
        """Replace node in place with original and translated lines."""
        ...


@dataclass(eq=False)
class TextNode:
    text: str
    parent: Element | None = field(default=None, repr=False)


@dataclass(eq=False)
class Element:
    tag: str
    children: list[Element | TextNode] = field(default_factory=list)
    class_name: str = ""
    hidden: bool = False
    parent: Element | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.tag = self.tag.upper()
        for child in self.children:
            child.parent = self

    def replace_child(self, new: Element | TextNode, old: Element | TextNode) -> None:
        position = next(i for i, child in enumerate(self.children) if child is old)
        new.parent = self
        old.parent = None
        self.children[position] = new

    @property
    def text_content(self) -> str:
        parts = []
        for child in self.children:
            parts.append(child.text if isinstance(child, TextNode) else child.text_content)
        return "".join(parts)


def build_bilingual_block(original: str, translation: str) -> Element:
    """Container holding the original line above its translation."""
    return Element(
        "DIV",
        class_name=CONTAINER_CLASS,
        children=[
            Element("SPAN", class_name=ORIGINAL_CLASS, children=[TextNode(original)]),
            Element("SPAN", class_name=TRANSLATION_CLASS, children=[TextNode(translation)]),
        ],
    )


class TreeDocument:
    """Document backed by an Element tree."""

    def __init__(self, body: Element):
        self.body = body

    def _walk(self, element: Element) -> Iterator[TextNode]:
        if element.tag in EXCLUDED_TAGS or element.hidden:
            return
        for child in element.children:
            if isinstance(child, TextNode):
                yield child
            else:
                yield from self._walk(child)

    def text_nodes(self) -> list[TextNode]:
        return list(self._walk(self.body))

    def replace_with_bilingual(self, node: TextNode, original: str, translation: str) -> None:
        parent = node.parent
        if parent is None:
            return
        parent.replace_child(build_bilingual_block(original, translation), node)

"""
Document walker -- generic traversal of semi-structured article documents.

Documents arrive as plain JSON-shaped values (dicts, lists, scalars). They
are converted once into a closed tagged union:

  Scalar      -- str, int, float, bool or None
  ListNode    -- ordered children
  ObjectNode  -- ordered (key, child) pairs

and traversed with NodeVisitor, so every checker sees the same field paths
("benefits[3]", "faqs[0].answer") and the same exclusion semantics.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Union

from .errors import DocumentTooDeep, InputError

logger = logging.getLogger(__name__)

MAX_DEPTH = 64

SCALAR_TYPES = (str, int, float, bool, type(None))


@dataclass(frozen=True)
class Scalar:
    value: str | int | float | bool | None


@dataclass(frozen=True)
class ListNode:
    items: tuple["Node", ...]


@dataclass(frozen=True)
class ObjectNode:
    fields: tuple[tuple[str, "Node"], ...]


Node = Union[Scalar, ListNode, ObjectNode]


def child_path(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def index_path(path: str, index: int) -> str:
    return f"{path}[{index}]"


def to_node(value: Any, path: str = "", depth: int = 0) -> Node:
    """Convert a plain document value into the tagged union.

    Raises:
        DocumentTooDeep: nesting exceeds MAX_DEPTH (also stops cycles).
        InputError: a value or key has an unsupported type.
    """
    if depth > MAX_DEPTH:
        raise DocumentTooDeep(path, MAX_DEPTH)

    if isinstance(value, dict):
        fields = []
        for key, child in value.items():
            if not isinstance(key, str):
                raise InputError(
                    f"Object keys must be strings (got {type(key).__name__} "
                    f"at '{path or '<root>'}')"
                )
            fields.append((key, to_node(child, child_path(path, key), depth + 1)))
        return ObjectNode(tuple(fields))

    if isinstance(value, (list, tuple)):
        return ListNode(tuple(
            to_node(item, index_path(path, i), depth + 1)
            for i, item in enumerate(value)
        ))

    if isinstance(value, SCALAR_TYPES):
        return Scalar(value)

    raise InputError(
        f"Unsupported value of type {type(value).__name__} at '{path or '<root>'}'"
    )


def to_plain(node: Node) -> Any:
    """Convert a node back into plain dicts, lists and scalars."""
    if isinstance(node, Scalar):
        return node.value
    if isinstance(node, ListNode):
        return [to_plain(item) for item in node.items]
    if isinstance(node, ObjectNode):
        return {key: to_plain(child) for key, child in node.fields}
    raise TypeError(f"Not a document node: {node!r}")


def as_node(document: Any) -> Node:
    """The document as a node, converting plain values and passing nodes through."""
    if isinstance(document, (Scalar, ListNode, ObjectNode)):
        return document
    return to_node(document)


def ensure_document(document: Any) -> dict[str, Any]:
    """Reject anything that is not a top-level object."""
    if not isinstance(document, dict):
        raise InputError(
            f"Article document must be an object (got {type(document).__name__})"
        )
    return document


class NodeVisitor:
    """Dispatches on the node variant. Subclasses implement all three."""

    def visit(self, node: Node, path: str) -> Any:
        if isinstance(node, Scalar):
            return self.visit_scalar(node, path)
        if isinstance(node, ListNode):
            return self.visit_list(node, path)
        if isinstance(node, ObjectNode):
            return self.visit_object(node, path)
        raise TypeError(f"Not a document node: {node!r}")

    def visit_scalar(self, node: Scalar, path: str) -> Any:
        raise NotImplementedError

    def visit_list(self, node: ListNode, path: str) -> Any:
        raise NotImplementedError

    def visit_object(self, node: ObjectNode, path: str) -> Any:
        raise NotImplementedError


class TextCollector(NodeVisitor):
    """Yields (path, text) for every reachable string scalar."""

    def __init__(self, exclude: frozenset[str] = frozenset()):
        self._exclude = exclude

    def visit_scalar(self, node: Scalar, path: str) -> Iterator[tuple[str, str]]:
        if isinstance(node.value, str):
            yield path, node.value

    def visit_list(self, node: ListNode, path: str) -> Iterator[tuple[str, str]]:
        for i, item in enumerate(node.items):
            yield from self.visit(item, index_path(path, i))

    def visit_object(self, node: ObjectNode, path: str) -> Iterator[tuple[str, str]]:
        for key, child in node.fields:
            if key in self._exclude:
                continue
            yield from self.visit(child, child_path(path, key))


class TextRewriter(NodeVisitor):
    """Rebuilds a plain document, passing every string through `transform`.

    Excluded fields are copied unchanged.
    """

    def __init__(
        self,
        transform: Callable[[str, str], str],
        exclude: frozenset[str] = frozenset(),
    ):
        self._transform = transform
        self._exclude = exclude

    def visit_scalar(self, node: Scalar, path: str) -> Any:
        if isinstance(node.value, str):
            return self._transform(path, node.value)
        return node.value

    def visit_list(self, node: ListNode, path: str) -> list[Any]:
        return [self.visit(item, index_path(path, i)) for i, item in enumerate(node.items)]

    def visit_object(self, node: ObjectNode, path: str) -> dict[str, Any]:
        rebuilt = {}
        for key, child in node.fields:
            if key in self._exclude:
                rebuilt[key] = to_plain(child)
            else:
                rebuilt[key] = self.visit(child, child_path(path, key))
        return rebuilt


def walk_text(
    document: Any, exclude: frozenset[str] | set[str] = frozenset()
) -> Iterator[tuple[str, str]]:
    """Yield (field_path, text) for every string in the document.

    Accepts a plain document or a node from to_node. A plain document is
    converted in full on the first next(), so type and depth errors surface
    there before any text is yielded; the strings themselves are then
    produced one at a time.

    Usage:
        for path, text in walk_text(article, exclude={"nameEn", "slug"}):
            ...
    """
    node = as_node(document)
    yield from TextCollector(frozenset(exclude)).visit(node, "")


def rewrite_text(
    document: Any,
    transform: Callable[[str, str], str],
    exclude: frozenset[str] | set[str] = frozenset(),
) -> Any:
    """Return a new document with every non-excluded string transformed."""
    node = as_node(document)
    return TextRewriter(transform, frozenset(exclude)).visit(node, "")

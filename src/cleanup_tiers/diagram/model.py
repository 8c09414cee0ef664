"""Diagram model: domain objects mapped to diagram nodes and edges.

The model knows nothing about any diagram syntax. Each source object is
classified into a closed set of node kinds, and each kind has a handler
that turns the object into an (identifier, caption) pair. Renderers walk
the resulting nodes and edges.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..constants import DEFAULT_DIRECTION, DIRECTIONS, EDGE_LABEL, FALLBACK_ID, RESERVED_IDS
from ..models import Tier, Unit

_INVALID_ID_CHARS = re.compile(r"[^A-Za-z0-9_]")


class DiagramError(Exception):
    """Raised for references to objects the diagram does not contain."""


class NodeKind(str, Enum):
    """Kinds of source object a diagram node can be built from."""

    UNIT = "unit"
    TIER = "tier"


def sanitize_id(text: str) -> str:
    """Strip characters that are not valid in a diagram identifier.

    Separators such as periods, spaces and dashes are removed. A result with
    no letters or digits becomes ``node``, one starting with a digit gets a
    leading underscore, and a diagram keyword gets a trailing underscore.
    """
    token = _INVALID_ID_CHARS.sub("", text)
    if not token.strip("_"):
        token = FALLBACK_ID + token
    elif token[0].isdigit():
        token = "_" + token
    if token.casefold() in RESERVED_IDS:
        token += "_"
    return token


def render_unit(unit: Unit) -> tuple[str, str]:
    return sanitize_id(unit.name), unit.name


def render_tier(tier: Tier) -> tuple[str, str]:
    return sanitize_id(tier.name), tier.name


Handler = Callable[[Any], tuple[str, str]]

DEFAULT_HANDLERS: dict[NodeKind, Handler] = {
    NodeKind.UNIT: render_unit,
    NodeKind.TIER: render_tier,
}


def kind_of(obj: object) -> NodeKind:
    """Classify a source object into its node kind."""
    if isinstance(obj, Unit):
        return NodeKind.UNIT
    if isinstance(obj, Tier):
        return NodeKind.TIER
    raise DiagramError(f"Cannot add {type(obj).__name__} to a diagram")


@dataclass
class DiagramNode:
    """A node in the diagram, optionally nested under a parent node."""

    id: str
    caption: str
    kind: NodeKind
    parent: str | None = None


@dataclass(frozen=True)
class DiagramEdge:
    """A labelled edge between two node identifiers."""

    source: str
    target: str
    label: str = EDGE_LABEL


class DiagramModel:
    """Nodes and edges built from domain objects through per-kind handlers."""

    def __init__(
        self,
        direction: str = DEFAULT_DIRECTION,
        handlers: dict[NodeKind, Handler] | None = None,
    ):
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown diagram direction: {direction}")
        self.direction = direction
        self.handlers = dict(DEFAULT_HANDLERS)
        if handlers:
            self.handlers.update(handlers)
        self.nodes: dict[str, DiagramNode] = {}
        self.edges: list[DiagramEdge] = []
        self._object_ids: dict[tuple[NodeKind, Any], str] = {}

    def _unique_id(self, candidate: str) -> str:
        # Distinct objects can sanitize to the same token (e.g. "A.B" and "AB")
        if candidate not in self.nodes:
            return candidate
        suffix = 2
        while f"{candidate}_{suffix}" in self.nodes:
            suffix += 1
        return f"{candidate}_{suffix}"

    def resolve_id(self, ref: object) -> str:
        """Return the node identifier for a source object or an identifier string."""
        if isinstance(ref, str):
            if ref not in self.nodes:
                raise DiagramError(f"Unknown node identifier: {ref}")
            return ref

        key = (kind_of(ref), ref)
        if key not in self._object_ids:
            raise DiagramError(f"{ref} has not been added to the diagram")
        return self._object_ids[key]

    def add_object(self, obj: object, parent: object | None = None) -> DiagramNode:
        """
        Add a source object as a node.

        Args:
            obj: Unit or Tier to add
            parent: Previously added object (or its node identifier) to nest under

        Returns:
            The node for the object. Adding the same object twice returns the
            existing node.
        """
        kind = kind_of(obj)
        key = (kind, obj)
        if key in self._object_ids:
            return self.nodes[self._object_ids[key]]

        parent_id = self.resolve_id(parent) if parent is not None else None

        node_id, caption = self.handlers[kind](obj)
        node = DiagramNode(
            id=self._unique_id(node_id),
            caption=caption,
            kind=kind,
            parent=parent_id,
        )
        self.nodes[node.id] = node
        self._object_ids[key] = node.id
        return node

    def add_edge(self, source: object, target: object, label: str = EDGE_LABEL) -> DiagramEdge:
        """Add an edge between two added objects (or node identifiers)."""
        edge = DiagramEdge(
            source=self.resolve_id(source),
            target=self.resolve_id(target),
            label=label,
        )
        self.edges.append(edge)
        return edge

    def get_node(self, ref: object) -> DiagramNode:
        return self.nodes[self.resolve_id(ref)]

    def roots(self) -> list[DiagramNode]:
        """Nodes without a parent, in insertion order."""
        return [node for node in self.nodes.values() if node.parent is None]

    def children(self, ref: object) -> list[DiagramNode]:
        node_id = self.resolve_id(ref)
        return [node for node in self.nodes.values() if node.parent == node_id]

    def path(self, ref: object) -> list[str]:
        """Identifiers from the outermost ancestor down to the node."""
        node = self.get_node(ref)
        ids = [node.id]
        while node.parent is not None:
            node = self.nodes[node.parent]
            ids.append(node.id)
        return ids[::-1]

"""
D2 diagram renderer.

Nested nodes become D2 containers, so edges address nodes by their
qualified path (``Tier0.App``).

Docs: https://d2lang.com/
"""

from ..constants import D2_DIRECTIONS
from .model import DiagramEdge, DiagramModel, DiagramNode

INDENT = "  "


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _render_node(model: DiagramModel, node: DiagramNode, depth: int, lines: list[str]) -> None:
    pad = INDENT * depth
    children = model.children(node.id)

    if not children:
        lines.append(f"{pad}{node.id}: {_quote(node.caption)}")
        return

    lines.append(f"{pad}{node.id}: {_quote(node.caption)} {{")
    for child in children:
        _render_node(model, child, depth + 1, lines)
    lines.append(f"{pad}}}")


def _render_edge(model: DiagramModel, edge: DiagramEdge) -> str:
    source = ".".join(model.path(edge.source))
    target = ".".join(model.path(edge.target))
    return f"{source} -> {target}: {edge.label}"


def render_d2(model: DiagramModel) -> str:
    """
    Render a DiagramModel to D2 source.

    Args:
        model: The populated diagram model

    Returns:
        D2 diagram source code
    """
    lines = [f"direction: {D2_DIRECTIONS[model.direction]}", ""]

    for node in model.roots():
        _render_node(model, node, 0, lines)

    if model.edges:
        lines.append("")
        for edge in model.edges:
            lines.append(_render_edge(model, edge))

    return "\n".join(lines) + "\n"

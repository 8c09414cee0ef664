"""Mermaid flowchart renderer."""

from .model import DiagramModel, DiagramNode

INDENT = "    "


def _caption(text: str) -> str:
    # Mermaid labels are HTML; a raw double quote would end the label
    return '"' + text.replace('"', "#quot;") + '"'


def _render_node(model: DiagramModel, node: DiagramNode, depth: int, lines: list[str]) -> None:
    pad = INDENT * depth
    children = model.children(node.id)

    if not children:
        lines.append(f"{pad}{node.id}[{_caption(node.caption)}]")
        return

    lines.append(f"{pad}subgraph {node.id} [{_caption(node.caption)}]")
    for child in children:
        _render_node(model, child, depth + 1, lines)
    lines.append(f"{pad}end")


def render_mermaid(model: DiagramModel) -> str:
    """Render a DiagramModel to Mermaid ``flowchart`` source."""
    lines = [f"flowchart {model.direction}"]

    for node in model.roots():
        _render_node(model, node, 1, lines)

    for edge in model.edges:
        lines.append(f"{INDENT}{edge.source} -->|{_caption(edge.label)}| {edge.target}")

    return "\n".join(lines) + "\n"

"""Diagram model and renderers for cleanup tiers."""

from ..constants import DEFAULT_DIRECTION, EDGE_LABEL
from ..models import Unit
from ..ordering import TieringResult
from .model import (
    DiagramEdge,
    DiagramError,
    DiagramModel,
    DiagramNode,
    NodeKind,
    sanitize_id,
)
from .render_d2 import render_d2
from .render_mermaid import render_mermaid

__all__ = [
    "DiagramEdge",
    "DiagramError",
    "DiagramModel",
    "DiagramNode",
    "NodeKind",
    "build_tier_diagram",
    "render_d2",
    "render_diagram",
    "render_mermaid",
    "sanitize_id",
]


def build_tier_diagram(
    result: TieringResult,
    graph: dict[Unit, list[Unit]],
    direction: str = DEFAULT_DIRECTION,
) -> DiagramModel:
    """
    Build a diagram of the tiers: one container per tier holding its units,
    and one edge per resolved dependency between tiered units.

    Units left out of the tiers by a cycle are not drawn.
    """
    model = DiagramModel(direction=direction)

    for tier in result.tiers:
        model.add_object(tier)
        for unit in tier.units:
            model.add_object(unit, tier)

    tiered = set(result.units())
    for unit in result.units():
        for dep in graph.get(unit, []):
            # Dependencies stuck behind a cycle have no node
            if dep in tiered:
                model.add_edge(unit, dep, EDGE_LABEL)

    return model


def render_diagram(model: DiagramModel, fmt: str = "d2") -> str:
    """
    Render a diagram model in the given format.

    Args:
        model: The populated diagram model
        fmt: One of "d2", "mermaid"
    """
    if fmt == "d2":
        return render_d2(model)
    elif fmt == "mermaid":
        return render_mermaid(model)
    else:
        raise ValueError(f"Unknown diagram format: {fmt}")

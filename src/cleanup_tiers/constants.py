"""Shared defaults for discovery, tiering and diagram output."""

# Descriptor discovery
DEFAULT_PATTERN = "*.csproj"
PROJECT_REFERENCE_TAG = "ProjectReference"
PACKAGE_REFERENCE_TAG = "PackageReference"
INCLUDE_ATTR = "Include"

# Diagram output
EDGE_LABEL = "depends on"
TIER_NAME_FORMAT = "Tier {index}"
DIRECTIONS = ("LR", "RL", "TB", "BT")
DEFAULT_DIRECTION = "LR"
DIAGRAM_FORMATS = ("d2", "mermaid")

# D2 has no "TD" alias; map the flowchart directions onto its keywords
D2_DIRECTIONS = {
    "LR": "right",
    "RL": "left",
    "TB": "down",
    "BT": "up",
}

# Identifiers the diagram languages treat as keywords, compared
# case-insensitively. D2 reads "_" as the parent scope; Mermaid's "end"
# closes a subgraph.
RESERVED_IDS = frozenset({
    # D2
    "label", "style", "shape", "icon", "near", "link", "direction",
    "tooltip", "width", "height", "class", "classes", "vars", "constraint",
    "top", "left", "layers", "scenarios", "steps", "grid", "filled",
    "opacity", "stroke", "fill", "source", "target",
    # Mermaid
    "end", "graph", "flowchart", "subgraph", "classdef", "click",
    "linkstyle", "default",
})
# Stand-in for names with no ASCII word characters
FALLBACK_ID = "node"

"""Dependency graph construction from parsed units."""

from collections import Counter
from collections.abc import Iterable

from .models import Unit

DUPLICATE_POLICIES = ("last", "error")


class DuplicateUnitError(Exception):
    """Raised when two units share a name and duplicates are not allowed."""

    def __init__(self, names: list[str]):
        self.names = names
        super().__init__(f"Duplicate unit names: {', '.join(names)}")


def find_duplicate_names(units: Iterable[Unit]) -> list[str]:
    """Return names (as first spelled) that occur more than once, case-insensitively."""
    counts: Counter[str] = Counter()
    spelling: dict[str, str] = {}
    for unit in units:
        counts[unit.key] += 1
        spelling.setdefault(unit.key, unit.name)
    return [spelling[key] for key, count in counts.items() if count > 1]


def index_units(units: Iterable[Unit]) -> dict[str, Unit]:
    """Map casefolded name -> unit. A later unit replaces an earlier one of the same name."""
    index: dict[str, Unit] = {}
    for unit in units:
        index[unit.key] = unit
    return index


def build_dependency_graph(
    units: Iterable[Unit],
    on_duplicate: str = "last",
) -> dict[Unit, list[Unit]]:
    """
    Build the dependency graph for a set of units.

    Each internal reference is resolved by name against the analyzed set.
    References that name no analyzed unit (external packages, excluded
    folders) are dropped. Resolved dependencies keep their declared order.

    Args:
        units: Parsed units
        on_duplicate: "last" lets the last unit with a given name win;
            "error" raises DuplicateUnitError

    Returns:
        Mapping unit -> list of units it depends on. Every dependency is
        itself a key of the mapping.
    """
    if on_duplicate not in DUPLICATE_POLICIES:
        raise ValueError(f"Unknown duplicate policy: {on_duplicate}")

    units = list(units)
    if on_duplicate == "error":
        duplicates = find_duplicate_names(units)
        if duplicates:
            raise DuplicateUnitError(duplicates)

    index = index_units(units)
    graph: dict[Unit, list[Unit]] = {}

    for unit in index.values():
        graph[unit] = [
            index[ref.casefold()]
            for ref in unit.internal_references
            if ref.casefold() in index
        ]

    return graph


def unresolved_references(units: Iterable[Unit]) -> dict[str, list[str]]:
    """Return, per unit name, the internal references that match no analyzed unit."""
    index = index_units(units)
    dropped: dict[str, list[str]] = {}
    for unit in index.values():
        missing = [ref for ref in unit.internal_references if ref.casefold() not in index]
        if missing:
            dropped[unit.name] = missing
    return dropped


def graph_stats(graph: dict[Unit, list[Unit]]) -> dict[str, int]:
    """Get statistics about a dependency graph."""
    depended_on = {dep for unit, deps in graph.items() for dep in deps if dep != unit}

    return {
        "units": len(graph),
        "edges": sum(len(deps) for deps in graph.values()),
        "roots": sum(1 for unit in graph if unit not in depended_on),
        "leaves": sum(1 for unit, deps in graph.items() if not [dep for dep in deps if dep != unit]),
    }

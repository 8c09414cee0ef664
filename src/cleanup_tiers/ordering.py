"""Cleanup-tier ordering and cycle detection for the dependency graph."""

from collections import deque
from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import TypeVar

from .models import Tier, Unit

N = TypeVar("N", bound=Hashable)


class CycleError(Exception):
    """Raised when dependency cycles keep units out of every tier."""

    def __init__(self, units: list[Unit], cycles: list[list[Unit]] | None = None):
        self.units = units
        self.cycles = cycles or []
        names = ", ".join(unit.name for unit in units)
        super().__init__(f"cycle detected among units {{{names}}}")


def compute_sccs(graph: dict[N, list[N]]) -> list[list[N]]:
    """
    Compute strongly connected components using Tarjan's algorithm.

    Args:
        graph: Adjacency list representation (node -> list of successors)

    Returns:
        List of SCCs, where each SCC is a list of nodes.
        SCCs are returned in reverse topological order (leaves first).
    """
    index_counter = [0]
    stack: list[N] = []
    lowlinks: dict[N, int] = {}
    index: dict[N, int] = {}
    on_stack: set[N] = set()
    sccs: list[list[N]] = []

    # All nodes in first-seen order, including those with no outgoing edges
    all_nodes: dict[N, None] = dict.fromkeys(graph)
    for successors in graph.values():
        all_nodes.update(dict.fromkeys(successors))

    def strongconnect(node: N) -> None:
        index[node] = index_counter[0]
        lowlinks[node] = index_counter[0]
        index_counter[0] += 1
        stack.append(node)
        on_stack.add(node)

        for successor in graph.get(node, []):
            if successor not in index:
                strongconnect(successor)
                lowlinks[node] = min(lowlinks[node], lowlinks[successor])
            elif successor in on_stack:
                lowlinks[node] = min(lowlinks[node], index[successor])

        # If node is a root node, pop the stack and generate an SCC
        if lowlinks[node] == index[node]:
            scc = []
            while True:
                w = stack.pop()
                on_stack.remove(w)
                scc.append(w)
                if w == node:
                    break
            sccs.append(scc)

    for node in all_nodes:
        if node not in index:
            strongconnect(node)

    return sccs


def compute_in_degrees(graph: dict[Unit, list[Unit]]) -> dict[Unit, int]:
    """Count, for each unit, how many other units depend on it."""
    in_degree = {unit: 0 for unit in graph}
    for unit, deps in graph.items():
        for dep in deps:
            if dep != unit:
                in_degree[dep] += 1
    return in_degree


@dataclass
class TieringResult:
    """Ordered tiers plus the units a cycle kept out of them."""

    tiers: list[Tier] = field(default_factory=list)
    unresolved: list[Unit] = field(default_factory=list)
    cycles: list[list[Unit]] = field(default_factory=list)

    @property
    def has_cycles(self) -> bool:
        return bool(self.unresolved)

    def units(self) -> list[Unit]:
        """All tiered units, tier by tier."""
        return [unit for tier in self.tiers for unit in tier.units]

    def tier_of(self, unit: Unit) -> Tier | None:
        """Return the tier holding a unit, or None if it was left out."""
        for tier in self.tiers:
            if unit in tier.units:
                return tier
        return None

    def raise_for_cycles(self) -> None:
        if self.unresolved:
            raise CycleError(self.unresolved, self.cycles)

    def to_dict(self) -> dict:
        return {
            "tiers": [
                {"tier": tier.index, "units": [unit.name for unit in tier.units]}
                for tier in self.tiers
            ],
            "unresolved": [unit.name for unit in self.unresolved],
            "cycles": [[unit.name for unit in cycle] for cycle in self.cycles],
        }


def find_cycles(graph: dict[Unit, list[Unit]], units: list[Unit]) -> list[list[Unit]]:
    """
    Return the dependency cycles among a subset of units.

    Units that only sit behind a cycle (depended on by a cycle member but not
    part of one) are not reported as cycles.
    """
    members = set(units)
    subgraph = {
        unit: [dep for dep in graph[unit] if dep in members and dep != unit]
        for unit in units
    }
    position = {unit: i for i, unit in enumerate(units)}

    cycles = []
    for scc in compute_sccs(subgraph):
        if len(scc) > 1:
            cycles.append(sorted(scc, key=position.__getitem__))
    cycles.sort(key=lambda cycle: position[cycle[0]])
    return cycles


def compute_cleanup_tiers(graph: dict[Unit, list[Unit]]) -> TieringResult:
    """
    Partition the dependency graph into cleanup tiers.

    Breadth-first layering over reverse dependency direction: tier 0 holds
    the units no other unit depends on. Removing a tier releases the units
    it depends on; a unit joins the next tier once every unit depending on
    it has been placed. A unit therefore lands one tier after the latest of
    its dependents, and most-depended-upon units come last.

    Units that never reach zero in-degree (because of a dependency cycle)
    end up in ``unresolved`` instead of any tier. The graph is not modified.
    """
    in_degree = compute_in_degrees(graph)
    worklist = deque(unit for unit, degree in in_degree.items() if degree == 0)
    tiers: list[Tier] = []

    while worklist:
        current = []
        for _ in range(len(worklist)):
            unit = worklist.popleft()
            current.append(unit)

            for dep in graph[unit]:
                if dep == unit:
                    continue
                in_degree[dep] -= 1
                if in_degree[dep] == 0:
                    worklist.append(dep)

        tiers.append(Tier(index=len(tiers), units=tuple(current)))

    placed = {unit for tier in tiers for unit in tier.units}
    unresolved = [unit for unit in graph if unit not in placed]

    return TieringResult(
        tiers=tiers,
        unresolved=unresolved,
        cycles=find_cycles(graph, unresolved) if unresolved else [],
    )

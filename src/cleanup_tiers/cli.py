"""Command-line interface for dependency cleanup-tier analysis."""

import json
import sys

import click
from rich.console import Console
from rich.table import Table

from .constants import DEFAULT_DIRECTION, DEFAULT_PATTERN, DIAGRAM_FORMATS, DIRECTIONS
from .diagram import DiagramError, build_tier_diagram, render_diagram
from .discovery import discover_units
from .graph import (
    DuplicateUnitError,
    build_dependency_graph,
    find_duplicate_names,
    graph_stats,
    unresolved_references,
)
from .ordering import CycleError, compute_cleanup_tiers

console = Console()
err_console = Console(stderr=True)


def _load_units(path, pattern, verbose):
    try:
        units = discover_units(path, pattern=pattern, verbose=verbose)
    except ValueError as e:
        raise click.UsageError(str(e))

    if not units:
        err_console.print(f"[yellow]No files matching {pattern} under {path}[/yellow]")
    return units


def _analyze(path, pattern, strict, verbose):
    """Discover units, build the graph and tier it; report or fail on problems."""
    units = _load_units(path, pattern, verbose)

    try:
        graph = build_dependency_graph(units, on_duplicate="error" if strict else "last")
    except DuplicateUnitError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    duplicates = find_duplicate_names(units)
    if duplicates:
        err_console.print(f"[yellow]Warning: duplicate unit names, last one wins: {', '.join(duplicates)}[/yellow]")

    result = compute_cleanup_tiers(graph)

    if result.has_cycles:
        if strict:
            try:
                result.raise_for_cycles()
            except CycleError as e:
                err_console.print(f"[red]Error: {e}[/red]")
                sys.exit(1)
        names = ", ".join(unit.name for unit in result.unresolved)
        err_console.print(f"[yellow]Warning: {len(result.unresolved)} unit(s) left out of every tier: {names}[/yellow]")
        for cycle in result.cycles:
            err_console.print(f"[yellow]  cycle: {' -> '.join(unit.name for unit in cycle)}[/yellow]")

    if verbose:
        err_console.print(f"Units: {len(graph)}, tiers: {len(result.tiers)}")

    return units, graph, result


@click.group()
@click.version_option(package_name="cleanup-tiers")
def main():
    """Order the build units of a source tree into dependency cleanup tiers."""
    pass


@main.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--pattern", default=DEFAULT_PATTERN, show_default=True, help="Glob for project files")
@click.option("--format", "fmt", type=click.Choice(["table", "json"]), default="table")
@click.option("--strict", is_flag=True, help="Fail on duplicate unit names and dependency cycles")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def tiers(path, pattern, fmt, strict, verbose):
    """Show the cleanup tiers for all project files under PATH.

    Tier 0 holds the units nothing else depends on; each later tier holds
    units whose dependents have all been placed in earlier tiers.

    Example:
        cleanup-tiers tiers ./src
        cleanup-tiers tiers ./src --format json > tiers.json
    """
    _, _, result = _analyze(path, pattern, strict, verbose)

    if fmt == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    table = Table(title="Cleanup Tiers")
    table.add_column("Tier", justify="right", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_column("Units")

    for tier in result.tiers:
        table.add_row(str(tier.index), str(len(tier)), ", ".join(unit.name for unit in tier.units))

    console.print(table)


@main.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--pattern", default=DEFAULT_PATTERN, show_default=True, help="Glob for project files")
@click.option("--format", "fmt", type=click.Choice(DIAGRAM_FORMATS), default="d2", show_default=True)
@click.option("--direction", type=click.Choice(DIRECTIONS), default=DEFAULT_DIRECTION, show_default=True)
@click.option("--output", "-o", type=click.Path(), help="Output file (default: stdout)")
@click.option("--strict", is_flag=True, help="Fail on duplicate unit names and dependency cycles")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def diagram(path, pattern, fmt, direction, output, strict, verbose):
    """Render the cleanup tiers under PATH as diagram source.

    Example:
        cleanup-tiers diagram ./src -o tiers.d2
        cleanup-tiers diagram ./src --format mermaid
    """
    _, graph, result = _analyze(path, pattern, strict, verbose)

    try:
        model = build_tier_diagram(result, graph, direction=direction)
    except DiagramError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    text = render_diagram(model, fmt)

    if output:
        with open(output, "w") as f:
            f.write(text)
        console.print(
            f"[green]Wrote {len(model.nodes)} nodes and {len(model.edges)} edges to {output}[/green]"
        )
    else:
        click.echo(text, nl=False)


@main.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--pattern", default=DEFAULT_PATTERN, show_default=True, help="Glob for project files")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def stats(path, pattern, verbose):
    """Show dependency graph statistics for PATH."""
    units, graph, result = _analyze(path, pattern, False, verbose)

    table = Table(title="Dependency Graph Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="green")

    for key, value in graph_stats(graph).items():
        table.add_row(key, str(value))

    dropped = unresolved_references(units)
    table.add_row("tiers", str(len(result.tiers)))
    table.add_row("cycle_units", str(len(result.unresolved)))
    table.add_row("duplicate_names", str(len(find_duplicate_names(units))))
    table.add_row("dropped_references", str(sum(len(refs) for refs in dropped.values())))

    console.print(table)

    if verbose and dropped:
        console.print("\nReferences outside the analyzed set:")
        for name, refs in dropped.items():
            console.print(f"  {name}: {', '.join(refs)}")


if __name__ == "__main__":
    main()

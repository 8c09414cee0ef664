"""Discovery and parsing of build-unit project files."""

import sys
import xml.etree.ElementTree as ET
from pathlib import Path, PureWindowsPath

from .constants import (
    DEFAULT_PATTERN,
    INCLUDE_ATTR,
    PACKAGE_REFERENCE_TAG,
    PROJECT_REFERENCE_TAG,
)
from .models import Unit


def _local_name(tag: str) -> str:
    # Old-style project files put every element in the MSBuild namespace
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[1]
    return tag


def _reference_stem(include: str) -> str:
    """Return the unit name a ProjectReference points at.

    Project files written on Windows use backslash separators, so the path is
    interpreted with Windows rules (which also accept forward slashes).
    """
    return PureWindowsPath(include.strip()).stem


def _collect_includes(root: ET.Element, tag: str) -> list[str]:
    includes = []
    for element in root.iter():
        if not isinstance(element.tag, str) or _local_name(element.tag) != tag:
            continue
        value = element.get(INCLUDE_ATTR)
        if value and value.strip():
            includes.append(value.strip())
    return includes


def parse_project_file(path: str | Path) -> Unit:
    """
    Parse a single project file into a Unit.

    Args:
        path: Path to the project file

    Returns:
        Unit named after the file stem, with its project references (as unit
        names) and package references, both in document order.

    Raises:
        ET.ParseError: If the file is not well-formed XML
    """
    path = Path(path)
    root = ET.parse(path).getroot()

    project_refs = [
        _reference_stem(include)
        for include in _collect_includes(root, PROJECT_REFERENCE_TAG)
    ]
    package_refs = _collect_includes(root, PACKAGE_REFERENCE_TAG)

    return Unit(
        name=path.stem,
        file_path=str(path),
        internal_references=tuple(project_refs),
        external_references=tuple(package_refs),
    )


def find_project_files(
    root: str | Path,
    pattern: str = DEFAULT_PATTERN,
    recursive: bool = True,
) -> list[Path]:
    """Find project files under a directory, sorted by path."""
    root = Path(root)

    if not root.exists() or not root.is_dir():
        raise ValueError(f"Invalid project directory: {root}")

    if recursive:
        files = root.rglob(pattern)
    else:
        files = root.glob(pattern)

    return sorted(f for f in files if f.is_file())


def discover_units(
    root: str | Path,
    pattern: str = DEFAULT_PATTERN,
    recursive: bool = True,
    verbose: bool = False,
) -> list[Unit]:
    """
    Discover and parse every project file under a directory.

    Files that fail to parse are reported on stderr and skipped. Progress
    lines also go to stderr so stdout stays free for results.
    """
    files = find_project_files(root, pattern, recursive)

    if verbose:
        print(f"[discover] Found {len(files)} files matching {pattern} under {root}", file=sys.stderr)

    units = []
    for path in files:
        try:
            unit = parse_project_file(path)
        except (ET.ParseError, OSError) as e:
            print(f"Warning: Failed to parse {path}: {e}", file=sys.stderr)
            continue

        if verbose:
            print(
                f"[discover] {unit.name}: {len(unit.internal_references)} project refs, "
                f"{len(unit.external_references)} package refs",
                file=sys.stderr,
            )
        units.append(unit)

    return units

"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from cleanup_tiers.cli import main


def _project(*refs):
    items = "\n".join(f'    <ProjectReference Include="..\\{ref}\\{ref}.csproj" />' for ref in refs)
    return f'<Project Sdk="Microsoft.NET.Sdk">\n  <ItemGroup>\n{items}\n  </ItemGroup>\n</Project>\n'


def _solution(root, layout):
    for name, refs in layout.items():
        folder = root / name
        folder.mkdir(parents=True)
        (folder / f"{name}.csproj").write_text(_project(*refs), encoding="utf-8")
    return root


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def solution(tmp_path):
    # Web -> Core, Web -> Data, Data -> Core, Data -> External (not in the tree)
    return _solution(tmp_path / "repo", {
        "App.Web": ["App.Core", "App.Data"],
        "App.Data": ["App.Core", "External"],
        "App.Core": [],
    })


@pytest.fixture
def cyclic(tmp_path):
    return _solution(tmp_path / "cyclic", {
        "App": ["A"],
        "A": ["B"],
        "B": ["A"],
    })


class TestTiersCommand:
    """Tests for the tiers command."""

    def test_json(self, runner, solution):
        result = runner.invoke(main, ["tiers", str(solution), "--format", "json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "tiers": [
                {"tier": 0, "units": ["App.Web"]},
                {"tier": 1, "units": ["App.Data"]},
                {"tier": 2, "units": ["App.Core"]},
            ],
            "unresolved": [],
            "cycles": [],
        }

    def test_json_with_malformed_project(self, runner, solution):
        """A broken project file is reported on stderr and stdout stays valid JSON."""
        (solution / "Bad").mkdir()
        (solution / "Bad" / "Bad.csproj").write_text("<Project>", encoding="utf-8")

        result = runner.invoke(main, ["tiers", str(solution), "--format", "json", "-v"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [tier["units"] for tier in data["tiers"]] == [["App.Web"], ["App.Data"], ["App.Core"]]
        assert "Warning: Failed to parse" in result.stderr
        assert "[discover]" in result.stderr
        assert "Units: 3, tiers: 3" in result.stderr

    def test_table(self, runner, solution):
        result = runner.invoke(main, ["tiers", str(solution)])

        assert result.exit_code == 0
        assert "Cleanup Tiers" in result.output
        assert "App.Web" in result.output

    def test_cycle_warning(self, runner, cyclic):
        result = runner.invoke(main, ["tiers", str(cyclic)])

        assert result.exit_code == 0
        assert "left out of every tier" in result.output

    def test_cycle_strict(self, runner, cyclic):
        result = runner.invoke(main, ["tiers", str(cyclic), "--strict"])

        assert result.exit_code == 1
        assert "cycle detected among units" in result.output

    def test_duplicate_strict(self, runner, tmp_path):
        root = tmp_path / "dupes"
        for folder in ("one", "two"):
            (root / folder).mkdir(parents=True)
            (root / folder / "Shared.csproj").write_text(_project(), encoding="utf-8")

        lenient = runner.invoke(main, ["tiers", str(root)])
        strict = runner.invoke(main, ["tiers", str(root), "--strict"])

        assert lenient.exit_code == 0
        assert "last one wins" in lenient.output
        assert strict.exit_code == 1
        assert "Duplicate unit names: Shared" in strict.output

    def test_missing_path(self, runner, tmp_path):
        result = runner.invoke(main, ["tiers", str(tmp_path / "nope")])
        assert result.exit_code != 0


class TestDiagramCommand:
    """Tests for the diagram command."""

    def test_d2_stdout(self, runner, solution):
        result = runner.invoke(main, ["diagram", str(solution)])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "direction: right"
        assert "Tier0.AppWeb -> Tier2.AppCore: depends on" in lines
        assert "Tier0.AppWeb -> Tier1.AppData: depends on" in lines
        assert "Tier1.AppData -> Tier2.AppCore: depends on" in lines
        assert len([line for line in lines if " -> " in line]) == 3

    def test_d2_stdout_with_malformed_project(self, runner, solution):
        (solution / "Bad").mkdir()
        (solution / "Bad" / "Bad.csproj").write_text("<Project>", encoding="utf-8")

        result = runner.invoke(main, ["diagram", str(solution)])

        assert result.exit_code == 0
        assert result.stdout.startswith("direction: right\n")
        assert "Warning" not in result.stdout
        assert "Warning: Failed to parse" in result.stderr

    def test_mermaid(self, runner, solution):
        result = runner.invoke(main, ["diagram", str(solution), "--format", "mermaid", "--direction", "TB"])

        assert result.exit_code == 0
        assert result.output.startswith("flowchart TB\n")
        assert '    AppWeb -->|"depends on"| AppCore' in result.output

    def test_output_file(self, runner, solution, tmp_path):
        out = tmp_path / "tiers.d2"
        result = runner.invoke(main, ["diagram", str(solution), "-o", str(out)])

        assert result.exit_code == 0
        assert "Wrote 6 nodes and 3 edges" in result.output
        assert out.read_text().startswith("direction: right")


class TestStatsCommand:
    """Tests for the stats command."""

    def test_stats(self, runner, solution):
        result = runner.invoke(main, ["stats", str(solution), "-v"])

        assert result.exit_code == 0
        assert "dropped_references" in result.output
        assert "App.Data: External" in result.output

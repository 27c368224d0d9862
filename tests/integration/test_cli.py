"""Integration tests for the Progress Engine CLI.

These tests exercise the Typer commands end to end with CliRunner,
loading real project JSON files from a temporary directory.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest
import structlog
from typer.testing import CliRunner

from progress_engine.logging import end_run
from progress_engine.main import app
from progress_engine.templates import create_solar_project

pytestmark = pytest.mark.integration

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Isolate the CLI from user configuration and keep logs quiet."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("PROGRESS_ENGINE_LOGGING__LEVEL", "WARNING")
    monkeypatch.delenv("PROGRESS_ENGINE_REPORT__FORMAT", raising=False)
    monkeypatch.delenv("PROGRESS_ENGINE_REPORT__DECIMALS", raising=False)
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()
    end_run()


def _write(path: Path, project) -> Path:
    path.write_text(
        json.dumps(project.model_dump(mode="json", by_alias=True)), encoding="utf-8"
    )
    return path


@pytest.fixture
def project_file(tmp_path: Path, make_activity, make_phase, make_project) -> Path:
    """Chain of three activities where two share a crane."""
    project = make_project(
        [
            make_phase(
                "p1",
                [
                    make_activity("a", 3, percent_complete=1.0, resources=["crane-1"]),
                    make_activity("b", 4, start_day=2, depends_on=["a"], resources=["crane-1"]),
                ],
                weight=0.5,
                end_day=7,
            ),
            make_phase(
                "p2",
                [make_activity("c", 5, start_day=7, depends_on=["b"])],
                weight=0.5,
                start_day=7,
                end_day=12,
            ),
        ],
        end_day=12,
    )
    return _write(tmp_path / "project.json", project)


class TestProjectCommands:
    """Test the project sub-commands."""

    def test_report_json(self, project_file: Path) -> None:
        """Test the progress report in JSON form."""
        result = runner.invoke(
            app,
            ["project", "report", str(project_file), "--now", "2024-01-01", "--format", "json"],
        )

        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)
        assert report["projectId"] == "proj-1"
        assert report["criticalPath"] == ["a", "b", "c"]
        assert report["projectHealth"]["status"] == "healthy"
        assert [pc["phaseId"] for pc in report["phaseCompletions"]] == ["p1", "p2"]

    def test_report_table(self, project_file: Path) -> None:
        """Test the progress report in table form."""
        result = runner.invoke(
            app, ["project", "report", str(project_file), "--now", "2024-01-01"]
        )

        assert result.exit_code == 0, result.output
        assert "Project Health" in result.output
        assert "healthy" in result.output

    def test_report_format_from_config(self, tmp_path: Path, project_file: Path) -> None:
        """Test that the configured report format is used by default."""
        config_file = tmp_path / "engine.toml"
        config_file.write_text('[report]\nformat = "json"\n')

        result = runner.invoke(
            app,
            ["--config", str(config_file), "project", "report", str(project_file),
             "--now", "2024-01-01"],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["projectId"] == "proj-1"

    def test_invalid_format(self, project_file: Path) -> None:
        """Test that unknown output formats are rejected."""
        result = runner.invoke(
            app, ["project", "report", str(project_file), "--format", "xml"]
        )

        assert result.exit_code == 1
        assert "Invalid format" in result.output

    def test_critical_path_json(self, project_file: Path) -> None:
        """Test the CPM schedule in JSON form."""
        result = runner.invoke(
            app, ["project", "critical-path", str(project_file), "--format", "json"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["projectDuration"] == 12
        assert data["schedule"]["c"]["earlyStart"] == 7

    def test_critical_path_table(self, project_file: Path) -> None:
        """Test the CPM schedule in table form."""
        result = runner.invoke(app, ["project", "critical-path", str(project_file)])

        assert result.exit_code == 0, result.output
        assert "Critical path (12 days)" in result.output

    def test_conflicts_json(self, project_file: Path) -> None:
        """Test resource conflicts in JSON form."""
        result = runner.invoke(
            app, ["project", "conflicts", str(project_file), "--format", "json"]
        )

        assert result.exit_code == 0, result.output
        conflicts = json.loads(result.stdout)
        assert len(conflicts) == 1
        assert conflicts[0]["resourceId"] == "crane-1"
        assert conflicts[0]["conflictingActivities"] == ["a", "b"]

    def test_no_conflicts(self, tmp_path: Path, make_activity, make_phase, make_project) -> None:
        """Test the message shown when nothing is double-booked."""
        path = _write(
            tmp_path / "quiet.json",
            make_project([make_phase("p1", [make_activity("a", 2)])]),
        )

        result = runner.invoke(app, ["project", "conflicts", str(path)])

        assert result.exit_code == 0, result.output
        assert "No resource conflicts found" in result.output

    def test_gantt(self, project_file: Path) -> None:
        """Test Gantt data output."""
        result = runner.invoke(app, ["project", "gantt", str(project_file)])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [t["id"] for t in data["tasks"]] == ["proj-1", "p1", "a", "b", "p2", "c"]
        assert data["timeline"]["totalDays"] == 12

    def test_baseline(
        self, tmp_path: Path, project_file: Path, make_activity, make_phase, make_project
    ) -> None:
        """Test baseline comparison output."""
        baseline_file = _write(
            tmp_path / "baseline.json",
            make_project(
                [
                    make_phase("p1", [make_activity("a", 3)], weight=0.5, end_day=5),
                    make_phase("p2", [make_activity("c", 5, start_day=5)], start_day=5),
                ],
                end_day=10,
            ),
        )

        result = runner.invoke(
            app,
            ["project", "baseline", str(project_file), str(baseline_file), "--format", "json"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["scheduleVarianceDays"] == 2
        assert data["scopeChanges"] == ["Added activity b (Activity b)"]
        assert data["milestonesAtRisk"] == ["p1", "p2"]

    def test_cycle_reports_error(
        self, tmp_path: Path, make_activity, make_phase, make_project
    ) -> None:
        """Test that a cyclic project exits with an error."""
        path = _write(
            tmp_path / "cycle.json",
            make_project(
                [
                    make_phase(
                        "p1",
                        [
                            make_activity("a", 1, depends_on=["b"]),
                            make_activity("b", 1, depends_on=["a"]),
                        ],
                    )
                ]
            ),
        )

        result = runner.invoke(app, ["project", "critical-path", str(path)])

        assert result.exit_code == 1
        assert "Cyclic dependency detected" in result.output

    def test_invalid_project_file(self, tmp_path: Path) -> None:
        """Test that malformed JSON exits with an error."""
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")

        result = runner.invoke(app, ["project", "report", str(path)])

        assert result.exit_code == 1
        assert "Error loading project" in result.output


class TestTemplateCommands:
    """Test the template sub-commands."""

    def test_solar_to_stdout(self) -> None:
        """Test generating a solar project as JSON on stdout."""
        result = runner.invoke(
            app,
            ["template", "solar", "Depot Roof", "--start", "2024-01-01",
             "--end", "2024-05-01", "--id", "solar-1"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["projectId"] == "solar-1"
        assert data["projectName"] == "Depot Roof"
        assert len(data["phases"]) == 4

    def test_solar_to_file(self, tmp_path: Path) -> None:
        """Test writing a solar project to a file that loads back."""
        output = tmp_path / "out" / "solar.json"

        result = runner.invoke(
            app,
            ["template", "solar", "Depot Roof", "--start", "2024-01-01",
             "--end", "2024-05-01", "--id", "solar-1", "--output", str(output)],
        )

        assert result.exit_code == 0, result.output
        assert "Project written successfully!" in result.output
        expected = create_solar_project(
            "Depot Roof",
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2024, 5, 1, tzinfo=timezone.utc),
            project_id="solar-1",
        )
        written = json.loads(output.read_text(encoding="utf-8"))
        assert [p["phaseId"] for p in written["phases"]] == [
            p.phase_id for p in expected.phases
        ]

        report = runner.invoke(app, ["project", "critical-path", str(output), "-f", "json"])
        assert report.exit_code == 0, report.output

    def test_solar_rejects_inverted_dates(self) -> None:
        """Test that an end before the start exits with an error."""
        result = runner.invoke(
            app,
            ["template", "solar", "Depot Roof", "--start", "2024-05-01", "--end", "2024-01-01"],
        )

        assert result.exit_code == 1
        assert "Error creating project" in result.output

    def test_estimate(self) -> None:
        """Test the sizing estimate panel."""
        result = runner.invoke(app, ["template", "estimate", "250"])

        assert result.exit_code == 0, result.output
        assert "Estimated duration: 300 days" in result.output
        assert "crane-1" in result.output


class TestGlobalOptions:
    """Test options handled by the main callback."""

    def test_missing_config_file(self, project_file: Path) -> None:
        """Test that a missing --config file is rejected."""
        result = runner.invoke(
            app, ["--config", "missing.toml", "project", "report", str(project_file)]
        )
        assert result.exit_code != 0

    def test_invalid_config_file(self, tmp_path: Path, project_file: Path) -> None:
        """Test that an invalid configuration exits with an error."""
        config_file = tmp_path / "bad.toml"
        config_file.write_text("[report]\ndecimals = 99\n")

        result = runner.invoke(
            app, ["--config", str(config_file), "project", "report", str(project_file)]
        )

        assert result.exit_code == 1
        assert "Error loading configuration" in result.output

    def test_log_events_share_run_id(
        self, tmp_path: Path, project_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that every event of one invocation carries the same run ID."""
        log_file = tmp_path / "logs" / "engine.log"
        monkeypatch.setenv("PROGRESS_ENGINE_LOGGING__LEVEL", "DEBUG")
        monkeypatch.setenv("PROGRESS_ENGINE_LOGGING__FILE", str(log_file))

        result = runner.invoke(
            app,
            ["project", "report", str(project_file), "--now", "2024-01-01", "--format", "json"],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["projectId"] == "proj-1"
        entries = [
            json.loads(line)
            for line in log_file.read_text(encoding="utf-8").splitlines()
            if line.strip()
        ]
        events = {entry["event"]: entry for entry in entries}
        assert "cli_started" in events
        assert events["project_loaded"]["project_id"] == "proj-1"
        assert events["project_loaded"]["activities"] == 3
        run_ids = {entry["run_id"] for entry in entries}
        assert len(run_ids) == 1
        assert len(run_ids.pop()) == 32

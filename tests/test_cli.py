"""
Tests for the command-line interface.
"""

import json

import pytest
from unittest.mock import AsyncMock

from spec_generator import main as cli
from spec_generator.config.settings import Settings
from spec_generator.core.exceptions import GenerationFailedError
from spec_generator.core.generator import GenerationService
from spec_generator.models.project import Epic, UserStory


@pytest.fixture
def service() -> AsyncMock:
    """Create a mock generation service."""
    service = AsyncMock(spec=GenerationService)
    service.generate_epics.return_value = [Epic(title="Gestion des congés"), Epic(title="Suivi des absences")]
    service.generate_stories_for_epics.return_value = [
        [UserStory(epic_title="Gestion des congés", statement="As a worker, I want X, so that Y")],
        [],
    ]
    service.generate_stories.return_value = [
        UserStory(epic_title="Gestion des congés", statement="As a worker, I want X, so that Y")
    ]
    return service


class TestParseArgs:
    """Tests for argument parsing."""

    def test_project_command(self):
        """Test the project command and shared options."""
        args = cli.parse_args(["project", "--title", "Portail RH", "-d", "desc", "--epics-only", "-vv"])

        assert args.command == "project"
        assert args.title == "Portail RH"
        assert args.description == "desc"
        assert args.epics_only
        assert args.verbose == 2

    def test_description_is_required(self):
        """Test that a description or a description file is required."""
        with pytest.raises(SystemExit):
            cli.parse_args(["project", "--title", "Portail RH"])

    def test_stories_command(self):
        """Test the single-epic stories command."""
        args = cli.parse_args([
            "stories", "--project-title", "P", "--epic-title", "E", "--epic-objective", "O",
        ])

        assert (args.project_title, args.epic_title, args.epic_objective) == ("P", "E", "O")


class TestRunProject:
    """Tests for the project command."""

    @pytest.mark.asyncio
    async def test_json_to_stdout(self, service: AsyncMock, capsys):
        """Test that epics and stories are printed as JSON."""
        args = cli.parse_args(["project", "--title", "Portail RH", "-d", "desc", "-q"])

        code = await cli.run_project(args, service)

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert [e["title"] for e in output["epics"]] == ["Gestion des congés", "Suivi des absences"]
        assert output["epics"][0]["stories"][0]["story"] == "As a worker, I want X, so that Y"
        service.generate_stories_for_epics.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_epics_only(self, service: AsyncMock, capsys):
        """Test that --epics-only skips story generation."""
        args = cli.parse_args(["project", "--title", "P", "-d", "desc", "--epics-only", "-q"])

        await cli.run_project(args, service)

        service.generate_stories_for_epics.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_description_file_and_store(self, service: AsyncMock, tmp_path):
        """Test a description file, an output file and the project store."""
        brief = tmp_path / "brief.txt"
        brief.write_text("Portail self-service RH\n", encoding="utf-8")
        output = tmp_path / "out" / "project.json"
        args = cli.parse_args([
            "project", "--title", "P", "--description-file", str(brief),
            "--project-id", "proj-1", "--store-dir", str(tmp_path / "store"),
            "-o", str(output), "-q",
        ])

        await cli.run_project(args, service)

        service.generate_epics.assert_awaited_once_with("P", "Portail self-service RH")
        assert (tmp_path / "store" / "proj-1.json").exists()
        saved = json.loads(output.read_text(encoding="utf-8"))
        assert saved["epics"][0]["id"]


class TestRun:
    """Tests for command dispatch and exit codes."""

    @pytest.mark.asyncio
    async def test_stories_command(self, service: AsyncMock, monkeypatch, capsys):
        """Test the stories command output."""
        monkeypatch.setattr(cli.GenerationService, "from_settings", classmethod(lambda cls, *a, **kw: service))
        args = cli.parse_args(["stories", "--project-title", "P", "--epic-title", "Gestion des congés", "-q"])

        code = await cli.run(args)

        assert code == 0
        assert json.loads(capsys.readouterr().out)[0]["epic"] == "Gestion des congés"
        service.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_generation_error_exit_code(self, service: AsyncMock, monkeypatch):
        """Test that a generation failure exits with 1."""
        service.generate_epics.side_effect = GenerationFailedError("server_error")
        monkeypatch.setattr(cli.GenerationService, "from_settings", classmethod(lambda cls, *a, **kw: service))
        args = cli.parse_args(["project", "--title", "P", "-d", "desc", "-q"])

        assert await cli.run(args) == 1
        service.close.assert_awaited_once()


class TestMain:
    """Tests for the entry point's logging setup."""

    @pytest.fixture
    def levels(self, monkeypatch) -> list:
        """Record the levels passed to setup_logging and skip the actual run."""
        levels = []
        monkeypatch.setattr(cli, "setup_logging", levels.append)
        monkeypatch.setattr(cli, "run", AsyncMock(return_value=0))
        return levels

    def test_configured_level_without_flags(self, levels: list, monkeypatch):
        """Test that LOG_LEVEL applies when no -v/-q flag is given."""
        monkeypatch.setattr(cli, "get_settings", lambda: Settings(log_level="error"))

        assert cli.main(["project", "--title", "P", "-d", "desc"]) == 0
        assert levels == ["ERROR"]

    def test_flags_override_configured_level(self, levels: list, monkeypatch):
        """Test that -vv wins over LOG_LEVEL."""
        monkeypatch.setattr(cli, "get_settings", lambda: Settings(log_level="error"))

        cli.main(["project", "--title", "P", "-d", "desc", "-vv"])

        assert levels == ["DEBUG"]

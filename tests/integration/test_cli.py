"""Integration tests for Sprint0 CLI commands.

These tests exercise the full CLI workflow against the sample repository
and JSON snapshots.
"""

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from sprint0 import __version__
from sprint0.analyzers import ImpactAnalyzer
from sprint0.cli import app
from tests.fixtures import EXPRESS_APP_PATH

runner = CliRunner()

EXPRESS_TITLE = "Add authentication to the Express API"


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """The CLI rebinds the package logger to the runner's streams."""
    logger = logging.getLogger("sprint0")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def vector_snapshot(tmp_path: Path) -> Path:
    snapshot = tmp_path / "snapshot.json"
    snapshot.write_text(
        json.dumps(
            {
                "files": [f"src/vector/store_{i:02d}.py" for i in range(20)]
                + ["src/app.py", "requirements.txt"],
                "dependencies": {"chromadb": "0.4.22", "fastapi": "0.110.0"},
                "rawContents": {},
            }
        )
    )
    return snapshot


class TestAssess:
    """Integration tests for `sprint0 assess`."""

    def test_assess_writes_markdown(self, tmp_path: Path) -> None:
        output = tmp_path / "SPRINT0.md"

        result = runner.invoke(
            app,
            ["assess", "--repo", str(EXPRESS_APP_PATH), "--title", EXPRESS_TITLE, "--output", str(output)],
        )

        assert result.exit_code == 0, result.output
        assert "Report EA-0001 written to:" in result.output
        content = output.read_text(encoding="utf-8")
        assert content.startswith(f"# EA Assessment: {EXPRESS_TITLE}")
        assert "## 10. Recommendations" in content
        assert "| Project Type | backend-api |" in content

    def test_assess_json_file(self, tmp_path: Path) -> None:
        output = tmp_path / "report.json"

        result = runner.invoke(
            app,
            [
                "assess",
                "-r", str(EXPRESS_APP_PATH),
                "-t", EXPRESS_TITLE,
                "-o", str(output),
                "-f", "json",
                "-n", "42",
            ],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["report_id"] == "EA-0042"
        assert data["change_type"] == "feature"
        assert len(data["sections"]) == 10

    def test_default_json_path_uses_json_suffix(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(
            app, ["assess", "-r", str(EXPRESS_APP_PATH), "-t", EXPRESS_TITLE, "-f", "json"]
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "docs" / "SPRINT0.json").exists()

    def test_assess_stdout(self) -> None:
        result = runner.invoke(
            app,
            ["--quiet", "assess", "-r", str(EXPRESS_APP_PATH), "-t", EXPRESS_TITLE, "--stdout", "-f", "json"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["title"] == f"EA Assessment: {EXPRESS_TITLE}"

    def test_assess_snapshot(self, tmp_path: Path, vector_snapshot: Path) -> None:
        output = tmp_path / "migration.md"

        result = runner.invoke(
            app,
            [
                "assess",
                "--snapshot", str(vector_snapshot),
                "-t", "Migrate ChromaDB to Qdrant",
                "-o", str(output),
                "-n", "7",
            ],
        )

        assert result.exit_code == 0, result.output
        content = output.read_text(encoding="utf-8")
        assert "| Report ID | EA-0007 |" in content
        assert "| Change Type | migration |" in content
        assert "Qdrant" in content

    def test_description_file(self, tmp_path: Path) -> None:
        description = tmp_path / "request.txt"
        description.write_text("Add Redis caching to the search service\n")
        output = tmp_path / "out.md"

        result = runner.invoke(
            app,
            [
                "assess",
                "-r", str(EXPRESS_APP_PATH),
                "--description-file", str(description),
                "-o", str(output),
            ],
        )

        assert result.exit_code == 0, result.output
        assert output.read_text(encoding="utf-8").startswith(
            "# EA Assessment: Add Redis caching to the search service"
        )

    def test_invalid_format(self, tmp_path: Path) -> None:
        result = runner.invoke(
            app, ["assess", "-r", str(EXPRESS_APP_PATH), "-f", "html", "-o", str(tmp_path / "x")]
        )

        assert result.exit_code == 1

    def test_invalid_snapshot(self, tmp_path: Path) -> None:
        snapshot = tmp_path / "snapshot.json"
        snapshot.write_text("[1, 2, 3]")

        result = runner.invoke(
            app, ["assess", "--snapshot", str(snapshot), "-o", str(tmp_path / "x.md")]
        )

        assert result.exit_code == 1

    def test_snapshot_with_malformed_field_is_degraded(self, tmp_path: Path) -> None:
        snapshot = tmp_path / "snapshot.json"
        snapshot.write_text(json.dumps({"files": ["src/app.py"], "dependencies": ["fastapi"]}))
        output = tmp_path / "report.md"

        result = runner.invoke(
            app, ["assess", "--snapshot", str(snapshot), "-t", "Add caching", "-o", str(output)]
        )

        assert result.exit_code == 2
        content = output.read_text(encoding="utf-8")
        assert "| input | dependencies must be an object, got list | yes |" in content

    def test_adr_dir_writes_decision_record(self, tmp_path: Path) -> None:
        adr_dir = tmp_path / "docs" / "adr"

        result = runner.invoke(
            app,
            [
                "assess",
                "-r", str(EXPRESS_APP_PATH),
                "-t", EXPRESS_TITLE,
                "-o", str(tmp_path / "SPRINT0.md"),
                "-n", "3",
                "--adr-dir", str(adr_dir),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Decision record ADR-003 written to:" in result.output
        written = adr_dir / "ADR-003-add-authentication-to-the-expr.md"
        assert written.read_text(encoding="utf-8").startswith(f"# ADR-003: {EXPRESS_TITLE}")

    def test_preview(self, tmp_path: Path) -> None:
        result = runner.invoke(
            app,
            [
                "assess",
                "-r", str(EXPRESS_APP_PATH),
                "-t", EXPRESS_TITLE,
                "-o", str(tmp_path / "SPRINT0.md"),
                "--preview",
            ],
        )

        assert result.exit_code == 0, result.output
        assert f"# EA Assessment: {EXPRESS_TITLE}" in result.stdout
        assert "more lines] ..." in result.stdout

    def test_nonexistent_repo_fails(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["assess", "-r", str(tmp_path / "missing")])

        assert result.exit_code != 0

    def test_degraded_exit_codes(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def explode(self: ImpactAnalyzer, *args: object) -> None:
            raise RuntimeError("impact exploded")

        monkeypatch.setattr(ImpactAnalyzer, "analyze", explode)
        args = ["assess", "-r", str(EXPRESS_APP_PATH), "-t", EXPRESS_TITLE, "-o", str(tmp_path / "r.md")]

        result = runner.invoke(app, args)
        assert result.exit_code == 2
        assert "## 11. Pipeline Errors" in (tmp_path / "r.md").read_text(encoding="utf-8")

        config_file = tmp_path / "ci.yaml"
        config_file.write_text("ci:\n  fail_on_degraded: true\n")
        result = runner.invoke(app, ["--config", str(config_file), *args])
        assert result.exit_code == 1


class TestClassify:
    """Integration tests for `sprint0 classify`."""

    def test_classify_prints_context(self) -> None:
        result = runner.invoke(app, ["--quiet", "classify", "Migrate MySQL to PostgreSQL"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["change_type"] == "migration"
        assert [c["display_name"] for c in data["components"]] == ["MySQL", "PostgreSQL"]


class TestInit:
    """Integration tests for `sprint0 init`."""

    def test_init_creates_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        config_file = tmp_path / ".sprint0" / "config.yaml"
        assert config_file.exists()
        assert "weekly_rate: 10000" in config_file.read_text()

    def test_init_force_overwrites(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        runner.invoke(app, ["init"])
        config_file = tmp_path / ".sprint0" / "config.yaml"
        config_file.write_text("# Modified")

        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1

        result = runner.invoke(app, ["init", "--force"])
        assert result.exit_code == 0
        assert "Modified" not in config_file.read_text()


class TestGlobalOptions:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"sprint0 {__version__}" in result.output

    def test_missing_config_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--config", str(tmp_path / "none.yaml"), "classify", "x"])

        assert result.exit_code != 0

    def test_invalid_config_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("output:\n  format: pdf\n")

        result = runner.invoke(app, ["--config", str(config_file), "classify", "x"])

        assert result.exit_code == 1

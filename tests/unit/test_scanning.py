"""Unit tests for local repository scanning."""

import json
import logging
from pathlib import Path

import pytest

from sprint0.config import ScanningConfig
from sprint0.scanning import (
    ScanError,
    collect_profiler_input,
    is_sample_candidate,
    list_files,
    parse_manifests,
    parse_package_json,
    parse_pyproject_toml,
    parse_requirements_txt,
)


def _write(root: Path, relative: str, content: str = "") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestCollectProfilerInput:
    """Tests for scanning a repository into a ProfilerInput."""

    def test_express_fixture(self, express_repo: Path) -> None:
        profiler_input = collect_profiler_input(express_repo)

        assert profiler_input.files == [
            "README.md",
            "db/schema.sql",
            "package.json",
            "server/index.js",
            "server/routes/auth.js",
            "tests/auth.test.js",
        ]
        assert profiler_input.dependencies == {
            "express": "^4.18.2",
            "jsonwebtoken": "^9.0.0",
            "pg": "^8.11.0",
            "jest": "^29.7.0",
        }
        assert list(profiler_input.raw_contents)[:2] == ["db/schema.sql", "package.json"]
        assert "server/routes/auth.js" in profiler_input.raw_contents
        assert "README.md" not in profiler_input.raw_contents

    def test_not_a_directory(self, tmp_path: Path) -> None:
        target = _write(tmp_path, "file.txt", "x")

        with pytest.raises(ScanError, match="not a directory"):
            collect_profiler_input(target)

    def test_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(ScanError):
            collect_profiler_input(tmp_path / "missing")

    def test_content_limits(self, tmp_path: Path) -> None:
        _write(tmp_path, "package.json", "{}")
        _write(tmp_path, "db/schema.sql", "CREATE TABLE a (id INT);")
        _write(tmp_path, "server/app.js", "x" * 200)

        profiler_input = collect_profiler_input(
            tmp_path, ScanningConfig(max_content_files=5, max_file_bytes=100)
        )
        assert set(profiler_input.raw_contents) == {"db/schema.sql", "package.json"}

        profiler_input = collect_profiler_input(tmp_path, ScanningConfig(max_content_files=1))
        assert list(profiler_input.raw_contents) == ["db/schema.sql"]

    def test_extra_exclude_dirs(self, tmp_path: Path) -> None:
        _write(tmp_path, "src/app.py")
        _write(tmp_path, "fixtures/sample/app.py")

        profiler_input = collect_profiler_input(tmp_path, ScanningConfig(exclude_dirs=["fixtures"]))

        assert profiler_input.files == ["src/app.py"]


class TestListFiles:
    def test_skips_tooling_dirs(self, tmp_path: Path) -> None:
        _write(tmp_path, "src/index.js")
        _write(tmp_path, "node_modules/express/package.json")
        _write(tmp_path, ".git/config")
        _write(tmp_path, "src/__pycache__/x.pyc")

        assert list_files(tmp_path) == ["src/index.js"]

    def test_sorted_posix_paths(self, tmp_path: Path) -> None:
        _write(tmp_path, "b/z.py")
        _write(tmp_path, "a.py")
        _write(tmp_path, "b/a.py")

        assert list_files(tmp_path) == ["a.py", "b/a.py", "b/z.py"]


class TestManifests:
    """Tests for dependency manifest parsing."""

    def test_package_json(self) -> None:
        content = json.dumps(
            {"dependencies": {"react": "^18.2.0"}, "devDependencies": {"vite": "^5.0.0"}}
        )

        assert parse_package_json(content) == {"react": "^18.2.0", "vite": "^5.0.0"}

    def test_package_json_not_object(self) -> None:
        with pytest.raises(ValueError, match="not an object"):
            parse_package_json("[]")

    def test_requirements_txt(self) -> None:
        content = "Django>=4.2  # web\nrequests[socks]==2.31\n-r base.txt\n\nnumpy\n"

        assert parse_requirements_txt(content) == {
            "django": ">=4.2",
            "requests": "==2.31",
            "numpy": "*",
        }

    def test_pyproject_toml(self) -> None:
        content = (
            "[project]\n"
            'name = "demo"\n'
            "dependencies = [\n"
            '    "typer>=0.9",\n'
            '    "PyYAML",\n'
            "]\n"
            "\n"
            "[project.optional-dependencies]\n"
            'test = ["pytest"]\n'
        )

        assert parse_pyproject_toml(content) == {"typer": ">=0.9", "pyyaml": "*"}

    def test_pyproject_without_dependencies(self) -> None:
        assert parse_pyproject_toml("[tool.black]\nline-length = 100\n") == {}

    def test_first_manifest_wins(self, tmp_path: Path) -> None:
        _write(tmp_path, "apps/web/package.json", json.dumps({"dependencies": {"express": "^5.0.0"}}))
        _write(tmp_path, "package.json", json.dumps({"dependencies": {"express": "^4.18.2"}}))
        _write(tmp_path, "requirements-dev.txt", "pytest==8.0\n")

        dependencies = parse_manifests(tmp_path, list_files(tmp_path))

        assert dependencies == {"express": "^5.0.0", "pytest": "==8.0"}

    def test_broken_manifest_is_skipped(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        _write(tmp_path, "package.json", "{not json")
        _write(tmp_path, "requirements.txt", "flask\n")

        with caplog.at_level(logging.WARNING, logger="sprint0.scanning"):
            dependencies = parse_manifests(tmp_path, list_files(tmp_path))

        assert dependencies == {"flask": "*"}
        assert "Failed to parse package.json" in caplog.text


class TestSampleCandidates:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("package.json", True),
            ("db/schema.sql", True),
            ("prisma/schema.prisma", True),
            ("server/routes/users.js", True),
            ("src/auth/session.py", True),
            ("README.md", False),
            ("src/utils/format.py", False),
            ("docs/routes.md", False),
        ],
    )
    def test_candidates(self, path: str, expected: bool) -> None:
        assert is_sample_candidate(path) is expected

"""Shared pytest fixtures for Sprint0 tests.

This module provides common fixtures used across unit and integration
tests. Fixtures are organized by category:
- Path fixtures: sample repositories on disk
- Snapshot fixtures: in-memory ProfilerInputs for known scenarios
- Configuration fixtures: config dictionaries for loader tests
- Artifact fixtures: pre-built pipeline artifacts for assembler/renderer tests
"""

from pathlib import Path
from typing import Any

import pytest

from sprint0.analyzers import (
    FindingsAnalyzer,
    ImpactAnalyzer,
    KeywordClassifier,
    MetricsSynthesizer,
    RecommendationGenerator,
    RepositoryProfiler,
)
from sprint0.models import ChangeContext, CurrentStateProfile, ProfilerInput

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_repos_dir(fixtures_dir: Path) -> Path:
    """Return the path to sample repository fixtures."""
    return fixtures_dir / "sample_repos"


@pytest.fixture
def express_repo(sample_repos_dir: Path) -> Path:
    """Return the path to the sample Express application."""
    return sample_repos_dir / "express_app"


# =============================================================================
# Snapshot Fixtures
# =============================================================================

EXPRESS_AUTH_ROUTES = """const express = require('express');
const jwt = require('jsonwebtoken');
const router = express.Router();

router.post('/login', (req, res) => {
  res.json({ token: jwt.sign({ sub: req.body.username }, 'secret') });
});

router.get('/me', (req, res) => res.json({ user: req.user }));
"""

EXPRESS_SCHEMA = """CREATE TABLE users (id SERIAL PRIMARY KEY, username TEXT);
CREATE TABLE sessions (id SERIAL PRIMARY KEY, user_id INTEGER REFERENCES users(id));
"""


@pytest.fixture
def express_input() -> ProfilerInput:
    """Snapshot of a small Express API with JWT auth and a SQL schema."""
    return ProfilerInput(
        files=[
            "package.json",
            "README.md",
            "server/index.js",
            "server/routes/auth.js",
            "db/schema.sql",
            "tests/auth.test.js",
        ],
        dependencies={
            "express": "^4.18.2",
            "jsonwebtoken": "^9.0.0",
            "pg": "^8.11.0",
        },
        raw_contents={
            "server/routes/auth.js": EXPRESS_AUTH_ROUTES,
            "db/schema.sql": EXPRESS_SCHEMA,
        },
    )


@pytest.fixture
def vector_input() -> ProfilerInput:
    """Snapshot with 20 vector-store files and unrelated application code."""
    vector_files = [f"src/vector/store_{i:02d}.py" for i in range(20)]
    return ProfilerInput(
        files=vector_files
        + [
            "src/services/search_service.py",
            "src/app.py",
            "requirements.txt",
            "tests/test_app.py",
        ],
        dependencies={"chromadb": "0.4.22", "fastapi": "0.110.0"},
    )


@pytest.fixture
def large_input() -> ProfilerInput:
    """Snapshot of a 600-file backend repository."""
    files = [f"src/module_{i // 50}/file_{i}.py" for i in range(600)]
    return ProfilerInput(files=files + ["requirements.txt"], dependencies={"django": "4.2"})


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def minimal_config() -> dict[str, Any]:
    """Return a minimal valid Sprint0 configuration."""
    return {
        "output": {
            "path": "docs/SPRINT0.md",
            "format": "markdown",
        }
    }


@pytest.fixture
def full_config() -> dict[str, Any]:
    """Return a complete Sprint0 configuration with all options."""
    return {
        "output": {
            "path": "reports/ASSESSMENT.md",
            "format": "json",
        },
        "scanning": {
            "max_content_files": 10,
            "max_file_bytes": 4096,
            "exclude_dirs": ["fixtures"],
        },
        "classifier": "keyword",
        "llm": {
            "provider": "claude",
            "model": "claude-3-haiku",
            "api_key": "${TEST_API_KEY}",
            "temperature": 0,
            "max_tokens": 512,
        },
        "estimation": {
            "weekly_rate": 12000,
            "base_weeks": {"small": 3, "medium": 6, "large": 10},
        },
        "ci": {
            "fail_on_degraded": True,
            "json_output": True,
        },
    }


# =============================================================================
# Artifact Fixtures
# =============================================================================


@pytest.fixture
def classifier() -> KeywordClassifier:
    """Return the default keyword classifier."""
    return KeywordClassifier()


@pytest.fixture
def express_profile(express_input: ProfilerInput) -> CurrentStateProfile:
    """Profile of the Express snapshot."""
    return RepositoryProfiler().profile(express_input)


@pytest.fixture
def express_auth_context(classifier: KeywordClassifier) -> ChangeContext:
    """Context for adding authentication to the Express API."""
    return classifier.classify("Add authentication to the Express API")


@pytest.fixture
def express_artifacts(
    express_input: ProfilerInput,
    express_profile: CurrentStateProfile,
    express_auth_context: ChangeContext,
) -> dict[str, Any]:
    """Every pipeline artifact for the Express authentication scenario."""
    impacts = ImpactAnalyzer().analyze(express_profile, express_auth_context, express_input.files)
    findings = FindingsAnalyzer().analyze(express_profile, express_auth_context, impacts)
    recommendations = RecommendationGenerator().generate(
        express_auth_context,
        express_profile,
        impacts,
        findings=findings,
        files=express_input.files,
    )
    metrics = MetricsSynthesizer().synthesize(express_auth_context, express_profile, impacts)
    return {
        "profile": express_profile,
        "context": express_auth_context,
        "impacts": impacts,
        "findings": findings,
        "recommendations": recommendations,
        "metrics": metrics,
    }

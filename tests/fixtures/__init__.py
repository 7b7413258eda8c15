"""Test fixtures for Sprint0.

This package provides sample repositories and other test fixtures
for integration and end-to-end testing.

Sample Repositories:
- sample_repos/express_app: An Express API with JWT auth and a SQL schema
"""

from pathlib import Path

# Path to fixtures directory
FIXTURES_DIR = Path(__file__).parent

# Path to sample repositories
SAMPLE_REPOS_DIR = FIXTURES_DIR / "sample_repos"

# Specific sample repository paths
EXPRESS_APP_PATH = SAMPLE_REPOS_DIR / "express_app"


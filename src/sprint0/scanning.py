"""Local repository scanning.

Builds a ProfilerInput from a checked-out repository: the relative file
list, a dependency map parsed from manifest files, and a bounded sample of
file contents (route/auth sources and schema files) for the profiler.
"""

import json
import logging
import os
import re
from pathlib import Path

from sprint0.analyzers.profiler import ROUTE_FILE_PATTERN
from sprint0.config import ScanningConfig
from sprint0.models.inputs import ProfilerInput

logger = logging.getLogger(__name__)

SKIP_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".idea",
        ".vscode",
        ".venv",
        "venv",
        "env",
        "node_modules",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".tox",
        "dist",
        "build",
        "target",
        ".next",
        "coverage",
    }
)

SOURCE_EXTENSIONS = frozenset({".py", ".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs", ".rb", ".go", ".java", ".php"})
SCHEMA_EXTENSIONS = frozenset({".sql", ".prisma"})
MANIFEST_NAMES = frozenset({"package.json", "pyproject.toml", "requirements.txt", "go.mod", "Dockerfile"})

_REQUIREMENT_RE = re.compile(r"^([a-zA-Z0-9_.-]+)(?:\[[^\]]*\])?\s*(?:([<>=!~]+.+))?")


class ScanError(Exception):
    """Raised when a repository path cannot be scanned."""


def collect_profiler_input(
    repo_path: Path,
    scanning: ScanningConfig | None = None,
) -> ProfilerInput:
    """Scan a local repository into a ProfilerInput.

    Args:
        repo_path: Repository root directory
        scanning: Scanning limits (defaults if None)

    Returns:
        ProfilerInput with files, dependencies and sampled contents

    Raises:
        ScanError: If repo_path is not a directory
    """
    scanning = scanning or ScanningConfig()
    root = repo_path.resolve()
    if not root.is_dir():
        raise ScanError(f"Repository path is not a directory: {repo_path}")

    files = list_files(root, skip_dirs=SKIP_DIRS | set(scanning.exclude_dirs))
    dependencies = parse_manifests(root, files)
    raw_contents = sample_contents(root, files, scanning.max_content_files, scanning.max_file_bytes)

    logger.info(
        "Scanned %s: %d files, %d dependencies, %d sampled",
        root.name,
        len(files),
        len(dependencies),
        len(raw_contents),
    )
    return ProfilerInput(files=files, dependencies=dependencies, raw_contents=raw_contents)


def list_files(root: Path, skip_dirs: frozenset[str] | set[str] = SKIP_DIRS) -> list[str]:
    """Sorted repository-relative posix paths, skipping vendored/tooling dirs."""
    files: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in skip_dirs)
        base = Path(dirpath)
        for filename in filenames:
            files.append((base / filename).relative_to(root).as_posix())
    return sorted(files)


# =============================================================================
# Manifest parsing
# =============================================================================


def parse_manifests(root: Path, files: list[str]) -> dict[str, str]:
    """Merge dependencies from every package.json, requirements*.txt and pyproject.toml.

    The first manifest (in path order) to declare a name wins.
    """
    dependencies: dict[str, str] = {}
    parsers = {
        "package.json": parse_package_json,
        "pyproject.toml": parse_pyproject_toml,
    }

    for path in files:
        name = path.rsplit("/", 1)[-1]
        if name in parsers:
            parser = parsers[name]
        elif name.startswith("requirements") and name.endswith(".txt"):
            parser = parse_requirements_txt
        else:
            continue

        try:
            content = (root / path).read_text(encoding="utf-8")
            parsed = parser(content)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning("Failed to parse %s: %s", path, e)
            continue

        logger.debug("Parsed %s: %d dependencies", path, len(parsed))
        for dep_name, version in parsed.items():
            dependencies.setdefault(dep_name, version)

    return dependencies


def parse_package_json(content: str) -> dict[str, str]:
    """Dependencies and devDependencies from package.json content."""
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError("package.json is not an object")

    dependencies: dict[str, str] = {}
    for key in ("dependencies", "devDependencies"):
        for name, version in (data.get(key) or {}).items():
            dependencies.setdefault(str(name), str(version))
    return dependencies


def parse_requirements_txt(content: str) -> dict[str, str]:
    """Requirement names (lowercased) and specifiers from requirements.txt content."""
    dependencies: dict[str, str] = {}
    for line in content.split("\n"):
        line = line.split("#", 1)[0].strip()
        if not line or line.startswith("-"):
            continue
        match = _REQUIREMENT_RE.match(line)
        if match:
            dependencies.setdefault(match.group(1).lower(), (match.group(2) or "*").strip())
    return dependencies


def parse_pyproject_toml(content: str) -> dict[str, str]:
    """Dependencies listed in the [project] dependencies array."""
    dependencies: dict[str, str] = {}
    section = re.search(
        r"\[project\].*?^dependencies\s*=\s*\[(.*?)\]\s*$", content, re.DOTALL | re.MULTILINE
    )
    if not section:
        return dependencies

    for entry in re.findall(r"""["']([^"']+)["']""", section.group(1)):
        match = _REQUIREMENT_RE.match(entry.strip())
        if match:
            dependencies.setdefault(match.group(1).lower(), (match.group(2) or "*").strip())
    return dependencies


# =============================================================================
# Content sampling
# =============================================================================


def is_sample_candidate(path: str) -> bool:
    """Whether a file's contents are useful to the profiler."""
    if _is_structural(path):
        return True
    if Path(path).suffix.lower() not in SOURCE_EXTENSIONS:
        return False
    return bool(ROUTE_FILE_PATTERN.search(path)) or "auth" in path.lower()


def sample_contents(
    root: Path,
    files: list[str],
    max_files: int,
    max_bytes: int,
) -> dict[str, str]:
    """Read up to max_files candidate files no larger than max_bytes.

    Manifests and schema files are sampled before source files; each group
    in path order.
    """
    candidates = [p for p in files if is_sample_candidate(p)]
    candidates.sort(key=lambda p: (not _is_structural(p), p))

    contents: dict[str, str] = {}
    for path in candidates:
        if len(contents) >= max_files:
            break
        full_path = root / path
        try:
            if full_path.stat().st_size > max_bytes:
                continue
            contents[path] = full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Skipping %s: %s", path, e)

    return contents


def _is_structural(path: str) -> bool:
    return path.rsplit("/", 1)[-1] in MANIFEST_NAMES or Path(path).suffix.lower() in SCHEMA_EXTENSIONS

"""Pipeline input entities.

- ProfilerInput: repository snapshot (file list, dependency map, sampled contents)
- ChangeRequest: free-text change request (title + description)
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ProfilerInput:
    """Repository snapshot handed to the profiler.

    Attributes:
        files: Repository-relative file paths (posix separators)
        dependencies: Dependency name to version specifier
        raw_contents: Sampled file contents keyed by path (subset of files)
    """

    files: list[str] = field(default_factory=list)
    dependencies: dict[str, str] = field(default_factory=dict)
    raw_contents: dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, data: Any) -> tuple["ProfilerInput", list[str]]:
        """Coerce a JSON-style dictionary field by field.

        Well-formed fields are kept even when others are rejected. Accepts both
        ``raw_contents`` and the camelCase ``rawContents`` key.

        Returns:
            Tuple of (input, problems) where problems describe rejected fields
        """
        if not isinstance(data, dict):
            return cls(), [f"profiler input must be an object, got {type(data).__name__}"]

        problems: list[str] = []

        files: list[str] = []
        raw_files = data.get("files")
        if isinstance(raw_files, (list, tuple)):
            files = [str(f) for f in raw_files if f is not None]
        elif raw_files is not None:
            problems.append(f"files must be a list of paths, got {type(raw_files).__name__}")

        dependencies = _string_map(data.get("dependencies"), "dependencies", problems)
        raw_key = "raw_contents" if "raw_contents" in data else "rawContents"
        raw_contents = _string_map(data.get(raw_key), raw_key, problems)

        return cls(files=files, dependencies=dependencies, raw_contents=raw_contents), problems

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProfilerInput":
        """Create input from a JSON-style dictionary, dropping malformed fields."""
        return cls.parse(data)[0]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "files": list(self.files),
            "dependencies": dict(self.dependencies),
            "raw_contents": dict(self.raw_contents),
        }


@dataclass
class ChangeRequest:
    """A free-text change request.

    Attributes:
        title: Short title
        description: Longer description
    """

    title: str = ""
    description: str = ""

    @property
    def text(self) -> str:
        """Title and description joined as the classifier's raw text."""
        return "\n".join(part for part in (self.title, self.description) if part)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {"title": self.title, "description": self.description}


def _string_map(value: Any, name: str, problems: list[str]) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        problems.append(f"{name} must be an object, got {type(value).__name__}")
        return {}
    return {str(k): str(v) for k, v in value.items()}

"""Sprint0 configuration system.

Configuration is YAML-based with minimal CLI overrides (--output, --format, --ci).
Supports environment variable substitution (${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.sprint0/config.yaml
3. ./sprint0.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from sprint0.models.llm_config import LLMConfig

VALID_FORMATS = frozenset({"markdown", "json"})
VALID_CLASSIFIERS = frozenset({"keyword", "llm"})

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class OutputConfig:
    """Output configuration.

    Attributes:
        path: Output file path
        format: Output format (markdown, json)
    """

    path: str = "docs/SPRINT0.md"
    format: str = "markdown"

    def __post_init__(self) -> None:
        """Validate output format."""
        if self.format not in VALID_FORMATS:
            raise ValueError(f"Invalid output format: {self.format}. Valid: {sorted(VALID_FORMATS)}")


@dataclass
class ScanningConfig:
    """Local repository scanning limits.

    Attributes:
        max_content_files: Maximum number of files whose contents are sampled
        max_file_bytes: Files larger than this are never sampled
        exclude_dirs: Extra directory names to skip while walking
    """

    max_content_files: int = 40
    max_file_bytes: int = 64 * 1024
    exclude_dirs: list[str] = field(default_factory=list)


@dataclass
class EstimationConfig:
    """Named estimation constants used by recommendations and metrics.

    Attributes:
        weekly_rate: Cost of one week for a two-person pair
        base_weeks: Base delivery weeks per scope
        complexity_multipliers: Timeline multiplier per complexity level
        team_sizes: Team size per complexity level
        benefit_multipliers: Benefit multiplier per change type
        default_benefit_multiplier: Multiplier for change types not listed
        effort_penalty: Priority adjustment per effort size
        phase_shares: Share of the timeline per delivery phase (ordered)
        cost_breakdown: Share of the total cost per cost bucket (ordered)
        payback_base_months: Months divided by the benefit multiplier for payback
        risk_reduction: Risk reduction percent per change type
        default_risk_reduction: Risk reduction for change types not listed
        tech_debt_hours: Debt hours addressed, keyed by the largest impact effort
    """

    weekly_rate: int = 10000
    base_weeks: dict[str, int] = field(
        default_factory=lambda: {"small": 4, "medium": 8, "large": 12}
    )
    complexity_multipliers: dict[str, float] = field(
        default_factory=lambda: {"low": 1.0, "medium": 1.2, "high": 1.5}
    )
    team_sizes: dict[str, int] = field(
        default_factory=lambda: {"low": 2, "medium": 3, "high": 4}
    )
    benefit_multipliers: dict[str, float] = field(
        default_factory=lambda: {"optimization": 2.0, "migration": 1.5, "feature": 1.8}
    )
    default_benefit_multiplier: float = 1.2
    effort_penalty: dict[str, int] = field(
        default_factory=lambda: {"S": 2, "M": 0, "L": -3, "XL": -6}
    )
    phase_shares: dict[str, float] = field(
        default_factory=lambda: {
            "Planning": 0.2,
            "Development": 0.4,
            "Testing": 0.2,
            "Deployment": 0.1,
            "Stabilization": 0.1,
        }
    )
    cost_breakdown: dict[str, float] = field(
        default_factory=lambda: {
            "development": 0.6,
            "testing": 0.2,
            "deployment": 0.1,
            "contingency": 0.1,
        }
    )
    payback_base_months: int = 18
    risk_reduction: dict[str, float] = field(
        default_factory=lambda: {
            "migration": 35.0,
            "refactoring": 30.0,
            "upgrade": 30.0,
            "optimization": 25.0,
            "feature": 25.0,
        }
    )
    default_risk_reduction: float = 20.0
    tech_debt_hours: dict[str, int] = field(
        default_factory=lambda: {"S": 100, "M": 200, "L": 400, "XL": 800}
    )

    def __post_init__(self) -> None:
        """Validate estimation constants."""
        if self.weekly_rate <= 0:
            raise ValueError(f"weekly_rate must be positive (got {self.weekly_rate})")

        for name, required in (
            ("base_weeks", {"small", "medium", "large"}),
            ("complexity_multipliers", {"low", "medium", "high"}),
            ("team_sizes", {"low", "medium", "high"}),
            ("effort_penalty", {"S", "M", "L", "XL"}),
            ("tech_debt_hours", {"S", "M", "L", "XL"}),
        ):
            missing = required - set(getattr(self, name))
            if missing:
                raise ValueError(f"estimation.{name} is missing keys: {sorted(missing)}")


@dataclass
class CIConfig:
    """CI/CD-specific configuration.

    Attributes:
        fail_on_degraded: Exit with error (1) instead of warning (2) when a stage degrades
        json_output: Use JSON log output
    """

    fail_on_degraded: bool = False
    json_output: bool = False


@dataclass
class Sprint0Config:
    """Top-level Sprint0 configuration.

    Attributes:
        output: Output path and format
        scanning: Local repository scanning limits
        classifier: Change classifier to use (keyword, llm)
        llm: LLM settings for the llm classifier
        estimation: Estimation constants
        ci: CI/CD settings
    """

    output: OutputConfig = field(default_factory=OutputConfig)
    scanning: ScanningConfig = field(default_factory=ScanningConfig)
    classifier: str = "keyword"
    llm: LLMConfig = field(default_factory=LLMConfig)
    estimation: EstimationConfig = field(default_factory=EstimationConfig)
    ci: CIConfig = field(default_factory=CIConfig)

    # Runtime overrides (set by CLI)
    _config_path: Path | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate classifier selection."""
        if self.classifier not in VALID_CLASSIFIERS:
            raise ValueError(
                f"Invalid classifier: {self.classifier}. Valid: {sorted(VALID_CLASSIFIERS)}"
            )

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax, e.g. ${ANTHROPIC_API_KEY}.

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(value, str):

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return _ENV_VAR_PATTERN.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.sprint0/config.yaml
    2. ./sprint0.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".sprint0" / "config.yaml",
        start_path / "sprint0.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def _merged(defaults: dict[str, Any], overrides: Any) -> dict[str, Any]:
    """Overlay a mapping from YAML onto a default mapping."""
    merged = dict(defaults)
    if isinstance(overrides, dict):
        merged.update(overrides)
    return merged


def _load_estimation(data: dict[str, Any]) -> EstimationConfig:
    """Build estimation constants, keeping defaults for anything not given."""
    defaults = EstimationConfig()
    return EstimationConfig(
        weekly_rate=int(data.get("weekly_rate", defaults.weekly_rate)),
        base_weeks=_merged(defaults.base_weeks, data.get("base_weeks")),
        complexity_multipliers=_merged(
            defaults.complexity_multipliers, data.get("complexity_multipliers")
        ),
        team_sizes=_merged(defaults.team_sizes, data.get("team_sizes")),
        benefit_multipliers=_merged(
            defaults.benefit_multipliers, data.get("benefit_multipliers")
        ),
        default_benefit_multiplier=float(
            data.get("default_benefit_multiplier", defaults.default_benefit_multiplier)
        ),
        effort_penalty=_merged(defaults.effort_penalty, data.get("effort_penalty")),
        phase_shares=_merged(defaults.phase_shares, data.get("phase_shares")),
        cost_breakdown=_merged(defaults.cost_breakdown, data.get("cost_breakdown")),
        payback_base_months=int(
            data.get("payback_base_months", defaults.payback_base_months)
        ),
        risk_reduction=_merged(defaults.risk_reduction, data.get("risk_reduction")),
        default_risk_reduction=float(
            data.get("default_risk_reduction", defaults.default_risk_reduction)
        ),
        tech_debt_hours=_merged(defaults.tech_debt_hours, data.get("tech_debt_hours")),
    )


def load_config_from_dict(data: dict[str, Any]) -> Sprint0Config:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        Sprint0Config instance
    """
    data = substitute_env_vars(data)

    config = Sprint0Config()

    if "output" in data:
        output_data = data["output"] or {}
        config.output = OutputConfig(
            path=output_data.get("path", config.output.path),
            format=output_data.get("format", config.output.format),
        )

    if "scanning" in data:
        scanning_data = data["scanning"] or {}
        config.scanning = ScanningConfig(
            max_content_files=int(
                scanning_data.get("max_content_files", config.scanning.max_content_files)
            ),
            max_file_bytes=int(
                scanning_data.get("max_file_bytes", config.scanning.max_file_bytes)
            ),
            exclude_dirs=list(scanning_data.get("exclude_dirs", []) or []),
        )

    if "classifier" in data:
        classifier = str(data["classifier"])
        if classifier not in VALID_CLASSIFIERS:
            raise ValueError(
                f"Invalid classifier: {classifier}. Valid: {sorted(VALID_CLASSIFIERS)}"
            )
        config.classifier = classifier

    if "llm" in data:
        config.llm = LLMConfig.from_dict(data["llm"] or {})

    if "estimation" in data:
        config.estimation = _load_estimation(data["estimation"] or {})

    if "ci" in data:
        ci_data = data["ci"] or {}
        config.ci = CIConfig(
            fail_on_degraded=ci_data.get("fail_on_degraded", False),
            json_output=ci_data.get("json_output", False),
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> Sprint0Config:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        Sprint0Config instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path) as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = Sprint0Config()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# Sprint0 Configuration

# Output settings
output:
  path: "docs/SPRINT0.md"
  format: "markdown"  # markdown, json

# Local repository scanning
scanning:
  max_content_files: 40     # files whose contents are sampled
  max_file_bytes: 65536     # larger files are never sampled
  exclude_dirs: []          # extra directory names to skip

# Change classifier: keyword (deterministic) or llm (falls back to keyword)
classifier: "keyword"

# LLM settings (only used when classifier is "llm")
llm:
  provider: "ollama"     # ollama (local), claude, gemini, openai, bedrock
  model: "llama3.2"
  # api_key: "${ANTHROPIC_API_KEY}"  # Required for claude/gemini/openai
  api_base: "http://localhost:11434"
  temperature: 0         # MUST be 0 for repeatable classification
  max_tokens: 1024
  enabled: false

# Estimation constants
estimation:
  weekly_rate: 10000
  base_weeks: {small: 4, medium: 8, large: 12}
  complexity_multipliers: {low: 1.0, medium: 1.2, high: 1.5}
  team_sizes: {low: 2, medium: 3, high: 4}
  benefit_multipliers: {optimization: 2.0, migration: 1.5, feature: 1.8}
  default_benefit_multiplier: 1.2
  effort_penalty: {S: 2, M: 0, L: -3, XL: -6}

# CI/CD settings
ci:
  fail_on_degraded: false
  json_output: false
'''

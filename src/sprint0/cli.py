"""Sprint0 CLI interface.

Commands:
- assess: Assess a change request against a local repository
- classify: Classify change-request text and print the context as JSON
- init: Initialize Sprint0 configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log output for CI/CD
- --version: Show version and exit
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from sprint0 import __version__
from sprint0.config import VALID_FORMATS, Sprint0Config, create_default_config, load_config
from sprint0.models import AnalysisError, ChangeRequest, ProfilerInput
from sprint0.utils.logging import LogMode, configure_from_cli, get_logger, setup_logging

app = typer.Typer(
    name="sprint0",
    help="Change-impact analysis and Sprint 0 architecture assessments",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: Sprint0Config | None = None
_logger = get_logger()

PREVIEW_LINES = 40


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"sprint0 {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON log output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Sprint0 - Change-Impact Assessment Engine.

    Turn a repository and a change request into an Enterprise Architecture
    Sprint 0 assessment with impacts, recommendations and business metrics.
    """
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except Exception as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)

    if _config.ci.json_output and not ci:
        setup_logging(mode=LogMode.JSON, level=_logger.getEffectiveLevel())


def _read_snapshot(snapshot: Path) -> tuple[ProfilerInput, list[AnalysisError]]:
    """Load a JSON profiler input ({files, dependencies, rawContents}).

    Malformed fields are dropped and returned as input errors.
    """
    from sprint0.pipeline import coerce_profiler_input

    data = json.loads(snapshot.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("snapshot must be a JSON object")
    return coerce_profiler_input(data)


# =============================================================================
# assess command
# =============================================================================


@app.command()
def assess(
    title: Annotated[
        str,
        typer.Option(
            "--title",
            "-t",
            help="Change request title",
        ),
    ] = "",
    description: Annotated[
        str,
        typer.Option(
            "--description",
            "-d",
            help="Change request description",
        ),
    ] = "",
    description_file: Annotated[
        Path | None,
        typer.Option(
            "--description-file",
            help="Read the change request description from a file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    repo: Annotated[
        Path,
        typer.Option(
            "--repo",
            "-r",
            help="Repository path to assess",
            exists=True,
            file_okay=False,
        ),
    ] = Path("."),
    snapshot: Annotated[
        Path | None,
        typer.Option(
            "--snapshot",
            help="JSON repository snapshot to use instead of scanning --repo",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output file path (overrides config)",
        ),
    ] = None,
    format: Annotated[
        str | None,
        typer.Option(
            "--format",
            "-f",
            help="Output format: markdown, json",
        ),
    ] = None,
    sequence: Annotated[
        int,
        typer.Option(
            "--sequence",
            "-n",
            help="Report sequence number (report id EA-NNNN)",
            min=1,
        ),
    ] = 1,
    stdout: Annotated[
        bool,
        typer.Option(
            "--stdout",
            help="Print the report instead of writing a file",
        ),
    ] = False,
    preview: Annotated[
        bool,
        typer.Option(
            "--preview",
            help="Print a truncated Markdown preview after writing the report",
        ),
    ] = False,
    adr_dir: Annotated[
        Path | None,
        typer.Option(
            "--adr-dir",
            help="Also write the proposed decision record (ADR-NNN-slug.md) to this directory",
            file_okay=False,
        ),
    ] = None,
) -> None:
    """Assess a change request against a repository.

    Exit codes:
        0: Report generated
        1: Error (or degraded with ci.fail_on_degraded)
        2: Report generated with degraded stages
    """
    from sprint0.pipeline import AssessmentPipeline
    from sprint0.scanning import ScanError, collect_profiler_input
    from sprint0.templates import ReportRenderer

    config = _config or Sprint0Config()

    if description_file is not None:
        description = description_file.read_text(encoding="utf-8")
    change_request = ChangeRequest(title=title.strip(), description=description.strip())
    if not change_request.text:
        _logger.warning("Empty change request; the assessment will use defaults only")

    output_format = format or config.output.format
    if output_format not in VALID_FORMATS:
        _logger.error(f"Invalid format: {output_format}. Valid: {sorted(VALID_FORMATS)}")
        raise typer.Exit(1)
    output_path = output or Path(config.output.path)
    if output is None and output_format == "json" and output_path.suffix == ".md":
        output_path = output_path.with_suffix(".json")

    input_errors: list[AnalysisError] = []
    try:
        if snapshot is not None:
            _logger.info(f"Loading repository snapshot: {snapshot}")
            profiler_input, input_errors = _read_snapshot(snapshot)
        else:
            _logger.info(f"Scanning repository: {repo.resolve()}")
            profiler_input = collect_profiler_input(repo, config.scanning)
    except (ScanError, OSError, ValueError) as e:
        _logger.error(f"Could not read repository: {e}")
        raise typer.Exit(1)

    pipeline = AssessmentPipeline(config=config)
    report = pipeline.run(
        profiler_input, change_request, sequence=sequence, input_errors=input_errors
    )

    if report.errors:
        _logger.warning(f"Encountered {len(report.errors)} error(s)")
        for error in report.errors:
            _logger.warning(f"  [{error.component}] {error.message}")

    renderer = ReportRenderer(config=config)
    try:
        if stdout:
            typer.echo(renderer.render_as(report, output_format), nl=False)
        else:
            written = renderer.render_to_file(report, output_path, fmt=output_format)
            typer.echo(f"Report {report.report_id} written to: {written}")
            if preview:
                typer.echo(renderer.preview(report, max_lines=PREVIEW_LINES))
        if adr_dir is not None and report.decision_record is not None:
            adr_path = renderer.write_decision_record(report.decision_record, adr_dir)
            typer.echo(f"Decision record {report.decision_record.id} written to: {adr_path}")
    except (OSError, ValueError) as e:
        _logger.error(f"Rendering failed: {e}")
        raise typer.Exit(1)

    if any(not e.recoverable for e in report.errors):
        raise typer.Exit(1)
    if report.degraded:
        raise typer.Exit(1 if config.ci.fail_on_degraded else 2)
    raise typer.Exit(0)


# =============================================================================
# classify command
# =============================================================================


@app.command()
def classify(
    text: Annotated[
        str,
        typer.Argument(help="Change request text to classify"),
    ],
) -> None:
    """Classify change-request text and print the context as JSON."""
    from sprint0.pipeline import create_classifier

    classifier = create_classifier(_config or Sprint0Config())
    context = classifier.classify(text)
    typer.echo(json.dumps(context.to_dict(), indent=2))


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
) -> None:
    """Initialize Sprint0 configuration.

    Creates .sprint0/config.yaml with the default settings.
    """
    config_dir = Path(".sprint0")
    config_dir.mkdir(exist_ok=True)
    config_file = config_dir / "config.yaml"

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(create_default_config(), encoding="utf-8")
    _logger.info(f"Created config: {config_file}")

    typer.echo("Sprint0 configuration initialized")
    typer.echo(f"   Config: {config_file}")
    raise typer.Exit(0)


if __name__ == "__main__":
    app()

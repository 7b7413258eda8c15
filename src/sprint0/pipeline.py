"""Assessment pipeline orchestrator.

Runs the deterministic stages in order, each a function of the previous
stage's output:

1. Repository profiling      -> CurrentStateProfile
2. Change classification     -> ChangeContext
3. Impact analysis           -> list[ImpactItem]
4. Findings                  -> ArchitectureFindings
5. Recommendations           -> list[Recommendation]
6. Metrics                   -> MetricsResult
7. Report assembly           -> Report

A failing stage never aborts the run: the error is recorded, the stage's
output is replaced by an empty artifact and the report is marked degraded.
Malformed inputs are handled the same way: well-formed fields are kept and
each rejected field is recorded as an ``input`` error.
"""

import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar

from sprint0.analyzers import (
    Classifier,
    FindingsAnalyzer,
    ImpactAnalyzer,
    KeywordClassifier,
    MetricsSynthesizer,
    RecommendationGenerator,
    RepositoryProfiler,
)
from sprint0.config import Sprint0Config
from sprint0.llm import LLMClassifier, create_client
from sprint0.models import (
    AnalysisError,
    ArchitectureFindings,
    ChangeContext,
    ChangeRequest,
    CurrentStateProfile,
    MetricsResult,
    ProfilerInput,
    Report,
)
from sprint0.report import ReportAssembler, format_report_id
from sprint0.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def create_classifier(config: Sprint0Config | None = None) -> Classifier:
    """Build the configured change classifier.

    The LLM classifier is only used when selected and enabled; any setup
    problem falls back to the keyword classifier.
    """
    config = config or Sprint0Config()
    if config.classifier != "llm":
        return KeywordClassifier()

    if not config.llm.enabled:
        logger.warning("LLM classifier selected but llm.enabled is false; using keyword classifier")
        return KeywordClassifier()

    try:
        client = create_client(config.llm)
    except ValueError as e:
        logger.warning("LLM client setup failed, using keyword classifier: %s", e)
        return KeywordClassifier()

    logger.info("Using LLM classifier (%s)", config.llm.get_litellm_model_name())
    return LLMClassifier(client, fallback=KeywordClassifier())


class AssessmentPipeline:
    """Orchestrates the assessment stages for one change request.

    The pipeline holds no per-run state, so one instance can serve any number
    of sequential runs.
    """

    def __init__(
        self,
        config: Sprint0Config | None = None,
        classifier: Classifier | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Sprint0 configuration (uses defaults if None)
            classifier: Change classifier (built from config if None)
        """
        self.config = config or Sprint0Config()
        self.classifier = classifier or create_classifier(self.config)
        self.profiler = RepositoryProfiler()
        self.impact_analyzer = ImpactAnalyzer()
        self.findings_analyzer = FindingsAnalyzer()
        self.recommendation_generator = RecommendationGenerator(self.config.estimation)
        self.metrics_synthesizer = MetricsSynthesizer(self.config.estimation)
        self.assembler = ReportAssembler()

    def run(
        self,
        profiler_input: ProfilerInput | dict[str, Any],
        change_request: ChangeRequest | dict[str, Any] | str | None,
        sequence: int = 1,
        title: str | None = None,
        input_errors: list[AnalysisError] | None = None,
    ) -> Report:
        """Execute every stage and assemble the report.

        Args:
            profiler_input: Repository snapshot
            change_request: Change request, its dict form, or raw text
            sequence: Per-run report sequence number
            title: Report subject; defaults to the change-request title
            input_errors: Problems already found while reading the inputs

        Returns:
            Report (degraded when any stage failed or an input was malformed)
        """
        errors: list[AnalysisError] = list(input_errors or [])
        change_request, request_errors = coerce_change_request(change_request)
        errors.extend(request_errors)
        if not isinstance(profiler_input, ProfilerInput):
            profiler_input, profiler_errors = coerce_profiler_input(profiler_input)
            errors.extend(profiler_errors)

        text = change_request.text
        title = title or change_request.title or None

        logger.info("Starting assessment %s", format_report_id(max(sequence, 1)))

        profile = self._run_stage(
            "profiler",
            lambda: self.profiler.profile(profiler_input),
            CurrentStateProfile.empty,
            errors,
        )
        for fact in profile.degraded_facts:
            errors.append(
                AnalysisError(component="profiler", message=f"Could not determine {fact}; reported as unknown")
            )

        context = self._run_stage(
            "classifier",
            lambda: self.classifier.classify(text),
            lambda: ChangeContext.empty(text),
            errors,
        )
        impacts = self._run_stage(
            "impact",
            lambda: self.impact_analyzer.analyze(profile, context, profiler_input.files),
            list,
            errors,
        )
        findings = self._run_stage(
            "findings",
            lambda: self.findings_analyzer.analyze(profile, context, impacts),
            ArchitectureFindings,
            errors,
        )
        recommendations = self._run_stage(
            "recommendations",
            lambda: self.recommendation_generator.generate(
                context, profile, impacts, findings=findings, files=profiler_input.files
            ),
            list,
            errors,
        )
        metrics = self._run_stage(
            "metrics",
            lambda: self.metrics_synthesizer.synthesize(context, profile, impacts),
            MetricsResult,
            errors,
        )

        try:
            report = self.assembler.assemble(
                profile,
                context,
                impacts,
                findings,
                recommendations,
                metrics,
                errors=errors,
                sequence=sequence,
                title=title,
            )
        except Exception as e:
            logger.error("Report assembly failed: %s", e)
            errors.append(AnalysisError(component="assembler", message=str(e), recoverable=False))
            report = Report(
                report_id=format_report_id(max(sequence, 1)),
                title="EA Assessment",
                change_request=text,
                change_type=context.change_type.value,
                scope=context.scope.value,
                project_type=profile.project_type.value,
                sections=[self.assembler.build_error_section(errors)],
                errors=errors,
            )

        logger.structured(
            logging.INFO,
            f"Assessment {report.report_id} complete: {len(impacts)} impacts, "
            f"{len(recommendations)} recommendations, {len(report.errors)} errors",
            report_id=report.report_id,
            impacts=len(impacts),
            recommendations=len(recommendations),
            errors=len(report.errors),
            degraded=report.degraded,
        )
        return report

    def _run_stage(
        self,
        name: str,
        stage: Callable[[], T],
        empty: Callable[[], T],
        errors: list[AnalysisError],
    ) -> T:
        """Run one stage, substituting an empty artifact on failure.

        Each outcome is logged with structured ``stage``/``status`` fields so
        JSON log output can be filtered per stage.
        """
        logger.debug("Stage %s: starting", name)
        started = time.perf_counter()
        try:
            result = stage()
        except Exception as e:
            logger.structured(
                logging.ERROR,
                f"Stage {name} failed: {e}",
                stage=name,
                status="failed",
                error=str(e),
            )
            errors.append(AnalysisError(component=name, message=str(e)))
            return empty()

        logger.structured(
            logging.DEBUG,
            f"Stage {name}: done",
            stage=name,
            status="ok",
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return result


def coerce_profiler_input(data: Any) -> tuple[ProfilerInput, list[AnalysisError]]:
    """Build a ProfilerInput from its JSON shape, keeping well-formed fields.

    Every rejected field becomes an ``input`` error so the report is marked
    degraded instead of silently assessing an empty repository.
    """
    if isinstance(data, ProfilerInput):
        return data, []
    profiler_input, problems = ProfilerInput.parse(data)
    errors = [AnalysisError(component="input", message=problem) for problem in problems]
    for problem in problems:
        logger.warning("Invalid profiler input: %s", problem)
    return profiler_input, errors


def coerce_change_request(value: Any) -> tuple[ChangeRequest, list[AnalysisError]]:
    """Build a ChangeRequest from a model, ``{title, description}`` or raw text.

    Anything else (including None) is treated as empty text and recorded as an
    ``input`` error.
    """
    if isinstance(value, ChangeRequest):
        return value, []
    if isinstance(value, str):
        return ChangeRequest(description=value), []
    if isinstance(value, dict):
        return (
            ChangeRequest(
                title=str(value.get("title") or ""),
                description=str(value.get("description") or ""),
            ),
            [],
        )

    message = f"change request must be text or an object, got {type(value).__name__}"
    logger.warning("Invalid change request: %s", message)
    return ChangeRequest(), [AnalysisError(component="input", message=message)]


def analyze(
    profiler_input: ProfilerInput | dict[str, Any],
    change_request: ChangeRequest | dict[str, Any] | str | None,
    config: Sprint0Config | None = None,
    classifier: Classifier | None = None,
    sequence: int = 1,
    title: str | None = None,
) -> Report:
    """Assess a change request against a repository snapshot.

    Accepts the JSON-style input shapes (``{files, dependencies, rawContents}``
    and ``{title, description}``) as well as the model objects. Malformed
    fields are dropped and recorded as ``input`` errors.

    Args:
        profiler_input: Repository snapshot
        change_request: Change request, its dict form, or raw text
        config: Sprint0 configuration
        classifier: Classifier override
        sequence: Per-run report sequence number
        title: Report subject override

    Returns:
        Report; stage failures are recorded on it rather than raised
    """
    pipeline = AssessmentPipeline(config=config, classifier=classifier)
    return pipeline.run(profiler_input, change_request, sequence=sequence, title=title)

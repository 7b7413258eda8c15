"""Unit tests for the assessment pipeline."""

import io
import json
import logging
from collections.abc import Iterator

import litellm
import pytest

from sprint0.analyzers import Classifier, KeywordClassifier
from sprint0.config import Sprint0Config, load_config_from_dict
from sprint0.llm import LLMClassifier
from sprint0.models import ChangeContext, ChangeRequest, ChangeType, ProfilerInput
from sprint0.pipeline import AssessmentPipeline, analyze, create_classifier
from sprint0.report import PIPELINE_ERRORS_SECTION
from sprint0.utils.logging import ROOT_LOGGER, LogMode, setup_logging

EXPRESS_REQUEST = "Add authentication to the Express API"


class StaticClassifier(Classifier):
    """Classifier returning a fixed change type."""

    name = "static"

    def classify(self, text: str) -> ChangeContext:
        return ChangeContext(raw_text=text, change_type=ChangeType.MIGRATION)


def _boom(*args: object, **kwargs: object) -> None:
    raise RuntimeError("stage exploded")


@pytest.fixture
def pipeline() -> AssessmentPipeline:
    return AssessmentPipeline()


class TestCreateClassifier:
    """Tests for classifier selection."""

    @pytest.fixture(autouse=True)
    def _restore_litellm(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(litellm, "api_base", getattr(litellm, "api_base", None), raising=False)

    def test_default_is_keyword(self) -> None:
        assert isinstance(create_classifier(), KeywordClassifier)

    def test_llm_disabled_falls_back(self) -> None:
        config = load_config_from_dict({"classifier": "llm"})

        assert isinstance(create_classifier(config), KeywordClassifier)

    def test_llm_enabled(self) -> None:
        config = load_config_from_dict({"classifier": "llm", "llm": {"enabled": True}})

        classifier = create_classifier(config)

        assert isinstance(classifier, LLMClassifier)
        assert isinstance(classifier.fallback, KeywordClassifier)

    def test_client_setup_failure_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def refuse(config: object) -> None:
            raise ValueError("no client")

        monkeypatch.setattr("sprint0.pipeline.create_client", refuse)
        config = load_config_from_dict({"classifier": "llm", "llm": {"enabled": True}})

        assert isinstance(create_classifier(config), KeywordClassifier)


class TestAssessmentPipeline:
    """Tests for stage orchestration."""

    def test_run(self, pipeline: AssessmentPipeline, express_input: ProfilerInput) -> None:
        report = pipeline.run(express_input, EXPRESS_REQUEST)

        assert report.report_id == "EA-0001"
        assert report.change_type == "feature"
        assert report.project_type == "backend-api"
        assert not report.degraded
        assert len(report.sections) == 10

    def test_change_request_title_and_description(
        self, pipeline: AssessmentPipeline, express_input: ProfilerInput
    ) -> None:
        request = ChangeRequest(title="Add authentication", description="Protect the Express API")

        report = pipeline.run(express_input, request, sequence=3)

        assert report.report_id == "EA-0003"
        assert report.title == "EA Assessment: Add authentication"
        assert report.change_request == "Add authentication\nProtect the Express API"

    def test_injected_classifier(self, express_input: ProfilerInput) -> None:
        pipeline = AssessmentPipeline(classifier=StaticClassifier())

        report = pipeline.run(express_input, "Anything")

        assert report.change_type == "migration"

    def test_pipeline_is_reusable(
        self, pipeline: AssessmentPipeline, express_input: ProfilerInput
    ) -> None:
        first = pipeline.run(express_input, EXPRESS_REQUEST)
        second = pipeline.run(express_input, EXPRESS_REQUEST)

        assert first.to_dict(include_timestamp=False) == second.to_dict(include_timestamp=False)

    def test_uses_configured_estimation(self, express_input: ProfilerInput) -> None:
        config = load_config_from_dict({"estimation": {"weekly_rate": 5000}})

        report = AssessmentPipeline(config=config).run(express_input, EXPRESS_REQUEST)

        summary = report.section("executive-summary")
        assert summary is not None
        assert ["Estimated cost", "$40,000"] in summary.blocks[0].items


class TestStageFailures:
    """Tests for degradation when a stage raises."""

    def test_impact_failure(
        self,
        pipeline: AssessmentPipeline,
        express_input: ProfilerInput,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(pipeline.impact_analyzer, "analyze", _boom)

        report = pipeline.run(express_input, EXPRESS_REQUEST)

        assert report.degraded
        assert [(e.component, e.message) for e in report.errors] == [("impact", "stage exploded")]
        assert report.section_ids[-1] == PIPELINE_ERRORS_SECTION
        data = report.section("data-integration")
        assert data is not None
        assert data.blocks[0].body == "No impacted components identified."
        recommendations = report.section("recommendations")
        assert recommendations is not None
        assert recommendations.blocks[0].body != "No recommendations generated."

    def test_profiler_failure(
        self,
        pipeline: AssessmentPipeline,
        express_input: ProfilerInput,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(pipeline.profiler, "profile", _boom)

        report = pipeline.run(express_input, EXPRESS_REQUEST)

        assert [e.component for e in report.errors] == ["profiler", "profiler"]
        assert report.errors[1].message == "Could not determine profile; reported as unknown"
        assert report.project_type == "general"

    def test_degraded_profiler_fact(
        self,
        pipeline: AssessmentPipeline,
        express_input: ProfilerInput,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(pipeline.profiler, "detect_apis", _boom)

        report = pipeline.run(express_input, EXPRESS_REQUEST)

        assert [e.message for e in report.errors] == [
            "Could not determine apis; reported as unknown"
        ]

    def test_classifier_failure(self, express_input: ProfilerInput, monkeypatch: pytest.MonkeyPatch) -> None:
        classifier = StaticClassifier()
        monkeypatch.setattr(classifier, "classify", _boom)

        report = AssessmentPipeline(classifier=classifier).run(express_input, EXPRESS_REQUEST)

        assert report.errors[0].component == "classifier"
        assert report.change_type == "enhancement"
        assert report.change_request == EXPRESS_REQUEST

    def test_assembly_failure(
        self,
        pipeline: AssessmentPipeline,
        express_input: ProfilerInput,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(pipeline.assembler, "assemble", _boom)

        report = pipeline.run(express_input, EXPRESS_REQUEST)

        assert report.section_ids == [PIPELINE_ERRORS_SECTION]
        assert report.errors[-1].component == "assembler"
        assert report.errors[-1].recoverable is False
        assert report.change_type == "feature"


class TestAnalyze:
    """Tests for the analyze entry point."""

    def test_dict_inputs(self) -> None:
        report = analyze(
            {
                "files": ["package.json", "server/routes/auth.js"],
                "dependencies": {"express": "^4.18.2", "jsonwebtoken": "^9.0.0"},
                "rawContents": {"server/routes/auth.js": "router.post('/login', handler)"},
            },
            {"title": "Add authentication", "description": "to the Express API"},
        )

        assert report.title == "EA Assessment: Add authentication"
        assert report.project_type == "backend-api"
        assert not report.degraded

    def test_invalid_profiler_dict(self) -> None:
        report = analyze({"dependencies": ["express"]}, EXPRESS_REQUEST)

        assert report.section_ids[:1] == ["executive-summary"]
        assert report.project_type == "general"
        assert report.degraded
        assert report.section_ids[-1] == PIPELINE_ERRORS_SECTION
        assert [(e.component, e.message) for e in report.errors] == [
            ("input", "dependencies must be an object, got list")
        ]

    def test_malformed_field_keeps_valid_fields(self) -> None:
        report = analyze(
            {"dependencies": ["express"], "files": ["server/routes/auth.js"]}, EXPRESS_REQUEST
        )

        discovery = report.section("solution-discovery")
        assert discovery is not None
        assert ["Files", "1"] in discovery.blocks[0].items
        assert [e.component for e in report.errors] == ["input"]

    def test_string_files_rejected(self) -> None:
        report = analyze({"files": "server/app.js"}, EXPRESS_REQUEST)

        discovery = report.section("solution-discovery")
        assert discovery is not None
        assert ["Files", "0"] in discovery.blocks[0].items
        assert report.errors[0].message == "files must be a list of paths, got str"

    def test_non_object_profiler_input(self) -> None:
        report = analyze(["app.py"], EXPRESS_REQUEST)  # type: ignore[arg-type]

        assert report.errors[0].component == "input"
        assert report.project_type == "general"

    @pytest.mark.parametrize("change_request", [None, 42, ["Add auth"]])
    def test_unusable_change_request_is_empty_text(self, change_request: object) -> None:
        report = analyze({"files": []}, change_request)  # type: ignore[arg-type]

        assert report.change_request == ""
        assert report.change_type == "enhancement"
        assert report.degraded
        assert report.errors[0].component == "input"
        assert report.section_ids[-1] == PIPELINE_ERRORS_SECTION

    def test_well_formed_inputs_record_no_errors(self, express_input: ProfilerInput) -> None:
        report = analyze(express_input.to_dict(), {"title": "Add authentication"})

        assert report.errors == []

    def test_config_and_sequence(self, express_input: ProfilerInput) -> None:
        report = analyze(express_input, EXPRESS_REQUEST, config=Sprint0Config(), sequence=12)

        assert report.report_id == "EA-0012"


class TestStageLogging:
    """Tests for per-stage structured log output."""

    @pytest.fixture
    def json_log(self) -> Iterator[io.StringIO]:
        logger = logging.getLogger(ROOT_LOGGER)
        handlers = list(logger.handlers)
        level = logger.level
        stream = io.StringIO()
        setup_logging(mode=LogMode.JSON, level=logging.DEBUG, stream=stream)
        yield stream
        logger.handlers[:] = handlers
        logger.setLevel(level)

    @staticmethod
    def _entries(stream: io.StringIO) -> list[dict]:
        return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]

    def test_each_stage_logs_status(
        self,
        pipeline: AssessmentPipeline,
        express_input: ProfilerInput,
        json_log: io.StringIO,
    ) -> None:
        pipeline.run(express_input, EXPRESS_REQUEST)

        stages = [(e["stage"], e["status"]) for e in self._entries(json_log) if "stage" in e]
        assert stages == [
            ("profiler", "ok"),
            ("classifier", "ok"),
            ("impact", "ok"),
            ("findings", "ok"),
            ("recommendations", "ok"),
            ("metrics", "ok"),
        ]
        summary = [e for e in self._entries(json_log) if "report_id" in e]
        assert summary[-1]["report_id"] == "EA-0001"
        assert summary[-1]["degraded"] is False

    def test_failed_stage_logs_error(
        self,
        pipeline: AssessmentPipeline,
        express_input: ProfilerInput,
        json_log: io.StringIO,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(pipeline.impact_analyzer, "analyze", _boom)

        pipeline.run(express_input, EXPRESS_REQUEST)

        failed = [e for e in self._entries(json_log) if e.get("status") == "failed"]
        assert failed == [
            {
                "level": "ERROR",
                "ts": failed[0]["ts"],
                "logger": "sprint0.pipeline",
                "msg": "Stage impact failed: stage exploded",
                "stage": "impact",
                "status": "failed",
                "error": "stage exploded",
            }
        ]

"""Unit tests for recommendation generation and ranking."""

from typing import Any

import pytest

from sprint0.analyzers import (
    FindingsAnalyzer,
    ImpactAnalyzer,
    KeywordClassifier,
    RecommendationGenerator,
    RepositoryProfiler,
)
from sprint0.analyzers.recommendations import GENERIC_STEPS, TOP_N, stage_of
from sprint0.config import EstimationConfig
from sprint0.models import (
    Category,
    CurrentStateProfile,
    EffortSize,
    ProfilerInput,
    Recommendation,
    RiskLevel,
)


def _recommend(profiler_input: ProfilerInput, text: str) -> list[Recommendation]:
    profile = RepositoryProfiler().profile(profiler_input)
    context = KeywordClassifier().classify(text)
    impacts = ImpactAnalyzer().analyze(profile, context, profiler_input.files)
    findings = FindingsAnalyzer().analyze(profile, context, impacts)
    return RecommendationGenerator().generate(
        context, profile, impacts, findings=findings, files=profiler_input.files
    )


@pytest.fixture
def qdrant_recommendations(vector_input: ProfilerInput) -> list[Recommendation]:
    return _recommend(vector_input, "Migrate our embeddings store to Qdrant")


@pytest.fixture
def mature_migration_recommendations() -> list[Recommendation]:
    """Vector-store migration on a repository with tests, docs, CI and monitoring."""
    profiler_input = ProfilerInput(
        files=[
            "README.md",
            ".github/workflows/ci.yml",
            "tests/test_store.py",
            "src/vector/store.py",
        ],
        dependencies={"chromadb": "0.4.22", "sentry-sdk": "1.40", "vault-client": "1.0"},
    )
    return _recommend(profiler_input, "Migrate our embeddings store to Qdrant")


class TestRanking:
    """Tests for priority ordering and ids."""

    def test_express_ranking(self, express_artifacts: dict[str, Any]) -> None:
        recommendations = express_artifacts["recommendations"]

        assert [(r.id, r.title, r.priority) for r in recommendations] == [
            ("sec-1", "Implement Secret Management", 25),
            ("dx-1", "Set Up Continuous Integration Pipeline", 22),
            ("perf-1", "Implement Caching Strategy", 20),
            ("ops-1", "Implement Observability Stack", 16),
            ("dx-2", "Run Auth Service Proof of Concept", 14),
        ]

    def test_priority_non_increasing(self, qdrant_recommendations: list[Recommendation]) -> None:
        priorities = [r.priority for r in qdrant_recommendations]

        assert priorities == sorted(priorities, reverse=True)

    def test_ties_keep_category_order(self, qdrant_recommendations: list[Recommendation]) -> None:
        titles = [r.title for r in qdrant_recommendations]

        # Both score 25: Architecture ranks ahead of Security
        assert titles[:2] == [
            "Implement Vector Database Abstraction Layer",
            "Implement Secret Management",
        ]

    def test_ids_unique_and_prefixed(self, qdrant_recommendations: list[Recommendation]) -> None:
        ids = [r.id for r in qdrant_recommendations]

        assert len(ids) == len(set(ids))
        for recommendation in qdrant_recommendations:
            assert recommendation.id.startswith(recommendation.category.id_prefix + "-")

    def test_priority_uses_configured_penalty(self) -> None:
        estimation = EstimationConfig()
        estimation.effort_penalty = {"S": 10, "M": 0, "L": 0, "XL": 0}
        generator = RecommendationGenerator(estimation)
        recommendation = Recommendation(
            id="",
            category=Category.COST,
            title="t",
            why="w",
            how="h",
            effort=EffortSize.S,
            risk=RiskLevel.LOW,
            impact=2,
            confidence=3,
        )

        assert generator.priority(recommendation) == 16

    @pytest.mark.parametrize("effort", list(EffortSize))
    @pytest.mark.parametrize(
        ("lower", "higher"),
        [((1, 1), (1, 2)), ((2, 3), (4, 2)), ((3, 3), (5, 2)), ((4, 4), (5, 5))],
    )
    def test_higher_impact_confidence_ranks_higher_at_equal_effort(
        self, effort: EffortSize, lower: tuple[int, int], higher: tuple[int, int]
    ) -> None:
        generator = RecommendationGenerator()

        def build(impact: int, confidence: int) -> Recommendation:
            return Recommendation(
                id="",
                category=Category.ARCHITECTURE,
                title="t",
                why="w",
                how="h",
                effort=effort,
                risk=RiskLevel.MEDIUM,
                impact=impact,
                confidence=confidence,
            )

        assert generator.priority(build(*higher)) > generator.priority(build(*lower))

    def test_generated_priorities_monotonic_per_effort(
        self,
        qdrant_recommendations: list[Recommendation],
        express_artifacts: dict[str, Any],
    ) -> None:
        recommendations = qdrant_recommendations + express_artifacts["recommendations"]

        for a in recommendations:
            for b in recommendations:
                if a.effort == b.effort and a.impact * a.confidence > b.impact * b.confidence:
                    assert a.priority > b.priority, (a.title, b.title)


class TestRules:
    """Tests for individual rule families."""

    def test_no_centralized_auth_when_jwt_present(self, express_artifacts: dict[str, Any]) -> None:
        titles = [r.title for r in express_artifacts["recommendations"]]

        assert "Introduce Centralized Authentication" not in titles

    def test_centralized_auth_when_unknown(self) -> None:
        context = KeywordClassifier().classify("Add authentication to the API")

        recommendations = RecommendationGenerator().generate(context, CurrentStateProfile(), [])

        assert "Introduce Centralized Authentication" in [r.title for r in recommendations]

    def test_abstraction_layer_cites_direct_evidence(
        self, qdrant_recommendations: list[Recommendation]
    ) -> None:
        abstraction = qdrant_recommendations[0]

        assert abstraction.category == Category.ARCHITECTURE
        assert abstraction.evidence
        assert len(abstraction.evidence) <= 5
        assert all(e.file.startswith("src/vector/") for e in abstraction.evidence)

    def test_migration_rules_present(self, qdrant_recommendations: list[Recommendation]) -> None:
        titles = [r.title for r in qdrant_recommendations]

        assert "Create Data Migration Strategy" in titles
        assert "Post-Migration Performance Optimization" in titles
        assert "Define Rollback and Dual-Running Procedures" in titles
        assert "Run Qdrant Proof of Concept" in titles

    def test_empty_context_still_recommends_from_profile(self) -> None:
        recommendations = RecommendationGenerator().generate(
            KeywordClassifier().classify(""), CurrentStateProfile(), []
        )

        titles = [r.title for r in recommendations]
        assert "Implement Comprehensive Testing Framework" in titles
        assert "Implement Caching Strategy" not in titles


class TestEnrichment:
    """Tests for steps, criteria and dependency links."""

    def test_top_recommendations_enriched(self, express_artifacts: dict[str, Any]) -> None:
        top = express_artifacts["recommendations"][0]

        assert top.implementation_steps == GENERIC_STEPS
        assert top.acceptance_criteria[0] == (
            "Implement Secret Management is delivered and reviewed by Security Team, DevOps Team"
        )

    def test_only_top_n_enriched(self, qdrant_recommendations: list[Recommendation]) -> None:
        assert len(qdrant_recommendations) > TOP_N
        for recommendation in qdrant_recommendations[TOP_N:]:
            assert recommendation.implementation_steps == []
            assert recommendation.acceptance_criteria == []
            assert recommendation.dependencies == []

    def test_migration_depends_on_abstraction(
        self, mature_migration_recommendations: list[Recommendation]
    ) -> None:
        by_title = {r.title: r for r in mature_migration_recommendations}

        abstraction = by_title["Implement Vector Database Abstraction Layer"]
        migration = by_title["Create Data Migration Strategy"]
        assert migration.dependencies == [abstraction.id]
        assert abstraction.dependencies == []
        assert migration.implementation_steps[0].startswith("Profile data volumes")

    def test_no_dangling_dependencies(
        self,
        qdrant_recommendations: list[Recommendation],
        mature_migration_recommendations: list[Recommendation],
    ) -> None:
        for recommendations in (qdrant_recommendations, mature_migration_recommendations):
            ids = {r.id for r in recommendations}
            for recommendation in recommendations:
                assert set(recommendation.dependencies) <= ids
                assert recommendation.id not in recommendation.dependencies


class TestStages:
    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Implement Data Store Abstraction Layer", 1),
            ("Create Data Migration Strategy", 2),
            ("Post-Migration Performance Optimization", 3),
            ("Implement Secret Management", 0),
        ],
    )
    def test_stage_of(self, title: str, expected: int) -> None:
        assert stage_of(title) == expected


class TestRecommendationModel:
    def test_scale_validation(self) -> None:
        with pytest.raises(ValueError, match="impact must be between 1 and 5"):
            Recommendation(
                id="x",
                category=Category.COST,
                title="t",
                why="w",
                how="h",
                effort=EffortSize.S,
                risk=RiskLevel.LOW,
                impact=6,
                confidence=3,
            )

"""Sprint0 analyzers - deterministic pipeline stages.

Every analyzer is a pure function of its inputs; no network or filesystem
access happens here.

Analyzers:
- Repository Profiler: repository snapshot -> CurrentStateProfile
- Classifier: change-request text -> ChangeContext (pluggable)
- Impact Analyzer: profile + context -> ordered ImpactItems
- Findings Analyzer: gaps, compliance, risks, debt and scalability
- Recommendation Generator: ranked, evidence-linked recommendations
- Metrics Synthesizer: complexity, timeline, cost and business metrics
"""

from sprint0.analyzers.classifier import Classifier, KeywordClassifier
from sprint0.analyzers.findings import FindingsAnalyzer
from sprint0.analyzers.impact import ImpactAnalyzer
from sprint0.analyzers.metrics import MetricsSynthesizer
from sprint0.analyzers.profiler import RepositoryProfiler
from sprint0.analyzers.recommendations import RecommendationGenerator

__all__ = [
    "Classifier",
    "FindingsAnalyzer",
    "ImpactAnalyzer",
    "KeywordClassifier",
    "MetricsSynthesizer",
    "RecommendationGenerator",
    "RepositoryProfiler",
]

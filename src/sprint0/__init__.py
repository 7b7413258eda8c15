"""Sprint 0 - Change-Impact Assessment Engine.

Turns a repository snapshot and a free-text change request into an
Enterprise Architecture Sprint 0 assessment: current-state profile,
evidence-linked impact items, prioritized recommendations, business
metrics and a multi-section report with Mermaid diagrams.

Core principles:
- Deterministic: identical inputs produce identical reports (timestamp aside)
- Evidence-linked: every impact and recommendation cites repository files
- Degrade, never fail: stage errors become explicit report markers
"""

__version__ = "0.1.0"
__author__ = "Sprint0 Contributors"

from sprint0.pipeline import AssessmentPipeline, analyze

__all__ = ["AssessmentPipeline", "analyze", "__version__"]

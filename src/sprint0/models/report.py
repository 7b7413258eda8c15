"""Report entities.

This module contains the output tree of an assessment:
- AnalysisError: Non-fatal error recorded when a stage degrades
- ContentBlock: One typed piece of section content (text, list, table, ...)
- ReportSection: A canonical section bound to one upstream artifact
- Report: The JSON-serializable assessment report (plus its proposed ADR)
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sprint0.models.decision import DecisionRecord


class SectionSource(Enum):
    """Upstream artifact a section is built from."""

    PROFILE = "profile"
    IMPACTS = "impacts"
    FINDINGS = "findings"
    RECOMMENDATIONS = "recommendations"
    METRICS = "metrics"
    PIPELINE = "pipeline"


class BlockType(Enum):
    """Kind of content block."""

    TEXT = "text"
    LIST = "list"
    KEY_VALUE = "key_value"
    TABLE = "table"
    DIAGRAM = "diagram"


@dataclass
class AnalysisError:
    """Non-fatal error encountered while assessing.

    Attributes:
        component: Stage or component that failed (profiler, classifier, ...)
        message: Error description
        file_path: File that caused the error (if applicable)
        recoverable: Whether the assessment continued after this error
    """

    component: str
    message: str
    file_path: str | None = None
    recoverable: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "component": self.component,
            "message": self.message,
            "file_path": self.file_path,
            "recoverable": self.recoverable,
        }


@dataclass
class ContentBlock:
    """A typed piece of section content.

    Attributes:
        type: Block type
        title: Optional block heading
        body: Text body (text blocks) or diagram source (diagram blocks)
        items: List entries, or [key, value] pairs for key-value blocks
        columns: Table column headers
        rows: Table rows (arrays of cell strings)
        diagram_kind: Mermaid diagram kind (flowchart, sequence, er, gantt)
    """

    type: BlockType
    title: str = ""
    body: str = ""
    items: list[Any] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    diagram_kind: str = ""

    @classmethod
    def text(cls, body: str, title: str = "") -> "ContentBlock":
        """Create a text block."""
        return cls(type=BlockType.TEXT, title=title, body=body)

    @classmethod
    def bullets(cls, items: list[str], title: str = "") -> "ContentBlock":
        """Create a list block."""
        return cls(type=BlockType.LIST, title=title, items=list(items))

    @classmethod
    def key_values(cls, pairs: list[tuple[str, Any]], title: str = "") -> "ContentBlock":
        """Create a key-value block."""
        return cls(
            type=BlockType.KEY_VALUE,
            title=title,
            items=[[str(key), str(value)] for key, value in pairs],
        )

    @classmethod
    def table(
        cls, columns: list[str], rows: list[list[Any]], title: str = ""
    ) -> "ContentBlock":
        """Create a table block (cells are stringified)."""
        return cls(
            type=BlockType.TABLE,
            title=title,
            columns=list(columns),
            rows=[[str(cell) for cell in row] for row in rows],
        )

    @classmethod
    def diagram(cls, kind: str, source: str, title: str = "") -> "ContentBlock":
        """Create a Mermaid diagram block."""
        return cls(type=BlockType.DIAGRAM, title=title, body=source, diagram_kind=kind)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization (only populated fields)."""
        data: dict[str, Any] = {"type": self.type.value}
        if self.title:
            data["title"] = self.title
        if self.type in (BlockType.TEXT, BlockType.DIAGRAM):
            data["body"] = self.body
        if self.type == BlockType.DIAGRAM:
            data["diagram_kind"] = self.diagram_kind
        if self.type in (BlockType.LIST, BlockType.KEY_VALUE):
            data["items"] = list(self.items)
        if self.type == BlockType.TABLE:
            data["columns"] = list(self.columns)
            data["rows"] = [list(row) for row in self.rows]
        return data


@dataclass
class ReportSection:
    """A canonical report section.

    Attributes:
        id: Stable section id (e.g., "executive-summary")
        title: Display title
        source: Upstream artifact the section interpolates
        blocks: Content blocks in display order
        error: Set when the section builder failed
    """

    id: str
    title: str
    source: SectionSource
    blocks: list[ContentBlock] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "source": self.source.value,
            "blocks": [block.to_dict() for block in self.blocks],
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class Report:
    """Assessment report.

    ``generated_at`` is the only time-dependent field; ``to_dict`` can omit it
    so identical inputs serialize identically.
    """

    report_id: str
    title: str
    change_request: str
    change_type: str
    scope: str
    project_type: str
    sections: list[ReportSection] = field(default_factory=list)
    errors: list[AnalysisError] = field(default_factory=list)
    decision_record: DecisionRecord | None = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def degraded(self) -> bool:
        """Whether any stage degraded while producing the report."""
        return bool(self.errors)

    def section(self, section_id: str) -> ReportSection | None:
        """Look up a section by id."""
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    @property
    def section_ids(self) -> list[str]:
        """Section ids in report order."""
        return [section.id for section in self.sections]

    def to_dict(self, include_timestamp: bool = True) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "report_id": self.report_id,
            "title": self.title,
            "change_request": self.change_request,
            "change_type": self.change_type,
            "scope": self.scope,
            "project_type": self.project_type,
            "sections": [section.to_dict() for section in self.sections],
            "errors": [error.to_dict() for error in self.errors],
        }
        if self.decision_record is not None:
            data["decision_record"] = self.decision_record.to_dict()
        if include_timestamp:
            data["generated_at"] = self.generated_at.isoformat()
        return data

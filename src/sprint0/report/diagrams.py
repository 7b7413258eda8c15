"""Mermaid diagram generation for assessment reports.

Diagrams interpolate component and entity names into fixed graph templates:
- Flowcharts: current architecture, impact propagation, recommendation dependencies
- Sequence: request path through impacted components
- ER: data entities and their references
- Gantt: delivery phases
"""

import logging

logger = logging.getLogger(__name__)

# Maximum nodes before the flowchart is truncated
MAX_FLOWCHART_NODES = 30

# Anchor date for relative gantt schedules
GANTT_START = "2025-01-06"


class MermaidGenerator:
    """Generates Mermaid diagram sources from plain names and edges."""

    # Node shapes by role
    NODE_SHAPES = {
        "ui": '(["{name}"])',  # Stadium for user-facing layers
        "api": '{{"{name}"}}',  # Hexagon for API layers
        "database": '[("{name}")]',  # Cylinder for data stores
        "pipeline": '[["{name}"]]',  # Subroutine for build/test tooling
        "default": '["{name}"]',  # Default rectangle
    }

    def flowchart(
        self,
        nodes: list[str],
        edges: list[tuple[str, str]],
        title: str = "",
        direction: str = "TD",
        roles: dict[str, str] | None = None,
    ) -> str:
        """Generate a flowchart.

        Args:
            nodes: Node labels in display order
            edges: (source, target) label pairs
            title: Diagram title (emitted as a comment)
            direction: Flow direction (TD, LR, ...)
            roles: Optional node label -> NODE_SHAPES key

        Returns:
            Mermaid flowchart source
        """
        valid_nodes = list(dict.fromkeys(n for n in nodes if n and n.strip()))
        if not valid_nodes:
            return f"flowchart {direction}\n    empty[No components detected]"

        if len(valid_nodes) > MAX_FLOWCHART_NODES:
            logger.debug("Truncating flowchart from %d to %d nodes", len(valid_nodes), MAX_FLOWCHART_NODES)
            valid_nodes = valid_nodes[:MAX_FLOWCHART_NODES]

        roles = roles or {}
        lines = [f"flowchart {direction}"]
        if title:
            lines.append(f"    %% {title}")

        node_ids = {node: self._sanitize_node_id(node, i) for i, node in enumerate(valid_nodes)}
        for node in valid_nodes:
            shape = self.NODE_SHAPES.get(roles.get(node, "default"), self.NODE_SHAPES["default"])
            lines.append(f"    {node_ids[node]}{shape.format(name=self._escape_label(node))}")

        for source, target in edges:
            if source not in node_ids or target not in node_ids:
                continue
            lines.append(f"    {node_ids[source]} --> {node_ids[target]}")

        return "\n".join(lines)

    def sequence(self, participants: list[str], title: str = "", actor: str = "User") -> str:
        """Generate a request/response sequence through participants in order."""
        valid = list(dict.fromkeys(p for p in participants if p and p.strip()))
        lines = ["sequenceDiagram"]
        if title:
            lines.append(f"    title {self._escape_label(title)}")

        ids = {name: self._sanitize_node_id(name, i) for i, name in enumerate(valid)}
        lines.append(f"    actor {actor}")
        for name in valid:
            lines.append(f"    participant {ids[name]} as {self._escape_label(name)}")

        chain = [actor] + [ids[name] for name in valid]
        for caller, callee in zip(chain, chain[1:]):
            lines.append(f"    {caller}->>{callee}: request")
        for caller, callee in reversed(list(zip(chain, chain[1:]))):
            lines.append(f"    {callee}-->>{caller}: response")

        return "\n".join(lines)

    def er_diagram(
        self,
        entities: list[str],
        relationships: list[tuple[str, str]],
    ) -> str:
        """Generate an ER diagram; relationships are (referencing, referenced) pairs."""
        lines = ["erDiagram"]
        names = {entity: self._entity_name(entity) for entity in entities if entity}

        if not names:
            lines.append("    NO_ENTITIES {")
            lines.append('        string note "No data entities detected"')
            lines.append("    }")
            return "\n".join(lines)

        related: set[str] = set()
        for source, target in relationships:
            if source in names and target in names:
                lines.append(f'    {names[target]} ||--o{{ {names[source]} : "referenced by"')
                related.update((source, target))

        for entity, name in names.items():
            if entity not in related:
                lines.append(f"    {name} {{")
                lines.append("        string id")
                lines.append("    }")

        return "\n".join(lines)

    def gantt(self, phases: list[tuple[str, int]], title: str = "Implementation Timeline") -> str:
        """Generate a gantt chart of consecutive phases measured in weeks."""
        lines = [
            "gantt",
            f"    title {self._escape_label(title)}",
            "    dateFormat YYYY-MM-DD",
            "    axisFormat %b %d",
        ]
        previous = None
        for index, (name, weeks) in enumerate(phases):
            task_id = f"p{index + 1}"
            start = GANTT_START if previous is None else f"after {previous}"
            lines.append(f"    section {self._escape_label(name)}")
            lines.append(f"    {self._escape_label(name)} :{task_id}, {start}, {max(weeks, 1) * 7}d")
            previous = task_id
        return "\n".join(lines)

    def _sanitize_node_id(self, node: str, index: int) -> str:
        """Create a valid, unique Mermaid node ID from a label.

        Args:
            node: Node label
            index: Unique index for disambiguation

        Returns:
            Valid Mermaid node ID
        """
        sanitized = "".join(ch if ch.isalnum() else "_" for ch in node.strip())
        if not sanitized or not sanitized[0].isalpha():
            sanitized = f"n{sanitized}"
        return f"{sanitized}_{index}"

    def _escape_label(self, label: str) -> str:
        """Escape characters that break Mermaid labels."""
        return label.replace('"', "'").replace("[", "(").replace("]", ")").replace(":", " -")

    def _entity_name(self, entity: str) -> str:
        return "".join(ch if ch.isalnum() else "_" for ch in entity).upper() or "ENTITY"

"""DiagramService — request-facing entry points over the live snapshot.

Every call reads `holder.current` once and renders from that snapshot, so a
concurrent reload never changes a diagram halfway through.

  - list_cases: ordered (name, text) pairs
  - render_sequence / render_components: None means "not found" / "empty"
  - render_use_cases / render_all: overview diagrams
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..graph import ElementGraph, SnapshotHolder
from .behavioral import generate_sequence_diagram, generate_usecase_diagram
from .structural import generate_component_diagram
from .views import build_component_view, build_sequence_view

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaseSummary:
    name: str
    text: Optional[str] = None


class DiagramService:
    """Renders PlantUML text for cases and components."""

    def __init__(self, holder: SnapshotHolder, package: Optional[str] = None):
        """Initialize DiagramService.

        Args:
            holder: SnapshotHolder with the current ElementGraph
            package: Optional package name grouping the use case diagram
        """
        self._holder = holder
        self._package = package

    @property
    def graph(self) -> ElementGraph:
        return self._holder.current

    def list_cases(self) -> List[CaseSummary]:
        return [CaseSummary(case.name, case.text) for case in self.graph.cases]

    def render_sequence(self, case_name: Optional[str], scale: Optional[float] = None) -> Optional[str]:
        """Sequence diagram for one case, or None when the case is unknown."""
        view = build_sequence_view(self.graph, case_name, scale)
        if view is None:
            return None
        return generate_sequence_diagram(view)

    def render_components(
        self,
        case_name: Optional[str] = None,
        scale: Optional[float] = None,
    ) -> Optional[str]:
        """Component diagram for one case or the whole system.

        Returns None when no case is in scope.
        """
        view = build_component_view(self.graph, case_name, scale)
        if view is None:
            return None
        return generate_component_diagram(view)

    def render_use_cases(self) -> str:
        return generate_usecase_diagram(self.graph.cases, self._package)

    def render_all(self) -> str:
        """Use case overview, whole-system components, then one sequence per case.

        Diagrams are separated by a blank line.
        """
        graph = self.graph
        diagrams = [generate_usecase_diagram(graph.cases, self._package)]

        components = build_component_view(graph)
        if components is not None:
            diagrams.append(generate_component_diagram(components))

        for case in graph.cases:
            view = build_sequence_view(graph, case.name)
            if view is not None:
                diagrams.append(generate_sequence_diagram(view))

        logger.debug("Rendered %d diagrams for %d cases", len(diagrams), len(graph.cases))
        return "\n\n".join(diagrams)

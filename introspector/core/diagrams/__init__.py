"""PlantUML generation from the annotation graph.

  Sequence diagrams: one per case, messages in case order
  Component diagrams: per case, or the whole system
  Use case diagram: every case with its description

Public API:
  DiagramService — renders from the live snapshot held by a SnapshotHolder
"""

from .service import CaseSummary, DiagramService

__all__ = ["CaseSummary", "DiagramService"]

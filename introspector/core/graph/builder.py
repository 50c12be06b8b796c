"""GraphBuilder — turns annotation records into an ElementGraph.

Records are added in parse order; `build()` runs the resolver passes and
deduplication once and freezes the result.
"""

import logging
from typing import Iterable, List, Optional

from ..annotations.models import (
    AnnotationRecord,
    CallRecord,
    CaseRecord,
    CaseReference,
    ComponentRecord,
    NoteRecord,
    Reference,
)
from .dedup import deduplicate
from .graph import ElementGraph
from .models import Call, Case, Component, Element, Note
from .resolver import (
    clean_dependencies,
    create_missing_dependencies,
    drop_unbound_relations,
    match_referenced_dependencies,
)

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Collects elements and resolves them into an immutable snapshot."""

    def __init__(self):
        self._elements: List[Element] = []
        self._skipped = 0

    def add_case(
        self,
        name: Optional[str],
        text: Optional[str] = None,
        key: Optional[str] = None,
    ) -> Optional[Case]:
        case = Case.create(name, text, key=key)
        return self._append(case, "case", name or key)

    def add_component(
        self,
        key: Optional[str],
        name: Optional[str],
        type: Optional[str] = None,
        text: Optional[str] = None,
        scale: Optional[float] = None,
    ) -> Optional[Component]:
        component = Component.create(key, name, type, text, scale)
        return self._append(component, "component", name or key)

    def add_call(
        self,
        cases: Iterable[CaseReference],
        from_refs: Iterable[Reference],
        to_refs: Iterable[Reference],
        text: Optional[str] = None,
    ) -> Optional[Call]:
        call = Call.create(cases, from_refs, to_refs, text)
        return self._append(call, "call", text)

    def add_note(
        self,
        cases: Iterable[CaseReference],
        over_refs: Iterable[Reference],
        text: Optional[str] = None,
    ) -> Optional[Note]:
        note = Note.create(cases, over_refs, text)
        return self._append(note, "note", text)

    def add_record(self, record: AnnotationRecord) -> Optional[Element]:
        """Dispatch one extractor record to the matching add_* method."""
        match record:
            case CaseRecord():
                return self.add_case(record.name, record.text, key=record.key)
            case ComponentRecord():
                return self.add_component(
                    record.key, record.name, record.type, record.text, record.scale,
                )
            case CallRecord():
                return self.add_call(record.cases, record.from_refs, record.to_refs, record.text)
            case NoteRecord():
                return self.add_note(record.cases, record.over_refs, record.text)
            case _:
                raise TypeError(f"Not an annotation record: {type(record).__name__}")

    def add_records(self, records: Iterable[AnnotationRecord]) -> "GraphBuilder":
        for record in records:
            self.add_record(record)
        return self

    def build(self) -> ElementGraph:
        """Resolve references, synthesize missing entities, deduplicate."""
        elements = list(self._elements)

        match_referenced_dependencies(elements)
        unbound = drop_unbound_relations(elements)
        created_cases, created_components = create_missing_dependencies(elements)
        clean_dependencies(elements)
        elements = deduplicate(elements)

        graph = ElementGraph.from_elements(elements)
        stats = graph.stats()
        logger.info(
            "Annotation graph built: %d cases, %d components, %d calls, %d notes "
            "(%d synthesized, %d records skipped)",
            stats["cases"], stats["components"], stats["calls"], stats["notes"],
            created_cases + created_components, self._skipped + unbound,
        )
        return graph

    def _append(self, element: Optional[Element], kind: str, label: Optional[str]):
        if element is None:
            self._skipped += 1
            logger.debug("Skipping %s annotation without usable references: %r", kind, label)
            return None
        self._elements.append(element)
        return element


def build_graph(records: Iterable[AnnotationRecord]) -> ElementGraph:
    """Build an ElementGraph from extractor records in one call."""
    return GraphBuilder().add_records(records).build()

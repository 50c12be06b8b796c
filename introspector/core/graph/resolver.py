"""Reference resolution over a freshly parsed element list.

Runs once per load, in order:
  1. match_referenced_dependencies — key references become canonical names
     drop_unbound_relations        — Calls/Notes left without a case go
  2. create_missing_dependencies   — every referenced name gets an entity
  3. clean_dependencies            — blank and repeated names are dropped

Nothing here raises on bad data: unmatched keys simply contribute nothing.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..utils import is_blank
from .models import Call, Case, CaseEntry, Component, Element, ElementKind, Note

logger = logging.getLogger(__name__)


@dataclass
class Partition:
    """Elements split by kind, each list in collection order."""
    cases: List[Case] = field(default_factory=list)
    components: List[Component] = field(default_factory=list)
    calls: List[Call] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)
    relations: List[Union[Call, Note]] = field(default_factory=list)


def partition(elements: Iterable[Element]) -> Partition:
    """Split elements by kind."""
    result = Partition()
    for element in elements:
        match element:
            case Case():
                result.cases.append(element)
            case Component():
                result.components.append(element)
            case Call():
                result.calls.append(element)
                result.relations.append(element)
            case Note():
                result.notes.append(element)
                result.relations.append(element)
            case _:
                raise TypeError(f"Not a graph element: {type(element).__name__}")
    return result


# ── Pass 1: key references ───────────────────────────────────────────


def match_referenced_dependencies(elements: List[Element]) -> int:
    """Resolve pending key references on every Call and Note.

    Every Case/Component whose key equals a pending key contributes its
    canonical name. Returns the number of keys that matched nothing.
    """
    parts = partition(elements)

    cases_by_key: Dict[str, List[Case]] = defaultdict(list)
    for case in parts.cases:
        if case.key:
            cases_by_key[case.key].append(case)

    components_by_key: Dict[str, List[Component]] = defaultdict(list)
    for component in parts.components:
        if component.key:
            components_by_key[component.key].append(component)

    unmatched = 0
    for relation in parts.relations:
        unmatched += _match_cases(relation, cases_by_key)
        if relation.kind is ElementKind.CALL:
            unmatched += _match_components(relation.pending_from, components_by_key, relation.add_from)
            unmatched += _match_components(relation.pending_to, components_by_key, relation.add_to)
            relation.pending_from = []
            relation.pending_to = []
        else:
            unmatched += _match_components(relation.pending_over, components_by_key, relation.add_over)
            relation.pending_over = []
        relation.pending_cases = []

    if unmatched:
        logger.debug("%d key reference(s) matched no declaration", unmatched)
    return unmatched


def _match_cases(
    relation: Union[Call, Note],
    cases_by_key: Dict[str, List[Case]],
) -> int:
    unmatched = 0
    for key, order in relation.pending_cases:
        found = cases_by_key.get(key)
        if not found:
            logger.debug("Case reference %r matched no declaration", key)
            unmatched += 1
            continue
        for case in found:
            relation.add_case(case.name, order)
    return unmatched


def _match_components(
    pending: List[str],
    components_by_key: Dict[str, List[Component]],
    attach,
) -> int:
    unmatched = 0
    for key in pending:
        found = components_by_key.get(key)
        if not found:
            logger.debug("Component reference %r matched no declaration", key)
            unmatched += 1
            continue
        for component in found:
            attach(component.name)
    return unmatched


def drop_unbound_relations(elements: List[Element]) -> int:
    """Remove Calls and Notes that ended Pass 1 with no case association.

    Runs before synthesis so their components are not created. Returns the
    number removed.
    """
    kept = []
    dropped = 0
    for element in elements:
        if element.kind in (ElementKind.CALL, ElementKind.NOTE) and not element.cases:
            logger.debug("Dropping %s %r: no case reference resolved", element.kind.value, element.text)
            dropped += 1
            continue
        kept.append(element)
    elements[:] = kept
    return dropped


# ── Pass 2: synthesis ────────────────────────────────────────────────


def create_missing_dependencies(elements: List[Element]) -> Tuple[int, int]:
    """Append a minimal Case/Component for every name nobody declared.

    Synthesized entities are appended in first-reference order, cases before
    components. Returns (cases_created, components_created).
    """
    parts = partition(elements)
    known_cases = {case.name for case in parts.cases}
    known_components = {component.name for component in parts.components}

    missing_cases: List[str] = []
    missing_components: List[str] = []
    for relation in parts.relations:
        for name in relation.case_names():
            if not is_blank(name) and name not in known_cases:
                known_cases.add(name)
                missing_cases.append(name)
        for name in relation.component_names():
            if not is_blank(name) and name not in known_components:
                known_components.add(name)
                missing_components.append(name)

    for name in missing_cases:
        case = Case.create(name)
        if case is not None:
            elements.append(case)
    for name in missing_components:
        component = Component.create(None, name)
        if component is not None:
            elements.append(component)

    if missing_cases or missing_components:
        logger.debug(
            "Synthesized %d case(s) and %d component(s) from references",
            len(missing_cases), len(missing_components),
        )
    return len(missing_cases), len(missing_components)


# ── Pass 3: cleanup ──────────────────────────────────────────────────


def clean_dependencies(elements: List[Element]) -> None:
    """Drop blank names and exact repeats inside every Call and Note."""
    for relation in partition(elements).relations:
        relation.cases = _unique_entries(relation.cases)
        if relation.kind is ElementKind.CALL:
            relation.from_names = _unique_names(relation.from_names)
            relation.to_names = _unique_names(relation.to_names)
        else:
            relation.over_names = _unique_names(relation.over_names)


def _unique_names(names: List[Optional[str]]) -> List[str]:
    seen = set()
    result = []
    for name in names:
        if is_blank(name) or name in seen:
            continue
        seen.add(name)
        result.append(name)
    return result


def _unique_entries(entries: List[CaseEntry]) -> List[CaseEntry]:
    seen = set()
    result = []
    for entry in entries:
        if is_blank(entry.name) or (entry.name, entry.order) in seen:
            continue
        seen.add((entry.name, entry.order))
        result.append(entry)
    return result

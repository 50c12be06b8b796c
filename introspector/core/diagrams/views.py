"""Per-request views over the shared ElementGraph.

A view is the filtered, ordered selection a diagram is rendered from.
Building a view never mutates the graph: every list here is a fresh copy.

Ordering rules:
  - a missing order sorts before any present order
  - ties keep the order in which elements were declared
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set, Tuple

from ..graph import Call, Case, Component, ElementGraph, Note
from ..utils import is_blank

logger = logging.getLogger(__name__)


def order_key(order: Optional[float]) -> Tuple[int, float]:
    """Sort key placing None before every number."""
    return (0, 0.0) if order is None else (1, order)


@dataclass(frozen=True)
class Message:
    """One line (or block) in a sequence diagram.

    Calls carry senders/receivers, notes carry `over`. Only components that
    survived filtering appear in these tuples.
    """

    order: Optional[float]
    text: Optional[str]
    senders: Tuple[str, ...] = ()
    receivers: Tuple[str, ...] = ()
    over: Tuple[str, ...] = ()

    @property
    def is_note(self) -> bool:
        return bool(self.over)


@dataclass
class SequenceView:
    case: Case
    participants: List[Component] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)


@dataclass(frozen=True)
class Link:
    source: str
    target: str
    text: Optional[str] = None


@dataclass
class ComponentBlock:
    """A component together with the text shown next to it."""
    component: Component
    texts: List[str] = field(default_factory=list)


@dataclass
class ComponentView:
    cases: List[Case]
    whole_map: bool
    blocks: List[ComponentBlock] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)


# ── Selection helpers ────────────────────────────────────────────────


def _visible(names: Iterable[str], selected: Set[str]) -> Tuple[str, ...]:
    return tuple(name for name in names if name in selected)


def _call_is_visible(call: Call, selected: Set[str]) -> bool:
    return bool(_visible(call.from_names, selected)) and bool(_visible(call.to_names, selected))


def _note_is_visible(note: Note, selected: Set[str]) -> bool:
    return bool(_visible(note.over_names, selected))


def _select_components(graph: ElementGraph, scale: Optional[float]) -> List[Component]:
    return [component for component in graph.components if not component.is_filtered(scale)]


def _first_touch(
    components: List[Component],
    ordered_calls: List[Call],
    notes: List[Note],
) -> List[Component]:
    """Components in first-use order: senders, then receivers, then note targets.

    Within one call, components keep their declaration order.
    """
    result: List[Component] = []
    emitted: Set[str] = set()

    def emit(names: Iterable[str]) -> None:
        wanted = set(names)
        for component in components:
            if component.name in wanted and component.name not in emitted:
                emitted.add(component.name)
                result.append(component)

    for call in ordered_calls:
        emit(call.from_names)
    for call in ordered_calls:
        emit(call.to_names)
    for note in notes:
        emit(note.over_names)
    return result


def _order_calls(calls: List[Call], case_name: str) -> List[Call]:
    return sorted(calls, key=lambda call: order_key(call.first_order_for(case_name)))


# ── Sequence view ────────────────────────────────────────────────────


def build_sequence_view(
    graph: ElementGraph,
    case_name: Optional[str],
    scale: Optional[float] = None,
) -> Optional[SequenceView]:
    """Select and order everything a case's sequence diagram shows.

    Returns None when the case does not exist.
    """
    case = graph.find_case(case_name)
    if case is None:
        logger.debug("Sequence view requested for unknown case %r", case_name)
        return None

    components = _select_components(graph, scale)
    selected = {component.name for component in components}

    calls = [
        call for call in graph.calls
        if call.has_case(case.name) and _call_is_visible(call, selected)
    ]
    notes = [
        note for note in graph.notes
        if note.has_case(case.name) and _note_is_visible(note, selected)
    ]

    participants = _first_touch(components, _order_calls(calls, case.name), notes)

    messages: List[Message] = []
    for call in calls:
        senders = _visible(call.from_names, selected)
        receivers = _visible(call.to_names, selected)
        for order in call.orders_for(case.name):
            messages.append(Message(order, call.text, senders=senders, receivers=receivers))
    for note in notes:
        over = _visible(note.over_names, selected)
        for order in note.orders_for(case.name):
            messages.append(Message(order, note.text, over=over))

    # list.sort is stable, so equal orders keep declaration order
    messages.sort(key=lambda message: order_key(message.order))

    return SequenceView(case=case, participants=participants, messages=messages)


# ── Component view ───────────────────────────────────────────────────


def build_component_view(
    graph: ElementGraph,
    case_name: Optional[str] = None,
    scale: Optional[float] = None,
) -> Optional[ComponentView]:
    """Select components and links for a case, or for the whole system.

    Without a case (or with more than one case in scope) every visible
    component is shown in declaration order. Returns None when no case is
    in scope.
    """
    all_cases = is_blank(case_name)
    if all_cases:
        cases = list(graph.cases)
    else:
        cases = [case for case in graph.cases if case.name == case_name]
    if not cases:
        logger.debug("Component view requested for unknown case %r", case_name)
        return None

    whole_map = all_cases or len(cases) > 1

    components = _select_components(graph, scale)
    selected = {component.name for component in components}

    if all_cases:
        calls = list(graph.calls)
        notes = list(graph.notes)
    else:
        calls = [call for call in graph.calls if call.has_case(case_name)]
        notes = [note for note in graph.notes if note.has_case(case_name)]
    calls = [call for call in calls if _call_is_visible(call, selected)]
    notes = [note for note in notes if _note_is_visible(note, selected)]

    if whole_map:
        shown = components
    else:
        shown = _first_touch(components, _order_calls(calls, case_name), notes)

    blocks = []
    for component in shown:
        texts = [component.text] if component.text else []
        texts.extend(
            note.text for note in notes
            if note.text and component.name in note.over_names
        )
        blocks.append(ComponentBlock(component=component, texts=texts))

    links = [
        Link(source, target, call.text)
        for call in calls
        for source in _visible(call.from_names, selected)
        for target in _visible(call.to_names, selected)
    ]

    return ComponentView(cases=cases, whole_map=whole_map, blocks=blocks, links=links)

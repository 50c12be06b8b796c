"""Entity model for the annotation graph.

Four element kinds form a closed union: Case, Component, Call and Note.
Calls and Notes refer to Cases and Components by name only; the
name -> entity lookup lives on the built ElementGraph, so the object graph
has no back-references.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from ..annotations.models import CaseReference, Reference
from ..utils import is_blank, name_from_key, trim_text

logger = logging.getLogger(__name__)


class ElementKind(Enum):
    """Tag of each element variant."""
    CASE = "case"
    COMPONENT = "component"
    CALL = "call"
    NOTE = "note"


VALID_COMPONENT_TYPES = (
    "participant",
    "actor",
    "database",
    "queue",
    "boundary",
    "control",
    "entity",
    "collections",
)
DEFAULT_COMPONENT_TYPE = VALID_COMPONENT_TYPES[0]


def _resolve_name(name: Optional[str], key: Optional[str]) -> Optional[str]:
    if not is_blank(name):
        return name.strip()
    return name_from_key(key)


def _clean_key(key: Optional[str]) -> Optional[str]:
    return None if is_blank(key) else key.strip()


@dataclass(frozen=True)
class Case:
    """A named use case; the unit of filtering for sequence diagrams."""

    name: str
    key: Optional[str] = None
    text: Optional[str] = None
    kind: ElementKind = field(default=ElementKind.CASE, init=False, repr=False, compare=False)

    @classmethod
    def create(
        cls,
        name: Optional[str],
        text: Optional[str] = None,
        key: Optional[str] = None,
    ) -> Optional["Case"]:
        """Build a Case, or return None when no name can be found."""
        resolved = _resolve_name(name, key)
        if not resolved:
            return None
        return cls(name=resolved, key=_clean_key(key), text=trim_text(text))


@dataclass(frozen=True)
class Component:
    """A participant shown in diagrams (service, actor, database, ...)."""

    name: str
    key: Optional[str] = None
    type: str = DEFAULT_COMPONENT_TYPE
    text: Optional[str] = None
    scale: Optional[float] = None
    kind: ElementKind = field(default=ElementKind.COMPONENT, init=False, repr=False, compare=False)

    @classmethod
    def create(
        cls,
        key: Optional[str],
        name: Optional[str],
        type: Optional[str] = None,
        text: Optional[str] = None,
        scale: Optional[float] = None,
    ) -> Optional["Component"]:
        """Build a Component, or return None when no name can be found.

        Unknown or missing types fall back to "participant".
        """
        resolved = _resolve_name(name, key)
        if not resolved:
            return None

        component_type = (type or "").strip().lower()
        if component_type not in VALID_COMPONENT_TYPES:
            if component_type:
                logger.debug(
                    "Unknown component type %r on %r, using %s",
                    type, resolved, DEFAULT_COMPONENT_TYPE,
                )
            component_type = DEFAULT_COMPONENT_TYPE

        return cls(
            name=resolved,
            key=_clean_key(key),
            type=component_type,
            text=trim_text(text),
            scale=scale,
        )

    def is_filtered(self, scale: Optional[float]) -> bool:
        """True when this component is hidden at the requested scale."""
        if self.scale is None or scale is None:
            return False
        return self.scale > scale


@dataclass(frozen=True)
class CaseEntry:
    """Membership of a Call/Note in a case, at an optional position."""
    name: str
    order: Optional[float] = None


@dataclass(eq=False)
class _CaseBound:
    """Case membership shared by Call and Note.

    Key references wait in `pending_cases` until the resolver matches them;
    literal names go straight through `add_case`.
    """

    text: Optional[str] = None
    cases: List[CaseEntry] = field(default_factory=list)
    pending_cases: List[Tuple[str, Optional[float]]] = field(default_factory=list)

    def add_case(self, name: Optional[str], order: Optional[float]) -> None:
        """Add a case association with the explicit-order-wins merge."""
        if is_blank(name):
            return
        name = name.strip()
        if order is not None and not math.isfinite(order):
            order = None

        if order is not None:
            self.cases = [
                entry for entry in self.cases
                if not (entry.name == name and entry.order is None)
            ]
        elif any(entry.name == name and entry.order is not None for entry in self.cases):
            return

        if any(entry.name == name and entry.order == order for entry in self.cases):
            return

        self.cases.append(CaseEntry(name, order))

    def has_case(self, name: str) -> bool:
        return any(entry.name == name for entry in self.cases)

    def orders_for(self, name: str) -> List[Optional[float]]:
        """All orders this element holds for a case, in insertion order."""
        return [entry.order for entry in self.cases if entry.name == name]

    def first_order_for(self, name: str) -> Optional[float]:
        """Lowest order for a case; None when only an order-less entry exists."""
        orders = [order for order in self.orders_for(name) if order is not None]
        return min(orders) if orders else None

    def case_names(self) -> List[str]:
        return [entry.name for entry in self.cases]

    def _add_case_reference(self, value: CaseReference) -> None:
        reference = value.reference
        if reference.is_literal:
            self.add_case(reference.name, value.order)
        elif not is_blank(reference.key):
            self.pending_cases.append((reference.key.strip(), value.order))


def _add_component_reference(reference: Reference, names: List[str], pending: List[str]) -> None:
    if reference.is_literal:
        names.append(reference.name.strip())
    elif not is_blank(reference.key):
        pending.append(reference.key.strip())


def _usable_cases(cases: Optional[Iterable[CaseReference]]) -> List[CaseReference]:
    return [value for value in cases or [] if not value.reference.is_blank]


def _usable_references(references: Optional[Iterable[Reference]]) -> List[Reference]:
    return [reference for reference in references or [] if not reference.is_blank]


@dataclass(eq=False)
class Call(_CaseBound):
    """A directed message between components, tagged with its cases."""

    from_names: List[str] = field(default_factory=list)
    to_names: List[str] = field(default_factory=list)
    pending_from: List[str] = field(default_factory=list)
    pending_to: List[str] = field(default_factory=list)
    kind: ElementKind = field(default=ElementKind.CALL, init=False, repr=False)

    @classmethod
    def create(
        cls,
        cases: Optional[Iterable[CaseReference]],
        from_refs: Optional[Iterable[Reference]],
        to_refs: Optional[Iterable[Reference]],
        text: Optional[str] = None,
    ) -> Optional["Call"]:
        """Build a Call, or return None unless it has a case, a sender and a receiver."""
        usable_cases = _usable_cases(cases)
        usable_from = _usable_references(from_refs)
        usable_to = _usable_references(to_refs)
        if not usable_cases or not usable_from or not usable_to:
            return None

        call = cls(text=trim_text(text))
        for value in usable_cases:
            call._add_case_reference(value)
        for reference in usable_from:
            _add_component_reference(reference, call.from_names, call.pending_from)
        for reference in usable_to:
            _add_component_reference(reference, call.to_names, call.pending_to)
        return call

    def add_from(self, name: Optional[str]) -> None:
        if not is_blank(name):
            self.from_names.append(name.strip())

    def add_to(self, name: Optional[str]) -> None:
        if not is_blank(name):
            self.to_names.append(name.strip())

    def component_names(self) -> List[str]:
        return self.from_names + self.to_names


@dataclass(eq=False)
class Note(_CaseBound):
    """Text attached over one or more components at a point in a case."""

    over_names: List[str] = field(default_factory=list)
    pending_over: List[str] = field(default_factory=list)
    kind: ElementKind = field(default=ElementKind.NOTE, init=False, repr=False)

    @classmethod
    def create(
        cls,
        cases: Optional[Iterable[CaseReference]],
        over_refs: Optional[Iterable[Reference]],
        text: Optional[str] = None,
    ) -> Optional["Note"]:
        """Build a Note, or return None unless it has a case and a component."""
        usable_cases = _usable_cases(cases)
        usable_over = _usable_references(over_refs)
        if not usable_cases or not usable_over:
            return None

        note = cls(text=trim_text(text))
        for value in usable_cases:
            note._add_case_reference(value)
        for reference in usable_over:
            _add_component_reference(reference, note.over_names, note.pending_over)
        return note

    def add_over(self, name: Optional[str]) -> None:
        if not is_blank(name):
            self.over_names.append(name.strip())

    def component_names(self) -> List[str]:
        return list(self.over_names)


Element = Union[Case, Component, Call, Note]

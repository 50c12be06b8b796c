"""Annotation record data models.

Defines the records handed from the extractors to the graph builder.
These are pure data containers — no parsing or resolution logic.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Reference:
    """A loose cross-reference to a Case or Component.

    Carries either a declaration key (resolved against entity keys) or a
    literal name (already canonical). When both are set the name wins.
    """

    key: Optional[str] = None  # "T:Shop.Orders.OrderService" | "shop.orders.OrderService"
    name: Optional[str] = None  # "order service"

    @property
    def is_blank(self) -> bool:
        return not (self.name and self.name.strip()) and not (self.key and self.key.strip())

    @property
    def is_literal(self) -> bool:
        return bool(self.name and self.name.strip())


@dataclass(frozen=True)
class CaseReference:
    """A reference to a Case with the position of the interaction in it."""

    reference: Reference
    order: Optional[float] = None


@dataclass
class CaseRecord:
    """A `<case>` annotation."""

    key: Optional[str] = None
    name: Optional[str] = None
    text: Optional[str] = None


@dataclass
class ComponentRecord:
    """A `<component>` annotation."""

    key: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None  # "participant" | "database" | ...
    text: Optional[str] = None
    scale: Optional[float] = None


@dataclass
class CallRecord:
    """A `<call>` annotation: a directed message between components."""

    cases: List[CaseReference] = field(default_factory=list)
    from_refs: List[Reference] = field(default_factory=list)
    to_refs: List[Reference] = field(default_factory=list)
    text: Optional[str] = None


@dataclass
class NoteRecord:
    """A `<comment>` annotation: text placed over components."""

    cases: List[CaseReference] = field(default_factory=list)
    over_refs: List[Reference] = field(default_factory=list)
    text: Optional[str] = None


AnnotationRecord = Union[CaseRecord, ComponentRecord, CallRecord, NoteRecord]

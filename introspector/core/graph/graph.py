"""Immutable snapshot of a resolved annotation graph."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from .models import Call, Case, Component, Element, Note
from .resolver import partition


@dataclass(frozen=True)
class ElementGraph:
    """The resolved element collection, built once per load.

    Shared by every view request and never mutated after construction.
    Name lookups are built here so Calls and Notes only need to hold names.
    """

    elements: Tuple[Element, ...] = ()
    cases: Tuple[Case, ...] = ()
    components: Tuple[Component, ...] = ()
    calls: Tuple[Call, ...] = ()
    notes: Tuple[Note, ...] = ()
    case_by_name: Dict[str, Case] = field(default_factory=dict)
    component_by_name: Dict[str, Component] = field(default_factory=dict)

    @classmethod
    def from_elements(cls, elements: Iterable[Element]) -> "ElementGraph":
        elements = tuple(elements)
        parts = partition(elements)
        return cls(
            elements=elements,
            cases=tuple(parts.cases),
            components=tuple(parts.components),
            calls=tuple(parts.calls),
            notes=tuple(parts.notes),
            case_by_name={case.name: case for case in parts.cases},
            component_by_name={component.name: component for component in parts.components},
        )

    def find_case(self, name: Optional[str]) -> Optional[Case]:
        """Exact, case-sensitive lookup."""
        if name is None:
            return None
        return self.case_by_name.get(name)

    def stats(self) -> Dict[str, int]:
        return {
            "cases": len(self.cases),
            "components": len(self.components),
            "calls": len(self.calls),
            "notes": len(self.notes),
        }

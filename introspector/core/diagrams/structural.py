"""Deterministic PlantUML generator for component diagrams.

Takes a ComponentView and produces PlantUML component syntax:
components as `["name"]`, descriptions and note texts in a
`note right of` block, calls as `-->` links.
"""

import logging
from typing import List

from .behavioral import label, quote
from .views import ComponentBlock, ComponentView

logger = logging.getLogger(__name__)

_DIVIDER = "----"


def component_ref(name: str) -> str:
    return f"[{quote(name)}]"


def generate_component_diagram(view: ComponentView) -> str:
    """Render a component view as PlantUML."""
    lines = ["@startuml"]

    for block in view.blocks:
        lines.extend(_render_block(block))

    for link in view.links:
        lines.append(
            f"{component_ref(link.source)} --> {component_ref(link.target)}{label(link.text)}"
        )

    lines.append("@enduml")
    return "\n".join(lines)


def _render_block(block: ComponentBlock) -> List[str]:
    ref = component_ref(block.component.name)
    lines = [ref]
    if not block.texts:
        return lines

    lines.append(f"note right of {ref}")
    for i, text in enumerate(block.texts):
        if i:
            lines.append(_DIVIDER)
        lines.append(quote(text))
    lines.append("end note")
    return lines

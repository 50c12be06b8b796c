"""Deterministic PlantUML generators for behavioral diagrams.

Sequence diagrams come from a SequenceView; the use case overview lists
every case with its description. Values are wrapped in double quotes and
otherwise passed through verbatim.
"""

import logging
from typing import Iterable, List, Optional

from ..graph import Case
from ..utils import is_blank, join_label
from .views import Message, SequenceView

logger = logging.getLogger(__name__)


def quote(value: Optional[str]) -> str:
    return f'"{value or ""}"'


def label(text: Optional[str]) -> str:
    """` : "text"` suffix for arrows, empty when there is no text."""
    if is_blank(text):
        return ""
    return f" : {quote(join_label(text))}"


# ── Sequence Diagram ─────────────────────────────────────────────────


def generate_sequence_diagram(view: SequenceView) -> str:
    """Render a sequence view as PlantUML.

    Layout: optional title block, participant declarations (each with its
    description as an aligned note), then messages and notes in order.
    """
    lines = ["@startuml"]

    if not is_blank(view.case.text):
        lines.append("title")
        lines.append(quote(view.case.text))
        lines.append("end title")

    for component in view.participants:
        lines.append(f"{component.type} {quote(component.name)}")
        if component.text:
            lines.append(f"/ note over {quote(component.name)}")
            lines.append(quote(component.text))
            lines.append("end note")

    for message in view.messages:
        lines.extend(_render_message(message))

    lines.append("@enduml")
    return "\n".join(lines)


def _render_message(message: Message) -> List[str]:
    if message.is_note:
        targets = ", ".join(quote(name) for name in message.over)
        if len(message.over) == 1:
            return [f"note over {targets} : {quote(join_label(message.text))}"]
        return [f"note over {targets}", quote(message.text), "end note"]

    return [
        f"{quote(sender)} -> {quote(receiver)}{label(message.text)}"
        for sender in message.senders
        for receiver in message.receivers
    ]


# ── Use Case Diagram ─────────────────────────────────────────────────


def generate_usecase_diagram(cases: Iterable[Case], package: Optional[str] = None) -> str:
    """Render every case as a `usecase`, optionally grouped in a package."""
    lines = ["@startuml"]

    grouped = not is_blank(package)
    if grouped:
        lines.append(f"package {quote(package)} {{")

    for case in cases:
        lines.append(f"usecase {quote(case.name)}")
        if not is_blank(case.text):
            lines.append(f"note right of {quote(case.name)}")
            lines.append(case.text)
            lines.append("end note")

    if grouped:
        lines.append("}")

    lines.append("@enduml")
    return "\n".join(lines)

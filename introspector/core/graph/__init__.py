"""Annotation graph compiler.

Public API:
    build_graph(records) → ElementGraph
    GraphBuilder — incremental construction, then build()
    ElementGraph — immutable snapshot shared by all view requests
    SnapshotHolder — atomic swap of the live snapshot on reload
"""

from .builder import GraphBuilder, build_graph
from .graph import ElementGraph
from .snapshot import GraphLoader, SnapshotHolder
from .models import (
    DEFAULT_COMPONENT_TYPE,
    VALID_COMPONENT_TYPES,
    Call,
    Case,
    CaseEntry,
    Component,
    Element,
    ElementKind,
    Note,
)

__all__ = [
    "build_graph",
    "GraphBuilder",
    "ElementGraph",
    "GraphLoader",
    "SnapshotHolder",
    "Call",
    "Case",
    "CaseEntry",
    "Component",
    "Element",
    "ElementKind",
    "Note",
    "DEFAULT_COMPONENT_TYPE",
    "VALID_COMPONENT_TYPES",
]

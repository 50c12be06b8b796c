"""Shared fixtures for the introspector test suite."""

import os

import pytest

from introspector.core.annotations.models import CaseReference, Reference
from introspector.core.graph import GraphBuilder


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep INTROSPECTOR_* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("INTROSPECTOR_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def scenario_graph():
    """Components A and B, case c1 ("hello"), one call A -> B "go" at 1.0."""
    builder = GraphBuilder()
    builder.add_component(None, "A")
    builder.add_component(None, "B")
    builder.add_case("c1", "hello")
    builder.add_call(
        [CaseReference(Reference(name="c1"), 1.0)],
        [Reference(name="A")],
        [Reference(name="B")],
        "go",
    )
    return builder.build()

"""Tests for the FastAPI diagram routes."""

import inspect

import pytest
from fastapi.testclient import TestClient

from introspector.api import create_app
from introspector.api.routes.diagrams import reload_snapshot
from introspector.core.config import Settings, reload_configs
from introspector.core.annotations.models import CaseReference, Reference
from introspector.core.graph import GraphBuilder, SnapshotHolder, build_graph


def ref(name):
    return Reference(name=name)


def case(name, order=None):
    return CaseReference(Reference(name=name), order)


@pytest.fixture
def client(scenario_graph):
    holder = SnapshotHolder.from_graph(scenario_graph)
    return TestClient(create_app(holder, Settings(package="Shop")))


class TestCases:
    def test_listing_omits_missing_text(self):
        builder = GraphBuilder()
        builder.add_case("c1", "hello")
        builder.add_case("c2")
        app = create_app(SnapshotHolder.from_graph(builder.build()), Settings())
        response = TestClient(app).get("/introspector/cases")
        assert response.status_code == 200
        assert response.json() == [{"name": "c1", "text": "hello"}, {"name": "c2"}]


class TestDiagramRoutes:
    def test_sequence(self, client):
        response = client.get("/introspector/sequence", params={"case": "c1"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text.startswith("@startuml\ntitle\n")
        assert '"A" -> "B" : "go"' in response.text

    def test_sequence_unknown_case(self, client):
        assert client.get("/introspector/sequence", params={"case": "nope"}).status_code == 404

    def test_sequence_without_case(self, client):
        assert client.get("/introspector/sequence").status_code == 404

    def test_non_numeric_scale_is_ignored(self, client):
        plain = client.get("/introspector/sequence", params={"case": "c1"})
        odd = client.get("/introspector/sequence", params={"case": "c1", "scale": "big"})
        assert odd.status_code == 200
        assert odd.text == plain.text

    def test_components(self, client):
        whole = client.get("/introspector/components")
        single = client.get("/introspector/components", params={"case": "c1"})
        assert whole.status_code == 200
        assert single.text == whole.text
        assert '["A"] --> ["B"] : "go"' in whole.text

    def test_components_unknown_case(self, client):
        assert client.get("/introspector/components", params={"case": "nope"}).status_code == 404

    def test_use_cases_in_package(self, client):
        response = client.get("/introspector/usecases")
        assert response.status_code == 200
        assert 'package "Shop" {' in response.text
        assert 'usecase "c1"' in response.text

    def test_all(self, client):
        response = client.get("/introspector/all")
        assert response.status_code == 200
        assert response.text.count("@startuml") == 3

    def test_health(self, client):
        assert client.get("/introspector/health").json() == {"status": "ok"}


class TestReload:
    def test_reload_swaps_snapshot(self):
        builder = GraphBuilder()
        builder.add_call([case("c9", 1.0)], [ref("X")], [ref("Y")], "later")
        graphs = iter([builder.build()])
        holder = SnapshotHolder(lambda: next(graphs), graph=build_graph([]))
        client = TestClient(create_app(holder, Settings()))

        assert client.get("/introspector/sequence", params={"case": "c9"}).status_code == 404

        response = client.post("/introspector/reload")
        assert response.status_code == 200
        assert response.json() == {"cases": 1, "components": 2, "calls": 1, "notes": 0}
        assert client.get("/introspector/sequence", params={"case": "c9"}).status_code == 200

    def test_reload_route_is_sync(self):
        # FastAPI only moves plain def routes off the event loop
        assert not inspect.iscoroutinefunction(reload_snapshot)


class TestBasePath:
    @pytest.mark.parametrize("base_path,url", [
        ("/", "/cases"),
        ("", "/cases"),
        ("docs/", "/docs/cases"),
    ])
    def test_prefix(self, scenario_graph, base_path, url):
        app = create_app(SnapshotHolder.from_graph(scenario_graph), Settings(base_path=base_path))
        assert TestClient(app).get(url).status_code == 200


class TestSettingsFallback:
    def test_uses_process_settings(self, scenario_graph, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "introspector.yaml").write_text(
            "introspector:\n  base_path: /custom\n", encoding="utf-8",
        )
        reload_configs()
        try:
            client = TestClient(create_app(SnapshotHolder.from_graph(scenario_graph)))
            assert client.get("/custom/cases").status_code == 200
            assert client.get("/introspector/cases").status_code == 404
        finally:
            reload_configs()

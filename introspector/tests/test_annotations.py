"""Tests for the XML and Python annotation extractors and the loader."""

import logging

import pytest

from introspector.core.annotations import (
    AnnotationSourceError,
    CallRecord,
    CaseRecord,
    CaseReference,
    ComponentRecord,
    NoteRecord,
    Reference,
    load_records,
    parse_python_source,
    parse_xml_doc_file,
    parse_xml_fragment,
)
from introspector.core.annotations.discovery import detect_source_kind, should_skip_directory
from introspector.core.annotations.python_source import qualify_cref
from introspector.core.diagrams import DiagramService
from introspector.core.graph import SnapshotHolder, build_graph


# =========================================================================
# Sample sources
# =========================================================================

CALL_FRAGMENT = '''
<call>
    <case name="c1" order="1.5"/>
    <case cref="T:Shop.Checkout" order="soon"/>
    <from name="A"/>
    <to cref="T:Shop.B"/>
    <text>
        go

        now
    </text>
</call>
'''

XML_DOC = '''<?xml version="1.0"?>
<doc>
    <assembly><name>Shop</name></assembly>
    <members>
        <member name="T:Shop.OrderService">
            <summary>Orders.</summary>
            <case name="Checkout">Buying things</case>
            <component name="Order Service" type="control" scale="1">handles orders</component>
        </member>
        <member name="M:Shop.OrderService.Place">
            <call>
                <case cref="T:Shop.OrderService" order="1"/>
                <from name="Customer"/>
                <to cref="T:Shop.OrderService"/>
                <text>place order</text>
            </call>
        </member>
    </members>
</doc>
'''

PYTHON_SOURCE = '''"""Shop orders.

<case name="Checkout">Buying things</case>
"""

import logging


class OrderService:
    """Handles orders.

    <component name="Order Service" type="control"/>
    """

    def place(self):
        """Place an order.

        <call>
            <case name="Checkout" order="1"/>
            <from name="Customer"/>
            <to cref="OrderService"/>
            <text>place order</text>
        </call>
        """

        def helper():
            """<case name="Hidden"/>"""


@audited
def audit():
    """<comment><case name="Checkout" order="2"/><over cref=".OrderService"/><text>audited</text></comment>"""
'''


# =========================================================================
# Tests: XML fragments
# =========================================================================

class TestXmlFragment:
    def test_call(self):
        [record] = parse_xml_fragment(CALL_FRAGMENT)
        assert record == CallRecord(
            cases=[
                CaseReference(Reference(name="c1"), 1.5),
                CaseReference(Reference(key="T:Shop.Checkout"), None),
            ],
            from_refs=[Reference(name="A")],
            to_refs=[Reference(key="T:Shop.B")],
            text="go\nnow",
        )

    def test_case_and_component_take_the_key(self):
        records = parse_xml_fragment(
            '<case name="c1">  about c1 </case>'
            '<component type="Database" scale="2.5">storage</component>',
            key="shop.Store",
        )
        assert records == [
            CaseRecord(key="shop.Store", name="c1", text="about c1"),
            ComponentRecord(key="shop.Store", name=None, type="Database", text="storage", scale=2.5),
        ]

    def test_comment(self):
        [record] = parse_xml_fragment(
            '<comment><case name="c1"/><over name="A"/><over name="B"/><text>hi</text></comment>'
        )
        assert isinstance(record, NoteRecord)
        assert record.over_refs == [Reference(name="A"), Reference(name="B")]
        assert record.text == "hi"

    def test_prose_around_tags(self):
        text = 'Places an order & returns it when a < b.\n\n<case name="c1"/>\nMore prose.'
        assert parse_xml_fragment(text) == [CaseRecord(name="c1")]

    def test_malformed_tag_is_skipped(self):
        text = '<component name="A"><oops></component><case name="c1"/>'
        assert parse_xml_fragment(text) == [CaseRecord(name="c1")]

    def test_empty(self):
        assert parse_xml_fragment(None) == []
        assert parse_xml_fragment("no tags here") == []


# =========================================================================
# Tests: XML documentation files
# =========================================================================

class TestXmlDocFile:
    def test_members(self, tmp_path):
        path = tmp_path / "Shop.xml"
        path.write_text(XML_DOC, encoding="utf-8")
        records = parse_xml_doc_file(str(path))
        assert records[0] == CaseRecord(key="T:Shop.OrderService", name="Checkout", text="Buying things")
        assert records[1] == ComponentRecord(
            key="T:Shop.OrderService", name="Order Service", type="control",
            text="handles orders", scale=1.0,
        )
        assert isinstance(records[2], CallRecord)
        assert len(records) == 3

    def test_resolves_through_graph(self, tmp_path):
        path = tmp_path / "Shop.xml"
        path.write_text(XML_DOC, encoding="utf-8")
        graph = build_graph(parse_xml_doc_file(str(path)))
        service = DiagramService(SnapshotHolder.from_graph(graph))
        assert service.render_sequence("Checkout") == "\n".join([
            "@startuml",
            "title",
            '"Buying things"',
            "end title",
            'participant "Customer"',
            'control "Order Service"',
            '/ note over "Order Service"',
            '"handles orders"',
            "end note",
            '"Customer" -> "Order Service" : "place order"',
            "@enduml",
        ])

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "broken.xml"
        path.write_text("<doc><members>", encoding="utf-8")
        with pytest.raises(AnnotationSourceError):
            parse_xml_doc_file(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(AnnotationSourceError) as exc_info:
            parse_xml_doc_file(str(tmp_path / "missing.xml"))
        assert "missing.xml" in str(exc_info.value)


# =========================================================================
# Tests: Python docstrings
# =========================================================================

class TestPythonSource:
    def test_records_and_keys(self):
        records = parse_python_source(PYTHON_SOURCE, "shop/orders.py")
        assert records == [
            CaseRecord(key="shop.orders", name="Checkout", text="Buying things"),
            ComponentRecord(key="shop.orders.OrderService", name="Order Service", type="control"),
            CallRecord(
                cases=[CaseReference(Reference(name="Checkout"), 1.0)],
                from_refs=[Reference(name="Customer")],
                to_refs=[Reference(key="shop.orders.OrderService")],
                text="place order",
            ),
            NoteRecord(
                cases=[CaseReference(Reference(name="Checkout"), 2.0)],
                over_refs=[Reference(key="shop.orders.OrderService")],
                text="audited",
            ),
        ]

    def test_nested_functions_are_ignored(self):
        records = parse_python_source(PYTHON_SOURCE, "shop/orders.py")
        assert all(getattr(r, "name", None) != "Hidden" for r in records)

    def test_crefs_resolve_against_components(self):
        graph = build_graph(parse_python_source(PYTHON_SOURCE, "shop/orders.py"))
        assert graph.calls[0].to_names == ["Order Service"]
        assert graph.notes[0].over_names == ["Order Service"]

    def test_package_init_module_name(self):
        records = parse_python_source('"""<case name="c1"/>"""\n', "shop/__init__.py")
        assert records == [CaseRecord(key="shop", name="c1")]

    def test_nested_class(self):
        source = (
            "class Outer:\n"
            "    class Inner:\n"
            "        '''<component name=\"In\"/>'''\n"
        )
        assert parse_python_source(source, "m.py") == [ComponentRecord(key="m.Outer.Inner", name="In")]

    def test_syntax_errors_still_parse(self):
        source = 'def ok():\n    """<case name="c1"/>"""\n\ndef broken(\n'
        records = parse_python_source(source, "m.py")
        assert isinstance(records, list)

    def test_no_docstrings(self):
        assert parse_python_source("x = 1\n", "m.py") == []

    @pytest.mark.parametrize("cref,expected", [
        ("OrderService", "shop.orders.OrderService"),
        (".OrderService.place", "shop.orders.OrderService.place"),
        ("billing.Invoice", "billing.Invoice"),
    ])
    def test_qualify_cref(self, cref, expected):
        assert qualify_cref(cref, "shop.orders") == expected

    def test_qualify_cref_without_module(self):
        assert qualify_cref(".A", "") == "A"


# =========================================================================
# Tests: Loader
# =========================================================================

class TestLoader:
    def _tree(self, tmp_path):
        (tmp_path / "Shop.xml").write_text(XML_DOC, encoding="utf-8")
        (tmp_path / "broken.xml").write_text("<doc>", encoding="utf-8")
        pkg = tmp_path / "pkg"
        pkg.mkdir()
        (pkg / "service.py").write_text('"""<case name="FromPython"/>"""\n', encoding="utf-8")
        (pkg / "notes.txt").write_text('<case name="Ignored"/>', encoding="utf-8")
        cache = tmp_path / "__pycache__"
        cache.mkdir()
        (cache / "junk.py").write_text('"""<case name="Cached"/>"""\n', encoding="utf-8")
        return tmp_path

    def test_walks_directory_in_order(self, tmp_path):
        root = self._tree(tmp_path)
        records = load_records([str(root)])
        case_names = [r.name for r in records if isinstance(r, CaseRecord)]
        assert case_names == ["Checkout", "FromPython"]

    def test_module_names_relative_to_walked_directory(self, tmp_path):
        root = self._tree(tmp_path)
        records = load_records([str(root)])
        assert CaseRecord(key="pkg.service", name="FromPython") in records

    def test_explicit_root(self, tmp_path):
        root = self._tree(tmp_path)
        records = load_records([str(root / "pkg" / "service.py")], root=str(root))
        assert records == [CaseRecord(key="pkg.service", name="FromPython")]

    def test_bad_sources_are_skipped(self, tmp_path, caplog):
        root = self._tree(tmp_path)
        with caplog.at_level(logging.WARNING):
            records = load_records([str(root / "broken.xml"), str(root / "nope"), str(root / "Shop.xml")])
        assert len(records) == 3
        assert "broken.xml" in caplog.text
        assert "nope" in caplog.text

    def test_detect_source_kind(self):
        assert detect_source_kind("a/b.XML") == "xml"
        assert detect_source_kind("a/b.py") == "python"
        assert detect_source_kind("a/b.cs") is None

    def test_should_skip_directory(self):
        assert should_skip_directory("__pycache__")
        assert should_skip_directory(".hidden")
        assert should_skip_directory("introspector.egg-info")
        assert not should_skip_directory("src")

"""Python annotation extractor using tree-sitter.

Walks module, class, method and function docstrings and scans each one for
annotation tags. The declaration key of a docstring is the dotted qualified
name of what it documents, e.g. "shop.orders.OrderService.place".

`cref` values inside a docstring are qualified against the current module
when they are not dotted ("OrderService") or start with a dot
(".OrderService.place"); dotted values are taken as absolute.
"""

import logging
import os
from typing import List, Optional

import tree_sitter
import tree_sitter_python

from .errors import AnnotationSourceError
from .models import AnnotationRecord
from .xml_doc import parse_xml_fragment

logger = logging.getLogger(__name__)

# Create the Language object once (wraps the PyCapsule)
_PYTHON_LANGUAGE = tree_sitter.Language(tree_sitter_python.language())

_STRING_PREFIX_CHARS = "rRuUbBfF"


class PythonAnnotationExtractor:
    """tree-sitter based docstring walker.

    Visits:
    - the module docstring → key "package.module"
    - classes (nested classes included) → key "package.module.Class"
    - functions and methods → key "package.module.Class.method"
    """

    def parse_file(self, file_path: str, project_root: Optional[str] = None) -> List[AnnotationRecord]:
        """Parse a Python source file.

        Args:
            file_path: Path to the source file
            project_root: Directory module names are computed from; defaults to
                the file's own directory

        Raises:
            AnnotationSourceError: If the file cannot be read
        """
        root = project_root or os.path.dirname(file_path)
        rel_path = os.path.relpath(file_path, root)

        try:
            with open(file_path, "r", encoding="utf-8", errors="replace") as f:
                source_text = f.read()
        except OSError as e:
            raise AnnotationSourceError(str(file_path), f"cannot read file: {e}") from e

        return self.parse_source(source_text, rel_path)

    def parse_source(self, source_text: str, file_path: str) -> List[AnnotationRecord]:
        """Parse source code into annotation records.

        Args:
            source_text: Python source
            file_path: Path relative to the project root, used for module names
        """
        source = source_text.encode("utf-8")
        parser = tree_sitter.Parser(_PYTHON_LANGUAGE)
        tree = parser.parse(source)

        if tree.root_node.has_error:
            logger.debug("tree-sitter reported parse errors in %s", file_path)

        module_name = self._file_path_to_module(file_path)
        records: List[AnnotationRecord] = []

        docstring = self._extract_docstring(tree.root_node, source)
        self._scan(docstring, module_name, module_name, records)

        self._walk_block(tree.root_node, source, module_name, module_name, records)

        logger.debug("Extracted %d annotation records from %s", len(records), file_path)
        return records

    def _walk_block(
        self,
        node: tree_sitter.Node,
        source: bytes,
        prefix: str,
        module_name: str,
        records: List[AnnotationRecord],
    ) -> None:
        """Visit function and class definitions directly inside `node`."""
        for child in node.children:
            definition = child
            if child.type == "decorated_definition":
                definition = self._get_decorated_inner(child)
            if definition is None or definition.type not in ("function_definition", "class_definition"):
                continue

            name = self._get_child_text(definition, "name", source)
            if not name:
                continue
            qualified_name = f"{prefix}.{name}" if prefix else name

            body = definition.child_by_field_name("body")
            self._scan(self._extract_docstring(body, source), qualified_name, module_name, records)

            # Methods and nested classes; function bodies are not descended into
            if definition.type == "class_definition" and body is not None:
                self._walk_block(body, source, qualified_name, module_name, records)

    @staticmethod
    def _scan(
        docstring: Optional[str],
        key: str,
        module_name: str,
        records: List[AnnotationRecord],
    ) -> None:
        if not docstring or "<" not in docstring:
            return

        def resolve_cref(cref: str) -> str:
            return qualify_cref(cref, module_name)

        records.extend(parse_xml_fragment(docstring, key or None, resolve_cref))

    # =========================================================================
    # Helper methods
    # =========================================================================

    @staticmethod
    def _get_child_text(node: tree_sitter.Node, field_name: str, source: bytes) -> Optional[str]:
        """Get text content of a named child field."""
        child = node.child_by_field_name(field_name)
        if child:
            return source[child.start_byte:child.end_byte].decode("utf-8", errors="replace")
        return None

    @staticmethod
    def _get_decorated_inner(node: tree_sitter.Node) -> Optional[tree_sitter.Node]:
        """Get the inner definition from a decorated_definition node."""
        for child in node.children:
            if child.type in ("function_definition", "class_definition"):
                return child
        return None

    @staticmethod
    def _extract_docstring(body: Optional[tree_sitter.Node], source: bytes) -> Optional[str]:
        """Docstring of a module or block: its first statement, if a string."""
        if body is None:
            return None

        statements = [child for child in body.named_children if child.type != "comment"]
        if not statements:
            return None

        first_stmt = statements[0]
        if first_stmt.type != "expression_statement":
            return None

        for sub in first_stmt.children:
            if sub.type == "string":
                raw = source[sub.start_byte:sub.end_byte].decode("utf-8", errors="replace")
                raw = raw.lstrip(_STRING_PREFIX_CHARS)
                # Strip triple quotes
                for quote in ('"""', "'''"):
                    if raw.startswith(quote) and raw.endswith(quote) and len(raw) >= 6:
                        return raw[3:-3]
                # Strip single/double quotes
                return raw[1:-1]
        return None

    @staticmethod
    def _file_path_to_module(file_path: str) -> str:
        """Convert file path to Python module dotted name.

        e.g., "shop/orders/service.py" → "shop.orders.service"
        """
        path = file_path
        if path.endswith(".py"):
            path = path[:-3]
        path = path.replace("\\", "/").strip("/")
        while path.startswith("./"):
            path = path[2:]
        path = path.replace("/", ".")
        if path == "__init__":
            return ""
        if path.endswith(".__init__"):
            path = path[:-9]
        return path


def qualify_cref(cref: str, module_name: str) -> str:
    """Qualify a docstring cref against the module it appears in.

    "OrderService" in shop.orders → "shop.orders.OrderService"
    ".OrderService.place"         → "shop.orders.OrderService.place"
    "billing.Invoice"             → "billing.Invoice"
    """
    cref = cref.strip()
    if not module_name:
        return cref.lstrip(".")
    if cref.startswith("."):
        return f"{module_name}{cref}"
    if "." not in cref:
        return f"{module_name}.{cref}"
    return cref


def parse_python_source(source_text: str, file_path: str = "module.py") -> List[AnnotationRecord]:
    """Convenience wrapper around PythonAnnotationExtractor.parse_source."""
    return PythonAnnotationExtractor().parse_source(source_text, file_path)


def parse_python_file(file_path: str, project_root: Optional[str] = None) -> List[AnnotationRecord]:
    """Convenience wrapper around PythonAnnotationExtractor.parse_file."""
    return PythonAnnotationExtractor().parse_file(file_path, project_root)

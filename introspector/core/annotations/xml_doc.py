"""XML annotation extractor — ElementTree-based.

Reads the annotation vocabulary from two kinds of input:
- XML documentation files (`/doc/members/member`), where each member's
  `name` attribute is the declaration key of the tags it contains
- loose fragments such as docstrings, where tags are mixed with prose

Tags:
    <case name="...">text</case>
    <component name="..." type="..." scale="...">text</component>
    <call>
        <case name|cref="..." order="..."/>
        <from name|cref="..."/>
        <to name|cref="..."/>
        <text>...</text>
    </call>
    <comment>
        <case name|cref="..." order="..."/>
        <over name|cref="..."/>
        <text>...</text>
    </comment>

`name` is a literal reference, `cref` a key reference resolved later by the
graph builder.
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import Callable, List, Optional, Union

from ..utils import parse_float, trim_text
from .errors import AnnotationSourceError
from .models import (
    AnnotationRecord,
    CallRecord,
    CaseRecord,
    CaseReference,
    ComponentRecord,
    NoteRecord,
    Reference,
)

logger = logging.getLogger(__name__)

ANNOTATION_TAGS = ("case", "component", "call", "comment")

# One top-level annotation tag: self-closing or up to its own closing tag.
# Tags nested inside <call>/<comment> are consumed with their parent.
_TAG_PATTERN = re.compile(
    r"<(case|component|call|comment)\b[^>]*?(?:/>|>.*?</\1\s*>)",
    re.DOTALL,
)

CrefResolver = Callable[[str], str]


def _strip_namespace(tag: str) -> str:
    """'{urn:x}member' -> 'member'"""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _local_findall(element: ET.Element, local_name: str) -> List[ET.Element]:
    """Direct children with the given local name, ignoring namespaces."""
    return [
        child for child in element
        if _strip_namespace(child.tag) == local_name
    ]


def _child_text(element: ET.Element, child_name: str) -> Optional[str]:
    children = _local_findall(element, child_name)
    if not children:
        return None
    return children[0].text


def _reference(element: ET.Element, resolve_cref: Optional[CrefResolver]) -> Reference:
    name = element.get("name")
    cref = element.get("cref")
    if cref and resolve_cref is not None:
        cref = resolve_cref(cref)
    return Reference(key=cref, name=name)


def _case_references(element: ET.Element, resolve_cref: Optional[CrefResolver]) -> List[CaseReference]:
    return [
        CaseReference(_reference(child, resolve_cref), parse_float(child.get("order")))
        for child in _local_findall(element, "case")
    ]


def _references(
    element: ET.Element,
    child_name: str,
    resolve_cref: Optional[CrefResolver],
) -> List[Reference]:
    return [_reference(child, resolve_cref) for child in _local_findall(element, child_name)]


def parse_element(
    element: ET.Element,
    key: Optional[str] = None,
    resolve_cref: Optional[CrefResolver] = None,
) -> Optional[AnnotationRecord]:
    """Turn one annotation element into a record.

    `key` is the declaration the element is attached to; it becomes the key
    of cases and components. Returns None for tags outside the vocabulary.
    """
    tag = _strip_namespace(element.tag)

    if tag == "case":
        return CaseRecord(key=key, name=element.get("name"), text=trim_text(element.text))

    if tag == "component":
        return ComponentRecord(
            key=key,
            name=element.get("name"),
            type=element.get("type"),
            text=trim_text(element.text),
            scale=parse_float(element.get("scale")),
        )

    if tag == "call":
        return CallRecord(
            cases=_case_references(element, resolve_cref),
            from_refs=_references(element, "from", resolve_cref),
            to_refs=_references(element, "to", resolve_cref),
            text=trim_text(_child_text(element, "text")),
        )

    if tag == "comment":
        return NoteRecord(
            cases=_case_references(element, resolve_cref),
            over_refs=_references(element, "over", resolve_cref),
            text=trim_text(_child_text(element, "text")),
        )

    return None


def parse_children(
    element: ET.Element,
    key: Optional[str] = None,
    resolve_cref: Optional[CrefResolver] = None,
) -> List[AnnotationRecord]:
    """Records for every annotation tag directly under `element`."""
    records = []
    for child in element:
        record = parse_element(child, key, resolve_cref)
        if record is not None:
            records.append(record)
    return records


def parse_xml_fragment(
    text: Optional[str],
    key: Optional[str] = None,
    resolve_cref: Optional[CrefResolver] = None,
) -> List[AnnotationRecord]:
    """Extract annotation tags from text that may also contain prose.

    Each tag is parsed on its own; a malformed tag is logged and skipped
    without affecting its neighbours.
    """
    if not text:
        return []

    records: List[AnnotationRecord] = []
    for match in _TAG_PATTERN.finditer(text):
        try:
            element = ET.fromstring(match.group(0))
        except ET.ParseError as e:
            logger.debug("Skipping malformed <%s> annotation on %r: %s", match.group(1), key, e)
            continue
        record = parse_element(element, key, resolve_cref)
        if record is not None:
            records.append(record)
    return records


def parse_xml_doc_source(source: Union[str, bytes], file_path: str = "<string>") -> List[AnnotationRecord]:
    """Parse the text of an XML documentation file.

    Raises:
        AnnotationSourceError: If the text is not well-formed XML
    """
    try:
        root = ET.fromstring(source)
    except ET.ParseError as e:
        raise AnnotationSourceError(file_path, f"XML parse error: {e}") from e

    records: List[AnnotationRecord] = []
    members = 0
    for container in _local_findall(root, "members"):
        for member in _local_findall(container, "member"):
            members += 1
            records.extend(parse_children(member, key=member.get("name")))

    logger.debug("Parsed %d records from %d members in %s", len(records), members, file_path)
    return records


def parse_xml_doc_file(path: str) -> List[AnnotationRecord]:
    """Parse an XML documentation file into annotation records.

    Raises:
        AnnotationSourceError: If the file cannot be read or is malformed
    """
    try:
        with open(path, "rb") as f:
            source = f.read()
    except OSError as e:
        raise AnnotationSourceError(str(path), f"cannot read file: {e}") from e

    return parse_xml_doc_source(source, str(path))

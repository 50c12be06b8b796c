"""Name-based deduplication of Cases and Components.

The first declaration of a name wins; later ones are dropped. Calls and
Notes are never deduplicated.
"""

import logging
from typing import List

from .models import Element, ElementKind

logger = logging.getLogger(__name__)


def deduplicate(elements: List[Element]) -> List[Element]:
    """Return the elements with repeated Case/Component names removed.

    Cases and Components are deduplicated independently, so a Case and a
    Component may share a name.
    """
    seen = {ElementKind.CASE: set(), ElementKind.COMPONENT: set()}
    result: List[Element] = []
    dropped = 0

    for element in elements:
        names = seen.get(element.kind)
        if names is not None:
            if element.name in names:
                logger.debug("Dropping duplicate %s %r", element.kind.value, element.name)
                dropped += 1
                continue
            names.add(element.name)
        result.append(element)

    if dropped:
        logger.info("Removed %d duplicate case/component declaration(s)", dropped)
    return result

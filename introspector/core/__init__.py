"""Introspector core: annotation extraction, graph compiler and renderers."""

import logging
from typing import Iterable, Optional

from .annotations import load_records
from .graph import ElementGraph, SnapshotHolder, build_graph

logger = logging.getLogger(__name__)


def snapshot_loader(sources: Iterable[str], root: Optional[str] = None):
    """Loader for SnapshotHolder: re-extracts `sources` on every call."""
    sources = list(sources)

    def load() -> ElementGraph:
        return build_graph(load_records(sources, root))

    return load


def create_snapshot_holder(sources: Iterable[str], root: Optional[str] = None) -> SnapshotHolder:
    """SnapshotHolder with its first snapshot already built."""
    holder = SnapshotHolder(snapshot_loader(sources, root))
    holder.reload()
    return holder

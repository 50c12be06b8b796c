"""SnapshotHolder — the single reference to the live ElementGraph.

Readers take `holder.current` once per request and work on that snapshot.
`reload()` builds a complete new graph before swapping the reference, so a
request never sees a half-built graph.
"""

import logging
import threading
from typing import Callable, Optional

from .graph import ElementGraph

logger = logging.getLogger(__name__)

GraphLoader = Callable[[], ElementGraph]


class SnapshotHolder:
    """Holds the current snapshot and rebuilds it on demand."""

    def __init__(self, loader: Optional[GraphLoader] = None, graph: Optional[ElementGraph] = None):
        self._loader = loader
        self._reload_lock = threading.Lock()
        self._graph = graph if graph is not None else ElementGraph()

    @classmethod
    def from_graph(cls, graph: ElementGraph) -> "SnapshotHolder":
        """Holder over a fixed graph; `reload()` keeps returning it."""
        return cls(loader=lambda: graph, graph=graph)

    @property
    def current(self) -> ElementGraph:
        return self._graph

    def reload(self) -> ElementGraph:
        """Build a fresh snapshot with the loader and swap it in.

        If the loader raises, the previous snapshot stays live.
        """
        if self._loader is None:
            logger.debug("No loader configured, keeping current snapshot")
            return self._graph

        with self._reload_lock:
            graph = self._loader()
            self._graph = graph

        logger.info("Snapshot reloaded: %s", graph.stats())
        return graph

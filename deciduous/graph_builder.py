"""Builds the typed threat graph from a validated document."""

import logging

from .errors import ValidationError
from .schemas import (
    REALITY_ID, REALITY_LABEL, Category, Edge, FlaggedRef, Graph, Node,
    TaggedRef, ThreatDocument,
)
from .styles import DEFAULT_THEME

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Walks a ThreatDocument once and produces an immutable Graph."""

    def __init__(self, document: ThreatDocument, theme: str | None = None, fallback_theme: str = DEFAULT_THEME):
        self.document = document
        # An explicit theme beats the document's own, which beats the fallback.
        self.theme = theme or document.theme or fallback_theme

    def _needs_reality(self) -> bool:
        if REALITY_ID in self.document.declared_ids:
            return False
        return any(
            ref.id == REALITY_ID
            for node in self.document.iter_nodes()
            for ref in node.incoming_refs
        )

    def _edge_from_ref(self, ref, target: str) -> Edge:
        if isinstance(ref, FlaggedRef):
            return Edge(
                source=ref.id,
                target=target,
                tag=ref.tag,
                backwards=ref.backwards,
                implemented=ref.implemented,
            )
        if isinstance(ref, TaggedRef):
            return Edge(source=ref.id, target=target, tag=ref.tag)
        return Edge(source=ref.id, target=target)

    def build(self) -> Graph:
        nodes: list[Node] = []
        edges: list[Edge] = []

        if self._needs_reality():
            nodes.append(Node(id=REALITY_ID, label=REALITY_LABEL, category=Category.FACT, implicit=True))

        for node_def in self.document.iter_nodes():
            nodes.append(Node(id=node_def.id, label=node_def.display_label, category=node_def.category))
            for ref in node_def.incoming_refs:
                edges.append(self._edge_from_ref(ref, node_def.id))

        known = {node.id for node in nodes}
        for edge in edges:
            if edge.source not in known:
                raise ValidationError(f"References undefined node '{edge.source}'", edge.target)

        logger.debug('Built graph with %d node(s) and %d edge(s)', len(nodes), len(edges))
        return Graph(
            nodes=tuple(nodes),
            edges=tuple(edges),
            title=self.document.title,
            filter=self.document.filter,
            theme=self.theme,
        )


def build_graph(
    document: ThreatDocument, theme: str | None = None, fallback_theme: str = DEFAULT_THEME
) -> Graph:
    """Build the graph for a validated document."""
    return GraphBuilder(document, theme, fallback_theme).build()

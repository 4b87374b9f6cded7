"""Graphviz DOT generator for compiled threat graphs."""

import html
import logging
from graphviz import Digraph, escape, nohtml
from graphviz.quoting import quote

from .schemas import Category, EmitResult, Graph
from .styles import edge_style, node_style

logger = logging.getLogger(__name__)

GRAPH_ATTRS = {
    'rankdir': 'TB',
    'splines': 'true',
    'overlap': 'false',
    'nodesep': '0.2',
    'ranksep': '0.4',
    'fontname': 'Arial',
}
TITLE_POINT_SIZE = 20


class ThreatDigraph(Digraph):
    """Digraph whose edge endpoints are always whole node names.

    Plain `Digraph.edge` reads `a:b` as node `a`, port `b`; node ids here
    may contain colons.
    """
    _quote_edge = staticmethod(quote)


def dot_text(value: str) -> str:
    """Literal text for a node name or label: backslashes escaped, newlines as `\\n`."""
    text = escape(value).replace('\r\n', '\n').replace('\r', '\n').replace('\n', '\\n')
    return nohtml(text)


class DotEmitter:
    """Serializes a Graph into DOT text.

    Output depends only on the graph value, so emitting the same graph
    twice yields byte-identical text.
    """

    def __init__(self, graph: Graph):
        self.graph = graph
        self._nodes = graph.node_map()

    def _create_digraph(self) -> Digraph:
        dot = ThreatDigraph(
            graph_attr=GRAPH_ATTRS,
            node_attr={'fontname': 'Arial'},
            edge_attr={'fontname': 'Arial'},
        )
        if self.graph.title:
            title = html.escape(self.graph.title, quote=True).replace('\n', '<br/>')
            dot.attr(label=f'<<font POINT-SIZE="{TITLE_POINT_SIZE}">{title}</font>>', labelloc='t')
        return dot

    def _add_nodes(self, dot: Digraph) -> None:
        for node in self.graph.nodes:
            style = node_style(node, self.graph.theme).as_dot_attrs()
            dot.node(dot_text(node.id), label=dot_text(node.label), **style)

    def _add_edges(self, dot: Digraph) -> None:
        for edge in self.graph.edges:
            style = edge_style(edge, self._nodes, self.graph.theme).as_dot_attrs()
            if not edge.tag:
                style.pop('fontcolor', None)
            tail, head = edge.rendered_endpoints
            label = dot_text(edge.tag) if edge.tag else None
            dot.edge(dot_text(tail), dot_text(head), label=label, **style)

    def emit(self) -> EmitResult:
        dot = self._create_digraph()
        self._add_nodes(dot)
        self._add_edges(dot)

        used: frozenset[Category] = self.graph.categories
        logger.debug('Emitted %d node(s), %d edge(s)', len(self.graph.nodes), len(self.graph.edges))
        return EmitResult(
            text=dot.source,
            used_categories=used,
            has_title=bool(self.graph.title),
        )


def emit(graph: Graph) -> EmitResult:
    """Generate DOT text for a graph."""
    return DotEmitter(graph).emit()

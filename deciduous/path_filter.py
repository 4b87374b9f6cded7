"""Restricts a graph to the paths that flow through a set of focus nodes."""

import logging
from typing import Iterable, Optional
import networkx as nx

from .errors import FilterError
from .schemas import Graph

logger = logging.getLogger(__name__)


def to_networkx(graph: Graph) -> nx.MultiDiGraph:
    """Build the traversal graph, one networkx edge per graph edge.

    Edges always point prerequisite -> dependent; the `backwards` flag
    only changes how an edge is drawn.
    """
    digraph = nx.MultiDiGraph()
    digraph.add_nodes_from(node.id for node in graph.nodes)
    for edge in graph.edges:
        digraph.add_edge(edge.source, edge.target, tag=edge.tag)
    return digraph


def ancestors(graph: Graph, node_id: str, digraph: Optional[nx.MultiDiGraph] = None) -> set[str]:
    """Every node that can reach `node_id`, including itself."""
    digraph = digraph if digraph is not None else to_networkx(graph)
    return nx.ancestors(digraph, node_id) | {node_id}


def descendants(graph: Graph, node_id: str, digraph: Optional[nx.MultiDiGraph] = None) -> set[str]:
    """Every node reachable from `node_id`, including itself."""
    digraph = digraph if digraph is not None else to_networkx(graph)
    return nx.descendants(digraph, node_id) | {node_id}


def through(graph: Graph, node_id: str, digraph: Optional[nx.MultiDiGraph] = None) -> set[str]:
    """Union of the ancestor and descendant cones of `node_id`."""
    digraph = digraph if digraph is not None else to_networkx(graph)
    return ancestors(graph, node_id, digraph) | descendants(graph, node_id, digraph)


def filter_graph(graph: Graph, focus_ids: Iterable[str]) -> Graph:
    """Keep only nodes on a path into or out of any focus node.

    An empty focus returns `graph` itself. An edge survives when both of
    its endpoints survive, even if they were kept through unrelated cones.
    """
    focus_ids = list(focus_ids)
    if not focus_ids:
        return graph

    digraph = to_networkx(graph)
    for focus_id in focus_ids:
        if focus_id not in digraph:
            raise FilterError(f"Filter references undefined node '{focus_id}'", focus_id)

    retained: set[str] = set()
    for focus_id in focus_ids:
        retained |= through(graph, focus_id, digraph)

    nodes = tuple(node for node in graph.nodes if node.id in retained)
    edges = tuple(
        edge for edge in graph.edges
        if edge.source in retained and edge.target in retained
    )
    logger.debug(
        'Filter %s kept %d/%d node(s) and %d/%d edge(s)',
        focus_ids, len(nodes), len(graph.nodes), len(edges), len(graph.edges),
    )
    return graph.model_copy(update={'nodes': nodes, 'edges': edges})

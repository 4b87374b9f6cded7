"""Document text to DOT: the full compile pipeline."""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .dot_emitter import emit
from .graph_builder import build_graph
from .parser import load_document
from .path_filter import filter_graph
from .schemas import Category, Graph
from .styles import DEFAULT_THEME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompileResult:
    """DOT text and metadata produced from one document."""
    graph_text: str
    categories_present: frozenset[Category]
    title: Optional[str]
    graph: Graph

    @property
    def worth_rendering(self) -> bool:
        return bool(self.categories_present)


def compile_document(
    text: str,
    focus: Optional[Iterable[str]] = None,
    theme: Optional[str] = None,
    fallback_theme: str = DEFAULT_THEME,
) -> CompileResult:
    """Compile document text into DOT.

    `focus` replaces the document's own `filter` section when given.
    Raises DecodeError or ValidationError; nothing is returned for an
    invalid document.
    """
    document = load_document(text)
    graph = build_graph(document, theme, fallback_theme)
    focus_ids = document.filter if focus is None else tuple(focus)
    graph = filter_graph(graph, focus_ids)
    result = emit(graph)
    logger.debug('Compiled %r: categories=%s', document.title, sorted(c.value for c in result.used_categories))
    return CompileResult(
        graph_text=result.text,
        categories_present=result.used_categories,
        title=graph.title,
        graph=graph,
    )

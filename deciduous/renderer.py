"""Graphviz layout engine adapter."""

import logging
import re
from typing import Optional
import graphviz

from .config import get_settings
from .errors import RenderError

logger = logging.getLogger(__name__)

_GRAPH_OPEN = re.compile(r'^\s*(strict\s+)?digraph\b[^{]*\{', re.MULTILINE)


def _with_dpi(dot: str, dpi: int) -> str:
    match = _GRAPH_OPEN.search(dot)
    if match is None:
        return dot
    return f'{dot[:match.end()]}\n  dpi="{dpi}";{dot[match.end():]}'


def render(dot: str, output_format: str, engine: Optional[str] = None) -> bytes:
    """Lay out DOT text and return the rendered bytes."""
    engine = engine or get_settings().engine
    try:
        data = graphviz.Source(dot, engine=engine).pipe(format=output_format)
    except ValueError as e:
        # Unknown engine or format names are rejected before Graphviz runs.
        raise RenderError(f'Invalid Graphviz option: {e}')
    except graphviz.ExecutableNotFound as e:
        raise RenderError(f'Graphviz is not installed: {e}')
    except graphviz.CalledProcessError as e:
        stderr = e.stderr.decode('utf-8', errors='replace') if e.stderr else str(e)
        raise RenderError(f'Graphviz failed: {stderr.strip()}')
    logger.debug('Rendered %d byte(s) of %s with %s', len(data), output_format, engine)
    return data


def render_svg(dot: str, engine: Optional[str] = None) -> str:
    return render(dot, 'svg', engine).decode('utf-8')


def render_png(dot: str, engine: Optional[str] = None, dpi: Optional[int] = None) -> bytes:
    dpi = dpi or get_settings().png_dpi
    return render(_with_dpi(dot, dpi), 'png', engine)

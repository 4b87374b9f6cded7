"""Host-side state: the latest render of a document and artifact export."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional

from .compiler import compile_document
from .config import Settings, get_settings
from .errors import DecodeError, DeciduousError, RenderError, ValidationError
from .preview import PreviewGenerator
from .provenance import append_to_raster_image, embed_in_graph_text, embed_in_vector_image
from .renderer import render_png, render_svg
from .schemas import Category

logger = logging.getLogger(__name__)

EXPORT_FORMATS = {
    '.png': 'png',
    '.dot': 'dot',
    '.gv': 'dot',
    '.svg': 'svg',
    '.html': 'html',
}


@dataclass(frozen=True)
class Snapshot:
    """Everything produced by one pipeline run.

    A snapshot is never modified; each run replaces it as a whole.
    """
    source: str = ''
    graph_text: str = ''
    svg: str = ''
    title: Optional[str] = None
    theme: str = 'default'
    categories: frozenset[Category] = field(default_factory=frozenset)
    error: Optional[str] = None

    @property
    def has_render(self) -> bool:
        return bool(self.svg)


class PreviewSession:
    """Re-runs the pipeline for each new version of a document."""

    def __init__(
        self,
        focus: Optional[Iterable[str]] = None,
        theme: Optional[str] = None,
        settings: Optional[Settings] = None,
        svg_renderer: Callable[[str], str] = render_svg,
        png_renderer: Callable[..., bytes] = render_png,
    ):
        self.focus = tuple(focus) if focus else None
        self.theme = theme
        self.settings = settings or get_settings()
        self._render_svg = svg_renderer
        self._render_png = png_renderer
        self._snapshot = Snapshot()

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def refresh(self, text: str) -> Snapshot:
        """Compile and lay out `text`, then swap in the new snapshot."""
        try:
            result = compile_document(
                text,
                focus=self.focus,
                theme=self.theme,
                fallback_theme=self.settings.theme,
            )
        except (DecodeError, ValidationError) as e:
            logger.info('Document rejected: %s', e)
            self._snapshot = Snapshot(source=text, error=str(e))
            return self._snapshot

        svg = ''
        error = None
        if result.worth_rendering:
            try:
                svg = self._render_svg(result.graph_text)
            except RenderError as e:
                logger.warning('Layout failed: %s', e)
                error = str(e)

        self._snapshot = Snapshot(
            source=text,
            graph_text=result.graph_text,
            svg=svg,
            title=result.title,
            theme=result.graph.theme,
            categories=result.categories_present,
            error=error,
        )
        return self._snapshot

    def refresh_file(self, path: str | Path) -> Snapshot:
        return self.refresh(Path(path).read_text(encoding='utf-8'))

    def export(self, path: str | Path) -> Path:
        return export_artifact(self._snapshot, path, settings=self.settings, png_renderer=self._render_png)


def export_artifact(
    snapshot: Snapshot,
    path: str | Path,
    settings: Optional[Settings] = None,
    png_renderer: Callable[..., bytes] = render_png,
) -> Path:
    """Write the snapshot to `path`, choosing the format from its suffix.

    Unknown suffixes are written as SVG. The source document is embedded
    in every format.
    """
    if not snapshot.has_render:
        raise DeciduousError('No rendered threat tree to export')
    settings = settings or get_settings()
    path = Path(path)
    output_format = EXPORT_FORMATS.get(path.suffix.lower(), 'svg')
    path.parent.mkdir(parents=True, exist_ok=True)

    if output_format == 'png':
        png = png_renderer(snapshot.graph_text, dpi=settings.png_dpi)
        path.write_bytes(append_to_raster_image(png, snapshot.source))
    elif output_format == 'dot':
        path.write_text(embed_in_graph_text(snapshot.graph_text, snapshot.source), encoding='utf-8')
    elif output_format == 'html':
        PreviewGenerator().generate_to_file(
            path,
            snapshot.svg,
            snapshot.source,
            title=snapshot.title,
            categories=snapshot.categories,
            theme=snapshot.theme,
        )
    else:
        path.write_text(embed_in_vector_image(snapshot.svg, snapshot.source), encoding='utf-8')

    logger.debug('Exported %s to %s', output_format, path)
    return path

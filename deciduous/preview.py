"""Standalone HTML preview pages for rendered threat trees."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .provenance import embed_in_vector_image
from .schemas import CATEGORY_ORDER, Category
from .styles import resolve_node_style


class PreviewGenerator:
    """Renders an HTML page around an SVG threat tree."""

    def __init__(self, template_dir: Optional[Path] = None):
        if template_dir is None:
            template_dir = Path(__file__).parent / 'templates'
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(['html', 'xml'])
        )

    def _legend(self, categories: frozenset[Category], theme: str) -> list[dict]:
        legend = []
        for category in CATEGORY_ORDER:
            if category not in categories:
                continue
            style = resolve_node_style(category, theme)
            legend.append({
                'name': category.section.title(),
                'fill': style.fillcolor,
                'text': style.fontcolor or '#000000',
            })
        return legend

    def generate(
        self,
        svg: str,
        source: str,
        title: Optional[str] = None,
        categories: frozenset[Category] = frozenset(),
        theme: str = 'default',
    ) -> str:
        context = {
            'title': title or 'Threat tree',
            'svg': Markup(embed_in_vector_image(svg, source)),
            'legend': self._legend(categories, theme),
            'generation_timestamp': datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC'),
        }
        template = self.env.get_template('preview.html')
        return template.render(**context)

    def generate_to_file(self, output_path: Path, svg: str, source: str, **kwargs) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(self.generate(svg, source, **kwargs))
        return output_path

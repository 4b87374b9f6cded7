"""Visual style tables for threat tree nodes and edges."""

from itertools import product

from .errors import EmissionDefect
from .schemas import CATEGORY_ORDER, Category, Edge, Node, StyleAttrs


THEMES = {
    'default': {
        'edge': '#2B303A',
        'edge-text': '#DB2955',
        'backwards-edge': '#7692FF',
        'reality-fill': '#272727',
        'reality-text': '#FFFFFF',
        'fact-fill': '#D2D5DD',
        'attack-fill': '#FF92CC',
        'mitigation-fill': '#B9D6F2',
        'goal-fill': '#5F00C2',
        'goal-text': '#FFFFFF',
    },
    'classic': {
        'edge': '#2B303A',
        'edge-text': '#DB2955',
        'backwards-edge': '#7692FF',
        'reality-fill': '#2B303A',
        'reality-text': '#FFFFFF',
        'fact-fill': '#C6CCD2',
        'attack-fill': '#ED96AC',
        'mitigation-fill': '#ABD2FA',
        'goal-fill': '#5F00C2',
        'goal-text': '#FFFFFF',
    },
    'accessible': {
        'edge': '#000000',
        'edge-text': '#DC267F',
        'backwards-edge': '#648FFF',
        'reality-fill': '#000000',
        'reality-text': '#FFFFFF',
        'fact-fill': '#E0E0E0',
        'attack-fill': '#FFB000',
        'mitigation-fill': '#648FFF',
        'goal-fill': '#785EF0',
        'goal-text': '#FFFFFF',
    },
}

DEFAULT_THEME = 'default'

NODE_SHAPES = {
    Category.FACT: {'shape': 'box', 'style': 'filled'},
    Category.ATTACK: {'shape': 'box', 'style': 'filled,rounded'},
    Category.MITIGATION: {'shape': 'octagon', 'style': 'filled'},
    Category.GOAL: {'shape': 'invhouse', 'style': 'filled', 'penwidth': '2'},
}

# Arrowheads say what the edge means for the node it points at.
EDGE_ARROWHEADS = {
    Category.MITIGATION: 'tee',
    Category.GOAL: 'normal',
}
BYPASS_ARROWHEAD = 'empty'
PLANNED_STYLE = 'dashed'


def _build_node_table(palette: dict[str, str]) -> dict[Category, StyleAttrs]:
    table = {}
    for category in CATEGORY_ORDER:
        table[category] = StyleAttrs(
            fillcolor=palette[f'{category.value}-fill'],
            fontcolor=palette.get(f'{category.value}-text'),
            **NODE_SHAPES[category],
        )
    return table


def _build_edge_table(palette: dict[str, str]) -> dict[tuple[Category, Category, bool], StyleAttrs]:
    table = {}
    for source, target, implemented in product(CATEGORY_ORDER, CATEGORY_ORDER, (True, False)):
        if source is Category.MITIGATION and target is Category.ATTACK:
            arrowhead = BYPASS_ARROWHEAD
        else:
            arrowhead = EDGE_ARROWHEADS.get(target, 'normal')
        table[(source, target, implemented)] = StyleAttrs(
            color=palette['edge'],
            fontcolor=palette['edge-text'],
            arrowhead=arrowhead,
            style='solid' if implemented else PLANNED_STYLE,
        )
    return table


NODE_STYLES = {name: _build_node_table(palette) for name, palette in THEMES.items()}
EDGE_STYLES = {name: _build_edge_table(palette) for name, palette in THEMES.items()}
REALITY_STYLES = {
    name: StyleAttrs(
        shape='box',
        style='filled',
        fillcolor=palette['reality-fill'],
        fontcolor=palette['reality-text'],
    )
    for name, palette in THEMES.items()
}


def _table(tables: dict, theme: str) -> dict:
    try:
        return tables[theme]
    except KeyError:
        raise EmissionDefect(f"No style table for theme '{theme}'")


def resolve_node_style(category: Category, theme: str = DEFAULT_THEME, reality: bool = False) -> StyleAttrs:
    """Style for a node of the given category."""
    if reality:
        return _table(REALITY_STYLES, theme)
    try:
        return _table(NODE_STYLES, theme)[category]
    except KeyError:
        raise EmissionDefect(f"No node style for category {category!r} in theme '{theme}'")


def resolve_edge_style(
    source_category: Category,
    target_category: Category,
    implemented: bool = True,
    theme: str = DEFAULT_THEME,
    backwards: bool = False,
) -> StyleAttrs:
    """Style for an edge keyed by its endpoint categories and implementation state."""
    key = (source_category, target_category, implemented)
    try:
        style = _table(EDGE_STYLES, theme)[key]
    except KeyError:
        raise EmissionDefect(f"No edge style for {key!r} in theme '{theme}'")
    if backwards:
        style = style.merged(color=THEMES[theme]['backwards-edge'])
    return style


def node_style(node: Node, theme: str = DEFAULT_THEME) -> StyleAttrs:
    return resolve_node_style(node.category, theme, reality=node.implicit)


def edge_style(edge: Edge, nodes: dict[str, Node], theme: str = DEFAULT_THEME) -> StyleAttrs:
    return resolve_edge_style(
        nodes[edge.source].category,
        nodes[edge.target].category,
        implemented=edge.implemented,
        theme=theme,
        backwards=edge.backwards,
    )

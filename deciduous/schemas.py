"""Pydantic models for threat tree documents and compiled graphs."""

from enum import Enum
from typing import Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Closed classification of a node in the threat tree."""
    FACT = 'fact'
    ATTACK = 'attack'
    MITIGATION = 'mitigation'
    GOAL = 'goal'

    @property
    def section(self) -> str:
        """Name of the document section that declares nodes of this category."""
        return f'{self.value}s'


# Creation order of nodes; also the order sections are read in.
CATEGORY_ORDER = (Category.FACT, Category.ATTACK, Category.MITIGATION, Category.GOAL)

REALITY_ID = 'reality'
REALITY_LABEL = 'Reality'


class PlainRef(BaseModel):
    """A `from` entry that only names its prerequisite."""
    model_config = ConfigDict(frozen=True)

    kind: Literal['plain'] = 'plain'
    id: str


class TaggedRef(BaseModel):
    """A `from` entry carrying a free-form annotation such as '#yolosec'."""
    model_config = ConfigDict(frozen=True)

    kind: Literal['tagged'] = 'tagged'
    id: str
    tag: str


class FlaggedRef(BaseModel):
    """A `from` entry with explicit rendering flags."""
    model_config = ConfigDict(frozen=True)

    kind: Literal['flagged'] = 'flagged'
    id: str
    implemented: bool = True
    backwards: bool = False
    tag: Optional[str] = None


EdgeRef = Union[PlainRef, TaggedRef, FlaggedRef]


class NodeDef(BaseModel):
    """One authored entry of a category section."""
    model_config = ConfigDict(frozen=True)

    id: str
    category: Category
    label: Optional[str] = None
    incoming_refs: tuple[EdgeRef, ...] = ()

    @property
    def display_label(self) -> str:
        return self.label if self.label is not None else self.id


class ThreatDocument(BaseModel):
    """Validated in-memory form of a threat tree document."""
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    theme: Optional[str] = None
    facts: tuple[NodeDef, ...] = ()
    attacks: tuple[NodeDef, ...] = ()
    mitigations: tuple[NodeDef, ...] = ()
    goals: tuple[NodeDef, ...] = ()
    filter: tuple[str, ...] = ()

    def section(self, category: Category) -> tuple[NodeDef, ...]:
        return getattr(self, category.section)

    def iter_nodes(self):
        """Yield every NodeDef in creation order."""
        for category in CATEGORY_ORDER:
            yield from self.section(category)

    @property
    def declared_ids(self) -> set[str]:
        return {node.id for node in self.iter_nodes()}


class Node(BaseModel):
    """A node of a compiled graph."""
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    category: Category
    implicit: bool = False


class Edge(BaseModel):
    """A resolved prerequisite -> dependent relationship."""
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    tag: Optional[str] = None
    backwards: bool = False
    implemented: bool = True

    @property
    def rendered_endpoints(self) -> tuple[str, str]:
        """Endpoints in the order the arrow is drawn."""
        if self.backwards:
            return self.target, self.source
        return self.source, self.target


class Graph(BaseModel):
    """An immutable compiled threat tree."""
    model_config = ConfigDict(frozen=True)

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    title: Optional[str] = None
    filter: tuple[str, ...] = ()
    theme: str = 'default'

    def node_map(self) -> dict[str, Node]:
        return {node.id: node for node in self.nodes}

    @property
    def categories(self) -> frozenset[Category]:
        return frozenset(node.category for node in self.nodes)

    @property
    def is_empty(self) -> bool:
        return not self.nodes


class StyleAttrs(BaseModel):
    """Resolved Graphviz attributes for a node or an edge."""
    model_config = ConfigDict(frozen=True)

    shape: Optional[str] = None
    style: Optional[str] = None
    fillcolor: Optional[str] = None
    fontcolor: Optional[str] = None
    color: Optional[str] = None
    arrowhead: Optional[str] = None
    penwidth: Optional[str] = None

    def as_dot_attrs(self) -> dict[str, str]:
        """Attributes that are set, in declaration order."""
        return {key: value for key, value in self.model_dump().items() if value is not None}

    def merged(self, **overrides: Optional[str]) -> 'StyleAttrs':
        return self.model_copy(update={k: v for k, v in overrides.items() if v is not None})


class EmitResult(BaseModel):
    """Output of the DOT emitter."""
    model_config = ConfigDict(frozen=True)

    text: str
    used_categories: frozenset[Category] = Field(default_factory=frozenset)
    has_title: bool = False

    @property
    def worth_rendering(self) -> bool:
        """A graph with only a title has nothing worth laying out."""
        return bool(self.used_categories)

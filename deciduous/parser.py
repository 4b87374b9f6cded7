"""YAML decoding and validation for threat tree documents."""

import logging
from pathlib import Path
from typing import Any, Optional
import yaml
from pydantic import ValidationError as SchemaError

from .errors import DecodeError, FilterError, ValidationError
from .schemas import (
    CATEGORY_ORDER, REALITY_ID, Category, EdgeRef, FlaggedRef, NodeDef,
    PlainRef, TaggedRef, ThreatDocument,
)
from .styles import THEMES

logger = logging.getLogger(__name__)

FROM_KEY = 'from'
FLAG_KEYS = ('implemented', 'backwards', 'label')


class DocumentParser:
    """Validates a decoded YAML value tree and turns it into a ThreatDocument."""

    def __init__(self, data: Any):
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValidationError(
                f'Document must be a mapping of sections, got {type(data).__name__}'
            )
        self.data = data
        self._declared: dict[str, Category] = {}
        self._reality_referenced = False

    def _coerce_id(self, value: Any, owner: Optional[str] = None) -> str:
        # YAML turns ids like `42` into numbers; booleans are never ids.
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ValidationError(f'Invalid node id {value!r}', owner)
        node_id = str(value)
        if not node_id.strip():
            raise ValidationError('Node id cannot be empty', owner)
        return node_id

    def _coerce_text(self, value: Any, what: str, owner: str) -> str:
        if isinstance(value, (dict, list)):
            raise ValidationError(f'{what} must be a string', owner)
        return str(value)

    def _parse_title(self) -> Optional[str]:
        title = self.data.get('title')
        if title is None:
            return None
        return self._coerce_text(title, 'Title', 'title')

    def _parse_theme(self) -> Optional[str]:
        theme = self.data.get('theme')
        if theme is None:
            return None
        if not isinstance(theme, str):
            raise ValidationError('Theme must be a string', 'theme')
        if theme not in THEMES:
            raise ValidationError(
                f"Unknown theme '{theme}' (expected one of: {', '.join(THEMES)})", 'theme'
            )
        return theme

    def _parse_section(self, category: Category) -> tuple[NodeDef, ...]:
        entries = self.data.get(category.section)
        if entries is None:
            return ()
        if not isinstance(entries, list):
            raise ValidationError(f"Section '{category.section}' must be a list of nodes")
        return tuple(self._parse_entry(category, entry) for entry in entries)

    def _parse_entry(self, category: Category, entry: Any) -> NodeDef:
        if isinstance(entry, dict):
            keys = [key for key in entry if key != FROM_KEY]
            if len(keys) != 1:
                raise ValidationError(
                    f"Entry in '{category.section}' must name exactly one node, got {keys!r}"
                )
            node_id = self._coerce_id(keys[0])
            label = entry[keys[0]]
            if label is not None:
                label = self._coerce_text(label, 'Label', node_id)
            refs = self._parse_refs(node_id, entry.get(FROM_KEY))
        else:
            node_id = self._coerce_id(entry)
            label = None
            refs = ()

        if node_id in self._declared:
            raise ValidationError(
                f'Duplicate id (already declared in {self._declared[node_id].section})', node_id
            )
        self._declared[node_id] = category
        return NodeDef(id=node_id, category=category, label=label, incoming_refs=refs)

    def _parse_refs(self, owner: str, refs: Any) -> tuple[EdgeRef, ...]:
        if refs is None:
            return ()
        if not isinstance(refs, list):
            raise ValidationError("'from' must be a list", owner)
        return tuple(self._parse_ref(owner, ref) for ref in refs)

    def _parse_ref(self, owner: str, ref: Any) -> EdgeRef:
        if not isinstance(ref, dict):
            return PlainRef(id=self._coerce_id(ref, owner))

        # Flags may sit beside the id (`- x:` / `  backwards: true`) or under it.
        flags = {key: ref[key] for key in ref if key in FLAG_KEYS}
        keys = [key for key in ref if key not in FLAG_KEYS]
        if len(keys) != 1:
            raise ValidationError(f"'from' entry must name exactly one node, got {keys!r}", owner)
        ref_id = self._coerce_id(keys[0], owner)
        value = ref[keys[0]]

        tag = None
        if isinstance(value, dict):
            unknown = [key for key in value if key not in FLAG_KEYS]
            if unknown:
                raise ValidationError(f"Unknown edge attribute(s) {unknown!r} on '{ref_id}'", owner)
            flags = {**value, **flags}
        elif value is not None:
            tag = self._coerce_text(value, 'Edge tag', owner)

        if not flags:
            if tag is None:
                return PlainRef(id=ref_id)
            return TaggedRef(id=ref_id, tag=tag)

        for key in ('implemented', 'backwards'):
            if key in flags and not isinstance(flags[key], bool):
                raise ValidationError(f"'{key}' on edge from '{ref_id}' must be true or false", owner)
        if flags.get('label') is not None:
            tag = self._coerce_text(flags['label'], 'Edge label', owner)
        return FlaggedRef(
            id=ref_id,
            implemented=flags.get('implemented', True),
            backwards=flags.get('backwards', False),
            tag=tag,
        )

    def _validate_references(self, sections: dict[Category, tuple[NodeDef, ...]]) -> None:
        for nodes in sections.values():
            for node in nodes:
                for ref in node.incoming_refs:
                    if ref.id in self._declared:
                        continue
                    if ref.id == REALITY_ID:
                        self._reality_referenced = True
                        continue
                    raise ValidationError(f"References undefined node '{ref.id}'", node.id)

    def _parse_filter(self) -> tuple[str, ...]:
        focus = self.data.get('filter')
        if focus is None:
            return ()
        if not isinstance(focus, list):
            raise FilterError("'filter' must be a list of node ids", 'filter')
        focus_ids = []
        for entry in focus:
            focus_id = self._coerce_id(entry, 'filter')
            implicit = focus_id == REALITY_ID and self._reality_referenced
            if focus_id not in self._declared and not implicit:
                raise FilterError(f"Filter references undefined node '{focus_id}'", focus_id)
            focus_ids.append(focus_id)
        return tuple(focus_ids)

    def parse(self) -> ThreatDocument:
        title = self._parse_title()
        theme = self._parse_theme()
        sections = {category: self._parse_section(category) for category in CATEGORY_ORDER}
        self._validate_references(sections)
        focus = self._parse_filter()

        try:
            document = ThreatDocument(
                title=title,
                theme=theme,
                filter=focus,
                **{category.section: nodes for category, nodes in sections.items()},
            )
        except SchemaError as e:
            raise ValidationError(f'Document validation error: {e}')

        logger.debug('Parsed document with %d node(s)', len(self._declared))
        return document


def decode_yaml(text: str) -> Any:
    """Decode document text into a nested value tree."""
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DecodeError(f'YAML parse error: {e}')


def parse_document(data: Any) -> ThreatDocument:
    """Validate an already decoded value tree."""
    return DocumentParser(data).parse()


def load_document(text: str) -> ThreatDocument:
    """Decode and validate document text."""
    return parse_document(decode_yaml(text))


def load_document_file(path: str | Path) -> ThreatDocument:
    """Load and validate a threat tree document from disk."""
    return load_document(Path(path).read_text(encoding='utf-8'))

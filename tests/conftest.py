"""Shared fixtures for the deciduous test suite."""

import io
import shutil

import pytest

from deciduous.graph_builder import build_graph
from deciduous.parser import load_document
from deciduous.sample import SAMPLE_DOCUMENT

CHAIN_DOCUMENT = """\
title: Chain
facts:
- a: A
attacks:
- b: B
  from:
  - a
- c: C
  from:
  - b
- e: E
goals:
- d: D
  from:
  - c
"""

FAKE_SVG = '<svg xmlns="http://www.w3.org/2000/svg" width="10pt" height="10pt"><g class="graph"/></svg>\n'

requires_graphviz = pytest.mark.skipif(
    shutil.which('dot') is None, reason='Graphviz dot executable not installed'
)


def make_png(size=(4, 3), color=(255, 0, 0)) -> bytes:
    from PIL import Image

    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, format='PNG')
    return buffer.getvalue()


def fake_svg_renderer(dot: str) -> str:
    return FAKE_SVG


def fake_png_renderer(dot: str, dpi=None) -> bytes:
    return make_png()


@pytest.fixture
def sample_text():
    return SAMPLE_DOCUMENT


@pytest.fixture
def sample_graph():
    return build_graph(load_document(SAMPLE_DOCUMENT))


@pytest.fixture
def chain_graph():
    return build_graph(load_document(CHAIN_DOCUMENT))

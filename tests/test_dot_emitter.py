"""Tests for DOT generation."""

from deciduous.dot_emitter import dot_text, emit
from deciduous.graph_builder import build_graph
from deciduous.parser import load_document, parse_document
from deciduous.path_filter import filter_graph
from deciduous.schemas import Category


def _statement(text, start):
    return next(line for line in text.splitlines() if line.startswith('\t' + start))


def _node_lines(text):
    return [
        line for line in text.splitlines()
        if line.startswith('\t') and ' -> ' not in line and ' [label=' in line
    ]


def test_emit_is_deterministic(sample_graph):
    assert emit(sample_graph).text == emit(sample_graph).text


def test_equal_graphs_emit_identical_text(sample_text):
    first = build_graph(load_document(sample_text))
    second = build_graph(load_document(sample_text))
    assert emit(first).text == emit(second).text


def test_empty_focus_does_not_change_output(sample_graph):
    assert emit(filter_graph(sample_graph, [])).text == emit(sample_graph).text


def test_statement_per_node_and_edge(sample_graph):
    text = emit(sample_graph).text
    edge_lines = [line for line in text.splitlines() if ' -> ' in line]
    assert len(_node_lines(text)) == len(sample_graph.nodes)
    assert len(edge_lines) == len(sample_graph.edges)


def test_graph_defaults(chain_graph):
    text = emit(chain_graph).text
    graph_line = _statement(text, 'graph [')
    assert 'rankdir=TB' in graph_line
    assert 'fontname=Arial' in graph_line
    assert '\tnode [fontname=Arial]' in text
    assert '\tedge [fontname=Arial]' in text


def test_node_statement(chain_graph):
    line = _statement(emit(chain_graph).text, 'a [')
    for token in ('label=A', 'shape=box', 'style=filled', 'fillcolor="#D2D5DD"'):
        assert token in line


def test_nodes_follow_creation_order(chain_graph):
    text = emit(chain_graph).text
    positions = [text.index(f'\t{node_id} [') for node_id in ('a', 'b', 'c', 'e', 'd')]
    assert positions == sorted(positions)


def test_edges_follow_nodes(chain_graph):
    text = emit(chain_graph).text
    assert text.index('\td [') < text.index('\ta -> b')


def test_edge_statement(chain_graph):
    line = _statement(emit(chain_graph).text, 'a -> b')
    for token in ('style=solid', 'color="#2B303A"', 'arrowhead=normal'):
        assert token in line
    assert 'label=' not in line
    assert 'fontcolor' not in line


def test_backwards_edge_is_drawn_reversed(sample_graph):
    text = emit(sample_graph).text
    assert '\tphishing -> internal_only_bucket' in text
    assert '\tinternal_only_bucket -> phishing' not in text


def test_tag_becomes_label(sample_graph):
    line = _statement(emit(sample_graph).text, 'reality -> wayback')
    assert 'label="#yolosec"' in line
    assert 'fontcolor="#DB2955"' in line


def test_planned_edge_is_dashed(sample_graph):
    line = _statement(emit(sample_graph).text, 'aws_0day -> single_tenant_hsm')
    assert 'style=dashed' in line


def test_title_is_html_escaped():
    result = emit(build_graph(parse_document({'title': 'R&D <secret>', 'facts': ['a']})))
    assert 'label=<<font POINT-SIZE="20">R&amp;D &lt;secret&gt;</font>>' in result.text
    assert 'labelloc=t' in result.text
    assert result.has_title


def test_dot_text_escapes_special_characters():
    assert dot_text('plain') == 'plain'
    assert dot_text('trailing\\') == 'trailing\\\\'
    assert dot_text('two\nlines') == 'two\\nlines'
    assert dot_text('crlf\r\nline') == 'crlf\\nline'


def test_label_that_looks_like_html_is_quoted():
    graph = build_graph(parse_document({'facts': [{'a': '<b>not html</b>'}]}))
    assert 'label="<b>not html</b>"' in emit(graph).text


def test_syntax_characters_in_ids_and_labels():
    graph = build_graph(parse_document({
        'facts': [{'a -> b; }': 'label with "quotes" and {braces}'}],
        'attacks': [{'node': 'back\\slash\nnewline'}],
        'goals': [{'g:port': None, 'from': ['a -> b; }', 'node']}],
    }))
    text = emit(graph).text
    assert '\t"a -> b; }" [label="label with \\"quotes\\" and {braces}"' in text
    assert '\t"node" [label="back\\\\slash\\nnewline"' in text
    assert '\t"a -> b; }" -> "g:port"' in text
    assert '\t"node" -> "g:port"' in text


def test_used_categories(chain_graph):
    result = emit(chain_graph)
    assert result.used_categories == {Category.FACT, Category.ATTACK, Category.GOAL}
    assert result.worth_rendering


def test_title_only_graph_is_not_worth_rendering():
    result = emit(build_graph(load_document('title: Just a title\n')))
    assert result.has_title
    assert result.used_categories == frozenset()
    assert not result.worth_rendering


def test_empty_graph_emits_valid_skeleton():
    result = emit(build_graph(load_document('')))
    assert result.text.startswith('digraph {\n')
    assert result.text.endswith('}\n')
    assert not result.has_title
    assert 'label=<' not in result.text
    assert _node_lines(result.text) == []


def test_theme_changes_colours():
    graph = build_graph(load_document('theme: accessible\nattacks:\n- x\n'))
    assert 'fillcolor="#FFB000"' in emit(graph).text

"""Tests for the command line interface."""

from pathlib import Path

import pytest
from click.testing import CliRunner

import deciduous.cli as cli
from deciduous.config import Settings
from deciduous.errors import RenderError
from deciduous.sample import SAMPLE_DOCUMENT
from deciduous.session import PreviewSession

from .conftest import fake_svg_renderer

runner = CliRunner()


@pytest.fixture
def document(tmp_path) -> Path:
    path = tmp_path / 'tree.yaml'
    path.write_text(SAMPLE_DOCUMENT, encoding='utf-8')
    return path


@pytest.fixture
def fake_session(monkeypatch):
    def factory(focus=None, theme=None):
        return PreviewSession(focus=focus, theme=theme, settings=Settings(), svg_renderer=fake_svg_renderer)

    monkeypatch.setattr(cli, 'PreviewSession', factory)


def test_init_writes_sample(tmp_path):
    target = tmp_path / 'new' / 'tree.yaml'
    result = runner.invoke(cli.cli, ['init', str(target)])
    assert result.exit_code == 0
    assert target.read_text(encoding='utf-8') == SAMPLE_DOCUMENT


def test_init_refuses_to_overwrite(document):
    result = runner.invoke(cli.cli, ['init', str(document)])
    assert result.exit_code == 1
    assert 'already exists' in result.output


def test_validate(document):
    result = runner.invoke(cli.cli, ['validate', str(document)])
    assert result.exit_code == 0
    assert 'Validation successful!' in result.output
    assert 'Facts: 3' in result.output
    assert 'Goals: 2' in result.output
    assert 'Filter: s3_asset' in result.output


def test_validate_reports_errors(tmp_path):
    path = tmp_path / 'bad.yaml'
    path.write_text('attacks:\n- x\nmitigations:\n- x\n', encoding='utf-8')
    result = runner.invoke(cli.cli, ['validate', str(path)])
    assert result.exit_code == 1
    assert 'Validation failed' in result.output
    assert "'x'" in result.output


def test_compile_to_stdout(document):
    result = runner.invoke(cli.cli, ['compile', str(document)])
    assert result.exit_code == 0
    assert result.output.startswith('digraph {')
    assert '\tcompany_bank_account [' not in result.output


def test_compile_with_focus(document):
    result = runner.invoke(cli.cli, ['compile', str(document), '--focus', 'company_bank_account'])
    assert result.exit_code == 0
    assert '\tcompany_bank_account [' in result.output
    assert '\ts3_asset [' not in result.output


def test_compile_with_theme(document):
    result = runner.invoke(cli.cli, ['compile', str(document), '--theme', 'accessible'])
    assert result.exit_code == 0
    assert '#FFB000' in result.output


def test_compile_and_extract_round_trip(document, tmp_path):
    dot_path = tmp_path / 'tree.dot'
    result = runner.invoke(cli.cli, ['compile', str(document), '--embed-source', '-o', str(dot_path)])
    assert result.exit_code == 0

    recovered = tmp_path / 'recovered.yaml'
    result = runner.invoke(cli.cli, ['extract', str(dot_path), '-o', str(recovered)])
    assert result.exit_code == 0
    assert recovered.read_text(encoding='utf-8') == SAMPLE_DOCUMENT


def test_compile_rejects_invalid_document(tmp_path):
    path = tmp_path / 'bad.yaml'
    path.write_text('facts: [oops\n', encoding='utf-8')
    result = runner.invoke(cli.cli, ['compile', str(path)])
    assert result.exit_code == 1
    assert 'Failed to compile' in result.output


def test_export_svg(document, tmp_path, fake_session):
    output = tmp_path / 'tree.svg'
    result = runner.invoke(cli.cli, ['export', str(document), '-o', str(output)])
    assert result.exit_code == 0
    assert 'Exported' in result.output

    result = runner.invoke(cli.cli, ['extract', str(output)])
    assert result.exit_code == 0
    assert result.output == SAMPLE_DOCUMENT


def test_export_nothing_to_render(tmp_path, fake_session):
    path = tmp_path / 'empty.yaml'
    path.write_text('title: Nothing yet\n', encoding='utf-8')
    result = runner.invoke(cli.cli, ['export', str(path), '-o', str(tmp_path / 'out.svg')])
    assert result.exit_code == 0
    assert 'Nothing to render' in result.output
    assert not (tmp_path / 'out.svg').exists()


def test_export_invalid_document(tmp_path, fake_session):
    path = tmp_path / 'bad.yaml'
    path.write_text('facts:\n- a\nfilter:\n- b\n', encoding='utf-8')
    result = runner.invoke(cli.cli, ['export', str(path), '-o', str(tmp_path / 'out.svg')])
    assert result.exit_code == 1
    assert 'Failed to render' in result.output


def test_extract_without_embedded_source(tmp_path):
    path = tmp_path / 'plain.dot'
    path.write_text('digraph {\n}\n', encoding='utf-8')
    result = runner.invoke(cli.cli, ['extract', str(path)])
    assert result.exit_code == 1
    assert 'No embedded document' in result.output


def test_watch_document_renders_once(document, tmp_path):
    output = tmp_path / 'watched.dot'
    session = PreviewSession(settings=Settings(), svg_renderer=fake_svg_renderer)
    cli.watch_document(document, output, session, interval=0.01, iterations=1)
    assert output.exists()
    assert session.snapshot.source == SAMPLE_DOCUMENT


def test_watch_document_survives_render_failure(document, tmp_path, capsys):
    def broken_png(dot, dpi=None):
        raise RenderError('dot exploded')

    output = tmp_path / 'watched.png'
    session = PreviewSession(settings=Settings(), svg_renderer=fake_svg_renderer, png_renderer=broken_png)
    cli.watch_document(document, output, session, interval=0.01, iterations=2)
    assert not output.exists()
    assert session.snapshot.has_render
    assert 'dot exploded' in capsys.readouterr().err


def test_watch_document_survives_missing_file(tmp_path, capsys):
    session = PreviewSession(settings=Settings(), svg_renderer=fake_svg_renderer)
    cli.watch_document(tmp_path / 'gone.yaml', tmp_path / 'out.svg', session, interval=0.01, iterations=2)
    assert 'Not updated' in capsys.readouterr().err
    assert not (tmp_path / 'out.svg').exists()

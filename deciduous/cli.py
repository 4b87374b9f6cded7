"""Deciduous - Command Line Interface."""

import logging
import sys
import time
from pathlib import Path
from typing import Optional
import click

from . import __version__
from .compiler import compile_document
from .config import get_settings
from .errors import DecodeError, DeciduousError, ValidationError
from .graph_builder import build_graph
from .parser import load_document_file
from .provenance import embed_in_graph_text, extract_source
from .sample import SAMPLE_DOCUMENT
from .schemas import CATEGORY_ORDER
from .session import PreviewSession
from .styles import THEMES

focus_option = click.option(
    '--focus', '-f', multiple=True,
    help='Only show paths through this node (repeatable); overrides the document filter',
)
theme_option = click.option('--theme', type=click.Choice(list(THEMES)), help='Style theme')


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')


def _fail(message: str) -> None:
    click.echo(click.style(message, fg='red'), err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """Deciduous - attack/defence decision trees rendered with Graphviz."""
    _configure_logging(verbose)


@cli.command()
@click.argument('document', type=click.Path(exists=True, dir_okay=False))
def validate(document: str):
    """Validate a threat tree document."""
    try:
        graph = build_graph(load_document_file(document))
    except (DecodeError, ValidationError) as e:
        _fail(f'Validation failed: {e}')

    click.echo(click.style('Validation successful!', fg='green'))
    click.echo(f'  Title: {graph.title or "(none)"}')
    for category in CATEGORY_ORDER:
        count = sum(1 for node in graph.nodes if node.category is category and not node.implicit)
        click.echo(f'  {category.section.title()}: {count}')
    click.echo(f'  Edges: {len(graph.edges)}')
    if graph.filter:
        click.echo(f'  Filter: {", ".join(graph.filter)}')


@cli.command(name='compile')
@click.argument('document', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Output DOT file path')
@focus_option
@theme_option
@click.option('--embed-source', is_flag=True, help='Embed the document in the DOT output as comments')
def compile_command(document: str, output: Optional[str], focus: tuple[str, ...], theme: Optional[str], embed_source: bool):
    """Compile a threat tree document to Graphviz DOT."""
    source = Path(document).read_text(encoding='utf-8')
    try:
        result = compile_document(
            source,
            focus=focus or None,
            theme=theme,
            fallback_theme=get_settings().theme,
        )
    except (DecodeError, ValidationError) as e:
        _fail(f'Failed to compile: {e}')

    dot = embed_in_graph_text(result.graph_text, source) if embed_source else result.graph_text
    if output:
        Path(output).write_text(dot, encoding='utf-8')
        click.echo(click.style(f'DOT generated: {output}', fg='green'))
    else:
        click.echo(dot, nl=False)


@cli.command()
@click.argument('document', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False), required=True,
              help='Output file; .png, .svg, .dot or .html')
@focus_option
@theme_option
def export(document: str, output: str, focus: tuple[str, ...], theme: Optional[str]):
    """Render a document and export it with the source embedded."""
    session = PreviewSession(focus=focus, theme=theme)
    snapshot = session.refresh_file(document)
    if snapshot.error:
        _fail(f'Failed to render: {snapshot.error}')
    if not snapshot.has_render:
        click.echo(click.style('Nothing to render in this document.', fg='yellow'))
        return
    try:
        path = session.export(output)
    except DeciduousError as e:
        _fail(f'Failed to export: {e}')
    click.echo(click.style(f'Exported: {path}', fg='green'))


@cli.command()
@click.argument('artifact', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write the recovered document here')
def extract(artifact: str, output: Optional[str]):
    """Recover the source document embedded in an exported artifact."""
    source = extract_source(Path(artifact).read_bytes())
    if source is None:
        _fail(f'No embedded document found in {artifact}')
    if output:
        Path(output).write_text(source, encoding='utf-8')
        click.echo(click.style(f'Document recovered: {output}', fg='green'))
    else:
        click.echo(source, nl=False)


@cli.command()
@click.argument('path', type=click.Path(dir_okay=False), default='threat-tree.yaml')
def init(path: str):
    """Write an example threat tree document."""
    target = Path(path)
    if target.exists():
        _fail(f'File already exists: {path}')
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(SAMPLE_DOCUMENT, encoding='utf-8')
    click.echo(click.style('Example threat tree created!', fg='green'))
    click.echo(f'  Location: {target}')
    click.echo('\nNext steps:')
    click.echo(f'  1. Edit {target} to describe your own system')
    click.echo(f'  2. Run: deciduous export {target} -o {target.with_suffix(".svg")}')


def watch_document(document: Path, output: Path, session: PreviewSession,
                   interval: float, iterations: Optional[int] = None) -> None:
    """Re-render `document` into `output` every time it changes."""
    last_mtime = None
    count = 0
    while iterations is None or count < iterations:
        count += 1
        try:
            mtime = document.stat().st_mtime
            if mtime != last_mtime:
                last_mtime = mtime
                snapshot = session.refresh_file(document)
                if snapshot.error:
                    click.echo(click.style(f'Not rendered: {snapshot.error}', fg='yellow'), err=True)
                elif snapshot.has_render:
                    session.export(output)
                    click.echo(click.style(f'Updated: {output}', fg='green'))
        except (DeciduousError, OSError) as e:
            # Editors may briefly remove the file while saving; retry on the next poll.
            click.echo(click.style(f'Not updated: {e}', fg='yellow'), err=True)
        if iterations is None or count < iterations:
            time.sleep(interval)


@cli.command()
@click.argument('document', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False), required=True,
              help='Output file; .png, .svg, .dot or .html')
@click.option('--interval', type=float, help='Seconds between checks for changes')
@focus_option
@theme_option
def watch(document: str, output: str, interval: Optional[float], focus: tuple[str, ...], theme: Optional[str]):
    """Re-export a document whenever it is saved (Ctrl+C to stop)."""
    session = PreviewSession(focus=focus, theme=theme)
    click.echo(f'Watching {document}')
    try:
        watch_document(Path(document), Path(output), session, interval or session.settings.watch_interval)
    except KeyboardInterrupt:
        click.echo('\nStopped.')


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()

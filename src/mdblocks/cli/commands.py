"""CLI command implementations"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from mdblocks.config import Settings, configure_logging, load_config
from mdblocks.core.export import build_sidecar, read_sidecar
from mdblocks.core.parse import load_page
from mdblocks.core.pipeline import check_roundtrip, render_page, run_export
from mdblocks.core.reassemble import reassemble
from mdblocks.core.render import BlockRenderer
from mdblocks.core.segment import segment
from mdblocks.crud.database import init_db, make_engine, reset_db
from mdblocks.crud.pages import get_page, load_content, save_content
from mdblocks.crud.versioning import diff_versions, list_versions


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and apply the log level."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings)
    return settings


def _read_page(path: str):
    try:
        return load_page(Path(path))
    except (OSError, ValueError) as e:
        _fail(f"Could not read {path}", e)


def _emit(text: str, out: Optional[str]) -> None:
    if out:
        Path(out).write_text(text, encoding='utf-8')
        typer.echo(f"Wrote {out}")
    else:
        typer.echo(text)


def segment_cmd(
    path: Annotated[str, typer.Argument(help="Markdown/MDX file to segment")],
    as_json: Annotated[bool, typer.Option("--json", help="Print block records as JSON")] = False,
    ):
    """Split a page into blocks and list them."""
    settings = _settings()
    page = _read_page(path)
    blocks = segment(page.body, settings.catalog())
    if as_json:
        typer.echo(json.dumps(build_sidecar(page.slug, blocks), indent=2))
        return
    for i, b in enumerate(blocks):
        first_line = b.raw_text.split('\n', 1)[0]
        detail = b.component_name or b.language or (f"h{b.level}" if b.level else "")
        typer.echo(f"{i:>4}  {b.kind.value:<10} {detail:<14} {first_line[:60]}")
    typer.echo(f"{len(blocks)} block(s)")


def reassemble_cmd(
    sidecar: Annotated[str, typer.Argument(help="Block sidecar JSON written by export or segment --json")],
    out: Annotated[Optional[str], typer.Option("--out", help="Write the page to this file")] = None,
    ):
    """Rebuild page text from a block sidecar."""
    _settings()
    try:
        _, blocks = read_sidecar(Path(sidecar))
    except (OSError, ValueError) as e:
        _fail(f"Could not read {sidecar}", e)
    _emit(reassemble(blocks), out)


def check_cmd(
    path: Annotated[str, typer.Argument(help="Markdown/MDX file to check")],
    show_diff: Annotated[bool, typer.Option("--diff", help="Print the source vs reassembled diff")] = False,
    ):
    """Verify that segmenting the reassembled page reproduces the same blocks."""
    settings = _settings()
    page = _read_page(path)
    result = check_roundtrip(page.body, settings.catalog())
    s = result.summary
    typer.echo(
        f"{len(result.blocks)} block(s); "
        f"{s['unchanged']} unchanged, {s['added']} added, {s['deleted']} deleted line(s) after reassembly"
    )
    if show_diff:
        typer.echo("".join(result.diff))
    if not result.stable:
        _fail(f"Round trip is not stable (first differing block: {result.first_mismatch})")
    typer.echo("Round trip stable")


def render_cmd(
    path: Annotated[str, typer.Argument(help="Markdown/MDX file to render")],
    out: Annotated[Optional[str], typer.Option("--out", help="Write HTML to this file")] = None,
    ):
    """Render every block to HTML; failing blocks become inline error placeholders."""
    settings = _settings()
    page = _read_page(path)
    catalog = settings.catalog()
    renderer = BlockRenderer(preset=settings.render_preset, catalog=catalog)
    _emit(render_page(page.body, renderer, catalog), out)


def export_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to export")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    fmt: Annotated[Optional[str], typer.Option("--format", help="md or mdx")] = None,
    ):
    """Write reassembled MD/MDX + block sidecar JSON to the output dir."""
    settings = _settings(overrides={"output_dir": out, "output_format": fmt})
    output_dir = Path(settings.output_dir)
    try:
        results = run_export(path, output_dir, settings.output_format, settings.catalog())
    except RuntimeError as e:
        _fail(str(e))
    for src, page_path in results:
        typer.echo(f"  {src} -> {page_path}")
    typer.echo(f"Exported {len(results)} page(s) to {output_dir}/")


def save_cmd(
    path: Annotated[str, typer.Argument(help="Markdown/MDX file to store")],
    doc_id: Annotated[str, typer.Option("--doc-id", help="Document identifier")],
    versions: Annotated[Optional[int], typer.Option("--max-versions", help="Max stored versions per page")] = None,
    ):
    """Segment, reassemble and store a page under a document id."""
    settings = _settings(overrides={"max_versions": versions})
    page = _read_page(path)
    content = reassemble(segment(page.body, settings.catalog()))
    engine = make_engine(settings.db_url)
    init_db(engine)
    try:
        with Session(engine) as session:
            _, status = save_content(session, doc_id, content, settings.max_versions)
            session.commit()
    except Exception as e:
        _fail("Save failed", e)
    typer.echo(f"{status}: {doc_id}")


def show_cmd(
    doc_id: Annotated[str, typer.Argument(help="Document identifier")],
    ):
    """Print the stored content of a page."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        content = load_content(session, doc_id)
    if content is None:
        _fail(f"No page stored for '{doc_id}'")
    typer.echo(content)


def history_cmd(
    doc_id: Annotated[str, typer.Argument(help="Document identifier")],
    diff: Annotated[Optional[tuple[int, int]], typer.Option("--diff", help="Diff two version numbers")] = None,
    ):
    """List stored versions of a page, or diff two of them."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        page = get_page(session, doc_id)
        if page is None:
            _fail(f"No page stored for '{doc_id}'")
        if diff:
            try:
                lines = diff_versions(session, page.id, diff[0], diff[1])
            except ValueError as e:
                _fail(str(e))
            typer.echo("".join(lines) or "No differences.")
            return
        versions = list_versions(session, page.id)
    if not versions:
        typer.echo(f"No previous versions for '{doc_id}'.")
        return
    for v in versions:
        typer.echo(f"  v{v.version_num}  {v.created_at:%Y-%m-%d %H:%M:%S}  {v.hash[:12]}")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")

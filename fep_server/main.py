"""
FEP Server — CLI Entry Point

Usage:
    python -m fep_server.main serve [--host H] [--port P] [--debug]
    python -m fep_server.main list [--status FINAL] [--json]
    python -m fep_server.main get a4ed [--json]
    python -m fep_server.main search "activitypub actor" [--limit N] [--json]
    python -m fep_server.main refresh
    python -m fep_server.main status [--json]

Every command except `serve` is one-shot: it clones the repository
into a temp directory, runs, and deletes the clone again.
"""

from __future__ import annotations

# Load .env FIRST, before anything reads FEP_* or LOG_* variables
from pathlib import Path
from dotenv import load_dotenv

_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

import json
from contextlib import contextmanager
from typing import Iterator, Optional

import click

from .documents import DocumentError, FepCatalog
from .documents.models import STATUSES
from .logging_config import setup_logging
from .mirror import MirrorError, RepositoryMirror

# Initialize logging
setup_logging()


@contextmanager
def _open_catalog(ctx: click.Context) -> Iterator[FepCatalog]:
    """Initialize the mirror for one command and always tear it down."""
    mirror: RepositoryMirror = ctx.obj["mirror_factory"]()
    try:
        mirror.initialize()
        yield FepCatalog(mirror)
    except (MirrorError, DocumentError) as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        ctx.exit(1)
    finally:
        mirror.teardown()


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """FEP Server — Fediverse Enhancement Proposals from a local git mirror."""
    ctx.ensure_object(dict)
    ctx.obj.setdefault("mirror_factory", RepositoryMirror.from_env)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", type=int, default=5060, help="Port (default: 5060)")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, debug: bool) -> None:
    """Clone the FEP repository and serve the local HTTP API."""
    from .api import run_server

    if debug:
        setup_logging(level="DEBUG")
    run_server(host=host, port=port, debug=debug, mirror=ctx.obj["mirror_factory"]())


@cli.command("list")
@click.option(
    "--status",
    type=click.Choice(STATUSES, case_sensitive=False),
    default=None,
    help="Filter by FEP status",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_cmd(ctx: click.Context, status: Optional[str], as_json: bool) -> None:
    """List FEPs with their status and title."""
    with _open_catalog(ctx) as catalog:
        feps = catalog.list_feps(status=status.upper() if status else None)

        if as_json:
            click.echo(json.dumps([f.to_json_dict() for f in feps], indent=2, ensure_ascii=False))
            return

        status_colors = {"FINAL": "green", "DRAFT": "yellow", "WITHDRAWN": "red"}
        for fep in feps:
            click.echo(f"  {fep.slug}  ", nl=False)
            click.secho(f"{fep.status:9}", fg=status_colors.get(fep.status), nl=False)
            click.echo(f"  {fep.title}")
        click.echo(f"\n  {len(feps)} FEP(s)")


@cli.command()
@click.argument("slug")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def get(ctx: click.Context, slug: str, as_json: bool) -> None:
    """Show one FEP by its 4-character slug."""
    with _open_catalog(ctx) as catalog:
        document = catalog.get_fep(slug.lower())

        if as_json:
            click.echo(json.dumps(document.to_json_dict(), indent=2, ensure_ascii=False))
            return

        meta = document.metadata
        click.secho(f"FEP-{meta.slug}: {meta.title}", bold=True)
        click.echo(f"Status:    {meta.status}")
        click.echo(f"Authors:   {meta.authors}")
        click.echo(f"Received:  {meta.date_received}")
        if meta.date_finalized:
            click.echo(f"Finalized: {meta.date_finalized}")
        if meta.date_withdrawn:
            click.echo(f"Withdrawn: {meta.date_withdrawn}")
        click.echo("")
        click.echo(document.content)


@cli.command()
@click.argument("query")
@click.option("--limit", type=int, default=20, help="Maximum results (default: 20)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def search(ctx: click.Context, query: str, limit: int, as_json: bool) -> None:
    """Search FEPs by title, author or content."""
    with _open_catalog(ctx) as catalog:
        results = catalog.search(query, limit=limit)

        if as_json:
            click.echo(json.dumps([r.to_json_dict() for r in results], indent=2, ensure_ascii=False))
            return

        if not results:
            click.echo("No matches.")
            return
        for result in results:
            click.echo(f"  [{result.score:3}] {result.fep.slug}  {result.fep.title}")
            if result.snippet:
                click.echo(f"        {' '.join(result.snippet.split())[:120]}")


@cli.command()
@click.pass_context
def refresh(ctx: click.Context) -> None:
    """Clone, then fetch and fast-forward from origin."""
    with _open_catalog(ctx) as catalog:
        catalog.mirror.refresh()
        click.secho(f"✓ Refreshed (HEAD {catalog.mirror.head_commit()})", fg="green")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Clone the repository and report mirror status."""
    with _open_catalog(ctx) as catalog:
        data = catalog.mirror.status()

        if as_json:
            click.echo(json.dumps(data, indent=2))
            return

        click.echo(f"Remote:  {data['remote']}")
        click.echo(f"Phase:   {data['phase']}")
        click.echo(f"Path:    {data['path']}")
        click.echo(f"HEAD:    {data['head']}")
        click.echo(f"Sync:    {data['sync']['status']} at {data['sync']['last_sync_iso']}")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()

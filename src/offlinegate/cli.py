"""Click CLI for offlinegate — drive the offline cache from a terminal."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from offlinegate.cache.disk import DEFAULT_DB_PATH
from offlinegate.config.hierarchy import build_config
from offlinegate.config.schema import ProxyConfig

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


def _load_config(config_path: str | None) -> ProxyConfig:
    if config_path:
        from offlinegate.config.loader import load_proxy_yaml

        config = load_proxy_yaml(config_path)
    else:
        config = build_config()
    # The CLI always works against the persistent store
    if config.store_path is None:
        config = config.model_copy(update={"store_path": DEFAULT_DB_PATH})
    return config


@click.group()
@click.version_option(package_name="offlinegate")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Proxy YAML file.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: int) -> None:
    """offlinegate — offline-first caching proxy."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _config(ctx: click.Context) -> ProxyConfig:
    try:
        return _load_config(ctx.obj.get("config_path"))
    except (ValueError, FileNotFoundError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


@cli.command()
@click.pass_context
def install(ctx: click.Context) -> None:
    """Precache the manifest and activate the configured generation."""
    from offlinegate.core import OfflineGate

    config = _config(ctx)

    async def _run() -> None:
        gate = OfflineGate(config)
        try:
            report = await gate.install()
            activation = gate.generation.activation_report
        finally:
            await gate.close()

        table = Table(title=f"Install {report.cache_name}", show_header=True)
        table.add_column("Asset", style="cyan")
        table.add_column("Result")
        for url in report.cached:
            table.add_row(url, "[green]cached[/green]")
        for url in report.failed:
            table.add_row(url, "[yellow]failed[/yellow]")
        console.print(table)

        if not report.bulk:
            console.print("[yellow]Bulk precache failed; assets were added individually.[/yellow]")
        if activation is not None:
            deleted = ", ".join(activation.deleted) or "none"
            console.print(f"[green]Activated.[/green] Stale caches deleted: {deleted}")

    asyncio.run(_run())


@cli.command("force-activate")
@click.pass_context
def force_activate(ctx: click.Context) -> None:
    """Install the configured generation and activate it without waiting."""
    from offlinegate.core import OfflineGate
    from offlinegate.lifecycle.control import FORCE_ACTIVATE

    config = _config(ctx)

    async def _run() -> bool:
        gate = OfflineGate(config)
        try:
            report = await gate.install()
            await gate.post_message({"type": FORCE_ACTIVATE})
            generation = gate.generation
        finally:
            await gate.close()

        if not report.complete:
            console.print(
                f"[yellow]{len(report.failed)} asset(s) could not be precached.[/yellow]"
            )
        if generation.is_active:
            deleted = ", ".join(generation.activation_report.deleted) or "none"
            console.print(
                f"[green]Activated {generation.names.primary}.[/green] "
                f"Stale caches deleted: {deleted}"
            )
            return True
        error_console.print(f"[red]Generation is {generation.state}.[/red]")
        return False

    if not asyncio.run(_run()):
        sys.exit(1)


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@click.option("--method", default="GET", show_default=True, help="HTTP method.")
@click.option("--navigate", is_flag=True, default=False, help="Send as a navigation request.")
@click.option("--accept", default=None, help="Accept header to send.")
@click.option("--destination", default="", help="Destination hint, e.g. 'image'.")
@click.pass_context
def fetch(
    ctx: click.Context,
    urls: tuple[str, ...],
    method: str,
    navigate: bool,
    accept: str | None,
    destination: str,
) -> None:
    """Route URL(s) through the proxy and show what came back."""
    from offlinegate.core import OfflineGate
    from offlinegate.types import ProxyRequest, RequestMode

    config = _config(ctx)
    headers = {"accept": accept} if accept else {}
    requests = [
        ProxyRequest(
            method=method.upper(),
            url=config.absolute(url),
            headers=headers,
            mode=RequestMode.NAVIGATE if navigate else None,
            destination=destination,
        )
        for url in urls
    ]

    async def _run() -> None:
        gate = OfflineGate(config)
        try:
            responses = await gate.handle_many(requests)
            categories = [gate.router.classify(r) for r in requests]
        finally:
            await gate.close()

        table = Table(title="Responses", show_header=True)
        table.add_column("URL", style="cyan")
        table.add_column("Category")
        table.add_column("Status")
        table.add_column("Bytes")
        for request, category, response in zip(requests, categories, responses, strict=True):
            status = "network error" if response.is_error else str(response.status)
            table.add_row(request.url, category.value, status, str(len(response.body)))
        console.print(table)

    asyncio.run(_run())


@cli.command("caches")
@click.pass_context
def list_caches(ctx: click.Context) -> None:
    """List named caches and their entry counts."""
    from offlinegate.cache.keys import is_persisted
    from offlinegate.core import OfflineGate

    config = _config(ctx)

    async def _run() -> None:
        gate = OfflineGate(config)
        try:
            counts = await gate.store.entry_counts()
        finally:
            await gate.close()

        names = config.generation
        table = Table(title="Caches", show_header=True)
        table.add_column("Name", style="cyan")
        table.add_column("Entries")
        table.add_column("Status")
        for name, count in counts.items():
            if names.owns(name):
                status = "current"
            elif is_persisted(name, config.persist_prefix):
                status = "persisted"
            else:
                status = "stale"
            table.add_row(name, str(count), status)
        console.print(table)

    asyncio.run(_run())


@cli.command("clear")
@click.confirmation_option(prompt="Are you sure you want to delete every cache?")
@click.pass_context
def clear_caches(ctx: click.Context) -> None:
    """Delete every named cache, persisted ones included."""
    from offlinegate.core import OfflineGate

    config = _config(ctx)

    async def _run() -> int:
        gate = OfflineGate(config)
        try:
            names = await gate.store.keys()
            for name in names:
                await gate.store.delete(name)
            return len(names)
        finally:
            await gate.close()

    count = asyncio.run(_run())
    console.print(f"[green]Deleted {count} cache(s).[/green]")


@cli.command("validate-config")
@click.argument("config_yaml", type=click.Path(exists=True))
def validate_config(config_yaml: str) -> None:
    """Validate a proxy YAML file."""
    from offlinegate.config.loader import load_proxy_yaml

    try:
        config = load_proxy_yaml(config_yaml)
        console.print(
            f"[green]Valid config:[/green] {config.generation.primary} "
            f"({len(config.precache)} precached assets)"
        )
    except Exception as e:
        error_console.print(f"[red]Invalid:[/red] {e}")
        sys.exit(1)


def main() -> None:
    """Entry point for the CLI."""
    cli()

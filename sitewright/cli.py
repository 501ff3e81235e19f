"""CLI entry point for Sitewright."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from sitewright.config import SitewrightConfig, load_config
from sitewright.config.loader import DEFAULT_CONFIG_TEMPLATE
from sitewright.content.models import PreviewChange
from sitewright.drafts import DraftSnapshotCache, DraftStore, get_draft_store
from sitewright.errors import SitewrightError
from sitewright.llm import LLMError, create_llm_provider
from sitewright.logging import setup_logging
from sitewright.secrets import SecretCodec, get_secret_codec
from sitewright.sites import SiteInput, SiteStore
from sitewright.sync import SyncService
from sitewright.tools import ToolExecutionResult, default_registry
from sitewright.vcs import create_provider

app = typer.Typer(
    name="sitewright",
    help="Edit static sites in plain language and publish the result to GitHub.",
)

config_app = typer.Typer(help="Manage Sitewright configuration.")
app.add_typer(config_app, name="config")

sites_app = typer.Typer(help="Manage registered sites.")
app.add_typer(sites_app, name="sites")

draft_app = typer.Typer(help="Inspect or discard a site's draft.")
app.add_typer(draft_app, name="draft")

# Global state
_config: SitewrightConfig | None = None


def _get_config() -> SitewrightConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to sitewright.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    setup_logging(_config.log_level, _config.log_format)


def _fail(message: str) -> NoReturn:
    rprint(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


def _codec(cfg: SitewrightConfig) -> SecretCodec:
    return get_secret_codec(cfg.secrets.session_secret_env)


def _site_store(cfg: SitewrightConfig) -> SiteStore:
    return SiteStore(cfg.sites.path)


def _build_service(cfg: SitewrightConfig, drafts: DraftStore) -> SyncService:
    return SyncService(
        config=cfg,
        sites=_site_store(cfg),
        drafts=drafts,
        registry=default_registry(),
        provider_factory=lambda site, codec: create_provider(site, codec, cfg.vcs),
        codec=_codec(cfg),
    )


@contextmanager
def _site_drafts(cfg: SitewrightConfig, site_id: str) -> Iterator[DraftStore]:
    """Load the site's persisted draft and write it back afterwards."""
    store = get_draft_store()
    snapshots = DraftSnapshotCache(cfg.output.base_dir)
    if cfg.drafts.persist and store.get_entry(site_id) is None:
        snapshots.restore_into(store, site_id)
    try:
        yield store
    finally:
        if cfg.drafts.persist:
            snapshots.sync_from(store, site_id)


def _display_changes(changes: list[PreviewChange]) -> None:
    table = Table(title=f"Changes ({len(changes)})")
    table.add_column("Type", style="bold")
    table.add_column("Section", style="cyan")
    table.add_column("Field", style="green")
    table.add_column("New value")
    styles = {"add": "green", "update": "yellow", "remove": "red"}
    for c in changes:
        value = "" if c.new_value is None else json.dumps(c.new_value, ensure_ascii=False)
        if len(value) > 60:
            value = value[:57] + "..."
        style = styles[c.change_type]
        table.add_row(
            f"[{style}]{c.change_type.upper()}[/{style}]", escape(c.section_label), c.field, escape(value)
        )
    rprint(table)


def _display_result(result: ToolExecutionResult) -> None:
    if result.success:
        rprint(f"[green]✓[/green] {result.tool}: {escape(result.summary)}")
        if result.preview:
            _display_changes(result.preview)
        return
    error = result.error
    code = escape(f"[{error.code}]") if error else ""
    rprint(f"[red]✗[/red] {result.tool}: {code} {escape(result.summary)}")
    for violation in (error.details.get("violations", []) if error else []):
        rprint(f"    [dim]{violation['path']}:[/dim] {escape(violation['message'])}")


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default sitewright.yaml in current directory."""
    target = Path("sitewright.yaml")
    if target.exists() and not force:
        rprint("[yellow]sitewright.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


# ---------------------------------------------------------------------------
# Sites
# ---------------------------------------------------------------------------


@sites_app.command("add")
def sites_add(
    name: str = typer.Option(..., "--name", help="Display name"),
    owner: str = typer.Option(..., "--owner", help="GitHub owner (name or URL)"),
    repo: str = typer.Option(..., "--repo", help="GitHub repository (name or URL)"),
    token: str = typer.Option(
        ..., "--token", envvar="GITHUB_TOKEN", prompt=True, hide_input=True, help="GitHub access token"
    ),
    branch: str = typer.Option("main", "--branch"),
    html_file: str = typer.Option("index.html", "--html-file"),
    content_file: str = typer.Option("content.json", "--content-file"),
    site_id: str | None = typer.Option(None, "--id", help="Explicit site id"),
) -> None:
    """Register a site; its token is stored encrypted."""
    cfg = _get_config()
    try:
        data = SiteInput(
            id=site_id,
            name=name,
            github_owner=owner,
            github_repo=repo,
            github_token=token,
            github_branch=branch,
            html_file=html_file,
            content_file=content_file,
        )
    except ValueError as e:
        _fail(str(e))
    try:
        site = _site_store(cfg).create_site(data, _codec(cfg))
    except SitewrightError as e:
        _fail(e.message)
    rprint(f"[green]Added[/green] {escape(site.name)} [dim]({site.id})[/dim]")


@sites_app.command("list")
def sites_list() -> None:
    """List registered sites."""
    cfg = _get_config()
    try:
        sites = _site_store(cfg).list_sites()
    except SitewrightError as e:
        _fail(e.message)
    if not sites:
        rprint("[dim]No sites registered.[/dim]")
        return
    table = Table(title=f"Sites ({len(sites)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Repository", style="green")
    table.add_column("Last modified", style="dim")
    for s in sites:
        table.add_row(s.id, escape(s.name), f"{s.github_owner}/{s.github_repo}@{s.github_branch}", s.last_modified)
    rprint(table)


@sites_app.command("remove")
def sites_remove(site_id: str = typer.Argument(..., help="Site id")) -> None:
    """Unregister a site and drop its draft."""
    cfg = _get_config()
    if not _site_store(cfg).delete_site(site_id):
        _fail(f"Site {site_id!r} not found")
    DraftSnapshotCache(cfg.output.base_dir).delete(site_id)
    rprint(f"[green]Removed[/green] {site_id}")


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


@app.command()
def extract(
    site_id: str = typer.Argument(..., help="Site id"),
    force: bool = typer.Option(False, "--force", help="Discard the current draft and re-extract"),
) -> None:
    """Extract the site's content model into a draft."""
    cfg = _get_config()
    with _site_drafts(cfg, site_id) as drafts:
        try:
            content = asyncio.run(_build_service(cfg, drafts).extract(site_id, force=force))
        except SitewrightError as e:
            _fail(e.message)
    table = Table(title=f"Sections ({len(content.sections)})")
    table.add_column("Label", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Kind", style="green")
    table.add_column("Fields")
    for s in content.sections:
        table.add_row(escape(s.label), s.id, s.kind, ", ".join(s.fields))
    rprint(table)


@app.command()
def tools() -> None:
    """List available content tools."""
    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Parameters", style="green")
    table.add_column("Description")
    for t in default_registry().list_tools():
        params = escape(", ".join(p.name if p.required else f"[{p.name}]" for p in t.schema))
        table.add_row(t.name, params, t.description)
    rprint(table)


@app.command()
def tool(
    site_id: str = typer.Argument(..., help="Site id"),
    name: str = typer.Argument(..., help="Tool name, e.g. update-field"),
    params: str = typer.Option("{}", "--params", "-p", help="Tool parameters as JSON"),
) -> None:
    """Run a single content tool against the site's draft."""
    cfg = _get_config()
    try:
        payload: Any = json.loads(params)
    except json.JSONDecodeError as e:
        _fail(f"--params is not valid JSON: {e.msg}")
    with _site_drafts(cfg, site_id) as drafts:
        result = asyncio.run(_build_service(cfg, drafts).run_tool(site_id, name, payload))
    _display_result(result)
    if not result.success:
        raise typer.Exit(1)


@app.command()
def edit(
    site_id: str = typer.Argument(..., help="Site id"),
    instruction: str = typer.Argument(..., help="What to change, in plain language"),
) -> None:
    """Ask the assistant to edit the site's draft."""
    cfg = _get_config()
    try:
        llm = create_llm_provider(cfg.llm)
    except ValueError as e:
        _fail(str(e))
    with _site_drafts(cfg, site_id) as drafts:
        try:
            reply = asyncio.run(_build_service(cfg, drafts).chat(site_id, instruction, llm))
        except (SitewrightError, LLMError) as e:
            _fail(getattr(e, "message", str(e)))
    for result in reply.results:
        _display_result(result)
    rprint(Panel(escape(reply.reply), title="Assistant", border_style="blue"))
    if not reply.succeeded:
        raise typer.Exit(1)


@app.command()
def preview(site_id: str = typer.Argument(..., help="Site id")) -> None:
    """Show pending changes and the commit message that would be used."""
    cfg = _get_config()
    with _site_drafts(cfg, site_id) as drafts:
        try:
            data = _build_service(cfg, drafts).preview(site_id)
        except SitewrightError as e:
            _fail(e.message)
    if not data.changes:
        rprint("[dim]No pending changes.[/dim]")
        return
    _display_changes(data.changes)
    rprint(Panel(escape(data.commit_message), title="Commit message", border_style="blue"))


@app.command()
def publish(site_id: str = typer.Argument(..., help="Site id")) -> None:
    """Commit the draft to the site's repository."""
    cfg = _get_config()
    with _site_drafts(cfg, site_id) as drafts:
        try:
            result = asyncio.run(_build_service(cfg, drafts).publish(site_id))
        except SitewrightError as e:
            _fail(e.message)
    if not result.success:
        rprint(f"[yellow]{result.message}[/yellow]")
        raise typer.Exit(1)
    rprint(f"[green]{result.message}[/green] [dim]{result.commit_sha or ''}[/dim]")
    if result.url:
        rprint(f"Live at {result.url}")


# ---------------------------------------------------------------------------
# Drafts
# ---------------------------------------------------------------------------


@draft_app.command("show")
def draft_show(site_id: str = typer.Argument(..., help="Site id")) -> None:
    """Print the site's draft content model as JSON."""
    cfg = _get_config()
    with _site_drafts(cfg, site_id) as drafts:
        entry = drafts.get_entry(site_id)
    if entry is None:
        _fail(f"No draft for site {site_id!r}")
    rprint(f"[dim]version {entry.version}, updated {entry.updated_at}[/dim]")
    rprint(Syntax(json.dumps(entry.content.model_dump(), indent=2, ensure_ascii=False), "json"))


@draft_app.command("discard")
def draft_discard(site_id: str = typer.Argument(..., help="Site id")) -> None:
    """Throw away the site's draft."""
    cfg = _get_config()
    with _site_drafts(cfg, site_id) as drafts:
        removed = drafts.clear(site_id)
    if not removed:
        rprint(f"[dim]No draft for {site_id}.[/dim]")
        return
    rprint(f"[green]Discarded[/green] draft for {site_id}")

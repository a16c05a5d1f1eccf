"""ebrain CLI — all commands."""

import asyncio
from typing import Annotated

import tomlkit
import typer
from rich import print as rprint
from rich.markup import escape
from rich.table import Table

from ebrain.agent import AgentBoundary, build_agent
from ebrain.fields import describe_all, fields_for, known_tables
from ebrain.logger import setup_logging
from ebrain.models import ConversationTurn
from ebrain.server import serve as serve_mcp
from ebrain.settings import CONFIG_PATH, _list_profiles, get_settings, resolve_profile
from ebrain.tools import TOOLS, Clients, Registry

app = typer.Typer(help="enterprise-brain: chat with Redmine and ServiceNow through an AI agent", no_args_is_help=True)

ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-p", help="Profile name from ~/.config/ebrain/config.toml"),
]

_EXIT_WORDS = {"exit", "quit"}


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def get_registry(profile: str | None = None) -> Registry:
    settings = get_settings(profile=profile)
    setup_logging(settings.debug)
    return Registry(Clients.from_settings(settings))


def get_boundary(profile: str | None = None) -> AgentBoundary:
    settings = get_settings(profile=profile)
    setup_logging(settings.debug)
    registry = Registry(Clients.from_settings(settings))
    return AgentBoundary(build_agent(settings, registry), clients=registry.clients)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("serve")
def serve(profile: ProfileOpt = None) -> None:
    """Serve the tools over MCP on stdio."""
    registry = get_registry(profile)
    try:
        asyncio.run(serve_mcp(registry))
    finally:
        registry.clients.close()


@app.command("ask")
def ask(
    message: Annotated[str, typer.Argument(help="Question for the agent")],
    profile: ProfileOpt = None,
) -> None:
    """Ask the agent a single question."""
    boundary = get_boundary(profile)
    try:
        reply = asyncio.run(boundary.ask([ConversationTurn(role="user", content=message)]))
    finally:
        boundary.close()
    if not reply.ok:
        rprint(f"[red]Error: {escape(reply.error or '')}[/red]")
        raise typer.Exit(1)
    rprint(escape(reply.text or ""))


async def _chat_loop(boundary: AgentBoundary) -> None:
    turns: list[ConversationTurn] = []
    while True:
        try:
            message = (await asyncio.to_thread(typer.prompt, "You")).strip()
        except (typer.Abort, EOFError):
            rprint("")
            return
        if not message:
            continue
        if message.lower() in _EXIT_WORDS:
            return

        turns.append(ConversationTurn(role="user", content=message))
        reply = await boundary.ask(turns)
        if reply.ok:
            turns.append(ConversationTurn(role="assistant", content=reply.text or ""))
            rprint(f"[bold cyan]Assistant:[/bold cyan] {escape(reply.text or '')}")
        else:
            turns.append(ConversationTurn(role="error", content=f"Error: {reply.error}"))
            rprint(f"[red]Error: {escape(reply.error or '')}[/red]")


@app.command("chat")
def chat(profile: ProfileOpt = None) -> None:
    """Interactive chat with the agent. Type exit or quit to leave."""
    boundary = get_boundary(profile)
    rprint("[dim]Ask me something like: How many open Redmine issues are there?[/dim]")
    try:
        asyncio.run(_chat_loop(boundary))
    finally:
        boundary.close()


@app.command("tools")
def tools_cmd() -> None:
    """List the tools exposed to the agent and over MCP."""
    table = Table(title="Tools")
    table.add_column("MCP name", style="cyan", no_wrap=True)
    table.add_column("Agent name", no_wrap=True)
    table.add_column("Description", style="dim")

    for spec in TOOLS:
        table.add_row(spec.name, spec.agent_name, spec.description.splitlines()[0])

    rprint(table)


@app.command("fields")
def fields_cmd(
    table: Annotated[str | None, typer.Argument(help="ServiceNow table name")] = None,
) -> None:
    """Show the ServiceNow field catalog."""
    if table is None:
        typer.echo(describe_all())
        return

    names = fields_for(table)
    if not names:
        rprint(f"[yellow]No catalog entry for '{table}'.[/yellow] Known tables: {', '.join(known_tables())}")
        raise typer.Exit(1)
    typer.echo("\n".join(names))


@app.command("config-show")
def config_show(profile: ProfileOpt = None) -> None:
    """Show resolved configuration (masks credentials)."""
    settings = get_settings(profile=profile)

    def mask(val: str | None) -> str:
        if not val:
            return "[dim](not set)[/dim]"
        if len(val) <= 5:
            return "***"
        return f"...{val[-5:]}"

    table = Table(title="ebrain Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("profile", resolve_profile(profile) or "[dim](none)[/dim]")
    table.add_row("redmine_url", settings.redmine_url)
    table.add_row("redmine_api_key", mask(settings.redmine_api_key.get_secret_value()))
    table.add_row("snow_instance", settings.snow_instance or "[dim](not set)[/dim]")
    table.add_row("snow_user", settings.snow_user or "[dim](not set)[/dim]")
    table.add_row("snow_pass", mask(settings.snow_pass.get_secret_value() if settings.snow_pass else None))
    table.add_row("snow_token", mask(settings.snow_token.get_secret_value() if settings.snow_token else None))
    table.add_row("openai_model", settings.openai_model)

    rprint(table)


@app.command("set-default")
def set_default(
    profile: Annotated[str, typer.Argument(help="Profile name to set as default")],
) -> None:
    """Set the default profile in ~/.config/ebrain/config.toml."""
    if not CONFIG_PATH.exists():
        rprint(f"[red]No config file at {CONFIG_PATH}. Add a \\[{profile}] table first.[/red]")
        raise typer.Exit(1)

    doc = tomlkit.load(CONFIG_PATH.open())
    profiles = _list_profiles(doc)
    if profile not in profiles:
        rprint(f"[red]Profile '{profile}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}[/red]")
        raise typer.Exit(1)

    doc["default_profile"] = profile
    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')

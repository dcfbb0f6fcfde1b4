"""CLI interface for mudrules."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from mudrules.config import EngineSettings, ImportSettings, SandboxSettings, ScriptLanguage, set_settings
from mudrules.formatters import format_bundle_as_json, load_bundle_file, write_bundle_file
from mudrules.importers import ImportFormat, import_summary, parse_with_report
from mudrules.models import RuleBundle
from mudrules.rulebook import Rulebook
from mudrules.sandbox import Capabilities
from mudrules.session import AutomationSession

console = Console()


def setup_logging(log_level: str) -> None:
    """Configure logging with rich handler."""
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_bundle_or_exit(path: Path) -> RuleBundle:
    try:
        return load_bundle_file(path)
    except ValidationError as e:
        console.print(f"[bold red]Error:[/bold red] {path} is not a rule bundle: {e}")
        sys.exit(1)


def _bundle_table(bundle: RuleBundle) -> Table:
    """Build a table with one row per rule kind."""
    counts = Rulebook(bundle).counts()
    table = Table(title="Rule bundle")
    table.add_column("Kind", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Active", justify="right", style="green")

    for kind, total in counts.items():
        active = sum(1 for rule in getattr(bundle, kind) if rule.active)
        table.add_row(kind, str(total), str(active))
    return table


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    help="Set the logging level",
)
@click.pass_context
def main(ctx: click.Context, log_level: str) -> None:
    """Automation rules for text-based game sessions."""
    setup_logging(log_level.upper())
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level


@main.command(name="import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "import_format",
    type=click.Choice([f.value for f in ImportFormat], case_sensitive=False),
    required=True,
    help="Dialect of the input file",
)
@click.option(
    "--script-language",
    type=click.Choice([lang.value for lang in ScriptLanguage], case_sensitive=False),
    default=ScriptLanguage.LUA.value,
    help="Language of generated scripts (default: lua)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file path (default: stdout)",
)
def import_command(
    file: Path,
    import_format: str,
    script_language: str,
    output: Path | None,
) -> None:
    """Convert a legacy client configuration into a rule bundle."""
    raw_text = file.read_text(encoding="utf-8", errors="replace")
    settings = ImportSettings(script_language=ScriptLanguage(script_language.lower()))
    result = parse_with_report(import_format, raw_text, settings)

    if output is None:
        click.echo(format_bundle_as_json(result.bundle))
    else:
        write_bundle_file(result.bundle, output)
        console.print(f"[green]Wrote[/green] {output}")

    summary = import_summary(result.bundle, len(result.referenced_sounds))
    Console(stderr=True).print(f"[bold]Imported:[/bold] {summary}")
    if result.referenced_sounds:
        Console(stderr=True).print(
            f"[dim]Sounds referenced: {', '.join(result.referenced_sounds)}[/dim]"
        )


@main.command()
@click.argument("bundle_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def summary(bundle_file: Path) -> None:
    """Show what a rule bundle contains."""
    bundle = _load_bundle_or_exit(bundle_file)
    console.print(_bundle_table(bundle))


async def _replay(session: AutomationSession, lines: list[str]) -> int:
    fired = 0
    async with session:
        for line in lines:
            matches = await session.handle_line(line)
            fired += len(matches)
    return fired


@main.command()
@click.argument("bundle_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("log_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--backend",
    type=click.Choice([lang.value for lang in ScriptLanguage], case_sensitive=False),
    default=ScriptLanguage.LUA.value,
    help="Script back-end to run trigger scripts with (default: lua)",
)
def replay(bundle_file: Path, log_file: Path, backend: str) -> None:
    """Feed a session log through the bundle's triggers and print what they do.

    Timers are not scheduled during a replay.
    """
    bundle = _load_bundle_or_exit(bundle_file)
    settings = EngineSettings(sandbox=SandboxSettings(backend=ScriptLanguage(backend.lower())))
    settings.automation.timers_enabled = False
    set_settings(settings)

    capabilities = Capabilities(
        send=lambda command: console.print(f"[bold cyan]> {escape(command)}[/bold cyan]"),
        echo=lambda text: console.print(f"[yellow]{escape(text)}[/yellow]"),
        play_sound=lambda name, volume, loop: console.print(f"[dim]♪ {escape(name)}[/dim]"),
    )
    session = AutomationSession(capabilities, rulebook=Rulebook(bundle), settings=settings)
    lines = log_file.read_text(encoding="utf-8", errors="replace").splitlines()

    fired = asyncio.run(_replay(session, lines))
    console.print(f"\n[bold green]{fired} trigger(s) fired over {len(lines)} line(s)[/bold green]")


if __name__ == "__main__":
    main()

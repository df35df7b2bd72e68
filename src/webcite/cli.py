"""Command-line interface for webcite."""

from __future__ import annotations

import asyncio
import json
from enum import Enum
from typing import Optional

import httpx
import structlog
import typer
from rich.console import Console
from rich.table import Table

from webcite.log import configure_logging
from webcite.models import AttributeType, attribute_to_json
from webcite.options import (
    AiProvider,
    ArchiveOptions,
    AttributeConfig,
    AttributePriority,
    GenerationOptions,
    TranslationProvider,
    parse_priority,
)
from webcite.reference import Reference
from webcite.services import GenerationError, MultiSourceAttributeCollection, ReferenceGenerator
from webcite.settings import Settings, get_settings

console = Console()
app = typer.Typer(help="webcite – citations from web pages")
logger = structlog.get_logger(__name__)


class OutputFormat(str, Enum):
    WIKI = "wiki"
    BIBTEX = "bibtex"
    HARVARD = "harvard"
    ALL = "all"


def _build_attribute_config(priority: Optional[str], field_priorities: list[str]) -> AttributeConfig:
    try:
        base = parse_priority(priority) if priority else AttributePriority()
        priorities: dict[AttributeType, AttributePriority] = {
            attribute_type: base for attribute_type in AttributeType
        }
        for entry in field_priorities:
            name, sep, sources = entry.partition("=")
            if not sep:
                raise ValueError(f"expected FIELD=SOURCES, got {entry!r}")
            priorities[AttributeType(name.strip().lower())] = parse_priority(sources)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return AttributeConfig(priorities=priorities)


async def _handle_cite(target: str, options: GenerationOptions, settings: Settings) -> Reference:
    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        generator = ReferenceGenerator.create(client, settings)
        return await generator.generate(target, options)


def _print_reference(reference: Reference, output: OutputFormat) -> None:
    renderers = {
        OutputFormat.WIKI: reference.wiki,
        OutputFormat.BIBTEX: reference.bibtex,
        OutputFormat.HARVARD: reference.harvard,
    }
    if output is not OutputFormat.ALL:
        typer.echo(renderers[output]())
        return
    for name, render in renderers.items():
        console.rule(name.value)
        typer.echo(render())


@app.command()
def cite(
    target: str = typer.Argument(..., help="URL or path to a saved HTML file"),
    output: OutputFormat = typer.Option(OutputFormat.WIKI, "--format", "-f", help="Citation style"),
    priority: Optional[str] = typer.Option(
        None, help="Comma-separated source order for every field, e.g. schemaorg,opengraph"
    ),
    field_priority: Optional[list[str]] = typer.Option(
        None, "--field-priority", help="Per-field source order, e.g. title=doi,opengraph"
    ),
    source_lang: Optional[str] = typer.Option(None, help="Source language of the title"),
    target_lang: Optional[str] = typer.Option(None, help="Translate the title into this language"),
    translator: TranslationProvider = typer.Option(TranslationProvider.DEEPL, help="Translation service"),
    archive: bool = typer.Option(True, "--archive/--no-archive", help="Look up a Wayback snapshot"),
    create_archive: bool = typer.Option(
        True, "--create-archive/--no-create-archive", help="Request a snapshot when none exists"
    ),
    ai: bool = typer.Option(False, "--ai", help="Fill missing fields with an AI model"),
    ai_provider: AiProvider = typer.Option(AiProvider.OPENAI, help="AI provider"),
    ai_model: Optional[str] = typer.Option(None, help="Override the provider's default model"),
    json_output: bool = typer.Option(False, "--json", help="Print fields and citations as JSON"),
) -> None:
    """Generate a citation for a web page."""
    settings = get_settings()
    configure_logging(settings.log_level)
    options = GenerationOptions.from_settings(
        settings,
        attribute_config=_build_attribute_config(priority, field_priority or []),
        provider=translator,
        source_lang=source_lang,
        target_lang=target_lang,
        archive=ArchiveOptions(include=archive, create_if_missing=create_archive),
        ai_enabled=ai,
        ai_provider=ai_provider,
        ai_model=ai_model,
    )

    async def runner() -> None:
        logger.debug("cli.cite", target=target, format=output.value)
        try:
            reference = await _handle_cite(target, options, settings)
        except GenerationError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(code=1) from exc
        if json_output:
            typer.echo(json.dumps(reference.to_dict(), indent=2, ensure_ascii=False))
            return
        _print_reference(reference, output)

    asyncio.run(runner())


@app.command()
def metadata(
    url: str = typer.Argument(..., help="Page URL"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show what every metadata source reports for a page."""
    settings = get_settings()
    configure_logging(settings.log_level)

    async def runner() -> MultiSourceAttributeCollection:
        async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
            return await ReferenceGenerator.create(client, settings).parse_all_metadata(url)

    try:
        collection = asyncio.run(runner())
    except GenerationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    if json_output:
        typer.echo(json.dumps(collection.to_dict(), indent=2, ensure_ascii=False))
        return
    _print_multi_source(collection)


def _print_multi_source(collection: MultiSourceAttributeCollection) -> None:
    if not collection.values:
        console.print("[yellow]No metadata found.")
        return
    table = Table(title="Metadata by source")
    table.add_column("Field")
    table.add_column("Source")
    table.add_column("Value", overflow="fold")
    for attribute_type, found in collection.values.items():
        default = collection.default_source(attribute_type)
        for source, attribute in found.items():
            value = attribute_to_json(attribute)
            if not isinstance(value, str):
                value = json.dumps(value, ensure_ascii=False)
            marker = "*" if source is default else ""
            table.add_row(attribute_type.value, f"{source.value}{marker}", value)
    console.print(table)


@app.command()
def config(
    json_output: bool = typer.Option(False, "--json", help="Output settings as JSON"),
) -> None:
    """Display the resolved settings."""
    settings = get_settings()
    payload = settings.public_dump()
    if json_output:
        typer.echo(json.dumps(payload, indent=2))
        return
    table = Table(title="webcite settings")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for key, value in payload.items():
        table.add_row(key, "—" if value is None else str(value))
    console.print(table)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """Launch the JSON API."""
    import uvicorn

    uvicorn.run(
        "webcite.web.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


if __name__ == "__main__":
    app()

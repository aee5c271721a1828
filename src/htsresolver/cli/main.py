"""``hts-resolver`` command suite."""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Optional

import click

from ..config import ResolverSettings
from ..document_store import FileDocumentStore
from ..extractor import DocumentRateExtractor
from ..models import HTSEntry
from ..resolver import build_resolver

NOT_FOUND_MESSAGE = "No duty rate available"


def _settings(ctx: click.Context, document: Optional[Path]) -> ResolverSettings:
    settings: ResolverSettings = ctx.obj["settings"]
    if document is not None:
        settings = dataclasses.replace(settings, reference_document=document)
    return settings


def _emit(entry: HTSEntry, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(entry.model_dump(), indent=2, ensure_ascii=False))
        return
    click.echo(f"{entry.hs_code}  {entry.general_rate}  ({entry.percentage:.2%})")
    click.echo(f"  {entry.description}")
    click.echo(f"  source={entry.source} confidence={entry.confidence} unit={entry.unit or '-'}")
    if not entry.is_ad_valorem:
        click.echo("  note: percentage is approximate for non-ad-valorem rates")


@click.group()
@click.option(
    "--log-level",
    default=None,
    help="Logging level (defaults to HTS_LOG_LEVEL or INFO).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]) -> None:
    """HTS duty-rate resolver."""

    settings = ResolverSettings.from_env()
    level_name = (log_level or settings.log_level).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format="[%(levelname)s] %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@click.argument("code")
@click.option(
    "--document",
    type=click.Path(path_type=Path),
    default=None,
    help="Reference schedule (PDF or text) used when the tables miss.",
)
@click.option("--json", "as_json", is_flag=True, help="Emit the entry as JSON.")
@click.pass_context
def lookup(ctx: click.Context, code: str, document: Optional[Path], as_json: bool) -> None:
    """Resolve the general duty rate for CODE."""

    resolver = build_resolver(_settings(ctx, document))
    entry = resolver.get_duty_rate(code)
    if entry is None:
        click.echo(f"{NOT_FOUND_MESSAGE} for {code}")
        ctx.exit(1)
    _emit(entry, as_json)


@cli.command()
@click.argument("code")
@click.option(
    "--document",
    type=click.Path(path_type=Path),
    required=True,
    help="Reference schedule (PDF or text).",
)
@click.option("--json", "as_json", is_flag=True, help="Emit the entry as JSON.")
@click.pass_context
def extract(ctx: click.Context, code: str, document: Path, as_json: bool) -> None:
    """Read CODE's general rate from the reference document only."""

    settings = _settings(ctx, document)
    extractor = DocumentRateExtractor(
        FileDocumentStore(),
        str(document),
        window=settings.scan_window,
        verify_radius=settings.verify_radius,
    )
    entry = extractor.extract(code)
    if entry is None:
        click.echo(f"{NOT_FOUND_MESSAGE} for {code} in {document.name}")
        ctx.exit(1)
    _emit(entry, as_json)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Emit statistics as JSON.")
@click.pass_context
def stats(ctx: click.Context, as_json: bool) -> None:
    """Summarize the bundled rate tables."""

    payload = build_resolver(_settings(ctx, None)).statistics()
    if as_json:
        click.echo(json.dumps(payload, indent=2))
        return
    for table in payload["tables"]:
        click.echo(f"{table['name']}: {table['total_codes']} codes, {table['free_rates']} free")
    click.echo(f"total: {payload['total_table_codes']} codes")
    click.echo(f"recommendation: {payload['recommended_action']}")


if __name__ == "__main__":
    cli()

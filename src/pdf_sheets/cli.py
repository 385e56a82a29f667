"""Click CLI for pdf-sheets: convert, inspect."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
import fitz  # PyMuPDF

from pdf_sheets.config import ConfigError, ConversionConfig, load_config
from pdf_sheets.convert import (
    DocumentEmptyError,
    convert_pdf_to_xlsx,
    default_output_path,
    pdf_to_sheets,
)


def parse_page_ranges(ranges: str | None) -> list[int] | None:
    """Parse ``"1,3-5"`` into ``[1, 3, 4, 5]``; None or empty means all pages."""
    if not ranges:
        return None

    pages: list[int] = []
    for part in ranges.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            first, last = part.split("-", 1)
            start, end = int(first), int(last)
            if start > end:
                raise ValueError(f"Descending page range: {part}")
            pages.extend(range(start, end + 1))
        else:
            pages.append(int(part))

    if any(p < 1 for p in pages):
        raise ValueError("Page numbers start at 1")
    return sorted(set(pages))


def _pages_option(_ctx: click.Context, _param: click.Parameter, value: str | None) -> list[int] | None:
    try:
        return parse_page_ranges(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def _load(config_path: str | None) -> ConversionConfig:
    if config_path is None:
        return ConversionConfig()
    try:
        return load_config(config_path)
    except ConfigError as exc:
        click.echo(str(exc), err=True)
        sys.exit(2)


@click.group()
@click.option("--verbose", "-v", count=True, help="-v for info logging, -vv for debug.")
def main(verbose: int) -> None:
    """pdf-sheets: extract tables from PDF text into spreadsheets."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


@main.command()
@click.argument("pdf_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", default=None, help="Output XLSX path (default: PDF name with .xlsx)")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="JSON configuration file")
@click.option("--pages", "-p", default=None, callback=_pages_option, help="Pages to convert, e.g. 1,3-5")
@click.option("--page-numbers/--no-page-numbers", default=None, help="Use page numbers in sheet names")
@click.option("--multiple-tables/--single-table", default=None,
              help="Name several tables on one page P<n>-T<m>")
@click.option("--bold/--no-bold", default=None, help="Bold the first row of each sheet")
@click.option("--filter/--no-filter", "auto_filter", default=None, help="Add an autofilter")
@click.option("--autofit/--no-autofit", default=None, help="Size columns to their content")
def convert(
    pdf_path: str,
    output: str | None,
    config_path: str | None,
    pages: list[int] | None,
    page_numbers: bool | None,
    multiple_tables: bool | None,
    bold: bool | None,
    auto_filter: bool | None,
    autofit: bool | None,
) -> None:
    """Convert the tables of a PDF into an XLSX workbook."""
    config = _load(config_path)

    overrides = {
        "include_page_numbers": page_numbers,
        "detect_multiple_tables": multiple_tables,
        "bold_headers": bold,
        "auto_filter": auto_filter,
        "auto_fit_columns": autofit,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        config = config.model_copy(update={"workbook": config.workbook.model_copy(update=overrides)})

    def _progress(page: int, total: int) -> None:
        click.echo(f"Processing page {page} ({total} selected)...")

    destination = Path(output) if output else default_output_path(pdf_path)
    try:
        result = convert_pdf_to_xlsx(
            pdf_path, destination, pages=pages, config=config, on_progress=_progress,
        )
    except DocumentEmptyError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    except fitz.FileDataError as exc:
        click.echo(f"Error: cannot read {pdf_path}: {exc}", err=True)
        sys.exit(1)

    click.echo(
        f"Converted {result.table_count} table(s) to {destination} "
        f"(average confidence: {result.average_confidence * 100:.0f}%)"
    )


@main.command()
@click.argument("pdf_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="JSON configuration file")
@click.option("--pages", "-p", default=None, callback=_pages_option, help="Pages to inspect, e.g. 1,3-5")
def inspect(pdf_path: str, config_path: str | None, pages: list[int] | None) -> None:
    """List the tables detected on each page without writing a workbook."""
    config = _load(config_path)
    try:
        result = pdf_to_sheets(pdf_path, pages=pages, config=config)
    except DocumentEmptyError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    except fitz.FileDataError as exc:
        click.echo(f"Error: cannot read {pdf_path}: {exc}", err=True)
        sys.exit(1)

    for sheet in result.sheets:
        rows, cols = sheet.shape
        if sheet.is_fallback:
            click.echo(f"page {sheet.page:>3}  {sheet.sheet_name:<31}  no table (text only)")
            continue
        line = f"page {sheet.page:>3}  {sheet.sheet_name:<31}  {rows}x{cols}  confidence {sheet.confidence:.2f}"
        if sheet.merge_hints:
            line += f"  merge hints {len(sheet.merge_hints)}"
        click.echo(line)

"""PDF to workbook conversion workflow.

Three layers, from pure to convenient:

1. :func:`page_to_sheets` — one page's text-layer records to sheets. Pure
   computation, no I/O.
2. :func:`items_to_sheets` / :func:`pdf_to_sheets` — every page of a
   document, in page order, with a per-page progress callback.
3. :func:`convert_pdf_to_xlsx` — read the PDF, detect, write the XLSX.

Usage::

    from pdf_sheets.convert import convert_pdf_to_xlsx

    result = convert_pdf_to_xlsx("statement.pdf")
    print(result.table_count, f"{result.average_confidence:.0%}")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from pdf_sheets.config import ConversionConfig
from pdf_sheets.fragments import extract_fragments
from pdf_sheets.serialize import to_xlsx
from pdf_sheets.sheets import SheetOutput, make_sheet_name
from pdf_sheets.table_detect import (
    detect_merged_cells,
    detect_tables,
    is_vacuous,
    reconstruct_cells,
)
from pdf_sheets.text_layer import iter_pdf_text_items

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class DocumentEmptyError(Exception):
    """Raised when no table and no text could be extracted from a document."""

    def __init__(self, message: str = "No tables or text could be extracted from the PDF"):
        super().__init__(message)


@dataclass
class ConversionResult:
    """Sheets produced from a document, in page order.

    Attributes:
        sheets: One :class:`SheetOutput` per detected table or page fallback.
        page_count: Number of pages processed.
        pages_with_output: Number of processed pages that produced a sheet.
        output_path: Where the workbook was written, if it was.
    """

    sheets: list[SheetOutput] = field(default_factory=list)
    page_count: int = 0
    pages_with_output: int = 0
    output_path: Path | None = None

    @property
    def table_count(self) -> int:
        return len(self.sheets)

    @property
    def average_confidence(self) -> float:
        if not self.sheets:
            return 0.0
        return sum(s.confidence or 0.0 for s in self.sheets) / len(self.sheets)


# ─── Layer 1: one page ───────────────────────────────────────────────────────


def page_to_sheets(
    records: Sequence[Mapping],
    page: int,
    *,
    sheet_offset: int = 0,
    config: ConversionConfig | None = None,
) -> list[SheetOutput]:
    """Detect the tables of one page and turn them into sheets.

    Args:
        records: Raw text-layer records of the page.
        page: 1-based page number.
        sheet_offset: Number of sheets already produced for earlier pages;
            numbers sheets when page numbers are left out of names.
        config: Detection and naming configuration.

    Returns:
        One sheet per non-vacuous detected table, a single fallback sheet
        holding all page text when no table was detected, or an empty list
        for a page without text.
    """
    config = config or ConversionConfig()
    naming = config.workbook

    fragments = extract_fragments(records)
    if not fragments:
        logger.debug("No text found on page %d", page)
        return []

    tables = detect_tables(fragments, config.detection)

    if not tables:
        logger.debug("No tables detected on page %d", page)
        name = f"Page {page}" if naming.include_page_numbers else f"Sheet {sheet_offset + 1}"
        return [SheetOutput(
            data=[[" ".join(f.text for f in fragments)]],
            sheet_name=name[: naming.max_sheet_name_length],
            page=page,
            is_fallback=True,
        )]

    sheets: list[SheetOutput] = []
    for index, table in enumerate(tables, start=1):
        cells = reconstruct_cells(table.rows, table.columns)
        if is_vacuous(cells):
            logger.debug("Skipping empty table %d on page %d", index, page)
            continue

        sheets.append(SheetOutput(
            data=cells,
            sheet_name=make_sheet_name(
                page,
                table_index=index,
                table_count=len(tables),
                sheet_number=sheet_offset + len(sheets) + 1,
                config=naming,
            ),
            page=page,
            confidence=table.confidence,
            grid_density=table.grid_density,
            consistency=table.consistency,
            merge_hints=detect_merged_cells(cells, table.columns, config.detection),
        ))
    return sheets


# ─── Layer 2: whole document ─────────────────────────────────────────────────


def items_to_sheets(
    pages: Sequence[tuple[int, Sequence[Mapping]]],
    *,
    config: ConversionConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> ConversionResult:
    """Convert already-read text-layer records of several pages.

    Args:
        pages: ``(page_number, records)`` pairs in page order.
        config: Detection and naming configuration.
        on_progress: Called as ``on_progress(page_number, page_count)``
            before each page is processed. Purely informational.

    Raises:
        DocumentEmptyError: If no sheet results from any page.
    """
    config = config or ConversionConfig()
    result = ConversionResult(page_count=len(pages))

    for page_number, records in pages:
        if on_progress is not None:
            on_progress(page_number, len(pages))
        sheets = page_to_sheets(
            records, page_number, sheet_offset=len(result.sheets), config=config,
        )
        if sheets:
            result.pages_with_output += 1
        result.sheets.extend(sheets)

    if not result.sheets:
        raise DocumentEmptyError()
    return result


def pdf_to_sheets(
    pdf_input: str | bytes | Path,
    *,
    pages: list[int] | None = None,
    config: ConversionConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> ConversionResult:
    """Read a PDF's text layer and detect the tables on each page.

    Args:
        pdf_input: Path to PDF file (str or Path), or raw PDF bytes.
        pages: Optional 1-based page numbers to process. If None, all pages
            are processed.
        config: Detection and naming configuration.
        on_progress: Per-page progress callback, see :func:`items_to_sheets`.
    """
    page_items = list(iter_pdf_text_items(pdf_input, pages=pages))
    return items_to_sheets(page_items, config=config, on_progress=on_progress)


# ─── Layer 3: PDF in, XLSX out ───────────────────────────────────────────────


def default_output_path(pdf_path: str | Path) -> Path:
    """``reports/q3.pdf`` -> ``reports/q3.xlsx``."""
    return Path(pdf_path).with_suffix(".xlsx")


def convert_pdf_to_xlsx(
    pdf_input: str | bytes | Path,
    output: str | Path | BinaryIO | None = None,
    *,
    pages: list[int] | None = None,
    config: ConversionConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> ConversionResult:
    """Convert a PDF into an XLSX workbook with one sheet per table.

    Args:
        pdf_input: Path to PDF file (str or Path), or raw PDF bytes.
        output: Destination path or binary file object. Defaults to the
            input path with an ``.xlsx`` suffix; required for bytes input.
        pages: Optional 1-based page numbers to process.
        config: Detection, naming and formatting configuration.
        on_progress: Per-page progress callback.

    Raises:
        DocumentEmptyError: If nothing could be extracted.
        ValueError: If *pdf_input* is bytes and no *output* is given.
    """
    if output is None:
        if isinstance(pdf_input, bytes):
            raise ValueError("An output path is required when converting PDF bytes")
        output = default_output_path(pdf_input)

    config = config or ConversionConfig()
    result = pdf_to_sheets(pdf_input, pages=pages, config=config, on_progress=on_progress)

    written = to_xlsx(result.sheets, output, config.workbook)
    result.output_path = Path(written) if written is not None else None

    logger.info(
        "Converted %d table(s) from %d page(s); average confidence %.0f%%",
        result.table_count,
        result.page_count,
        result.average_confidence * 100,
    )
    return result

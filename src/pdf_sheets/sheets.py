"""Sheet-level output records, naming and column-width hints."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from pdf_sheets.config import WorkbookConfig
from pdf_sheets.table_detect import MergeSpanHint

MIN_COLUMN_WIDTH = 10
MAX_COLUMN_WIDTH = 50


@dataclass
class SheetOutput:
    """One worksheet worth of data: a detected table or a page fallback.

    Attributes:
        data: Rectangular grid of cell strings.
        sheet_name: Name for the worksheet, already truncated.
        page: 1-based page number the data came from.
        confidence: Detection confidence in ``[0, 1]``; 0 for fallbacks.
        grid_density: Validator density for detected tables.
        consistency: Validator column consistency for detected tables.
        merge_hints: Advisory merge-span hints; writers may ignore them.
        is_fallback: True when no table was detected and ``data`` holds the
            page text as a single cell.
    """

    data: list[list[str]]
    sheet_name: str
    page: int
    confidence: float = 0.0
    grid_density: float | None = None
    consistency: float | None = None
    merge_hints: list[MergeSpanHint] = field(default_factory=list)
    is_fallback: bool = False

    @property
    def shape(self) -> tuple[int, int]:
        return len(self.data), max((len(row) for row in self.data), default=0)


def calculate_column_widths(grid: Sequence[Sequence[str]]) -> list[int]:
    """Character-count width hint per column, clamped to ``[10, 50]``.

    Rows shorter than the widest row count as empty in the missing columns.
    """
    if not grid:
        return []

    col_count = max(len(row) for row in grid)
    widths: list[int] = []
    for col in range(col_count):
        width = MIN_COLUMN_WIDTH
        for row in grid:
            text = row[col] if col < len(row) else ""
            width = max(width, min(max(len(text or ""), MIN_COLUMN_WIDTH), MAX_COLUMN_WIDTH))
        widths.append(width)
    return widths


def make_sheet_name(
    page: int,
    *,
    table_index: int = 1,
    table_count: int = 1,
    sheet_number: int = 1,
    config: WorkbookConfig | None = None,
) -> str:
    """Derive a worksheet name for a table.

    Args:
        page: 1-based page number.
        table_index: 1-based index of the table on its page.
        table_count: Number of tables detected on the page.
        sheet_number: 1-based position of the sheet in the workbook, used
            when page numbers are not part of the name.
        config: Naming toggles and length limit.

    Examples: ``"P12-T2"`` for the second of several tables on page 12,
    ``"Page 3"`` for a lone table, ``"Table 4"`` / ``"Sheet 4"`` without
    page numbers.
    """
    config = config or WorkbookConfig()

    if config.detect_multiple_tables and table_count > 1:
        name = f"P{page}-T{table_index}" if config.include_page_numbers else f"Table {sheet_number}"
    else:
        name = f"Page {page}" if config.include_page_numbers else f"Sheet {sheet_number}"

    return name[: config.max_sheet_name_length]

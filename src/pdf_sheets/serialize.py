"""Serialization of detected sheets to XLSX, CSV and pandas.

Usage::

    from pdf_sheets import pdf_to_sheets, to_xlsx, to_pandas

    result = pdf_to_sheets("statement.pdf")

    # One worksheet per detected table
    to_xlsx(result.sheets, "statement.xlsx")

    # First table as a DataFrame with its first row as header
    df = to_pandas(result.sheets[0], header=True)

The XLSX writer applies the :class:`~pdf_sheets.config.WorkbookConfig`
formatting: bold first row, an autofilter over the occupied range, and
column widths from :func:`~pdf_sheets.sheets.calculate_column_widths`.
"""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Sequence
from pathlib import Path
from typing import BinaryIO, TYPE_CHECKING

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from pdf_sheets.config import WorkbookConfig
from pdf_sheets.sheets import SheetOutput, calculate_column_widths

if TYPE_CHECKING:
    import pandas as pd

# Characters Excel does not accept in worksheet titles
_INVALID_TITLE_CHARS = re.compile(r"[\[\]:*?/\\]")


# ─── Workbook ────────────────────────────────────────────────────────────────


def _clean(text: str) -> str:
    """Drop control characters that openpyxl refuses to store in a cell."""
    return ILLEGAL_CHARACTERS_RE.sub("", text)


def _unique_title(name: str, used: set[str], max_length: int) -> str:
    """Return *name*, or a ``"name (n)"`` variant not yet in *used*.

    Excel compares sheet titles case-insensitively; *used* holds lowercased
    titles.
    """
    base = _INVALID_TITLE_CHARS.sub("_", name)[:max_length].strip() or "Sheet"
    title = base
    n = 2
    while title.lower() in used:
        suffix = f" ({n})"
        title = base[: max_length - len(suffix)] + suffix
        n += 1
    used.add(title.lower())
    return title


def build_workbook(
    sheets: Sequence[SheetOutput],
    config: WorkbookConfig | None = None,
) -> Workbook:
    """Build an openpyxl workbook with one worksheet per sheet, in order."""
    config = config or WorkbookConfig()

    wb = Workbook()
    wb.remove(wb.active)
    used: set[str] = set()

    for sheet in sheets:
        ws = wb.create_sheet(title=_unique_title(sheet.sheet_name, used, config.max_sheet_name_length))
        for row in sheet.data:
            ws.append([_clean(text) for text in row])

        if not sheet.data:
            continue

        if config.auto_fit_columns:
            for i, width in enumerate(calculate_column_widths(sheet.data), start=1):
                ws.column_dimensions[get_column_letter(i)].width = width

        if config.auto_filter:
            ws.auto_filter.ref = ws.dimensions

        if config.bold_headers:
            for cell in ws[1]:
                if cell.value is not None:
                    cell.font = Font(bold=True)

    return wb


def to_xlsx(
    sheets: Sequence[SheetOutput],
    output: str | Path | BinaryIO,
    config: WorkbookConfig | None = None,
) -> Path | None:
    """Write *sheets* to an XLSX workbook.

    Args:
        sheets: Sheets to write, one worksheet each.
        output: Destination path, or a writable binary file object.
        config: Formatting toggles.

    Returns:
        The destination path when *output* is a path, otherwise None.

    Raises:
        ValueError: If *sheets* is empty; a workbook needs one worksheet.
    """
    if not sheets:
        raise ValueError("Cannot write a workbook without sheets")

    wb = build_workbook(sheets, config)
    if isinstance(output, (str, Path)):
        path = Path(output)
        wb.save(path)
        return path
    wb.save(output)
    return None


# ─── Flat formats ────────────────────────────────────────────────────────────


def to_csv(
    sheet: SheetOutput,
    *,
    path: str | Path | None = None,
) -> str | None:
    """Serialize one sheet's grid to CSV.

    Args:
        sheet: Sheet to serialize.
        path: If provided, write to this file path and return None.
            If None, return CSV as a string.
    """
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerows(sheet.data)
    csv_str = output.getvalue()

    if path is not None:
        Path(path).write_text(csv_str, encoding="utf-8")
        return None

    return csv_str


def to_pandas(sheet: SheetOutput, *, header: bool = False) -> pd.DataFrame:
    """Convert one sheet's grid to a pandas DataFrame of strings.

    Requires ``pandas`` to be installed. Install with::

        pip install pdf-sheets[dataframes]

    Args:
        sheet: Sheet to convert.
        header: If True, use the first row as column labels.

    Raises:
        ImportError: If pandas is not installed.
    """
    try:
        import pandas as pd
    except ImportError as e:
        raise ImportError(
            "pandas is required for DataFrame export. "
            "Install it with: pip install pandas "
            "or: pip install pdf-sheets[dataframes]"
        ) from e

    rows = [list(row) for row in sheet.data]
    if header and rows:
        return pd.DataFrame(rows[1:], columns=rows[0], dtype="string")
    return pd.DataFrame(rows, dtype="string")

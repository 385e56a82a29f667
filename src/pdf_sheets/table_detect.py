"""Geometric table detection over positioned text fragments.

Pipeline for one page::

    fragments -> group_by_y -> cluster_x_positions -> validate_table_grid
              -> (rejected) detect_multiple_tables
              -> reconstruct_cells -> detect_merged_cells

Rows are grouped against the y of the first fragment placed in a row,
while columns are clustered against the running mean of a cluster. The
two strategies differ on purpose; unifying them changes the output on
pages with tightly packed baselines.

Column ``i`` covers ``[columns[i], columns[i + 1])``. The last column has
no right boundary and covers ``[columns[-1], columns[-1] + LAST_COLUMN_EXTENT)``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from pdf_sheets.config import DetectionConfig
from pdf_sheets.fragments import TextFragment, round_half_up

logger = logging.getLogger(__name__)

Row = list[TextFragment]

LAST_COLUMN_EXTENT = 1000
MAX_MERGE_SPAN = 5
MERGE_FIT_TOLERANCE = 1.1

_DEFAULTS = DetectionConfig()


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GridValidation:
    """Outcome of scoring a row x column grid."""

    is_valid: bool
    confidence: float
    grid_density: float = 0.0
    consistency: float = 0.0
    reason: str = ""


@dataclass
class CandidateTable:
    """A group of rows and the column boundaries that structure them."""

    rows: list[Row]
    columns: list[int]
    confidence: float
    grid_density: float
    consistency: float

    @property
    def shape(self) -> tuple[int, int]:
        return len(self.rows), len(self.columns)


@dataclass(frozen=True)
class MergeSpanHint:
    """Advisory: the text at (row, col) probably overflows into ``span - 1`` columns."""

    row: int
    col: int
    span: int


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


def group_by_y(
    fragments: Sequence[TextFragment],
    threshold: float = _DEFAULTS.row_threshold,
) -> list[Row]:
    """Group fragments into rows, top of the page first.

    Fragments are visited by descending y. A fragment joins the open row
    when it lies within *threshold* of the row's anchor, the y of the first
    fragment placed in it; otherwise it opens a new row and becomes its
    anchor.
    """
    if not fragments:
        return []

    ordered = sorted(fragments, key=lambda f: -f.y)
    rows: list[Row] = []
    current: Row = [ordered[0]]
    anchor_y = ordered[0].y

    for fragment in ordered[1:]:
        if abs(fragment.y - anchor_y) <= threshold:
            current.append(fragment)
        else:
            rows.append(current)
            current = [fragment]
            anchor_y = fragment.y

    rows.append(current)
    return rows


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------


def extract_x_positions(rows: Sequence[Row]) -> list[int]:
    """Distinct rounded x origins of every fragment, ascending."""
    return sorted({round_half_up(f.x) for row in rows for f in row})


def cluster_x_positions(
    x_positions: Sequence[float],
    threshold: float = _DEFAULTS.column_threshold,
) -> list[int]:
    """Collapse nearby x positions into column boundaries.

    Values are visited in ascending order; a value joins the open cluster
    when it is within *threshold* of the cluster's current mean. Each
    cluster becomes its rounded mean, so the result is strictly ascending.
    """
    if not x_positions:
        return []

    ordered = sorted(x_positions)
    boundaries: list[int] = []
    cluster_sum = ordered[0]
    cluster_size = 1

    for x in ordered[1:]:
        if abs(x - cluster_sum / cluster_size) <= threshold:
            cluster_sum += x
            cluster_size += 1
        else:
            boundaries.append(round_half_up(cluster_sum / cluster_size))
            cluster_sum = x
            cluster_size = 1

    boundaries.append(round_half_up(cluster_sum / cluster_size))
    return boundaries


def detect_columns(
    rows: Sequence[Row],
    threshold: float = _DEFAULTS.column_threshold,
) -> list[int]:
    """Column boundaries shared by *rows*."""
    return cluster_x_positions(extract_x_positions(rows), threshold)


def column_range(columns: Sequence[int], index: int) -> tuple[int, int]:
    """Half-open ``[start, end)`` x range of column *index*."""
    start = columns[index]
    if index < len(columns) - 1:
        return start, columns[index + 1]
    return start, start + LAST_COLUMN_EXTENT


def _fragments_in(row: Row, start: int, end: int) -> list[TextFragment]:
    return [f for f in row if start <= f.x < end]


def _has_text_in(row: Row, start: int, end: int) -> bool:
    return any(start <= f.x < end for f in row)


# ---------------------------------------------------------------------------
# Grid validation
# ---------------------------------------------------------------------------


def calculate_grid_density(rows: Sequence[Row], columns: Sequence[int]) -> float:
    """Fraction of (row, column) cells holding at least one fragment."""
    if not rows or not columns:
        return 0.0

    filled = 0
    for row in rows:
        for i in range(len(columns)):
            if _has_text_in(row, *column_range(columns, i)):
                filled += 1
    return filled / (len(rows) * len(columns))


def measure_column_consistency(rows: Sequence[Row], columns: Sequence[int]) -> float:
    """Fraction of columns populated in at least half of the rows."""
    if not rows or not columns:
        return 0.0

    consistent = 0
    for i in range(len(columns)):
        start, end = column_range(columns, i)
        rows_with_text = sum(1 for row in rows if _has_text_in(row, start, end))
        if rows_with_text >= len(rows) * 0.5:
            consistent += 1
    return consistent / len(columns)


def validate_table_grid(
    rows: Sequence[Row],
    columns: Sequence[int],
    config: DetectionConfig = _DEFAULTS,
) -> GridValidation:
    """Decide whether *rows* laid out on *columns* form a table."""
    if len(rows) < config.min_rows or len(columns) < config.min_cols:
        return GridValidation(
            is_valid=False,
            confidence=0.0,
            reason=f"Need at least {config.min_rows} rows and {config.min_cols} columns",
        )

    grid_density = calculate_grid_density(rows, columns)
    consistency = measure_column_consistency(rows, columns)
    is_valid = (
        grid_density >= config.min_grid_density
        and consistency >= config.min_column_consistency
    )
    return GridValidation(
        is_valid=is_valid,
        confidence=(grid_density + consistency) / 2,
        grid_density=grid_density,
        consistency=consistency,
        reason="Valid table structure detected" if is_valid else "Grid structure too irregular",
    )


# ---------------------------------------------------------------------------
# Table detection
# ---------------------------------------------------------------------------


def detect_tables(
    fragments: Sequence[TextFragment],
    config: DetectionConfig = _DEFAULTS,
) -> list[CandidateTable]:
    """Detect the tables formed by one page's fragments.

    The whole page is tried as a single grid first. When that grid is
    rejected the rows are segmented into smaller tables with
    :func:`detect_multiple_tables`. At most ``config.max_tables_per_page``
    tables are returned.
    """
    if not fragments:
        return []

    rows = group_by_y(fragments, config.row_threshold)
    columns = detect_columns(rows, config.column_threshold)
    validation = validate_table_grid(rows, columns, config)

    if validation.is_valid:
        return [CandidateTable(
            rows=rows,
            columns=columns,
            confidence=validation.confidence,
            grid_density=validation.grid_density,
            consistency=validation.consistency,
        )]

    logger.debug("Page grid rejected (%s), segmenting %d rows", validation.reason, len(rows))
    tables = detect_multiple_tables(rows, config)
    if len(tables) > config.max_tables_per_page:
        logger.debug(
            "Keeping %d of %d detected tables", config.max_tables_per_page, len(tables),
        )
        tables = tables[: config.max_tables_per_page]
    return tables


def detect_multiple_tables(
    rows: Sequence[Row],
    config: DetectionConfig = _DEFAULTS,
) -> list[CandidateTable]:
    """Greedily split *rows* into consecutive tables.

    Rows are accumulated top to bottom. After each addition the columns are
    recomputed from the accumulated rows only; as soon as they validate the
    accumulator is emitted as a table and emptied. Rows left over at the
    end never formed a table and are dropped.
    """
    tables: list[CandidateTable] = []
    pending: list[Row] = []

    for row in rows:
        pending.append(row)
        columns = detect_columns(pending, config.column_threshold)
        validation = validate_table_grid(pending, columns, config)

        if validation.is_valid and len(pending) >= config.min_rows:
            tables.append(CandidateTable(
                rows=list(pending),
                columns=columns,
                confidence=validation.confidence,
                grid_density=validation.grid_density,
                consistency=validation.consistency,
            ))
            pending = []

    if pending:
        logger.debug("%d trailing rows did not form a table", len(pending))
    return tables


# ---------------------------------------------------------------------------
# Cells
# ---------------------------------------------------------------------------


def reconstruct_cells(rows: Sequence[Row], columns: Sequence[int]) -> list[list[str]]:
    """Build the rectangular text grid of a table.

    Each cell joins, left to right, the texts of the row's fragments whose
    x falls in the column range.
    """
    grid: list[list[str]] = []
    for row in rows:
        cells: list[str] = []
        for i in range(len(columns)):
            members = sorted(_fragments_in(row, *column_range(columns, i)), key=lambda f: f.x)
            cells.append(" ".join(f.text for f in members).strip())
        grid.append(cells)
    return grid


def is_vacuous(grid: Sequence[Sequence[str]]) -> bool:
    """True when the grid has no rows or only empty cells."""
    return not grid or all(not cell for row in grid for cell in row)


def detect_merged_cells(
    grid: Sequence[Sequence[str]],
    columns: Sequence[int],
    config: DetectionConfig = _DEFAULTS,
) -> list[MergeSpanHint]:
    """Flag cells whose text probably runs into the next columns.

    Text width is estimated as ``len(text) * config.char_width``. A cell
    whose estimate exceeds ``merged_cell_threshold`` of its column width is
    widened one bounded column at a time (at most ``MAX_MERGE_SPAN - 1``);
    the first width that holds the text within 10% yields a hint. The last
    column has no right boundary and is never flagged.
    """
    hints: list[MergeSpanHint] = []
    last = len(columns) - 1

    for r, row in enumerate(grid):
        for c, text in enumerate(row):
            if not text or c >= last:
                continue

            text_width = len(text) * config.char_width
            col_width = columns[c + 1] - columns[c]
            if text_width <= col_width * config.merged_cell_threshold:
                continue

            total_width = col_width
            span = 1
            while span < MAX_MERGE_SPAN and c + span < last:
                total_width += columns[c + span + 1] - columns[c + span]
                span += 1
                if text_width <= total_width * MERGE_FIT_TOLERANCE:
                    hints.append(MergeSpanHint(row=r, col=c, span=span))
                    break

    return hints

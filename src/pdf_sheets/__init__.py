"""pdf-sheets: Extract tables from a PDF's text layer into spreadsheets."""

from pdf_sheets.config import (
    ConfigError,
    ConversionConfig,
    DetectionConfig,
    WorkbookConfig,
    load_config,
)
from pdf_sheets.convert import (
    ConversionResult,
    DocumentEmptyError,
    convert_pdf_to_xlsx,
    items_to_sheets,
    page_to_sheets,
    pdf_to_sheets,
)
from pdf_sheets.fragments import TextFragment, extract_fragments
from pdf_sheets.serialize import build_workbook, to_csv, to_pandas, to_xlsx
from pdf_sheets.sheets import SheetOutput, calculate_column_widths, make_sheet_name
from pdf_sheets.table_detect import (
    CandidateTable,
    GridValidation,
    MergeSpanHint,
    detect_merged_cells,
    detect_tables,
    group_by_y,
    reconstruct_cells,
    validate_table_grid,
)

__all__ = [
    # Core types
    "CandidateTable",
    "ConfigError",
    "ConversionConfig",
    "ConversionResult",
    "DetectionConfig",
    "DocumentEmptyError",
    "GridValidation",
    "MergeSpanHint",
    "SheetOutput",
    "TextFragment",
    "WorkbookConfig",
    # Detection
    "detect_merged_cells",
    "detect_tables",
    "extract_fragments",
    "group_by_y",
    "reconstruct_cells",
    "validate_table_grid",
    # Sheets
    "calculate_column_widths",
    "make_sheet_name",
    # Conversion
    "convert_pdf_to_xlsx",
    "items_to_sheets",
    "load_config",
    "page_to_sheets",
    "pdf_to_sheets",
    # Serialization
    "build_workbook",
    "to_csv",
    "to_pandas",
    "to_xlsx",
]

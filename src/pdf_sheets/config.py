"""Tunable constants for table detection and workbook output.

Defaults reproduce the behaviour of the browser converter this package
grew out of. Every threshold lives here so that detection code never
hardcodes a value per call.

Usage::

    from pdf_sheets.config import ConversionConfig, load_config

    config = ConversionConfig()                  # defaults
    config = load_config("tight_tables.json")    # JSON overrides

A config file mirrors the model layout; omitted keys keep their default::

    {
        "detection": {"row_threshold": 3, "min_grid_density": 0.5},
        "workbook": {"bold_headers": false}
    }
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or fails validation."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class DetectionConfig(BaseModel):
    """Thresholds used by row grouping, column clustering and grid validation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    row_threshold: float = Field(5, ge=0)  # max y-distance to the row anchor
    column_threshold: float = Field(10, ge=0)  # max x-distance to the cluster mean
    min_grid_density: float = Field(0.6, ge=0, le=1)
    min_column_consistency: float = Field(0.7, ge=0, le=1)
    min_rows: int = Field(2, ge=1)
    min_cols: int = Field(2, ge=1)
    merged_cell_threshold: float = Field(0.9, gt=0)
    char_width: float = Field(7.0, gt=0)  # rough rendered width per character
    max_tables_per_page: int = Field(50, ge=1)


class WorkbookConfig(BaseModel):
    """Sheet naming and formatting toggles applied at the writer boundary."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    auto_filter: bool = True
    auto_fit_columns: bool = True
    bold_headers: bool = True
    max_sheet_name_length: int = Field(31, ge=1, le=31)
    include_page_numbers: bool = True
    detect_multiple_tables: bool = True


class ConversionConfig(BaseModel):
    """Complete configuration for a PDF to workbook conversion."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    workbook: WorkbookConfig = Field(default_factory=WorkbookConfig)


def load_config(path: str | Path) -> ConversionConfig:
    """Load a JSON configuration file into a :class:`ConversionConfig`.

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or holds
            unknown keys / out-of-range values.
    """
    try:
        with open(path) as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}", exc) from exc

    try:
        return ConversionConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file {path}:\n{exc}", exc) from exc

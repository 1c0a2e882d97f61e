from __future__ import annotations

import math
import zipfile
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.dataset import Dataset, DatasetKind, Row

"""Tabular file reader (CSV / XLSX).

- CSV: first line is the header, empty lines are skipped and every cell is
  kept as text (no NA conversion, "" for missing cells).
  Header names are kept exactly as written; fields past the last header
  column are dropped, never shifted into the row.
- XLSX: first sheet only, first row is the header, blank rows are skipped,
  missing cells become "". Whole-number floats are returned as int.

Any other extension is a structural error: the read is aborted.
"""

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "TableReadError",
    "UnsupportedFileTypeError",
    "read_rows",
    "read_table",
]

SUPPORTED_EXTENSIONS = (".csv", ".xlsx")


class TableReadError(Exception):
    """Raised when a supported file cannot be parsed."""


class UnsupportedFileTypeError(TableReadError):
    """Raised for files that are neither .csv nor .xlsx."""


def _normalize_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return int(value)
        return value
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _frame_to_rows(df: pd.DataFrame) -> tuple[list[str], list[Row]]:
    columns = [str(c) for c in df.columns.tolist()]
    rows: list[Row] = []
    for raw in df.itertuples(index=False, name=None):
        row = {col: _normalize_cell(val) for col, val in zip(columns, raw, strict=False)}
        if all(v == "" for v in row.values()):
            continue
        rows.append(row)
    return columns, rows


def _read_csv(path: Path) -> pd.DataFrame:
    return pd.read_csv(
        path,
        dtype=str,
        index_col=False,
        keep_default_na=False,
        skip_blank_lines=True,
        encoding="utf-8-sig",
    )


def _read_xlsx(path: Path) -> pd.DataFrame:
    xls = pd.ExcelFile(path)
    if not xls.sheet_names:
        raise TableReadError(f"workbook has no sheets: {path.name}")
    # 先頭シートのみ対象
    return xls.parse(xls.sheet_names[0], dtype=object)


def read_rows(path: Path) -> tuple[list[str], list[Row]]:
    """Read a CSV/XLSX file into (columns, rows).

    Raises:
        UnsupportedFileTypeError: extension is not .csv / .xlsx
        TableReadError: file missing or not parseable
    """
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        ext = suffix.lstrip(".") or "(none)"
        raise UnsupportedFileTypeError(
            f"Unsupported file type: {ext}. Please upload .csv or .xlsx files."
        )
    if not path.exists():
        raise TableReadError(f"file not found: {path}")
    try:
        df = _read_csv(path) if suffix == ".csv" else _read_xlsx(path)
    except TableReadError:
        raise
    except pd.errors.EmptyDataError:
        return [], []
    except (ValueError, OSError, zipfile.BadZipFile, pd.errors.ParserError) as e:
        raise TableReadError(f"failed to read {path.name}: {e}") from e
    return _frame_to_rows(df)


def read_table(path: Path, kind: DatasetKind | str) -> Dataset:
    """Read a file as the given dataset kind."""
    columns, rows = read_rows(path)
    return Dataset(kind=DatasetKind.parse(kind), rows=rows, columns=columns, source=path.name)

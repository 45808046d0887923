"""Data import: CSV and Excel rows, column detection, and column-to-field mapping."""

import csv
import logging
import zipfile
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Iterator, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from certgen.api.models import TextField
from certgen.errors import DataImportError

logger = logging.getLogger(__name__)

CSV_SUFFIXES = (".csv",)
EXCEL_SUFFIXES = (".xlsx", ".xlsm")

# Grid used when fields are created from detected columns
AUTO_MAP_ORIGIN = (100, 150)
AUTO_MAP_STEP = (300, 80)
AUTO_MAP_COLUMNS = 2

SAMPLE_FILENAME = "certificate_data_sample.csv"

SAMPLE_ROWS: list[dict[str, str]] = [
    {
        "Name": "John Smith",
        "Course": "Web Development Bootcamp",
        "Date": "2024-01-15",
        "Grade": "A+",
        "Instructor": "Dr. Sarah Johnson",
        "Institution": "Tech Academy",
    },
    {
        "Name": "Emily Davis",
        "Course": "Data Science Fundamentals",
        "Date": "2024-01-15",
        "Grade": "A",
        "Instructor": "Prof. Michael Chen",
        "Institution": "Tech Academy",
    },
    {
        "Name": "Michael Rodriguez",
        "Course": "Digital Marketing",
        "Date": "2024-01-15",
        "Grade": "B+",
        "Instructor": "Ms. Lisa Wang",
        "Institution": "Tech Academy",
    },
]


def load_rows(path: Path) -> list[dict[str, str]]:
    """
    Read data rows from a CSV or Excel file with a header row.

    Rows whose cells are all blank are dropped; missing cells become "".

    Args:
        path: .csv (UTF-8, BOM tolerated) or .xlsx file. Excel rows come from the active sheet.

    Returns:
        List of column -> value dicts.

    Raises:
        DataImportError: If the file type is unsupported or the file cannot be parsed.
        OSError: If the file cannot be read.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in CSV_SUFFIXES:
        raw_rows = _read_csv(path)
    elif suffix in EXCEL_SUFFIXES:
        raw_rows = _read_excel(path)
    elif suffix == ".xls":
        raise DataImportError(f"{path.name}: legacy .xls workbooks are not supported, save it as .xlsx")
    else:
        raise DataImportError(f"{path.name}: please use a CSV or Excel (.xlsx) file")

    rows = [row for row in raw_rows if any(value.strip() for value in row.values())]
    logger.info(f"Loaded {len(rows)} row(s) from {path.name}")
    return rows


def _read_csv(path: Path) -> list[dict[str, str]]:
    try:
        with open(path, newline="", encoding="utf-8-sig") as f:
            return [
                {key: (value or "") for key, value in raw.items() if key is not None}
                for raw in csv.DictReader(f)
            ]
    except (csv.Error, UnicodeDecodeError) as e:
        raise DataImportError(f"{path.name}: could not parse CSV: {e}") from e


def _read_excel(path: Path) -> list[dict[str, str]]:
    try:
        wb = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
        raise DataImportError(f"{path.name}: could not open workbook: {e}") from e

    try:
        values = wb.active.iter_rows(values_only=True)
        header = next(values, None)
        if header is None:
            return []
        columns = [_cell_text(cell) for cell in header]
        return list(_excel_records(columns, values))
    finally:
        wb.close()


def _excel_records(columns: list[str], values: Iterable[Sequence[Any]]) -> Iterator[dict[str, str]]:
    for cells in values:
        texts = [_cell_text(cell) for cell in cells]
        texts += [""] * (len(columns) - len(texts))
        yield dict(zip(columns, texts))


def _cell_text(value: Any) -> str:
    """Spreadsheet cell as the text a CSV export would hold."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def write_sample_csv(path: Path) -> Path:
    """
    Write a sample data file with typical certificate columns.

    Args:
        path: Target file, or a directory to place SAMPLE_FILENAME in.

    Returns:
        Path of the written file.
    """
    path = Path(path)
    if path.is_dir():
        path = path / SAMPLE_FILENAME

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(SAMPLE_ROWS[0]))
        writer.writeheader()
        writer.writerows(SAMPLE_ROWS)

    logger.info(f"Wrote {len(SAMPLE_ROWS)} sample row(s) to {path}")
    return path


def detect_columns(rows: Sequence[dict[str, str]]) -> list[str]:
    """Column names of the first row, without blank names."""
    if not rows:
        return []
    return [key for key in rows[0] if key.strip()]


def missing_columns(labels: Iterable[str], columns: Sequence[str]) -> list[str]:
    """Field labels that have no matching column."""
    return [label for label in labels if label not in columns]


def validate_rows(rows: Sequence[dict[str, str]], labels: Iterable[str]) -> list[str]:
    """
    Check imported rows against the designed fields.

    Args:
        rows: Imported rows.
        labels: Labels of the designed fields.

    Returns:
        Detected columns.

    Raises:
        DataImportError: If there are no rows or required columns are missing.
    """
    if not rows:
        raise DataImportError("No valid data found in the file")

    columns = detect_columns(rows)
    missing = missing_columns(labels, columns)
    if missing:
        raise DataImportError(f"Missing required columns: {', '.join(missing)}")
    return columns


def auto_map_fields(columns: Sequence[str]) -> list[TextField]:
    """
    Create one field per column, laid out on a two-column grid.

    Args:
        columns: Detected column names.

    Returns:
        New fields labelled after the columns.
    """
    origin_x, origin_y = AUTO_MAP_ORIGIN
    step_x, step_y = AUTO_MAP_STEP
    return [
        TextField(
            label=column,
            x=origin_x + (index % AUTO_MAP_COLUMNS) * step_x,
            y=origin_y + (index // AUTO_MAP_COLUMNS) * step_y,
            width=250,
            height=40,
            font_size=18,
            font_family="Arial",
            color=(0, 0, 0),
            align="center",
        )
        for index, column in enumerate(columns)
    ]

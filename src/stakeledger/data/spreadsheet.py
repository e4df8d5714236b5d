"""Workbook ingest and export using openpyxl.

The engine only sees 2-D arrays of cells; this module is the boundary
that reads them from, and writes them to, .xlsx files.
"""

import os
from collections.abc import Sequence
from typing import Any

from openpyxl import Workbook, load_workbook

from stakeledger.exceptions import ExportError, IngestError
from stakeledger.logging import get_logger

logger = get_logger(__name__)


def read_sheet_rows(path: str) -> list[list[Any]]:
    """Read every row of the first worksheet as a list of cell values.

    Cell values come back as stored (data_only=True): text, numbers, or
    datetimes for date-formatted cells. Empty trailing cells are None.

    Raises:
        IngestError: If the file is missing or is not a readable workbook.
    """
    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
    except Exception as e:
        # missing file, not a zip, or malformed workbook parts
        raise IngestError(f"Failed to read workbook {path}: {e}") from e

    # read_only worksheets parse their XML lazily, while rows are iterated
    try:
        if not workbook.worksheets:
            raise IngestError(f"Workbook {path} has no worksheets")
        worksheet = workbook.worksheets[0]
        rows = [list(row) for row in worksheet.iter_rows(values_only=True)]
    except IngestError:
        raise
    except Exception as e:
        raise IngestError(f"Failed to read worksheet in {path}: {e}") from e
    finally:
        workbook.close()

    logger.info("workbook_read", path=path, rows=len(rows))
    return rows


def write_sheet_rows(
    path: str,
    rows: Sequence[Sequence[Any]],
    sheet_name: str = "Sheet1",
) -> str:
    """Write rows to a single-sheet workbook, overwriting any existing file.

    Returns the absolute path written.

    Raises:
        ExportError: If the file cannot be written.
    """
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_name[:31]  # Excel sheet name limit
    for row in rows:
        worksheet.append(list(row))

    out_dir = os.path.dirname(path)
    try:
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        workbook.save(path)
    except OSError as e:
        raise ExportError(f"Failed to write workbook {path}: {e}") from e

    abs_path = os.path.abspath(path)
    logger.info("workbook_written", path=abs_path, rows=len(rows))
    return abs_path

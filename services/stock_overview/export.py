"""Spreadsheet-friendly CSV export of the stock matrix."""
from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from packages.stock_matrix import MatrixRow, SiteQuantities, StockMatrix

from .config import ExportConfig

LOGGER = logging.getLogger("stockview.overview.export")
BOM = "\ufeff"
TOTAL_LABEL = "TOTAL"


def matrix_headers(matrix: StockMatrix) -> List[str]:
    headers = ["Reference", "Description"]
    for site in matrix.columns:
        headers.extend([f"{site.name} New", f"{site.name} Used"])
    headers.extend(["Total New", "Total Used", "Total", "Possible Units"])
    return headers


def matrix_lines(matrix: StockMatrix) -> List[List[str]]:
    """Return the data lines followed by the totals line."""

    lines = [_row_line(row, matrix) for row in matrix.rows]
    totals = [TOTAL_LABEL, ""]
    for site in matrix.columns:
        totals.extend(_cell_values(matrix.column_totals.get(site.id)))
    grand = matrix.grand_total
    totals.extend([str(grand.total_new), str(grand.total_used), str(grand.total), ""])
    lines.append(totals)
    return lines


def write_matrix_csv(matrix: StockMatrix, handle: TextIO, config: Optional[ExportConfig] = None) -> int:
    """Write ``matrix`` to ``handle`` and return the number of product lines."""

    config = config or ExportConfig()
    if config.include_bom:
        handle.write(BOM)
    writer = csv.writer(handle, delimiter=config.delimiter, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(matrix_headers(matrix))
    writer.writerows(matrix_lines(matrix))
    return len(matrix.rows)


def matrix_to_csv(matrix: StockMatrix, config: Optional[ExportConfig] = None) -> str:
    buffer = io.StringIO()
    write_matrix_csv(matrix, buffer, config)
    return buffer.getvalue()


def export_matrix(matrix: StockMatrix, path: Path, config: Optional[ExportConfig] = None) -> Path:
    """Write the CSV export to ``path``, creating parent directories."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        count = write_matrix_csv(matrix, handle, config)
    LOGGER.info("Exported %d stock matrix rows to %s", count, path)
    return path


def _row_line(row: MatrixRow, matrix: StockMatrix) -> List[str]:
    line = [row.product.reference, row.product.description or ""]
    for site in matrix.columns:
        line.extend(_cell_values(row.quantity_at(site.id)))
    line.extend([str(row.total_new), str(row.total_used), str(row.total), str(row.possible_units)])
    return line


def _cell_values(cell: Optional[SiteQuantities]) -> Sequence[str]:
    if cell is None:
        return ("0", "0")
    return (str(cell.quantity_new), str(cell.quantity_used))


__all__ = ["export_matrix", "matrix_headers", "matrix_lines", "matrix_to_csv", "write_matrix_csv"]

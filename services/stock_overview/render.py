"""Plain-text table rendering of the stock matrix for terminals."""
from __future__ import annotations

from typing import List, Optional, Sequence

from packages.stock_matrix import SiteQuantities, StockMatrix

EMPTY_CELL = "-"


def render_table(matrix: StockMatrix) -> str:
    """Render rows as ``new/used`` cells under one column per storage site."""

    headers = ["Reference"] + [site.name for site in matrix.columns] + ["New", "Used", "Total"]
    body: List[List[str]] = []
    for row in matrix.rows:
        cells = [_format_cell(row.quantity_at(site.id)) for site in matrix.columns]
        body.append(
            [row.product.reference, *cells, str(row.total_new), str(row.total_used), str(row.total)]
        )
    grand = matrix.grand_total
    footer = (
        ["TOTAL"]
        + [_format_cell(matrix.column_totals.get(site.id)) for site in matrix.columns]
        + [str(grand.total_new), str(grand.total_used), str(grand.total)]
    )

    widths = [len(header) for header in headers]
    for line in body + [footer]:
        widths = [max(width, len(value)) for width, value in zip(widths, line)]

    output = [_format_line(headers, widths), _format_line(["-" * width for width in widths], widths)]
    if not body:
        output.append("(no stock matches the current filters)")
    output.extend(_format_line(line, widths) for line in body)
    output.append(_format_line(["=" * width for width in widths], widths))
    output.append(_format_line(footer, widths))
    return "\n".join(output)


def _format_cell(cell: Optional[SiteQuantities]) -> str:
    if cell is None:
        return EMPTY_CELL
    return f"{cell.quantity_new}/{cell.quantity_used}"


def _format_line(values: Sequence[str], widths: Sequence[int]) -> str:
    first, *rest = values
    parts = [first.ljust(widths[0])]
    parts.extend(value.rjust(width) for value, width in zip(rest, widths[1:]))
    return "  ".join(parts).rstrip()


__all__ = ["render_table"]

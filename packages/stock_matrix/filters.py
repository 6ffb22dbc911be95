"""Row predicates applied to the built matrix before sorting."""
from __future__ import annotations

import logging
from typing import Iterable, List

from .model import MatrixParams, MatrixRow

LOGGER = logging.getLogger("stockview.matrix.filters")


def matches_search(row: MatrixRow, search: str) -> bool:
    """Case-insensitive substring match on reference or description."""

    term = search.lower()
    product = row.product
    if term in (product.reference or "").lower():
        return True
    return product.description is not None and term in product.description.lower()


def has_stock_at_site(row: MatrixRow, site_id: str) -> bool:
    # A cell with both counters at zero counts as no stock.
    cell = row.quantity_at(site_id)
    return cell is not None and (cell.quantity_new > 0 or cell.quantity_used > 0)


def belongs_to_assembly(row: MatrixRow, assembly_id: str) -> bool:
    return row.product.in_assembly(assembly_id)


def has_stock(row: MatrixRow) -> bool:
    return row.total != 0


def filter_rows(rows: Iterable[MatrixRow], params: MatrixParams) -> List[MatrixRow]:
    """Apply search, site, assembly and zero-stock predicates in that order.

    Each predicate is skipped when its parameter is empty (or, for the
    zero-stock toggle, when zero-stock rows are requested). The input order
    is preserved.
    """

    selected = list(rows)
    before = len(selected)
    if params.search:
        selected = [row for row in selected if matches_search(row, params.search)]
    if params.site_id:
        selected = [row for row in selected if has_stock_at_site(row, params.site_id)]
    if params.assembly_id:
        selected = [row for row in selected if belongs_to_assembly(row, params.assembly_id)]
    if not params.show_zero_stock:
        selected = [row for row in selected if has_stock(row)]
    LOGGER.debug("Filtered matrix rows: %d -> %d", before, len(selected))
    return selected


__all__ = [
    "belongs_to_assembly",
    "filter_rows",
    "has_stock",
    "has_stock_at_site",
    "matches_search",
]

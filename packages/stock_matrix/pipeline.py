"""One-way stock overview computation: build, filter, sort, total."""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from .builder import ProductLookup, build_matrix, storage_sites
from .filters import filter_rows
from .model import MatrixParams, Site, StockMatrix, StockRecord
from .sorting import sort_rows
from .totals import reduce_columns, reduce_grand_total

LOGGER = logging.getLogger("stockview.matrix")


def compute_stock_matrix(
    records: Iterable[StockRecord],
    sites: Iterable[Site],
    products: Optional[ProductLookup] = None,
    params: Optional[MatrixParams] = None,
    *,
    reject_duplicates: bool = False,
) -> StockMatrix:
    """Recompute the full stock matrix from raw snapshots.

    Totals are reduced over the filtered rows, never the raw ones. Nothing is
    cached between calls.
    """

    params = params or MatrixParams()
    columns = storage_sites(sites)
    rows = build_matrix(records, products, reject_duplicates=reject_duplicates)
    filtered = filter_rows(rows, params)
    ordered = sort_rows(filtered, params.sort_field, params.sort_order)
    matrix = StockMatrix(
        columns=columns,
        rows=tuple(ordered),
        column_totals=reduce_columns(filtered, columns),
        grand_total=reduce_grand_total(filtered),
        params=params,
    )
    LOGGER.debug(
        "Stock matrix: %d of %d rows across %d storage sites",
        len(matrix.rows),
        len(rows),
        len(columns),
    )
    return matrix


__all__ = ["compute_stock_matrix"]

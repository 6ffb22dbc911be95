"""Column and grand totals over the filtered matrix rows."""
from __future__ import annotations

from typing import Dict, Iterable

from .model import GrandTotal, MatrixRow, Site, SiteQuantities


def reduce_columns(rows: Iterable[MatrixRow], sites: Iterable[Site]) -> Dict[str, SiteQuantities]:
    """Sum each storage site's cells across ``rows``.

    Every supplied site gets an entry, even without stock. Cells for sites
    outside ``sites`` are ignored.
    """

    totals: Dict[str, SiteQuantities] = {site.id: SiteQuantities() for site in sites}
    for row in rows:
        for site_id, cell in row.per_site.items():
            if site_id in totals:
                totals[site_id] = totals[site_id] + cell
    return totals


def reduce_grand_total(rows: Iterable[MatrixRow]) -> GrandTotal:
    """Sum the row totals, which may exceed the displayed columns."""

    total_new = 0
    total_used = 0
    for row in rows:
        total_new += row.total_new
        total_used += row.total_used
    return GrandTotal(total_new=total_new, total_used=total_used)


__all__ = ["reduce_columns", "reduce_grand_total"]

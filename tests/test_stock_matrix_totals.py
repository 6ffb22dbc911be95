from __future__ import annotations

from packages.stock_matrix import (
    GrandTotal,
    MatrixParams,
    Site,
    SiteQuantities,
    SiteType,
    StockRecord,
    build_matrix,
    filter_rows,
    reduce_columns,
    reduce_grand_total,
)

SITES = [Site("A", "Annex"), Site("B", "Backroom"), Site("E", "Empty shelf")]


def _records() -> list[StockRecord]:
    return [
        StockRecord("p1", "A", 5, 0),
        StockRecord("p1", "B", 0, 3),
        StockRecord("p1", "OUT", 4, 4),
        StockRecord("p2", "A", 2, 1),
        StockRecord("p3", "B", 0, 0),
    ]


def test_reduce_columns_initialises_every_storage_site() -> None:
    totals = reduce_columns([], SITES)

    assert totals == {"A": SiteQuantities(), "B": SiteQuantities(), "E": SiteQuantities()}


def test_reduce_columns_sums_each_site_cell() -> None:
    rows = build_matrix(_records())

    totals = reduce_columns(rows, SITES)

    assert totals["A"] == SiteQuantities(7, 1)
    assert totals["B"] == SiteQuantities(0, 3)
    assert totals["E"] == SiteQuantities(0, 0)
    assert "OUT" not in totals


def test_grand_total_counts_stock_outside_storage_columns() -> None:
    rows = build_matrix(_records())

    grand = reduce_grand_total(rows)
    columns = reduce_columns(rows, SITES)

    assert grand == GrandTotal(total_new=11, total_used=8)
    assert grand.total == 19
    assert sum(cell.total for cell in columns.values()) == 11


def test_totals_follow_the_filtered_rows() -> None:
    rows = build_matrix(_records())
    filtered = filter_rows(rows, MatrixParams(search="p2"))

    assert reduce_columns(filtered, SITES)["A"] == SiteQuantities(2, 1)
    assert reduce_grand_total(filtered) == GrandTotal(2, 1)


def test_grand_total_matches_columns_when_all_stock_is_in_storage() -> None:
    records = [StockRecord("p1", "A", 3, 1), StockRecord("p2", "B", 0, 6)]
    sites = SITES + [Site("OUT", "Dispatch", type=SiteType.EXIT)]
    rows = build_matrix(records)

    columns = reduce_columns(rows, [site for site in sites if site.is_storage])
    grand = reduce_grand_total(rows)

    assert grand.total_new == sum(cell.quantity_new for cell in columns.values())
    assert grand.total_used == sum(cell.quantity_used for cell in columns.values())


def test_empty_rows_give_zero_grand_total() -> None:
    assert reduce_grand_total([]) == GrandTotal(0, 0)

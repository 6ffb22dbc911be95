from __future__ import annotations

import pytest

from packages.stock_matrix import (
    AssemblyMembership,
    MatrixParams,
    MatrixRow,
    Product,
    SiteQuantities,
    filter_rows,
)


def _row(
    product_id: str,
    reference: str,
    cells: dict[str, tuple[int, int]],
    *,
    description: str | None = None,
    assemblies: tuple[str, ...] = (),
) -> MatrixRow:
    per_site = {site_id: SiteQuantities(new, used) for site_id, (new, used) in cells.items()}
    return MatrixRow(
        product=Product(
            id=product_id,
            reference=reference,
            description=description,
            assemblies=tuple(AssemblyMembership(assembly_id) for assembly_id in assemblies),
        ),
        per_site=per_site,
        total_new=sum(cell.quantity_new for cell in per_site.values()),
        total_used=sum(cell.quantity_used for cell in per_site.values()),
    )


def _rows() -> list[MatrixRow]:
    return [
        _row("p1", "VALVE-10", {"A": (5, 0), "B": (0, 3)}, description="Brass valve", assemblies=("as1",)),
        _row("p2", "PUMP-3", {"A": (0, 0)}, assemblies=("as1", "as2")),
        _row("p3", "Gasket", {"B": (2, 0), "A": (0, 0)}, description="Rubber seal for VALVE"),
        _row("p4", "Écrou M6", {"C": (0, 1)}),
    ]


def _ids(rows: list[MatrixRow]) -> list[str]:
    return [row.product.id for row in rows]


def test_default_params_drop_zero_stock_rows_only() -> None:
    assert _ids(filter_rows(_rows(), MatrixParams())) == ["p1", "p3", "p4"]


def test_search_is_case_insensitive_on_reference_and_description() -> None:
    params = MatrixParams(search="valve", show_zero_stock=True)

    assert _ids(filter_rows(_rows(), params)) == ["p1", "p3"]


def test_search_ignores_missing_description() -> None:
    params = MatrixParams(search="brass", show_zero_stock=True)

    assert _ids(filter_rows(_rows(), params)) == ["p1"]


def test_search_without_match_returns_empty_list() -> None:
    assert filter_rows(_rows(), MatrixParams(search="p1")) == []


def test_site_filter_requires_positive_quantity_at_site() -> None:
    params = MatrixParams(site_id="A", show_zero_stock=True)

    assert _ids(filter_rows(_rows(), params)) == ["p1"]


def test_site_filter_matches_used_only_stock() -> None:
    params = MatrixParams(site_id="B")

    assert _ids(filter_rows(_rows(), params)) == ["p1", "p3"]


def test_assembly_filter_uses_membership_list() -> None:
    params = MatrixParams(assembly_id="as2", show_zero_stock=True)

    assert _ids(filter_rows(_rows(), params)) == ["p2"]


def test_predicates_are_combined() -> None:
    params = MatrixParams(search="valve", site_id="B", assembly_id="as1")

    assert _ids(filter_rows(_rows(), params)) == ["p1"]


@pytest.mark.parametrize(
    "params",
    [
        MatrixParams(),
        MatrixParams(search="e"),
        MatrixParams(site_id="A", show_zero_stock=True),
        MatrixParams(assembly_id="as1"),
    ],
)
def test_filtering_is_idempotent(params: MatrixParams) -> None:
    once = filter_rows(_rows(), params)

    assert filter_rows(once, params) == once


@pytest.mark.parametrize("search", ["", "valve", "A"])
def test_zero_stock_toggle_only_adds_empty_rows(search: str) -> None:
    hidden = filter_rows(_rows(), MatrixParams(search=search))
    shown = filter_rows(_rows(), MatrixParams(search=search, show_zero_stock=True))

    assert set(_ids(hidden)) <= set(_ids(shown))
    extra = [row for row in shown if row.product.id not in _ids(hidden)]
    assert all(row.total == 0 for row in extra)


def test_every_search_result_contains_term() -> None:
    term = "Va"
    for row in filter_rows(_rows(), MatrixParams(search=term, show_zero_stock=True)):
        haystacks = [row.product.reference, row.product.description or ""]
        assert any(term.lower() in text.lower() for text in haystacks)


def test_filter_rows_does_not_modify_input() -> None:
    rows = _rows()
    before = list(rows)

    filter_rows(rows, MatrixParams(search="valve"))

    assert rows == before

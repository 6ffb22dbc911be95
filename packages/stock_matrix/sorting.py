"""Ordering of matrix rows for display."""
from __future__ import annotations

import logging
import unicodedata
from typing import Any, Callable, Dict, Iterable, List, Tuple

from .model import MatrixRow, SortField, SortOrder

LOGGER = logging.getLogger("stockview.matrix.sorting")


CollationKey = Tuple[Tuple[Tuple[int, str], ...], str, str]


def _primary_weight(char: str) -> Tuple[int, str]:
    category = unicodedata.category(char)
    if category.startswith("L"):
        return 2, char
    if category.startswith("N"):
        return 1, char
    return 0, char


def collation_key(text: str) -> CollationKey:
    """Sort key approximating a locale collation for free text.

    Letters compare without regard to accents or case first, so ``"éclair"``
    sits next to ``"eclair"`` and ``"Zinc"`` after ``"apple"``. Spaces,
    punctuation and symbols come before digits, and digits before letters,
    so ``"A_1"`` sorts ahead of ``"A1"``. Accents then case only break ties,
    lowercase first.
    """

    folded = unicodedata.normalize("NFD", (text or "").casefold())
    base = tuple(_primary_weight(char) for char in folded if unicodedata.category(char) != "Mn")
    return base, folded, (text or "").swapcase()


_SORT_KEYS: Dict[SortField, Callable[[MatrixRow], Any]] = {
    SortField.REFERENCE: lambda row: collation_key(row.product.reference),
    SortField.TOTAL_NEW: lambda row: row.total_new,
    SortField.TOTAL_USED: lambda row: row.total_used,
    SortField.TOTAL: lambda row: row.total,
}


def sort_rows(
    rows: Iterable[MatrixRow],
    field: SortField | str = SortField.REFERENCE,
    order: SortOrder | str = SortOrder.ASC,
) -> List[MatrixRow]:
    """Return ``rows`` ordered by ``field``.

    The sort is stable in both directions: descending order inverts the
    comparison rather than reversing the result, so rows with equal keys
    keep their incoming order.
    """

    sort_field = SortField.parse(field)
    sort_order = SortOrder.parse(order)
    ordered = sorted(rows, key=_SORT_KEYS[sort_field], reverse=sort_order is SortOrder.DESC)
    LOGGER.debug("Sorted %d rows by %s %s", len(ordered), sort_field.value, sort_order.value)
    return ordered


__all__ = ["collation_key", "sort_rows"]

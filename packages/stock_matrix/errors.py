"""Exceptions raised by the stock matrix engine."""
from __future__ import annotations


class StockMatrixError(Exception):
    """Base class for stock matrix failures."""


class InvalidArgument(StockMatrixError, ValueError):
    """Raised when a caller supplies a value the engine cannot honour."""


class DuplicateStockRecordError(StockMatrixError):
    """Raised when two stock records share the same product and site."""

    def __init__(self, product_id: str, site_id: str) -> None:
        super().__init__(
            f"Duplicate stock record for product {product_id!r} at site {site_id!r}"
        )
        self.product_id = product_id
        self.site_id = site_id


__all__ = ["DuplicateStockRecordError", "InvalidArgument", "StockMatrixError"]

"""Group flat stock records into one aggregate row per product."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .errors import DuplicateStockRecordError
from .model import MatrixRow, Product, Site, SiteQuantities, StockRecord

LOGGER = logging.getLogger("stockview.matrix.builder")

ProductLookup = Union[Mapping[str, Product], Iterable[Product]]


def storage_sites(sites: Iterable[Site]) -> tuple[Site, ...]:
    """Return the active storage sites, in the order supplied."""

    return tuple(site for site in sites if site.is_storage)


def index_products(products: Optional[ProductLookup]) -> Mapping[str, Product]:
    """Accept either an id mapping or a plain iterable of products."""

    if products is None:
        return {}
    if isinstance(products, Mapping):
        return products
    return {product.id: product for product in products}


def build_matrix(
    records: Iterable[StockRecord],
    products: Optional[ProductLookup] = None,
    *,
    reject_duplicates: bool = False,
) -> List[MatrixRow]:
    """Aggregate ``records`` into matrix rows in first-seen product order.

    A second record for an already seen (product, site) pair replaces the
    per-site cell while the row totals keep accumulating every record, so the
    cells of such a row no longer sum to its totals. A warning is logged. With
    ``reject_duplicates`` set, :class:`DuplicateStockRecordError` is raised
    instead.
    """

    catalogue = index_products(products)
    summaries: Dict[str, _RowAccumulator] = {}
    for record in records:
        summary = summaries.get(record.product_id)
        if summary is None:
            summary = _RowAccumulator(_resolve_product(catalogue, record.product_id))
            summaries[record.product_id] = summary
        if record.site_id in summary.per_site:
            if reject_duplicates:
                raise DuplicateStockRecordError(record.product_id, record.site_id)
            LOGGER.warning(
                "Duplicate stock record for product %s at site %s; keeping the later cell",
                record.product_id,
                record.site_id,
            )
        summary.add(record)

    rows = [summary.freeze() for summary in summaries.values()]
    LOGGER.debug("Built %d matrix rows", len(rows))
    return rows


def _resolve_product(catalogue: Mapping[str, Product], product_id: str) -> Product:
    product = catalogue.get(product_id)
    if product is None:
        LOGGER.debug("Product %s missing from catalogue; using placeholder", product_id)
        return Product.placeholder(product_id)
    return product


class _RowAccumulator:
    """Running per-site cells and totals for a single product."""

    def __init__(self, product: Product) -> None:
        self.product = product
        self.per_site: Dict[str, SiteQuantities] = {}
        self.total_new = 0
        self.total_used = 0

    def add(self, record: StockRecord) -> None:
        self.per_site[record.site_id] = SiteQuantities(record.quantity_new, record.quantity_used)
        self.total_new += record.quantity_new
        self.total_used += record.quantity_used

    def freeze(self) -> MatrixRow:
        return MatrixRow(
            product=self.product,
            per_site=self.per_site,
            total_new=self.total_new,
            total_used=self.total_used,
        )


__all__ = ["build_matrix", "index_products", "storage_sites"]

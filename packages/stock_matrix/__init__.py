"""Cross-tabulation of per-site stock records into a filterable product matrix."""
from .builder import build_matrix, index_products, storage_sites
from .errors import DuplicateStockRecordError, InvalidArgument, StockMatrixError
from .filters import belongs_to_assembly, filter_rows, has_stock, has_stock_at_site, matches_search
from .model import (
    AssemblyMembership,
    GrandTotal,
    MatrixParams,
    MatrixRow,
    Product,
    Site,
    SiteQuantities,
    SiteType,
    SortField,
    SortOrder,
    StockMatrix,
    StockRecord,
    SupplyRisk,
)
from .pipeline import compute_stock_matrix
from .sorting import collation_key, sort_rows
from .totals import reduce_columns, reduce_grand_total

__all__ = [
    "AssemblyMembership",
    "DuplicateStockRecordError",
    "GrandTotal",
    "InvalidArgument",
    "MatrixParams",
    "MatrixRow",
    "Product",
    "Site",
    "SiteQuantities",
    "SiteType",
    "SortField",
    "SortOrder",
    "StockMatrix",
    "StockMatrixError",
    "StockRecord",
    "SupplyRisk",
    "belongs_to_assembly",
    "build_matrix",
    "collation_key",
    "compute_stock_matrix",
    "filter_rows",
    "has_stock",
    "has_stock_at_site",
    "index_products",
    "matches_search",
    "reduce_columns",
    "reduce_grand_total",
    "sort_rows",
    "storage_sites",
]

"""Value types shared by the stock matrix stages."""
from __future__ import annotations

from dataclasses import dataclass, field, replace as _replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import InvalidArgument


class SiteType(str, Enum):
    STORAGE = "STORAGE"
    EXIT = "EXIT"


class SupplyRisk(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class SortField(str, Enum):
    """Row attribute used to order the matrix."""

    REFERENCE = "reference"
    TOTAL_NEW = "totalNew"
    TOTAL_USED = "totalUsed"
    TOTAL = "total"

    @classmethod
    def parse(cls, value: object) -> "SortField":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        member = _SORT_FIELD_ALIASES.get(text) or _SORT_FIELD_ALIASES.get(text.lower())
        if member is None:
            raise InvalidArgument(f"Unsupported sort field: {value!r}")
        return member


_SORT_FIELD_ALIASES: Dict[str, SortField] = {
    "reference": SortField.REFERENCE,
    "totalNew": SortField.TOTAL_NEW,
    "totalnew": SortField.TOTAL_NEW,
    "total_new": SortField.TOTAL_NEW,
    "totalUsed": SortField.TOTAL_USED,
    "totalused": SortField.TOTAL_USED,
    "total_used": SortField.TOTAL_USED,
    "total": SortField.TOTAL,
}


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: object) -> "SortOrder":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value == text:
                return member
        raise InvalidArgument(f"Unsupported sort order: {value!r}")


@dataclass(frozen=True)
class StockRecord:
    """Quantity of one product held at one site."""

    product_id: str
    site_id: str
    quantity_new: int = 0
    quantity_used: int = 0

    def __post_init__(self) -> None:
        if self.quantity_new < 0 or self.quantity_used < 0:
            raise InvalidArgument(
                f"Stock quantities must be non-negative (product {self.product_id!r}, "
                f"site {self.site_id!r})"
            )


@dataclass(frozen=True)
class Site:
    id: str
    name: str
    type: SiteType = SiteType.STORAGE
    is_active: bool = True

    @property
    def is_storage(self) -> bool:
        """Only active storage sites become matrix columns."""

        return self.type == SiteType.STORAGE and self.is_active


@dataclass(frozen=True)
class AssemblyMembership:
    assembly_id: str


@dataclass(frozen=True)
class Product:
    """Product metadata attached to a matrix row."""

    id: str
    reference: str
    description: Optional[str] = None
    supply_risk: Optional[SupplyRisk] = None
    qty_per_unit: int = 1
    assemblies: Tuple[AssemblyMembership, ...] = ()

    def __post_init__(self) -> None:
        if self.qty_per_unit < 1:
            raise InvalidArgument(
                f"Quantity per unit must be at least 1 for product {self.id!r}"
            )
        object.__setattr__(self, "assemblies", tuple(self.assemblies))

    @classmethod
    def placeholder(cls, product_id: str) -> "Product":
        """Stand-in for a product missing from the catalogue."""

        return cls(id=product_id, reference=product_id)

    def in_assembly(self, assembly_id: str) -> bool:
        return any(member.assembly_id == assembly_id for member in self.assemblies)


@dataclass(frozen=True)
class SiteQuantities:
    """New/used counters for a single cell or column."""

    quantity_new: int = 0
    quantity_used: int = 0

    @property
    def total(self) -> int:
        return self.quantity_new + self.quantity_used

    @property
    def is_empty(self) -> bool:
        return self.quantity_new <= 0 and self.quantity_used <= 0

    def __add__(self, other: "SiteQuantities") -> "SiteQuantities":
        if not isinstance(other, SiteQuantities):
            return NotImplemented
        return SiteQuantities(
            quantity_new=self.quantity_new + other.quantity_new,
            quantity_used=self.quantity_used + other.quantity_used,
        )

    def to_dict(self) -> Dict[str, int]:
        return {"quantityNew": self.quantity_new, "quantityUsed": self.quantity_used}


@dataclass(frozen=True)
class MatrixRow:
    """One product aggregated across every site holding a record for it.

    ``per_site`` keeps the order in which sites were first seen. The row
    totals cover all records of the product, storage site or not.
    """

    product: Product
    per_site: Mapping[str, SiteQuantities] = field(default_factory=dict)
    total_new: int = 0
    total_used: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "per_site", MappingProxyType(dict(self.per_site)))

    @property
    def total(self) -> int:
        return self.total_new + self.total_used

    @property
    def possible_units(self) -> int:
        return self.total // self.product.qty_per_unit

    def quantity_at(self, site_id: str) -> Optional[SiteQuantities]:
        return self.per_site.get(site_id)

    def to_dict(self) -> Dict[str, Any]:
        product = self.product
        return {
            "productId": product.id,
            "reference": product.reference,
            "description": product.description,
            "supplyRisk": product.supply_risk.value if product.supply_risk else None,
            "perSite": {site_id: cell.to_dict() for site_id, cell in self.per_site.items()},
            "totalNew": self.total_new,
            "totalUsed": self.total_used,
            "total": self.total,
            "possibleUnits": self.possible_units,
        }


@dataclass(frozen=True)
class GrandTotal:
    total_new: int = 0
    total_used: int = 0

    @property
    def total(self) -> int:
        return self.total_new + self.total_used

    def to_dict(self) -> Dict[str, int]:
        return {"totalNew": self.total_new, "totalUsed": self.total_used, "total": self.total}


@dataclass(frozen=True)
class MatrixParams:
    """Filter and sort options chosen by the operator."""

    search: str = ""
    site_id: str = ""
    assembly_id: str = ""
    show_zero_stock: bool = False
    sort_field: SortField = SortField.REFERENCE
    sort_order: SortOrder = SortOrder.ASC

    def __post_init__(self) -> None:
        object.__setattr__(self, "show_zero_stock", _coerce_bool(self.show_zero_stock))
        object.__setattr__(self, "sort_field", SortField.parse(self.sort_field))
        object.__setattr__(self, "sort_order", SortOrder.parse(self.sort_order))

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, object]]) -> "MatrixParams":
        """Build parameters from camelCase or snake_case keys."""

        if not data:
            return cls()
        return cls(
            search=_coerce_text(_lookup(data, "search")),
            site_id=_coerce_text(_lookup(data, "site_id", "siteId")),
            assembly_id=_coerce_text(_lookup(data, "assembly_id", "assemblyId")),
            show_zero_stock=_coerce_bool(_lookup(data, "show_zero_stock", "showZeroStock")),
            sort_field=SortField.parse(_lookup(data, "sort_field", "sortField") or SortField.REFERENCE),
            sort_order=SortOrder.parse(_lookup(data, "sort_order", "sortOrder") or SortOrder.ASC),
        )

    def replace(self, **changes: Any) -> "MatrixParams":
        return _replace(self, **changes)

    def to_dict(self) -> Dict[str, object]:
        return {
            "search": self.search,
            "siteId": self.site_id,
            "assemblyId": self.assembly_id,
            "showZeroStock": self.show_zero_stock,
            "sortField": self.sort_field.value,
            "sortOrder": self.sort_order.value,
        }


@dataclass(frozen=True)
class StockMatrix:
    """Display-ready cross-tabulation of products against storage sites."""

    columns: Tuple[Site, ...]
    rows: Tuple[MatrixRow, ...]
    column_totals: Mapping[str, SiteQuantities]
    grand_total: GrandTotal
    params: MatrixParams = field(default_factory=MatrixParams)

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "rows", tuple(self.rows))
        object.__setattr__(self, "column_totals", MappingProxyType(dict(self.column_totals)))

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation."""

        return {
            "columns": [{"id": site.id, "name": site.name} for site in self.columns],
            "rows": [row.to_dict() for row in self.rows],
            "columnTotals": {
                site_id: totals.to_dict() for site_id, totals in self.column_totals.items()
            },
            "grandTotal": self.grand_total.to_dict(),
            "params": self.params.to_dict(),
        }


def _lookup(data: Mapping[str, object], *keys: str) -> object:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _coerce_text(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def _coerce_bool(value: object) -> bool:
    if value in (None, ""):
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1", "on"}:
            return True
        if lowered in {"false", "no", "0", "off"}:
            return False
    raise InvalidArgument(f"Invalid boolean value: {value!r}")


__all__ = [
    "AssemblyMembership",
    "GrandTotal",
    "MatrixParams",
    "MatrixRow",
    "Product",
    "Site",
    "SiteQuantities",
    "SiteType",
    "SortField",
    "SortOrder",
    "StockMatrix",
    "StockRecord",
    "SupplyRisk",
]

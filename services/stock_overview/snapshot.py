"""Load the stock overview inputs from a JSON snapshot of the backend lists."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from jsonschema import Draft202012Validator, ValidationError as JsonSchemaValidationError

from packages.stock_matrix import (
    AssemblyMembership,
    MatrixParams,
    Product,
    Site,
    SiteType,
    StockMatrix,
    StockRecord,
    SupplyRisk,
    compute_stock_matrix,
)

SCHEMA_PATH = Path(__file__).with_name("snapshot.schema.json")

with SCHEMA_PATH.open("r", encoding="utf-8") as handle:
    _SCHEMA = json.load(handle)
_VALIDATOR = Draft202012Validator(_SCHEMA)
LOGGER = logging.getLogger("stockview.overview.snapshot")


class SnapshotError(ValueError):
    """Raised when a snapshot cannot be read or does not match the schema."""


@dataclass(frozen=True)
class StockSnapshot:
    """Materialised sites, products and stock records for one computation."""

    records: Tuple[StockRecord, ...]
    sites: Tuple[Site, ...]
    products: Tuple[Product, ...]

    def product_index(self) -> Dict[str, Product]:
        return {product.id: product for product in self.products}

    def compute(
        self, params: Optional[MatrixParams] = None, *, reject_duplicates: bool = False
    ) -> StockMatrix:
        return compute_stock_matrix(
            self.records,
            self.sites,
            self.product_index(),
            params,
            reject_duplicates=reject_duplicates,
        )


def load_snapshot(path: Path) -> StockSnapshot:
    """Read and validate a snapshot file."""

    try:
        text = Path(path).read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise SnapshotError(f"Unable to read snapshot {path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Snapshot {path} is not valid JSON: {exc}") from exc
    snapshot = parse_snapshot(data)
    LOGGER.info(
        "Loaded snapshot %s: %d stock records, %d sites, %d products",
        path,
        len(snapshot.records),
        len(snapshot.sites),
        len(snapshot.products),
    )
    return snapshot


def parse_snapshot(data: Any) -> StockSnapshot:
    """Convert a decoded payload (optionally wrapped in an API envelope)."""

    payload = _unwrap_envelope(data)
    try:
        _VALIDATOR.validate(payload)
    except JsonSchemaValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise SnapshotError(f"Snapshot failed schema validation at {location}: {exc.message}") from exc

    sites = _collect_sites(payload.get("sites") or [], payload.get("stocks") or [])
    products = tuple(_parse_product(entry) for entry in payload.get("products") or [])
    records = tuple(_parse_stock(entry) for entry in payload["stocks"])
    return StockSnapshot(records=records, sites=sites, products=products)


def _unwrap_envelope(data: Any) -> Any:
    if isinstance(data, Mapping) and "data" in data and "stocks" not in data:
        if data.get("success") is False:
            raise SnapshotError(f"Snapshot payload reports failure: {data.get('error') or 'unknown error'}")
        return data["data"]
    return data


def _collect_sites(
    entries: Sequence[Mapping[str, Any]], stocks: Sequence[Mapping[str, Any]]
) -> Tuple[Site, ...]:
    sites: Dict[str, Site] = {}
    for entry in entries:
        site = _parse_site(entry)
        sites[site.id] = site
    # Sites nested in stock entries fill gaps in the site list.
    for stock in stocks:
        nested = stock.get("site")
        if isinstance(nested, Mapping):
            site = _parse_site(nested)
            sites.setdefault(site.id, site)
    return tuple(sites.values())


def _parse_site(entry: Mapping[str, Any]) -> Site:
    return Site(
        id=str(entry["id"]),
        name=str(entry["name"]),
        type=SiteType(entry["type"]),
        is_active=bool(entry.get("isActive", True)),
    )


def _parse_product(entry: Mapping[str, Any]) -> Product:
    risk = entry.get("supplyRisk")
    return Product(
        id=str(entry["id"]),
        reference=str(entry["reference"]),
        description=_coerce_optional_str(entry.get("description")),
        supply_risk=SupplyRisk(risk) if risk else None,
        qty_per_unit=int(entry.get("qtyPerUnit") or 1),
        assemblies=_parse_assemblies(entry.get("assemblies") or []),
    )


def _parse_assemblies(entries: Iterable[Mapping[str, Any]]) -> Tuple[AssemblyMembership, ...]:
    return tuple(AssemblyMembership(assembly_id=str(entry["assemblyId"])) for entry in entries)


def _parse_stock(entry: Mapping[str, Any]) -> StockRecord:
    return StockRecord(
        product_id=str(entry["productId"]),
        site_id=str(entry["siteId"]),
        quantity_new=int(entry["quantityNew"]),
        quantity_used=int(entry["quantityUsed"]),
    )


def _coerce_optional_str(value: object) -> Optional[str]:
    if value in (None, ""):
        return None
    return str(value)


__all__ = ["SCHEMA_PATH", "SnapshotError", "StockSnapshot", "load_snapshot", "parse_snapshot"]

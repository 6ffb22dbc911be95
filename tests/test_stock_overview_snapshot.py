from __future__ import annotations

import json
from pathlib import Path

import pytest

from packages.stock_matrix import (
    AssemblyMembership,
    DuplicateStockRecordError,
    MatrixParams,
    SiteType,
    StockRecord,
    SupplyRisk,
)
from services.stock_overview import SnapshotError, load_snapshot, parse_snapshot


def _payload() -> dict[str, object]:
    return {
        "sites": [
            {"id": "s1", "name": "Main warehouse", "type": "STORAGE", "isActive": True},
            {"id": "s2", "name": "Delivery", "type": "EXIT", "isActive": True},
        ],
        "products": [
            {
                "id": "p1",
                "reference": "VALVE-10",
                "description": "Brass valve",
                "supplyRisk": "HIGH",
                "qtyPerUnit": 2,
                "assemblies": [{"assemblyId": "frame"}],
            },
            {"id": "p2", "reference": "PUMP-3", "description": None},
        ],
        "stocks": [
            {"productId": "p1", "siteId": "s1", "quantityNew": 4, "quantityUsed": 1},
            {"productId": "p2", "siteId": "s2", "quantityNew": 0, "quantityUsed": 2},
            {
                "productId": "p2",
                "siteId": "s3",
                "quantityNew": 3,
                "quantityUsed": 0,
                "site": {"id": "s3", "name": "Annex", "type": "STORAGE", "isActive": True},
            },
        ],
    }


def _write(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_parse_snapshot_builds_value_objects() -> None:
    snapshot = parse_snapshot(_payload())

    assert snapshot.records[0] == StockRecord("p1", "s1", 4, 1)
    assert [site.id for site in snapshot.sites] == ["s1", "s2", "s3"]
    assert snapshot.sites[1].type is SiteType.EXIT
    product = snapshot.product_index()["p1"]
    assert product.supply_risk is SupplyRisk.HIGH
    assert product.qty_per_unit == 2
    assert product.assemblies == (AssemblyMembership("frame"),)
    assert snapshot.product_index()["p2"].description is None


def test_snapshot_compute_uses_storage_columns() -> None:
    matrix = parse_snapshot(_payload()).compute(MatrixParams(sort_field="total", sort_order="desc"))

    assert [site.id for site in matrix.columns] == ["s1", "s3"]
    assert [row.product.id for row in matrix.rows] == ["p1", "p2"]
    p2 = matrix.rows[1]
    assert p2.total == 5
    assert matrix.column_totals["s3"].quantity_new == 3
    assert matrix.grand_total.total == 10


def test_parse_snapshot_unwraps_api_envelope() -> None:
    snapshot = parse_snapshot({"success": True, "data": _payload()})

    assert len(snapshot.records) == 3


def test_failed_envelope_is_rejected() -> None:
    with pytest.raises(SnapshotError, match="backend down"):
        parse_snapshot({"success": False, "data": None, "error": "backend down"})


def test_negative_quantity_fails_schema_validation() -> None:
    payload = _payload()
    payload["stocks"][0]["quantityNew"] = -1  # type: ignore[index]

    with pytest.raises(SnapshotError, match="stocks/0/quantityNew"):
        parse_snapshot(payload)


def test_unknown_site_type_fails_schema_validation() -> None:
    payload = _payload()
    payload["sites"][0]["type"] = "WAREHOUSE"  # type: ignore[index]

    with pytest.raises(SnapshotError):
        parse_snapshot(payload)


def test_missing_stocks_list_is_rejected() -> None:
    with pytest.raises(SnapshotError):
        parse_snapshot({"sites": [], "products": []})


def test_duplicate_records_overwrite_cell_unless_rejected() -> None:
    payload = _payload()
    payload["stocks"].append(  # type: ignore[union-attr]
        {"productId": "p1", "siteId": "s1", "quantityNew": 1, "quantityUsed": 0}
    )
    snapshot = parse_snapshot(payload)

    p1 = next(row for row in snapshot.compute().rows if row.product.id == "p1")
    assert p1.total == 6
    assert p1.quantity_at("s1").quantity_new == 1
    with pytest.raises(DuplicateStockRecordError):
        snapshot.compute(reject_duplicates=True)


def test_load_snapshot_reads_file(tmp_path: Path) -> None:
    snapshot = load_snapshot(_write(tmp_path, _payload()))

    assert len(snapshot.products) == 2


def test_load_snapshot_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SnapshotError, match="not valid JSON"):
        load_snapshot(path)


def test_load_snapshot_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SnapshotError, match="Unable to read"):
        load_snapshot(tmp_path / "absent.json")

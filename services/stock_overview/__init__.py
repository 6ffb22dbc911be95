"""Stock overview service: snapshot loading, rendering and export of the stock matrix."""

from .config import DEFAULT_CONFIG_PATH, ExportConfig, MatrixConfig, OverviewConfig, load_config
from .export import export_matrix, matrix_headers, matrix_lines, matrix_to_csv, write_matrix_csv
from .render import render_table
from .snapshot import SCHEMA_PATH, SnapshotError, StockSnapshot, load_snapshot, parse_snapshot

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ExportConfig",
    "MatrixConfig",
    "OverviewConfig",
    "SCHEMA_PATH",
    "SnapshotError",
    "StockSnapshot",
    "export_matrix",
    "load_config",
    "load_snapshot",
    "matrix_headers",
    "matrix_lines",
    "matrix_to_csv",
    "parse_snapshot",
    "render_table",
    "write_matrix_csv",
]

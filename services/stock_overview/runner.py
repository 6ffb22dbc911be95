"""Command-line interface for the stock overview."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from packages.stock_matrix import MatrixParams, StockMatrix, StockMatrixError

from services.stock_overview.config import DEFAULT_CONFIG_PATH, OverviewConfig, load_config
from services.stock_overview.export import export_matrix, write_matrix_csv
from services.stock_overview.render import render_table
from services.stock_overview.snapshot import SnapshotError, load_snapshot

ROOT = Path(__file__).resolve().parents[2]
LOGGER_NAME = "stockview.overview.runner"


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    logging.getLogger().setLevel(level)


def _load_config(path: Path, logger: logging.Logger) -> Optional[OverviewConfig]:
    if not path.exists():
        logger.warning("Configuration file %s not found; using defaults", path)
    try:
        return load_config(path)
    except ValueError:
        logger.exception("Invalid configuration file %s", path)
        return None


def _resolve_params(args: argparse.Namespace, config: OverviewConfig) -> MatrixParams:
    overrides: Dict[str, Any] = {}
    for option in ("search", "site_id", "assembly_id", "show_zero_stock", "sort_field", "sort_order"):
        value = getattr(args, option, None)
        if value is not None:
            overrides[option] = value
    return config.defaults.replace(**overrides)


def _resolve_snapshot_path(args: argparse.Namespace) -> Optional[Path]:
    raw = args.snapshot or os.getenv("STOCKVIEW_SNAPSHOT")
    return Path(raw) if raw else None


def _compute(
    args: argparse.Namespace, config: OverviewConfig, logger: logging.Logger
) -> Optional[StockMatrix]:
    snapshot_path = _resolve_snapshot_path(args)
    if snapshot_path is None:
        logger.error("No snapshot given; pass --snapshot or set STOCKVIEW_SNAPSHOT")
        return None
    reject_duplicates = config.matrix.reject_duplicates or bool(args.reject_duplicates)
    try:
        params = _resolve_params(args, config)
        snapshot = load_snapshot(snapshot_path)
        matrix = snapshot.compute(params, reject_duplicates=reject_duplicates)
    except (SnapshotError, StockMatrixError):
        logger.exception("Stock matrix computation failed")
        return None
    except Exception:
        logger.exception("Stock matrix computation failed with an unexpected error")
        return None
    logger.info(
        "Stock matrix ready: %d rows, grand total %d", len(matrix.rows), matrix.grand_total.total
    )
    return matrix


def cmd_show(args: argparse.Namespace, config: OverviewConfig, logger: logging.Logger) -> int:
    matrix = _compute(args, config, logger)
    if matrix is None:
        return 1
    print(render_table(matrix))
    return 0


def cmd_json(args: argparse.Namespace, config: OverviewConfig, logger: logging.Logger) -> int:
    matrix = _compute(args, config, logger)
    if matrix is None:
        return 1
    print(json.dumps(matrix.to_dict(), indent=2, ensure_ascii=False))
    return 0


def cmd_export(args: argparse.Namespace, config: OverviewConfig, logger: logging.Logger) -> int:
    matrix = _compute(args, config, logger)
    if matrix is None:
        return 1
    if args.output:
        try:
            export_matrix(matrix, Path(args.output), config.export)
        except OSError:
            logger.exception("Unable to write export to %s", args.output)
            return 1
    else:
        write_matrix_csv(matrix, sys.stdout, config.export)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stock overview matrix of products by storage site")
    parser.add_argument("command", choices=["show", "json", "export"], help="Command to execute")
    parser.add_argument(
        "-c",
        "--config",
        default=os.getenv("STOCKVIEW_CONFIG") or str(DEFAULT_CONFIG_PATH),
        help="Path to stock overview config file (default: %(default)s)",
    )
    parser.add_argument("-s", "--snapshot", help="JSON snapshot with sites, products and stocks")
    parser.add_argument("--search", help="Match product reference or description")
    parser.add_argument("--site", dest="site_id", help="Only products stocked at this site id")
    parser.add_argument("--assembly", dest="assembly_id", help="Only products belonging to this assembly id")
    parser.add_argument(
        "--show-zero-stock",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include products whose total stock is zero",
    )
    parser.add_argument("--sort-field", help="reference, totalNew, totalUsed or total")
    parser.add_argument("--sort-order", help="asc or desc")
    parser.add_argument(
        "--reject-duplicates",
        action="store_true",
        help="Fail when several stock records share the same product and site",
    )
    parser.add_argument("-o", "--output", help="Destination file for the export command (default: stdout)")
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv(ROOT / ".env")
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_level = os.getenv("STOCKVIEW_LOG_LEVEL")
    _configure_logging(env_level or OverviewConfig.log_level)
    logger = logging.getLogger(LOGGER_NAME)
    config = _load_config(Path(args.config), logger)
    if config is None:
        return 1
    if not env_level:
        _configure_logging(config.log_level)

    if args.command == "show":
        return cmd_show(args, config, logger)
    if args.command == "json":
        return cmd_json(args, config, logger)
    if args.command == "export":
        return cmd_export(args, config, logger)
    parser.error(f"Unknown command {args.command}")
    return 1


if __name__ == "__main__":
    sys.exit(main())

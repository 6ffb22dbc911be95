"""Configuration helpers for the stock overview service."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, MutableMapping, Optional

import yaml

from packages.stock_matrix import MatrixParams

DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.yaml")


@dataclass
class MatrixConfig:
    """Settings forwarded to the matrix builder."""

    reject_duplicates: bool = False

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, object]]) -> "MatrixConfig":
        if not data:
            return cls()
        return cls(reject_duplicates=_coerce_bool(data.get("reject_duplicates"), cls.reject_duplicates))


@dataclass
class ExportConfig:
    """CSV layout settings."""

    delimiter: str = ";"
    include_bom: bool = True

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, object]]) -> "ExportConfig":
        if not data:
            return cls()
        raw_delimiter = data.get("delimiter")
        delimiter = cls.delimiter if raw_delimiter in (None, "") else str(raw_delimiter)
        if len(delimiter) != 1:
            raise ValueError(f"Export delimiter must be a single character: {delimiter!r}")
        include_bom = _coerce_bool(data.get("include_bom"), cls.include_bom)
        return cls(delimiter=delimiter, include_bom=include_bom)


@dataclass
class OverviewConfig:
    """Top-level configuration for the stock overview runner."""

    log_level: str = "INFO"
    matrix: MatrixConfig = field(default_factory=MatrixConfig)
    defaults: MatrixParams = field(default_factory=MatrixParams)
    export: ExportConfig = field(default_factory=ExportConfig)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "OverviewConfig":
        log_level_value = data.get("log_level", cls.log_level)
        log_level = str(log_level_value or "").strip() or cls.log_level
        return cls(
            log_level=log_level.upper(),
            matrix=MatrixConfig.from_mapping(_get_mapping(data, "matrix")),
            defaults=MatrixParams.from_mapping(_get_mapping(data, "defaults")),
            export=ExportConfig.from_mapping(_get_mapping(data, "export")),
        )


def load_config(path: Path | None = None) -> OverviewConfig:
    """Load stock overview configuration from YAML."""

    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        return OverviewConfig()
    text = config_path.read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Stock overview configuration must be a mapping")
    return OverviewConfig.from_mapping(data)


def _get_mapping(data: Mapping[str, object], key: str) -> MutableMapping[str, object]:
    value = data.get(key)
    if isinstance(value, Mapping):
        return dict(value)
    return {}


def _coerce_bool(value: object, fallback: bool) -> bool:
    if value is None:
        return fallback
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    raise ValueError(f"Invalid boolean value: {value!r}")


__all__ = ["DEFAULT_CONFIG_PATH", "ExportConfig", "MatrixConfig", "OverviewConfig", "load_config"]

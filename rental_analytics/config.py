"""Property settings passed explicitly into the reports that need them."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Tuple

logger = logging.getLogger(__name__)


DEDUCTIBLE_CATEGORIES: Tuple[str, ...] = (
    "Maintenance",
    "Utilities",
    "Insurance",
    "Property Tax",
    "Advertising",
    "Professional Services",
    "Supplies",
    "Repairs",
    "Management Fees",
    "Legal Fees",
)


@dataclass(frozen=True)
class PropertyConfig:
    property_name: str = "Parsonage Living Community"
    manager_email: str = ""
    late_fee_days: int = 5
    late_fee_amount: float = 25.0
    deductible_categories: Tuple[str, ...] = field(default=DEDUCTIBLE_CATEGORIES)
    target_overall_occupancy: float = 85.0
    target_guest_occupancy: float = 70.0
    tenant_revpar_benchmark: float = 500.0


_SETTING_KEYS: Dict[str, str] = {
    "property name": "property_name",
    "manager email": "manager_email",
    "late fee days": "late_fee_days",
    "late fee amount": "late_fee_amount",
    "deductible categories": "deductible_categories",
    "target overall occupancy": "target_overall_occupancy",
    "target guest occupancy": "target_guest_occupancy",
    "tenant revpar benchmark": "tenant_revpar_benchmark",
}


def _normalize_key(key: str) -> str:
    return " ".join(key.replace("_", " ").lower().split())


def _convert(name: str, raw: str) -> Any:
    kinds = {f.name: f.type for f in fields(PropertyConfig)}
    kind = kinds[name]
    if kind == "int":
        return int(float(raw))
    if kind == "float":
        return float(raw)
    if name == "deductible_categories":
        return tuple(part.strip() for part in raw.split(";") if part.strip())
    return raw


def load_settings(path: Path, base: PropertyConfig | None = None) -> PropertyConfig:
    """Load a ``Setting Key``/``Setting Value`` CSV on top of ``base``."""

    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    overrides: Dict[str, Any] = {}
    with path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            key = _normalize_key(row.get("Setting Key") or "")
            name = _SETTING_KEYS.get(key)
            if name is None:
                if key:
                    logger.debug("Ignoring unknown setting %r", key)
                continue
            raw = (row.get("Setting Value") or "").strip()
            if not raw:
                continue
            try:
                overrides[name] = _convert(name, raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for setting '{key}': {raw!r}") from exc
    return replace(base or PropertyConfig(), **overrides)

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Tuple

from pydantic import ValidationError

from egress.datasets.schema import OrdinanceDataset

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"

AVAILABLE_DATASETS: Tuple[str, ...] = ("iz-1971-v2024-01",)

REQUIRED_TABLES: Tuple[str, ...] = (
    "occupant_load_table_8",
    "min_exits_by_occupants",
    "max_travel_distance",
    "dead_end_limits",
    "min_widths",
    "functional_classes",
)

_cache: Dict[str, OrdinanceDataset] = {}


class DatasetError(ValueError):
    """Raised when a dataset version is unknown or its payload is malformed."""


def get_current_dataset_version() -> str:
    return AVAILABLE_DATASETS[-1]


def validate_dataset(raw: Any) -> OrdinanceDataset:
    """Check the raw JSON payload and build an ``OrdinanceDataset`` from it."""
    if not isinstance(raw, dict):
        raise DatasetError("Dataset must be an object")

    meta = raw.get("meta")
    if not isinstance(meta, dict):
        raise DatasetError("Dataset must have a meta object")
    if not meta.get("ordinance") or not meta.get("version"):
        raise DatasetError("Dataset meta must have ordinance and version")

    tables = raw.get("tables")
    if not isinstance(tables, dict):
        raise DatasetError("Dataset must have a tables object")
    for name in REQUIRED_TABLES:
        if not isinstance(tables.get(name), list):
            raise DatasetError(f"Dataset must have {name} as an array")

    try:
        return OrdinanceDataset.model_validate(raw)
    except ValidationError as e:
        raise DatasetError(f"Dataset {meta.get('version')} failed validation: {e}") from e


def load_dataset(version: str | None = None) -> OrdinanceDataset:
    """Load a bundled dataset by version; the current version when omitted.

    Loaded datasets are cached per version. Callers receive the cached
    instance and must treat it as read-only.
    """
    version = version or get_current_dataset_version()
    if version in _cache:
        return _cache[version]
    if version not in AVAILABLE_DATASETS:
        raise DatasetError(f"Unknown dataset version: {version}")

    path = DATA_DIR / f"{version}.json"
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise DatasetError(f"Cannot read dataset {version} from {path}: {e}") from e

    dataset = validate_dataset(raw)
    logger.info("Loaded dataset %s (%s)", dataset.meta.version, dataset.meta.ordinance)
    _cache[version] = dataset
    return dataset


def get_dataset_meta(version: str | None = None) -> Dict[str, str]:
    dataset = load_dataset(version)
    return {
        "ordinance": dataset.meta.ordinance,
        "version": dataset.meta.version,
        "effective_from": dataset.meta.effective_from,
        "source": dataset.meta.source,
    }


def clear_dataset_cache() -> None:
    _cache.clear()

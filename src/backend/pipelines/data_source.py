from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from common.rules_engine.models import Pillar

logger = logging.getLogger(__name__)

DATASET_FOR_PILLAR: Dict[Pillar, str] = {pillar: pillar.dataset_name for pillar in Pillar}
REQUIRED_DATASETS = tuple(DATASET_FOR_PILLAR.values())


class DatasetSource(Protocol):
    def load_rows(self, name: str) -> List[Dict[str, Any]]:
        """Return the rows of dataset `name` in file order."""
        ...


def get_data_source(name: str, *, root: Path | None = None) -> DatasetSource:
    """Resolve a dataset source implementation by name (csv|memory)."""
    source = (name or "").strip().lower()
    if source in ("csv", ""):
        return CsvDatasetSource(root=root or Path("data"))
    if source == "memory":
        return InMemoryDatasetSource()
    raise ValueError(f"Unknown data source '{name}' (expected 'csv' or 'memory').")


class CsvDatasetSource:
    def __init__(self, *, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def load_rows(self, name: str) -> List[Dict[str, Any]]:
        path = self._root / name
        if not path.exists():
            raise FileNotFoundError(f"Dataset not found: {path}")
        # utf-8-sig drops the BOM spreadsheet exports put in front of the first header.
        with path.open("r", encoding="utf-8-sig", newline="") as handle:
            reader = csv.DictReader(handle)
            rows = [_clean_row(row) for row in reader]
        logger.debug("Loaded %d row(s) from %s", len(rows), path)
        return rows


class InMemoryDatasetSource:
    def __init__(self, datasets: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> None:
        self._datasets = {name: list(rows) for name, rows in (datasets or {}).items()}

    def put(self, name: str, rows: List[Dict[str, Any]]) -> None:
        self._datasets[name] = list(rows)

    def load_rows(self, name: str) -> List[Dict[str, Any]]:
        if name not in self._datasets:
            raise FileNotFoundError(f"Dataset not loaded: {name}")
        return [dict(row) for row in self._datasets[name]]


def _clean_row(row: Dict[Optional[str], Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    for key, value in row.items():
        # DictReader files surplus cells under a None key.
        if key is None:
            continue
        label = key.strip()
        cleaned[label] = value.strip() if isinstance(value, str) else value
    return cleaned


@dataclass(frozen=True)
class IngestionStatus:
    datasets: Dict[str, bool] = field(default_factory=dict)
    all_loaded: bool = False
    verified_at: Optional[datetime] = None

    @property
    def missing(self) -> List[str]:
        return [name for name in REQUIRED_DATASETS if not self.datasets.get(name)]


def check_ingestion(source: DatasetSource) -> IngestionStatus:
    """Report which of the required datasets can be loaded from `source`."""
    loaded: Dict[str, bool] = {}
    for name in REQUIRED_DATASETS:
        try:
            source.load_rows(name)
        except (OSError, ValueError, csv.Error) as exc:
            logger.warning("Dataset %s unavailable: %s", name, exc)
            loaded[name] = False
        else:
            loaded[name] = True
    all_loaded = all(loaded.values())
    return IngestionStatus(
        datasets=loaded,
        all_loaded=all_loaded,
        verified_at=datetime.now(timezone.utc) if all_loaded else None,
    )

from __future__ import annotations

import csv
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from common.rules_engine.models import ComplianceReview, Pillar, Row
from common.rules_engine.runner import RulesRunner
from common.rules_engine.store import RuleSetRepository

from .data_source import DATASET_FOR_PILLAR, DatasetSource

logger = logging.getLogger(__name__)


def load_pillar_rows(
    source: DatasetSource,
    pillars: Iterable[Pillar],
) -> tuple[Dict[Pillar, Sequence[Row]], List[str]]:
    """Load each pillar's dataset; datasets that fail to load are reported, not raised."""
    rows_by_pillar: Dict[Pillar, Sequence[Row]] = {}
    missing: List[str] = []
    for pillar in pillars:
        name = DATASET_FOR_PILLAR[pillar]
        try:
            rows_by_pillar[pillar] = source.load_rows(name)
        except (OSError, ValueError, csv.Error) as exc:
            # Undecodable bytes surface as UnicodeDecodeError, a ValueError.
            logger.warning("Skipping %s: %s", pillar.value, exc)
            missing.append(name)
    return rows_by_pillar, missing


def run_compliance_review(
    *,
    repository: RuleSetRepository,
    source: DatasetSource,
    pillars: Optional[Sequence[Pillar]] = None,
) -> ComplianceReview:
    selected = list(pillars) if pillars else list(Pillar)
    rows_by_pillar, missing = load_pillar_rows(source, selected)
    return RulesRunner(repository).run_all(rows_by_pillar, missing_datasets=missing)

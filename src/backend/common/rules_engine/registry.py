from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Type

from .analyzer import DefaultAnalyzer
from .config import PillarThresholds
from .models import Finding, Pillar, Row


class AnalyzerRegistry:
    def __init__(self):
        self._analyzers: Dict[Pillar, Type[DefaultAnalyzer]] = {}

    def register(self, analyzer_cls: Type[DefaultAnalyzer]) -> None:
        pillar = getattr(analyzer_cls, "pillar", None)
        if not pillar:
            raise ValueError("Analyzer class missing pillar")
        if pillar in self._analyzers:
            raise ValueError(f"Duplicate analyzer registered for pillar: {pillar.value}")
        self._analyzers[pillar] = analyzer_cls

    def create(self, pillar: Pillar) -> DefaultAnalyzer:
        return self._analyzers[pillar]()

    def get(self, pillar: Pillar) -> Type[DefaultAnalyzer]:
        return self._analyzers[pillar]

    def pillars(self) -> Iterable[Pillar]:
        return self._analyzers.keys()


registry = AnalyzerRegistry()


def register_analyzer(analyzer_cls: Type[DefaultAnalyzer]) -> Type[DefaultAnalyzer]:
    registry.register(analyzer_cls)
    return analyzer_cls


def run_default_analyzer(
    pillar: Pillar, rows: Sequence[Row], thresholds: PillarThresholds
) -> List[Finding]:
    return registry.create(pillar).analyze(rows, thresholds)

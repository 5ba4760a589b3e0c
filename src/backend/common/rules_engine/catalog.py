from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from .aliases import ALIASES
from .conditions import supported_operators
from .config import THRESHOLD_MODELS
from .models import Pillar
from .registry import registry

# Ensure built-in analyzers are imported/registered when generating a catalog.
from . import analyzers as _builtin_analyzers  # noqa: F401


class PillarCatalogEntry(BaseModel):
    pillar: str
    category_label: str
    dataset: str

    analyzer_module: str
    analyzer_class: str
    analyzer_title: str = ""

    aliases: Dict[str, List[str]] = Field(default_factory=dict)
    thresholds_model: str
    thresholds_schema: Dict[str, Any]


class RuleCatalog(BaseModel):
    operators: List[str]
    pillars: List[PillarCatalogEntry]


def build_catalog() -> RuleCatalog:
    entries: List[PillarCatalogEntry] = []
    for pillar in registry.pillars():
        analyzer_cls = registry.get(pillar)
        model = THRESHOLD_MODELS[pillar]
        entries.append(
            PillarCatalogEntry(
                pillar=pillar.value,
                category_label=pillar.category_label,
                dataset=pillar.dataset_name,
                analyzer_module=getattr(analyzer_cls, "__module__", ""),
                analyzer_class=getattr(analyzer_cls, "__name__", ""),
                analyzer_title=getattr(analyzer_cls, "analyzer_title", ""),
                aliases={k: list(v) for k, v in ALIASES[pillar].items()},
                thresholds_model=model.__name__,
                thresholds_schema=model.model_json_schema(),
            )
        )

    order = list(Pillar)
    entries.sort(key=lambda e: order.index(Pillar(e.pillar)))
    return RuleCatalog(operators=supported_operators(), pillars=entries)


def _dump_json(catalog: dict[str, Any]) -> str:
    return json.dumps(catalog, indent=2, sort_keys=True, ensure_ascii=False)


def _dump_yaml(catalog: dict[str, Any]) -> str:
    import yaml

    return yaml.safe_dump(catalog, sort_keys=True, allow_unicode=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Print the rule engine catalog (pillars, aliases, operators).")
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    args = parser.parse_args(argv)

    catalog = build_catalog().model_dump()
    if args.format == "json":
        print(_dump_json(catalog))
    else:
        print(_dump_yaml(catalog))


if __name__ == "__main__":
    main()

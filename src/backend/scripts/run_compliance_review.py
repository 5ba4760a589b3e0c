from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


_ensure_backend_on_path()

from common.logging_config import configure_logging  # noqa: E402
from common.rules_engine.models import ComplianceReview, Pillar  # noqa: E402
from common.rules_engine.config import THRESHOLD_MODELS  # noqa: E402
from common.rules_engine.store import JsonFileRuleSetRepository  # noqa: E402
from common.rules_engine.thresholds import describe_thresholds  # noqa: E402
from common.settings import get_settings  # noqa: E402
from pipelines.data_source import get_data_source  # noqa: E402
from pipelines.review import run_compliance_review  # noqa: E402

logger = logging.getLogger("scripts.run_compliance_review")

REPORT_BASENAME = "compliance_review"


def _write_markdown(review: ComplianceReview, out_path: Path) -> None:
    lines = [
        "# Consumer Duty Review",
        "",
        f"Generated at: {review.generated_at.isoformat()}",
        "",
    ]
    if review.missing_datasets:
        lines.append("## Missing datasets")
        for name in review.missing_datasets:
            lines.append(f"- {name}")
        lines.append("")

    for pillar_review in review.pillars:
        lines.append(f"## {pillar_review.pillar.value} ({pillar_review.source})")
        if pillar_review.rule_set_origin:
            lines.append(f"- Rule set: {pillar_review.rule_set_origin}")
        if pillar_review.thresholds is not None:
            model = THRESHOLD_MODELS[pillar_review.pillar]
            lines.append(f"- Thresholds: {describe_thresholds(model.model_validate(pillar_review.thresholds))}")
        if pillar_review.totals:
            totals = ", ".join(f"{sev.value}: {count}" for sev, count in pillar_review.totals.items())
            lines.append(f"- Totals: {totals}")
        if not pillar_review.findings:
            lines.append("- No findings.")
        for finding in pillar_review.findings:
            lines.append("")
            lines.append(f"### {finding.id} · {finding.title} [{finding.severity.value}]")
            for message in finding.messages:
                suffix = f" ({message.extra})" if message.extra else ""
                lines.append(f"- {message.text}{suffix}")
        lines.append("")
    out_path.write_text("\n".join(lines), encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Run Consumer Duty rule checks over the pillar datasets."
    )
    parser.add_argument(
        "--data-dir",
        default=str(settings.datasets_dir),
        help="Directory holding the pillar CSV datasets.",
    )
    parser.add_argument(
        "--store",
        default=str(settings.rules_store_path),
        help="Path to the JSON rule store.",
    )
    parser.add_argument(
        "--pillar",
        action="append",
        choices=[p.value for p in Pillar],
        help="Pillar to review (repeatable; default: all).",
    )
    parser.add_argument(
        "--output-dir",
        default=".",
        help="Directory for the JSON and markdown reports.",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (default from DUTY_LOG_LEVEL).",
    )
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    repository = JsonFileRuleSetRepository(Path(args.store))
    source = get_data_source(settings.data_source, root=Path(args.data_dir))
    pillars = [Pillar(value) for value in args.pillar] if args.pillar else None

    review = run_compliance_review(repository=repository, source=source, pillars=pillars)

    output_dir = Path(args.output_dir).resolve()
    output_dir.mkdir(parents=True, exist_ok=True)
    out_json = output_dir / f"{REPORT_BASENAME}.json"
    out_md = output_dir / f"{REPORT_BASENAME}.md"

    out_json.write_text(json.dumps(review.model_dump(mode="json"), indent=2, ensure_ascii=False), encoding="utf-8")
    _write_markdown(review, out_md)
    logger.info("Reviewed %d pillar(s); %d dataset(s) missing", len(review.pillars), len(review.missing_datasets))

    print(f"Wrote {out_json}")
    print(f"Wrote {out_md}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

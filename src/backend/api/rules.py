from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field, ValidationError

from common.rules_engine.config import THRESHOLD_MODELS
from common.rules_engine.models import Pillar, PillarReview, Rule, RuleSet
from common.rules_engine.runner import RulesRunner
from common.rules_engine.store import RuleSetRepository, load_rule_set
from common.rules_engine.thresholds import derive_thresholds, describe_thresholds

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rules", tags=["rules"])


class RuleSetBody(BaseModel):
    rules: List[Rule] = Field(default_factory=list)


class EvaluateBody(BaseModel):
    rows: List[Dict[str, Any]] = Field(default_factory=list)


def get_repository(request: Request) -> RuleSetRepository:
    return request.app.state.repository


def _pillar(value: str) -> Pillar:
    try:
        return Pillar(value)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown pillar: {value}") from None


@router.get("/{pillar}")
def get_rule_set(pillar: str, repository: RuleSetRepository = Depends(get_repository)):
    rule_set = load_rule_set(repository, _pillar(pillar))
    if rule_set is None:
        raise HTTPException(status_code=404, detail=f"No rules configured for {pillar}.")
    return rule_set.model_dump(mode="json")


@router.put("/{pillar}")
def put_rule_set(
    pillar: str,
    body: RuleSetBody,
    repository: RuleSetRepository = Depends(get_repository),
):
    rule_set = RuleSet(pillar=_pillar(pillar), rules=body.rules)
    repository.put_rule_set(rule_set)
    logger.info("Stored %d rule(s) for %s", len(rule_set.rules), rule_set.pillar.value)
    return rule_set.model_dump(mode="json")


@router.delete("/{pillar}", status_code=204)
def delete_rule_set(pillar: str, repository: RuleSetRepository = Depends(get_repository)):
    repository.delete_rule_set(_pillar(pillar))
    logger.info("Removed structured rules for %s", pillar)


@router.get("/{pillar}/thresholds")
def get_thresholds(pillar: str, repository: RuleSetRepository = Depends(get_repository)):
    thresholds = derive_thresholds(_pillar(pillar), repository)
    return {
        "thresholds": thresholds.model_dump(mode="json"),
        "summary": describe_thresholds(thresholds),
    }


@router.put("/{pillar}/thresholds")
def put_thresholds(
    pillar: str,
    body: Dict[str, Any],
    repository: RuleSetRepository = Depends(get_repository),
):
    resolved = _pillar(pillar)
    overrides = repository.get_threshold_overrides().with_pillar(resolved, body)
    values = overrides.for_pillar(resolved)
    if not values:
        raise HTTPException(status_code=422, detail="No recognised threshold fields in request body.")
    try:
        THRESHOLD_MODELS[resolved].model_validate(values)
    except ValidationError as exc:
        errors = [{"field": ".".join(map(str, err["loc"])), "message": err["msg"]} for err in exc.errors()]
        raise HTTPException(status_code=422, detail=errors) from None
    repository.put_threshold_overrides(overrides)
    return get_thresholds(pillar, repository)


@router.post("/{pillar}/evaluate", response_model=PillarReview)
def evaluate(
    pillar: str,
    body: EvaluateBody,
    repository: RuleSetRepository = Depends(get_repository),
):
    return RulesRunner(repository).run(_pillar(pillar), body.rows)

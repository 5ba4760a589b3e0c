from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from pydantic import ValidationError

from .config import ThresholdOverrides
from .models import Pillar, PromptDocument, Rule, RuleSet

logger = logging.getLogger(__name__)


class RuleSetRepository(Protocol):
    def get_rule_set(self, pillar: Pillar) -> Optional[RuleSet]:
        """Return the structured rule set authored for `pillar`, if any."""
        ...

    def put_rule_set(self, rule_set: RuleSet) -> None:
        ...

    def delete_rule_set(self, pillar: Pillar) -> None:
        ...

    def list_prompts(self) -> List[PromptDocument]:
        ...

    def put_prompt(self, prompt: PromptDocument) -> None:
        ...

    def get_threshold_overrides(self) -> ThresholdOverrides:
        ...

    def put_threshold_overrides(self, overrides: ThresholdOverrides) -> None:
        ...


class InMemoryRuleSetRepository:
    def __init__(
        self,
        *,
        rule_sets: Optional[List[RuleSet]] = None,
        prompts: Optional[List[PromptDocument]] = None,
        overrides: Optional[ThresholdOverrides] = None,
    ) -> None:
        self._rule_sets: Dict[Pillar, RuleSet] = {rs.pillar: rs for rs in rule_sets or []}
        self._prompts: Dict[str, PromptDocument] = {p.id: p for p in prompts or []}
        self._overrides = overrides or ThresholdOverrides()

    def get_rule_set(self, pillar: Pillar) -> Optional[RuleSet]:
        rule_set = self._rule_sets.get(pillar)
        return rule_set.model_copy(deep=True) if rule_set else None

    def put_rule_set(self, rule_set: RuleSet) -> None:
        self._rule_sets[rule_set.pillar] = rule_set.model_copy(deep=True)

    def delete_rule_set(self, pillar: Pillar) -> None:
        self._rule_sets.pop(pillar, None)

    def list_prompts(self) -> List[PromptDocument]:
        return [p.model_copy(deep=True) for p in self._prompts.values()]

    def put_prompt(self, prompt: PromptDocument) -> None:
        self._prompts[prompt.id] = prompt.model_copy(deep=True)

    def get_threshold_overrides(self) -> ThresholdOverrides:
        return self._overrides.model_copy(deep=True)

    def put_threshold_overrides(self, overrides: ThresholdOverrides) -> None:
        self._overrides = overrides.model_copy(deep=True)


class JsonFileRuleSetRepository:
    """Rule sets, prompt documents and threshold overrides in one JSON file.

    Layout: {"rule_sets": {pillar: {...}}, "prompts": [...], "thresholds": {...}}.
    Writes replace the file atomically; a missing or unreadable file reads as empty.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                raw = json.load(handle)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read rule store %s: %s", self._path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring rule store %s: top-level value is not an object", self._path)
            return {}
        return raw

    def _write(self, data: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=str(self._path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, default=str)
            os.replace(tmp_name, self._path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def get_rule_set(self, pillar: Pillar) -> Optional[RuleSet]:
        raw = (self._read().get("rule_sets") or {}).get(pillar.value)
        if raw is None:
            return None
        payload = dict(raw) if isinstance(raw, dict) else {"rules": raw}
        payload["pillar"] = pillar.value
        try:
            return RuleSet.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Ignoring invalid stored rule set for %s: %s", pillar.value, exc)
            return None

    def put_rule_set(self, rule_set: RuleSet) -> None:
        data = self._read()
        rule_sets = dict(data.get("rule_sets") or {})
        rule_sets[rule_set.pillar.value] = rule_set.model_dump(mode="json")
        data["rule_sets"] = rule_sets
        self._write(data)

    def delete_rule_set(self, pillar: Pillar) -> None:
        data = self._read()
        rule_sets = dict(data.get("rule_sets") or {})
        if rule_sets.pop(pillar.value, None) is None:
            return
        data["rule_sets"] = rule_sets
        self._write(data)

    def list_prompts(self) -> List[PromptDocument]:
        prompts: List[PromptDocument] = []
        for raw in self._read().get("prompts") or []:
            try:
                prompts.append(PromptDocument.model_validate(raw))
            except ValidationError as exc:
                logger.warning("Skipping malformed prompt document: %s", exc)
        return prompts

    def put_prompt(self, prompt: PromptDocument) -> None:
        data = self._read()
        prompts = [p for p in data.get("prompts") or [] if isinstance(p, dict) and p.get("id") != prompt.id]
        prompts.append(prompt.model_dump(mode="json"))
        data["prompts"] = prompts
        self._write(data)

    def get_threshold_overrides(self) -> ThresholdOverrides:
        raw = self._read().get("thresholds") or {}
        try:
            return ThresholdOverrides.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Ignoring malformed threshold overrides: %s", exc)
            return ThresholdOverrides()

    def put_threshold_overrides(self, overrides: ThresholdOverrides) -> None:
        data = self._read()
        data["thresholds"] = overrides.model_dump(mode="json")
        self._write(data)


def prompts_for_pillar(repository: RuleSetRepository, pillar: Pillar) -> List[PromptDocument]:
    label = pillar.category_label
    return [p for p in repository.list_prompts() if label in (p.category or "").lower()]


def latest_prompt(repository: RuleSetRepository, pillar: Pillar) -> Optional[PromptDocument]:
    """Most recently modified prompt tagged for `pillar`; undated prompts sort last."""
    candidates = prompts_for_pillar(repository, pillar)
    if not candidates:
        return None
    dated = [p for p in candidates if p.last_modified is not None]
    if not dated:
        return candidates[0]
    return max(dated, key=lambda p: p.last_modified.timestamp())


def _prompt_rule_set(prompt: PromptDocument, pillar: Pillar) -> Optional[RuleSet]:
    if not prompt.rules:
        return None
    try:
        rules = [Rule.model_validate(raw) for raw in prompt.rules]
    except ValidationError as exc:
        logger.warning("Prompt %s carries invalid rules; ignoring them: %s", prompt.id, exc)
        return None
    return RuleSet(pillar=pillar, rules=rules)


def load_rule_set_with_origin(
    repository: RuleSetRepository, pillar: Pillar
) -> tuple[Optional[RuleSet], Optional[str]]:
    structured = repository.get_rule_set(pillar)
    if structured is not None:
        logger.debug("Using structured rule set for %s (%d rules)", pillar.value, len(structured.rules))
        return structured, "structured"

    for prompt in prompts_for_pillar(repository, pillar):
        rule_set = _prompt_rule_set(prompt, pillar)
        if rule_set is not None:
            logger.debug("Using rules embedded in prompt %s for %s", prompt.id, pillar.value)
            return rule_set, "prompt-library"

    return None, None


def load_rule_set(repository: RuleSetRepository, pillar: Pillar) -> Optional[RuleSet]:
    rule_set, _ = load_rule_set_with_origin(repository, pillar)
    return rule_set

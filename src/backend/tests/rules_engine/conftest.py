import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest

from common.rules_engine.models import Pillar, PromptDocument, Rule, RuleSet
from common.rules_engine.store import InMemoryRuleSetRepository


@pytest.fixture
def make_rule():
    counter = {"n": 0}

    def _make(
        *conditions,
        severity: str = "MEDIUM",
        combinator: str = "ANY",
        message: str = "matched",
        extra: str | None = None,
        code: str = "",
    ) -> Rule:
        counter["n"] += 1
        return Rule.model_validate(
            {
                "id": f"rule-{counter['n']}",
                "code": code or f"R{counter['n']}",
                "name": f"Rule {counter['n']}",
                "severity": severity,
                "combinator": combinator,
                "conditions": list(conditions),
                "message": message,
                "extra": extra,
            }
        )

    return _make


@pytest.fixture
def make_rule_set():
    def _make(pillar: Pillar, *rules: Rule) -> RuleSet:
        return RuleSet(pillar=pillar, rules=list(rules))

    return _make


@pytest.fixture
def make_prompt():
    def _make(
        *,
        category: str,
        text: str = "",
        rules=None,
        prompt_id: str = "prompt-1",
        last_modified: str | None = None,
    ) -> PromptDocument:
        return PromptDocument.model_validate(
            {
                "id": prompt_id,
                "title": f"{category} prompt",
                "category": category,
                "text": text,
                "lastModified": last_modified,
                "rules": rules,
            }
        )

    return _make


@pytest.fixture
def repository() -> InMemoryRuleSetRepository:
    return InMemoryRuleSetRepository()

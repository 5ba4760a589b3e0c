import json

from common.rules_engine.config import ThresholdOverrides
from common.rules_engine.models import Pillar, PromptDocument
from common.rules_engine.store import (
    InMemoryRuleSetRepository,
    JsonFileRuleSetRepository,
    latest_prompt,
    load_rule_set,
    load_rule_set_with_origin,
)

PROMPT_RULE = {
    "id": "pr-1",
    "code": "PV9",
    "severity": "HIGH",
    "conditions": [{"left": "Fee", "op": ">", "right": 100}],
    "message": "Fee too high",
}


def test_in_memory_repository_returns_copies(make_rule, make_rule_set):
    rule_set = make_rule_set(Pillar.PRICE_VALUE, make_rule({"left": "Fee", "op": ">", "right": 1}))
    repo = InMemoryRuleSetRepository(rule_sets=[rule_set])

    fetched = repo.get_rule_set(Pillar.PRICE_VALUE)
    fetched.rules.clear()

    assert len(repo.get_rule_set(Pillar.PRICE_VALUE).rules) == 1
    assert repo.get_rule_set(Pillar.CONSUMER_SUPPORT) is None

    repo.delete_rule_set(Pillar.PRICE_VALUE)
    assert repo.get_rule_set(Pillar.PRICE_VALUE) is None


def test_json_repository_round_trip(tmp_path, make_rule, make_rule_set):
    path = tmp_path / "store" / "rules.json"
    repo = JsonFileRuleSetRepository(path)
    assert repo.get_rule_set(Pillar.PRODUCTS_SERVICES) is None
    assert repo.list_prompts() == []

    rule = make_rule({"left": "Complaints", "op": ">", "right": 3}, severity="HIGH", message="Complaints ${Complaints}")
    repo.put_rule_set(make_rule_set(Pillar.PRODUCTS_SERVICES, rule))
    repo.put_prompt(PromptDocument(id="p1", category="Consumer Duty - Products & Services", text="x"))
    repo.put_threshold_overrides(ThresholdOverrides(ps={"complaint_count_threshold": 3}))

    reopened = JsonFileRuleSetRepository(path)
    stored = reopened.get_rule_set(Pillar.PRODUCTS_SERVICES)
    assert stored.pillar == Pillar.PRODUCTS_SERVICES
    assert stored.rules[0].message == "Complaints ${Complaints}"
    assert [p.id for p in reopened.list_prompts()] == ["p1"]
    assert reopened.get_threshold_overrides().for_pillar(Pillar.PRODUCTS_SERVICES) == {"complaint_count_threshold": 3}

    # Re-putting a prompt with the same id replaces it.
    repo.put_prompt(PromptDocument(id="p1", category="Consumer Support", text="y"))
    assert [(p.id, p.text) for p in reopened.list_prompts()] == [("p1", "y")]

    reopened.delete_rule_set(Pillar.PRODUCTS_SERVICES)
    assert repo.get_rule_set(Pillar.PRODUCTS_SERVICES) is None
    assert not list(path.parent.glob(".rules.json.*"))


def test_json_repository_accepts_bare_rule_list(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"rule_sets": {"price-value": [PROMPT_RULE]}}), encoding="utf-8")
    rule_set = JsonFileRuleSetRepository(path).get_rule_set(Pillar.PRICE_VALUE)
    assert rule_set.rules[0].code == "PV9"


def test_corrupt_store_reads_as_empty(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text("{not json", encoding="utf-8")
    repo = JsonFileRuleSetRepository(path)
    assert repo.get_rule_set(Pillar.CONSUMER_SUPPORT) is None
    assert repo.list_prompts() == []
    assert repo.get_threshold_overrides() == ThresholdOverrides()


def test_structured_rule_set_takes_precedence(make_rule, make_rule_set, make_prompt):
    structured = make_rule_set(Pillar.PRICE_VALUE, make_rule({"left": "Fee", "op": ">", "right": 1}))
    prompt = make_prompt(category="Price & Value", rules=[PROMPT_RULE])
    repo = InMemoryRuleSetRepository(rule_sets=[structured], prompts=[prompt])

    rule_set, origin = load_rule_set_with_origin(repo, Pillar.PRICE_VALUE)
    assert origin == "structured"
    assert rule_set.rules[0].code == "R1"


def test_prompt_rules_used_when_no_structured_set(make_prompt):
    prompt = make_prompt(category="Consumer Duty - Price & Value", rules=[PROMPT_RULE])
    repo = InMemoryRuleSetRepository(prompts=[prompt])

    rule_set, origin = load_rule_set_with_origin(repo, Pillar.PRICE_VALUE)
    assert origin == "prompt-library"
    assert rule_set.pillar == Pillar.PRICE_VALUE
    assert [r.code for r in rule_set.rules] == ["PV9"]
    assert load_rule_set(repo, Pillar.CONSUMER_SUPPORT) is None


def test_invalid_prompt_rules_are_skipped(make_prompt):
    bad = make_prompt(prompt_id="bad", category="price & value", rules=[{"id": "x", "conditions": []}])
    good = make_prompt(prompt_id="good", category="price & value", rules=[PROMPT_RULE])
    repo = InMemoryRuleSetRepository(prompts=[bad, good])

    rule_set, origin = load_rule_set_with_origin(repo, Pillar.PRICE_VALUE)
    assert origin == "prompt-library"
    assert rule_set.rules[0].id == "pr-1"

    assert load_rule_set(InMemoryRuleSetRepository(prompts=[bad]), Pillar.PRICE_VALUE) is None


def test_latest_prompt_prefers_newest_dated(make_prompt):
    undated = make_prompt(prompt_id="undated", category="consumer understanding")
    dated = make_prompt(
        prompt_id="dated", category="consumer understanding", last_modified="2025-03-01T10:00:00+00:00"
    )
    repo = InMemoryRuleSetRepository(prompts=[undated, dated])
    assert latest_prompt(repo, Pillar.CONSUMER_UNDERSTANDING).id == "dated"
    assert latest_prompt(InMemoryRuleSetRepository(prompts=[undated]), Pillar.CONSUMER_UNDERSTANDING).id == "undated"
    assert latest_prompt(repo, Pillar.CONSUMER_SUPPORT) is None


def test_invalid_stored_rule_set_falls_through(tmp_path, make_prompt):
    path = tmp_path / "rules.json"
    bad = {"rules": [{"id": "r1", "conditions": [], "message": "m"}]}
    path.write_text(json.dumps({"rule_sets": {"price-value": bad}}), encoding="utf-8")
    repo = JsonFileRuleSetRepository(path)

    assert repo.get_rule_set(Pillar.PRICE_VALUE) is None
    assert load_rule_set_with_origin(repo, Pillar.PRICE_VALUE) == (None, None)

    repo.put_prompt(make_prompt(category="price & value", rules=[PROMPT_RULE]))
    rule_set, origin = load_rule_set_with_origin(repo, Pillar.PRICE_VALUE)
    assert origin == "prompt-library"
    assert rule_set.rules[0].code == "PV9"

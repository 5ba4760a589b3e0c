"""Source-agnostic rules engine for Consumer Duty monitoring.

This package intentionally contains only domain logic:
- Inputs are dataset rows (plain mappings) plus a rule set snapshot.
- No CSV parsing, HTTP or file layout lives here apart from the JSON rule store.
"""

from .aliases import ALIASES, resolve_field
from .coercion import to_bool_yes, to_number, to_text
from .conditions import matches
from .config import (
    ConsumerSupportThresholds,
    ConsumerUnderstandingThresholds,
    PriceValueThresholds,
    ProductsServicesThresholds,
    ThresholdOverrides,
)
from .models import (
    Condition,
    Finding,
    FindingMessage,
    FindingSeverity,
    Pillar,
    PillarReview,
    PromptDocument,
    Rule,
    RuleSet,
    Severity,
)
from .rule import evaluate_rule, render_template
from .runner import RulesRunner, evaluate_dataset
from .store import (
    InMemoryRuleSetRepository,
    JsonFileRuleSetRepository,
    RuleSetRepository,
    load_rule_set,
)
from .thresholds import derive_thresholds

# Import built-in analyzers so they self-register with the global registry.
from . import analyzers as _builtin_analyzers  # noqa: F401

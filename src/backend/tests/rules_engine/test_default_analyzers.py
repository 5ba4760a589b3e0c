from common.rules_engine.analyzers import (
    ConsumerSupportAnalyzer,
    ConsumerUnderstandingAnalyzer,
    PriceValueAnalyzer,
    ProductsServicesAnalyzer,
)
from common.rules_engine.config import (
    ConsumerSupportThresholds,
    ConsumerUnderstandingThresholds,
    PriceValueThresholds,
    ProductsServicesThresholds,
)
from common.rules_engine.models import FindingSeverity, Pillar
from common.rules_engine.registry import registry, run_default_analyzer


def test_registry_has_one_analyzer_per_pillar():
    assert set(registry.pillars()) == set(Pillar)


def test_products_services_escalates_to_critical():
    row = {
        "Product_ID": "P1",
        "Product_Name": "X",
        "Target_Market_Profile": "A",
        "Actual_Customer_Profile": "B",
        "Early_Closure_Rate": "12%",
        "Complaint_Count": "7",
        "Vulnerable_Customer_proportion": "15%",
    }
    findings = ProductsServicesAnalyzer().analyze([row], ProductsServicesThresholds())
    assert len(findings) == 1
    finding = findings[0]
    assert (finding.id, finding.title) == ("P1", "X")
    assert finding.severity == FindingSeverity.CRITICAL
    assert len(finding.messages) >= 3
    assert [m.code for m in finding.messages] == [
        "profile_mismatch",
        "early_closure",
        "complaints",
        "vulnerable_escalation",
    ]
    assert finding.messages[0].text == 'Market profile mismatch: Target "A" vs Actual "B"'
    assert "12%" in finding.messages[1].text
    assert "15%" in finding.messages[3].text


def test_products_services_vulnerable_alone_is_not_a_finding():
    rows = [
        {"Product_ID": "P1", "Vulnerable Customer proportion": "40%"},
        {"Product_ID": "P2", "Complaints": "6", "Vulnerable%": "5%"},
        {"Target_Profile": "Retail", "Actual_Profile": "retail"},
    ]
    findings = ProductsServicesAnalyzer().analyze(rows, ProductsServicesThresholds())
    assert [(f.id, f.severity) for f in findings] == [("P2", FindingSeverity.MEDIUM)]


def test_price_value_checks():
    rows = [
        {
            "Product_ID": "M1",
            "Product_Name": "Mortgage",
            "Interest Rate": "5.0%",
            "Market Rate": "3.5%",
            "Fee": "£999",
            "Market Fee": "£500",
            "Legacy Rate": "6.0",
            "New Rate": "4.0",
            "Lag_Days": "120",
        },
        {"Product_ID": "M2", "Rate": "3.6", "Market_Rate": "3.5", "Fee": "10", "Market_Fee": "0"},
        {"Product_ID": "M3", "Fee": "100", "Market_Fee": "0", "Rate_Change_Lag_Days": "91"},
    ]
    findings = PriceValueAnalyzer().analyze(rows, PriceValueThresholds())
    assert [f.id for f in findings] == ["M1", "M3"]

    first = findings[0]
    assert first.severity == FindingSeverity.HIGH
    assert [m.code for m in first.messages] == ["overpriced", "excess_fee", "loyalty_penalty", "slow_response"]
    assert first.messages[0].text == "overpriced: Interest rate 5% exceeds market average 3.5% by 1.50%"
    assert first.messages[0].extra == "Rate: 5% vs Market: 3.5%"

    third = findings[1]
    assert third.severity == FindingSeverity.MEDIUM
    assert third.title == "Unknown Product"


def test_price_value_respects_custom_delta():
    rows = [{"Product_ID": "P1", "Rate": "5.0", "Market_Rate": "3.5"}]
    strict = PriceValueThresholds(overpriced_delta_pct=0.5)
    loose = PriceValueThresholds(overpriced_delta_pct=2)
    assert PriceValueAnalyzer().analyze(rows, strict)
    assert not PriceValueAnalyzer().analyze(rows, loose)


def test_consumer_understanding_checks():
    rows = [
        {"communication_ID": "C1", "Miscommunication_Flag": "Yes", "Reviewed_By_Compliance": "No", "Readability_Score": "40"},
        {"communication_ID": "C2", "Miscommunication_Flag": "Yes", "Reviewed_By_Compliance": "Yes", "Readability_Score": "70"},
        {"communication_ID": "C3", "Readability Score": "50"},
        {"communication_ID": "C4", "Readability_Score": ""},
    ]
    findings = ConsumerUnderstandingAnalyzer().analyze(rows, ConsumerUnderstandingThresholds())
    assert [(f.id, f.severity) for f in findings] == [
        ("C1", FindingSeverity.HIGH),
        ("C3", FindingSeverity.MEDIUM),
    ]
    assert findings[0].title == "Communication C1"
    assert findings[0].messages[0].code == "compliance_review"

    relaxed = ConsumerUnderstandingThresholds(require_compliance_on_miscomm=False)
    findings = ConsumerUnderstandingAnalyzer().analyze(rows[:1], relaxed)
    assert [m.code for m in findings[0].messages] == ["readability"]


def test_consumer_support_checks():
    rows = [
        {"Support_ID": "S-1", "Avg_Wait_Time_Min": "12", "FCR": "No", "CSAT": "4"},
        {"Support_ID": "S-2", "Avg_Wait_Time_Min": "12", "FCR": "Yes", "CSAT": "2"},
        {"Support_ID": "S-3", "Resolution (hrs)": "80", "SLA": "No", "CSAT": "5"},
        {"Support_ID": "S-4", "Resolution (hrs)": "80", "CSAT": "5"},
        {"Avg_Wait_Time_Min": "9 min"},
    ]
    findings = ConsumerSupportAnalyzer().analyze(rows, ConsumerSupportThresholds())
    assert [(f.id, [m.code for m in f.messages]) for f in findings] == [
        ("S-1", ["wait_resolution"]),
        ("S-2", ["poor_satisfaction"]),
        ("S-3", ["sla_breach"]),
        ("S5", ["wait_resolution"]),
    ]
    assert all(f.severity == FindingSeverity.HIGH for f in findings)
    assert findings[0].messages[0].extra == "Wait: 12min, First Contact Resolution: No"


def test_run_default_analyzer_dispatches_by_pillar():
    rows = [{"Support_ID": "S-1", "CSAT": "1"}]
    findings = run_default_analyzer(Pillar.CONSUMER_SUPPORT, rows, ConsumerSupportThresholds())
    assert findings[0].title == "Support Interaction S-1"

"""Column header aliases per pillar.

Source datasets are exported from spreadsheets whose headers drift between
teams ("Complaint Count" vs "Complaint_Count" vs "Complaints"). Rules refer to
logical field names; the tables below list the literal headers accepted for
each one, highest priority first.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from .models import Pillar, Row

AliasMap = Mapping[str, Tuple[str, ...]]

_PRODUCT_ID = ("Product_ID", "Product Id", "ProductID", "ID")
_PRODUCT_NAME = ("Product_Name", "Product Name", "Name")

ALIASES: Mapping[Pillar, AliasMap] = MappingProxyType(
    {
        Pillar.PRODUCTS_SERVICES: MappingProxyType(
            {
                "Product_ID": _PRODUCT_ID,
                "Product_Name": _PRODUCT_NAME,
                "Target_Market_Profile": (
                    "Target_Market_Profile",
                    "Target Market Profile",
                    "Target_Profile",
                ),
                "Actual_Customer_Profile": (
                    "Actual_Customer_Profile",
                    "Actual Customer Profile",
                    "Actual_Profile",
                ),
                "Early_Closure_Rate": ("Early_Closure_Rate", "Early Closure Rate", "EarlyClosureRate"),
                "Complaint_Count": ("Complaint_Count", "Complaints", "Complaint Count"),
                "Vulnerable_Customer_proportion": (
                    "Vulnerable_Customer_proportion",
                    "Vulnerable Customer proportion",
                    "Vulnerable%",
                ),
            }
        ),
        Pillar.PRICE_VALUE: MappingProxyType(
            {
                "Product_ID": _PRODUCT_ID,
                "Product_Name": _PRODUCT_NAME,
                "Rate": ("Rate", "Interest_Rate", "Interest Rate"),
                "Market_Rate": ("Market_Rate", "Market Rate", "Market"),
                "Fee": ("Fee", "Product_Fee", "Upfront_Fee"),
                "Market_Fee": ("Market_Fee", "Market Fee"),
                "Legacy_Rate": ("Legacy_Rate", "Legacy Rate"),
                "New_Rate": ("New_Rate", "New Rate"),
                "Rate_Change_Lag_Days": ("Rate_Change_Lag_Days", "Rate Change Lag Days", "Lag_Days"),
            }
        ),
        Pillar.CONSUMER_UNDERSTANDING: MappingProxyType(
            {
                "communication_ID": ("communication_ID", "Communication_ID", "ID"),
                "Product_ID": ("Product_ID", "Product Id", "ProductID", "PID"),
                "Channel": ("Channel",),
                "Readability_Score": ("Readability_Score", "Readability Score"),
                "Miscommunication_Flag": ("Miscommunication_Flag", "Miscommunication Flag"),
                "Reviewed_By_Compliance": ("Reviewed_By_Compliance", "Reviewed By Compliance"),
                "Theme": ("Theme", "Complaint_Theme"),
                "Complaint_Count_Per_Theme": ("Complaint_Count_Per_Theme", "Complaint Count Per Theme"),
                "Example_Complaint": ("Example_Complaint", "Example Complaint"),
            }
        ),
        Pillar.CONSUMER_SUPPORT: MappingProxyType(
            {
                "Support_ID": (
                    "Support_ID",
                    "Interaction_ID",
                    "Support Interaction ID",
                    "Support_Interaction_ID",
                    "Interaction Id",
                    "SupportID",
                    "Support Ref",
                    "SID",
                    "ID",
                ),
                "Product_ID": ("Product_ID", "Product Id", "ProductID", "PID", "Product"),
                "Channel": ("Channel",),
                "Complaint_ID": ("Complaint_ID", "Complaint Id", "CID", "Complaint"),
                "CSAT_Score": ("CSAT_Score", "CSAT Score", "CSAT"),
                "Avg_Wait_Time_Min": (
                    "Avg_Wait_Time_Min",
                    "Avg Wait Time Min",
                    "Wait_Min",
                    "Wait (min)",
                    "WaitMinutes",
                ),
                "First_Contact_Resolution": (
                    "First_Contact_Resolution",
                    "First Contact Resolution",
                    "FCR",
                ),
                "SLA_Compliance_Flag": ("SLA_Compliance_Flag", "SLA Compliance Flag", "SLA"),
                "Complaint_Resolution_Time": (
                    "Complaint_Resolution_Time",
                    "Resolution_Time_Hours",
                    "Resolution Hours",
                    "Resolution (hrs)",
                ),
            }
        ),
    }
)


def aliases_for(pillar: Pillar, logical_field: str) -> Tuple[str, ...]:
    """Return the accepted headers for `logical_field`, or the name itself when unmapped."""
    return ALIASES[pillar].get(logical_field, (logical_field,))


def first_present(row: Row, labels: Tuple[str, ...]) -> Optional[Any]:
    for label in labels:
        if label in row:
            return row[label]
    return None


def resolve_field(row: Row, pillar: Pillar, logical_field: str) -> Optional[Any]:
    """Resolve a logical field against a row; absence yields None and never raises."""
    if not logical_field:
        return None
    return first_present(row, aliases_for(pillar, logical_field))

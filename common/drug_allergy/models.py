"""Data models for drug-allergy cross-reactivity checking."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class AllergySeverity(str, Enum):
    """Severity tier of an allergy alert.

    The match rules only produce MODERATE and SEVERE. MILD and CRITICAL are
    kept for callers and UIs that already branch on all four tiers.
    """
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    CRITICAL = "critical"

    @classmethod
    def display_name(cls, value):
        """Get human-readable display name for a severity."""
        if isinstance(value, cls):
            return value.value.title()
        return value.title() if value else ""

    @classmethod
    def all_options(cls):
        """Get all options as (value, display_name) tuples for dropdowns."""
        return [
            (cls.CRITICAL.value, "Critical"),
            (cls.SEVERE.value, "Severe"),
            (cls.MODERATE.value, "Moderate"),
            (cls.MILD.value, "Mild"),
        ]


class MatchType(str, Enum):
    """Which match rule produced an alert."""
    DIRECT = "direct"
    CROSS_REACTIVITY = "cross_reactivity"
    REVERSE_CROSS_REACTIVITY = "reverse_cross_reactivity"


def severity_rank(severity: AllergySeverity | str) -> int:
    """Get numeric rank for severity (higher = more severe, 0 if unknown)."""
    ranks = {
        AllergySeverity.CRITICAL: 4,
        AllergySeverity.SEVERE: 3,
        AllergySeverity.MODERATE: 2,
        AllergySeverity.MILD: 1,
    }
    try:
        return ranks[AllergySeverity(severity)]
    except ValueError:
        return 0


@dataclass(frozen=True)
class AllergyAlert:
    """A drug flagged against a patient's allergy history.

    ``allergen`` is the allergy entry exactly as the caller supplied it, not
    the knowledge base class key that was consulted.
    """
    drug_name: str
    allergen: str
    severity: AllergySeverity
    reaction: str
    recommendation: str
    match_type: MatchType
    allergen_class: str | None = None  # Knowledge base key, None for direct hits

    @property
    def is_contraindicated(self) -> bool:
        """Direct hits are absolute; cross-reactivity hits are cautions."""
        return self.match_type == MatchType.DIRECT

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "drugName": self.drug_name,
            "allergen": self.allergen,
            "severity": self.severity.value,
            "reaction": self.reaction,
            "recommendation": self.recommendation,
            "matchType": self.match_type.value,
            "allergenClass": self.allergen_class,
        }

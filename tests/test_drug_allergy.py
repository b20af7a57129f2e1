"""Tests for drug-allergy checking.

Covers:
- Allergy text parsing
- Direct, forward and reverse cross-reactivity matches
- Severity escalation and rule priority
- Batch checking order
- Severity badge styling
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from common.drug_allergy import (
    AllergyAlert,
    AllergyMatchEngine,
    AllergySeverity,
    CrossReactivityKnowledgeBase,
    DirectMatchRule,
    MatchType,
    check_all_drug_allergies,
    check_allergy_text,
    check_drug_allergy,
    get_allergy_severity_color,
    parse_allergies,
    severity_rank,
)


# =============================================================================
# Parsing
# =============================================================================

def test_parse_trims_lowercases_and_drops_empty_fragments():
    assert parse_allergies(" Penicillin ; Sulfa ,, ") == ["penicillin", "sulfa"]


@pytest.mark.parametrize("text", [None, "", " ", ",;,"])
def test_parse_empty_text(text):
    assert parse_allergies(text) == []


def test_parse_keeps_repeats_and_inner_spaces():
    assert parse_allergies("ACE Inhibitor;ace inhibitor, Mefenamic Acid") == [
        "ace inhibitor",
        "ace inhibitor",
        "mefenamic acid",
    ]


# =============================================================================
# Match engine
# =============================================================================

def test_amoxicillin_with_penicillin_allergy_is_severe_cross_reactivity():
    alert = check_drug_allergy("Amoxicillin", ["penicillin"])

    assert alert is not None
    assert alert.drug_name == "Amoxicillin"
    assert alert.allergen == "penicillin"
    assert alert.severity == AllergySeverity.SEVERE
    assert alert.match_type == MatchType.CROSS_REACTIVITY
    assert alert.allergen_class == "penicillin"
    assert alert.reaction == (
        "Cross-reactivity: Amoxicillin may cause reaction in patients allergic to penicillin"
    )
    assert alert.recommendation.startswith("CAUTION: Consider alternative to Amoxicillin")
    assert "Monitor closely" in alert.recommendation


def test_unrelated_drug_has_no_alert():
    assert check_drug_allergy("Paracetamol", ["penicillin"]) is None


def test_ibuprofen_with_aspirin_allergy():
    alert = check_drug_allergy("Ibuprofen", ["aspirin"])

    assert alert.match_type == MatchType.CROSS_REACTIVITY
    assert alert.severity == AllergySeverity.SEVERE


def test_direct_match_keeps_caller_spelling():
    alert = check_drug_allergy("Penicillin G", ["Penicillin"])

    assert alert.match_type == MatchType.DIRECT
    assert alert.allergen == "Penicillin"
    assert alert.severity == AllergySeverity.SEVERE
    assert alert.reaction == "Patient has documented allergy to Penicillin"
    assert alert.recommendation == (
        "CONTRAINDICATED: Do not prescribe Penicillin G. Select alternative medication."
    )
    assert alert.is_contraindicated
    assert alert.allergen_class is None


def test_direct_match_either_direction():
    # Allergy contains the drug name
    alert = check_drug_allergy("Amoxicillin", ["amoxicillin-clavulanate"])
    assert alert.match_type == MatchType.DIRECT

    # Drug contains the allergy
    alert = check_drug_allergy("Amoxicillin-Clavulanate", ["amoxicillin"])
    assert alert.match_type == MatchType.DIRECT
    assert alert.severity == AllergySeverity.MODERATE


def test_direct_match_without_severe_class_is_moderate():
    alert = check_drug_allergy("Atorvastatin 20mg", ["atorvastatin"])

    assert alert.match_type == MatchType.DIRECT
    assert alert.severity == AllergySeverity.MODERATE


@pytest.mark.parametrize(
    "drug, allergy, severity",
    [
        ("Furosemide", "sulfonamide", AllergySeverity.SEVERE),
        ("Co-trimoxazole", "sulfa", AllergySeverity.SEVERE),
        ("Naproxen", "nsaid", AllergySeverity.SEVERE),
        ("Ceftriaxone", "cephalosporin", AllergySeverity.MODERATE),
        ("Azithromycin", "macrolide", AllergySeverity.MODERATE),
        ("Lisinopril", "ACE inhibitor", AllergySeverity.MODERATE),
        ("Glipizide", "sulfonylurea", AllergySeverity.MODERATE),
    ],
)
def test_forward_cross_reactivity_severity(drug, allergy, severity):
    alert = check_drug_allergy(drug, [allergy])

    assert alert is not None
    assert alert.match_type == MatchType.CROSS_REACTIVITY
    assert alert.allergen == allergy
    assert alert.severity == severity


def test_forward_match_when_table_entry_contains_drug():
    alert = check_drug_allergy("cef", ["cephalosporin"])

    assert alert.match_type == MatchType.CROSS_REACTIVITY


def test_reverse_cross_reactivity_is_always_moderate():
    # "penicillin" is a severe class, but the allergen is one of its members
    alert = check_drug_allergy("Penicillin V", ["nafcillin"])

    assert alert.match_type == MatchType.REVERSE_CROSS_REACTIVITY
    assert alert.severity == AllergySeverity.MODERATE
    assert alert.allergen_class == "penicillin"
    assert alert.reaction == "Potential cross-reactivity between Penicillin V and nafcillin"
    assert alert.recommendation == "CAUTION: Verify allergy history before prescribing Penicillin V."
    assert not alert.is_contraindicated


def test_reverse_cross_reactivity_class_named_by_drug():
    alert = check_drug_allergy("Gentamicin", ["tobramycin"])

    assert alert.match_type == MatchType.REVERSE_CROSS_REACTIVITY
    assert alert.allergen_class == "gentamicin"


def test_forward_rule_wins_over_reverse():
    # Both "ampicillin" -> amoxicillin and "amoxicillin" -> ampicillin apply
    alert = check_drug_allergy("Amoxicillin", ["ampicillin"])

    assert alert.match_type == MatchType.CROSS_REACTIVITY
    assert alert.allergen_class == "ampicillin"
    assert alert.severity == AllergySeverity.MODERATE


def test_moves_on_to_next_allergy():
    alert = check_drug_allergy("Ibuprofen", ["latex", "shellfish", "aspirin"])

    assert alert.allergen == "aspirin"


def test_first_matching_allergy_wins():
    alert = check_drug_allergy("Ibuprofen", ["nsaid", "aspirin"])

    assert alert.allergen == "nsaid"


def test_allergy_tokens_normalized_at_comparison():
    alert = check_drug_allergy("  AMOXICILLIN ", ["  PeniCillin  "])

    assert alert is not None
    assert alert.allergen == "  PeniCillin  "
    assert alert.severity == AllergySeverity.SEVERE


def test_short_token_over_matches():
    alert = check_drug_allergy("Paracetamol", ["a"])

    assert alert is not None
    assert alert.match_type == MatchType.DIRECT


@pytest.mark.parametrize("drug", ["Amoxicillin", "Paracetamol", "penicillin", ""])
def test_no_allergies_no_alert(drug):
    assert check_drug_allergy(drug, []) is None


def test_repeat_calls_give_equal_results():
    first = check_drug_allergy("Ibuprofen", ["aspirin"])
    second = check_drug_allergy("Ibuprofen", ["aspirin"])

    assert first == second
    assert first is not second


def test_alert_requires_match_type():
    with pytest.raises(TypeError):
        AllergyAlert(
            drug_name="Amoxicillin",
            allergen="penicillin",
            severity=AllergySeverity.SEVERE,
            reaction="reaction",
            recommendation="recommendation",
        )


def test_alert_to_dict():
    alert = check_drug_allergy("Amoxicillin", ["penicillin"])

    assert alert.to_dict() == {
        "drugName": "Amoxicillin",
        "allergen": "penicillin",
        "severity": "severe",
        "reaction": alert.reaction,
        "recommendation": alert.recommendation,
        "matchType": "cross_reactivity",
        "allergenClass": "penicillin",
    }


def test_engine_uses_injected_knowledge_base():
    kb = CrossReactivityKnowledgeBase(
        {"opioid": ["morphine", "codeine"]},
        severe_classes={"opioid"},
    )

    alert = check_drug_allergy("Codeine phosphate", ["opioid"], knowledge_base=kb)
    assert alert.severity == AllergySeverity.SEVERE
    assert alert.match_type == MatchType.CROSS_REACTIVITY

    # Built-in table is not consulted
    assert check_drug_allergy("Amoxicillin", ["penicillin"], knowledge_base=kb) is None


def test_engine_with_empty_knowledge_base_only_matches_directly():
    engine = AllergyMatchEngine(CrossReactivityKnowledgeBase({}, severe_classes=set()))

    assert engine.check_drug("Amoxicillin", ["penicillin"]) is None
    assert engine.check_drug("Penicillin G", ["penicillin"]).severity == AllergySeverity.MODERATE


def test_engine_with_custom_rule_order():
    engine = AllergyMatchEngine(rules=[DirectMatchRule()])

    assert engine.check_drug("Amoxicillin", ["penicillin"]) is None
    assert engine.check_drug("Penicillin G", ["penicillin"]) is not None


# =============================================================================
# Batch checking
# =============================================================================

def test_batch_returns_only_flagged_drugs():
    alerts = check_all_drug_allergies(["Amoxicillin", "Paracetamol"], ["penicillin"])

    assert len(alerts) == 1
    assert alerts[0].drug_name == "Amoxicillin"


def test_batch_preserves_order_and_does_not_deduplicate():
    alerts = check_all_drug_allergies(
        ["Piperacillin", "Paracetamol", "Ampicillin", "Naproxen"],
        ["penicillin", "aspirin"],
    )

    assert [a.drug_name for a in alerts] == ["Piperacillin", "Ampicillin", "Naproxen"]
    assert [a.allergen for a in alerts] == ["penicillin", "penicillin", "aspirin"]


def test_batch_with_no_drugs():
    assert check_all_drug_allergies([], ["penicillin"]) == []


def test_check_allergy_text_parses_once():
    alerts = check_allergy_text(["Amoxicillin", "Furosemide", "Metformin"], "Penicillin; Sulfonamide")

    assert [(a.drug_name, a.allergen) for a in alerts] == [
        ("Amoxicillin", "penicillin"),
        ("Furosemide", "sulfonamide"),
    ]
    assert all(isinstance(a, AllergyAlert) for a in alerts)


@pytest.mark.parametrize("text", [None, "", " ; "])
def test_check_allergy_text_without_allergies(text):
    assert check_allergy_text(["Amoxicillin"], text) == []


# =============================================================================
# Presentation
# =============================================================================

@pytest.mark.parametrize(
    "severity, expected",
    [
        (AllergySeverity.CRITICAL, "bg-red-600 text-white"),
        (AllergySeverity.SEVERE, "bg-red-100 text-red-800 border-red-300"),
        ("moderate", "bg-orange-50 text-orange-700 border-orange-200"),
        ("mild", "bg-yellow-50 text-yellow-700 border-yellow-200"),
        ("unknown", "bg-gray-50 text-gray-700 border-gray-200"),
        (None, "bg-gray-50 text-gray-700 border-gray-200"),
    ],
)
def test_severity_color(severity, expected):
    assert get_allergy_severity_color(severity) == expected


def test_severity_rank_orders_tiers():
    ordered = sorted(
        ["mild", "critical", "moderate", "severe", "bogus"],
        key=severity_rank,
        reverse=True,
    )

    assert ordered == ["critical", "severe", "moderate", "mild", "bogus"]


def test_severity_options():
    assert AllergySeverity.all_options()[0] == ("critical", "Critical")
    assert AllergySeverity.display_name(AllergySeverity.SEVERE) == "Severe"
    assert AllergySeverity.display_name("mild") == "Mild"

"""Match engine and batch checker for drug-allergy alerts."""

from typing import Iterable, Sequence

from .knowledge_base import CrossReactivityKnowledgeBase, get_default_knowledge_base
from .models import AllergyAlert
from .parser import parse_allergies
from .rules import DEFAULT_RULES, BaseMatchRule


class AllergyMatchEngine:
    """Checks candidate drugs against a patient's allergy tokens."""

    def __init__(
        self,
        knowledge_base: CrossReactivityKnowledgeBase | None = None,
        rules: Sequence[BaseMatchRule] | None = None,
    ):
        """Initialize the engine.

        Args:
            knowledge_base: Table to consult (default: process-wide instance)
            rules: Match rules in priority order (default: direct, forward,
                reverse)
        """
        if knowledge_base is None:
            knowledge_base = get_default_knowledge_base()
        self.knowledge_base = knowledge_base
        self.rules: tuple[BaseMatchRule, ...] = tuple(rules) if rules is not None else DEFAULT_RULES

    def check_drug(self, drug_name: str, allergies: Iterable[str]) -> AllergyAlert | None:
        """Check one drug against the patient's allergies.

        Allergies are tried in the order given. For each one the rules run in
        priority order and the first alert produced is returned.

        Args:
            drug_name: Drug name as entered by the prescriber
            allergies: Allergy tokens (see parse_allergies)

        Returns:
            AllergyAlert for the first match, or None
        """
        drug = drug_name.lower().strip()

        for allergy in allergies:
            allergen = allergy.lower().strip()
            for rule in self.rules:
                alert = rule.match(drug_name, drug, allergy, allergen, self.knowledge_base)
                if alert is not None:
                    return alert

        return None

    def check_all(self, drugs: Iterable[str], allergies: Sequence[str]) -> list[AllergyAlert]:
        """Check each drug in order, returning one alert per flagged drug."""
        alerts = []

        for drug_name in drugs:
            alert = self.check_drug(drug_name, allergies)
            if alert is not None:
                alerts.append(alert)

        return alerts


def check_drug_allergy(
    drug_name: str,
    allergies: Sequence[str],
    knowledge_base: CrossReactivityKnowledgeBase | None = None,
) -> AllergyAlert | None:
    """
    Check if a drug is contraindicated with patient allergies.

    Args:
        drug_name: Name of the drug being prescribed
        allergies: Parsed allergy tokens
        knowledge_base: Optional knowledge base (default: process-wide instance)

    Returns:
        AllergyAlert if the drug matches an allergy, None if no match
    """
    return AllergyMatchEngine(knowledge_base).check_drug(drug_name, allergies)


def check_all_drug_allergies(
    drugs: Sequence[str],
    allergies: Sequence[str],
    knowledge_base: CrossReactivityKnowledgeBase | None = None,
) -> list[AllergyAlert]:
    """
    Check multiple drugs against allergies.

    Alerts come back in drug input order. Two drugs hitting the same allergy
    produce two alerts.
    """
    return AllergyMatchEngine(knowledge_base).check_all(drugs, allergies)


def check_allergy_text(
    drugs: Sequence[str],
    allergies_text: str | None,
    knowledge_base: CrossReactivityKnowledgeBase | None = None,
) -> list[AllergyAlert]:
    """Parse a free-text allergy field once and check every drug against it."""
    allergies = parse_allergies(allergies_text)
    if not allergies:
        return []
    return check_all_drug_allergies(drugs, allergies, knowledge_base)

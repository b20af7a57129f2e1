"""Allergy match rules, evaluated in priority order.

Each rule looks at one normalized drug name and one normalized allergy token.
Substring containment is tested in both directions, so "amoxicillin" matches
"amoxicillin-clavulanate" and the other way round. This over-matches short
tokens; a missed allergy costs more than a spurious caution.
"""

from .knowledge_base import CrossReactivityKnowledgeBase
from .models import AllergyAlert, AllergySeverity, MatchType


def names_overlap(a: str, b: str) -> bool:
    """Check if either name contains the other."""
    return a in b or b in a


class BaseMatchRule:
    """Base class for match rules."""

    match_type: MatchType

    def match(
        self,
        drug_name: str,
        drug: str,
        allergy: str,
        allergen: str,
        kb: CrossReactivityKnowledgeBase,
    ) -> AllergyAlert | None:
        """Return an alert if this rule fires for the drug/allergy pair.

        Args:
            drug_name: Drug name as given by the caller
            drug: Lower-cased, trimmed drug name
            allergy: Allergy entry as given by the caller
            allergen: Lower-cased, trimmed allergy token
            kb: Knowledge base to consult

        Returns:
            AllergyAlert or None
        """
        raise NotImplementedError

    def _severity(self, allergen: str, kb: CrossReactivityKnowledgeBase) -> AllergySeverity:
        if kb.is_severe_allergen(allergen):
            return AllergySeverity.SEVERE
        return AllergySeverity.MODERATE


class DirectMatchRule(BaseMatchRule):
    """The drug itself is the documented allergen."""

    match_type = MatchType.DIRECT

    def match(self, drug_name, drug, allergy, allergen, kb):
        if not names_overlap(drug, allergen):
            return None

        return AllergyAlert(
            drug_name=drug_name,
            allergen=allergy,
            severity=self._severity(allergen, kb),
            reaction=f"Patient has documented allergy to {allergy}",
            recommendation=f"CONTRAINDICATED: Do not prescribe {drug_name}. Select alternative medication.",
            match_type=self.match_type,
        )


class ForwardCrossReactivityRule(BaseMatchRule):
    """The allergy names a class whose members include the drug."""

    match_type = MatchType.CROSS_REACTIVITY

    def match(self, drug_name, drug, allergy, allergen, kb):
        cross_drugs = kb.get_cross_reactive_drugs(allergen)
        if not cross_drugs:
            return None

        for cross_drug in cross_drugs:
            if names_overlap(drug, cross_drug):
                return AllergyAlert(
                    drug_name=drug_name,
                    allergen=allergy,
                    # Severity follows the class key, not the matched member
                    severity=self._severity(allergen, kb),
                    reaction=f"Cross-reactivity: {drug_name} may cause reaction in patients allergic to {allergy}",
                    recommendation=(
                        f"CAUTION: Consider alternative to {drug_name} due to {allergy} allergy. "
                        f"Monitor closely if prescribed."
                    ),
                    match_type=self.match_type,
                    allergen_class=allergen,
                )

        return None


class ReverseCrossReactivityRule(BaseMatchRule):
    """The drug names a class whose members include the allergen.

    Always moderate: the allergen here is a member drug, not a class key.
    """

    match_type = MatchType.REVERSE_CROSS_REACTIVITY

    def match(self, drug_name, drug, allergy, allergen, kb):
        for class_key, cross_drugs in kb.classes():
            if class_key not in drug:
                continue
            if any(names_overlap(allergen, cross_drug) for cross_drug in cross_drugs):
                return AllergyAlert(
                    drug_name=drug_name,
                    allergen=allergy,
                    severity=AllergySeverity.MODERATE,
                    reaction=f"Potential cross-reactivity between {drug_name} and {allergy}",
                    recommendation=f"CAUTION: Verify allergy history before prescribing {drug_name}.",
                    match_type=self.match_type,
                    allergen_class=class_key,
                )

        return None


# Priority order; the first rule to fire for an allergy wins
DEFAULT_RULES: tuple[BaseMatchRule, ...] = (
    DirectMatchRule(),
    ForwardCrossReactivityRule(),
    ReverseCrossReactivityRule(),
)

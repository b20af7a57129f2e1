"""Drug-allergy cross-reactivity checking.

Flags candidate drugs against a patient's free-text allergy history using a
curated table of allergen classes and their cross-reactive drugs. Alerts are
advisory only.
"""

from .models import (
    AllergySeverity,
    MatchType,
    AllergyAlert,
    severity_rank,
)
from .parser import parse_allergies
from .knowledge_base import (
    DRUG_ALLERGEN_CROSS_REACTIVITY,
    SEVERE_ALLERGEN_CLASSES,
    CrossReactivityKnowledgeBase,
    KnowledgeBaseError,
    load_knowledge_base,
    get_default_knowledge_base,
    set_default_knowledge_base,
)
from .rules import (
    BaseMatchRule,
    DirectMatchRule,
    ForwardCrossReactivityRule,
    ReverseCrossReactivityRule,
    DEFAULT_RULES,
)
from .engine import (
    AllergyMatchEngine,
    check_drug_allergy,
    check_all_drug_allergies,
    check_allergy_text,
)
from .presentation import get_allergy_severity_color

__all__ = [
    # Models
    "AllergySeverity",
    "MatchType",
    "AllergyAlert",
    "severity_rank",
    # Parsing
    "parse_allergies",
    # Knowledge base
    "DRUG_ALLERGEN_CROSS_REACTIVITY",
    "SEVERE_ALLERGEN_CLASSES",
    "CrossReactivityKnowledgeBase",
    "KnowledgeBaseError",
    "load_knowledge_base",
    "get_default_knowledge_base",
    "set_default_knowledge_base",
    # Rules and engine
    "BaseMatchRule",
    "DirectMatchRule",
    "ForwardCrossReactivityRule",
    "ReverseCrossReactivityRule",
    "DEFAULT_RULES",
    "AllergyMatchEngine",
    "check_drug_allergy",
    "check_all_drug_allergies",
    "check_allergy_text",
    # Presentation
    "get_allergy_severity_color",
]

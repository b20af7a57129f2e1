"""Cross-reactivity knowledge base for drug-allergy checking.

The table is a flat mapping of allergen class -> drug names that cross-react
with it, so a pharmacist can review it directly. Keys and drug names are
authored lower-case; the match engine never re-normalizes table values.

Some classes overlap on purpose (e.g. "sulfa" and "sulfonamide" carry related
but different drug lists).
"""

import json
import logging
import os
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping

logger = logging.getLogger(__name__)

KB_PATH_ENV_VAR = "DRUG_ALLERGY_KB_PATH"


class KnowledgeBaseError(ValueError):
    """Raised when a cross-reactivity table is malformed."""


# =============================================================================
# Cross-Reactivity Table
# =============================================================================

# Order matters: reverse lookups walk the classes in this order
DRUG_ALLERGEN_CROSS_REACTIVITY: dict[str, list[str]] = {
    # Penicillins
    "penicillin": [
        "amoxicillin",
        "ampicillin",
        "penicillin g",
        "penicillin v",
        "dicloxacillin",
        "oxacillin",
        "nafcillin",
        "piperacillin",
        "ticarcillin",
    ],
    "amoxicillin": ["penicillin", "ampicillin", "amoxicillin-clavulanate"],
    "ampicillin": ["penicillin", "amoxicillin"],

    # Sulfonamides (antibiotic and non-antibiotic)
    "sulfonamide": [
        "sulfamethoxazole",
        "sulfadiazine",
        "sulfasalazine",
        "furosemide",
        "hydrochlorothiazide",
        "acetazolamide",
        "gliclazide",
        "glipizide",
        "glyburide",
    ],
    "sulfa": [
        "sulfamethoxazole",
        "trimethoprim-sulfamethoxazole",
        "co-trimoxazole",
        "sulfasalazine",
    ],

    # NSAIDs
    "aspirin": ["ibuprofen", "naproxen", "diclofenac", "indomethacin", "ketorolac", "celecoxib"],
    "ibuprofen": ["aspirin", "naproxen", "diclofenac", "indomethacin", "ketorolac", "celecoxib"],
    "nsaid": [
        "aspirin",
        "ibuprofen",
        "naproxen",
        "diclofenac",
        "indomethacin",
        "ketorolac",
        "celecoxib",
        "mefenamic acid",
    ],

    # Cephalosporins
    "cephalosporin": ["ceftriaxone", "cefazolin", "cefuroxime", "cefepime", "cefixime", "cephalexin"],

    # Aminoglycosides
    "aminoglycoside": ["gentamicin", "tobramycin", "amikacin", "streptomycin", "neomycin"],
    "gentamicin": ["tobramycin", "amikacin", "streptomycin", "neomycin"],

    # Macrolides
    "macrolide": ["erythromycin", "azithromycin", "clarithromycin"],

    # Tetracyclines
    "tetracycline": ["doxycycline", "minocycline", "tetracycline"],

    # Fluoroquinolones
    "fluoroquinolone": ["ciprofloxacin", "levofloxacin", "moxifloxacin", "norfloxacin", "ofloxacin"],
    "ciprofloxacin": ["levofloxacin", "moxifloxacin", "norfloxacin", "ofloxacin"],

    # Statins
    "statin": ["atorvastatin", "simvastatin", "rosuvastatin", "pravastatin", "lovastatin"],

    # ACE inhibitors (cough is usually an intolerance but is often charted as allergy)
    "ace inhibitor": ["lisinopril", "enalapril", "ramipril", "captopril", "perindopril"],

    # Sulfonylureas
    "sulfonylurea": ["glibenclamide", "glipizide", "gliclazide", "glyburide"],
}

# Allergen classes that escalate an alert to severe
SEVERE_ALLERGEN_CLASSES: frozenset[str] = frozenset(
    {"penicillin", "sulfonamide", "sulfa", "aspirin", "nsaid"}
)


# =============================================================================
# Knowledge Base
# =============================================================================

def _check_name(name, where: str) -> None:
    if not isinstance(name, str) or not name:
        raise KnowledgeBaseError(f"{where}: expected a non-empty string, got {name!r}")
    if name != name.strip().lower():
        raise KnowledgeBaseError(f"{where}: {name!r} must be lower-case with no padding")


class CrossReactivityKnowledgeBase:
    """Read-only allergen class table plus the set of severe classes."""

    def __init__(
        self,
        cross_reactivity: Mapping[str, list[str]] | None = None,
        severe_classes: frozenset[str] | set[str] | None = None,
    ):
        """Build and validate the knowledge base.

        Args:
            cross_reactivity: Class key -> cross-reactive drug names
                (default: the built-in table)
            severe_classes: Class keys that escalate severity
                (default: SEVERE_ALLERGEN_CLASSES)

        Raises:
            KnowledgeBaseError: If any key or drug name is not lower-case
        """
        if cross_reactivity is None:
            cross_reactivity = DRUG_ALLERGEN_CROSS_REACTIVITY
        if severe_classes is None:
            severe_classes = SEVERE_ALLERGEN_CLASSES

        table: dict[str, tuple[str, ...]] = {}
        for class_key, drugs in cross_reactivity.items():
            _check_name(class_key, "class key")
            if isinstance(drugs, str) or not isinstance(drugs, (list, tuple)):
                raise KnowledgeBaseError(
                    f"class {class_key!r}: expected a list of drug names, got {type(drugs).__name__}"
                )
            for drug in drugs:
                _check_name(drug, f"class {class_key!r}")
            table[class_key] = tuple(drugs)

        for class_key in severe_classes:
            _check_name(class_key, "severe class")

        self._table = MappingProxyType(table)
        self._severe_classes = frozenset(severe_classes)

    @property
    def severe_classes(self) -> frozenset[str]:
        return self._severe_classes

    def get_cross_reactive_drugs(self, class_key: str) -> tuple[str, ...] | None:
        """Get the drugs listed under a class key, or None if unknown."""
        return self._table.get(class_key)

    def is_severe_class(self, class_key: str) -> bool:
        return class_key in self._severe_classes

    def is_severe_allergen(self, allergen: str) -> bool:
        """Check if an allergen token names (or contains) a severe class."""
        return any(severe in allergen for severe in self._severe_classes)

    def classes(self) -> Iterator[tuple[str, tuple[str, ...]]]:
        """Iterate (class key, drugs) pairs in authoring order."""
        return iter(self._table.items())

    def to_dict(self) -> dict:
        """Convert to the JSON layout accepted by load_knowledge_base."""
        return {
            "cross_reactivity": {key: list(drugs) for key, drugs in self._table.items()},
            "severe_classes": sorted(self._severe_classes),
        }

    def __contains__(self, class_key: object) -> bool:
        return class_key in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return (
            f"CrossReactivityKnowledgeBase(classes={len(self._table)}, "
            f"severe={sorted(self._severe_classes)})"
        )


def load_knowledge_base(path: str | Path) -> CrossReactivityKnowledgeBase:
    """
    Load a knowledge base from a JSON file.

    Expected layout::

        {
            "cross_reactivity": {"penicillin": ["amoxicillin", ...], ...},
            "severe_classes": ["penicillin", ...]
        }

    ``severe_classes`` is optional and defaults to the built-in set.

    Args:
        path: Path to the JSON file

    Returns:
        Validated CrossReactivityKnowledgeBase

    Raises:
        FileNotFoundError: If the file does not exist
        KnowledgeBaseError: If the file is not valid JSON or has a bad layout
    """
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Knowledge base not found: {path}")

    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise KnowledgeBaseError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("cross_reactivity"), dict):
        raise KnowledgeBaseError(f"{path}: missing 'cross_reactivity' object")

    severe = data.get("severe_classes")
    if severe is not None:
        if not isinstance(severe, list):
            raise KnowledgeBaseError(f"{path}: 'severe_classes' must be a list")
        for class_key in severe:
            _check_name(class_key, f"{path}: severe class")

    kb = CrossReactivityKnowledgeBase(
        data["cross_reactivity"],
        frozenset(severe) if severe is not None else None,
    )

    logger.info(f"Loaded cross-reactivity knowledge base from {path}: {len(kb)} classes")
    return kb


# =============================================================================
# Process-wide default
# =============================================================================

_default_kb: CrossReactivityKnowledgeBase | None = None
_default_lock = threading.Lock()


def get_default_knowledge_base() -> CrossReactivityKnowledgeBase:
    """Get the process-wide knowledge base, building it on first use.

    Uses the file named by DRUG_ALLERGY_KB_PATH when set, otherwise the
    built-in table.
    """
    global _default_kb

    kb = _default_kb
    if kb is not None:
        return kb

    with _default_lock:
        if _default_kb is None:
            kb_path = os.environ.get(KB_PATH_ENV_VAR)
            if kb_path:
                _default_kb = load_knowledge_base(kb_path)
            else:
                _default_kb = CrossReactivityKnowledgeBase()
                logger.debug(f"Using built-in knowledge base: {len(_default_kb)} classes")
        return _default_kb


def set_default_knowledge_base(
    kb: CrossReactivityKnowledgeBase | None,
) -> CrossReactivityKnowledgeBase | None:
    """Replace the process-wide knowledge base.

    Lookups already in progress keep the instance they started with. Passing
    None resets to lazy construction on next use.

    Returns:
        The previous default (None if it was never built)
    """
    global _default_kb

    with _default_lock:
        previous = _default_kb
        _default_kb = kb

    if kb is not None:
        logger.info(f"Default knowledge base replaced: {len(kb)} classes")
    return previous

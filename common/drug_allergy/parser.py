"""Free-text allergy history parsing."""

import re

# One or more consecutive separators
ALLERGY_SEPARATORS = re.compile(r"[,;]+")


def parse_allergies(allergies_text: str | None) -> list[str]:
    """
    Split a free-text allergy field into lower-cased allergen tokens.

    Repeated entries are kept; matching only tests membership.

    Args:
        allergies_text: Allergy history as entered, e.g. "Penicillin; sulfa"

    Returns:
        List of trimmed, lower-cased tokens (empty if no text)
    """
    if not allergies_text:
        return []

    tokens = []
    for piece in ALLERGY_SEPARATORS.split(allergies_text.lower()):
        piece = piece.strip()
        if piece:
            tokens.append(piece)

    return tokens

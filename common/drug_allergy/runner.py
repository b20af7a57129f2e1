#!/usr/bin/env python3
"""CLI entry point for drug-allergy checking.

Usage:
    # Check one drug
    python -m common.drug_allergy.runner --allergies "Penicillin; sulfa" amoxicillin

    # Check several drugs, JSON output
    python -m common.drug_allergy.runner --allergies "aspirin" ibuprofen paracetamol --json

    # Use a reviewed knowledge base file
    python -m common.drug_allergy.runner --kb-path ~/kb.json --allergies "statin" atorvastatin

Exit status is 1 when any alert is raised, 0 otherwise.
"""

import argparse
import json
import logging
import sys

from .engine import AllergyMatchEngine
from .knowledge_base import KB_PATH_ENV_VAR, load_knowledge_base
from .parser import parse_allergies


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Drug-Allergy Checker - Flag drugs that conflict with a patient's allergy history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "drugs",
        nargs="+",
        help="Drug names to check",
    )
    parser.add_argument(
        "--allergies",
        type=str,
        default="",
        help="Allergy history as free text, separated by commas or semicolons",
    )
    parser.add_argument(
        "--kb-path",
        type=str,
        default=None,
        help=f"Knowledge base JSON file (default: ${KB_PATH_ENV_VAR} or built-in table)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print alerts as JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    # Configure logging
    log_level = logging.DEBUG if args.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    kb = load_knowledge_base(args.kb_path) if args.kb_path else None
    engine = AllergyMatchEngine(kb)

    allergies = parse_allergies(args.allergies)
    alerts = engine.check_all(args.drugs, allergies)

    if args.json:
        print(json.dumps([alert.to_dict() for alert in alerts], indent=2))
    else:
        print(f"Allergies: {', '.join(allergies) or 'none documented'}")
        print(f"Drugs checked: {len(args.drugs)}")
        print("-" * 60)
        if not alerts:
            print("No allergy conflicts found.")
        for alert in alerts:
            print(f"[{alert.severity.value.upper()}] {alert.drug_name}")
            print(f"  Allergen:       {alert.allergen}")
            print(f"  Reaction:       {alert.reaction}")
            print(f"  Recommendation: {alert.recommendation}")

    return 1 if alerts else 0


if __name__ == "__main__":
    sys.exit(main())

"""
Applicant Ranking CLI — Read-Only Interface for Applicant Review.

Commands:
    applicant-rank rank              — Rank applicants for a scholarship
    applicant-rank explain <id>      — Show the explanation for an applicant
    applicant-rank policy            — Show the active weights and bonuses

This CLI is READ-ONLY. It never writes rankings anywhere; results are
printed and discarded.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Optional

from ..logger import configure_logging
from ..ranking.components import Rating, compute_rating
from ..ranking.policy import DEFAULT_POLICY, PolicyValidationError, RankingPolicy, load_policy
from ..ranking.scorer import ScoredApplicant, generate_short_explanation
from .pipeline import InputLoadError, RankingResult, run_ranking


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_rating_badge(rating: Rating) -> str:
    """Format a rating as a fixed-width badge."""
    badges = {
        Rating.EXCELLENT: "[EXCELLENT]",
        Rating.GOOD: "[GOOD]     ",
        Rating.FAIR: "[FAIR]     ",
        Rating.NEEDS_IMPROVEMENT: "[WEAK]     ",
    }
    return badges.get(rating, "[?]        ")


def format_applicant_row(scored: ScoredApplicant) -> str:
    """Format a single ranked applicant for display."""
    badge = format_rating_badge(compute_rating(scored.score))
    if scored.criteria_total:
        criteria = f"{scored.criteria_matches}/{scored.criteria_total}"
    else:
        criteria = "-"
    return (
        f"{badge} | #{scored.rank:<3} | Score: {scored.score:.3f} "
        f"| Criteria: {criteria:>5} | ID: {scored.applicant_id}"
    )


def format_policy(policy: RankingPolicy) -> str:
    """Format the weights and bonuses of a policy."""
    lines = ["WEIGHTS:"]
    lines.append(f"  Criteria Matching:    {policy.criteria_weight:.2f}")
    lines.append(f"  Form Completeness:    {policy.completeness_weight:.2f}")
    lines.append(f"  Academic Performance: {policy.academic_weight:.2f}")
    lines.append(f"  Response Quality:     {policy.quality_weight:.2f}")
    lines.append("")
    lines.append("BONUSES:")
    lines.append(f"  Complete application form: +{policy.complete_form_bonus:.2f}")
    lines.append(f"  Meets all criteria:        +{policy.all_criteria_bonus:.2f}")
    return "\n".join(lines)


def _run(args: argparse.Namespace) -> Optional[RankingResult]:
    """Run the pipeline from parsed args, printing load errors."""
    try:
        return run_ranking(
            applicants_path=getattr(args, "applicants", None),
            scholarship_path=getattr(args, "scholarship", None),
            policy_path=getattr(args, "policy", None),
            max_workers=getattr(args, "workers", None),
        )
    except (InputLoadError, PolicyValidationError) as e:
        print("ERROR: Ranking failed")
        print(f"Reason: {e}")
        return None


# =============================================================================
# CLI COMMANDS
# =============================================================================

def cmd_rank(args: argparse.Namespace) -> int:
    """Rank applicants and print the ordered list."""
    result = _run(args)
    if result is None:
        return 1

    ranked = result.ranked
    top = getattr(args, "top", None)
    if top is not None:
        ranked = ranked[:top]

    if getattr(args, "json", False):
        print(json.dumps([scored.to_dict() for scored in ranked], indent=2, ensure_ascii=False))
        return 0

    print("Applicant Ranking — Ranked Applicants")
    print("=" * 70)
    print()

    if not ranked:
        print("No applicants found.")
        return 0

    for scored in ranked:
        print(format_applicant_row(scored))
        print(f"    {generate_short_explanation(scored)}")

    print()
    print(f"Total: {len(result.ranked)} applicants")
    print()
    print("Use 'applicant-rank explain <id>' for a detailed explanation.")
    return 0


def cmd_explain(args: argparse.Namespace) -> int:
    """Show the explanation for a specific applicant."""
    result = _run(args)
    if result is None:
        return 1

    scored = result.get_by_id(args.applicant_id)
    if scored is None:
        print(f"Applicant not found: {args.applicant_id}")
        print()
        print("Available applicants:")
        for applicant_id in result.get_ids():
            print(f"  {applicant_id}")
        return 1

    print("Applicant Ranking — Explanation")
    print("=" * 50)
    print()
    print(scored.get_explanation())
    return 0


def cmd_policy(args: argparse.Namespace) -> int:
    """Show the active ranking policy."""
    policy_path = getattr(args, "policy", None)
    try:
        policy = load_policy(policy_path) if policy_path else DEFAULT_POLICY
    except PolicyValidationError as e:
        print("ERROR: Invalid ranking policy")
        print(f"Reason: {e}")
        return 1

    source = policy_path or "built-in defaults"
    print(f"Ranking Policy ({source})")
    print("=" * 50)
    print()
    print(format_policy(policy))
    return 0


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--applicants",
        metavar="FILE",
        help="Applicants JSON file (default: built-in sample)",
    )
    parser.add_argument(
        "--scholarship",
        metavar="FILE",
        help="Scholarship JSON file (default: built-in sample)",
    )
    parser.add_argument(
        "--policy",
        metavar="FILE",
        help="Ranking policy YAML file (default: built-in weights)",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Score large batches on this many threads",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="applicant-rank",
        description="Applicant Ranking Engine — Explainable Scholarship Applicant Ranking",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    # Rank command
    rank_parser = subparsers.add_parser(
        "rank",
        help="Rank applicants for a scholarship",
    )
    _add_input_arguments(rank_parser)
    rank_parser.add_argument(
        "--top",
        type=_positive_int,
        default=None,
        help="Only show the first N applicants",
    )
    rank_parser.add_argument(
        "--json",
        action="store_true",
        help="Print ranked applicants as JSON",
    )
    rank_parser.set_defaults(func=cmd_rank)

    # Explain command
    explain_parser = subparsers.add_parser(
        "explain",
        help="Show explanation for an applicant",
    )
    explain_parser.add_argument(
        "applicant_id",
        help="Applicant ID to explain",
    )
    _add_input_arguments(explain_parser)
    explain_parser.set_defaults(func=cmd_explain)

    # Policy command
    policy_parser = subparsers.add_parser(
        "policy",
        help="Show the active weights and bonuses",
    )
    policy_parser.add_argument(
        "--policy",
        metavar="FILE",
        help="Ranking policy YAML file (default: built-in weights)",
    )
    policy_parser.set_defaults(func=cmd_policy)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

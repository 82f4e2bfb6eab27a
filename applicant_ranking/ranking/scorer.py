"""
Applicant Scorer for the Applicant Ranking Engine.

Deterministic applicant ranking with full explainability.

Core principle:
    Every score must be decomposable into human-readable reasons.
    Identical inputs always produce identical scores and ranks.

Score composition:
    raw score   = sum of (component value x component weight)
    final score = min(raw score + bonuses, 1.0)

Ranking:
    Score descending, then criteria matches, then form completeness.
    Equal scores share a rank and the next distinct score resumes at its
    ordinal position (competition ranking: 1, 1, 3).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Union

from ..domain import ApplicantRecord, ScholarshipCriteria
from ..logger import format_fields
from .components import (
    ComponentScore,
    Rating,
    compute_rating,
    count_criteria_matches,
    evaluate_academic_performance,
    evaluate_criteria_match,
    evaluate_form_completeness,
    evaluate_response_quality,
)
from .policy import DEFAULT_POLICY, MAX_SCORE, RankingPolicy

logger = logging.getLogger(__name__)

# Batches smaller than this are always scored sequentially
PARALLEL_THRESHOLD = 32

Evaluator = Callable[[ApplicantRecord, ScholarshipCriteria, dict[str, Any]], float]


# =============================================================================
# SCORING TABLE
# =============================================================================

@dataclass(frozen=True)
class ScoringNode:
    """One row of the scoring table: a named, weighted evaluator."""
    name: str
    description: str
    weight: float
    evaluate: Evaluator


def build_scoring_table(policy: RankingPolicy = DEFAULT_POLICY) -> list[ScoringNode]:
    """The four scoring components in explanation order."""
    return [
        ScoringNode("criteria_match", "Criteria Matching",
                    policy.criteria_weight, evaluate_criteria_match),
        ScoringNode("form_completeness", "Form Completeness",
                    policy.completeness_weight, evaluate_form_completeness),
        ScoringNode("academic_performance", "Academic Performance",
                    policy.academic_weight, evaluate_academic_performance),
        ScoringNode("response_quality", "Response Quality",
                    policy.quality_weight, evaluate_response_quality),
    ]


def describe_component(description: str, value: float) -> str:
    """Explanation line for a component, e.g. "✓ Criteria Matching: Excellent (100%)"."""
    rating = compute_rating(value)
    # Halves round up: 12.5 -> 13
    percent = math.floor(value * 100 + 0.5)
    return f"{rating.symbol} {description}: {rating.value} ({percent}%)"


# =============================================================================
# SCORE BREAKDOWN
# =============================================================================

@dataclass
class ScoreBreakdown:
    """
    Complete score decomposition for an applicant.

    Exposes:
    - All component scores
    - Bonus points and the reasons they were awarded
    - Raw and final totals
    """
    components: list[ComponentScore]
    criteria_matches: int
    criteria_total: int
    form_completeness: float
    bonus_points: float = 0.0
    bonus_reasons: list[str] = field(default_factory=list)

    @property
    def raw_score(self) -> float:
        """Sum of weighted component contributions, before bonuses."""
        return sum(c.contribution for c in self.components)

    @property
    def total_score(self) -> float:
        """Raw score plus bonuses, capped at 1.0."""
        return min(self.raw_score + self.bonus_points, MAX_SCORE)

    @property
    def explanation(self) -> list[str]:
        """One line per component, then one per awarded bonus."""
        return [c.reason for c in self.components] + list(self.bonus_reasons)

    def get_component(self, name: str) -> Optional[ComponentScore]:
        for component in self.components:
            if component.name == name:
                return component
        return None

    def get_strengths(self) -> list[ComponentScore]:
        """Components rated Excellent or Good."""
        return [c for c in self.components if c.rating in (Rating.EXCELLENT, Rating.GOOD)]

    def get_weaknesses(self) -> list[ComponentScore]:
        """Components rated Needs Improvement."""
        return [c for c in self.components if c.rating == Rating.NEEDS_IMPROVEMENT]


# =============================================================================
# SCORED APPLICANT
# =============================================================================

@dataclass
class ScoredApplicant:
    """
    An applicant with its ranking information.

    Contains:
    - Original ApplicantRecord (untouched)
    - Score breakdown (fully transparent)
    - Competition rank, assigned after sorting
    """
    applicant: ApplicantRecord
    breakdown: ScoreBreakdown
    rank: int = 0

    @property
    def applicant_id(self) -> str:
        return self.applicant.applicant_id

    @property
    def score(self) -> float:
        return self.breakdown.total_score

    @property
    def criteria_matches(self) -> int:
        return self.breakdown.criteria_matches

    @property
    def criteria_total(self) -> int:
        return self.breakdown.criteria_total

    @property
    def form_completeness(self) -> float:
        return self.breakdown.form_completeness

    @property
    def bonus_points(self) -> float:
        return self.breakdown.bonus_points

    @property
    def explanation(self) -> list[str]:
        return self.breakdown.explanation

    def sort_key(self) -> tuple:
        """
        Sort key for deterministic ordering.

        1. Score (highest first)
        2. Criteria matches (highest first)
        3. Form completeness (highest first)
        """
        return (-self.score, -self.criteria_matches, -self.form_completeness)

    def evaluation_details(self) -> dict[str, Any]:
        return {
            "criteriaMatches": self.criteria_matches,
            "criteriaTotal": self.criteria_total,
            "formCompleteness": self.form_completeness,
            "bonusPoints": self.bonus_points,
            "explanation": self.explanation,
        }

    def to_dict(self) -> dict[str, Any]:
        """The applicant record plus rank, score and evaluationDetails."""
        data = self.applicant.to_dict()
        data["rank"] = self.rank
        data["score"] = self.score
        data["evaluationDetails"] = self.evaluation_details()
        return data

    def get_explanation(self) -> str:
        """
        Generate plain-text explanation of the ranking.

        This is a VIEW, not indexed truth.
        """
        return generate_explanation(self)


# =============================================================================
# SCORER
# =============================================================================

def score_applicant(
    applicant: ApplicantRecord,
    scholarship: ScholarshipCriteria,
    policy: RankingPolicy = DEFAULT_POLICY,
    scoring_table: Optional[list[ScoringNode]] = None,
) -> ScoredApplicant:
    """
    Score one applicant against a scholarship.

    The returned ScoredApplicant is unranked (rank 0) until it passes
    through rank_applicants.
    """
    if scoring_table is None:
        scoring_table = build_scoring_table(policy)

    response_map = applicant.response_map()

    components = []
    for node in scoring_table:
        value = node.evaluate(applicant, scholarship, response_map)
        components.append(ComponentScore(
            name=node.name,
            raw_value=value,
            weight=node.weight,
            contribution=value * node.weight,
            reason=describe_component(node.description, value),
        ))

    criteria_total = len(scholarship.criteria)
    criteria_matches = (
        count_criteria_matches(applicant, scholarship, response_map)
        if criteria_total > 0 else 0
    )
    form_completeness = evaluate_form_completeness(applicant, scholarship, response_map)

    bonus_points = 0.0
    bonus_reasons = []
    if form_completeness == 1.0:
        bonus_points += policy.complete_form_bonus
        bonus_reasons.append("+ Bonus: Complete application form")
    if criteria_total > 0 and criteria_matches == criteria_total:
        bonus_points += policy.all_criteria_bonus
        bonus_reasons.append("+ Bonus: Meets all criteria")

    breakdown = ScoreBreakdown(
        components=components,
        criteria_matches=criteria_matches,
        criteria_total=criteria_total,
        form_completeness=form_completeness,
        bonus_points=bonus_points,
        bonus_reasons=bonus_reasons,
    )

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(format_fields(
            "Scored applicant",
            applicant_id=applicant.applicant_id,
            score=round(breakdown.total_score, 4),
            **{c.name: round(c.raw_value, 4) for c in components},
        ))

    return ScoredApplicant(applicant=applicant, breakdown=breakdown)


def assign_competition_ranks(ordered: list[ScoredApplicant]) -> None:
    """
    Assign ranks in place to an already-sorted list.

    An applicant whose score exactly equals the previous applicant's
    shares that rank; otherwise its rank is its 1-based position.
    """
    for index, scored in enumerate(ordered):
        if index > 0 and ordered[index - 1].score == scored.score:
            scored.rank = ordered[index - 1].rank
        else:
            scored.rank = index + 1


def _coerce_applicant(applicant: Any) -> Optional[ApplicantRecord]:
    """ApplicantRecord for a record or mapping; None for anything else."""
    if isinstance(applicant, ApplicantRecord):
        return applicant
    if isinstance(applicant, Mapping):
        return ApplicantRecord.from_dict(applicant)
    logger.debug("Skipping unreadable applicant of type %s", type(applicant).__name__)
    return None


def _coerce_scholarship(scholarship: Any) -> ScholarshipCriteria:
    if isinstance(scholarship, ScholarshipCriteria):
        return scholarship
    if isinstance(scholarship, Mapping):
        return ScholarshipCriteria.from_dict(scholarship)
    if scholarship is not None:
        logger.debug("Ignoring unreadable scholarship of type %s", type(scholarship).__name__)
    return ScholarshipCriteria()


def rank_applicants(
    applicants: Optional[Iterable[Union[ApplicantRecord, Mapping]]],
    scholarship: Union[ScholarshipCriteria, Mapping, None],
    policy: Optional[RankingPolicy] = None,
    max_workers: Optional[int] = None,
) -> list[ScoredApplicant]:
    """
    Score and rank applicants for a scholarship.

    This is the main entry point of the engine.

    Args:
        applicants: ApplicantRecords or hydrated application mappings;
            any other entry is skipped
        scholarship: ScholarshipCriteria or a scholarship mapping; anything
            else ranks against an empty scholarship
        policy: Optional weights/bonuses (defaults to DEFAULT_POLICY)
        max_workers: Score large batches on a thread pool of this size

    Returns:
        ScoredApplicants in ascending rank order
    """
    if not applicants:
        return []

    records = [
        record for record in (_coerce_applicant(a) for a in applicants)
        if record is not None
    ]
    if not records:
        return []

    criteria = _coerce_scholarship(scholarship)
    policy = policy or DEFAULT_POLICY
    scoring_table = build_scoring_table(policy)

    def score(record: ApplicantRecord) -> ScoredApplicant:
        return score_applicant(record, criteria, policy, scoring_table)

    workers = max_workers or 1
    if workers > 1 and len(records) >= PARALLEL_THRESHOLD:
        # map() yields in input order, so the sort below sees the same sequence
        with ThreadPoolExecutor(max_workers=workers) as executor:
            scored = list(executor.map(score, records))
    else:
        workers = 1
        scored = [score(record) for record in records]

    scored.sort(key=lambda s: s.sort_key())
    assign_competition_ranks(scored)

    logger.info(format_fields(
        "Ranked applicants",
        applicants=len(scored),
        criteria=len(criteria.criteria),
        form_fields=len(criteria.custom_form_fields),
        merit_based=criteria.is_merit_based,
        workers=workers,
    ))

    return scored


# =============================================================================
# EXPLANATION GENERATION
# =============================================================================

def generate_explanation(scored: ScoredApplicant) -> str:
    """
    Generate a plain-text explanation of the ranking.

    This answers: "Why is this applicant ranked this way?"
    """
    breakdown = scored.breakdown

    lines = [
        f"Applicant {scored.applicant_id} is ranked #{scored.rank} "
        f"with a score of {scored.score:.2f}/1.00.",
        "",
        "Score Breakdown:",
    ]

    for component in breakdown.components:
        lines.append(
            f"- {component.reason} "
            f"(weight {component.weight:.2f}, +{component.contribution:.3f})"
        )

    if breakdown.bonus_reasons:
        lines.append("")
        lines.append(f"Bonuses (+{breakdown.bonus_points:.2f}):")
        for reason in breakdown.bonus_reasons:
            lines.append(f"- {reason}")

    lines.append("")
    if breakdown.criteria_total > 0:
        lines.append(
            f"Criteria matched: {breakdown.criteria_matches}/{breakdown.criteria_total}"
        )
    else:
        lines.append("Criteria matched: no criteria declared")
    lines.append(f"Form completeness: {breakdown.form_completeness:.0%}")

    weaknesses = breakdown.get_weaknesses()
    if weaknesses:
        lines.append("")
        lines.append("Concerns: " + "; ".join(c.reason for c in weaknesses))

    return "\n".join(lines)


def generate_short_explanation(scored: ScoredApplicant) -> str:
    """
    Generate a one-line explanation for quick scanning.
    """
    strengths = scored.breakdown.get_strengths()
    if strengths:
        strongest = max(strengths, key=lambda c: c.contribution)
        return f"#{scored.rank} ({scored.score:.2f}) - {strongest.reason}"
    return f"#{scored.rank} ({scored.score:.2f}) - No strong components"

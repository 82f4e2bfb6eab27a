"""
Scoring Components for the Applicant Ranking Engine.

Each component is independently computable from one applicant and the
scholarship, and returns a raw value in [0.0, 1.0]. Weighting happens
in the scorer.

Components:
    - Criteria Matching: Share of declared criteria the responses mention
    - Form Completeness: Share of declared form fields that were answered
    - Academic Performance: Best normalized grade (merit-based only)
    - Response Quality: Average free-text answer length
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..domain import ApplicantRecord, ScholarshipCriteria
from ..validation import extract_numeric_value, is_answered, value_to_text


# =============================================================================
# RATING (Deterministic, Threshold-Based)
# =============================================================================

class Rating(Enum):
    """
    Coarse rating of a raw component value.

    Thresholds are fixed:
    - EXCELLENT: value > 0.7
    - GOOD: value > 0.5
    - FAIR: value > 0.3
    - NEEDS_IMPROVEMENT: value <= 0.3
    """
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    NEEDS_IMPROVEMENT = "Needs Improvement"

    @property
    def symbol(self) -> str:
        return RATING_SYMBOLS[self]


RATING_SYMBOLS = {
    Rating.EXCELLENT: "✓",
    Rating.GOOD: "○",
    Rating.FAIR: "△",
    Rating.NEEDS_IMPROVEMENT: "✗",
}


def compute_rating(value: float) -> Rating:
    """Assign a rating from fixed thresholds on the raw value."""
    if value > 0.7:
        return Rating.EXCELLENT
    elif value > 0.5:
        return Rating.GOOD
    elif value > 0.3:
        return Rating.FAIR
    else:
        return Rating.NEEDS_IMPROVEMENT


@dataclass
class ComponentScore:
    """
    A single scoring component with full transparency.

    Every component exposes:
    - name: What this component measures
    - raw_value: The component value in [0, 1] before weighting
    - weight: Share of the final score this component controls
    - contribution: raw_value * weight
    - reason: Human-readable explanation line
    """
    name: str
    raw_value: float
    weight: float
    contribution: float
    reason: str

    @property
    def rating(self) -> Rating:
        return compute_rating(self.raw_value)


# =============================================================================
# CRITERIA MATCHING COMPONENT
# =============================================================================

# Keywords shorter than this never count toward a partial match
MIN_KEYWORD_LENGTH = 4

# Share of criterion tokens that must appear for a keyword match
KEYWORD_MATCH_RATIO = 0.5

# Unlike str.split(), keeps empty tokens at the edges of the criterion
CRITERION_TOKEN_SEPARATOR = re.compile(r"\s+")


def matches_criterion(value: Any, criterion: str) -> bool:
    """
    Fuzzy, case-insensitive match of a response value against a criterion.

    Matches when either string contains the other, or when enough of the
    criterion's longer keywords (length > 3) appear in the value: at least
    half of all its whitespace-separated tokens, rounded up. Leading and
    trailing whitespace count as empty tokens, so " Community Service"
    has three tokens.

    Empty values never match. An empty criterion is contained in every
    non-empty value.
    """
    value_text = value_to_text(value).lower()
    if not value_text:
        return False

    criterion_text = criterion.lower()
    if criterion_text in value_text or value_text in criterion_text:
        return True

    tokens = CRITERION_TOKEN_SEPARATOR.split(criterion_text)
    hits = [t for t in tokens if len(t) >= MIN_KEYWORD_LENGTH and t in value_text]
    return len(hits) >= math.ceil(len(tokens) * KEYWORD_MATCH_RATIO)


def count_criteria_matches(
    applicant: ApplicantRecord,
    scholarship: ScholarshipCriteria,
    response_map: Optional[dict[str, Any]] = None,
) -> int:
    """
    Count criteria matched by at least one response.

    Both the label and the value of every response are tested.
    """
    if response_map is None:
        response_map = applicant.response_map()

    matched = 0
    for criterion in scholarship.criteria:
        if any(
            matches_criterion(value, criterion) or matches_criterion(label, criterion)
            for label, value in response_map.items()
        ):
            matched += 1
    return matched


def evaluate_criteria_match(
    applicant: ApplicantRecord,
    scholarship: ScholarshipCriteria,
    response_map: Optional[dict[str, Any]] = None,
) -> float:
    """Matched criteria / declared criteria; 1.0 when none are declared."""
    total = len(scholarship.criteria)
    if total == 0:
        return 1.0
    return count_criteria_matches(applicant, scholarship, response_map) / total


# =============================================================================
# FORM COMPLETENESS COMPONENT
# =============================================================================

def evaluate_form_completeness(
    applicant: ApplicantRecord,
    scholarship: ScholarshipCriteria,
    response_map: Optional[dict[str, Any]] = None,
) -> float:
    """
    Answered form fields / declared form fields.

    Fields are looked up by lowercased label. None, "" and [] are
    unanswered. No declared fields means the form is complete (1.0).
    """
    form_fields = scholarship.custom_form_fields
    if not form_fields:
        return 1.0

    if response_map is None:
        response_map = applicant.response_map()

    completed = sum(
        1 for form_field in form_fields
        if is_answered(response_map.get(form_field.label.lower()))
    )
    return completed / len(form_fields)


# =============================================================================
# ACADEMIC PERFORMANCE COMPONENT
# =============================================================================

# Labels containing any of these are read as grade fields
GRADE_LABEL_KEYWORDS = ("gpa", "grade", "average", "gwa", "general weighted average")

# Label hints that pin a value to the 4.0 GPA scale
GPA_SCALE_HINTS = ("gpa", "grade point")
GWA_SCALE_HINTS = ("gwa", "weighted")

# Returned when the scholarship is not merit-based or no grade is found
NEUTRAL_ACADEMIC_SCORE = 0.5


def is_grade_label(label: str) -> bool:
    label = label.lower()
    return any(keyword in label for keyword in GRADE_LABEL_KEYWORDS)


def names_gpa_scale(label: str) -> bool:
    """True when the label says GPA and does not also say GWA."""
    label = label.lower()
    return (
        any(hint in label for hint in GPA_SCALE_HINTS)
        and not any(hint in label for hint in GWA_SCALE_HINTS)
    )


def normalize_grade(value: float, gpa_scale: bool = False) -> float:
    """
    Normalize a grade to [0, 1], taking the first scale that fits:

    - 50 < v <= 100: percentage, v / 100
    - 1.0 <= v <= 5.0: GWA, 1.0 best and 5.0 worst, (5 - v) / 4
    - 0.0 <= v <= 4.0: GPA, 4.0 best, v / 4

    With gpa_scale, a value in [0, 4] is read as GPA before the GWA
    range is tried. Values outside every range score 0.0.

    The hint departs from the plain range order: a "GPA" field
    holding 3.0 scores 0.75 here, while the same value on an unlabeled
    "Grade" field still reads as GWA and scores 0.5.
    """
    if 50 < value <= 100:
        return value / 100
    if gpa_scale and 0.0 <= value <= 4.0:
        return value / 4.0
    if 1.0 <= value <= 5.0:
        return (5.0 - value) / 4.0
    if 0.0 <= value <= 4.0:
        return value / 4.0
    return 0.0


def evaluate_academic_performance(
    applicant: ApplicantRecord,
    scholarship: ScholarshipCriteria,
    response_map: Optional[dict[str, Any]] = None,
) -> float:
    """
    Best normalized grade across all grade-like responses.

    Non-merit scholarships always get the neutral 0.5, as do applicants
    with no numeric grade field.
    """
    if not scholarship.is_merit_based:
        return NEUTRAL_ACADEMIC_SCORE

    best: Optional[float] = None
    for response in applicant.responses:
        if not is_grade_label(response.label):
            continue
        number = extract_numeric_value(response.value)
        if number is None:
            continue
        score = normalize_grade(number, gpa_scale=names_gpa_scale(response.label))
        best = score if best is None else max(best, score)

    if best is None:
        return NEUTRAL_ACADEMIC_SCORE
    return best


# =============================================================================
# RESPONSE QUALITY COMPONENT
# =============================================================================

def evaluate_response_quality(
    applicant: ApplicantRecord,
    scholarship: ScholarshipCriteria,
    response_map: Optional[dict[str, Any]] = None,
) -> float:
    """
    Score the average length of free-text answers.

    Non-empty strings count once with their length. Non-empty lists
    count once with the summed length of their string items. Numbers
    and blanks are ignored.

    Curve:
    - avg < 50: avg / 100 (0 to 0.5)
    - 50 <= avg < 200: 0.5 + (avg - 50) / 500 (0.5 to 0.8)
    - avg >= 200: 0.8 + (avg - 200) / 1000, capped at 1.0
    """
    total_length = 0
    count = 0

    for response in applicant.responses:
        value = response.value
        if isinstance(value, str):
            if value:
                total_length += len(value)
                count += 1
        elif isinstance(value, (list, tuple)):
            total_length += sum(len(item) for item in value if isinstance(item, str))
            if value:
                count += 1

    if count == 0:
        return 0.0

    average = total_length / count
    if average < 50:
        return average / 100
    if average < 200:
        return 0.5 + (average - 50) / 500
    return min(0.8 + (average - 200) / 1000, 1.0)

# Applicant Ranking Engine

"""
Deterministic, explainable ranking of scholarship applicants.

Every score is decomposable into component values and a readable
explanation trail. Malformed applicant data degrades to neutral
scores rather than failing.
"""

from .domain import ApplicantRecord, ScholarshipCriteria
from .ranking.scorer import ScoredApplicant, rank_applicants

__all__ = [
    "ApplicantRecord",
    "ScholarshipCriteria",
    "ScoredApplicant",
    "rank_applicants",
]

"""
Ranking Pipeline for the Applicant Ranking Engine CLI.

Ties file loading and ranking together into a single execution flow.

Pipeline stages:
    1. Load applicants (JSON list, or an object with an "applicants" list)
    2. Load the scholarship (JSON object)
    3. Load the ranking policy (YAML, optional)
    4. Rank applicants

The pipeline is read-only and deterministic. Without input files it
ranks the built-in sample data.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from ..domain import ScholarshipCriteria
from ..ranking.policy import DEFAULT_POLICY, RankingPolicy, load_policy
from ..ranking.scorer import ScoredApplicant, rank_applicants

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class InputLoadError(Exception):
    """Raised when an input file is missing, unreadable or the wrong shape."""
    pass


# =============================================================================
# PIPELINE RESULT
# =============================================================================

@dataclass
class RankingResult:
    """
    Complete result of running the ranking pipeline.

    Exposes:
    - All ranked applicants, in rank order
    - The scholarship and policy they were ranked against
    """
    ranked: list[ScoredApplicant]
    scholarship: ScholarshipCriteria
    policy: RankingPolicy

    def get_by_id(self, applicant_id: str) -> Optional[ScoredApplicant]:
        """Find a ranked applicant by its ID."""
        for scored in self.ranked:
            if scored.applicant_id == applicant_id:
                return scored
        return None

    def get_ids(self) -> list[str]:
        return [scored.applicant_id for scored in self.ranked]

    def to_dicts(self) -> list[dict[str, Any]]:
        return [scored.to_dict() for scored in self.ranked]


# =============================================================================
# SAMPLE DATA (For Demo Purposes)
# =============================================================================

SAMPLE_SCHOLARSHIP: dict[str, Any] = {
    "criteria": ["Leadership", "Financial Need", "Community Service"],
    "type": "merit_based",
    "custom_form_fields": [
        {"label": "General Weighted Average", "type": "text", "required": True},
        {"label": "Leadership Experience", "type": "textarea", "required": True},
        {"label": "Household Income", "type": "select", "required": True,
         "options": ["Below poverty line", "Low income", "Middle income"]},
        {"label": "Community Service", "type": "checkbox", "required": False,
         "options": ["Tutoring", "Feeding program", "Clean-up drive"]},
    ],
}

SAMPLE_APPLICANTS: list[dict[str, Any]] = [
    {
        "scholarship_application_id": "app-001",
        "custom_form_response": [
            {"label": "General Weighted Average", "value": "1.25"},
            {"label": "Leadership Experience",
             "value": "President of the student council for two years, organized "
                      "a school-wide tutoring program for first-year students."},
            {"label": "Household Income", "value": "Below poverty line"},
            {"label": "Community Service", "value": ["Tutoring", "Feeding program"]},
        ],
    },
    {
        "scholarship_application_id": "app-002",
        "custom_form_response": [
            {"label": "General Weighted Average", "value": "2.0"},
            {"label": "Leadership Experience", "value": "Class secretary"},
            {"label": "Household Income", "value": "Middle income"},
            {"label": "Community Service", "value": []},
        ],
    },
    {
        "scholarship_application_id": "app-003",
        "custom_form_response": [
            {"label": "General Weighted Average", "value": ""},
            {"label": "Leadership Experience", "value": ""},
            {"label": "Household Income", "value": None},
        ],
    },
]


# =============================================================================
# INPUT LOADING
# =============================================================================

def load_json(path: PathLike) -> Any:
    """Read a JSON file, raising InputLoadError on any failure."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise InputLoadError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InputLoadError(f"Invalid JSON in {path}: {e}") from e


def load_applicants(path: PathLike) -> list[dict[str, Any]]:
    """Applicants file: a JSON list, or an object with an "applicants" list."""
    data = load_json(path)
    if isinstance(data, dict) and "applicants" in data:
        data = data["applicants"]
    if not isinstance(data, list):
        raise InputLoadError(f"{path}: expected a list of applicants")
    applicants = [item for item in data if isinstance(item, dict)]
    skipped = len(data) - len(applicants)
    if skipped:
        logger.warning("Skipped %d applicant entries that are not objects in %s", skipped, path)
    return applicants


def load_scholarship(path: PathLike) -> dict[str, Any]:
    """Scholarship file: a JSON object."""
    data = load_json(path)
    if not isinstance(data, dict):
        raise InputLoadError(f"{path}: expected a scholarship object")
    return data


# =============================================================================
# PIPELINE EXECUTION
# =============================================================================

def run_ranking(
    applicants_path: Optional[PathLike] = None,
    scholarship_path: Optional[PathLike] = None,
    policy_path: Optional[PathLike] = None,
    max_workers: Optional[int] = None,
) -> RankingResult:
    """
    Execute the full ranking pipeline.

    Args:
        applicants_path: Applicants JSON (uses sample data if None)
        scholarship_path: Scholarship JSON (uses sample data if None)
        policy_path: Ranking policy YAML (uses the default policy if None)
        max_workers: Thread pool size for large batches

    Returns:
        RankingResult with ranked applicants

    Raises:
        InputLoadError: An input file is missing or malformed
        PolicyValidationError: The policy file is malformed
    """
    applicants = (
        load_applicants(applicants_path) if applicants_path is not None
        else SAMPLE_APPLICANTS
    )
    scholarship = ScholarshipCriteria.from_dict(
        load_scholarship(scholarship_path) if scholarship_path is not None
        else SAMPLE_SCHOLARSHIP
    )
    policy = load_policy(policy_path) if policy_path is not None else DEFAULT_POLICY

    ranked = rank_applicants(applicants, scholarship, policy=policy, max_workers=max_workers)

    return RankingResult(ranked=ranked, scholarship=scholarship, policy=policy)

"""
Core Domain Objects for the Applicant Ranking Engine.

All objects are created fresh per ranking call from caller-supplied
data and are never mutated by the engine.

Domain Objects:
    FormResponse        — One answer on an application form
    ApplicantRecord     — An applicant and their ordered form responses
    FormField           — A scholarship-defined application question
    ScholarshipCriteria — Declared criteria, form schema and classification
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .validation import coerce_criteria, coerce_label, coerce_list

logger = logging.getLogger(__name__)


# =============================================================================
# SCHOLARSHIP CLASSIFICATION
# =============================================================================

class ScholarshipType(Enum):
    """
    Scholarship classification tags.

    Only MERIT_BASED changes scoring (academic normalization is applied).
    Any other tag, or none, is treated as non-merit.
    """
    MERIT_BASED = "merit_based"
    SKILL_BASED = "skill_based"


# =============================================================================
# FORM RESPONSES
# =============================================================================

@dataclass(frozen=True)
class FormResponse:
    """
    A single answer on an applicant's form.

    value is whatever the form stored: a string, a number, a list of
    selected options, or None.
    """
    label: str
    value: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional[FormResponse]:
        """Build a response from a mapping; anything else yields None."""
        if not isinstance(data, Mapping):
            logger.debug("Skipping unreadable form response of type %s", type(data).__name__)
            return None
        return cls(label=coerce_label(data.get("label")), value=data.get("value"))

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "value": self.value}


# =============================================================================
# APPLICANT
# =============================================================================

@dataclass(frozen=True)
class ApplicantRecord:
    """
    An applicant and their form responses.

    responses keeps the submitted order. Labels need not be unique;
    response_map() resolves collisions with last-occurrence-wins.

    extra holds any other keys of the hydrated record (e.g. the nested
    student profile) so they can be passed through to the output.
    """
    applicant_id: str
    responses: tuple[FormResponse, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ApplicantRecord:
        """
        Build a record from a hydrated application.

        Accepts the stored shape (scholarship_application_id,
        custom_form_response) as well as the short form (id, responses).
        """
        applicant_id = data.get("scholarship_application_id", data.get("id"))
        raw_responses = data.get("custom_form_response", data.get("responses"))

        responses = []
        for item in coerce_list(raw_responses, "custom_form_response"):
            response = FormResponse.from_dict(item)
            if response is not None:
                responses.append(response)

        extra = {
            key: value
            for key, value in data.items()
            if key not in ("scholarship_application_id", "id", "custom_form_response", "responses")
        }

        return cls(
            applicant_id="" if applicant_id is None else str(applicant_id),
            responses=tuple(responses),
            extra=extra,
        )

    def response_map(self) -> dict[str, Any]:
        """Lowercased label -> value. Last occurrence of a label wins."""
        return {response.label.lower(): response.value for response in self.responses}

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the stored application shape."""
        data = dict(self.extra)
        data["scholarship_application_id"] = self.applicant_id
        data["custom_form_response"] = [r.to_dict() for r in self.responses]
        return data


# =============================================================================
# SCHOLARSHIP
# =============================================================================

@dataclass(frozen=True)
class FormField:
    """A custom question declared on a scholarship's application form."""
    label: str
    type: str = "text"
    required: bool = False
    options: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> Optional[FormField]:
        if not isinstance(data, Mapping):
            logger.debug("Skipping unreadable form field of type %s", type(data).__name__)
            return None
        return cls(
            label=coerce_label(data.get("label")),
            type=str(data.get("type") or "text"),
            required=bool(data.get("required", False)),
            options=tuple(str(o) for o in coerce_list(data.get("options"), "options")),
        )


@dataclass(frozen=True)
class ScholarshipCriteria:
    """
    What a scholarship asks of its applicants.

    criteria are free-text eligibility descriptors ("Financial Need").
    custom_form_fields is the application form schema.
    type is the classification tag; only "merit_based" is special.
    """
    criteria: tuple[str, ...] = ()
    custom_form_fields: tuple[FormField, ...] = ()
    type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ScholarshipCriteria:
        fields = []
        for item in coerce_list(data.get("custom_form_fields"), "custom_form_fields"):
            form_field = FormField.from_dict(item)
            if form_field is not None:
                fields.append(form_field)

        scholarship_type = data.get("type")
        return cls(
            criteria=tuple(coerce_criteria(data.get("criteria"))),
            custom_form_fields=tuple(fields),
            type=None if scholarship_type is None else str(scholarship_type),
        )

    @property
    def is_merit_based(self) -> bool:
        return self.type == ScholarshipType.MERIT_BASED.value

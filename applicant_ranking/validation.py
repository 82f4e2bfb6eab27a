"""
Defensive Coercion for the Applicant Ranking Engine.

Applicant and scholarship records arrive already hydrated from storage,
but their form responses are free-form JSON. Nothing here raises:
every helper degrades to an explicit default so that a single malformed
record cannot abort ranking for a whole batch.

Defaults:
    value_to_text           -> "" for None
    extract_numeric_value   -> None when no number is present
    is_answered             -> False for None, "" and []
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# First run of ASCII digits with an optional decimal part ("3.5", "85%", "GWA: 1.75")
NUMERIC_TOKEN_PATTERN = re.compile(r"(\d+\.?\d*)", re.ASCII)


# =============================================================================
# VALUE COERCION
# =============================================================================

def is_number(value: Any) -> bool:
    """True for int/float values. Booleans are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def value_to_text(value: Any) -> str:
    """
    Render a form response value as matchable text.

    Integral floats drop their trailing ".0" so that 85.0 and "85"
    read the same; lists are joined with commas.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(value_to_text(item) for item in value)
    return str(value)


def extract_numeric_value(value: Any) -> Optional[float]:
    """
    Extract a number from a response value.

    Numbers are returned as-is. Strings yield their first numeric token
    ("3.5", "85%", "Grade: 92"). Anything else yields None.
    """
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        match = NUMERIC_TOKEN_PATTERN.search(value)
        if match:
            return float(match.group(1))
    return None


def is_answered(value: Any) -> bool:
    """A response counts as answered unless it is None, "" or an empty list."""
    if value is None or value == "":
        return False
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


# =============================================================================
# RECORD COERCION
# =============================================================================

def coerce_label(label: Any) -> str:
    """Labels are strings; None becomes ""."""
    if label is None:
        return ""
    return label if isinstance(label, str) else str(label)


def coerce_list(value: Any, field_name: str) -> list:
    """Return value if it is a list, otherwise an empty list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    logger.debug("Ignoring non-list %s of type %s", field_name, type(value).__name__)
    return []


def coerce_criteria(value: Any) -> list[str]:
    """Criteria become a list of strings; None entries are dropped."""
    return [
        item if isinstance(item, str) else str(item)
        for item in coerce_list(value, "criteria")
        if item is not None
    ]

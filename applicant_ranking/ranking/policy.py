"""Ranking Policy — component weights and bonus values.

The default policy holds the literal weights the engine has always used.
A different policy can be loaded from YAML for a scholarship or
institution that wants to weigh components differently:

    weights:
      criteria: 0.40
      completeness: 0.20
      academic: 0.25
      quality: 0.15
    bonuses:
      complete_form: 0.05
      all_criteria: 0.05

Omitted keys keep their default value. Weights must be non-negative and
sum to 1.0; bonuses must be non-negative.
"""

import logging
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Union

import yaml

logger = logging.getLogger(__name__)

# Default component weights (sum to 1.0)
CRITERIA_WEIGHT = 0.40
COMPLETENESS_WEIGHT = 0.20
ACADEMIC_WEIGHT = 0.25
QUALITY_WEIGHT = 0.15

# Default bonuses
COMPLETE_FORM_BONUS = 0.05
ALL_CRITERIA_BONUS = 0.05

# Final score ceiling, not configurable
MAX_SCORE = 1.0

WEIGHT_SUM_TOLERANCE = 1e-9

# YAML key -> RankingPolicy attribute
WEIGHT_KEYS = {
    "criteria": "criteria_weight",
    "completeness": "completeness_weight",
    "academic": "academic_weight",
    "quality": "quality_weight",
}
BONUS_KEYS = {
    "complete_form": "complete_form_bonus",
    "all_criteria": "all_criteria_bonus",
}


class PolicyValidationError(Exception):
    """Raised when a ranking policy is malformed."""
    pass


@dataclass(frozen=True)
class RankingPolicy:
    """Weights for the four scoring components plus the two bonuses."""

    criteria_weight: float = CRITERIA_WEIGHT
    completeness_weight: float = COMPLETENESS_WEIGHT
    academic_weight: float = ACADEMIC_WEIGHT
    quality_weight: float = QUALITY_WEIGHT
    complete_form_bonus: float = COMPLETE_FORM_BONUS
    all_criteria_bonus: float = ALL_CRITERIA_BONUS

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise PolicyValidationError(f"{f.name} must be a number, got {value!r}")
            if value < 0:
                raise PolicyValidationError(f"{f.name} must be non-negative, got {value}")

        total = self.total_weight
        if not math.isclose(total, 1.0, rel_tol=0.0, abs_tol=WEIGHT_SUM_TOLERANCE):
            raise PolicyValidationError(f"Component weights must sum to 1.0, got {total:.4f}")

    @property
    def total_weight(self) -> float:
        return (
            self.criteria_weight
            + self.completeness_weight
            + self.academic_weight
            + self.quality_weight
        )

    def to_dict(self) -> dict:
        """Policy in the same shape load_policy reads."""
        return {
            "weights": {key: getattr(self, attr) for key, attr in WEIGHT_KEYS.items()},
            "bonuses": {key: getattr(self, attr) for key, attr in BONUS_KEYS.items()},
        }


DEFAULT_POLICY = RankingPolicy()


def _read_section(raw: dict, section: str, keys: dict[str, str]) -> dict[str, float]:
    values = raw.get(section) or {}
    if not isinstance(values, dict):
        raise PolicyValidationError(f"'{section}' must be a mapping")

    unknown = sorted(set(values) - set(keys))
    if unknown:
        raise PolicyValidationError(f"Unknown {section} keys: {', '.join(map(str, unknown))}")

    return {keys[key]: value for key, value in values.items()}


def policy_from_dict(raw: dict) -> RankingPolicy:
    """Build a RankingPolicy from a {weights, bonuses} mapping."""
    if not isinstance(raw, dict):
        raise PolicyValidationError("Policy must be a mapping with 'weights' and/or 'bonuses'")

    unknown = sorted(set(raw) - {"weights", "bonuses"})
    if unknown:
        raise PolicyValidationError(f"Unknown policy sections: {', '.join(map(str, unknown))}")

    overrides = _read_section(raw, "weights", WEIGHT_KEYS)
    overrides.update(_read_section(raw, "bonuses", BONUS_KEYS))
    return RankingPolicy(**overrides)


def load_policy(path: Union[str, Path]) -> RankingPolicy:
    """Load and validate a ranking policy from a YAML file."""
    path = Path(path)
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise PolicyValidationError(f"Cannot read policy file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise PolicyValidationError(f"Invalid YAML in policy file {path}: {e}") from e

    policy = policy_from_dict(raw or {})
    logger.info("Loaded ranking policy from %s", path)
    return policy

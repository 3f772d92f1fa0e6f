"""Readmission risk score arithmetic.

Shared by the local scorer, the HTTP scorer's response normalization and the
default intervention rule, so that every component agrees on one scale.
"""

import logging
import math
from typing import Any

from carepath.domain.ports import ScoringError

logger = logging.getLogger(__name__)

RISK_SCORE_MIN = 0.0
RISK_SCORE_MAX = 10.0

# Baseline weights: each previous admission and each chronic condition
# adds a fixed amount to the score.
ADMISSION_WEIGHT = 0.5
CONDITION_WEIGHT = 0.3

# Scores above this threshold call for intensive follow-up.
HIGH_RISK_THRESHOLD = 7.0


def baseline_risk_score(previous_admissions: int, chronic_condition_count: int) -> float:
    """Compute the weighted baseline score, clamped into the documented range.

    Parameters:
        previous_admissions: Number of previous admissions (negative treated as 0)
        chronic_condition_count: Number of chronic conditions (negative treated as 0)

    Returns:
        float: Score in ``[RISK_SCORE_MIN, RISK_SCORE_MAX]``
    """
    score = (
        max(previous_admissions, 0) * ADMISSION_WEIGHT
        + max(chronic_condition_count, 0) * CONDITION_WEIGHT
    )
    return clamp_risk_score(score)


def clamp_risk_score(score: float) -> float:
    """Clamp a finite score into ``[RISK_SCORE_MIN, RISK_SCORE_MAX]``."""
    return min(max(score, RISK_SCORE_MIN), RISK_SCORE_MAX)


def normalize_risk_score(raw: Any) -> float:
    """Normalize a scorer response into a bounded float.

    Accepted shapes:
        - ``{"riskScore": 4.2}`` (scorer wire format)
        - ``{"risk_score": 4.2}``
        - ``4.2`` (bare number)

    Parameters:
        raw: Decoded JSON response body

    Returns:
        float: Score clamped into ``[RISK_SCORE_MIN, RISK_SCORE_MAX]``

    Raises:
        ScoringError: If no finite numeric score can be extracted
    """
    value = raw
    if isinstance(raw, dict):
        for key in ("riskScore", "risk_score", "score"):
            if key in raw:
                value = raw[key]
                break
        else:
            raise ScoringError(
                "Scorer response does not contain a risk score",
                operation="predict_readmission_risk",
                details={"keys": sorted(str(k) for k in raw.keys())},
            )

    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ScoringError(
            f"Scorer returned a non-numeric risk score of type {type(value).__name__}",
            operation="predict_readmission_risk",
        )

    score = float(value)
    if not math.isfinite(score):
        raise ScoringError(
            "Scorer returned a non-finite risk score",
            operation="predict_readmission_risk",
        )

    clamped = clamp_risk_score(score)
    if clamped != score:
        logger.warning(f"Scorer returned out-of-range risk score {score}, clamped to {clamped}")
    return clamped

"""Tests for risk score arithmetic and scorer response normalization."""

import pytest

from carepath.domain.ports import ScoringError
from carepath.domain.risk import (
    RISK_SCORE_MAX,
    RISK_SCORE_MIN,
    baseline_risk_score,
    clamp_risk_score,
    normalize_risk_score,
)


class TestBaselineRiskScore:

    def test_weighted_sum(self):
        # 3 * 0.5 + 2 * 0.3
        assert baseline_risk_score(3, 2) == pytest.approx(2.1)

    def test_zero_inputs(self):
        assert baseline_risk_score(0, 0) == 0.0

    def test_negative_inputs_treated_as_zero(self):
        assert baseline_risk_score(-4, -1) == 0.0

    def test_clamped_to_maximum(self):
        assert baseline_risk_score(100, 10) == RISK_SCORE_MAX


class TestClampRiskScore:

    @pytest.mark.parametrize("raw,expected", [
        (-1.0, RISK_SCORE_MIN),
        (0.0, 0.0),
        (4.2, 4.2),
        (10.0, 10.0),
        (12.5, RISK_SCORE_MAX),
    ])
    def test_clamp(self, raw, expected):
        assert clamp_risk_score(raw) == expected


class TestNormalizeRiskScore:

    @pytest.mark.parametrize("body", [
        {"riskScore": 4.2},
        {"risk_score": 4.2},
        {"score": 4.2},
        4.2,
    ])
    def test_accepted_shapes(self, body):
        assert normalize_risk_score(body) == pytest.approx(4.2)

    def test_integer_score(self):
        score = normalize_risk_score({"riskScore": 7})
        assert score == 7.0
        assert isinstance(score, float)

    def test_wire_key_takes_precedence(self):
        assert normalize_risk_score({"riskScore": 1.0, "score": 9.0}) == 1.0

    def test_out_of_range_is_clamped_and_logged(self, caplog):
        with caplog.at_level("WARNING"):
            assert normalize_risk_score({"riskScore": 42}) == RISK_SCORE_MAX
        assert "clamped" in caplog.text

    def test_negative_is_clamped(self):
        assert normalize_risk_score(-3) == RISK_SCORE_MIN

    def test_missing_key(self):
        with pytest.raises(ScoringError) as exc_info:
            normalize_risk_score({"probability": 0.4})

        assert exc_info.value.details == {"keys": ["probability"]}

    @pytest.mark.parametrize("body", [
        {"riskScore": "high"},
        {"riskScore": None},
        {"riskScore": True},
        [4.2],
        "4.2",
        None,
    ])
    def test_non_numeric(self, body):
        with pytest.raises(ScoringError):
            normalize_risk_score(body)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite(self, value):
        with pytest.raises(ScoringError):
            normalize_risk_score({"riskScore": value})

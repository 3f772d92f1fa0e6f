"""Risk scorer adapters implementing RiskScorerPort."""

from carepath.adapters.scoring.http_scorer import HttpRiskScorer, create_scorer_client
from carepath.adapters.scoring.local_scorer import LocalRiskScorer

__all__ = ["HttpRiskScorer", "LocalRiskScorer", "create_scorer_client"]

"""HTTP Risk Scorer Adapter.

Forwards a patient snapshot to the external readmission-risk service and
normalizes its response into a bounded score.

Security Impact:
    - The scorer API key is sent as a header and never logged
    - Only the validated Patient snapshot is sent, serialized with its camelCase aliases

Architecture:
    - Implements RiskScorerPort (Hexagonal Architecture)
    - One long-lived ``httpx.AsyncClient`` is injected and shared across requests
    - No retries and no caching: every call reflects the scorer's current state
"""

import logging
from typing import Optional

import httpx

from carepath.domain.clinical_record import Patient
from carepath.domain.ports import RiskScorerPort, ScoringError
from carepath.domain.risk import normalize_risk_score

logger = logging.getLogger(__name__)


class HttpRiskScorer(RiskScorerPort):
    """Risk scorer backed by an HTTP prediction endpoint.

    Parameters:
        client: Shared ``httpx.AsyncClient`` (base URL, timeout and auth headers
                are configured on the client)
        predict_path: Path of the prediction endpoint relative to the base URL

    Example Usage:
        ```python
        client = httpx.AsyncClient(base_url="http://scorer:8686", timeout=10.0)
        scorer = HttpRiskScorer(client)
        score = await scorer.predict_readmission_risk(patient)
        ```
    """

    def __init__(self, client: httpx.AsyncClient, predict_path: str = "/predict"):
        self._client = client
        self._predict_path = predict_path

    async def predict_readmission_risk(self, patient: Patient) -> float:
        """Score a patient snapshot with the remote scorer.

        Parameters:
            patient: Validated patient snapshot

        Returns:
            float: Risk score clamped into the documented range

        Raises:
            ScoringError: On transport failure, an error status, or an unusable body
        """
        try:
            response = await self._client.post(self._predict_path, json=patient.to_payload())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ScoringError(
                f"Risk scorer returned HTTP {e.response.status_code}",
                operation="predict_readmission_risk",
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise ScoringError(
                f"Risk scorer request failed: {str(e) or type(e).__name__}",
                operation="predict_readmission_risk",
            ) from e

        try:
            body = response.json()
        except ValueError as e:
            raise ScoringError(
                "Risk scorer returned a non-JSON body",
                operation="predict_readmission_risk",
            ) from e

        score = normalize_risk_score(body)
        logger.debug(f"Risk scorer returned {score:.2f}")
        return score

    async def aclose(self) -> None:
        await self._client.aclose()


def create_scorer_client(
    base_url: str,
    timeout: float = 10.0,
    api_key: Optional[str] = None,
) -> httpx.AsyncClient:
    """Build the shared scorer HTTP client.

    Parameters:
        base_url: Scorer base URL
        timeout: Overall request timeout in seconds
        api_key: Optional bearer token for the scorer

    Returns:
        httpx.AsyncClient: Configured client (caller owns its lifetime)
    """
    headers = {"Accept": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(timeout),
        headers=headers,
    )

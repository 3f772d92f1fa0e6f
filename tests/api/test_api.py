"""Tests for the CarePath HTTP API.

This suite covers:
- Root and health endpoints
- Patient intake, history and intervention endpoints
- Risk assessment endpoint
- Mapping of core errors to status codes
- Request logging middleware headers
"""

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from carepath.adapters.graph import DgraphHistoryAdapter
from carepath.adapters.scoring import LocalRiskScorer
from carepath.api.dependencies import get_history_store, get_risk_scorer, get_service
from carepath.api.main import app
from carepath.domain.interventions import InterventionEngine
from carepath.domain.ports import RiskScorerPort, ScoringError
from carepath.domain.services import ReadmissionService
from tests.fakes import FakeDgraphClient

PATIENT_BODY = {
    "id": "P-1001",
    "age": 67,
    "previousAdmissions": 3,
    "chronicConditions": ["heart failure", "diabetes"],
    "medications": ["furosemide"],
}


@pytest.fixture
def graph():
    return FakeDgraphClient()


@pytest.fixture
def store(graph):
    return DgraphHistoryAdapter(client=graph)


@pytest.fixture
def scorer():
    return LocalRiskScorer()


@pytest.fixture
def engine():
    return InterventionEngine()


@pytest.fixture
def client(store, scorer, engine):
    """Create a test client wired to the in-memory graph store."""
    app.dependency_overrides[get_history_store] = lambda: store
    app.dependency_overrides[get_service] = lambda: ReadmissionService(store=store, scorer=scorer, engine=engine)

    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


class TestRootEndpoint:

    def test_root_endpoint_returns_info(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["version"] == "1.0.0"
        assert data["docs"] == "/api/docs"
        assert data["health"] == "/api/health"


class TestHealthEndpoint:

    def test_healthy_when_store_reachable(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store"]["status"] == "connected"
        assert data["store"]["type"] == "dgraph"
        assert data["store"]["response_time_ms"] is not None

    def test_unhealthy_when_store_unreachable(self, client, graph):
        graph.failures["check_version"] = ConnectionError("refused")

        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["store"]["status"] == "disconnected"


class TestSubmitPatient:

    def test_created(self, client, graph):
        response = client.post("/api/patient", json=PATIENT_BODY)

        assert response.status_code == 201
        assert response.json() == {"status": "created", "id": "P-1001"}
        assert graph.patients["P-1001"]["condition"] == "heart failure"

    def test_without_conditions_is_bad_request(self, client, graph):
        response = client.post("/api/patient", json={**PATIENT_BODY, "chronicConditions": []})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Bad Request"
        assert data["operation"] == "store_patient_data"
        assert data["details"] == {"field": "chronicConditions"}
        assert graph.calls == []

    @pytest.mark.parametrize("body", [
        {"age": 40},
        {"id": "P-1", "age": "forty"},
        {"id": "   ", "age": 40},
        {"id": "P-1", "age": -1},
    ])
    def test_malformed_body_is_unprocessable(self, client, body):
        response = client.post("/api/patient", json=body)
        assert response.status_code == 422

    def test_store_failure_is_service_unavailable(self, client, graph):
        graph.failures["do_request"] = ConnectionError("refused")

        response = client.post("/api/patient", json=PATIENT_BODY)

        assert response.status_code == 503
        assert response.json()["operation"] == "store_patient_data"
        assert "refused" not in response.json()["error"]


class TestPatientHistory:

    def test_round_trip(self, client):
        client.post("/api/patient", json=PATIENT_BODY)

        response = client.get("/api/patient", params={"id": "P-1001"})

        assert response.status_code == 200
        assert response.json() == [{
            "name": "P-1001",
            "age": 67,
            "condition": "heart failure",
            "admissions": [],
            "medications": [],
        }]

    def test_unknown_patient_is_empty_list(self, client):
        response = client.get("/api/patient", params={"id": "nobody"})

        assert response.status_code == 200
        assert response.json() == []

    def test_missing_identifier_is_bad_request(self, client):
        response = client.get("/api/patient")

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "id"}

    def test_hostile_identifier_is_opaque(self, client, graph):
        response = client.get("/api/patient", params={"id": 'a" ) { x }'})

        assert response.status_code == 200
        assert response.json() == []
        assert graph.requests[-1].variables == {"$id": 'a" ) { x }'}

    def test_store_unreachable(self, client, graph):
        graph.failures["query"] = ConnectionError("refused")

        response = client.get("/api/patient", params={"id": "P-1001"})

        assert response.status_code == 503

    def test_undecodable_store_payload(self, client, graph):
        graph.raw_response = b"<<garbage>>"

        response = client.get("/api/patient", params={"id": "P-1001"})

        assert response.status_code == 502
        assert response.json()["error"] == "Bad Store Response"


class TestInterventions:

    def test_no_history(self, client):
        response = client.get("/api/interventions", params={"id": "nobody"})

        assert response.status_code == 200
        assert response.json() == []

    def test_rules_run_over_history(self, client, engine):
        engine.register(lambda records: [f"Review {records[0].name}"])
        client.post("/api/patient", json=PATIENT_BODY)

        response = client.get("/api/interventions", params={"id": "P-1001"})

        assert response.status_code == 200
        assert response.json() == ["Review P-1001"]

    def test_missing_identifier(self, client):
        assert client.get("/api/interventions").status_code == 400


class TestRiskAssessment:

    def test_local_score(self, client):
        response = client.post("/api/risk", json=PATIENT_BODY)

        assert response.status_code == 200
        data = response.json()
        assert data["patient_id"] == "P-1001"
        assert data["risk_score"] == pytest.approx(2.1)
        assert data["min_score"] == 0.0
        assert data["max_score"] == 10.0

    def test_scorer_failure_is_bad_gateway(self, store):
        failing = Mock(spec=RiskScorerPort)
        failing.predict_readmission_risk = AsyncMock(side_effect=ScoringError("scorer down", operation="predict_readmission_risk"))
        failing.aclose = AsyncMock()
        app.dependency_overrides[get_history_store] = lambda: store
        app.dependency_overrides[get_service] = lambda: ReadmissionService(store=store, scorer=failing)

        try:
            with TestClient(app) as test_client:
                response = test_client.post("/api/risk", json=PATIENT_BODY)
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 502
        assert response.json()["error"] == "Scorer Unavailable"


class TestMiddleware:

    def test_request_id_is_generated(self, client):
        response = client.get("/")

        assert response.headers["X-Request-ID"]
        assert float(response.headers["X-Process-Time"]) >= 0

    def test_request_id_is_echoed(self, client):
        response = client.get("/", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_unexpected_error_is_internal_server_error(self, store):
        broken = Mock(spec=ReadmissionService)
        broken.fetch_history.side_effect = RuntimeError("db-secret-xyz")
        app.dependency_overrides[get_history_store] = lambda: store
        app.dependency_overrides[get_service] = lambda: broken

        try:
            with TestClient(app, raise_server_exceptions=False) as test_client:
                response = test_client.get("/api/patient", params={"id": "P-1"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
        assert "db-secret-xyz" not in response.text


class TestWithoutScorerConfiguration:
    """History routes resolve the real service dependency with no scorer configured."""

    @pytest.fixture
    def unconfigured_client(self, store, monkeypatch):
        monkeypatch.setattr(
            "carepath.api.dependencies.create_risk_scorer",
            Mock(side_effect=ValueError("CP_SCORER_URL is required for the http scorer backend")),
        )
        get_risk_scorer.cache_clear()
        app.dependency_overrides[get_history_store] = lambda: store

        try:
            with TestClient(app, raise_server_exceptions=False) as test_client:
                yield test_client
        finally:
            app.dependency_overrides.clear()
            get_risk_scorer.cache_clear()

    def test_submit_and_read_history(self, unconfigured_client):
        assert unconfigured_client.post("/api/patient", json=PATIENT_BODY).status_code == 201

        response = unconfigured_client.get("/api/patient", params={"id": "P-1001"})

        assert response.status_code == 200
        assert response.json()[0]["name"] == "P-1001"

    def test_unknown_patient_and_interventions(self, unconfigured_client):
        assert unconfigured_client.get("/api/patient", params={"id": "nobody"}).json() == []
        assert unconfigured_client.get("/api/interventions", params={"id": "nobody"}).status_code == 200

    def test_risk_reports_server_error(self, unconfigured_client):
        response = unconfigured_client.post("/api/risk", json=PATIENT_BODY)

        assert response.status_code == 500
        assert "CP_SCORER_URL" not in response.text


class TestOpenAPI:

    def test_error_body_is_documented(self, client):
        schema = client.get("/api/openapi.json").json()

        assert "ErrorResponse" in schema["components"]["schemas"]
        patient_responses = schema["paths"]["/api/patient"]["post"]["responses"]
        assert patient_responses["503"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
        assert "502" in schema["paths"]["/api/risk"]["post"]["responses"]

"""Shared fixtures for the CarePath test suite."""

import pytest

from carepath.adapters.graph import DgraphHistoryAdapter
from carepath.domain.clinical_record import Patient
from tests.fakes import FakeDgraphClient


@pytest.fixture
def fake_client():
    return FakeDgraphClient()


@pytest.fixture
def adapter(fake_client):
    return DgraphHistoryAdapter(client=fake_client, timeout=5.0)


@pytest.fixture
def sample_patient():
    return Patient(
        id="P-1001",
        age=67,
        previousAdmissions=3,
        chronicConditions=["heart failure", "diabetes"],
        medications=["furosemide", "metformin"],
    )

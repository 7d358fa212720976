import os

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

# Fast ticks and the default fleet for tests
os.environ["ELAPSED_TICK_SECONDS"] = "0.05"
os.environ.pop("FLEET_PLATES", None)

from intake.main import app
from intake.services.encounter_registry import registry


@pytest.fixture
def client():
    """TestClient bound to one event loop for the whole test, lifespan included."""
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def async_client():
    """Async httpx client; closes every encounter opened during the test."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    registry.close_all()


@pytest.fixture
def valid_fields():
    """A complete, valid set of form fields as the browser would send them."""
    return {
        "attentionId": "ATN-2024-0001",
        "ambulanceId": "AMB-UNIT-7",
        "vehiclePlate": "AMB-003",
        "patientName": "María Fernanda Ríos",
        "idType": "CC",
        "patientId": "1020304050",
        "serviceType": "emergency",
        "serviceAddress": "Calle 45 # 12-30",
        "locationDetail": "Second floor, apartment 201",
        "destinationFacility": "Hospital San Ignacio",
        "heartRate": "88",
        "respiratoryRate": "18",
        "spo2": "96",
        "bloodPressure": "120/80",
        "temperature": "36.8",
        "glasgowEye": 4,
        "glasgowVerbal": 5,
        "glasgowMotor": 6,
    }

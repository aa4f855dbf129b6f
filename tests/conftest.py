import pytest

from policyadmin.controller import FormController
from policyadmin.errors import ApiError, ConnectivityError

CUSTOMERS = [
    {"id": 1, "nombres": "Ana Torres", "identificacion": "1712345678", "email": "ana@example.com", "telefono": "0991234567"},
    {"id": 2, "nombres": "Luis Vega", "identificacion": "0912345678", "email": "luis@example.com", "telefono": "0987654321"},
]

PLANS = [
    {"id": 10, "nombre": "Vida Plus", "tipo": "VIDA", "primaBase": 25.5, "coberturaMax": 10000},
]

POLICIES = [
    {
        "id": 100,
        "numeroPoliza": "POL-001",
        "fechaInicio": "2025-01-01",
        "fechaFin": "2026-01-01",
        "primaMensual": 30,
        "estado": "ACTIVA",
        "clienteId": 1,
        "planSeguroId": 10,
    },
]


class FakeClient:
    """In-memory stand-in for EntityStoreClient recording every call."""

    def __init__(self, data=None):
        self.data = data if data is not None else {
            "clientes": list(CUSTOMERS),
            "planes": list(PLANS),
            "polizas": list(POLICIES),
        }
        self.calls = []
        self.unreachable = set()
        self.write_error = None

    def list(self, endpoint):
        self.calls.append(("list", endpoint))
        if endpoint in self.unreachable:
            raise ConnectivityError(f"Failed to list {endpoint}")
        return list(self.data.get(endpoint, []))

    def create(self, endpoint, payload):
        self.calls.append(("create", endpoint, payload))
        if self.write_error:
            raise self.write_error
        record = {"id": 1000 + len(self.data.get(endpoint, [])), **payload}
        self.data.setdefault(endpoint, []).append(record)
        return record

    def update(self, endpoint, record_id, payload):
        self.calls.append(("update", endpoint, record_id, payload))
        if self.write_error:
            raise self.write_error

    def remove(self, endpoint, record_id):
        self.calls.append(("remove", endpoint, record_id))
        if self.write_error:
            raise self.write_error
        self.data[endpoint] = [r for r in self.data.get(endpoint, []) if str(r["id"]) != str(record_id)]

    def writes(self):
        return [c for c in self.calls if c[0] in ("create", "update", "remove")]


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def controller(fake_client):
    ctrl = FormController(fake_client)
    yield ctrl
    ctrl.close()


@pytest.fixture
def api_error():
    return ApiError("Identification already registered", status_code=409)

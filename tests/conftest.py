from __future__ import annotations

from decimal import Decimal

import pytest

from fleetfines.models.infraction import InfractionCode
from fleetfines.state.store import FleetStore
from fleetfines.storage.backend import InMemoryBackend


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def store(backend: InMemoryBackend) -> FleetStore:
    return FleetStore(backend)


@pytest.fixture
def parking_code() -> InfractionCode:
    return InfractionCode(
        code="745",
        description="Estacionar em local proibido",
        default_value=Decimal("130.16"),
        default_points=5,
    )


@pytest.fixture
def store_with_code(store: FleetStore, parking_code: InfractionCode) -> FleetStore:
    assert store.codes.create(parking_code)
    return store

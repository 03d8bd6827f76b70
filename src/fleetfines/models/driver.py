"""Driver model."""

from __future__ import annotations

from fleetfines.models._base import FleetBaseModel


class Driver(FleetBaseModel):
    """A driver registered in the fleet.

    ``cpf`` is the unique key of the collection.
    """

    id: str
    name: str = ""
    cpf: str = ""
    """Brazilian tax id, compared verbatim."""
    cnh_number: str = ""
    """Driver license (CNH) number."""
    validity_date: str = ""
    """License expiry as an ISO ``YYYY-MM-DD`` date."""

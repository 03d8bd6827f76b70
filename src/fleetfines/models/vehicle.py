"""Vehicle model."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import Field, field_validator

from fleetfines.ingestion.normalize import canonical_plate
from fleetfines.models._base import FleetBaseModel


class Vehicle(FleetBaseModel):
    """A fleet vehicle as printed on its CRLV document.

    ``plate`` is the unique key. It is stored in canonical form (no
    separators, upper case) so ``abc-1d23`` and ``ABC1D23`` collide.
    """

    id: str
    plate: str = ""
    renavam: str = ""
    chassis: str = ""
    brand: str = ""
    model: str = ""
    year: int = Field(default_factory=lambda: date.today().year)

    @field_validator("plate", mode="before")
    @classmethod
    def _canonical_plate(cls, value: Any) -> str:
        return canonical_plate(value)

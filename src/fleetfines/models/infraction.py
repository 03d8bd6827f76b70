"""Detran infraction code model."""

from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from fleetfines.models._base import FleetBaseModel, Money, Points


class InfractionCode(FleetBaseModel):
    """Reference entry of the Detran infraction table.

    ``code`` is both the unique key and the identity of the record.
    """

    code: str
    description: str = ""
    default_value: Money = Field(default=Decimal("0"), ge=0)
    """Base fine amount in BRL."""
    default_points: Points = Field(default=0, ge=0)
    """Points added to the driver's license."""

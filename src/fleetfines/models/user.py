"""Application user model."""

from __future__ import annotations

from pydantic import Field

from fleetfines.models._base import FleetBaseModel


class User(FleetBaseModel):
    """An operator allowed to log into the application.

    The password is stored and compared as given; it is never hashed.
    """

    username: str
    password: str = Field(default="", repr=False)
    name: str = ""

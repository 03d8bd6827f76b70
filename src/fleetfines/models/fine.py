"""Fine models.

A :class:`FineDraft` is the editable form of a fine: every field has a
default and the derived fields (``description``, ``value``, ``points``)
are kept in sync with the referenced infraction code by
:mod:`fleetfines.derivation`. A :class:`Fine` is a draft that has been
given an identity and persisted.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator

from fleetfines.ingestion.normalize import canonical_plate, safe_bool
from fleetfines.models._base import Blob, FleetBaseModel, Money, Points


class PaymentStatus(StrEnum):
    PENDING = "PENDING"
    PAID = "PAID"
    CANCELED = "CANCELED"


class FineDraft(FleetBaseModel):
    """A fine as edited in a form, before it has an id."""

    auto_infraction: str = ""
    """Citation number printed on the notice; unique across fines."""
    plate: str = ""
    driver_name: str = ""
    date: str = ""
    code: str = ""
    """Detran infraction code the derived fields come from."""
    description: str = ""
    value: Money = Decimal("0")
    points: Points = 0
    organ: str = ""
    """Issuing authority."""
    indicates_driver: bool = False
    location: str = ""
    pay_double: bool = False
    payment_status: PaymentStatus = PaymentStatus.PENDING
    observations: str = ""
    file_data: Blob = Field(default=None, repr=False)
    """Original notice (PDF or image) the fine was imported from."""
    file_mime_type: str | None = None

    @field_validator("plate", mode="before")
    @classmethod
    def _canonical_plate(cls, value: Any) -> str:
        return canonical_plate(value)

    @field_validator("indicates_driver", "pay_double", mode="before")
    @classmethod
    def _coerce_flags(cls, value: Any) -> bool:
        return bool(safe_bool(value))

    @field_validator("payment_status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        if value is None or value == "":
            return PaymentStatus.PENDING
        return value

    @property
    def display_points(self) -> int:
        """Points as they must be shown: always ``0`` when paying double.

        ``points`` itself may still hold a stale value if ``pay_double``
        was set without a later code or toggle event recomputing it.
        """
        return 0 if self.pay_double else self.points

    @property
    def has_attachment(self) -> bool:
        return self.file_data is not None

    def to_fine(self, fine_id: str) -> Fine:
        """Promote this draft to a persistable :class:`Fine`."""
        return Fine(id=fine_id, **self.model_dump())


class Fine(FineDraft):
    """A persisted traffic fine.

    ``value`` and ``points`` are stored as computed at save time. Editing
    the referenced :class:`~fleetfines.models.infraction.InfractionCode`
    later does not change them.
    """

    id: str

    def to_draft(self) -> FineDraft:
        return FineDraft(**self.model_dump(exclude={"id"}))

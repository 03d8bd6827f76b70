"""Candidate records produced by document extraction.

The extraction collaborator turns uploaded CNH, CRLV and fine-notice
scans (or spreadsheets) into loosely-typed dicts. Every field is treated
as untrusted and optional: the models below parse what they can and
leave the rest as ``None``. Promotion to a full entity happens in
:mod:`fleetfines.ingestion.reconcile` once a candidate is eligible.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import Field, field_validator

from fleetfines._constants import (
    CODE_IMPORT_REQUIRED,
    DRIVER_IMPORT_REQUIRED,
    FINE_IMPORT_REQUIRED,
    VEHICLE_IMPORT_REQUIRED,
)
from fleetfines.ingestion.normalize import (
    canonical_plate,
    non_negative_or_zero,
    normalize_date,
    parse_model_year,
    safe_bool,
    safe_decimal,
    safe_str,
)
from fleetfines.models._base import Blob, CandidateModel, decode_blob
from fleetfines.models.driver import Driver
from fleetfines.models.fine import FineDraft, PaymentStatus
from fleetfines.models.infraction import InfractionCode
from fleetfines.models.vehicle import Vehicle

_logger = logging.getLogger(__name__)


class CandidateKind(StrEnum):
    DRIVER = "driver"
    VEHICLE = "vehicle"
    FINE = "fine"
    INFRACTION_CODE = "infraction_code"


def _text(value: Any) -> str | None:
    return safe_str(value)


class DriverCandidate(CandidateModel):
    """Driver data read from a CNH."""

    REQUIRED: ClassVar[tuple[str, ...]] = DRIVER_IMPORT_REQUIRED

    name: str | None = None
    cpf: str | None = None
    cnh_number: str | None = None
    validity_date: str | None = None

    @field_validator("name", "cpf", "cnh_number", "validity_date", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _text(value)

    def to_driver(self, driver_id: str) -> Driver:
        return Driver(
            id=driver_id,
            name=self.name or "",
            cpf=self.cpf or "",
            cnh_number=self.cnh_number or "",
            validity_date=normalize_date(self.validity_date),
        )


class VehicleCandidate(CandidateModel):
    """Vehicle data read from a CRLV."""

    REQUIRED: ClassVar[tuple[str, ...]] = VEHICLE_IMPORT_REQUIRED

    plate: str | None = None
    renavam: str | None = None
    chassis: str | None = None
    brand: str | None = None
    model: str | None = None
    year: int | None = None

    @field_validator("renavam", "chassis", "brand", "model", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _text(value)

    @field_validator("plate", mode="before")
    @classmethod
    def _coerce_plate(cls, value: Any) -> str | None:
        return canonical_plate(value) or None

    @field_validator("year", mode="before")
    @classmethod
    def _coerce_year(cls, value: Any) -> int | None:
        return parse_model_year(value)

    def to_vehicle(self, vehicle_id: str) -> Vehicle:
        return Vehicle(
            id=vehicle_id,
            plate=self.plate or "",
            renavam=self.renavam or "",
            chassis=self.chassis or "",
            brand=self.brand or "",
            model=self.model or "",
            year=self.year if self.year is not None else date.today().year,
        )


class InfractionCodeCandidate(CandidateModel):
    """A row of a Detran infraction table."""

    REQUIRED: ClassVar[tuple[str, ...]] = CODE_IMPORT_REQUIRED

    code: str | None = None
    description: str | None = None
    default_value: Decimal | None = None
    default_points: int | None = None

    @field_validator("code", "description", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _text(value)

    @field_validator("default_value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> Decimal | None:
        parsed = safe_decimal(value)
        if parsed is None or parsed < 0:
            return None
        return parsed

    @field_validator("default_points", mode="before")
    @classmethod
    def _coerce_points(cls, value: Any) -> int | None:
        return non_negative_or_zero(value)

    def to_code(self) -> InfractionCode:
        return InfractionCode(
            code=self.code or "",
            description=self.description or "",
            default_value=self.default_value if self.default_value is not None else Decimal("0"),
            default_points=self.default_points or 0,
        )


class FineCandidate(CandidateModel):
    """Fine data read from a notice of infraction."""

    REQUIRED: ClassVar[tuple[str, ...]] = FINE_IMPORT_REQUIRED

    auto_infraction: str | None = None
    plate: str | None = None
    driver_name: str | None = None
    date: str | None = None
    code: str | None = None
    description: str | None = None
    value: Decimal | None = None
    points: int | None = None
    organ: str | None = None
    indicates_driver: bool | None = None
    location: str | None = None
    observations: str | None = None
    file_data: Blob = Field(default=None, repr=False)
    file_mime_type: str | None = None

    @field_validator(
        "auto_infraction",
        "driver_name",
        "date",
        "code",
        "description",
        "organ",
        "location",
        "observations",
        "file_mime_type",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _text(value)

    @field_validator("plate", mode="before")
    @classmethod
    def _coerce_plate(cls, value: Any) -> str | None:
        return canonical_plate(value) or None

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> Decimal | None:
        return safe_decimal(value)

    @field_validator("points", mode="before")
    @classmethod
    def _coerce_points(cls, value: Any) -> int | None:
        return non_negative_or_zero(value)

    @field_validator("indicates_driver", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool | None:
        return safe_bool(value)

    @field_validator("file_data", mode="before")
    @classmethod
    def _coerce_attachment(cls, value: Any) -> bytes | None:
        try:
            return decode_blob(value)
        except ValueError:
            _logger.debug("Dropping undecodable attachment from fine candidate", exc_info=True)
            return None

    def to_draft(self) -> FineDraft:
        """Build a draft; imported fines always start pending, single payment."""
        return FineDraft(
            auto_infraction=self.auto_infraction or "",
            plate=self.plate or "",
            driver_name=self.driver_name or "",
            date=normalize_date(self.date),
            code=self.code or "",
            description=self.description or "",
            value=self.value if self.value is not None else Decimal("0"),
            points=self.points or 0,
            organ=self.organ or "",
            indicates_driver=bool(self.indicates_driver),
            location=self.location or "",
            pay_double=False,
            payment_status=PaymentStatus.PENDING,
            observations=self.observations or "",
            file_data=self.file_data,
            file_mime_type=self.file_mime_type,
        )


CANDIDATE_MODELS: dict[CandidateKind, type[CandidateModel]] = {
    CandidateKind.DRIVER: DriverCandidate,
    CandidateKind.VEHICLE: VehicleCandidate,
    CandidateKind.FINE: FineCandidate,
    CandidateKind.INFRACTION_CODE: InfractionCodeCandidate,
}

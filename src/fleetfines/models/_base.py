"""Base models and shared field types.

Every persisted entity inherits from :class:`FleetBaseModel` which
provides:

* ``alias_generator=to_camel`` so the stored JSON keeps the camelCase
  keys (``autoInfraction``, ``cnhNumber``...) while Python code uses
  snake_case attributes.
* :meth:`FleetBaseModel.to_storage` producing the JSON-ready dict written
  by the repositories.

Candidate records produced by document extraction inherit from
:class:`CandidateModel`, which additionally strips extractor sentinel
values (``""``, ``"--"``, NaN) before validation and stashes the
original payload in ``raw``.
"""

from __future__ import annotations

import base64
import binascii
from decimal import Decimal
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, model_validator
from pydantic.alias_generators import to_camel

from fleetfines.ingestion.normalize import is_meaningful, is_sentinel, safe_decimal, safe_int


def _to_money(value: Any) -> Any:
    if is_sentinel(value):
        return Decimal("0")
    parsed = safe_decimal(value)
    # Unparseable input is passed through so pydantic reports it.
    return parsed if parsed is not None else value


def _to_points(value: Any) -> Any:
    if is_sentinel(value):
        return 0
    parsed = safe_int(value)
    return parsed if parsed is not None else value


def decode_blob(value: Any) -> bytes | None:
    """Decode an attached document.

    Accepts raw bytes, a base64 string, or a ``data:<mime>;base64,...`` URL.
    """
    if value is None or value == "":
        return None
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise ValueError("file data must be bytes or a base64 string")
    payload = value.split(",", 1)[1] if value.startswith("data:") else value
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError("file data is not valid base64") from exc


def encode_blob(value: bytes | None) -> str | None:
    if value is None:
        return None
    return base64.b64encode(value).decode("ascii")


Money = Annotated[
    Decimal,
    BeforeValidator(_to_money),
    PlainSerializer(float, return_type=float, when_used="json"),
]
"""Currency amount: ``Decimal`` in memory, JSON number on disk."""

Points = Annotated[int, BeforeValidator(_to_points)]

Blob = Annotated[
    bytes | None,
    BeforeValidator(decode_blob),
    PlainSerializer(encode_blob, when_used="json-unless-none"),
]
"""Attached document bytes, stored base64-encoded."""


class FleetBaseModel(BaseModel):
    """Base for persisted fleetfines records."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_storage(self) -> dict[str, Any]:
        """JSON-ready dict using the persisted camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class CandidateModel(FleetBaseModel):
    """Base for partially-populated records produced by extraction.

    Every field of a subclass is optional. Subclasses declare the fields
    a candidate needs before it may be promoted in ``REQUIRED``.
    """

    REQUIRED: ClassVar[tuple[str, ...]] = ()

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Payload as received from the extractor."""

    @model_validator(mode="before")
    @classmethod
    def _clean_extracted_values(cls, values: Any) -> Any:
        """Drop sentinel values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = {key: value for key, value in values.items() if not is_sentinel(value)}
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned

    def missing_fields(self) -> tuple[str, ...]:
        """Required fields this candidate left empty."""
        return tuple(name for name in self.REQUIRED if not is_meaningful(getattr(self, name, None)))

    @property
    def is_eligible(self) -> bool:
        return not self.missing_fields()

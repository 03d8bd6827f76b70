"""Tests for entity and candidate model parsing."""

from __future__ import annotations

import math
from decimal import Decimal

import pytest
from pydantic import ValidationError

from fleetfines.models.candidates import (
    CANDIDATE_MODELS,
    CandidateKind,
    DriverCandidate,
    FineCandidate,
    InfractionCodeCandidate,
    VehicleCandidate,
)
from fleetfines.models.fine import Fine, FineDraft, PaymentStatus
from fleetfines.models.infraction import InfractionCode
from fleetfines.models.user import User
from fleetfines.models.vehicle import Vehicle

# ------------------------------------------------------------------
# Entities
# ------------------------------------------------------------------


class TestFine:
    def test_storage_uses_camel_case_keys(self) -> None:
        fine = Fine(
            id="f1",
            auto_infraction="A1",
            driver_name="Ana",
            value=Decimal("130.16"),
            pay_double=False,
            file_data=b"\x00\x01",
            file_mime_type="image/png",
        )

        stored = fine.to_storage()

        assert stored["autoInfraction"] == "A1"
        assert stored["driverName"] == "Ana"
        assert stored["value"] == 130.16
        assert stored["paymentStatus"] == "PENDING"
        assert stored["fileData"] == "AAE="
        assert stored["fileMimeType"] == "image/png"

    def test_storage_roundtrip_preserves_decimal(self) -> None:
        fine = Fine(id="f1", auto_infraction="A1", value=Decimal("260.32"))
        assert Fine.model_validate(fine.to_storage()).value == Decimal("260.32")

    def test_accepts_data_url_attachment(self) -> None:
        fine = Fine(id="f1", file_data="data:application/pdf;base64,JVBERg==")
        assert fine.file_data == b"%PDF"

    def test_rejects_invalid_attachment(self) -> None:
        with pytest.raises(ValidationError):
            Fine(id="f1", file_data="not base64!!")

    def test_unknown_payment_status_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Fine(id="f1", payment_status="REFUNDED")

    def test_missing_payment_status_defaults_to_pending(self) -> None:
        assert Fine(id="f1", payment_status="").payment_status == PaymentStatus.PENDING

    def test_display_points_zero_when_paying_double(self) -> None:
        assert Fine(id="f1", points=5, pay_double=True).display_points == 0
        assert Fine(id="f1", points=5).display_points == 5

    def test_draft_promotion_and_back(self) -> None:
        draft = FineDraft(auto_infraction="A1", plate="abc 1d23", points=5)

        fine = draft.to_fine("f1")

        assert fine.id == "f1"
        assert fine.plate == "ABC1D23"
        assert fine.to_draft().model_dump() == draft.model_dump()

    def test_models_are_frozen(self) -> None:
        fine = Fine(id="f1")
        with pytest.raises(ValidationError):
            fine.points = 3  # type: ignore[misc]


class TestInfractionCode:
    def test_negative_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            InfractionCode(code="745", default_value=-1)
        with pytest.raises(ValidationError):
            InfractionCode(code="745", default_points=-2)

    def test_float_amount_kept_exact(self) -> None:
        assert InfractionCode(code="745", default_value=130.16).default_value == Decimal("130.16")


def test_vehicle_plate_canonical() -> None:
    assert Vehicle(id="v1", plate=" abc-1d23 ", year=2020).plate == "ABC1D23"


def test_user_password_hidden_from_repr() -> None:
    user = User(username="ana", password="s3cret", name="Ana")
    assert "s3cret" not in repr(user)


# ------------------------------------------------------------------
# Candidates
# ------------------------------------------------------------------


class TestCandidates:
    def test_sentinels_become_none(self) -> None:
        candidate = DriverCandidate.model_validate({"name": "Ana", "cpf": "--", "cnhNumber": "", "validityDate": None})

        assert candidate.cpf is None
        assert candidate.cnh_number is None
        assert candidate.missing_fields() == ("cpf",)
        assert candidate.raw["cpf"] == "--"

    def test_numbers_coerced_to_text(self) -> None:
        candidate = DriverCandidate.model_validate({"name": "Ana", "cpf": 11122233344})
        assert candidate.cpf == "11122233344"
        assert candidate.is_eligible

    def test_vehicle_year_variants(self) -> None:
        assert VehicleCandidate.model_validate({"year": "2019/2020"}).year == 2020
        assert VehicleCandidate.model_validate({"year": 2018}).year == 2018
        assert VehicleCandidate.model_validate({"year": "n/a"}).year is None

    def test_fine_candidate_lenient_numbers(self) -> None:
        candidate = FineCandidate.model_validate(
            {"autoInfraction": "A1", "value": "R$ 1.234,56", "points": "-3", "indicatesDriver": "true"}
        )

        assert candidate.value == Decimal("1234.56")
        assert candidate.points == 0
        assert candidate.indicates_driver is True

    def test_fine_candidate_nan_dropped(self) -> None:
        candidate = FineCandidate.model_validate({"autoInfraction": "A1", "value": math.nan})
        assert candidate.value is None

    def test_fine_candidate_bad_attachment_dropped(self) -> None:
        candidate = FineCandidate.model_validate({"autoInfraction": "A1", "fileData": "not base64!!"})

        assert candidate.file_data is None
        assert candidate.is_eligible

    def test_code_candidate_negative_value_discarded(self) -> None:
        candidate = InfractionCodeCandidate.model_validate({"code": "745", "defaultValue": -5})
        assert candidate.default_value is None
        assert candidate.to_code().default_value == Decimal("0")

    def test_every_kind_has_a_model(self) -> None:
        assert set(CANDIDATE_MODELS) == set(CandidateKind)


def test_fine_draft_has_attachment() -> None:
    assert FineDraft(file_data=b"%PDF").has_attachment
    assert not FineDraft().has_attachment

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Any

import pytest

from fleetfines.exceptions import FleetImportError
from fleetfines.ingestion.reconcile import ImportReconciler, ImportTally, UploadedFile
from fleetfines.models.candidates import CandidateKind
from fleetfines.models.driver import Driver
from fleetfines.models.fine import FineDraft, PaymentStatus
from fleetfines.state.store import FleetStore


class _StaticExtractor:
    def __init__(self, payloads: list[dict[str, Any]]) -> None:
        self.payloads = payloads
        self.calls: list[tuple[CandidateKind, int]] = []

    async def extract(self, kind: CandidateKind, files: Sequence[UploadedFile]) -> list[dict[str, Any]]:
        self.calls.append((kind, len(files)))
        return self.payloads


class _FailingExtractor:
    async def extract(self, kind: CandidateKind, files: Sequence[UploadedFile]) -> list[dict[str, Any]]:
        raise RuntimeError("model quota exceeded")


class _NoneExtractor:
    async def extract(self, kind: CandidateKind, files: Sequence[UploadedFile]) -> Any:
        return None


_FILES = [UploadedFile(name="multa.pdf", data=b"%PDF", mime_type="application/pdf")]


# ------------------------------------------------------------------
# Drivers / vehicles
# ------------------------------------------------------------------


def test_driver_import_counts_duplicates(store: FleetStore) -> None:
    store.drivers.create(Driver(id="d0", name="Ana", cpf="11122233344"))

    tally = ImportReconciler(store).reconcile_drivers(
        [
            {"name": "Ana", "cpf": "11122233344"},
            {"name": "Bruno", "cpf": "22233344455", "cnhNumber": "987", "validityDate": "31/12/2027"},
            {"name": "Bruno again", "cpf": "22233344455"},
        ]
    )

    assert (tally.success_count, tally.dup_count) == (1, 2)
    bruno = store.drivers.find_by_unique_field("22233344455")
    assert bruno is not None
    assert bruno.validity_date == "2027-12-31"
    assert bruno.id and bruno.id != "d0"


def test_ineligible_candidates_are_silent(store: FleetStore) -> None:
    tally = ImportReconciler(store).reconcile_drivers(
        [
            {"name": "No cpf"},
            {"cpf": "123"},
            {"name": "--", "cpf": "456"},
            "not a record",
        ]
    )

    assert (tally.success_count, tally.dup_count) == (0, 0)
    assert tally.skipped_count == 4
    assert store.drivers.all() == []


def test_vehicle_import_parses_crlv_fields(store: FleetStore) -> None:
    tally = ImportReconciler(store).reconcile_vehicles(
        [
            {"plate": "abc-1d23", "renavam": "01234567890", "brand": "VW", "model": "GOL", "year": "2019/2020"},
            {"plate": "ABC1D23", "renavam": "other"},
            {"plate": "XYZ9A99"},
        ]
    )

    assert (tally.success_count, tally.dup_count, tally.skipped_count) == (1, 1, 1)
    vehicle = store.vehicles.all()[0]
    assert vehicle.plate == "ABC1D23"
    assert vehicle.year == 2020


def test_vehicle_without_year_defaults_to_current_year(store: FleetStore) -> None:
    ImportReconciler(store).reconcile_vehicles([{"plate": "QWE1R23", "renavam": "1"}])

    assert store.vehicles.all()[0].year == date.today().year


def test_vehicle_import_survives_infinite_year(store: FleetStore) -> None:
    tally = ImportReconciler(store).reconcile_vehicles(
        [
            {"plate": "AAA1A11", "renavam": "1", "year": 2021},
            {"plate": "BBB2B22", "renavam": "2", "year": "Infinity"},
        ]
    )

    assert (tally.success_count, tally.dup_count) == (2, 0)
    vehicle = store.vehicles.find_by_unique_field("BBB2B22")
    assert vehicle is not None
    assert vehicle.year == date.today().year


def test_code_import(store: FleetStore) -> None:
    tally = ImportReconciler(store).reconcile_codes(
        [
            {"code": "745", "description": "Estacionar", "defaultValue": "R$ 130,16", "defaultPoints": "5"},
            {"code": "745", "description": "dup"},
            {"description": "no code"},
        ]
    )

    assert (tally.success_count, tally.dup_count, tally.skipped_count) == (1, 1, 1)
    assert store.find_code("745").default_value == Decimal("130.16")  # type: ignore[union-attr]


# ------------------------------------------------------------------
# Fines
# ------------------------------------------------------------------


def test_fine_import_backfills_only_empty_fields(store_with_code: FleetStore) -> None:
    tally = ImportReconciler(store_with_code).reconcile_fines(
        [
            {"autoInfraction": "A1", "code": "745"},
            {"autoInfraction": "A2", "code": "745", "description": "Texto do auto", "value": 195.23, "points": 0},
        ]
    )

    assert tally.success_count == 2
    a1 = store_with_code.fines.find_by_unique_field("A1")
    a2 = store_with_code.fines.find_by_unique_field("A2")
    assert a1 is not None and a2 is not None
    assert (a1.description, a1.value, a1.points) == ("Estacionar em local proibido", Decimal("130.16"), 5)
    assert (a2.description, a2.value, a2.points) == ("Texto do auto", Decimal("195.23"), 5)


def test_fine_import_forces_pending_single_payment(store_with_code: FleetStore) -> None:
    ImportReconciler(store_with_code).reconcile_fines(
        [{"autoInfraction": "A1", "code": "745", "payDouble": True, "paymentStatus": "PAID", "indicatesDriver": "sim"}]
    )

    fine = store_with_code.fines.find_by_unique_field("A1")
    assert fine is not None
    assert fine.payment_status == PaymentStatus.PENDING
    assert fine.pay_double is False
    assert fine.indicates_driver is True


def test_fine_import_unknown_code_leaves_fields(store: FleetStore) -> None:
    ImportReconciler(store).reconcile_fines([{"autoInfraction": "A1", "code": "000", "date": "05/03/2025"}])

    fine = store.fines.find_by_unique_field("A1")
    assert fine is not None
    assert (fine.description, fine.value, fine.points) == ("", Decimal("0"), 0)
    assert fine.date == "2025-03-05"


def test_fine_import_keeps_fine_with_undecodable_attachment(store: FleetStore) -> None:
    tally = ImportReconciler(store).reconcile_fines(
        [{"autoInfraction": "A1", "fileData": "not base64!!", "points": "1e400"}]
    )

    assert (tally.success_count, tally.skipped_count) == (1, 0)
    fine = store.fines.find_by_unique_field("A1")
    assert fine is not None
    assert fine.file_data is None
    assert fine.points == 0


def test_fine_import_tally_with_existing_citations(store_with_code: FleetStore) -> None:
    store_with_code.save_fine(FineDraft(auto_infraction="A2", plate="ABC1D23", code="745"))
    store_with_code.save_fine(FineDraft(auto_infraction="A4", plate="ABC1D23", code="745"))
    batch = [{"autoInfraction": f"A{i}", "plate": "ABC1D23", "code": "745"} for i in range(1, 6)]

    tally = ImportReconciler(store_with_code).reconcile_fines(batch)

    assert (tally.success_count, tally.dup_count) == (3, 2)
    assert len(store_with_code.fines.all()) == 5


# ------------------------------------------------------------------
# Async import path
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_import_files_attaches_original_document(store_with_code: FleetStore) -> None:
    extractor = _StaticExtractor(
        [{"autoInfraction": "A1", "code": "745", "fileData": "JVBERg==", "fileMimeType": "application/pdf"}]
    )

    tally = await ImportReconciler(store_with_code).import_files(CandidateKind.FINE, extractor, _FILES)

    assert extractor.calls == [(CandidateKind.FINE, 1)]
    assert tally.summary() == "Importação: 1 salvos. 0 duplicados ignorados."
    fine = store_with_code.fines.find_by_unique_field("A1")
    assert fine is not None
    assert fine.file_data == b"%PDF"
    assert fine.file_mime_type == "application/pdf"


@pytest.mark.asyncio
async def test_import_files_failure_aborts_batch(store: FleetStore) -> None:
    with pytest.raises(FleetImportError) as excinfo:
        await ImportReconciler(store).import_files(CandidateKind.DRIVER, _FailingExtractor(), _FILES)

    assert excinfo.value.kind == "driver"
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert store.drivers.all() == []


@pytest.mark.asyncio
async def test_import_files_without_files_skips_extractor(store: FleetStore) -> None:
    extractor = _StaticExtractor([])

    tally = await ImportReconciler(store).import_files(CandidateKind.VEHICLE, extractor, [])

    assert tally == ImportTally()
    assert extractor.calls == []


@pytest.mark.asyncio
async def test_import_files_rejects_malformed_extractor_result(store: FleetStore) -> None:
    with pytest.raises(FleetImportError) as excinfo:
        await ImportReconciler(store).import_files(CandidateKind.VEHICLE, _NoneExtractor(), _FILES)

    assert excinfo.value.kind == "vehicle"
    assert store.vehicles.all() == []


def test_tally_total_counts_every_candidate(store: FleetStore) -> None:
    store.drivers.create(Driver(id="d0", name="Ana", cpf="1"))

    tally = ImportReconciler(store).reconcile_drivers(
        [{"name": "Ana", "cpf": "1"}, {"name": "Bia", "cpf": "2"}, {"name": "No cpf"}]
    )

    assert (tally.success_count, tally.dup_count, tally.skipped_count) == (1, 1, 1)
    assert tally.total == 3

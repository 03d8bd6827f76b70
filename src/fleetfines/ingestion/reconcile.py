"""Import reconciliation.

Turns a batch of candidate records from the document-extraction
collaborator into persisted entities:

- validate each candidate at the boundary (untrusted, all fields optional)
- drop candidates missing a required field, silently
- resolve the Detran code of fine candidates and back-fill what the
  extractor left empty
- give each eligible candidate a fresh id and ``create()`` it, tallying
  successes and duplicate rejections

A duplicate never aborts a batch. A failing extraction call aborts the
whole batch before anything is persisted.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Protocol, TypeVar

from pydantic import ValidationError

from fleetfines._redact import redact_for_log
from fleetfines.exceptions import FleetImportError
from fleetfines.ingestion.normalize import is_meaningful
from fleetfines.models._base import CandidateModel
from fleetfines.models.candidates import (
    CandidateKind,
    DriverCandidate,
    FineCandidate,
    InfractionCodeCandidate,
    VehicleCandidate,
)
from fleetfines.state.store import FleetStore, new_record_id

_logger = logging.getLogger(__name__)

TCandidate = TypeVar("TCandidate", bound=CandidateModel)


@dataclasses.dataclass(frozen=True)
class UploadedFile:
    """A file handed to the extraction collaborator."""

    name: str
    data: bytes = dataclasses.field(repr=False)
    mime_type: str = "application/octet-stream"


class Extractor(Protocol):
    """Document-extraction collaborator.

    Returns one dict per record found in *files*, shaped like the
    candidate model of *kind*. Fields may be missing or null and dates are
    free-form strings.
    """

    async def extract(self, kind: CandidateKind, files: Sequence[UploadedFile]) -> list[dict[str, Any]]: ...


@dataclasses.dataclass
class ImportTally:
    """Outcome of one import batch.

    ``skipped_count`` counts candidates dropped for missing required
    fields; it is diagnostic only and not part of the user-facing summary.
    """

    success_count: int = 0
    dup_count: int = 0
    skipped_count: int = 0

    @property
    def total(self) -> int:
        return self.success_count + self.dup_count + self.skipped_count

    def record(self, saved: bool) -> None:
        if saved:
            self.success_count += 1
        else:
            self.dup_count += 1

    def summary(self) -> str:
        return f"Importação: {self.success_count} salvos. {self.dup_count} duplicados ignorados."


def parse_candidates(model: type[TCandidate], payloads: Iterable[Any]) -> tuple[list[TCandidate], int]:
    """Validate raw extractor payloads.

    Returns the parsed candidates and how many payloads could not be
    parsed at all (not a mapping, or a value pydantic rejects).
    """
    parsed: list[TCandidate] = []
    rejected = 0
    for payload in payloads:
        if isinstance(payload, model):
            parsed.append(payload)
            continue
        if not isinstance(payload, Mapping):
            rejected += 1
            continue
        try:
            parsed.append(model.model_validate(dict(payload)))
        except ValidationError:
            _logger.debug("Unparseable %s candidate: %s", model.__name__, redact_for_log(payload), exc_info=True)
            rejected += 1
    return parsed, rejected


class ImportReconciler:
    """Feeds extracted candidates through the store's repositories."""

    def __init__(self, store: FleetStore) -> None:
        self._store = store
        self._reconcilers: dict[CandidateKind, Callable[[Iterable[Any]], ImportTally]] = {
            CandidateKind.DRIVER: self.reconcile_drivers,
            CandidateKind.VEHICLE: self.reconcile_vehicles,
            CandidateKind.FINE: self.reconcile_fines,
            CandidateKind.INFRACTION_CODE: self.reconcile_codes,
        }

    # ------------------------------------------------------------------
    # Synchronous reconciliation
    # ------------------------------------------------------------------

    def reconcile(self, kind: CandidateKind, payloads: Iterable[Any]) -> ImportTally:
        return self._reconcilers[kind](payloads)

    def _eligible(self, model: type[TCandidate], payloads: Iterable[Any], tally: ImportTally) -> list[TCandidate]:
        candidates, rejected = parse_candidates(model, payloads)
        tally.skipped_count += rejected
        eligible: list[TCandidate] = []
        for candidate in candidates:
            if candidate.is_eligible:
                eligible.append(candidate)
            else:
                tally.skipped_count += 1
        return eligible

    def reconcile_drivers(self, payloads: Iterable[Any]) -> ImportTally:
        tally = ImportTally()
        for candidate in self._eligible(DriverCandidate, payloads, tally):
            tally.record(self._store.drivers.create(candidate.to_driver(new_record_id())))
        _logger.debug("Driver import: %s", tally)
        return tally

    def reconcile_vehicles(self, payloads: Iterable[Any]) -> ImportTally:
        tally = ImportTally()
        for candidate in self._eligible(VehicleCandidate, payloads, tally):
            tally.record(self._store.vehicles.create(candidate.to_vehicle(new_record_id())))
        _logger.debug("Vehicle import: %s", tally)
        return tally

    def reconcile_codes(self, payloads: Iterable[Any]) -> ImportTally:
        tally = ImportTally()
        for candidate in self._eligible(InfractionCodeCandidate, payloads, tally):
            tally.record(self._store.codes.create(candidate.to_code()))
        _logger.debug("Infraction code import: %s", tally)
        return tally

    def reconcile_fines(self, payloads: Iterable[Any]) -> ImportTally:
        tally = ImportTally()
        for candidate in self._eligible(FineCandidate, payloads, tally):
            draft = self.backfill_fine(candidate).to_draft()
            if draft.has_attachment:
                _logger.debug("Fine %s carries a %s attachment", draft.auto_infraction, draft.file_mime_type)
            tally.record(self._store.fines.create(draft.to_fine(new_record_id())))
        _logger.debug("Fine import: %s", tally)
        return tally

    def backfill_fine(self, candidate: FineCandidate) -> FineCandidate:
        """Fill description/value/points from the candidate's Detran code.

        Only fields the extractor left empty are filled; zero counts as
        empty. Unknown codes leave the candidate as it is.
        """
        if not candidate.code:
            return candidate
        found = self._store.find_code(candidate.code)
        if found is None:
            return candidate

        update: dict[str, Any] = {}
        if not is_meaningful(candidate.description):
            update["description"] = found.description
        if not is_meaningful(candidate.value):
            update["value"] = found.default_value
        if not is_meaningful(candidate.points):
            update["points"] = found.default_points
        return candidate.model_copy(update=update) if update else candidate

    # ------------------------------------------------------------------
    # Extraction + reconciliation
    # ------------------------------------------------------------------

    async def import_files(
        self,
        kind: CandidateKind,
        extractor: Extractor,
        files: Sequence[UploadedFile],
    ) -> ImportTally:
        """Extract candidates from *files* and reconcile them.

        Any exception raised by the extractor, or a result that is not a
        list of records, is reported as a single :class:`FleetImportError`;
        nothing from the batch is persisted in that case. There is no timeout or retry.
        """
        if not files:
            return ImportTally()
        try:
            payloads = await extractor.extract(kind, files)
        except Exception as exc:
            _logger.debug("Extraction of %d %s file(s) failed", len(files), kind, exc_info=True)
            raise FleetImportError("Falha na importação via IA.", kind=str(kind)) from exc

        if isinstance(payloads, (str, bytes)) or not isinstance(payloads, Sequence):
            _logger.debug("Extractor returned %s instead of a record list", type(payloads).__name__)
            raise FleetImportError("Falha na importação via IA.", kind=str(kind))

        tally = self.reconcile(kind, payloads)
        _logger.debug(
            "Imported %s from %d file(s): %s (%d candidate(s))", kind, len(files), tally.summary(), tally.total
        )
        return tally

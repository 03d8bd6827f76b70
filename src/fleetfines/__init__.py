"""fleetfines - record store and fine derivation engine for fleet compliance."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fleetfines")
except PackageNotFoundError:
    __version__ = "0+local"
from fleetfines.config import FleetConfig
from fleetfines.derivation import (
    derive_amounts,
    is_consistent,
    on_code_changed,
    on_toggle_changed,
    set_code,
    with_value,
)
from fleetfines.exceptions import (
    FleetConfigError,
    FleetError,
    FleetImportError,
    FleetStorageError,
    FleetValidationError,
)
from fleetfines.ingestion.reconcile import Extractor, ImportReconciler, ImportTally, UploadedFile
from fleetfines.models import (
    CandidateKind,
    Driver,
    DriverCandidate,
    Fine,
    FineCandidate,
    FineDraft,
    InfractionCode,
    InfractionCodeCandidate,
    PaymentStatus,
    User,
    Vehicle,
    VehicleCandidate,
)
from fleetfines.session import SessionManager
from fleetfines.state.repository import Repository
from fleetfines.state.store import FleetStore, new_record_id
from fleetfines.storage import InMemoryBackend, JsonFileBackend, StorageBackend

__all__ = [
    "__version__",
    "CandidateKind",
    "Driver",
    "DriverCandidate",
    "Extractor",
    "Fine",
    "FineCandidate",
    "FineDraft",
    "FleetConfig",
    "FleetConfigError",
    "FleetError",
    "FleetImportError",
    "FleetStorageError",
    "FleetStore",
    "FleetValidationError",
    "ImportReconciler",
    "ImportTally",
    "InMemoryBackend",
    "InfractionCode",
    "InfractionCodeCandidate",
    "JsonFileBackend",
    "PaymentStatus",
    "Repository",
    "SessionManager",
    "StorageBackend",
    "UploadedFile",
    "User",
    "Vehicle",
    "VehicleCandidate",
    "derive_amounts",
    "is_consistent",
    "new_record_id",
    "on_code_changed",
    "on_toggle_changed",
    "set_code",
    "with_value",
]

"""Custom exception hierarchy for fleetfines."""

from __future__ import annotations


class FleetError(Exception):
    """Base exception for all fleetfines errors."""


class FleetConfigError(FleetError):
    """Invalid or missing configuration."""


class FleetStorageError(FleetError):
    """Persistence backend failure (unreadable directory, failed write)."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class FleetValidationError(FleetError):
    """A record is missing fields required to save it.

    Duplicate unique keys are *not* reported through this exception;
    repositories signal those by returning ``False``.
    """

    def __init__(self, message: str, *, missing: tuple[str, ...] = ()) -> None:
        self.missing = missing
        super().__init__(message)


class FleetImportError(FleetError):
    """The extraction step of an import failed.

    Raised once for the whole batch. Nothing from the batch has been
    persisted when this is raised.
    """

    def __init__(self, message: str, *, kind: str = "") -> None:
        self.kind = kind
        super().__init__(message)

"""Generic entity repository.

One repository owns one homogeneous collection, serialized as a JSON
array under a single backend key. Every mutation rewrites the whole
collection with one ``set`` call.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from fleetfines._redact import redact_for_log
from fleetfines.models._base import FleetBaseModel
from fleetfines.storage.backend import StorageBackend

_logger = logging.getLogger(__name__)

T = TypeVar("T", bound=FleetBaseModel)


class Repository(Generic[T]):
    """CRUD over one collection keyed by a declared unique field.

    Parameters
    ----------
    backend : StorageBackend
        Where the serialized collection lives.
    key : str
        Namespaced backend key of the collection.
    model : type
        Entity model of the records.
    unique_field : str
        Attribute whose value must be distinct across records. Compared
        with plain equality: no case folding, no trimming.
    id_field : str
        Attribute identifying a record for update/delete.
    enforce_unique_on_update : bool
        Default for ``update_by_id(enforce_unique=...)``.
    """

    def __init__(
        self,
        backend: StorageBackend,
        key: str,
        model: type[T],
        *,
        unique_field: str,
        id_field: str = "id",
        enforce_unique_on_update: bool = False,
    ) -> None:
        self._backend = backend
        self._key = key
        self._model = model
        self._unique_field = unique_field
        self._id_field = id_field
        self._enforce_unique_on_update = enforce_unique_on_update
        self._adapter: TypeAdapter[list[T]] = TypeAdapter(list[model])  # type: ignore[valid-type]

    @property
    def key(self) -> str:
        return self._key

    @property
    def unique_field(self) -> str:
        return self._unique_field

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def _load(self) -> list[T]:
        raw = self._backend.get(self._key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            _logger.warning("Corrupt collection %s: invalid JSON; reading as empty", self._key)
            return []
        if not isinstance(data, list):
            _logger.warning("Corrupt collection %s: expected a JSON array, got %s", self._key, type(data).__name__)
            return []
        try:
            return self._adapter.validate_python(data)
        except ValidationError as exc:
            _logger.warning(
                "Corrupt collection %s: %d invalid record field(s); reading as empty",
                self._key,
                exc.error_count(),
            )
            return []

    def _save(self, records: Sequence[T]) -> None:
        payload = [record.to_storage() for record in records]
        self._backend.set(self._key, json.dumps(payload, ensure_ascii=False))

    def _identity(self, record: T) -> Any:
        return getattr(record, self._id_field)

    def _unique_value(self, record: T) -> Any:
        return getattr(record, self._unique_field)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def all(self) -> list[T]:
        """All records in insertion order.

        Missing or corrupt storage reads as an empty list; this never raises.
        """
        return self._load()

    def find_by_unique_field(self, value: Any) -> T | None:
        for record in self._load():
            if self._unique_value(record) == value:
                return record
        return None

    def find_by_id(self, record_id: Any) -> T | None:
        for record in self._load():
            if self._identity(record) == record_id:
                return record
        return None

    def create(self, record: T) -> bool:
        """Insert *record* unless its unique field is already taken.

        Returns ``False`` on collision; duplicates are never an exception.
        """
        records = self._load()
        value = self._unique_value(record)
        if any(self._unique_value(existing) == value for existing in records):
            _logger.debug("Rejected duplicate %s=%r in %s", self._unique_field, value, self._key)
            return False
        records.append(record)
        self._save(records)
        _logger.debug("Created record in %s: %s", self._key, redact_for_log(record.to_storage()))
        return True

    def update_by_id(self, record: T, *, enforce_unique: bool | None = None) -> bool:
        """Replace the record sharing *record*'s identity.

        A missing record is a silent no-op (returns ``False``). Unless
        *enforce_unique* is true, the unique field is not re-checked, so an
        update can introduce a duplicate.
        """
        if enforce_unique is None:
            enforce_unique = self._enforce_unique_on_update
        records = self._load()
        record_id = self._identity(record)
        index = next((i for i, existing in enumerate(records) if self._identity(existing) == record_id), None)
        if index is None:
            return False
        if enforce_unique:
            value = self._unique_value(record)
            for i, existing in enumerate(records):
                if i != index and self._unique_value(existing) == value:
                    _logger.debug("Refused update of %r in %s: %s=%r taken", record_id, self._key, self._unique_field, value)
                    return False
        records[index] = record
        self._save(records)
        return True

    def delete_by_id(self, record_id: Any) -> bool:
        """Remove the record with identity *record_id*; no-op when absent."""
        records = self._load()
        remaining = [record for record in records if self._identity(record) != record_id]
        if len(remaining) == len(records):
            return False
        self._save(remaining)
        return True

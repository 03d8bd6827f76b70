"""Fleet record store.

Bundles the per-entity repositories and the session manager over one
injected storage backend. This is the object the presentation layer
holds on to.
"""

from __future__ import annotations

import logging
import uuid

from fleetfines._constants import (
    CODES_COLLECTION,
    DRIVERS_COLLECTION,
    FINE_MANUAL_REQUIRED,
    FINES_COLLECTION,
    SESSION_COLLECTION,
    USERS_COLLECTION,
    VEHICLES_COLLECTION,
)
from fleetfines.config import FleetConfig
from fleetfines.derivation import TDraft, is_consistent, on_toggle_changed, set_code
from fleetfines.exceptions import FleetValidationError
from fleetfines.ingestion.normalize import is_meaningful
from fleetfines.models.driver import Driver
from fleetfines.models.fine import Fine, FineDraft
from fleetfines.models.infraction import InfractionCode
from fleetfines.models.user import User
from fleetfines.models.vehicle import Vehicle
from fleetfines.session import SessionManager
from fleetfines.state.repository import Repository
from fleetfines.storage.backend import InMemoryBackend, JsonFileBackend, StorageBackend

_logger = logging.getLogger(__name__)


def new_record_id() -> str:
    """Fresh opaque identifier for a record."""
    return str(uuid.uuid4())


class FleetStore:
    """The five fleet collections plus the current session.

    Usage::

        store = FleetStore.open(FleetConfig.from_env())
        store.drivers.create(Driver(id=new_record_id(), name="Ana", cpf="11122233344"))
    """

    def __init__(self, backend: StorageBackend, config: FleetConfig | None = None) -> None:
        self._config = config or FleetConfig()
        self._backend = backend
        key = self._config.storage_key
        strict = self._config.enforce_unique_on_update

        self.drivers: Repository[Driver] = Repository(
            backend, key(DRIVERS_COLLECTION), Driver, unique_field="cpf", enforce_unique_on_update=strict
        )
        self.vehicles: Repository[Vehicle] = Repository(
            backend, key(VEHICLES_COLLECTION), Vehicle, unique_field="plate", enforce_unique_on_update=strict
        )
        self.codes: Repository[InfractionCode] = Repository(
            backend,
            key(CODES_COLLECTION),
            InfractionCode,
            unique_field="code",
            id_field="code",
            enforce_unique_on_update=strict,
        )
        self.fines: Repository[Fine] = Repository(
            backend, key(FINES_COLLECTION), Fine, unique_field="auto_infraction", enforce_unique_on_update=strict
        )
        self.users: Repository[User] = Repository(
            backend,
            key(USERS_COLLECTION),
            User,
            unique_field="username",
            id_field="username",
            enforce_unique_on_update=strict,
        )
        self.session = SessionManager(backend, key(SESSION_COLLECTION), self.users)

    @classmethod
    def open(cls, config: FleetConfig | None = None) -> FleetStore:
        """Build a store whose backend follows *config*.

        JSON files under ``config.storage_dir`` when set, memory otherwise.
        """
        config = config or FleetConfig()
        backend: StorageBackend
        if config.storage_dir is not None:
            backend = JsonFileBackend(config.storage_dir)
        else:
            backend = InMemoryBackend()
        _logger.debug("Opened fleet store backend=%s prefix=%s", type(backend).__name__, config.key_prefix)
        return cls(backend, config)

    @property
    def config(self) -> FleetConfig:
        return self._config

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    def find_code(self, code: str) -> InfractionCode | None:
        """Exact-match lookup in the Detran base."""
        return self.codes.find_by_unique_field(code)

    def save_fine(self, draft: FineDraft) -> bool:
        """Persist a manually entered fine under a fresh id.

        Raises :class:`FleetValidationError` when the citation number,
        plate or code is missing. Returns ``False`` when the citation
        number is already registered.
        """
        missing = tuple(name for name in FINE_MANUAL_REQUIRED if not is_meaningful(getattr(draft, name)))
        if missing:
            raise FleetValidationError(f"missing required fine fields: {', '.join(missing)}", missing=missing)
        if not is_consistent(draft, self.find_code):
            _logger.debug("Saving fine %s with value/points differing from code %s", draft.auto_infraction, draft.code)
        return self.fines.create(draft.to_fine(new_record_id()))

    # ------------------------------------------------------------------
    # Derivation entry points bound to this store's Detran base
    # ------------------------------------------------------------------

    def change_fine_code(self, draft: TDraft, code: str) -> TDraft:
        """Set a draft's infraction code and re-derive its amounts."""
        return set_code(draft, code, self.find_code, min_length=self._config.code_lookup_min_length)

    def toggle_pay_double(self, draft: TDraft, checked: bool) -> TDraft:
        """Flip a draft's "pay double" flag and re-derive its amounts."""
        return on_toggle_changed(draft, checked, self.find_code)

"""Internal constants shared across the library."""

DEFAULT_KEY_PREFIX = "fg_"

# Keys double as file names for the JSON backend.
SAFE_KEY_PATTERN = r"^[A-Za-z0-9_.-]+$"

# ------------------------------------------------------------------
# Collection names (prefixed with the storage namespace at runtime)
# ------------------------------------------------------------------

DRIVERS_COLLECTION = "drivers"
VEHICLES_COLLECTION = "vehicles"
FINES_COLLECTION = "fines"
CODES_COLLECTION = "detran"
USERS_COLLECTION = "users"
SESSION_COLLECTION = "session"

# Codes shorter than this are still being typed; no lookup is attempted.
CODE_LOOKUP_MIN_LENGTH = 3

# ------------------------------------------------------------------
# Required fields
# ------------------------------------------------------------------

DRIVER_IMPORT_REQUIRED: tuple[str, ...] = ("name", "cpf")
VEHICLE_IMPORT_REQUIRED: tuple[str, ...] = ("plate", "renavam")
FINE_IMPORT_REQUIRED: tuple[str, ...] = ("auto_infraction",)
CODE_IMPORT_REQUIRED: tuple[str, ...] = ("code",)

FINE_MANUAL_REQUIRED: tuple[str, ...] = ("auto_infraction", "plate", "code")

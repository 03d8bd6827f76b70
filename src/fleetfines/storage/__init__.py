"""Persistence backends.

Only this package performs storage I/O. Everything above it talks to the
:class:`StorageBackend` protocol, so tests can swap in
:class:`InMemoryBackend`.
"""

from fleetfines.storage.backend import InMemoryBackend, JsonFileBackend, StorageBackend

__all__ = ["InMemoryBackend", "JsonFileBackend", "StorageBackend"]

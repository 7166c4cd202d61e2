"""Backend collaborator interfaces and the in-process reference backend."""

from asynctable.backend.errors import (
    BackendError,
    BackendUnavailableError,
    NoSuchColumnFamily,
    TableExists,
    TableNotFound,
)
from asynctable.backend.memory import InMemoryBackend
from asynctable.backend.protocols import AdminClient, Cell, DataPlaneClient

__all__ = [
    "AdminClient",
    "BackendError",
    "BackendUnavailableError",
    "Cell",
    "DataPlaneClient",
    "InMemoryBackend",
    "NoSuchColumnFamily",
    "TableExists",
    "TableNotFound",
]

"""Record stores the migration reads from and writes to."""

from .base import BaseStore
from .rest_store import RestStore

__all__ = [
    "BaseStore",
    "RestStore",
]

"""Exceptions raised by the migration toolkit."""

from typing import Optional


class MigrationError(Exception):
    """Base class for migration toolkit errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(MigrationError):
    """Required connection settings are missing or invalid."""


class ModelNotFoundError(MigrationError):
    """An equipment model is missing from one of the stores."""

    def __init__(self, model_name: str, side: str):
        self.model_name = model_name
        self.side = side
        super().__init__(f"Model not found in {side}: {model_name}")


class StoreError(MigrationError):
    """A request against a remote store failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        table: Optional[str] = None,
    ):
        self.status_code = status_code
        self.table = table
        super().__init__(message)

"""Migration configuration models."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..exceptions import ConfigurationError

PROGRESS_FILENAME = "migration-progress.json"
REPORT_PREFIX = "migration-report"

# Equipment models whose maintenance plans are copied by default
DEFAULT_MODELS = [
    "T800 Water Truck",
    "INT-7600-ISM-320",
    "INT-WORKSTAR 7600-310",
    "KENWORTH-T460",
    "C7H 360HP 6X4 (AUTOMATICO)",
    "SIT-C7H-LONG CHASIS",
    "C7H 360HP 6X4 (MANUAL)",
    "CARGADOR FRONTAL 524 P",
    "CARGADOR FRONTAL 524K",
    "CARGADOR FRONTAL 524K II",
    "INT- 7600SBA 6X4",
    "INTERNATIONAL-TRACTOCAMION-LONG CHASIS",
    "BOM-PUTZMEISTER",
]


@dataclass
class StoreConfig:
    """Connection settings for one backend instance."""
    name: str  # "source" or "destination"
    url: str = ""
    service_role_key: Optional[str] = None
    timeout: float = 30.0
    rate_limit: Optional[float] = None  # Requests per second

    @property
    def rest_url(self) -> str:
        """Base URL of the PostgREST endpoint."""
        return f"{self.url.rstrip('/')}/rest/v1"

    def validate(self) -> List[str]:
        """Return a list of configuration problems."""
        errors = []
        if not self.url:
            errors.append(f"Missing {self.name} store URL")
        if not self.service_role_key:
            errors.append(f"Missing {self.name} service role key")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation (without credentials)."""
        return {
            "name": self.name,
            "url": self.url,
            "timeout": self.timeout,
            "rate_limit": self.rate_limit,
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        base: Optional["StoreConfig"] = None
    ) -> "StoreConfig":
        """Create from dictionary representation, falling back to ``base``."""
        base = base or cls(name=data.get("name", ""))
        return cls(
            name=data.get("name", base.name),
            url=data.get("url", base.url),
            service_role_key=data.get("service_role_key", base.service_role_key),
            timeout=data.get("timeout", base.timeout),
            rate_limit=data.get("rate_limit", base.rate_limit),
        )


@dataclass
class MigrationConfig:
    """Configuration for a maintenance plan migration."""
    source: StoreConfig = field(default_factory=lambda: StoreConfig(name="source"))
    destination: StoreConfig = field(default_factory=lambda: StoreConfig(name="destination"))

    models: List[str] = field(default_factory=lambda: list(DEFAULT_MODELS))

    # Execution options
    dry_run: bool = False
    batch_size: int = 100  # Rows per insert request
    id_chunk_size: int = 100  # IDs per filtered multi-get
    retry_attempts: int = 3
    retry_delay: float = 1.0  # Seconds before the first retry

    # Output
    output_dir: str = "./data"

    @property
    def progress_path(self) -> Path:
        """Location of the durable checkpoint."""
        return Path(self.output_dir) / PROGRESS_FILENAME

    def validate(self) -> List[str]:
        """Return a list of configuration problems."""
        errors = self.source.validate() + self.destination.validate()
        if self.batch_size < 1:
            errors.append("batch_size must be at least 1")
        if self.id_chunk_size < 1:
            errors.append("id_chunk_size must be at least 1")
        if self.retry_attempts < 1:
            errors.append("retry_attempts must be at least 1")
        return errors

    def require_valid(self) -> None:
        """Raise ConfigurationError if the configuration cannot be used."""
        errors = self.validate()
        if errors:
            raise ConfigurationError("; ".join(errors))

    def select_models(self, names: Optional[List[str]] = None) -> List[str]:
        """
        Restrict the configured models to ``names``.

        Matching is exact and keeps the configured order; names that are not
        configured are dropped.
        """
        if not names:
            return list(self.models)
        wanted = set(names)
        return [m for m in self.models if m in wanted]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "source": self.source.to_dict(),
            "destination": self.destination.to_dict(),
            "models": self.models,
            "dry_run": self.dry_run,
            "batch_size": self.batch_size,
            "id_chunk_size": self.id_chunk_size,
            "retry_attempts": self.retry_attempts,
            "retry_delay": self.retry_delay,
            "output_dir": self.output_dir,
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        base: Optional["MigrationConfig"] = None
    ) -> "MigrationConfig":
        """Create from dictionary representation, falling back to ``base``."""
        base = base or cls()
        return cls(
            source=StoreConfig.from_dict(
                {"name": "source", **data.get("source", {})}, base.source
            ),
            destination=StoreConfig.from_dict(
                {"name": "destination", **data.get("destination", {})}, base.destination
            ),
            models=list(data.get("models", base.models)),
            dry_run=data.get("dry_run", base.dry_run),
            batch_size=data.get("batch_size", base.batch_size),
            id_chunk_size=data.get("id_chunk_size", base.id_chunk_size),
            retry_attempts=data.get("retry_attempts", base.retry_attempts),
            retry_delay=data.get("retry_delay", base.retry_delay),
            output_dir=data.get("output_dir", base.output_dir),
        )

    @classmethod
    def from_json_file(
        cls,
        filepath: str,
        base: Optional["MigrationConfig"] = None
    ) -> "MigrationConfig":
        """Load configuration from a JSON file."""
        try:
            with open(filepath) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot read config file {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {filepath} must contain a JSON object")
        return cls.from_dict(data, base)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MigrationConfig":
        """Build configuration from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            source=StoreConfig(
                name="source",
                url=env.get("SOURCE_SUPABASE_URL", ""),
                service_role_key=env.get("SOURCE_SUPABASE_SERVICE_ROLE_KEY"),
            ),
            destination=StoreConfig(
                name="destination",
                url=env.get("SUPABASE_URL") or env.get("NEXT_PUBLIC_SUPABASE_URL", ""),
                service_role_key=env.get("SUPABASE_SERVICE_ROLE_KEY"),
            ),
            output_dir=env.get("MIGRATION_OUTPUT_DIR", "./data"),
        )

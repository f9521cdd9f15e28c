"""Durable checkpoint for resumable migrations."""

import json
import os
import logging
from pathlib import Path
from typing import Optional, Union

from ..exceptions import ConfigurationError
from ..models.progress import MigrationProgress, utcnow

logger = logging.getLogger(__name__)


class ProgressTracker:
    """
    Loads and saves the migration checkpoint file.

    Saves go to a temporary file that then replaces the checkpoint, so a
    process killed mid-save leaves the previous checkpoint intact.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[MigrationProgress]:
        """Read the checkpoint, or return None when there is none."""
        if not self.path.exists():
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            progress = MigrationProgress.from_dict(data)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ConfigurationError(f"Corrupt checkpoint {self.path}: {e}") from e

        logger.debug(
            f"Loaded checkpoint from {self.path} "
            f"({len(progress.completed_models)} completed models)"
        )
        return progress

    def save(self, progress: MigrationProgress) -> None:
        """Atomically overwrite the checkpoint with ``progress``."""
        progress.last_updated_at = utcnow()

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(progress.to_dict(), f, ensure_ascii=False, indent=2)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

        logger.debug(f"Saved checkpoint to {self.path}")

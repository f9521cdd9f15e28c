"""Copies task parts onto resolved destination tasks."""

import logging
from typing import Any, Dict, List, Set

from ..models.progress import ModelStats
from ..models.record import PartKey, TaskPart
from .repository import MaintenancePlanRepository, chunked

logger = logging.getLogger(__name__)


class PartsMigrator:
    """
    Migrates the parts of every mapped source task.

    Each part is rewritten to point at its destination task. Outside
    dry-run, parts already present at the destination (same task and
    name) are skipped; the check is one request per part.
    """

    def __init__(
        self,
        source: MaintenancePlanRepository,
        destination: MaintenancePlanRepository,
        batch_size: int = 100,
        dry_run: bool = False
    ):
        self.source = source
        self.destination = destination
        self.batch_size = batch_size
        self.dry_run = dry_run

    def migrate(self, task_map: Dict[str, str], stats: ModelStats) -> None:
        """
        Migrate parts for the tasks in ``task_map``.

        Args:
            task_map: Source task ID -> destination task ID
            stats: Counters for the model, updated in place
        """
        if not task_map:
            return

        logger.debug(f"Migrating task_parts for {len(task_map)} tasks")
        parts = self.source.list_parts(list(task_map.keys()))
        stats.parts_found += len(parts)

        if not parts:
            return
        logger.debug(f"Found {len(parts)} task_parts to migrate")

        staged = self._stage(parts, task_map, stats)
        if not staged:
            return

        if self.dry_run:
            logger.info(f"[DRY RUN] Would insert {len(staged)} task_parts")
            stats.parts_migrated += len(staged)
            return

        self._insert(staged, stats)

    def _stage(
        self,
        parts: List[TaskPart],
        task_map: Dict[str, str],
        stats: ModelStats
    ) -> List[Dict[str, Any]]:
        staged = []
        seen: Set[PartKey] = set()

        for part in parts:
            dest_task_id = task_map.get(part.task_id)
            if not dest_task_id:
                stats.parts_skipped += 1
                continue

            key = (dest_task_id, part.name)
            if key in seen:
                stats.parts_skipped += 1
                continue

            if not self.dry_run:
                try:
                    existing_id = self.destination.find_part(dest_task_id, part.name)
                except Exception as e:
                    stats.add_error(f"Error checking duplicate for part {part.id}: {e}")
                    logger.error(stats.skipped_reasons[-1])
                    continue

                if existing_id:
                    stats.parts_skipped += 1
                    continue

            seen.add(key)
            staged.append(part.to_insert(dest_task_id))

        return staged

    def _insert(self, staged: List[Dict[str, Any]], stats: ModelStats) -> None:
        for number, batch in enumerate(chunked(staged, self.batch_size), 1):
            try:
                self.destination.insert_parts(batch)
            except Exception as e:
                stats.add_error(f"Failed to insert task_parts batch {number} ({len(batch)} parts): {e}")
                logger.error(stats.skipped_reasons[-1])
                continue

            stats.parts_migrated += len(batch)
            logger.debug(f"Inserted batch {number} ({len(batch)} parts)")

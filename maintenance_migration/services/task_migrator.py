"""Copies maintenance tasks for matched intervals."""

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Dict, List

from ..models.progress import ModelStats
from ..models.record import MaintenanceTask, TaskKey
from .repository import MaintenancePlanRepository, chunked

logger = logging.getLogger(__name__)


@dataclass
class StagedTask:
    """A source task waiting to be inserted under a destination interval."""
    source: MaintenanceTask
    interval_id: str

    @property
    def key(self) -> TaskKey:
        return self.source.key(self.interval_id)

    @property
    def payload(self) -> Dict:
        return self.source.to_insert(self.interval_id)


class TaskMigrator:
    """
    Migrates the tasks of one model's matched intervals.

    Produces the source task ID -> destination task ID mapping used by
    the parts migration. Tasks that already exist at the destination are
    mapped to the existing row instead of being inserted again.
    """

    def __init__(
        self,
        source: MaintenancePlanRepository,
        destination: MaintenancePlanRepository,
        batch_size: int = 100,
        dry_run: bool = False
    ):
        """
        Initialize the task migrator.

        Args:
            source: Repository of the store being copied from
            destination: Repository of the store being copied to
            batch_size: Number of tasks per insert request
            dry_run: If True, count staged tasks without writing them
        """
        self.source = source
        self.destination = destination
        self.batch_size = batch_size
        self.dry_run = dry_run

    def migrate(self, interval_map: Dict[str, str], stats: ModelStats) -> Dict[str, str]:
        """
        Migrate tasks for the intervals in ``interval_map``.

        Args:
            interval_map: Source interval ID -> destination interval ID
            stats: Counters for the model, updated in place

        Returns:
            Source task ID -> destination task ID
        """
        tasks = self.source.list_tasks(list(interval_map.keys()))
        stats.tasks_found = len(tasks)
        logger.debug(f"Found {len(tasks)} tasks to migrate")

        task_map: Dict[str, str] = {}
        if not tasks:
            return task_map

        staged = self._stage(tasks, interval_map, stats, task_map)
        logger.debug(f"Prepared {len(staged)} tasks for insertion ({stats.tasks_skipped} skipped)")

        if self.dry_run:
            logger.info(f"[DRY RUN] Would insert {len(staged)} tasks")
            stats.tasks_migrated += len(staged)
        else:
            self._insert(staged, stats, task_map)

        return task_map

    def map_existing(self, interval_map: Dict[str, str], stats: ModelStats) -> Dict[str, str]:
        """
        Resolve source tasks to tasks already present at the destination.

        Nothing is inserted; tasks without a destination counterpart are
        left out of the mapping.
        """
        tasks = self.source.list_tasks(list(interval_map.keys()))
        stats.tasks_found = len(tasks)

        task_map: Dict[str, str] = {}
        for task in tasks:
            dest_interval_id = interval_map.get(task.interval_id)
            if not dest_interval_id:
                continue

            try:
                existing_id = self.destination.find_task(dest_interval_id, task.description, task.type)
            except Exception as e:
                stats.add_error(f"Error finding destination task for {task.id}: {e}")
                logger.error(stats.skipped_reasons[-1])
                continue

            if existing_id:
                task_map[task.id] = existing_id

        logger.debug(f"Mapped {len(task_map)} tasks")
        return task_map

    def _stage(
        self,
        tasks: List[MaintenanceTask],
        interval_map: Dict[str, str],
        stats: ModelStats,
        task_map: Dict[str, str]
    ) -> List[StagedTask]:
        """Skip unmatched and duplicate tasks, stage the rest."""
        staged = []

        for task in tasks:
            dest_interval_id = interval_map.get(task.interval_id)
            if not dest_interval_id:
                stats.tasks_skipped += 1
                stats.skipped_reasons.append(f"Task skipped: interval {task.interval_id} not matched")
                continue

            try:
                existing_id = self.destination.find_task(dest_interval_id, task.description, task.type)
            except Exception as e:
                stats.add_error(f"Error checking duplicate for task {task.id}: {e}")
                logger.error(stats.skipped_reasons[-1])
                continue

            if existing_id:
                # Parts can still be attached to the existing task
                task_map[task.id] = existing_id
                stats.tasks_skipped += 1
                stats.skipped_reasons.append(f"Duplicate task: {task.description} ({task.type})")
                continue

            staged.append(StagedTask(source=task, interval_id=dest_interval_id))

        return staged

    def _insert(
        self,
        staged: List[StagedTask],
        stats: ModelStats,
        task_map: Dict[str, str]
    ) -> None:
        """Insert staged tasks batch by batch; a failed batch does not stop the rest."""
        for number, batch in enumerate(chunked(staged, self.batch_size), 1):
            try:
                inserted = self.destination.insert_tasks([t.payload for t in batch])
            except Exception as e:
                stats.add_error(f"Failed to insert task batch {number} ({len(batch)} tasks): {e}")
                logger.error(stats.skipped_reasons[-1])
                continue

            mapped = self._reconcile(batch, inserted, task_map)
            stats.tasks_migrated += len(batch)
            logger.debug(f"Inserted batch {number} ({len(batch)} tasks, {mapped} mapped)")

    def _reconcile(
        self,
        batch: List[StagedTask],
        inserted: List[MaintenanceTask],
        task_map: Dict[str, str]
    ) -> int:
        """
        Match inserted rows back to staged tasks by composite key.

        Response order is not trusted. A staged task is mapped only when its
        key identifies exactly one staged task and one inserted row.
        """
        inserted_by_key: Dict[TaskKey, List[str]] = defaultdict(list)
        for row in inserted:
            inserted_by_key[row.key()].append(row.id)

        staged_keys = Counter(t.key for t in batch)

        mapped = 0
        for task in batch:
            ids = inserted_by_key.get(task.key, [])
            if len(ids) == 1 and staged_keys[task.key] == 1:
                task_map[task.source.id] = ids[0]
                mapped += 1
            else:
                logger.warning(
                    f"No unique inserted row for task {task.source.id} "
                    f"({task.source.description}); its parts will not be migrated"
                )
        return mapped

"""Migration orchestrator - coordinates the per-model migration pipeline."""

import time
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .exceptions import MigrationError, ModelNotFoundError
from .models.migration import MigrationConfig
from .models.progress import MigrationProgress, ModelStats
from .services.interval_matcher import IntervalMatch, IntervalMatcher
from .services.model_resolver import ModelResolver, ResolvedModel
from .services.parts_migrator import PartsMigrator
from .services.progress_tracker import ProgressTracker
from .services.reporter import write_report
from .services.repository import MaintenancePlanRepository
from .services.task_migrator import TaskMigrator
from .stores.base import BaseStore
from .stores.rest_store import RestStore

logger = logging.getLogger(__name__)


class MigrationOrchestrator:
    """
    Orchestrates the maintenance plan migration.

    For each equipment model, in configured order:
    - Resolve the model in destination and source
    - Match intervals by interval value
    - Migrate tasks, collecting the task ID mapping
    - Migrate parts onto the mapped tasks
    - Save the checkpoint

    Models are processed one at a time; nothing runs concurrently.
    """

    def __init__(
        self,
        config: MigrationConfig,
        source_store: Optional[BaseStore] = None,
        destination_store: Optional[BaseStore] = None,
        tracker: Optional[ProgressTracker] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Migration configuration
            source_store: Store to copy from (defaults to a RestStore)
            destination_store: Store to copy to (defaults to a RestStore)
            tracker: Checkpoint tracker (defaults to config.progress_path)
            sleep: Sleep function used between retries
        """
        self.config = config
        self.source_store = source_store or RestStore(config.source)
        self.destination_store = destination_store or RestStore(config.destination)
        self.tracker = tracker or ProgressTracker(config.progress_path)

        self.source = self._create_repository(self.source_store, sleep)
        self.destination = self._create_repository(self.destination_store, sleep)

        self.resolver = ModelResolver(self.source, self.destination)
        self.matcher = IntervalMatcher(self.source, self.destination)
        self.task_migrator = TaskMigrator(
            self.source, self.destination,
            batch_size=config.batch_size,
            dry_run=config.dry_run,
        )
        self.parts_migrator = PartsMigrator(
            self.source, self.destination,
            batch_size=config.batch_size,
            dry_run=config.dry_run,
        )

        # Runtime state
        self.progress: Optional[MigrationProgress] = None
        self.report_path: Optional[Path] = None

    def _create_repository(
        self,
        store: BaseStore,
        sleep: Callable[[float], None]
    ) -> MaintenancePlanRepository:
        return MaintenancePlanRepository(
            store,
            id_chunk_size=self.config.id_chunk_size,
            retry_attempts=self.config.retry_attempts,
            retry_delay=self.config.retry_delay,
            sleep=sleep,
        )

    def select_models(self, model_filter: Optional[Sequence[str]] = None) -> List[str]:
        """Configured models, restricted to ``model_filter`` when given."""
        if model_filter:
            unknown = [m for m in model_filter if m not in self.config.models]
            if unknown:
                logger.warning(f"Ignoring models that are not configured: {', '.join(unknown)}")
        return self.config.select_models(list(model_filter) if model_filter else None)

    def plan(
        self,
        model_filter: Optional[Sequence[str]] = None,
        resume: bool = False
    ) -> Tuple[List[str], MigrationProgress]:
        """
        Work out which models to process and the progress to extend.

        On resume, models already in the checkpoint's completed list are
        removed from the work list.
        """
        models = self.select_models(model_filter)

        progress = None
        if resume:
            progress = self.tracker.load()
            if progress:
                logger.info("Resuming from checkpoint...")
                models = [m for m in models if not progress.is_completed(m)]
            else:
                logger.info("No checkpoint found, starting a new run")

        if progress is None:
            progress = MigrationProgress.new(total_models=len(models))

        return models, progress

    def run_migration(
        self,
        model_filter: Optional[Sequence[str]] = None,
        resume: bool = False,
        generate_report: bool = True
    ) -> MigrationProgress:
        """
        Run the migration for every selected model.

        Returns:
            Final progress, also persisted to the checkpoint
        """
        logger.info("Starting maintenance tasks migration...")
        logger.info(
            f"Mode: {'DRY RUN (no data will be written)' if self.config.dry_run else 'LIVE MIGRATION'}"
        )

        models, progress = self.plan(model_filter, resume)
        self.progress = progress

        for model_name in models:
            progress.start_model(model_name)

            try:
                stats = self.migrate_model(model_name)
                progress.record_model(model_name, stats)

            except Exception as e:
                message = f"Fatal error processing {model_name}: {e}"
                logger.exception(message)
                progress.record_failure(model_name, message)

            finally:
                self.tracker.save(progress)

        if generate_report:
            self.report_path = write_report(progress, self.config.models, self.config.output_dir)

        logger.info("Migration completed!")
        return progress

    def migrate_model(self, model_name: str) -> ModelStats:
        """
        Migrate one model's intervals' tasks and parts.

        Missing models and store failures are recorded in the returned
        stats; other exceptions propagate to the caller.
        """
        stats = ModelStats()
        logger.info(f"Processing model: {model_name}")

        try:
            _, match = self._resolve_and_match(model_name, stats)

            task_map = self.task_migrator.migrate(match.mapping, stats)
            if stats.tasks_found == 0:
                logger.info(f"No tasks found for model: {model_name}")
                return stats

            self.parts_migrator.migrate(task_map, stats)

        except ModelNotFoundError as e:
            logger.warning(e.message)
            stats.add_error(e.message)
            return stats

        except MigrationError as e:
            stats.add_error(f"Error processing model {model_name}: {e}")
            logger.error(stats.skipped_reasons[-1])
            return stats

        log = logger.warning if stats.errors > 0 else logger.info
        log(
            f"Completed {model_name}: {stats.tasks_migrated} tasks migrated, "
            f"{stats.tasks_skipped} skipped, {stats.parts_migrated} parts migrated, "
            f"{stats.errors} errors"
        )
        return stats

    def run_parts_migration(
        self,
        model_filter: Optional[Sequence[str]] = None
    ) -> Dict[str, ModelStats]:
        """
        Migrate parts only, for models whose tasks were migrated earlier.

        Source tasks are resolved to existing destination tasks by lookup;
        no tasks are inserted and the checkpoint is not touched.
        """
        logger.info("Starting task_parts migration...")
        results = {}
        for model_name in self.select_models(model_filter):
            results[model_name] = self.migrate_model_parts(model_name)
        logger.info("Task parts migration completed!")
        return results

    def migrate_model_parts(self, model_name: str) -> ModelStats:
        """Parts-only migration of one model."""
        stats = ModelStats()
        logger.info(f"Processing task_parts for model: {model_name}")

        try:
            _, match = self._resolve_and_match(model_name, stats)
            task_map = self.task_migrator.map_existing(match.mapping, stats)
            self.parts_migrator.migrate(task_map, stats)

        except ModelNotFoundError as e:
            logger.warning(e.message)
            stats.add_error(e.message)
            return stats

        except MigrationError as e:
            stats.add_error(f"Error processing model {model_name}: {e}")
            logger.error(stats.skipped_reasons[-1])
            return stats

        logger.info(
            f"Completed {model_name}: {stats.parts_migrated} migrated, "
            f"{stats.parts_skipped} skipped, {stats.errors} errors"
        )
        return stats

    def _resolve_and_match(
        self,
        model_name: str,
        stats: ModelStats
    ) -> Tuple[ResolvedModel, IntervalMatch]:
        resolved = self.resolver.resolve(model_name)
        match = self.matcher.match(resolved.source.id, resolved.destination.id)

        # Matching gaps reduce the task set but do not stop the model
        for warning in match.warnings(model_name):
            logger.warning(warning)
            stats.skipped_reasons.append(warning)

        return resolved, match

"""Migration progress, report and run endpoints."""

import logging
import threading
from typing import Callable

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from ...exceptions import ConfigurationError
from ...models.migration import MigrationConfig
from ...orchestrator import MigrationOrchestrator
from ...services.progress_tracker import ProgressTracker
from ...services.reporter import build_report_rows, summary_lines
from ..models import (
    ProgressResponse,
    ReportResponse,
    ReportRowResponse,
    RunRequest,
    RunResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

OrchestratorFactory = Callable[[MigrationConfig], MigrationOrchestrator]


class RunState:
    """Tracks whether a run started through the API is still going."""

    def __init__(self):
        self._lock = threading.Lock()
        self.running = False

    def try_start(self) -> bool:
        with self._lock:
            if self.running:
                return False
            self.running = True
            return True

    def finish(self) -> None:
        with self._lock:
            self.running = False


run_state = RunState()


def get_config() -> MigrationConfig:
    return MigrationConfig.from_env()


def get_orchestrator_factory() -> OrchestratorFactory:
    return MigrationOrchestrator


def load_progress(config: MigrationConfig):
    try:
        progress = ProgressTracker(config.progress_path).load()
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=e.message)
    if progress is None:
        raise HTTPException(status_code=404, detail="No checkpoint found")
    return progress


@router.get("/progress", response_model=ProgressResponse)
async def get_progress(config: MigrationConfig = Depends(get_config)):
    """Current checkpoint contents."""
    progress = load_progress(config)
    return ProgressResponse(**progress.to_dict(), running=run_state.running)


@router.get("/report", response_model=ReportResponse)
async def get_report(config: MigrationConfig = Depends(get_config)):
    """Per-model report rows and run totals from the checkpoint."""
    progress = load_progress(config)
    rows = [
        ReportRowResponse(**vars(row))
        for row in build_report_rows(progress, config.models)
    ]
    return ReportResponse(rows=rows, summary=dict(summary_lines(progress)))


@router.post("/run", response_model=RunResponse, status_code=202)
async def start_run(
    data: RunRequest,
    background_tasks: BackgroundTasks,
    config: MigrationConfig = Depends(get_config),
    factory: OrchestratorFactory = Depends(get_orchestrator_factory),
):
    """Start a migration run in the background."""
    config.dry_run = config.dry_run or data.dry_run

    try:
        config.require_valid()
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    orchestrator = factory(config)
    models = orchestrator.select_models(data.models)

    if not run_state.try_start():
        raise HTTPException(status_code=409, detail="A migration run is already in progress")

    # Start migration in background
    background_tasks.add_task(run_migration_task, orchestrator, data)

    return RunResponse(status="started", models=models, dry_run=config.dry_run)


def run_migration_task(orchestrator: MigrationOrchestrator, data: RunRequest):
    """Background task body; always releases the run slot."""
    try:
        orchestrator.run_migration(model_filter=data.models, resume=data.resume)
    except Exception:
        logger.exception("Migration run failed")
    finally:
        run_state.finish()

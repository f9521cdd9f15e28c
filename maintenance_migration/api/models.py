"""Pydantic models for API requests and responses."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..models.progress import ModelStatus


# Request Models
class RunRequest(BaseModel):
    models: Optional[List[str]] = None
    resume: bool = False
    dry_run: bool = False


# Response Models
class ModelStatsResponse(BaseModel):
    tasks_found: int = 0
    tasks_migrated: int = 0
    tasks_skipped: int = 0
    parts_found: int = 0
    parts_migrated: int = 0
    parts_skipped: int = 0
    errors: int = 0
    skipped_reasons: List[str] = Field(default_factory=list)


class RunTotalsResponse(BaseModel):
    total_models: int = 0
    total_tasks_found: int = 0
    total_tasks_migrated: int = 0
    total_tasks_skipped: int = 0
    total_parts_found: int = 0
    total_parts_migrated: int = 0
    total_parts_skipped: int = 0
    total_errors: int = 0


class ErrorEntryResponse(BaseModel):
    model: str
    error: str
    timestamp: datetime


class ProgressResponse(BaseModel):
    completed_models: List[str] = Field(default_factory=list)
    current_model: Optional[str] = None
    stats: RunTotalsResponse
    model_stats: Dict[str, ModelStatsResponse] = Field(default_factory=dict)
    errors: List[ErrorEntryResponse] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    last_updated_at: Optional[datetime] = None
    running: bool = False


class ReportRowResponse(BaseModel):
    model: str
    tasks_found: int
    tasks_migrated: int
    tasks_skipped: int
    parts_migrated: int
    errors: int
    status: ModelStatus


class ReportResponse(BaseModel):
    rows: List[ReportRowResponse]
    summary: Dict[str, int]


class RunResponse(BaseModel):
    status: str
    models: List[str]
    dry_run: bool

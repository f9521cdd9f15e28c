"""Tabular reporting of migration progress."""

import csv
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from ..models.migration import REPORT_PREFIX
from ..models.progress import MigrationProgress, ModelStats, ModelStatus, utcnow

logger = logging.getLogger(__name__)

REPORT_HEADER = [
    "Model",
    "Tasks Found",
    "Tasks Migrated",
    "Tasks Skipped",
    "Parts Migrated",
    "Errors",
    "Status",
]


@dataclass
class ReportRow:
    """One model's line in the report."""
    model: str
    tasks_found: int
    tasks_migrated: int
    tasks_skipped: int
    parts_migrated: int
    errors: int
    status: ModelStatus

    def as_list(self) -> List:
        return [
            self.model,
            self.tasks_found,
            self.tasks_migrated,
            self.tasks_skipped,
            self.parts_migrated,
            self.errors,
            self.status.value,
        ]


def build_report_rows(progress: MigrationProgress, model_names: Sequence[str]) -> List[ReportRow]:
    """One row per configured model, including models never processed."""
    rows = []
    for name in model_names:
        stats = progress.model_stats.get(name) or ModelStats()
        rows.append(ReportRow(
            model=name,
            tasks_found=stats.tasks_found,
            tasks_migrated=stats.tasks_migrated,
            tasks_skipped=stats.tasks_skipped,
            parts_migrated=stats.parts_migrated,
            errors=stats.errors,
            status=progress.status_for(name),
        ))
    return rows


def summary_lines(progress: MigrationProgress) -> List[Tuple[str, int]]:
    """Run totals as (label, value) pairs."""
    totals = progress.stats
    return [
        ("Total Models", totals.total_models),
        ("Total Tasks Found", totals.total_tasks_found),
        ("Total Tasks Migrated", totals.total_tasks_migrated),
        ("Total Tasks Skipped", totals.total_tasks_skipped),
        ("Total Parts Found", totals.total_parts_found),
        ("Total Parts Migrated", totals.total_parts_migrated),
        ("Total Parts Skipped", totals.total_parts_skipped),
        ("Total Errors", totals.total_errors),
    ]


def format_summary(progress: MigrationProgress, title: str = "MIGRATION SUMMARY") -> str:
    """Console banner with the run totals."""
    lines = ["=" * 60, title, "=" * 60]
    lines.extend(f"{label}: {value}" for label, value in summary_lines(progress))
    lines.append("=" * 60)
    return "\n".join(lines)


def report_filename(timestamp: Optional[datetime] = None) -> str:
    stamp = (timestamp or utcnow()).strftime("%Y%m%d_%H%M%S")
    return f"{REPORT_PREFIX}-{stamp}.csv"


def write_report(
    progress: MigrationProgress,
    model_names: Sequence[str],
    output_dir: Union[str, Path],
    timestamp: Optional[datetime] = None
) -> Path:
    """
    Write the CSV report: one row per model, then a summary block.

    Returns:
        Path of the written report
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    filepath = output_dir / report_filename(timestamp)

    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(REPORT_HEADER)
        for row in build_report_rows(progress, model_names):
            writer.writerow(row.as_list())

        writer.writerow([])
        writer.writerow(["Summary"])
        for label, value in summary_lines(progress):
            writer.writerow([label, value])

    logger.info(f"Report generated: {filepath}")
    return filepath

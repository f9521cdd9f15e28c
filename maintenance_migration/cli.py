"""Command line interface for the maintenance plan migration."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .models.migration import MigrationConfig
from .models.progress import RunTotals
from .orchestrator import MigrationOrchestrator
from .services.progress_tracker import ProgressTracker
from .services.reporter import format_summary, write_report
from .services.repository import MaintenancePlanRepository
from .services.verifier import MigrationVerifier, format_verification
from .stores.rest_store import RestStore

logger = logging.getLogger(__name__)


def parse_models(value: str) -> List[str]:
    """Split a comma separated --models value."""
    return [m.strip() for m in value.split(",") if m.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="maintenance-migrate",
        description="Migrate maintenance tasks and parts between two Supabase projects"
    )
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument("--env-file", default=".env.local", help="Environment file to load")
    parser.add_argument("--output-dir", help="Directory for the checkpoint and reports")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Run migration
    run_parser = subparsers.add_parser("run", help="Migrate tasks and parts")
    run_parser.add_argument("--dry-run", action="store_true", help="Simulate without writing data")
    run_parser.add_argument("--resume", action="store_true", help="Resume from the last checkpoint")
    run_parser.add_argument("--models", type=parse_models, help="Comma separated model names")
    run_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # Parts only
    parts_parser = subparsers.add_parser("parts", help="Migrate parts for already migrated tasks")
    parts_parser.add_argument("--dry-run", action="store_true", help="Simulate without writing data")
    parts_parser.add_argument("--models", type=parse_models, help="Comma separated model names")
    parts_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # Report from checkpoint
    report_parser = subparsers.add_parser("report", help="Report on the saved checkpoint")
    report_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # Verify destination
    verify_parser = subparsers.add_parser("verify", help="Check migrated data at the destination")
    verify_parser.add_argument("--models", type=parse_models, help="Comma separated model names")
    verify_parser.add_argument("--json", action="store_true", help="Print results as JSON")
    verify_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    return parser


def load_config(args) -> MigrationConfig:
    """Environment first, then the JSON config file, then CLI overrides."""
    env_file = Path(args.env_file)
    if load_dotenv(env_file):
        logger.debug(f"Loaded environment from {env_file}")

    config = MigrationConfig.from_env()
    if args.config:
        config = MigrationConfig.from_json_file(args.config, base=config)
    if args.output_dir:
        config.output_dir = args.output_dir
    if getattr(args, "dry_run", False):
        config.dry_run = True

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if getattr(args, "verbose", False) else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = load_config(args)

        if args.command == "run":
            run_migration(args, config)
        elif args.command == "parts":
            run_parts(args, config)
        elif args.command == "report":
            run_report(args, config)
        elif args.command == "verify":
            run_verify(args, config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    return 0


def run_migration(args, config: MigrationConfig):
    """Run the task and parts migration."""
    config.require_valid()

    orchestrator = MigrationOrchestrator(config)
    progress = orchestrator.run_migration(model_filter=args.models, resume=args.resume)

    print("\n" + format_summary(progress) + "\n")
    if orchestrator.report_path:
        print(f"Report: {orchestrator.report_path}")


def run_parts(args, config: MigrationConfig):
    """Run the parts-only migration."""
    config.require_valid()

    orchestrator = MigrationOrchestrator(config)
    results = orchestrator.run_parts_migration(model_filter=args.models)

    totals = RunTotals(total_models=len(results))
    for stats in results.values():
        totals.add(stats)

    print("\n" + "=" * 60)
    print("TASK_PARTS MIGRATION SUMMARY")
    print("=" * 60)
    print(f"Total Parts Found: {totals.total_parts_found}")
    print(f"Total Parts Migrated: {totals.total_parts_migrated}")
    print(f"Total Parts Skipped: {totals.total_parts_skipped}")
    print(f"Total Errors: {totals.total_errors}")
    print("=" * 60 + "\n")


def run_report(args, config: MigrationConfig):
    """Render the report from an existing checkpoint."""
    tracker = ProgressTracker(config.progress_path)
    progress = tracker.load()

    if progress is None:
        print(f"No checkpoint found at {config.progress_path}")
        return

    path = write_report(progress, config.models, config.output_dir)
    print("\n" + format_summary(progress) + "\n")
    print(f"Report: {path}")


def run_verify(args, config: MigrationConfig):
    """Print destination verification checks."""
    errors = config.destination.validate()
    if errors:
        raise ConfigurationError("; ".join(errors))

    destination = MaintenancePlanRepository(
        RestStore(config.destination),
        id_chunk_size=config.id_chunk_size,
        retry_attempts=config.retry_attempts,
        retry_delay=config.retry_delay,
    )
    verifier = MigrationVerifier(destination)
    results = verifier.verify(config.select_models(args.models))

    if args.json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        print(format_verification(results))


if __name__ == "__main__":
    sys.exit(main())

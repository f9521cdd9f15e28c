"""
Tests for the maintenance-migrate command line.
"""

import pytest

from maintenance_migration import cli
from maintenance_migration.models.progress import MigrationProgress, ModelStats
from maintenance_migration.services.progress_tracker import ProgressTracker

ENV_VARS = [
    "SOURCE_SUPABASE_URL",
    "SOURCE_SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_URL",
    "NEXT_PUBLIC_SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "MIGRATION_OUTPUT_DIR",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return ["--env-file", str(tmp_path / "missing.env"), "--output-dir", str(tmp_path)]


@pytest.fixture
def configured_env(monkeypatch, clean_env):
    monkeypatch.setenv("SOURCE_SUPABASE_URL", "https://source.example.co")
    monkeypatch.setenv("SOURCE_SUPABASE_SERVICE_ROLE_KEY", "src-key")
    monkeypatch.setenv("SUPABASE_URL", "https://dest.example.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "dst-key")
    return clean_env


class TestParseModels:
    def test_splits_and_strips(self):
        assert cli.parse_models("BOM-PUTZMEISTER, KENWORTH-T460 ,,") == ["BOM-PUTZMEISTER", "KENWORTH-T460"]

    def test_names_with_spaces_survive(self):
        assert cli.parse_models("C7H 360HP 6X4 (MANUAL)") == ["C7H 360HP 6X4 (MANUAL)"]


class TestRun:
    def test_missing_configuration_exits_non_zero(self, clean_env, capsys):
        assert cli.main(clean_env + ["run"]) == 1
        assert "Missing source store URL" in capsys.readouterr().err

    def test_run_prints_summary(
        self, configured_env, monkeypatch, make_orchestrator, destination_store, putzmeister, capsys
    ):
        monkeypatch.setattr(cli, "MigrationOrchestrator", lambda config: make_orchestrator(config))

        code = cli.main(configured_env + ["run", "--models=BOM-PUTZMEISTER"])

        out = capsys.readouterr().out
        assert code == 0
        assert "MIGRATION SUMMARY" in out
        assert "Total Tasks Migrated: 5" in out
        assert "Report: " in out
        assert destination_store.count("maintenance_tasks") == 5

    def test_dry_run_flag(
        self, configured_env, monkeypatch, make_orchestrator, destination_store, putzmeister
    ):
        monkeypatch.setattr(cli, "MigrationOrchestrator", lambda config: make_orchestrator(config))

        assert cli.main(configured_env + ["run", "--dry-run", "--models", "BOM-PUTZMEISTER"]) == 0
        assert destination_store.count("maintenance_tasks") == 0


class TestParts:
    def test_parts_summary(self, configured_env, monkeypatch, make_orchestrator, putzmeister, capsys):
        monkeypatch.setattr(cli, "MigrationOrchestrator", lambda config: make_orchestrator(config))

        assert cli.main(configured_env + ["parts", "--models=BOM-PUTZMEISTER"]) == 0
        assert "TASK_PARTS MIGRATION SUMMARY" in capsys.readouterr().out


class TestReport:
    def test_report_from_checkpoint(self, clean_env, tmp_path, capsys):
        progress = MigrationProgress.new(total_models=13)
        progress.record_model("BOM-PUTZMEISTER", ModelStats(tasks_found=5, tasks_migrated=5))
        ProgressTracker(tmp_path / "migration-progress.json").save(progress)

        assert cli.main(clean_env + ["report"]) == 0

        out = capsys.readouterr().out
        assert "Total Tasks Migrated: 5" in out
        assert list(tmp_path.glob("migration-report-*.csv"))

    def test_report_without_checkpoint(self, clean_env, capsys):
        assert cli.main(clean_env + ["report"]) == 0
        assert "No checkpoint found" in capsys.readouterr().out


class TestVerify:
    def test_requires_destination_credentials(self, clean_env, capsys):
        assert cli.main(clean_env + ["verify"]) == 1
        assert "Missing destination store URL" in capsys.readouterr().err


class TestConfigurationErrors:
    def test_missing_config_file(self, configured_env, tmp_path, capsys):
        code = cli.main(configured_env + ["--config", str(tmp_path / "absent.json"), "run"])

        assert code == 1
        assert "Cannot read config file" in capsys.readouterr().err

    def test_malformed_config_file(self, configured_env, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{broken")

        assert cli.main(configured_env + ["--config", str(path), "run"]) == 1

    def test_corrupt_checkpoint_on_resume(
        self, configured_env, monkeypatch, make_orchestrator, tmp_path, putzmeister, capsys
    ):
        monkeypatch.setattr(cli, "MigrationOrchestrator", lambda config: make_orchestrator(config))
        (tmp_path / "migration-progress.json").write_text("not json")

        assert cli.main(configured_env + ["run", "--resume"]) == 1
        assert "Corrupt checkpoint" in capsys.readouterr().err

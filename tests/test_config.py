"""
Tests for MigrationConfig and StoreConfig in models/migration.py
"""

import json

import pytest

from maintenance_migration.exceptions import ConfigurationError
from maintenance_migration.models.migration import DEFAULT_MODELS, MigrationConfig


ENV = {
    "SOURCE_SUPABASE_URL": "https://old.supabase.co",
    "SOURCE_SUPABASE_SERVICE_ROLE_KEY": "old-key",
    "SUPABASE_URL": "https://new.supabase.co/",
    "SUPABASE_SERVICE_ROLE_KEY": "new-key",
}


class TestFromEnv:
    def test_reads_both_stores(self):
        config = MigrationConfig.from_env(ENV)

        assert config.source.url == "https://old.supabase.co"
        assert config.destination.rest_url == "https://new.supabase.co/rest/v1"
        assert config.models == DEFAULT_MODELS
        assert config.validate() == []

    def test_public_url_fallback(self):
        env = {k: v for k, v in ENV.items() if k != "SUPABASE_URL"}
        env["NEXT_PUBLIC_SUPABASE_URL"] = "https://public.supabase.co"

        assert MigrationConfig.from_env(env).destination.url == "https://public.supabase.co"

    def test_missing_credentials_are_reported(self):
        config = MigrationConfig.from_env({"SUPABASE_URL": "https://new.supabase.co"})

        errors = config.validate()
        assert "Missing source store URL" in errors
        assert "Missing destination service role key" in errors
        with pytest.raises(ConfigurationError):
            config.require_valid()

    def test_output_dir(self):
        config = MigrationConfig.from_env({**ENV, "MIGRATION_OUTPUT_DIR": "/tmp/runs"})
        assert str(config.progress_path) == "/tmp/runs/migration-progress.json"


class TestSelectModels:
    def test_keeps_configured_order(self):
        config = MigrationConfig()
        assert config.select_models(["BOM-PUTZMEISTER", "T800 Water Truck"]) == [
            "T800 Water Truck",
            "BOM-PUTZMEISTER",
        ]

    def test_exact_match_only(self):
        assert MigrationConfig().select_models(["bom-putzmeister"]) == []

    def test_no_filter_returns_all(self):
        assert len(MigrationConfig().select_models()) == 13


class TestJsonOverlay:
    def test_file_overrides_keep_env_credentials(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "models": ["KENWORTH-T460"],
            "batch_size": 50,
            "destination": {"rate_limit": 5},
        }))

        config = MigrationConfig.from_json_file(str(path), base=MigrationConfig.from_env(ENV))

        assert config.models == ["KENWORTH-T460"]
        assert config.batch_size == 50
        assert config.destination.rate_limit == 5
        assert config.destination.service_role_key == "new-key"
        assert config.source.url == "https://old.supabase.co"

    def test_to_dict_omits_keys(self):
        data = MigrationConfig.from_env(ENV).to_dict()
        assert "service_role_key" not in data["source"]
        assert "service_role_key" not in data["destination"]

    def test_missing_file_is_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            MigrationConfig.from_json_file(str(tmp_path / "nope.json"))
        assert "nope.json" in exc_info.value.message

    def test_malformed_file_is_configuration_error(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError):
            MigrationConfig.from_json_file(str(path))

    def test_non_object_is_configuration_error(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[]")

        with pytest.raises(ConfigurationError):
            MigrationConfig.from_json_file(str(path))

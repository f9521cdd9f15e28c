"""
Tests for IntervalMatcher in services/interval_matcher.py
"""

from maintenance_migration.models.record import MaintenanceInterval
from maintenance_migration.services.interval_matcher import IntervalMatcher

from conftest import seed_model


def interval(id: str, value, name: str = "") -> MaintenanceInterval:
    return MaintenanceInterval(id=id, model_id="m", interval_value=value, name=name or f"{value} hrs")


class TestMatchIntervals:
    def setup_method(self):
        self.matcher = IntervalMatcher(None, None)

    def test_exact_value_matches(self):
        result = self.matcher.match_intervals(
            [interval("s1", 100), interval("s2", 300)],
            [interval("d1", 300), interval("d2", 100)],
        )
        assert result.mapping == {"s1": "d2", "s2": "d1"}
        assert result.unmatched == []

    def test_near_values_never_match(self):
        result = self.matcher.match_intervals([interval("s1", 300)], [interval("d1", 301)])
        assert result.mapping == {}
        assert [i.id for i in result.unmatched] == ["s1"]

    def test_names_are_ignored(self):
        result = self.matcher.match_intervals(
            [interval("s1", 500, "Service A")],
            [interval("d1", 500, "Completely different")],
        )
        assert result.mapping == {"s1": "d1"}

    def test_first_destination_duplicate_wins(self):
        result = self.matcher.match_intervals(
            [interval("s1", 250)],
            [interval("d1", 250), interval("d2", 250)],
        )
        assert result.mapping == {"s1": "d1"}
        assert result.destination_duplicates == [250]

    def test_warnings_describe_gaps(self):
        result = self.matcher.match_intervals(
            [interval("s1", 100, "Service"), interval("s2", 300.0, "Major")],
            [interval("d1", 100)],
        )
        assert result.warnings("BOM-PUTZMEISTER") == [
            "Unmatched intervals for BOM-PUTZMEISTER: Major (300)"
        ]

    def test_no_warnings_for_full_match(self):
        result = self.matcher.match_intervals([interval("s1", 100)], [interval("d1", 100)])
        assert result.warnings("X") == []


class TestMatch:
    def test_loads_intervals_from_both_stores(
        self, source_store, destination_store, source_repo, destination_repo
    ):
        src = seed_model(source_store, "INT-7600-ISM-320", [100, 300])
        dst = seed_model(destination_store, "INT-7600-ISM-320", [100])
        src_model = source_store.tables["equipment_models"][0]["id"]
        dst_model = destination_store.tables["equipment_models"][0]["id"]

        result = IntervalMatcher(source_repo, destination_repo).match(src_model, dst_model)

        assert result.mapping == {src[100]: dst[100]}
        assert result.source_ids == [src[100]]
        assert [i.interval_value for i in result.unmatched] == [300]

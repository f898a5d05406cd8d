"""Tests for the date override rules."""

from datetime import UTC, datetime, timedelta, timezone

from api.services import temporal

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)


class TestNormalize:
    def test_naive_is_utc(self):
        assert temporal.normalize(datetime(2024, 1, 1)) == datetime(2024, 1, 1, tzinfo=UTC)

    def test_converts_offset(self):
        value = datetime(2024, 1, 1, 14, tzinfo=timezone(timedelta(hours=2)))

        assert temporal.normalize(value) == datetime(2024, 1, 1, 12, tzinfo=UTC)

    def test_truncates_to_milliseconds(self):
        value = datetime(2024, 1, 1, microsecond=123456, tzinfo=UTC)

        assert temporal.normalize(value).microsecond == 123000


class TestSeed:
    def test_seed_defaults_to_now(self):
        doc = temporal.seed(temporal.CREATED, now=NOW)

        assert doc["main_created_at"] == NOW
        assert doc["custom_created_dates"] == [{"date": NOW, "modified_at": NOW}]

    def test_seed_with_initial(self):
        initial = datetime(2020, 1, 1, tzinfo=UTC)

        doc = temporal.seed(temporal.MODIFIED, initial, now=NOW)

        assert doc["main_last_modified"] == initial
        assert doc["custom_last_modified_dates"] == [{"date": initial, "modified_at": NOW}]


class TestApplyEdit:
    def test_no_override_is_noop(self):
        assert temporal.apply_edit(temporal.CREATED, None, now=NOW) == ({}, {})

    def test_override_sets_and_pushes(self):
        override = datetime(2021, 5, 5, tzinfo=UTC)

        set_doc, push_doc = temporal.apply_edit(temporal.MODIFIED, override, now=NOW)

        assert set_doc == {"main_last_modified": override}
        assert push_doc == {"custom_last_modified_dates": {"date": override, "modified_at": NOW}}

    def test_apply_to_document_keeps_invariant(self):
        doc = temporal.seed(temporal.CREATED, now=NOW)
        for day in range(1, 4):
            doc = temporal.apply_to_document(
                doc, temporal.CREATED, datetime(2020, 1, day, tzinfo=UTC), now=NOW
            )

        assert len(doc["custom_created_dates"]) == 4
        assert doc["main_created_at"] == datetime(2020, 1, 3, tzinfo=UTC)
        assert temporal.is_consistent(doc, temporal.CREATED)

    def test_apply_to_document_does_not_mutate(self):
        doc = temporal.seed(temporal.CREATED, now=NOW)

        temporal.apply_to_document(doc, temporal.CREATED, datetime(2020, 1, 1), now=NOW)

        assert len(doc["custom_created_dates"]) == 1

    def test_merge_updates(self):
        created = temporal.apply_edit(temporal.CREATED, datetime(2020, 1, 1), now=NOW)
        modified = temporal.apply_edit(temporal.MODIFIED, None, now=NOW)

        set_doc, push_doc = temporal.merge_updates(created, modified)

        assert list(set_doc) == ["main_created_at"]
        assert list(push_doc) == ["custom_created_dates"]


class TestHistoryForDisplay:
    def test_single_entry_hidden(self):
        doc = temporal.seed(temporal.CREATED, now=NOW)

        assert temporal.history_for_display(doc["custom_created_dates"]) == []

    def test_newest_first_one_current(self):
        history = [
            {"date": datetime(2020, 1, day, tzinfo=UTC), "modified_at": NOW} for day in (1, 2, 3)
        ]

        rows = temporal.history_for_display(history)

        assert [row.date.day for row in rows] == [3, 2, 1]
        assert [row.current for row in rows] == [True, False, False]


class TestIsConsistent:
    def test_missing_history(self):
        assert not temporal.is_consistent({"main_created_at": NOW}, temporal.CREATED)

    def test_drifted_main_date(self):
        doc = temporal.seed(temporal.CREATED, now=NOW)
        doc["main_created_at"] = NOW + timedelta(days=1)

        assert not temporal.is_consistent(doc, temporal.CREATED)

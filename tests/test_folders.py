from datetime import UTC, datetime

from shoreline_server.media.folders import (
    date_to_folder_prefix,
    folder_from_datetime,
    folder_of_public_id,
    generate_project_folder,
    is_reusable_folder,
    known_folder_set,
    next_folder_for_date_prefix,
    parse_folder_created_at,
)

NOW = datetime(2026, 2, 13, 21, 45, 30, tzinfo=UTC)


class TestKnownFolderSet:
    def test_blank_and_missing_values_are_skipped(self):
        values = ["projects/a", None, "", "   ", " projects/b ", "projects/a", 42]
        assert known_folder_set(values) == {"projects/a", "projects/b"}

    def test_empty(self):
        assert known_folder_set([]) == set()


class TestFolderNames:
    def test_folder_from_datetime(self):
        assert folder_from_datetime(NOW) == "projects/20260213-214530"

    def test_generate_unused(self):
        assert generate_project_folder(NOW) == "projects/20260213-214530"

    def test_generate_with_suffix(self):
        used = {"projects/20260213-214530", "projects/20260213-214530-2"}
        assert generate_project_folder(NOW, used) == "projects/20260213-214530-3"

    def test_date_prefix(self):
        assert date_to_folder_prefix(2025, 2) == "projects/20250201-"
        assert date_to_folder_prefix(2025, 2, 14) == "projects/20250214-"

    def test_next_folder_for_empty_day(self):
        prefix = "projects/20250201-"
        assert next_folder_for_date_prefix(prefix, []) == "projects/20250201-000001"

    def test_next_folder_after_latest(self):
        prefix = "projects/20250201-"
        existing = [
            "projects/20250201-000001",
            "projects/20250201-120000",
            "projects/20250201-000002-2",
            "projects/20250202-235959",
        ]
        assert (
            next_folder_for_date_prefix(prefix, existing)
            == "projects/20250201-120001"
        )

    def test_next_folder_rolls_over_minutes(self):
        prefix = "projects/20250201-"
        existing = ["projects/20250201-000059"]
        assert (
            next_folder_for_date_prefix(prefix, existing)
            == "projects/20250201-000100"
        )


class TestParseFolder:
    def test_parse(self):
        assert parse_folder_created_at("projects/20260213-214530") == datetime(
            2026, 2, 13, 21, 45, 30
        )

    def test_invalid(self):
        assert parse_folder_created_at(None) is None
        assert parse_folder_created_at("") is None
        assert parse_folder_created_at("landing") is None
        assert parse_folder_created_at("projects/20260213-214530-2") is None
        assert parse_folder_created_at("projects/20261313-214530") is None

    def test_reusable(self):
        assert is_reusable_folder("projects/20260213-214530")
        assert is_reusable_folder("projects/20260213-214530-2")
        assert not is_reusable_folder("projects")
        assert not is_reusable_folder("landing")
        assert not is_reusable_folder("projects/../landing")
        assert not is_reusable_folder(None)

    def test_folder_of_public_id(self):
        assert (
            folder_of_public_id("projects/20260213-214530/oak_x1y2")
            == "projects/20260213-214530"
        )
        assert (
            folder_of_public_id("projects/20260213-214530-2/oak")
            == "projects/20260213-214530-2"
        )
        assert folder_of_public_id("landing/hero") is None
        assert folder_of_public_id("oak") is None
        assert folder_of_public_id(None) is None

"""Unit tests for timestamp helpers and settings."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from config import Settings, default_database_url
from skillkeep.core.timestamps import ensure_utc, format_timestamp, parse_timestamp


class TestTimestamps:
    def test_format_drops_microseconds(self):
        value = datetime(2025, 1, 1, 12, 0, 5, 999999, tzinfo=UTC)
        assert format_timestamp(value) == "2025-01-01T12:00:05Z"

    def test_format_converts_offsets(self):
        value = datetime(2025, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(value) == "2025-01-01T12:00:00Z"

    def test_parse_zulu(self):
        assert parse_timestamp("2025-01-01T12:00:00Z") == datetime(2025, 1, 1, 12, tzinfo=UTC)

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "tomorrow",
            "2025-01-01T12:00:00",
            None,
            "2025-03-04 09:00:00Z",
            "20250304T090000Z",
            "2025-3-4T09:00:00Z",
            "2025-03-04T09:00:00+0200",
            "2025-13-01T09:00:00Z",
        ],
    )
    def test_parse_rejects(self, raw):
        with pytest.raises(ValueError):
            parse_timestamp(raw)

    def test_parse_offset_and_fraction(self):
        parsed = parse_timestamp("2025-01-01T14:00:00.250000+02:00")
        assert parsed == datetime(2025, 1, 1, 12, 0, 0, 250000, tzinfo=UTC)

    def test_naive_is_assumed_utc(self):
        assert ensure_utc(datetime(2025, 1, 1)).tzinfo == UTC


class TestSettings:
    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
        monkeypatch.delenv("SKILLKEEP_DB", raising=False)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = Settings(_env_file=None)
        assert settings.snapshot_keep == 5
        assert settings.snapshot_version == 3
        assert settings.database_url == f"sqlite:///{tmp_path / 'skillkeep' / 'skillkeep.db'}"

    def test_explicit_db_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SKILLKEEP_DB", str(tmp_path / "mine.db"))
        assert default_database_url() == f"sqlite:///{tmp_path / 'mine.db'}"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SNAPSHOT_KEEP", "2")
        assert Settings(_env_file=None).snapshot_keep == 2

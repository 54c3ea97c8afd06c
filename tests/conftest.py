"""Shared test fixtures for the power position service."""

from pathlib import Path

import pytest

from power_position.config import AppSettings, CleanupSettings, ExtractSettings


@pytest.fixture
def extract_settings(tmp_path: Path) -> ExtractSettings:
    """ExtractSettings writing to a temp dir with millisecond backoff."""
    return ExtractSettings(
        output_directory=str(tmp_path / "reports"),
        interval_minutes=5,
        retry_count=3,
        retry_delay_ms=1,
        timezone="Europe/London",
    )


@pytest.fixture
def cleanup_settings() -> CleanupSettings:
    return CleanupSettings(enabled=True, retention_days=30, interval_hours=24)


@pytest.fixture
def mock_settings(extract_settings: ExtractSettings, cleanup_settings: CleanupSettings) -> AppSettings:
    """Return AppSettings with test defaults."""
    return AppSettings(
        log_level="DEBUG",
        extract=extract_settings,
        cleanup=cleanup_settings,
    )

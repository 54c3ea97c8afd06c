"""Configuration system using pydantic-settings with environment variable loading.

Each group reads its own prefixed environment variables. Out-of-range values
are replaced or clamped once, at load time, so the rest of the service can
trust every field.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_OUTPUT_DIRECTORY = "PowerPositionReports"


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


class ExtractSettings(BaseSettings):
    """Report extraction cadence, retry budget and output location."""

    model_config = SettingsConfigDict(env_prefix="EXTRACT_")

    output_directory: str = DEFAULT_OUTPUT_DIRECTORY
    interval_minutes: float = 5.0
    retry_count: int = 3
    retry_delay_ms: int = 1000
    timezone: str = "Europe/London"  # trading region, not the host zone

    @field_validator("output_directory")
    @classmethod
    def _default_output_directory(cls, value: str) -> str:
        return value.strip() or DEFAULT_OUTPUT_DIRECTORY

    @field_validator("interval_minutes")
    @classmethod
    def _positive_interval(cls, value: float) -> float:
        return value if value > 0 else 5.0

    @field_validator("retry_count")
    @classmethod
    def _positive_retry_count(cls, value: int) -> int:
        return value if value > 0 else 3

    @field_validator("retry_delay_ms")
    @classmethod
    def _positive_retry_delay(cls, value: int) -> int:
        return value if value > 0 else 1000


class CleanupSettings(BaseSettings):
    """Report retention policy."""

    model_config = SettingsConfigDict(env_prefix="CLEANUP_")

    enabled: bool = True
    retention_days: int = 30
    interval_hours: int = 24
    check_interval_minutes: float = 5.0

    @field_validator("retention_days")
    @classmethod
    def _clamp_retention(cls, value: int) -> int:
        return _clamp(value, 1, 365)

    @field_validator("interval_hours")
    @classmethod
    def _clamp_interval(cls, value: int) -> int:
        return _clamp(value, 1, 168)

    @field_validator("check_interval_minutes")
    @classmethod
    def _positive_check_interval(cls, value: float) -> float:
        return value if value > 0 else 5.0


class HealthSettings(BaseSettings):
    """Health polling thresholds."""

    model_config = SettingsConfigDict(env_prefix="HEALTH_")

    enabled: bool = True
    check_interval_minutes: float = 5.0
    low_disk_space_threshold_mb: int = 100

    @field_validator("check_interval_minutes")
    @classmethod
    def _minimum_check_interval(cls, value: float) -> float:
        return value if value >= 1 else 5.0

    @field_validator("low_disk_space_threshold_mb")
    @classmethod
    def _minimum_disk_threshold(cls, value: int) -> int:
        return value if value >= 10 else 100


class ProviderSettings(BaseSettings):
    """Simulated trade provider behaviour."""

    model_config = SettingsConfigDict(env_prefix="PROVIDER_")

    failure_rate: float = 0.1
    max_trades: int = 5
    latency_ms: int = 0

    @field_validator("failure_rate")
    @classmethod
    def _clamp_failure_rate(cls, value: float) -> float:
        return max(0.0, min(1.0, value))

    @field_validator("max_trades")
    @classmethod
    def _positive_max_trades(cls, value: int) -> int:
        return max(1, value)


class StatusSettings(BaseSettings):
    """Optional HTTP status endpoint."""

    model_config = SettingsConfigDict(env_prefix="STATUS_")

    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8080


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_file: str | None = None
    detailed_logging: bool = False
    run_once: bool = False
    extract: ExtractSettings = ExtractSettings()
    cleanup: CleanupSettings = CleanupSettings()
    health: HealthSettings = HealthSettings()
    provider: ProviderSettings = ProviderSettings()
    status: StatusSettings = StatusSettings()

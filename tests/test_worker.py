"""Tests for the extraction worker's retry, fallback and report writing."""

import asyncio
from datetime import date, datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch
from zoneinfo import ZoneInfo

import pytest

from power_position.config import ExtractSettings
from power_position.exceptions import ReportWriteError, TradeProviderError
from power_position.models import Trade
from power_position.monitoring.base import HealthReporter, MetricsRecorder
from power_position.provider.client import TradeProvider
from power_position.worker import ExtractionWorker

LONDON = ZoneInfo("Europe/London")
EXTRACT_TIME = datetime(2024, 1, 15, 14, 30, tzinfo=LONDON)


def _trade(*volumes: float) -> Trade:
    return Trade.from_volumes(date(2024, 1, 15), list(volumes))


@pytest.fixture
def provider() -> AsyncMock:
    return AsyncMock(spec=TradeProvider)


@pytest.fixture
def health() -> MagicMock:
    return MagicMock(spec=HealthReporter)


@pytest.fixture
def metrics() -> MagicMock:
    return MagicMock(spec=MetricsRecorder)


@pytest.fixture
def worker(
    provider: AsyncMock,
    health: MagicMock,
    metrics: MagicMock,
    extract_settings: ExtractSettings,
) -> ExtractionWorker:
    return ExtractionWorker(
        provider=provider,
        health=health,
        metrics=metrics,
        settings=extract_settings,
        clock=lambda: EXTRACT_TIME,
    )


def _report_dir(settings: ExtractSettings) -> Path:
    return Path(settings.output_directory)


class TestSuccessfulExtraction:
    @pytest.mark.asyncio
    async def test_returns_trade_count_and_writes_report(
        self, worker, provider, health, metrics, extract_settings
    ) -> None:
        provider.get_trades.return_value = [_trade(100, 200, 150), _trade(50, 75, 100)]

        result = await worker.generate_report()

        assert result == 2
        provider.get_trades.assert_awaited_once_with(date(2024, 1, 15))
        report = _report_dir(extract_settings) / "PowerPosition_20240115_1430.csv"
        assert report.read_text(encoding="utf-8").split("\n") == [
            "Local Time,Volume",
            "23:00,150.0",
            "00:00,275.0",
            "01:00,250.0",
        ]
        health.record_successful_run.assert_called_once_with()
        metrics.record_successful_run.assert_called_once_with(2)
        metrics.record_failed_run.assert_not_called()

    @pytest.mark.asyncio
    async def test_requests_next_trading_day_after_23_00(
        self, provider, health, metrics, extract_settings
    ) -> None:
        provider.get_trades.return_value = [_trade(1)]
        late = ExtractionWorker(
            provider, health, metrics, extract_settings,
            clock=lambda: datetime(2024, 1, 15, 23, 5, tzinfo=LONDON),
        )

        await late.generate_report()

        provider.get_trades.assert_awaited_once_with(date(2024, 1, 16))

    @pytest.mark.asyncio
    async def test_no_trades_writes_zero_volume_report(
        self, worker, provider, metrics, extract_settings
    ) -> None:
        provider.get_trades.return_value = []

        result = await worker.generate_report()

        assert result == 0
        lines = (
            _report_dir(extract_settings) / "PowerPosition_20240115_1430.csv"
        ).read_text(encoding="utf-8").split("\n")
        assert len(lines) == 25
        assert all(line.endswith(",0.0") for line in lines[1:])
        metrics.record_successful_run.assert_called_once_with(0)


class TestRetry:
    @pytest.mark.asyncio
    async def test_retries_once_then_succeeds(self, worker, provider, metrics) -> None:
        provider.get_trades.side_effect = [
            TradeProviderError("First attempt fails"),
            [_trade(100)],
        ]

        result = await worker.generate_report()

        assert result == 1
        assert provider.get_trades.await_count == 2
        metrics.record_failed_run.assert_not_called()

    @pytest.mark.asyncio
    async def test_backoff_doubles_per_attempt(self, worker, provider) -> None:
        provider.get_trades.side_effect = [
            TradeProviderError("1"),
            TradeProviderError("2"),
            [_trade(100)],
        ]

        with patch("power_position.worker.wait_or_stop", new=AsyncMock(return_value=False)) as wait:
            result = await worker.generate_report()

        assert result == 1
        assert provider.get_trades.await_count == 3
        delays = [call.args[1] for call in wait.await_args_list]
        assert delays == [0.001, 0.002]

    @pytest.mark.asyncio
    async def test_any_exception_type_is_retried(self, worker, provider) -> None:
        provider.get_trades.side_effect = ValueError("Non-provider failure")

        result = await worker.generate_report()

        assert result == 0
        assert provider.get_trades.await_count == 4


class TestFallback:
    @pytest.mark.asyncio
    async def test_exhausted_retries_write_error_report(
        self, worker, provider, health, metrics, extract_settings
    ) -> None:
        provider.get_trades.side_effect = TradeProviderError("Always fails")

        result = await worker.generate_report()

        assert result == 0
        assert provider.get_trades.await_count == 4
        files = list(_report_dir(extract_settings).glob("*_ERROR.csv"))
        assert [f.name for f in files] == ["PowerPosition_20240115_1430_ERROR.csv"]
        content = files[0].read_text(encoding="utf-8")
        lines = content.split("\n")
        assert lines[0] == (
            "# Power position extraction failed after all 4 attempts; "
            "volumes below are placeholders."
        )
        assert any(line.startswith("# ERROR:") for line in lines)
        assert "# ERROR: TradeProviderError: Always fails" in content
        assert "# Extract Time: 2024-01-15 14:30:00" in content
        assert any(line.endswith(",ERROR") for line in lines)
        health.record_successful_run.assert_not_called()
        metrics.record_failed_run.assert_called_once_with()
        metrics.record_successful_run.assert_not_called()

    @pytest.mark.asyncio
    async def test_stop_signal_cuts_backoff_short(
        self, provider, health, metrics, extract_settings
    ) -> None:
        slow = extract_settings.model_copy(update={"retry_delay_ms": 60_000})
        worker = ExtractionWorker(provider, health, metrics, slow, clock=lambda: EXTRACT_TIME)
        provider.get_trades.side_effect = TradeProviderError("down")
        stop_event = asyncio.Event()
        stop_event.set()

        result = await asyncio.wait_for(worker.generate_report(stop_event), timeout=5)

        assert result == 0
        assert provider.get_trades.await_count == 1
        (report,) = _report_dir(slow).glob("*_ERROR.csv")
        first_line = report.read_text(encoding="utf-8").split("\n")[0]
        assert first_line == (
            "# Power position extraction abandoned at shutdown after 1 of 4 attempts; "
            "volumes below are placeholders."
        )
        metrics.record_failed_run.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_failed_error_report_write_is_swallowed(
        self, worker, provider, metrics
    ) -> None:
        provider.get_trades.side_effect = TradeProviderError("down")

        with patch("power_position.worker._write_text", side_effect=OSError("disk full")):
            result = await worker.generate_report()

        assert result == 0
        metrics.record_failed_run.assert_called_once_with()


class TestWriteFailure:
    @pytest.mark.asyncio
    async def test_normal_report_write_failure_raises(
        self, worker, provider, health, metrics
    ) -> None:
        provider.get_trades.return_value = [_trade(1)]

        with patch("power_position.worker._write_text", side_effect=OSError("read-only")):
            with pytest.raises(ReportWriteError):
                await worker.generate_report()

        health.record_successful_run.assert_not_called()
        metrics.record_failed_run.assert_called_once_with()
        metrics.record_successful_run.assert_not_called()

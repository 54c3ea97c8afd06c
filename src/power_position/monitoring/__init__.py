"""Run outcome reporting: metrics counters and health polling."""

from power_position.monitoring.base import HealthReporter, MetricsRecorder
from power_position.monitoring.health import HealthMonitor
from power_position.monitoring.metrics import ServiceMetrics

__all__ = ["HealthMonitor", "HealthReporter", "MetricsRecorder", "ServiceMetrics"]

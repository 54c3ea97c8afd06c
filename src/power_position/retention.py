"""Deletes report files older than the retention period."""

import time
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path

from power_position.exceptions import RetentionError
from power_position.logging import get_logger
from power_position.reporting import REPORT_GLOB

logger = get_logger(__name__)


class RetentionCleaner:
    """Removes expired reports from the output directory.

    File age is taken from the modification time, which is the time the
    report was written (report files are never rewritten afterwards).
    """

    def __init__(
        self,
        output_directory: str | Path,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._directory = Path(output_directory)
        self._clock = clock

    def cleanup(self, retention: timedelta) -> int:
        """Delete reports older than ``retention``.

        Returns:
            Number of files deleted.

        Raises:
            RetentionError: If the directory exists but cannot be listed.
        """
        if not self._directory.is_dir():
            logger.debug("report_directory_missing", path=str(self._directory))
            return 0

        cutoff = self._clock() - retention.total_seconds()
        try:
            candidates = sorted(self._directory.glob(REPORT_GLOB))
        except OSError as exc:
            logger.error("report_directory_list_failed", path=str(self._directory), error=str(exc))
            raise RetentionError(f"Could not list {self._directory}: {exc}") from exc

        deleted = 0
        for path in candidates:
            try:
                if not path.is_file() or path.stat().st_mtime >= cutoff:
                    continue
                path.unlink()
                deleted += 1
                logger.debug("report_deleted", path=str(path))
            except OSError as exc:
                logger.warning("report_delete_failed", path=str(path), error=str(exc))

        logger.info(
            "report_cleanup_complete",
            deleted=deleted,
            scanned=len(candidates),
            retention_days=retention.days,
        )
        return deleted

"""Retention sweep for generated workbook exports."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

from toolbox_api.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_AGE = timedelta(hours=1)
DEFAULT_INTERVAL = timedelta(hours=1)


@dataclass
class PurgeResult:
    """Result of a retention purge run."""

    scanned: int = 0
    removed: int = 0
    skipped: int = 0
    errors: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "scanned": self.scanned,
            "removed": self.removed,
            "skipped": self.skipped,
            "errors": self.errors,
        }


def purge_expired_exports(
    directory: str | Path,
    max_age: timedelta = DEFAULT_MAX_AGE,
    now: datetime | None = None,
) -> PurgeResult:
    """Remove files in ``directory`` last modified more than ``max_age`` ago.

    Only the top level of the directory is scanned. A failure on one entry
    is logged and counted, and the sweep moves on to the next.

    Args:
        directory: Exports directory to scan.
        max_age: Files older than this are deleted.
        now: Optional reference time (useful for testing).

    Returns:
        PurgeResult with counts.
    """
    result = PurgeResult()
    base_path = Path(directory)
    if not base_path.exists():
        return result

    reference = now or datetime.now(UTC)
    try:
        entries = list(base_path.iterdir())
    except OSError as e:
        result.errors += 1
        logger.error("Failed to list exports directory", path=str(base_path), error=e)
        return result

    for item in entries:
        result.scanned += 1
        try:
            if not item.is_file():
                result.skipped += 1
                continue
            modified = datetime.fromtimestamp(item.stat().st_mtime, UTC)
            if reference - modified > max_age:
                item.unlink()
                result.removed += 1
                logger.info("Deleted expired export", path=str(item))
            else:
                result.skipped += 1
        except OSError as e:
            result.errors += 1
            logger.warning("Failed to remove expired export", path=str(item), error=e)

    logger.info(
        "Retention purge complete",
        **result.to_dict(),
        max_age_minutes=int(max_age.total_seconds() // 60),
    )
    return result


def next_run_after(now: datetime, interval: timedelta) -> datetime:
    """First wall-clock boundary of ``interval`` strictly after ``now``.

    Boundaries are counted from midnight of ``now``'s day, so an hourly
    interval fires at minute 0 of every hour.
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elapsed = now - midnight
    periods = elapsed // interval + 1
    return midnight + periods * interval


class RetentionSweeper:
    """Background thread that purges expired exports on a fixed schedule.

    The sweeper is inert until ``start()`` is called, and ``stop()`` ends the
    thread. ``run_once()`` performs a single sweep on the caller's thread.
    """

    def __init__(
        self,
        directory: str | Path,
        max_age: timedelta = DEFAULT_MAX_AGE,
        interval: timedelta = DEFAULT_INTERVAL,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the sweeper.

        Args:
            directory: Exports directory to sweep.
            max_age: Files older than this are deleted.
            interval: Time between sweeps, aligned to the wall clock.
            clock: Source of the current time.
        """
        if interval <= timedelta(0):
            raise ValueError("interval must be positive")
        self.directory = Path(directory)
        self.max_age = max_age
        self.interval = interval
        self._clock = clock or (lambda: datetime.now(UTC))
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background sweep thread. Calling twice is a no-op."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="ExportRetentionSweeper",
        )
        self._thread.start()
        logger.info(
            "Retention sweeper started",
            directory=str(self.directory),
            interval_minutes=int(self.interval.total_seconds() // 60),
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the sweep thread to exit and wait for it."""
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
            logger.info("Retention sweeper stopped")
        self._thread = None

    def run_once(self) -> PurgeResult:
        """Sweep the exports directory now."""
        return purge_expired_exports(self.directory, self.max_age, self._clock())

    def seconds_until_next_run(self) -> float:
        now = self._clock()
        return max(0.0, (next_run_after(now, self.interval) - now).total_seconds())

    def _run_loop(self) -> None:
        while not self._stop_event.wait(self.seconds_until_next_run()):
            try:
                self.run_once()
            except Exception as e:
                logger.error(f"Error in export retention sweep: {e}")

"""Background scheduling for the unverified user sweep."""

from __future__ import annotations

import datetime
import threading
from typing import TYPE_CHECKING

from firebase_admin import auth

from .sweeper import StaleIdentitySweeper, SweepReport

if TYPE_CHECKING:
    from flask import Flask


def build_sweeper(app: Flask) -> StaleIdentitySweeper:
    """Create a sweeper from the app's configuration."""
    max_age = datetime.timedelta(
        minutes=int(app.config["UNVERIFIED_USER_MAX_AGE_MINUTES"])
    )
    return StaleIdentitySweeper(auth, max_age=max_age)


class SweepScheduler:
    """Run the sweep on a fixed interval, at most one run at a time per process.

    The lock does not span processes: start it on a single worker, or run the
    sweep-unverified command from cron.
    """

    def __init__(self, app: Flask, interval: datetime.timedelta) -> None:
        self.app = app
        self.interval = interval
        self._run_lock = threading.Lock()
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    def run_once(self) -> SweepReport | None:
        """Run one sweep now. Returns None if a sweep is already running."""
        if not self._run_lock.acquire(blocking=False):
            self.app.logger.info("Unverified user sweep already running, skipping")
            return None
        try:
            with self.app.app_context():
                return build_sweeper(self.app).sweep()
        finally:
            self._run_lock.release()

    def start(self) -> None:
        """Start the background thread."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._loop, name="unverified-user-sweep", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Ask the background thread to exit after the current wait."""
        self._stopped.set()

    def _loop(self) -> None:
        while not self._stopped.wait(self.interval.total_seconds()):
            try:
                self.run_once()
            except Exception as e:
                # A failed run must not kill the schedule
                self.app.logger.error(f"Unverified user sweep failed: {e}")

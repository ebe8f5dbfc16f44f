"""
Expiry sweeper: evicts expired authorization codes and access tokens on a fixed
interval. Only bounds memory; validation already checks expiry on read.
"""
import logging
import threading
from typing import Iterable, Protocol

logger = logging.getLogger(__name__)


class Sweepable(Protocol):
    def purge_expired(self, now: int | None = None) -> int: ...


class ExpirySweeper:
    def __init__(self, stores: Iterable[Sweepable], interval: float = 60.0):
        self._stores = list(stores)
        self._interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def sweep_once(self) -> int:
        """Purge every store now. Returns the number of records removed."""
        removed = 0
        for store in self._stores:
            removed += store.purge_expired()
        if removed:
            logger.debug("Swept %d expired record(s)", removed)
        return removed

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self.sweep_once()
            except Exception:
                logger.exception("Expiry sweep failed")

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="expiry-sweeper", daemon=True)
        self._thread.start()
        logger.info("Expiry sweeper started (interval=%ss)", self._interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join(timeout)
        self._thread = None
        logger.info("Expiry sweeper stopped")

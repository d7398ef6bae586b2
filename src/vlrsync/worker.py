"""Long-running sync worker: scanner plus live trackers until Ctrl+C.

Provides:

* **ShutdownHandler** -- cross-platform graceful Ctrl+C via
  ``signal.signal(SIGINT, ...)``. First press sets an asyncio.Event that
  interrupts the scanner's idle sleep; second press force-exits.
* **run_worker** -- runs the Scanner until shutdown and stops every
  tracker on the way out.
"""

import asyncio
import logging
import signal

from vlrsync.config import SyncConfig
from vlrsync.http_client import VLRClient
from vlrsync.scanner import Scanner

logger = logging.getLogger(__name__)


class ShutdownHandler:
    """Cross-platform graceful shutdown via Ctrl+C.

    Uses ``signal.signal(SIGINT, ...)`` which works on both Windows and
    Unix (unlike ``loop.add_signal_handler`` which raises
    ``NotImplementedError`` on Windows).
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._original_handler = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def install(self) -> None:
        """Save the current SIGINT handler and install our own.

        Must be called from inside the running event loop.
        """
        self._loop = asyncio.get_running_loop()
        self._original_handler = signal.getsignal(signal.SIGINT)
        signal.signal(signal.SIGINT, self._handle)

    def _handle(self, sig, frame) -> None:  # noqa: ANN001
        if self._event.is_set():
            logger.warning("Force shutdown")
            raise SystemExit(1)
        logger.info("Shutdown requested. Stopping scanner and trackers...")
        self.request()

    def request(self) -> None:
        """Request shutdown, waking the event loop if it is idle."""
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._event.set)
        else:
            self._event.set()

    @property
    def event(self) -> asyncio.Event:
        return self._event

    @property
    def is_set(self) -> bool:
        """Whether a shutdown has been requested."""
        return self._event.is_set()

    def restore(self) -> None:
        """Restore the original SIGINT handler if one was saved."""
        if self._original_handler is not None:
            signal.signal(signal.SIGINT, self._original_handler)


async def run_worker(
    client: VLRClient,
    gateway,
    config: SyncConfig,
    shutdown: ShutdownHandler,
) -> Scanner:
    """Run scanner cycles every ``scan_interval`` until shutdown.

    Returns:
        The Scanner, for its cycle count and final state.
    """
    scanner = Scanner(client, gateway, config)
    logger.info(
        "Worker started: scan every %.0fs, trackers every %.0fs, %d per category",
        config.scan_interval, config.tracker_interval, config.max_results_per_category,
    )
    await scanner.run(shutdown.event)
    logger.info("Worker stopped. Client stats: %s", client.stats)
    return scanner

from __future__ import annotations

import json
import logging
import random
import threading
import time
from typing import Optional, Tuple, Type

from ..core.engine import Guard
from ..core.ports import RoleSource
from ..core.roles import RoleDefinitionError

logger = logging.getLogger("restrbac.store")

# first match wins; anything else is logged as a generic reload error
_FAILURES: Tuple[Tuple[Type[BaseException], int, str], ...] = (
    (json.JSONDecodeError, logging.ERROR, "restrbac: invalid role JSON from %s"),
    (RoleDefinitionError, logging.ERROR, "restrbac: malformed role document from %s"),
    (FileNotFoundError, logging.WARNING, "restrbac: roles not found: %s"),
)


class HotReloader:
    """Keeps a :class:`Guard` in sync with a :class:`RoleSource`.

    Each check asks the source for its etag and only loads when it differs
    from the last applied one (a ``None`` etag always loads). A document
    that fails to load or parse leaves the guard untouched; further checks
    are then suppressed for an exponentially growing, jittered interval.

    ``start()`` runs the checks on a background thread; ``stop()`` ends it.
    """

    def __init__(
        self,
        guard: Guard,
        source: RoleSource,
        *,
        initial_load: bool = False,
        poll_interval: float | None = 5.0,
        backoff_min: float = 2.0,
        backoff_max: float = 30.0,
        jitter_ratio: float = 0.15,
        thread_daemon: bool = True,
    ) -> None:
        self.guard = guard
        self.source = source
        self.poll_interval = poll_interval
        self.backoff_min = float(backoff_min)
        self.backoff_max = float(backoff_max)
        self.jitter_ratio = float(jitter_ratio)
        self.thread_daemon = bool(thread_daemon)

        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        self._backoff = self.backoff_min
        self._suppress_until = 0.0
        self._last_reload_at: float | None = None
        self._last_error: Exception | None = None
        # without initial_load the guard is assumed to hold the current document
        self._last_etag: Optional[str] = None if initial_load else self._peek_etag()

    def _peek_etag(self) -> Optional[str]:
        try:
            return self.source.etag()
        except Exception:
            logger.debug("restrbac: could not read initial etag", exc_info=True)
            return None

    def check_and_reload(self, *, force: bool = False) -> bool:
        """Run one check; True when a new document was applied to the guard.

        ``force`` ignores both the etag comparison and any error backoff.
        """
        now = time.time()
        with self._lock:
            if now < self._suppress_until and not force:
                return False
            try:
                etag = self.source.etag()
                if etag is not None and etag == self._last_etag and not force:
                    return False
                self.guard.set_roles(self.source.load())
            except Exception as e:
                self._on_failure(now, e)
                return False

            self._last_etag = etag
            self._last_reload_at = now
            self._last_error = None
            self._backoff = self.backoff_min
            logger.info("restrbac: roles reloaded from %s", self._src_name())
            return True

    def refresh_if_needed(self) -> bool:
        return self.check_and_reload()

    def poll_once(self) -> bool:
        return self.check_and_reload()

    def start(self, interval: float | None = None) -> None:
        """Poll every ``interval`` seconds (default ``poll_interval``) on a thread."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            every = float(interval if interval is not None else (self.poll_interval or 5.0))
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run_loop, args=(every,), daemon=self.thread_daemon
            )
            self._thread.start()

    def stop(self, timeout: float | None = 1.0) -> None:
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._stop_event.set()
        # the loop needs the lock to finish its current check
        thread.join(timeout=timeout)
        with self._lock:
            if self._thread is thread and not thread.is_alive():
                self._thread = None

    @property
    def last_etag(self) -> Optional[str]:
        with self._lock:
            return self._last_etag

    @property
    def last_reload_at(self) -> float | None:
        with self._lock:
            return self._last_reload_at

    @property
    def last_error(self) -> Exception | None:
        with self._lock:
            return self._last_error

    @property
    def suppressed_until(self) -> float:
        with self._lock:
            return self._suppress_until

    def _src_name(self) -> str:
        path = getattr(self.source, "path", None)
        return path if isinstance(path, str) else type(self.source).__name__

    def _jittered(self, seconds: float) -> float:
        return seconds * (1.0 + self.jitter_ratio * random.uniform(-1.0, 1.0))

    def _on_failure(self, now: float, err: Exception) -> None:
        self._last_error = err
        for exc_type, level, msg in _FAILURES:
            if isinstance(err, exc_type):
                break
        else:
            level, msg = logging.ERROR, "restrbac: role reload from %s failed"

        logger.log(level, msg, self._src_name(), exc_info=err if level >= logging.ERROR else None)

        self._backoff = min(self.backoff_max, max(self.backoff_min, self._backoff * 2.0))
        self._suppress_until = now + max(0.2, self._jittered(self._backoff))

    def _run_loop(self, every: float) -> None:
        while not self._stop_event.is_set():
            try:
                self.check_and_reload()
            except Exception:
                logger.exception("restrbac: reloader loop error")

            delay = every
            with self._lock:
                wait_out = self._suppress_until - time.time()
            if wait_out > 0:
                delay = min(delay, wait_out)
            # Event.wait returns early once stop() sets the event
            self._stop_event.wait(max(0.2, self._jittered(delay)))


__all__ = ["HotReloader"]

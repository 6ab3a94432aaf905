# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Run-once cleanups and the interrupt handler that flushes them.

Each case owns its cleanups and registers them here as well; on SIGINT or
SIGTERM every still-registered cleanup runs, whichever case it belongs to.
"""

from __future__ import annotations

import itertools
import signal
import threading
from collections.abc import Callable
from typing import Any

from examples_harness import logger
from examples_harness.errors import CleanupFailure


class Cleanup:
    """Callable wrapper that runs *fn* at most once and never raises."""

    def __init__(self, fn: Callable[[], Any], description: str) -> None:
        self._fn = fn
        self.description = description
        self._lock = threading.RLock()
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def __call__(self) -> bool:
        """Run the cleanup unless it already ran.

        Returns:
            True if this call ran the cleanup, False if it had already run.
        """
        with self._lock:
            if self._done:
                return False
            self._done = True
        try:
            self._fn()
        except Exception as exc:
            failure = CleanupFailure(self.description, exc)
            logger.warning("%s", failure)
        return True


class InterruptCleanups:
    """Registry of pending cleanups flushed when the process is interrupted.

    Signal handlers can only be installed from the main thread; registering
    from a worker thread still records the cleanup but installs nothing, so
    concurrent runners call ``install`` themselves before starting workers.
    """

    def __init__(self, signals: tuple[int, ...] = (signal.SIGINT, signal.SIGTERM)) -> None:
        self._signals = signals
        self._pending: dict[int, Cleanup] = {}
        # Reentrant: the signal handler may interrupt the main thread while it holds the lock.
        self._lock = threading.RLock()
        self._ids = itertools.count()
        self._previous: dict[int, Any] = {}

    @property
    def installed(self) -> bool:
        return bool(self._previous)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def register(self, cleanup: Cleanup) -> int:
        """Track *cleanup* until it is unregistered; returns its handle."""
        self.install()
        with self._lock:
            handle = next(self._ids)
            self._pending[handle] = cleanup
        return handle

    def unregister(self, handle: int) -> None:
        with self._lock:
            self._pending.pop(handle, None)

    def run_pending(self) -> int:
        """Run and forget every pending cleanup. Returns how many were run."""
        with self._lock:
            pending = list(self._pending.values())
            self._pending.clear()
        ran = 0
        for cleanup in pending:
            if cleanup():
                ran += 1
        return ran

    def install(self) -> None:
        if self.installed or threading.current_thread() is not threading.main_thread():
            return
        for sig in self._signals:
            try:
                self._previous[sig] = signal.getsignal(sig)
                signal.signal(sig, self._handle_signal)
            except (ValueError, OSError, RuntimeError):
                self._previous.pop(sig, None)
                continue

    def restore(self) -> None:
        for sig, handler in self._previous.items():
            try:
                signal.signal(sig, handler)
            except (ValueError, OSError, RuntimeError):
                continue
        self._previous.clear()

    def _handle_signal(self, signum: int, frame: Any) -> None:
        try:
            sig_name = signal.Signals(signum).name
        except ValueError:
            sig_name = str(signum)
        logger.warning("Received %s; running %d pending cleanups", sig_name, len(self))
        self.run_pending()
        self.restore()
        raise SystemExit(130 if signum == signal.SIGINT else 143)


interrupt_cleanups = InterruptCleanups()

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

from __future__ import annotations

import logging
import signal
import threading

import pytest

from examples_harness.cleanup import Cleanup, InterruptCleanups


def test_cleanup_runs_once() -> None:
    calls: list[str] = []
    cleanup = Cleanup(lambda: calls.append("x"), "append")

    assert cleanup() is True
    assert cleanup() is False
    assert calls == ["x"]
    assert cleanup.done


def test_cleanup_failure_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    def _boom() -> None:
        raise RuntimeError("connection refused")

    with caplog.at_level(logging.WARNING, logger="examples_harness"):
        assert Cleanup(_boom, "delete namespace ns-1")() is True

    assert "Cleanup 'delete namespace ns-1' failed: connection refused" in caplog.text


def test_concurrent_calls_run_once() -> None:
    calls: list[int] = []
    cleanup = Cleanup(lambda: calls.append(1), "append")
    threads = [threading.Thread(target=cleanup) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert calls == [1]


def test_run_pending_runs_every_registered_cleanup(registry: InterruptCleanups) -> None:
    calls: list[str] = []
    registry.register(Cleanup(lambda: calls.append("a"), "a"))
    handle = registry.register(Cleanup(lambda: calls.append("b"), "b"))
    registry.register(Cleanup(lambda: calls.append("c"), "c"))
    registry.unregister(handle)

    assert len(registry) == 2
    assert registry.run_pending() == 2
    assert sorted(calls) == ["a", "c"]
    assert len(registry) == 0


def test_failing_cleanup_does_not_block_others(registry: InterruptCleanups) -> None:
    calls: list[str] = []

    def _boom() -> None:
        raise RuntimeError("boom")

    registry.register(Cleanup(_boom, "boom"))
    registry.register(Cleanup(lambda: calls.append("after"), "after"))

    assert registry.run_pending() == 2
    assert calls == ["after"]


def test_signal_runs_pending_cleanups_and_exits() -> None:
    registry = InterruptCleanups(signals=(signal.SIGTERM,))
    previous = signal.getsignal(signal.SIGTERM)
    calls: list[str] = []
    try:
        registry.register(Cleanup(lambda: calls.append("ns"), "ns"))
        assert registry.installed
        assert signal.getsignal(signal.SIGTERM) == registry._handle_signal

        with pytest.raises(SystemExit) as excinfo:
            registry._handle_signal(signal.SIGTERM, None)

        assert excinfo.value.code == 143
        assert calls == ["ns"]
        assert not registry.installed
        assert signal.getsignal(signal.SIGTERM) == previous
    finally:
        registry.restore()
        signal.signal(signal.SIGTERM, previous)


def test_registering_off_main_thread_does_not_install() -> None:
    registry = InterruptCleanups(signals=(signal.SIGTERM,))
    worker = threading.Thread(target=lambda: registry.register(Cleanup(lambda: None, "noop")))
    worker.start()
    worker.join()

    assert not registry.installed
    assert len(registry) == 1


def test_signal_while_registry_lock_is_held_still_cleans_up() -> None:
    registry = InterruptCleanups(signals=())
    calls: list[str] = []
    registry.register(Cleanup(lambda: calls.append("ns"), "ns"))

    # Same thread holding the lock, as when the handler interrupts register().
    with registry._lock:
        with pytest.raises(SystemExit):
            registry._handle_signal(signal.SIGINT, None)

    assert calls == ["ns"]
    assert len(registry) == 0


def test_signal_while_cleanup_lock_is_held_still_runs_it() -> None:
    registry = InterruptCleanups(signals=())
    calls: list[str] = []
    cleanup = Cleanup(lambda: calls.append("ns"), "ns")
    registry.register(cleanup)

    with cleanup._lock:
        with pytest.raises(SystemExit) as excinfo:
            registry._handle_signal(signal.SIGINT, None)

    assert excinfo.value.code == 130
    assert calls == ["ns"]

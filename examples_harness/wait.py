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

"""Poll a resource until it succeeds, fails, or runs out of time."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from typing import Any

from tenacity import RetryCallState, Retrying, retry_if_result, stop_after_delay, wait_fixed

from examples_harness import logger
from examples_harness.constants import CONDITION_SUCCEEDED, DEFAULT_POLL_INTERVAL_SECONDS
from examples_harness.models import Observation, ResourceKind, RunState, WaitOutcome

Lookup = Callable[[str], Mapping[str, Any]]
Predicate = Callable[[Mapping[str, Any]], Observation]


# ============================================================================
# Predicates
# ============================================================================

def _succeeded_condition(resource: Mapping[str, Any]) -> Mapping[str, Any] | None:
    conditions = (resource.get("status") or {}).get("conditions") or []
    for condition in conditions:
        if condition.get("type") == CONDITION_SUCCEEDED:
            return condition
    return None


def _describe(condition: Mapping[str, Any]) -> str:
    reason = condition.get("reason") or condition.get("status", "Unknown")
    message = condition.get("message")
    return f"{reason}: {message}" if message else str(reason)


def _classify(resource: Mapping[str, Any]) -> Observation:
    condition = _succeeded_condition(resource)
    if condition is None:
        return Observation(RunState.PENDING, "no Succeeded condition yet")
    status = condition.get("status")
    if status == "True":
        return Observation(RunState.SUCCEEDED, _describe(condition))
    if status == "False":
        return Observation(RunState.FAILED, _describe(condition))
    return Observation(RunState.RUNNING, _describe(condition))


def taskrun_done(resource: Mapping[str, Any]) -> Observation:
    """Classify a TaskRun by its ``Succeeded`` condition."""
    return _classify(resource)


def pipelinerun_done(resource: Mapping[str, Any]) -> Observation:
    """Classify a PipelineRun by its own condition and those of its child TaskRuns.

    A failed child fails the run even if the PipelineRun has not caught up yet;
    success requires every child listed in ``status.taskRuns`` to have succeeded.
    """
    observation = _classify(resource)
    if observation.state is RunState.FAILED:
        return observation

    children = (resource.get("status") or {}).get("taskRuns") or {}
    unfinished: list[str] = []
    for child_name, child in children.items():
        child_obs = _classify(child)
        if child_obs.state is RunState.FAILED:
            return Observation(RunState.FAILED, f"TaskRun {child_name} failed: {child_obs.status}")
        if child_obs.state is not RunState.SUCCEEDED:
            unfinished.append(child_name)

    if observation.state is RunState.SUCCEEDED and unfinished:
        return Observation(RunState.RUNNING, f"waiting for TaskRuns {', '.join(sorted(unfinished))}")
    return observation


_PREDICATES: dict[ResourceKind, Predicate] = {
    ResourceKind.TASKRUN: taskrun_done,
    ResourceKind.PIPELINERUN: pipelinerun_done,
}


def predicate_for(kind: ResourceKind) -> Predicate:
    return _PREDICATES[kind]


# ============================================================================
# Polling loop
# ============================================================================

def wait_for_state(
    lookup: Lookup,
    name: str,
    predicate: Predicate,
    *,
    timeout: float,
    interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    description: str | None = None,
) -> WaitOutcome:
    """Poll *name* until *predicate* reports a terminal state or *timeout* elapses.

    The first lookup happens immediately. A failed observation ends the loop
    at once. Once *timeout* has elapsed the loop stops after the current
    attempt, so the deadline is honoured within one *interval*.

    Args:
        lookup: Returns the current object for a name.
        name: Name of the object to poll.
        predicate: Classifies each observed object.
        timeout: Seconds before giving up.
        interval: Seconds between lookups.
        description: Label used in log messages; defaults to *name*.

    Returns:
        WaitOutcome with state succeeded, failed or timed_out.

    Raises:
        Exception: Whatever *lookup* raises; lookup errors are not retried.
    """
    label = description or name
    start = time.monotonic()

    def _observe() -> Observation:
        observation = predicate(lookup(name))
        logger.debug("%s: %s (%s)", label, observation.state.value, observation.status)
        return observation

    def _timed_out(retry_state: RetryCallState) -> Observation:
        last = retry_state.outcome.result()
        return Observation(RunState.TIMED_OUT, last.status)

    retrying = Retrying(
        stop=stop_after_delay(timeout),
        wait=wait_fixed(interval),
        retry=retry_if_result(lambda observation: not observation.state.terminal),
        retry_error_callback=_timed_out,
    )
    observation = retrying(_observe)
    attempts = retrying.statistics.get("attempt_number", 1)
    outcome = WaitOutcome(
        name=name,
        state=observation.state,
        status=observation.status,
        elapsed=time.monotonic() - start,
        attempts=attempts,
    )
    logger.info("%s finished as %s after %d lookups", label, outcome.state.value, attempts)
    return outcome

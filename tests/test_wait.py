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

import functools

import pytest

from examples_harness.errors import KubectlError, WaitFailed, WaitTimedOut
from examples_harness.models import ResourceKind, RunState, WaitOutcome
from examples_harness.wait import pipelinerun_done, predicate_for, taskrun_done, wait_for_state
from fakes import FakeCluster, run_object


def _lookup(cluster: FakeCluster):
    return functools.partial(cluster.get_resource, "taskrun", namespace="ns-1")


# ============================================================================
# Predicates
# ============================================================================

@pytest.mark.parametrize(
    "status, expected",
    [
        (None, RunState.PENDING),
        ("Unknown", RunState.RUNNING),
        ("True", RunState.SUCCEEDED),
        ("False", RunState.FAILED),
    ],
)
def test_taskrun_classification(status: str | None, expected: RunState) -> None:
    assert taskrun_done(run_object(status, reason="Reason")).state is expected


def test_empty_object_is_pending() -> None:
    assert taskrun_done({}).state is RunState.PENDING


def test_failure_status_carries_reason_and_message() -> None:
    observation = taskrun_done(run_object("False", reason="Failed", message="step build exited 1"))

    assert observation.status == "Failed: step build exited 1"


def test_pipelinerun_waits_for_child_taskruns() -> None:
    resource = run_object(
        "True",
        reason="Succeeded",
        taskRuns={
            "pr-build": run_object("True"),
            "pr-test": run_object("Unknown"),
        },
    )

    observation = pipelinerun_done(resource)

    assert observation.state is RunState.RUNNING
    assert "pr-test" in observation.status


def test_pipelinerun_fails_on_failed_child() -> None:
    resource = run_object("Unknown", taskRuns={"pr-build": run_object("False", reason="Failed")})

    observation = pipelinerun_done(resource)

    assert observation.state is RunState.FAILED
    assert "pr-build" in observation.status


def test_pipelinerun_succeeds_when_all_children_succeeded() -> None:
    resource = run_object("True", reason="Succeeded", taskRuns={"pr-build": run_object("True")})

    assert pipelinerun_done(resource).state is RunState.SUCCEEDED


def test_predicate_for_each_kind() -> None:
    assert predicate_for(ResourceKind.TASKRUN) is taskrun_done
    assert predicate_for(ResourceKind.PIPELINERUN) is pipelinerun_done


# ============================================================================
# Polling loop
# ============================================================================

def test_immediate_success_uses_one_lookup(fake_cluster: FakeCluster) -> None:
    fake_cluster.sequences["tr"] = [run_object("True", reason="Succeeded")]

    outcome = wait_for_state(_lookup(fake_cluster), "tr", taskrun_done, timeout=30, interval=5)

    assert outcome.state is RunState.SUCCEEDED
    assert outcome.attempts == 1
    assert outcome.elapsed < 1
    assert len(fake_cluster.lookups) == 1


def test_polls_through_pending_and_running(fake_cluster: FakeCluster) -> None:
    fake_cluster.sequences["tr"] = [
        run_object(None),
        run_object("Unknown", reason="Running"),
        run_object("True", reason="Succeeded"),
    ]

    outcome = wait_for_state(_lookup(fake_cluster), "tr", taskrun_done, timeout=5, interval=0.01)

    assert outcome.succeeded
    assert outcome.attempts == 3
    assert outcome.status == "Succeeded"


def test_failure_short_circuits(fake_cluster: FakeCluster) -> None:
    fake_cluster.sequences["tr"] = [
        run_object("Unknown", reason="Running"),
        run_object("False", reason="Failed", message="boom"),
    ]

    outcome = wait_for_state(_lookup(fake_cluster), "tr", taskrun_done, timeout=60, interval=0.01)

    assert outcome.state is RunState.FAILED
    assert outcome.status == "Failed: boom"
    assert outcome.elapsed < 5


def test_times_out_with_last_status(fake_cluster: FakeCluster) -> None:
    fake_cluster.sequences["tr"] = [run_object("Unknown", reason="Running", message="step 2 of 3")]

    outcome = wait_for_state(_lookup(fake_cluster), "tr", taskrun_done, timeout=0.3, interval=0.05)

    assert outcome.state is RunState.TIMED_OUT
    assert outcome.status == "Running: step 2 of 3"
    assert 0.3 <= outcome.elapsed < 0.3 + 0.05 + 0.5
    assert outcome.attempts > 1


def test_zero_timeout_still_observes_once(fake_cluster: FakeCluster) -> None:
    fake_cluster.sequences["tr"] = [run_object(None)]

    outcome = wait_for_state(_lookup(fake_cluster), "tr", taskrun_done, timeout=0, interval=1)

    assert outcome.state is RunState.TIMED_OUT
    assert outcome.attempts == 1


def test_lookup_errors_propagate(fake_cluster: FakeCluster) -> None:
    with pytest.raises(KubectlError, match="not found"):
        wait_for_state(_lookup(fake_cluster), "missing", taskrun_done, timeout=5, interval=0.01)


def test_raise_for_state() -> None:
    WaitOutcome("tr", RunState.SUCCEEDED, "ok", 1.0, 1).raise_for_state()

    with pytest.raises(WaitFailed, match="boom"):
        WaitOutcome("tr", RunState.FAILED, "Failed: boom", 1.0, 2).raise_for_state()
    with pytest.raises(WaitTimedOut, match="last status: Running"):
        WaitOutcome("tr", RunState.TIMED_OUT, "Running", 600.0, 600).raise_for_state()

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

"""Value types passed between the harness stages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from examples_harness.errors import ManifestReadFailure, WaitFailed, WaitTimedOut


class ResourceKind(str, Enum):
    """Kinds of resource an example is expected to create."""

    TASKRUN = "taskrun"
    PIPELINERUN = "pipelinerun"


class RunState(str, Enum):
    """Lifecycle of a waited-on resource.

    ``pending -> running -> {succeeded, failed}``; ``timed_out`` is assigned
    by the wait engine, never by a predicate.
    """

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def terminal(self) -> bool:
        return self in (RunState.SUCCEEDED, RunState.FAILED, RunState.TIMED_OUT)


@dataclass(frozen=True)
class Manifest:
    """A manifest file and its raw content.

    Attributes:
        path: Location of the manifest on disk.
        content: Raw bytes as read.
    """

    path: Path
    content: bytes

    @classmethod
    def read(cls, path: Path | str) -> Manifest:
        """Read a manifest from disk.

        Raises:
            ManifestReadFailure: If the file cannot be read.
        """
        path = Path(path)
        try:
            return cls(path=path, content=path.read_bytes())
        except OSError as err:
            raise ManifestReadFailure(path, str(err)) from err


@dataclass(frozen=True)
class CreatedResourceRef:
    """A resource reported as created by the apply tool."""

    kind: str
    name: str


@dataclass(frozen=True)
class Observation:
    """One status lookup, classified by a predicate."""

    state: RunState
    status: str


@dataclass(frozen=True)
class WaitOutcome:
    """Terminal result of polling a resource.

    Attributes:
        name: Name of the polled resource.
        state: One of the terminal run states.
        status: Last observed status text.
        elapsed: Seconds spent polling.
        attempts: Number of lookups performed.
    """

    name: str
    state: RunState
    status: str
    elapsed: float
    attempts: int

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.SUCCEEDED

    def raise_for_state(self) -> None:
        """Raise the matching error unless the resource succeeded.

        Raises:
            WaitFailed: If the resource failed.
            WaitTimedOut: If the deadline elapsed first.
        """
        if self.state is RunState.FAILED:
            raise WaitFailed(self)
        if self.state is RunState.TIMED_OUT:
            raise WaitTimedOut(self)

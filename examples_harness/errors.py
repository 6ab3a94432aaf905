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

"""Exception types raised by the harness.

Exception Hierarchy:
    HarnessError (base)
    ├── CaseSkipped - the case is reported as skipped, not failed
    │   ├── MissingEnvironment - required configuration is absent
    │   └── ResourceNotProduced - the manifest created nothing to wait on
    ├── ManifestReadFailure - manifest could not be read
    ├── DeploymentFailed - the apply tool exited non-zero
    ├── ExtractionAmbiguous - apply output cannot be parsed safely
    ├── WaitFailed - the resource reached a failed state
    ├── WaitTimedOut - the resource did not finish before the deadline
    ├── NamespaceProvisionError - the per-case namespace could not be created
    ├── EnumerationError - the examples tree could not be walked
    ├── KubectlError - a kubectl call failed
    └── CleanupFailure - a teardown step failed (logged, never raised)

Every fatal error stops only the case that raised it.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from examples_harness.models import WaitOutcome


class HarnessError(Exception):
    """Base exception for all harness errors."""


class CaseSkipped(HarnessError):
    """Raised when a case cannot meaningfully run and must be skipped."""


class MissingEnvironment(CaseSkipped):
    """Raised when a required environment variable is not set."""

    def __init__(self, variable: str) -> None:
        self.variable = variable
        super().__init__(f"{variable} is not set")


class ResourceNotProduced(CaseSkipped):
    """Raised when a manifest creates no resource of the expected kind."""

    def __init__(self, path: Path | str, kind: str) -> None:
        self.path = Path(path)
        self.kind = kind
        super().__init__(f"{kind} not created for {path}")


class ManifestReadFailure(HarnessError):
    """Raised when a manifest file cannot be read."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"Error reading file {path}: {reason}")


class DeploymentFailed(HarnessError):
    """Raised when the apply tool fails.

    Attributes:
        namespace: Namespace the manifest was applied to.
        output: Combined stdout/stderr of the tool, verbatim.
        exit_code: Exit status of the tool, or None if it never ran to completion.
    """

    def __init__(self, namespace: str, output: str, exit_code: int | None = None, reason: str = "") -> None:
        self.namespace = namespace
        self.output = output
        self.exit_code = exit_code
        summary = reason or f"apply tool exited with status {exit_code}"
        super().__init__(f"{summary} (namespace {namespace}) Output: {output}")


class ExtractionAmbiguous(HarnessError):
    """Raised when apply output contains creation lines that cannot be trusted."""

    def __init__(self, kind: str, detail: str) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"Failed to get created {kind}: {detail}")


class WaitFailed(HarnessError):
    """Raised when a waited-on resource reaches a failed state."""

    def __init__(self, outcome: WaitOutcome) -> None:
        self.outcome = outcome
        super().__init__(f"{outcome.name} failed after {outcome.elapsed:.1f}s: {outcome.status}")


class WaitTimedOut(HarnessError):
    """Raised when a waited-on resource does not finish before the deadline."""

    def __init__(self, outcome: WaitOutcome) -> None:
        self.outcome = outcome
        super().__init__(
            f"Timed out waiting for {outcome.name} after {outcome.elapsed:.1f}s "
            f"(last status: {outcome.status})"
        )


class NamespaceProvisionError(HarnessError):
    """Raised when the per-case namespace cannot be created."""

    def __init__(self, namespace: str, reason: str) -> None:
        self.namespace = namespace
        super().__init__(f"Failed to provision namespace {namespace}: {reason}")


class EnumerationError(HarnessError):
    """Raised when the examples directory cannot be walked completely."""


class KubectlError(HarnessError):
    """Raised when a kubectl invocation fails.

    Attributes:
        args_list: kubectl arguments that were run.
        stderr: Captured standard error.
    """

    def __init__(self, args: list[str], stderr: str) -> None:
        self.args_list = list(args)
        self.stderr = stderr
        super().__init__(f"kubectl {' '.join(args)} failed: {stderr.strip()[:500]}")


class CleanupFailure(HarnessError):
    """A teardown step failed. Logged by the cleanup machinery, never raised to callers."""

    def __init__(self, description: str, cause: BaseException) -> None:
        self.description = description
        self.cause = cause
        super().__init__(f"Cleanup '{description}' failed: {cause}")

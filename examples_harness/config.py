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

"""Harness configuration, auto-loaded from the process environment."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from examples_harness.constants import (
    DEFAULT_API_GROUP,
    DEFAULT_EXAMPLES_DIR,
    DEFAULT_MAX_WORKERS,
    DEFAULT_NAMESPACE_PREFIX,
    DEFAULT_PIPELINERUN_TIMEOUT_SECONDS,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_TASKRUN_TIMEOUT_SECONDS,
    ENV_EXAMPLES_IGNORES,
    ENV_KO_DOCKER_REPO,
)
from examples_harness.models import ResourceKind


class HarnessConfig(BaseSettings):
    """Example harness configuration, auto-loaded from E2E_* env vars.

    ``KO_DOCKER_REPO`` and ``TEST_EXAMPLES_IGNORES`` keep their historical
    unprefixed names.

    Attributes:
        ko_docker_repo: Registry substituted for the placeholder registry in
            manifests, or None when unset.
        examples_ignore: Regular expression of manifest paths to skip, or None.
        examples_dir: Root directory holding the example manifests.
        apply_tool: Executable invoked as ``<tool> create -n <ns> -f -``.
        api_group: API group of the resources reported by the apply tool.
        namespace_prefix: Prefix of the per-case namespaces.
        poll_interval: Seconds between two status lookups.
        taskrun_timeout: Seconds to wait for a TaskRun to finish.
        pipelinerun_timeout: Seconds to wait for a PipelineRun to finish.
        deploy_timeout: Seconds the apply tool may run, or None for no bound.
        max_workers: Number of example cases run concurrently by ``run_cases``.
    """

    model_config = SettingsConfigDict(env_prefix="E2E_", extra="ignore", populate_by_name=True)

    ko_docker_repo: str | None = Field(default=None, validation_alias=ENV_KO_DOCKER_REPO)
    examples_ignore: str | None = Field(default=None, validation_alias=ENV_EXAMPLES_IGNORES)
    examples_dir: Path = Path(DEFAULT_EXAMPLES_DIR)
    apply_tool: str = "ko"
    api_group: str = DEFAULT_API_GROUP
    namespace_prefix: str = Field(default=DEFAULT_NAMESPACE_PREFIX, pattern=r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, gt=0)
    taskrun_timeout: float = Field(default=DEFAULT_TASKRUN_TIMEOUT_SECONDS, ge=0)
    pipelinerun_timeout: float = Field(default=DEFAULT_PIPELINERUN_TIMEOUT_SECONDS, ge=0)
    deploy_timeout: float | None = Field(default=None, gt=0)
    max_workers: int = Field(default=DEFAULT_MAX_WORKERS, ge=1, le=64)

    def timeout_for(self, kind: ResourceKind) -> float:
        """Return the wait deadline configured for *kind*."""
        if kind is ResourceKind.TASKRUN:
            return self.taskrun_timeout
        return self.pipelinerun_timeout

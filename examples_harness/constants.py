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

"""Constants shared by the harness modules."""

from __future__ import annotations

# -- Environment variables --
ENV_KO_DOCKER_REPO = "KO_DOCKER_REPO"
ENV_EXAMPLES_IGNORES = "TEST_EXAMPLES_IGNORES"

# -- Manifest placeholders --
DEFAULT_KO_DOCKER_REPO = "gcr.io/christiewilson-catfactory"
DEFAULT_MANIFEST_NAMESPACE = "default"

# -- Discovery --
DEFAULT_EXAMPLES_DIR = "examples"
EXAMPLES_DIR_NAME = "examples"
NO_CI_DIR_NAME = "no-ci"
MANIFEST_EXTENSIONS = (".yaml",)
TASKRUNS_DIR_NAME = "taskruns"

# -- Resources --
DEFAULT_API_GROUP = "tekton.dev"
KIND_CLUSTERTASK = "clustertask"
CONDITION_SUCCEEDED = "Succeeded"
DEFAULT_SERVICE_ACCOUNT = "default"
DIAGNOSTIC_KINDS = ("pipelineruns", "taskruns", "pods")

# -- Namespaces --
DEFAULT_NAMESPACE_PREFIX = "arendelle"
MAX_NAMESPACE_LENGTH = 63
NAMESPACE_SUFFIX_LENGTH = 5

# -- Timing (seconds) --
DEFAULT_POLL_INTERVAL_SECONDS = 1.0
DEFAULT_TASKRUN_TIMEOUT_SECONDS = 600.0
DEFAULT_PIPELINERUN_TIMEOUT_SECONDS = 600.0
DEFAULT_KUBECTL_TIMEOUT_SECONDS = 30
SERVICE_ACCOUNT_MAX_RETRIES = 30
SERVICE_ACCOUNT_POLL_INTERVAL_SECONDS = 1

# -- Concurrency --
DEFAULT_MAX_WORKERS = 8

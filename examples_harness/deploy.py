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

"""Apply manifests to the cluster through the ``ko`` binary."""

from __future__ import annotations

import sh

from examples_harness import logger
from examples_harness.errors import DeploymentFailed


def _decode(output: bytes | str | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output


def ko_create(
    content: bytes,
    namespace: str,
    *,
    tool: str = "ko",
    timeout: float | None = None,
) -> str:
    """Run ``<tool> create -n <namespace> -f -`` with *content* on stdin.

    Never retried: whether re-applying is safe is the caller's decision.

    Args:
        content: Manifest bytes to apply.
        namespace: Target namespace.
        tool: Apply executable name or path.
        timeout: Seconds to let the tool run, or None to wait indefinitely.

    Returns:
        Combined stdout and stderr of the tool.

    Raises:
        DeploymentFailed: If the tool is missing, exits non-zero or times out.
    """
    try:
        command = sh.Command(tool)
    except sh.CommandNotFound as err:
        raise DeploymentFailed(namespace, "", reason=f"apply tool '{tool}' not found") from err

    logger.debug("Running %s create -n %s -f -", tool, namespace)
    try:
        result = command(
            "create", "-n", namespace, "-f", "-",
            _in=content,
            _err_to_out=True,
            _decode_errors="replace",
            _timeout=timeout,
        )
    except sh.ErrorReturnCode as err:
        raise DeploymentFailed(namespace, _decode(err.stdout), err.exit_code) from err
    except sh.TimeoutException as err:
        raise DeploymentFailed(
            namespace, "", err.exit_code, reason=f"apply tool timed out after {timeout}s"
        ) from err
    return _decode(result)

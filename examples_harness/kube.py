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

"""kubectl-backed cluster client: status lookups, namespaces and fixtures."""

from __future__ import annotations

import base64
import json
import subprocess
from collections.abc import Iterable, Mapping
from typing import Any

import yaml

from examples_harness import logger
from examples_harness.constants import DEFAULT_KUBECTL_TIMEOUT_SECONDS
from examples_harness.errors import KubectlError


def run_kubectl(
    args: list[str],
    timeout: int = DEFAULT_KUBECTL_TIMEOUT_SECONDS,
    input: str | None = None,
    kubectl: str = "kubectl",
) -> tuple[bool, str, str]:
    """Run a kubectl command via subprocess and return (success, stdout, stderr).

    Uses subprocess instead of sh because callers parse stdout as JSON or YAML
    and need it kept apart from warnings printed on stderr.

    Args:
        args: kubectl arguments (e.g. ``["get", "pods", "-n", "default"]``).
        timeout: Maximum seconds to wait for the command to complete.
        input: Text written to kubectl's stdin, if any.
        kubectl: kubectl executable name or path.

    Returns:
        Tuple of (success, stdout, stderr).
    """
    try:
        result = subprocess.run(
            [kubectl, *args],
            capture_output=True,
            text=True,
            timeout=timeout,
            input=input,
        )
        return result.returncode == 0, result.stdout, result.stderr
    except (subprocess.SubprocessError, OSError) as exc:
        return False, "", str(exc)


class KubectlClient:
    """Thin cluster client over the kubectl CLI.

    Every method raises KubectlError when kubectl reports a failure.
    """

    def __init__(self, kubectl: str = "kubectl", timeout: int = DEFAULT_KUBECTL_TIMEOUT_SECONDS) -> None:
        self.kubectl = kubectl
        self.timeout = timeout

    def _run(self, args: list[str], input: str | None = None) -> str:
        ok, stdout, stderr = run_kubectl(args, timeout=self.timeout, input=input, kubectl=self.kubectl)
        if not ok:
            raise KubectlError(args, stderr)
        return stdout

    # -- Namespaces --

    def create_namespace(self, name: str) -> None:
        self._run(["create", "namespace", name])

    def delete_namespace(self, name: str) -> None:
        """Delete a namespace without waiting for finalizers. Deleting twice is a no-op."""
        self._run(["delete", "namespace", name, "--ignore-not-found", "--wait=false"])

    def service_account_exists(self, namespace: str, name: str) -> bool:
        ok, _, stderr = run_kubectl(
            ["get", "serviceaccount", name, "-n", namespace, "-o", "name"],
            timeout=self.timeout,
            kubectl=self.kubectl,
        )
        if not ok and "NotFound" not in stderr:
            logger.debug("Looking up serviceaccount %s/%s failed: %s", namespace, name, stderr.strip())
        return ok

    # -- Resources --

    def get_resource(self, kind: str, name: str, namespace: str) -> dict[str, Any]:
        """Fetch one object as a dict.

        Args:
            kind: Resource kind (e.g. ``taskrun``).
            name: Object name.
            namespace: Namespace holding the object.

        Returns:
            The object as returned by ``kubectl get -o json``.
        """
        return json.loads(self._run(["get", kind, name, "-n", namespace, "-o", "json"]))

    def delete_resource(self, kind: str, name: str, namespace: str | None = None) -> None:
        """Delete one object; cluster-scoped when *namespace* is None."""
        args = ["delete", kind, name, "--ignore-not-found"]
        if namespace is not None:
            args += ["-n", namespace]
        self._run(args)

    def dump_resources(self, namespace: str, kinds: Iterable[str]) -> str:
        """Return the YAML of every object of *kinds* in *namespace*."""
        return self._run(["get", ",".join(kinds), "-n", namespace, "-o", "yaml"])

    # -- Fixtures --

    def create_object(self, obj: Mapping[str, Any], namespace: str | None = None) -> str:
        """Create an object from its manifest dict.

        Returns:
            kubectl's confirmation line (e.g. ``secret/hw-secret created``).
        """
        args = ["create", "-f", "-"]
        if namespace is not None:
            args += ["-n", namespace]
        return self._run(args, input=yaml.safe_dump(dict(obj), default_flow_style=False)).strip()

    def create_secret(self, namespace: str, name: str, data: Mapping[str, bytes]) -> str:
        encoded = {key: base64.b64encode(value).decode() for key, value in data.items()}
        return self.create_object(
            {
                "apiVersion": "v1",
                "kind": "Secret",
                "metadata": {"name": name, "namespace": namespace},
                "data": encoded,
            },
            namespace,
        )

    def create_config_map(self, namespace: str, name: str, data: Mapping[str, str]) -> str:
        return self.create_object(
            {
                "apiVersion": "v1",
                "kind": "ConfigMap",
                "metadata": {"name": name, "namespace": namespace},
                "data": dict(data),
            },
            namespace,
        )

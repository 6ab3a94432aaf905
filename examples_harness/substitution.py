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

"""Environment substitution for example manifests."""

from __future__ import annotations

import re

from examples_harness.constants import (
    DEFAULT_KO_DOCKER_REPO,
    DEFAULT_MANIFEST_NAMESPACE,
    ENV_KO_DOCKER_REPO,
)
from examples_harness.errors import MissingEnvironment

_REGISTRY_RE = re.compile(re.escape(DEFAULT_KO_DOCKER_REPO).encode())
# Only lines that declare the namespace, e.g. "  namespace: default" or "- namespace: default".
_NAMESPACE_RE = re.compile(
    rb"^(?P<lead>[ \t]*(?:-[ \t]+)?)namespace:[ \t]*"
    + re.escape(DEFAULT_MANIFEST_NAMESPACE).encode()
    + rb"(?P<trail>[ \t]*(?:#.*)?\r?)$",
    re.MULTILINE,
)


def substitute_env(content: bytes, namespace: str, docker_repo: str | None) -> bytes:
    """Point a manifest at the test registry and the case namespace.

    Replaces the placeholder registry with *docker_repo* so images resolve on
    the cluster under test, and rewrites ``namespace: default`` declarations
    so ServiceAccounts and friends land in the case namespace.

    Args:
        content: Raw manifest bytes.
        namespace: Namespace the case runs in.
        docker_repo: Value of ``KO_DOCKER_REPO``, or None if unset.

    Returns:
        The substituted manifest bytes.

    Applying the substitution twice gives the same result, including when
    *docker_repo* itself contains the placeholder registry (a mirror such as
    ``gcr.io/christiewilson-catfactory/mirror``): occurrences that are already
    part of *docker_repo* are left alone.

    Raises:
        MissingEnvironment: If *docker_repo* is None.
    """
    if docker_repo is None:
        raise MissingEnvironment(ENV_KO_DOCKER_REPO)

    repo = docker_repo.encode()
    embedded_at = [m.start() for m in _REGISTRY_RE.finditer(repo)]

    def _registry(match: re.Match[bytes]) -> bytes:
        start = match.start()
        if any(start >= k and content.startswith(repo, start - k) for k in embedded_at):
            return match.group(0)
        return repo

    output = _REGISTRY_RE.sub(_registry, content)
    replacement = namespace.encode()
    return _NAMESPACE_RE.sub(
        lambda m: m.group("lead") + b"namespace: " + replacement + m.group("trail"),
        output,
    )

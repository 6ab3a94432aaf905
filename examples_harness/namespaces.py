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

"""Per-case namespaces: provisioning, teardown and scoped cleanup."""

from __future__ import annotations

import random
import re
import string
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol

from tenacity import RetryError, retry, retry_if_result, stop_after_attempt, wait_fixed

from examples_harness import console, logger
from examples_harness.cleanup import Cleanup, InterruptCleanups, interrupt_cleanups
from examples_harness.constants import (
    DEFAULT_NAMESPACE_PREFIX,
    DEFAULT_SERVICE_ACCOUNT,
    DIAGNOSTIC_KINDS,
    MAX_NAMESPACE_LENGTH,
    NAMESPACE_SUFFIX_LENGTH,
    SERVICE_ACCOUNT_MAX_RETRIES,
    SERVICE_ACCOUNT_POLL_INTERVAL_SECONDS,
)
from examples_harness.errors import CaseSkipped, HarnessError, NamespaceProvisionError

_NAMESPACE_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


class NamespaceClient(Protocol):
    def create_namespace(self, name: str) -> None: ...

    def delete_namespace(self, name: str) -> None: ...

    def service_account_exists(self, namespace: str, name: str) -> bool: ...

    def dump_resources(self, namespace: str, kinds: Iterable[str]) -> str: ...


def generate_namespace_name(prefix: str = DEFAULT_NAMESPACE_PREFIX) -> str:
    """Build a unique, valid namespace name from *prefix* and a random suffix.

    Args:
        prefix: Namespace prefix; truncated if the result would exceed 63 chars.

    Returns:
        Namespace name such as ``arendelle-x7k2p``.
    """
    suffix = "".join(random.choices(_SUFFIX_ALPHABET, k=NAMESPACE_SUFFIX_LENGTH))
    max_prefix = MAX_NAMESPACE_LENGTH - NAMESPACE_SUFFIX_LENGTH - 1
    prefix = prefix[:max_prefix].rstrip("-") or DEFAULT_NAMESPACE_PREFIX
    name = f"{prefix}-{suffix}"
    if not _NAMESPACE_RE.match(name):
        raise ValueError(f"Invalid namespace name '{name}'")
    return name


def _wait_for_service_account(client: NamespaceClient, namespace: str) -> None:
    """Wait until the namespace's default ServiceAccount exists.

    Pods created before the service account controller catches up are
    rejected, so cases must not start until it is there.

    Raises:
        RetryError: If the service account never appears.
    """

    @retry(
        stop=stop_after_attempt(SERVICE_ACCOUNT_MAX_RETRIES),
        wait=wait_fixed(SERVICE_ACCOUNT_POLL_INTERVAL_SECONDS),
        retry=retry_if_result(lambda exists: not exists),
    )
    def _attempt() -> bool:
        return client.service_account_exists(namespace, DEFAULT_SERVICE_ACCOUNT)

    _attempt()


def provision_namespace(client: NamespaceClient, prefix: str = DEFAULT_NAMESPACE_PREFIX) -> str:
    """Create a fresh namespace and wait for it to be usable.

    Args:
        client: Cluster client.
        prefix: Namespace name prefix.

    Returns:
        The new namespace name.

    Raises:
        NamespaceProvisionError: If creation fails or the namespace never
            gets its default ServiceAccount.
    """
    namespace = generate_namespace_name(prefix)
    console.print(f"[yellow]\u2139\ufe0f  Creating namespace {namespace}[/yellow]")
    try:
        client.create_namespace(namespace)
    except HarnessError as err:
        raise NamespaceProvisionError(namespace, str(err)) from err
    try:
        _wait_for_service_account(client, namespace)
    except RetryError as err:
        Cleanup(lambda: client.delete_namespace(namespace), f"delete namespace {namespace}")()
        raise NamespaceProvisionError(
            namespace, f"serviceaccount '{DEFAULT_SERVICE_ACCOUNT}' was never created"
        ) from err
    return namespace


def teardown_namespace(
    client: NamespaceClient,
    namespace: str,
    *,
    dump_kinds: Iterable[str] | None = None,
) -> None:
    """Delete a case namespace, first logging its resources if the case failed.

    Args:
        client: Cluster client.
        namespace: Namespace to delete.
        dump_kinds: Kinds to dump for diagnosis, or None to skip the dump.
    """
    if dump_kinds:
        try:
            logger.error("Resources in failed namespace %s:\n%s",
                         namespace, client.dump_resources(namespace, dump_kinds))
        except HarnessError as err:
            logger.warning("Could not dump resources of %s: %s", namespace, err)
    console.print(f"[yellow]\u2139\ufe0f  Deleting namespace {namespace}[/yellow]")
    client.delete_namespace(namespace)


class NamespaceScope:
    """Cleanups owned by one case, tied to its namespace.

    Every cleanup added here also sits in the interrupt registry until the
    scope closes; both paths call the same Cleanup object, so each runs once.
    """

    def __init__(self, namespace: str, registry: InterruptCleanups) -> None:
        self.namespace = namespace
        self.failed = False
        self._registry = registry
        self._cleanups: list[tuple[int, Cleanup]] = []

    def add_cleanup(self, fn: Callable[[], Any], description: str) -> Cleanup:
        cleanup = Cleanup(fn, description)
        handle = self._registry.register(cleanup)
        self._cleanups.append((handle, cleanup))
        return cleanup

    def close(self) -> None:
        """Run the cleanups newest first, then drop them from the registry."""
        while self._cleanups:
            handle, cleanup = self._cleanups.pop()
            cleanup()
            self._registry.unregister(handle)


@contextmanager
def namespace_scope(
    client: NamespaceClient,
    prefix: str = DEFAULT_NAMESPACE_PREFIX,
    registry: InterruptCleanups = interrupt_cleanups,
    dump_kinds: Iterable[str] = DIAGNOSTIC_KINDS,
) -> Iterator[NamespaceScope]:
    """Provision a namespace for the duration of a case.

    The namespace is deleted when the block exits, whether it returns, raises
    or the process is interrupted. If the block raises anything other than a
    skip, the namespace's resources are logged before deletion.

    Raises:
        NamespaceProvisionError: If the namespace cannot be created.
    """
    namespace = provision_namespace(client, prefix)
    scope = NamespaceScope(namespace, registry)
    kinds = tuple(dump_kinds)
    scope.add_cleanup(
        lambda: teardown_namespace(client, namespace, dump_kinds=kinds if scope.failed else None),
        f"delete namespace {namespace}",
    )
    try:
        yield scope
    except CaseSkipped:
        raise
    except BaseException:
        scope.failed = True
        raise
    finally:
        scope.close()

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

"""Test doubles for the cluster client."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from examples_harness.errors import KubectlError


def condition(status: str, reason: str = "", message: str = "") -> dict[str, Any]:
    return {"type": "Succeeded", "status": status, "reason": reason, "message": message}


def run_object(status: str | None, reason: str = "", message: str = "", **extra: Any) -> dict[str, Any]:
    """Build a TaskRun/PipelineRun dict whose Succeeded condition has *status*."""
    conditions = [] if status is None else [condition(status, reason, message)]
    return {"status": {"conditions": conditions, **extra}}


class FakeCluster:
    """In-memory stand-in for KubectlClient."""

    def __init__(self) -> None:
        self.namespaces: set[str] = set()
        self.created_namespaces: list[str] = []
        self.deleted_namespaces: list[str] = []
        self.deleted_resources: list[tuple[str, str, str | None]] = []
        self.dumped: list[str] = []
        self.lookups: list[tuple[str, str, str]] = []
        self.objects: list[tuple[dict[str, Any], str | None]] = []
        self.sequences: dict[str, list[dict[str, Any]]] = {}
        self.service_account_ready = True
        self.fail_create_namespace = False
        self.fail_delete_namespace = False

    def create_namespace(self, name: str) -> None:
        if self.fail_create_namespace:
            raise KubectlError(["create", "namespace", name], "forbidden")
        self.namespaces.add(name)
        self.created_namespaces.append(name)

    def delete_namespace(self, name: str) -> None:
        self.deleted_namespaces.append(name)
        if self.fail_delete_namespace:
            raise KubectlError(["delete", "namespace", name], "connection refused")
        self.namespaces.discard(name)

    def service_account_exists(self, namespace: str, name: str) -> bool:
        return self.service_account_ready

    def dump_resources(self, namespace: str, kinds: Iterable[str]) -> str:
        self.dumped.append(namespace)
        return f"# {','.join(kinds)} in {namespace}"

    def get_resource(self, kind: str, name: str, namespace: str) -> dict[str, Any]:
        self.lookups.append((kind, name, namespace))
        sequence = self.sequences.get(name)
        if not sequence:
            raise KubectlError(["get", kind, name], f'{kind} "{name}" not found')
        # The last observation repeats forever.
        return sequence.pop(0) if len(sequence) > 1 else sequence[0]

    def delete_resource(self, kind: str, name: str, namespace: str | None = None) -> None:
        self.deleted_resources.append((kind, name, namespace))

    def create_object(self, obj: dict[str, Any], namespace: str | None = None) -> str:
        self.objects.append((obj, namespace))
        return f"{obj['kind'].lower()}/{obj['metadata']['name']} created"



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

"""Orchestration that turns example manifests into isolated test cases."""

from __future__ import annotations

import functools
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from rich.panel import Panel
from rich.table import Table

from examples_harness import console, logger
from examples_harness.cleanup import InterruptCleanups, interrupt_cleanups
from examples_harness.config import HarnessConfig
from examples_harness.constants import KIND_CLUSTERTASK, TASKRUNS_DIR_NAME
from examples_harness.deploy import ko_create
from examples_harness.discovery import find_manifests
from examples_harness.errors import CaseSkipped, ExtractionAmbiguous, HarnessError, ResourceNotProduced
from examples_harness.extraction import find_created_resources
from examples_harness.kube import KubectlClient
from examples_harness.models import CreatedResourceRef, Manifest, ResourceKind, WaitOutcome
from examples_harness.namespaces import namespace_scope
from examples_harness.substitution import substitute_env
from examples_harness.wait import predicate_for, wait_for_state

Deployer = Callable[..., str]


# ============================================================================
# Cases
# ============================================================================

@dataclass(frozen=True)
class ExampleCase:
    """One example manifest and the resource it is expected to create.

    Attributes:
        name: Test name, the manifest path relative to the examples root.
        path: Manifest location.
        kind: Kind of the resource to wait on.
    """

    name: str
    path: Path
    kind: ResourceKind


class CaseStatus(str, Enum):
    PASSED = "PASS"
    FAILED = "FAIL"
    SKIPPED = "SKIP"


@dataclass(frozen=True)
class CaseResult:
    name: str
    path: Path
    status: CaseStatus
    message: str = ""


def kind_for_path(path: Path | str) -> ResourceKind:
    """Manifests under a ``taskruns`` directory create TaskRuns; all others PipelineRuns."""
    if TASKRUNS_DIR_NAME in Path(path).parts[:-1]:
        return ResourceKind.TASKRUN
    return ResourceKind.PIPELINERUN


def case_name(base_dir: Path | str, path: Path | str) -> str:
    """Name a case after its manifest path relative to *base_dir*, without the suffix."""
    path = Path(path)
    try:
        return path.relative_to(base_dir).with_suffix("").as_posix()
    except ValueError:
        return path.as_posix()


def build_cases(config: HarnessConfig) -> list[ExampleCase]:
    """Enumerate manifests under the configured examples directory.

    Raises:
        EnumerationError: If the directory cannot be walked.
    """
    paths = find_manifests(config.examples_dir, ignore=config.examples_ignore)
    return [
        ExampleCase(name=case_name(config.examples_dir, path), path=path, kind=kind_for_path(path))
        for path in paths
    ]


# ============================================================================
# Running a case
# ============================================================================

def _primary_resource(output: str, kind: ResourceKind, path: Path, group: str) -> CreatedResourceRef:
    names = find_created_resources(output, kind.value, group)
    if not names:
        # Some examples only create Tasks or Pipelines and leave nothing to wait on.
        raise ResourceNotProduced(path, kind.value)
    if len(names) > 1:
        raise ExtractionAmbiguous(kind.value, f"expected one, found {', '.join(names)}")
    return CreatedResourceRef(kind=kind.value, name=names[0])


def _execute(
    case: ExampleCase,
    client: KubectlClient,
    config: HarnessConfig,
    deploy: Deployer,
    registry: InterruptCleanups,
) -> WaitOutcome:
    with namespace_scope(client, config.namespace_prefix, registry) as scope:
        manifest = Manifest.read(case.path)
        content = substitute_env(manifest.content, scope.namespace, config.ko_docker_repo)

        console.print(f"[yellow]\u2139\ufe0f  Applying {case.path} to {scope.namespace}[/yellow]")
        output = deploy(content, scope.namespace, tool=config.apply_tool, timeout=config.deploy_timeout)

        ref = _primary_resource(output, case.kind, case.path, config.api_group)

        # Cluster-scoped, so deleting the namespace does not remove them.
        for clustertask in find_created_resources(output, KIND_CLUSTERTASK, config.api_group):
            scope.add_cleanup(
                functools.partial(client.delete_resource, KIND_CLUSTERTASK, clustertask),
                f"delete clustertask {clustertask}",
            )

        console.print(f"[yellow]\u2139\ufe0f  Waiting for {ref.kind} {ref.name}[/yellow]")
        outcome = wait_for_state(
            functools.partial(client.get_resource, ref.kind, namespace=scope.namespace),
            ref.name,
            predicate_for(case.kind),
            timeout=config.timeout_for(case.kind),
            interval=config.poll_interval,
            description=f"{ref.kind}/{ref.name}",
        )
        outcome.raise_for_state()
        console.print(f"[green]\u2705 {ref.kind} {ref.name} succeeded[/green]")
        return outcome


def run_case(
    case: ExampleCase,
    client: KubectlClient,
    config: HarnessConfig,
    *,
    deploy: Deployer = ko_create,
    registry: InterruptCleanups = interrupt_cleanups,
) -> WaitOutcome:
    """Run one example end to end in its own namespace.

    Steps run strictly in order: provision, read, substitute, deploy, extract,
    wait, cleanup.

    Args:
        case: The example to run.
        client: Cluster client used for namespaces, lookups and deletes.
        config: Harness configuration.
        deploy: Apply function, ``ko_create`` unless overridden.
        registry: Interrupt registry the case's cleanups join.

    Returns:
        The successful WaitOutcome.

    Raises:
        CaseSkipped: If the case should be reported as skipped.
        HarnessError: If the case failed.
    """
    try:
        return _execute(case, client, config, deploy, registry)
    except CaseSkipped as exc:
        logger.info("Skipping %s: %s", case.path, exc)
        raise
    except HarnessError as exc:
        logger.error("%s failed: %s", case.path, exc)
        raise


# ============================================================================
# Running many cases
# ============================================================================

def _run_one(case: ExampleCase, client: KubectlClient, config: HarnessConfig, **kwargs) -> CaseResult:
    try:
        run_case(case, client, config, **kwargs)
    except CaseSkipped as exc:
        return CaseResult(case.name, case.path, CaseStatus.SKIPPED, str(exc))
    except HarnessError as exc:
        return CaseResult(case.name, case.path, CaseStatus.FAILED, str(exc))
    except Exception as exc:
        logger.exception("Unexpected error in %s", case.path)
        return CaseResult(case.name, case.path, CaseStatus.FAILED, f"{type(exc).__name__}: {exc}")
    return CaseResult(case.name, case.path, CaseStatus.PASSED)


def run_cases(
    cases: list[ExampleCase],
    client: KubectlClient,
    config: HarnessConfig,
    *,
    registry: InterruptCleanups = interrupt_cleanups,
    **kwargs,
) -> list[CaseResult]:
    """Run cases concurrently, printing each case's output as a clean block.

    A failing case never stops the others. Cases register their cleanups from
    worker threads, so the interrupt handlers are installed here, on the
    calling thread, for the duration of the run. On SIGINT or SIGTERM every
    in-flight case is cleaned up and queued cases are cancelled.

    Args:
        cases: Cases to run.
        client: Cluster client shared by all cases.
        config: Harness configuration (``max_workers`` bounds concurrency).
        registry: Interrupt registry the cases' cleanups join.
        **kwargs: Forwarded to ``run_case``.

    Returns:
        One result per case, in the order of *cases*.
    """
    if not cases:
        return []

    console.print(Panel.fit(f"Running {len(cases)} examples", style="bold blue"))
    results: dict[str, CaseResult] = {}
    outputs: dict[str, str] = {}
    lock = threading.Lock()

    def _run_task(case: ExampleCase) -> None:
        with console.buffered() as buf:
            result = _run_one(case, client, config, registry=registry, **kwargs)
        with lock:
            results[case.name] = result
            outputs[case.name] = buf.getvalue()

    owns_handlers = not registry.installed
    registry.install()
    executor = ThreadPoolExecutor(max_workers=min(config.max_workers, len(cases)))
    try:
        futures = {executor.submit(_run_task, case): case for case in cases}
        for future in as_completed(futures):
            future.result()
            case = futures[future]
            if outputs.get(case.name):
                console.print(outputs[case.name], end="")
    except BaseException:
        # Running cases see their namespace gone and finish on their own.
        executor.shutdown(wait=False, cancel_futures=True)
        raise
    else:
        executor.shutdown(wait=True)
    finally:
        if owns_handlers:
            registry.restore()

    return [results[case.name] for case in cases]


def print_summary(results: list[CaseResult]) -> bool:
    """Print the final summary table. Returns True if no case failed."""
    table = Table(title="Example results")
    table.add_column("Example")
    table.add_column("Result")
    table.add_column("Details", overflow="fold")

    styles = {CaseStatus.PASSED: "green", CaseStatus.FAILED: "red", CaseStatus.SKIPPED: "yellow"}
    for result in results:
        style = styles[result.status]
        table.add_row(result.name, f"[{style}]{result.status.value}[/{style}]", result.message)
    console.print(table)

    failed = [r for r in results if r.status is CaseStatus.FAILED]
    if failed:
        console.print(f"[red]\u274c {len(failed)} of {len(results)} examples failed[/red]")
        return False
    console.print(f"[green]\u2705 All {len(results)} examples passed or were skipped[/green]")
    return True

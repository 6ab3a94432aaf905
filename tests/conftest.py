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

"""Shared fixtures: an in-memory cluster and fast harness settings."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from examples_harness.cleanup import InterruptCleanups
from examples_harness.config import HarnessConfig
from examples_harness.constants import ENV_EXAMPLES_IGNORES, ENV_KO_DOCKER_REPO
from fakes import FakeCluster


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="Run the example manifests against the current kubectl context",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-e2e"):
        return
    skip_e2e = pytest.mark.skip(reason="needs --run-e2e")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


@pytest.fixture
def fake_cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def registry() -> InterruptCleanups:
    """Interrupt registry that never touches the process signal handlers."""
    return InterruptCleanups(signals=())


@pytest.fixture
def harness_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> HarnessConfig:
    monkeypatch.delenv(ENV_KO_DOCKER_REPO, raising=False)
    monkeypatch.delenv(ENV_EXAMPLES_IGNORES, raising=False)
    return HarnessConfig(
        ko_docker_repo="registry.local/e2e",
        examples_ignore=None,
        examples_dir=tmp_path / "examples",
        poll_interval=0.01,
        taskrun_timeout=2,
        pipelinerun_timeout=2,
    )


@pytest.fixture
def make_script(tmp_path: Path):
    """Write an executable shell script and return its path."""

    def _make(name: str, body: str) -> Path:
        path = tmp_path / "bin" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("#!/bin/sh\n" + body)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make

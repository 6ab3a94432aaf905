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

"""Enumerate the example manifests under a directory tree."""

from __future__ import annotations

import os
import re
from pathlib import Path

from examples_harness import logger
from examples_harness.constants import EXAMPLES_DIR_NAME, MANIFEST_EXTENSIONS, NO_CI_DIR_NAME
from examples_harness.errors import EnumerationError


def _compile_ignore(pattern: str | None) -> re.Pattern[str] | None:
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as err:
        raise EnumerationError(f"invalid exclusion pattern {pattern!r}: {err}") from err


def find_manifests(
    root: Path | str,
    *,
    ignore: str | None = None,
    extensions: tuple[str, ...] = MANIFEST_EXTENSIONS,
) -> list[Path]:
    """Walk *root* and return the example manifests to run, sorted.

    ``no-ci`` directories are pruned with everything below them. Directories
    named ``examples`` only group other examples and are walked through,
    never collected themselves.

    Args:
        root: Directory to walk.
        ignore: Regular expression; manifest paths it matches are skipped.
        extensions: File suffixes that mark a manifest.

    Returns:
        Paths of the manifests to run.

    Raises:
        EnumerationError: If any directory cannot be read or *ignore* is not
            a valid regular expression.
    """
    ignore_re = _compile_ignore(ignore)

    def _on_error(err: OSError) -> None:
        raise EnumerationError(f"couldn't walk path {err.filename}: {err.strerror}") from err

    manifests: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        pruned = [d for d in dirnames if d == NO_CI_DIR_NAME]
        for name in pruned:
            logger.info("Pruning %s", Path(dirpath) / name)
        dirnames[:] = sorted(d for d in dirnames if d != NO_CI_DIR_NAME)
        if Path(dirpath).name == EXAMPLES_DIR_NAME:
            logger.debug("Descending into example group %s", dirpath)

        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.suffix not in extensions:
                continue
            if ignore_re is not None and ignore_re.search(path.as_posix()):
                logger.info("Skipping test %s", path)
                continue
            logger.info("Adding test %s", path)
            manifests.append(path)
    return manifests

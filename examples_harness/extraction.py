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

"""Find resources reported as created in apply-tool output.

The apply tool prints one confirmation per object, shaped
``<kind>.<group>/<name> created``, interleaved with build and push logs.
"""

from __future__ import annotations

import re

from examples_harness.constants import DEFAULT_API_GROUP
from examples_harness.errors import ExtractionAmbiguous

_CREATED_LINE_RE = re.compile(
    r"^[ \t]*(?P<kind>[A-Za-z0-9]+)\.(?P<group>[A-Za-z0-9.-]+)/(?P<name>.*?)[ \t]+created[ \t\r]*$",
    re.MULTILINE,
)
_OBJECT_NAME_RE = re.compile(r"^[a-z0-9]([-a-z0-9.]*[a-z0-9])?$")
_MAX_OBJECT_NAME_LENGTH = 253


def find_created_resources(output: str, kind: str, group: str = DEFAULT_API_GROUP) -> list[str]:
    """Return the names of every *kind* object reported as created.

    Args:
        output: Combined apply-tool output.
        kind: Lower-case resource kind (e.g. ``taskrun``).
        group: API group the kind belongs to.

    Returns:
        Distinct names in order of appearance; empty if there are none.

    Raises:
        ExtractionAmbiguous: If a creation line for *kind* carries a name
            that is not a valid object name.
    """
    names: list[str] = []
    for match in _CREATED_LINE_RE.finditer(output):
        if match.group("kind").lower() != kind.lower() or match.group("group") != group:
            continue
        name = match.group("name")
        if len(name) > _MAX_OBJECT_NAME_LENGTH or not _OBJECT_NAME_RE.match(name):
            raise ExtractionAmbiguous(kind, f"malformed creation line {match.group(0).strip()!r}")
        if name not in names:
            names.append(name)
    return names


def get_created_resource(output: str, kind: str, group: str = DEFAULT_API_GROUP) -> str:
    """Return the first *kind* object reported as created, or ``""`` if none."""
    names = find_created_resources(output, kind, group)
    return names[0] if names else ""

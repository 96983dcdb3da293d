# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Container creation request schema and validation.

This module defines the **create schema** - the format of the JSON body
accepted by ``POST /api/containers``.  It is the single source of truth
for the HTTP API (which validates against it), the CLI, and any web
front end that wants to render a create form (``GET /api/schema/create``).

Schema format
-------------
The schema is a JSON object with a ``version`` integer and an ordered
array of ``options``::

    {
        "version": 1,
        "options": [ <option>, ... ]
    }

Option::

    {
        "key": "image",                      // JSON body key
        "type": "string",                    // value type
        "title": "Image",                    // short UI label
        "description": "Image to run ...",   // longer help text
        "required": true                     // optional, default false
    }

Supported ``type`` values:

============ ============================ ==============================
type         Python type                  Notes
============ ============================ ==============================
``string``   ``str``                      empty string counts as omitted
``command``  ``list[str]`` or ``str``     a string is split on spaces
``object``   ``dict[str, str]``           environment variables
``volumes``  ``list[dict]``               ``{source, target, readOnly?}``
============ ============================ ==============================

Data flow
---------
1. The API receives the request body and decodes it as JSON.
2. :func:`parse_create_options`:
   a. Rejects non-object bodies and unknown keys.
   b. Type-checks every value.
   c. Enforces ``required``.
   d. Returns a validated :class:`~.backends.CreateOptions`.
3. The API hands the options to the provisioning pipeline.

Any failure raises :class:`OptionValidationError`, which the API reports
as ``400`` before the engine is contacted.
"""

from __future__ import annotations

import json
from typing import Any

from .backends import CreateOptions, VolumeMount


# =============================================================================
# Schema Definition
# =============================================================================
#
# The ordering of options is significant: it defines the display order
# in UIs.

CREATE_SCHEMA: dict[str, Any] = {
    "version": 1,
    "options": [
        {
            "key": "image",
            "type": "string",
            "title": "Image",
            "description": "Image to create the container from (e.g. node:18)",
            "required": True,
        },
        {
            "key": "name",
            "type": "string",
            "title": "Name",
            "description": "Container name; the engine generates one when omitted",
        },
        {
            "key": "command",
            "type": "command",
            "title": "Command",
            "description": "Command to run, as an argument list or a space-separated string",
        },
        {
            "key": "environment",
            "type": "object",
            "title": "Environment",
            "description": "Environment variables passed to the container",
        },
        {
            "key": "volumes",
            "type": "volumes",
            "title": "Volumes",
            "description": "Host directories to bind into the container",
        },
        {
            "key": "workingDirectory",
            "type": "string",
            "title": "Working Directory",
            "description": "Working directory inside the container",
        },
    ],
}


def get_create_schema_json() -> str:
    """Return the create schema as a compact JSON string."""
    return json.dumps(CREATE_SCHEMA, separators=(",", ":"))


# =============================================================================
# Validation
# =============================================================================

def _build_type_map() -> dict[str, str]:
    """Build a flat dict of option key -> expected type name."""
    return {option["key"]: str(option["type"]) for option in CREATE_SCHEMA["options"]}


_TYPES = _build_type_map()
_REQUIRED = frozenset(
    option["key"] for option in CREATE_SCHEMA["options"] if option.get("required")
)

# Python type expected for each schema type
_TYPE_CHECK: dict[str, type | tuple[type, ...]] = {
    "string": str,
    "command": (list, str),
    "object": dict,
    "volumes": list,
}


class OptionValidationError(Exception):
    """Raised when a create request body fails validation."""


def _parse_command(value: list[Any] | str) -> list[str] | None:
    if isinstance(value, str):
        return value.split(" ") if value else None
    for i, item in enumerate(value):
        if not isinstance(item, str):
            raise OptionValidationError(
                f"command[{i}] must be a string, got {type(item).__name__}"
            )
    return list(value)


def _parse_environment(value: dict[str, Any]) -> dict[str, str]:
    for key, item in value.items():
        if not isinstance(item, str):
            raise OptionValidationError(
                f"environment[{key!r}] must be a string, got {type(item).__name__}"
            )
    return dict(value)


def _parse_volumes(value: list[Any]) -> list[VolumeMount]:
    volumes: list[VolumeMount] = []
    for i, item in enumerate(value):
        if not isinstance(item, dict):
            raise OptionValidationError(
                f"volumes[{i}] must be an object, got {type(item).__name__}"
            )
        source = item.get("source")
        target = item.get("target")
        read_only = item.get("readOnly", False)
        if not isinstance(source, str) or not source:
            raise OptionValidationError(f"volumes[{i}].source must be a non-empty string")
        if not isinstance(target, str) or not target:
            raise OptionValidationError(f"volumes[{i}].target must be a non-empty string")
        if not isinstance(read_only, bool):
            raise OptionValidationError(f"volumes[{i}].readOnly must be boolean")
        volumes.append(VolumeMount(source=source, target=target, read_only=read_only))
    return volumes


def parse_create_options(raw: Any) -> CreateOptions:
    """Parse and validate a create request body into :class:`CreateOptions`.

    - Non-object bodies and unknown keys are rejected.
    - ``null`` and empty strings count as omitted.
    - Type mismatches are rejected.
    - Missing required keys are rejected.

    Args:
        raw: The decoded JSON request body.

    Returns:
        Validated ``CreateOptions`` instance.

    Raises:
        OptionValidationError: On validation failure.
    """
    if not isinstance(raw, dict):
        raise OptionValidationError("Request body must be a JSON object")

    # Reject unknown keys
    unknown = set(raw.keys()) - set(_TYPES.keys())
    if unknown:
        raise OptionValidationError(f"Unknown options: {', '.join(sorted(unknown))}")

    present = {k: v for k, v in raw.items() if v is not None and v != ""}

    # Type-check each value
    for key, value in present.items():
        py_type = _TYPE_CHECK[_TYPES[key]]
        if not isinstance(value, py_type):
            raise OptionValidationError(
                f"Option '{key}' must be {_TYPES[key]}, got {type(value).__name__}"
            )

    for key in sorted(_REQUIRED):
        if key not in present:
            raise OptionValidationError(f"{key.capitalize()} is required")

    return CreateOptions(
        image=present["image"],
        name=present.get("name"),
        command=_parse_command(present["command"]) if "command" in present else None,
        environment=(
            _parse_environment(present["environment"]) if "environment" in present else None
        ),
        volumes=_parse_volumes(present["volumes"]) if "volumes" in present else [],
        working_directory=present.get("workingDirectory"),
    )

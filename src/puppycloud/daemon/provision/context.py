# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Context dataclass passed through provisioning steps."""

from __future__ import annotations

from dataclasses import dataclass

from ..backends import Backend, CreateOptions, InstanceInfo


@dataclass
class ProvisionContext:
    """State shared by the provisioning steps.

    The create step fills in ``instance``; the start step reads it.
    """

    backend: Backend
    options: CreateOptions

    # Built up by pipeline steps
    instance: InstanceInfo | None = None

# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Provision step: start the freshly created container."""

import logging

from .context import ProvisionContext
from . import provision_pipeline

logger = logging.getLogger(__name__)


@provision_pipeline.step(order=300)
async def start_instance(ctx: ProvisionContext) -> None:
    if ctx.instance is None:
        return
    logger.info("Starting container: %s", ctx.instance.id)
    await ctx.backend.start_instance(ctx.instance.id)

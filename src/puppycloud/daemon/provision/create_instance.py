# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Provision step: call the engine API to create the container."""

import logging

from .context import ProvisionContext
from . import provision_pipeline

logger = logging.getLogger(__name__)


@provision_pipeline.step(order=200)
async def create_instance(ctx: ProvisionContext) -> None:
    """Create the container from ``ctx.options``."""
    if ctx.options.name:
        logger.info("Creating container with name: %s", ctx.options.name)
    else:
        logger.info("Creating container from %s", ctx.options.image)
    ctx.instance = await ctx.backend.create_instance(ctx.options)
    logger.info("Container created with ID: %s", ctx.instance.id)

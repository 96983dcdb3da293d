# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Provision step: make sure the image is present locally."""

import logging

from .context import ProvisionContext
from . import provision_pipeline

logger = logging.getLogger(__name__)


@provision_pipeline.step(order=100)
async def pull_image(ctx: ProvisionContext) -> None:
    """Pull the requested image from its registry."""
    logger.info("Pulling image: %s", ctx.options.image)
    await ctx.backend.pull_image(ctx.options.image)
    logger.info("Image pulled: %s", ctx.options.image)

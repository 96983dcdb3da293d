# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Container provisioning pipeline: pull the image, create, then start.

Importing this package registers all steps with the pipeline.
"""

from ..backends import Backend, CreateOptions, InstanceInfo
from ..pipeline import Pipeline
from .context import ProvisionContext

provision_pipeline = Pipeline[ProvisionContext]("provision")

# Import step modules so their decorators register with the pipeline.
from . import pull_image as _  # noqa: F401, E402
from . import create_instance as _  # noqa: F401, E402
from . import start_instance as _  # noqa: F401, E402


async def provision_container(backend: Backend, options: CreateOptions) -> InstanceInfo:
    """Run the provisioning pipeline and return the created instance.

    Raises:
        BackendError: From whichever step failed.  Steps after the
            failing one are not run, and nothing is rolled back.
    """
    ctx = ProvisionContext(backend=backend, options=options)
    await provision_pipeline.run(ctx)
    if ctx.instance is None:
        raise RuntimeError("provision pipeline finished without creating an instance")
    return ctx.instance


__all__ = ["ProvisionContext", "provision_container", "provision_pipeline"]

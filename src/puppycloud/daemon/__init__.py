# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""PuppyCloud daemon: engine client and HTTP API."""

from .. import __version__

__all__ = ["__version__"]

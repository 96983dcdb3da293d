# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""PuppyCloud - container lifecycle control over the engine socket."""

__version__ = "0.1.0"

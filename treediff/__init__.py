# Copyright Red Hat
#
# treediff/__init__.py - Tree diff package initialisation
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Treediff top-level package.
"""
from ._treediff import *  # noqa: F401, F403
from ._treediff import __all__  # noqa: F401

__version__ = "0.1.0"

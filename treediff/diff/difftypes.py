# Copyright Red Hat
#
# treediff/diff/difftypes.py - Tree diff change kinds
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree diff change kinds
"""
from enum import Enum


class ChangeKind(Enum):
    """
    Enum for the classification of a single path.
    """

    ADD = "add"
    MODIFY = "modify"
    REMOVE = "remove"
    EQUAL = "equal"

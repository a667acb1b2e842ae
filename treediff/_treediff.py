# Copyright Red Hat
#
# treediff/_treediff.py - Tree diff global definitions
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level treediff package.
"""
import logging

_log = logging.getLogger("treediff")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Treediff debugging subsystem mask
TREEDIFF_DEBUG_WALK = 1
TREEDIFF_DEBUG_CLASSIFY = 2
TREEDIFF_DEBUG_STORAGE = 4
TREEDIFF_DEBUG_COMMAND = 8
TREEDIFF_DEBUG_ALL = (
    TREEDIFF_DEBUG_WALK
    | TREEDIFF_DEBUG_CLASSIFY
    | TREEDIFF_DEBUG_STORAGE
    | TREEDIFF_DEBUG_COMMAND
)

# Treediff debugging subsystem names
TREEDIFF_SUBSYSTEM_WALK = "treediff.walk"
TREEDIFF_SUBSYSTEM_CLASSIFY = "treediff.classify"
TREEDIFF_SUBSYSTEM_STORAGE = "treediff.storage"
TREEDIFF_SUBSYSTEM_COMMAND = "treediff.command"

_DEBUG_MASK_TO_SUBSYSTEM = {
    TREEDIFF_DEBUG_WALK: TREEDIFF_SUBSYSTEM_WALK,
    TREEDIFF_DEBUG_CLASSIFY: TREEDIFF_SUBSYSTEM_CLASSIFY,
    TREEDIFF_DEBUG_STORAGE: TREEDIFF_SUBSYSTEM_STORAGE,
    TREEDIFF_DEBUG_COMMAND: TREEDIFF_SUBSYSTEM_COMMAND,
}

_debug_subsystems = set()

#: The git object id of the tree with no entries.
EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

#: Path of the synthetic root of every tree snapshot.
ROOT_PATH = "."


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        if record.levelno != logging.DEBUG:
            return True

        if not hasattr(record, "subsystem"):
            return True

        return record.subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


def get_debug_mask():
    """
    Return the current debug mask for the ``treediff`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    treediff_log = logging.getLogger("treediff")

    for handler in treediff_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``treediff`` package.

    :param mask: the logical OR of the ``TREEDIFF_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > TREEDIFF_DEBUG_ALL:
        raise ValueError(f"Invalid treediff debug mask: {mask}")

    enabled_subsystems = []
    for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items():
        if mask & flag:
            enabled_subsystems.append(subsystem_name)

    treediff_log = logging.getLogger("treediff")
    for handler in treediff_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


#
# Treediff exception types
#


class TreeDiffError(Exception):
    """
    Base class for tree diff errors.
    """


class TreeDiffIntegrityError(TreeDiffError):
    """
    A path reached classification with no entry on either side: the
    walker or the backing storage is inconsistent.
    """


class TreeDiffUnsupportedChangeKindError(TreeDiffError):
    """
    A classification outside the supported change kinds was requested.
    """


class TreeDiffNotFoundError(TreeDiffError):
    """
    The requested tree, commit or object was not found.
    """


class TreeDiffContentFetchError(TreeDiffError):
    """
    Content bytes could not be retrieved for an existing entry.
    """


class TreeDiffArgumentError(TreeDiffError):
    """
    An invalid argument or option value was supplied.
    """


__all__ = [
    # Debug logging subsystems
    "TREEDIFF_DEBUG_WALK",
    "TREEDIFF_DEBUG_CLASSIFY",
    "TREEDIFF_DEBUG_STORAGE",
    "TREEDIFF_DEBUG_COMMAND",
    "TREEDIFF_DEBUG_ALL",
    # Debug logging subsystem names
    "TREEDIFF_SUBSYSTEM_WALK",
    "TREEDIFF_SUBSYSTEM_CLASSIFY",
    "TREEDIFF_SUBSYSTEM_STORAGE",
    "TREEDIFF_SUBSYSTEM_COMMAND",
    # Debug logging functions and filter
    "SubsystemFilter",
    "get_debug_mask",
    "set_debug_mask",
    # Well-known values
    "EMPTY_TREE_SHA",
    "ROOT_PATH",
    # Exceptions
    "TreeDiffError",
    "TreeDiffIntegrityError",
    "TreeDiffUnsupportedChangeKindError",
    "TreeDiffNotFoundError",
    "TreeDiffContentFetchError",
    "TreeDiffArgumentError",
]

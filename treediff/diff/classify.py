# Copyright Red Hat
#
# treediff/diff/classify.py - Tree diff change classification
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Per-path change classification and patch building.
"""
from typing import Optional
import logging

from treediff import (
    TREEDIFF_SUBSYSTEM_CLASSIFY,
    TreeDiffIntegrityError,
    TreeDiffUnsupportedChangeKindError,
)
from treediff.storage import Entry

from .changes import Added, Change, ChangeRecord, Modified, Removed
from .difftypes import ChangeKind
from .options import DiffOptions
from .patch import UnifiedPatchBuilder, decode_content

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_classify(msg, *args, **kwargs):
    """A wrapper for classify subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREEDIFF_SUBSYSTEM_CLASSIFY}, **kwargs)


def _content_id(entry: Optional[Entry]) -> Optional[str]:
    return entry.content_id if entry is not None else None


def _read_text(entry: Optional[Entry]) -> str:
    """
    Fetch and decode the content of ``entry``; an absent entry reads as the
    empty text. Storage errors propagate to the caller.
    """
    if entry is None:
        return ""
    return decode_content(entry.content())


class ChangeClassifier:
    """
    Classify a path's pair of entries and build its change.
    """

    def __init__(
        self,
        options: Optional[DiffOptions] = None,
        patch_builder: Optional[UnifiedPatchBuilder] = None,
    ):
        """
        Initialise a new ``ChangeClassifier``.

        :param options: Options controlling patch and record generation.
        :type options: ``Optional[DiffOptions]``
        :param patch_builder: An optional patch generator; by default a
                              ``UnifiedPatchBuilder`` using the configured
                              number of context lines.
        :type patch_builder: ``Optional[UnifiedPatchBuilder]``
        """
        self.options: DiffOptions = options or DiffOptions()
        self.patch_builder: UnifiedPatchBuilder = patch_builder or UnifiedPatchBuilder(
            context_lines=self.options.context_lines
        )

    def classify_kind(
        self, path: str, entry_a: Optional[Entry], entry_b: Optional[Entry]
    ) -> ChangeKind:
        """
        Determine the change kind for ``path`` by comparing content
        identities. No content is read.

        :param path: The path being classified.
        :type path: ``str``
        :param entry_a: The entry in the old tree, if any.
        :type entry_a: ``Optional[Entry]``
        :param entry_b: The entry in the new tree, if any.
        :type entry_b: ``Optional[Entry]``
        :returns: The change kind.
        :rtype: ``ChangeKind``
        :raises: ``TreeDiffIntegrityError`` if neither side has a content
                 identity.
        """
        id_a = _content_id(entry_a)
        id_b = _content_id(entry_b)

        if id_a is None and id_b is None:
            raise TreeDiffIntegrityError(
                f"No entry found on either side while walking '{path}'"
            )

        if id_a is None:
            kind = ChangeKind.ADD
        elif id_b is None:
            kind = ChangeKind.REMOVE
        elif id_a != id_b:
            kind = ChangeKind.MODIFY
        else:
            kind = ChangeKind.EQUAL

        _log_debug_classify("Classified '%s' as %s (%s -> %s)", path, kind.value, id_a, id_b)
        return kind

    def _modes(self, kind: ChangeKind, entry_a: Optional[Entry], entry_b: Optional[Entry]):
        """
        Return the encoded ``(a_mode, b_mode)`` pair for a change of ``kind``.
        """
        mode_a = entry_a.mode if entry_a is not None else None
        mode_b = entry_b.mode if entry_b is not None else None
        a_mode = self.options.format_mode(mode_a)
        b_mode = self.options.format_mode(mode_b)
        if kind != ChangeKind.ADD and self.options.legacy_b_mode and b_mode:
            b_mode = a_mode
        return a_mode, b_mode

    def build_change(
        self,
        path: str,
        kind: ChangeKind,
        entry_a: Optional[Entry],
        entry_b: Optional[Entry],
    ) -> Change:
        """
        Fetch content for ``path`` and build the change of ``kind``.

        :param path: The path being compared.
        :type path: ``str``
        :param kind: The change kind returned by ``classify_kind()``.
        :type kind: ``ChangeKind``
        :param entry_a: The entry in the old tree, if any.
        :type entry_a: ``Optional[Entry]``
        :param entry_b: The entry in the new tree, if any.
        :type entry_b: ``Optional[Entry]``
        :returns: The classified change.
        :rtype: ``Change``
        :raises: ``TreeDiffUnsupportedChangeKindError`` for ``EQUAL`` or any
                 other kind that does not describe a change.
        """
        if kind not in (ChangeKind.ADD, ChangeKind.MODIFY, ChangeKind.REMOVE):
            raise TreeDiffUnsupportedChangeKindError(
                f"{getattr(kind, 'value', kind)} changes are unimplemented ('{path}')"
            )

        diff = self.patch_builder.build(path, _read_text(entry_a), _read_text(entry_b))
        a_mode, b_mode = self._modes(kind, entry_a, entry_b)

        if kind == ChangeKind.ADD:
            return Added(path, diff, a_mode, b_mode)
        if kind == ChangeKind.MODIFY:
            return Modified(path, diff, a_mode, b_mode)
        return Removed(path, diff, a_mode, b_mode)

    def classify(
        self, path: str, entry_a: Optional[Entry], entry_b: Optional[Entry]
    ) -> Optional[ChangeRecord]:
        """
        Classify ``path`` and return its change record.

        :param path: The path being compared.
        :type path: ``str``
        :param entry_a: The entry in the old tree, if any.
        :type entry_a: ``Optional[Entry]``
        :param entry_b: The entry in the new tree, if any.
        :type entry_b: ``Optional[Entry]``
        :returns: The change record, or ``None`` if the path is unchanged.
        :rtype: ``Optional[ChangeRecord]``
        """
        kind = self.classify_kind(path, entry_a, entry_b)
        if kind == ChangeKind.EQUAL:
            return None
        return self.build_change(path, kind, entry_a, entry_b).to_record()

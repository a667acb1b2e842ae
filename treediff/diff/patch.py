# Copyright Red Hat
#
# treediff/diff/patch.py - Tree diff unified patch generation
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Unified diff generation for blob content.

Patches are generated with ``difflib`` and then have the generator's file
header preamble removed: the structured change record already carries the
paths, so only the hunks are kept.
"""
from typing import List, Optional, Sequence
import logging
import difflib

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Marker emitted after a final line that has no terminating newline
NO_NEWLINE_MARKER = "\\ No newline at end of file"

#: Encoding used to decode blob content for diffing; drops a leading BOM
CONTENT_ENCODING = "utf-8-sig"


def decode_content(data: Optional[bytes]) -> str:
    """
    Decode blob ``data`` as UTF-8 text for diffing.

    Absent content is treated as the empty text. Invalid byte sequences are
    replaced with U+FFFD rather than raising.

    :param data: The raw content, or ``None`` if the side is absent.
    :type data: ``Optional[bytes]``
    :returns: The decoded text.
    :rtype: ``str``
    """
    if not data:
        return ""
    return data.decode(CONTENT_ENCODING, errors="replace")


def split_lines(text: str) -> List[str]:
    """
    Split ``text`` into lines, keeping line endings.

    Only ``"\\n"`` separates lines; a carriage return stays part of the
    line content.

    :param text: The text to split.
    :type text: ``str``
    :returns: The list of lines. The final line has no newline if ``text``
              does not end with one.
    :rtype: ``List[str]``
    """
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def strip_preamble(patch_lines: Sequence[str], count: int) -> str:
    """
    Remove the first ``count`` lines of a generated patch.

    :param patch_lines: The patch lines, each including its line ending.
    :type patch_lines: ``Sequence[str]``
    :param count: The number of header lines emitted by the generator.
    :type count: ``int``
    :returns: The remaining patch text.
    :rtype: ``str``
    """
    return "".join(patch_lines[count:])


class UnifiedPatchBuilder:
    """
    Generate unified diff bodies between two text versions of a path.
    """

    #: Number of file header lines ("---"/"+++") preceding the first hunk
    header_lines = 2

    def __init__(self, context_lines: int = 4):
        """
        Initialise a new ``UnifiedPatchBuilder``.

        :param context_lines: Lines of context to include around changes.
        :type context_lines: ``int``
        """
        self.context_lines = context_lines

    def generate(self, path: str, old_text: str, new_text: str) -> List[str]:
        """
        Generate the complete unified diff between ``old_text`` and
        ``new_text``, including file headers.

        :param path: The label used for both sides of the diff.
        :type path: ``str``
        :param old_text: The original text.
        :type old_text: ``str``
        :param new_text: The updated text.
        :type new_text: ``str``
        :returns: A list of patch lines, each ending with a newline. The list
                  is empty if the texts are identical.
        :rtype: ``List[str]``
        """
        patch_lines = []
        for line in difflib.unified_diff(
            split_lines(old_text),
            split_lines(new_text),
            fromfile=path,
            tofile=path,
            n=self.context_lines,
            lineterm="\n",
        ):
            if line.endswith("\n"):
                patch_lines.append(line)
            else:
                patch_lines.append(line + "\n")
                patch_lines.append(NO_NEWLINE_MARKER + "\n")
        return patch_lines

    def build(self, path: str, old_text: str, new_text: str) -> str:
        """
        Build the diff body for ``path`` with the file headers removed.

        :param path: The path being compared.
        :type path: ``str``
        :param old_text: The original text.
        :type old_text: ``str``
        :param new_text: The updated text.
        :type new_text: ``str``
        :returns: The hunks of the unified diff, or the empty string if the
                  texts are identical.
        :rtype: ``str``
        """
        patch_lines = self.generate(path, old_text, new_text)
        _log_debug(
            "Generated %d patch lines for %s (context=%d)",
            len(patch_lines),
            path,
            self.context_lines,
        )
        return strip_preamble(patch_lines, self.header_lines)

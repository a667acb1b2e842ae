# Copyright Red Hat
#
# treediff/command.py - Tree diff command interface
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
"""The ``treediff.command`` module provides both the treediff command line
interface infrastructure, and a simple procedural interface to diff the
commits and trees of a git repository.
"""
from argparse import ArgumentParser
from os.path import basename
import logging
import sys

from treediff import (
    TREEDIFF_DEBUG_WALK,
    TREEDIFF_DEBUG_CLASSIFY,
    TREEDIFF_DEBUG_STORAGE,
    TREEDIFF_DEBUG_COMMAND,
    TREEDIFF_DEBUG_ALL,
    TREEDIFF_SUBSYSTEM_COMMAND,
    SubsystemFilter,
    TreeDiffError,
    set_debug_mask,
    __version__,
)
from treediff.diff import DiffOptions, DiffResults, TreeDiffer
from treediff.diff.options import MODE_FORMATS
from treediff.storage import GitTreeStore, commit_tree_refs, open_repository

DIFF_FORMATS = DiffResults.DIFF_FORMATS

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_command(msg, *args, **kwargs):
    """A wrapper for command subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREEDIFF_SUBSYSTEM_COMMAND}, **kwargs)


_DEFAULT_LOG_LEVEL = logging.WARNING
_CONSOLE_HANDLER = None


def diff_commit(repo_path, commit, options=None):
    """
    Diff ``commit`` against its first parent, or against the empty tree if
    it is a root commit.

    :param repo_path: Path to the git repository.
    :param commit: A commit id or reference name (for example ``HEAD``).
    :param options: Optional ``DiffOptions`` for the comparison.
    :returns: A ``DiffResults`` object.
    """
    repo = open_repository(repo_path)
    try:
        tree_a, tree_b = commit_tree_refs(repo, commit)
        _log_debug_command("Resolved %s to trees %s..%s", commit, tree_a, tree_b)
        differ = TreeDiffer(GitTreeStore.from_repo(repo), options)
        return differ.diff_trees(tree_a, tree_b)
    finally:
        repo.close()


def diff_tree_refs(repo_path, tree_a, tree_b, options=None):
    """
    Diff the trees ``tree_a`` and ``tree_b`` in the repository at
    ``repo_path``.

    :param repo_path: Path to the git repository.
    :param tree_a: The first (old) tree, commit or tag id.
    :param tree_b: The second (new) tree, commit or tag id.
    :param options: Optional ``DiffOptions`` for the comparison.
    :returns: A ``DiffResults`` object.
    """
    repo = open_repository(repo_path)
    try:
        differ = TreeDiffer(GitTreeStore.from_repo(repo), options)
        return differ.diff_trees(tree_a, tree_b)
    finally:
        repo.close()


def print_results(results, output_format="json", pretty=False):
    """
    Print diff ``results`` to stdout in ``output_format``.

    :param results: The ``DiffResults`` to print.
    :param output_format: One of ``DIFF_FORMATS``.
    :param pretty: Indent JSON output.
    """
    if output_format == "paths":
        out = "\n".join(results.paths())
    elif output_format == "diff":
        out = results.diff()
    elif output_format == "summary":
        out = results.summary()
    else:
        out = results.json(pretty=pretty)
    if out:
        print(out)


def _check_format_args(cmd_args):
    if cmd_args.pretty and cmd_args.output_format != "json":
        _log_error("Option --pretty only supported with --format=json")
        return False
    return True


def _diff_cmd(cmd_args):
    """
    Diff commit command handler.

    :param cmd_args: Command line arguments for the command
    :returns: integer status code returned from ``main()``
    """
    if not _check_format_args(cmd_args):
        return 1
    options = DiffOptions.from_cmd_args(cmd_args)
    results = diff_commit(cmd_args.repo, cmd_args.commit, options)
    print_results(results, cmd_args.output_format, cmd_args.pretty)
    return 0


def _trees_cmd(cmd_args):
    """
    Diff trees command handler.

    :param cmd_args: Command line arguments for the command
    :returns: integer status code returned from ``main()``
    """
    if not _check_format_args(cmd_args):
        return 1
    options = DiffOptions.from_cmd_args(cmd_args)
    results = diff_tree_refs(cmd_args.repo, cmd_args.tree_a, cmd_args.tree_b, options)
    print_results(results, cmd_args.output_format, cmd_args.pretty)
    return 0


def setup_logging(cmd_args):
    """
    Set up treediff logging.
    """
    # pylint: disable=global-statement
    global _CONSOLE_HANDLER
    level = _DEFAULT_LOG_LEVEL
    if cmd_args.verbose and cmd_args.verbose > 1:
        level = logging.DEBUG
    elif cmd_args.verbose and cmd_args.verbose > 0:
        level = logging.INFO

    treediff_log = logging.getLogger("treediff")
    formatter = logging.Formatter("%(levelname)s - %(message)s")
    treediff_log.setLevel(level)
    if treediff_log.hasHandlers():
        treediff_log.handlers.clear()

    _treediff_subsystem_filter = SubsystemFilter("treediff")

    _CONSOLE_HANDLER = logging.StreamHandler(sys.stderr)
    _CONSOLE_HANDLER.setLevel(level)
    _CONSOLE_HANDLER.setFormatter(formatter)
    _CONSOLE_HANDLER.addFilter(_treediff_subsystem_filter)

    treediff_log.addHandler(_CONSOLE_HANDLER)


def shutdown_logging():
    """
    Shut down treediff logging.
    """
    logging.shutdown()


def set_debug(debug_arg):
    """
    Set debugging mask from command line argument.
    """
    if not debug_arg:
        return

    mask_map = {
        "walk": TREEDIFF_DEBUG_WALK,
        "classify": TREEDIFF_DEBUG_CLASSIFY,
        "storage": TREEDIFF_DEBUG_STORAGE,
        "command": TREEDIFF_DEBUG_COMMAND,
        "all": TREEDIFF_DEBUG_ALL,
    }

    mask = 0
    for name in debug_arg.split(","):
        if name not in mask_map:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= mask_map[name]
    set_debug_mask(mask)


def _add_diff_args(parser):
    parser.add_argument(
        "-U",
        "--unified",
        dest="context_lines",
        metavar="LINES",
        type=int,
        help="Number of context lines to include around each change",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        dest="max_workers",
        metavar="JOBS",
        type=int,
        help="Number of threads used to read content and build patches",
    )
    parser.add_argument(
        "--b-mode-from-new",
        dest="legacy_b_mode",
        action="store_false",
        default=None,
        help="Report b_mode from the new entry for modified and removed files",
    )
    parser.add_argument(
        "--mode-format",
        choices=MODE_FORMATS,
        help="Encoding of the a_mode and b_mode fields",
    )
    parser.add_argument(
        "-o",
        "--format",
        dest="output_format",
        choices=DIFF_FORMATS,
        default="json",
        help="Output format for the diff results",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Indent JSON output",
    )


DIFF_CMD = "diff"
TREES_CMD = "trees"


def main(args):
    """
    Main entry point for treediff.
    """
    parser = ArgumentParser(description="Git tree diff", prog=basename(args[0]))

    # Global arguments
    parser.add_argument(
        "-d",
        "--debug",
        metavar="DEBUGOPTS",
        type=str,
        help="A list of debug options to enable",
    )
    parser.add_argument("-v", "--verbose", help="Enable verbose output", action="count")
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        help="Report the version number of treediff",
        version=__version__,
    )
    parser.add_argument(
        "-r",
        "--repo",
        metavar="PATH",
        default=".",
        help="Path to the git repository (default: current directory)",
    )
    subparser = parser.add_subparsers(dest="command", help="Command")

    diff_parser = subparser.add_parser(
        DIFF_CMD, help="Show the changes made by a commit"
    )
    diff_parser.add_argument(
        "commit",
        metavar="COMMIT",
        nargs="?",
        default="HEAD",
        help="The commit to diff against its first parent (default: HEAD)",
    )
    _add_diff_args(diff_parser)
    diff_parser.set_defaults(func=_diff_cmd)

    trees_parser = subparser.add_parser(TREES_CMD, help="Show the changes between two trees")
    trees_parser.add_argument("tree_a", metavar="TREE_A", help="The old tree")
    trees_parser.add_argument("tree_b", metavar="TREE_B", help="The new tree")
    _add_diff_args(trees_parser)
    trees_parser.set_defaults(func=_trees_cmd)

    cmd_args = parser.parse_args(args[1:])

    status = 1

    try:
        set_debug(cmd_args.debug)
    except ValueError as err:
        print(err)
        parser.print_help()
        return status

    setup_logging(cmd_args)

    _log_debug_command("Parsed %s", " ".join(args[1:]))

    if "func" not in cmd_args:
        parser.print_help()
        return status

    if cmd_args.debug:
        status = cmd_args.func(cmd_args)
    else:
        try:
            status = cmd_args.func(cmd_args)
        except KeyboardInterrupt:  # pragma: no cover
            _log_info("Exiting on user cancel")
        except TreeDiffError as err:
            _log_error("Command failed: %s", err)

    shutdown_logging()
    return status


def console_main():
    """
    Console script entry point.
    """
    sys.exit(main(sys.argv))


# vim: set et ts=4 sw=4 :

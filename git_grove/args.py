"""Command-line argument parsing for git-grove."""

import argparse
from typing import List, Optional

from git_grove.__version__ import __version__
from git_grove.models.workspace import FetchMode


def _add_path(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default="",
        help="Tree path, relative node path or directory (default: current directory)",
    )


def _add_recursive(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-r", "--recursive", action="store_true", help="Include all descendants")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-grove",
        description="Manage a tree of git repositories as one workspace",
        epilog="The workspace is found by walking up from the current directory to the "
        "outermost grove.yaml, or set with --workspace / GIT_GROVE_WORKSPACE.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--debug", action="store_true", help="Show debug information for troubleshooting")
    parser.add_argument("--version", action="version", version=f"git-grove {__version__}")
    parser.add_argument("-w", "--workspace", help="Workspace root directory")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    init_parser = subparsers.add_parser("init", help="Create a workspace in a directory")
    init_parser.add_argument("name", nargs="?", help="Workspace name (default: directory name)")
    init_parser.add_argument("--directory", default=".", help="Directory to initialize (default: .)")
    init_parser.add_argument("--repos-dir", help="Directory holding the repositories (default: repos)")

    add_parser = subparsers.add_parser("add", help="Add a repository under the current node")
    add_parser.add_argument("url", help="Repository URL")
    add_parser.add_argument("--name", help="Node name (default: derived from the URL)")
    add_parser.add_argument(
        "--fetch",
        choices=[mode.value for mode in FetchMode],
        default=FetchMode.AUTO.value,
        help="When to clone: eager, lazy or auto (default: auto)",
    )
    add_parser.add_argument("--lazy", action="store_true", help="Shortcut for --fetch lazy")
    add_parser.add_argument("--branch", help="Branch to check out when cloning")
    add_parser.add_argument("--parent", help="Tree path of the parent node (default: current node)")

    remove_parser = subparsers.add_parser("remove", help="Remove a node, its subtree and its directory")
    remove_parser.add_argument("name", help="Child of the current node or tree path")
    remove_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    clone_parser = subparsers.add_parser("clone", help="Clone repositories that are not on disk yet")
    _add_path(clone_parser)
    _add_recursive(clone_parser)
    clone_parser.add_argument("--include-lazy", action="store_true", help="Also clone lazy repositories")

    status_parser = subparsers.add_parser(
        "status", help="Show git status (at the root or a config reference: of its direct children)"
    )
    _add_path(status_parser)
    _add_recursive(status_parser)
    status_parser.add_argument("--files", action="store_true", help="List changed files of every repository")

    pull_parser = subparsers.add_parser("pull", help="Pull changes")
    _add_path(pull_parser)
    _add_recursive(pull_parser)
    pull_parser.add_argument("--force", action="store_true", help="Discard local changes and reset to upstream")
    pull_parser.add_argument("--include-lazy", action="store_true", help="Clone lazy repositories first")

    push_parser = subparsers.add_parser("push", help="Push changes")
    _add_path(push_parser)
    _add_recursive(push_parser)

    commit_parser = subparsers.add_parser("commit", help="Stage and commit all changes")
    _add_path(commit_parser)
    _add_recursive(commit_parser)
    commit_parser.add_argument("-m", "--message", required=True, help="Commit message")

    fetch_parser = subparsers.add_parser("fetch", help="Fetch from the remote")
    _add_path(fetch_parser)
    _add_recursive(fetch_parser)

    list_parser = subparsers.add_parser("list", aliases=["ls"], help="List child nodes with their clone state")
    _add_path(list_parser)
    _add_recursive(list_parser)

    tree_parser = subparsers.add_parser("tree", help="Show the workspace tree")
    _add_path(tree_parser)
    tree_parser.add_argument(
        "-d", "--depth",
        type=int,
        default=0,
        help="Maximum depth to display (default: 0, unlimited)",
    )

    path_parser = subparsers.add_parser("path", help="Print the directory of a node")
    _add_path(path_parser)
    path_parser.add_argument("--ensure", action="store_true", help="Clone the node first if needed")
    path_parser.add_argument(
        "--relative", action="store_true", help="Print the position in the tree instead of the directory"
    )

    subparsers.add_parser("current", help="Print the tree path of the current directory")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)

"""Command-line interface for git-grove"""

import argparse
import os
import signal
import sys
import threading
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.prompt import Confirm

from .args import parse_args
from .config import Config
from .core.manager import WorkspaceManager
from .exceptions import GitGroveError
from .logging_config import setup_logging
from .models.git_status import AddOptions
from .models.results import OperationSummary
from .models.workspace import FetchMode
from .services.display_service import DisplayService
from .services.git_service import GitService

console = Console()


def _finish(summary: OperationSummary, display: DisplayService, recursive: bool) -> int:
    if recursive or summary.failures:
        display.display_summary(summary)
    return 0 if summary.ok else 1


def _report(summary: OperationSummary, display: DisplayService, recursive: bool, verb: str) -> int:
    """One line for a single repository, the summary when several nodes were visited."""
    if not recursive and summary.succeeded_paths == [summary.start_path]:
        console.print(f"[green]{verb} {summary.start_path}[/green]")
        return 0
    return _finish(summary, display, recursive=True)


def cmd_init(manager: WorkspaceManager, args: argparse.Namespace, display: DisplayService) -> int:
    document = manager.init_workspace(args.directory, args.name, args.repos_dir)
    console.print(f"[green]Initialized workspace in {document.parent}[/green]")
    return 0


def cmd_add(manager: WorkspaceManager, args: argparse.Namespace, display: DisplayService) -> int:
    fetch = FetchMode.LAZY if args.lazy else FetchMode(args.fetch)
    node = manager.add(args.url, AddOptions(name=args.name, fetch=fetch, branch=args.branch, parent=args.parent))
    state = "cloned" if node.is_cloned else ("lazy" if node.is_lazy else "not cloned")
    console.print(f"[green]Added {node.path}[/green] ({state})")
    return 0


def cmd_remove(manager: WorkspaceManager, args: argparse.Namespace, display: DisplayService) -> int:
    if not (args.yes or manager.config.assume_yes):
        if not sys.stdin.isatty():
            console.print("[red]Refusing to remove without confirmation; pass --yes[/red]")
            return 1
        if not Confirm.ask(f"Remove '{args.name}' and delete its directory?", console=console):
            console.print("Cancelled")
            return 1
    node = manager.remove(args.name)
    console.print(f"[green]Removed {node.path}[/green]")
    return 0


def cmd_clone(manager: WorkspaceManager, args: argparse.Namespace, display: DisplayService) -> int:
    summary = manager.clone_repos(args.path, recursive=args.recursive, include_lazy=args.include_lazy)
    return _finish(summary, display, recursive=True)


def cmd_status(manager: WorkspaceManager, args: argparse.Namespace, display: DisplayService) -> int:
    summary = manager.status_node(args.path, recursive=args.recursive)
    display.display_status(summary, show_files=args.files)
    return 0 if summary.ok else 1


def cmd_pull(manager: WorkspaceManager, args: argparse.Namespace, display: DisplayService) -> int:
    summary = manager.pull_node_with_options(
        args.path, recursive=args.recursive, force=args.force, include_lazy=args.include_lazy
    )
    return _report(summary, display, args.recursive, "Pulled")


def cmd_push(manager: WorkspaceManager, args: argparse.Namespace, display: DisplayService) -> int:
    summary = manager.push_node(args.path, recursive=args.recursive)
    return _report(summary, display, args.recursive, "Pushed")


def cmd_commit(manager: WorkspaceManager, args: argparse.Namespace, display: DisplayService) -> int:
    summary = manager.commit_node(args.path, args.message, recursive=args.recursive)
    return _report(summary, display, args.recursive, "Committed")


def cmd_fetch(manager: WorkspaceManager, args: argparse.Namespace, display: DisplayService) -> int:
    summary = manager.fetch_node(args.path, recursive=args.recursive)
    return _finish(summary, display, args.recursive)


def cmd_list(manager: WorkspaceManager, args: argparse.Namespace, display: DisplayService) -> int:
    display.display_children(manager.list_children(args.path), recursive=args.recursive)
    return 0


def cmd_tree(manager: WorkspaceManager, args: argparse.Namespace, display: DisplayService) -> int:
    if args.depth < 0:
        raise ValueError(f"depth must be 0 or positive, got {args.depth}")
    display.display_tree(manager.tree_at(args.path), max_depth=args.depth or None)
    return 0


def cmd_path(manager: WorkspaceManager, args: argparse.Namespace, display: DisplayService) -> int:
    directory = manager.resolve_path(args.path, ensure=args.ensure)
    # Plain print so the output can be used in shell substitutions
    if args.relative:
        print(manager.resolve_node(args.path).path)
    else:
        print(directory)
    return 0


def cmd_current(manager: WorkspaceManager, args: argparse.Namespace, display: DisplayService) -> int:
    print(manager.get_tree_path(os.getcwd()))
    return 0


COMMANDS: Dict[str, Callable[[WorkspaceManager, argparse.Namespace, DisplayService], int]] = {
    "init": cmd_init,
    "add": cmd_add,
    "remove": cmd_remove,
    "clone": cmd_clone,
    "status": cmd_status,
    "pull": cmd_pull,
    "push": cmd_push,
    "commit": cmd_commit,
    "fetch": cmd_fetch,
    "list": cmd_list,
    "ls": cmd_list,
    "tree": cmd_tree,
    "path": cmd_path,
    "current": cmd_current,
}


def _install_interrupt_handler(cancel_event: threading.Event, git_service: Optional[GitService] = None):
    """First Ctrl-C stops after the current repository, a second one aborts."""
    def handler(signum, frame):
        if cancel_event.is_set():
            raise KeyboardInterrupt
        cancel_event.set()
        if git_service is not None and git_service.in_git_operation:
            console.print("\n[yellow]Interrupted! Waiting for current Git operation to complete (Ctrl-C again to abort)...[/yellow]")
        else:
            console.print("\n[yellow]Interrupted! Stopping before the next repository (Ctrl-C again to abort)...[/yellow]")

    try:
        return signal.signal(signal.SIGINT, handler)
    except ValueError:
        # Not on the main thread
        return None


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = None
    previous_handler = None
    try:
        parsed_args = parse_args(argv)
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

        config = Config(
            workspace=parsed_args.workspace,
            verbose=parsed_args.verbose,
            debug=parsed_args.debug,
            force=getattr(parsed_args, "force", False),
            include_lazy=getattr(parsed_args, "include_lazy", False),
            assume_yes=getattr(parsed_args, "yes", False),
        )

        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        display = DisplayService(console, verbose=parsed_args.verbose)
        cancel_event = threading.Event()

        if parsed_args.command == "init":
            manager = WorkspaceManager(config)
        else:
            manager = WorkspaceManager.from_directory(config=config, cancel_event=cancel_event)
            previous_handler = _install_interrupt_handler(cancel_event, manager.git)

        return COMMANDS[parsed_args.command](manager, parsed_args, display)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except (GitGroveError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)


if __name__ == "__main__":
    sys.exit(main())

"""Command line interface for deadwood."""

import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from deadwood import __version__
from deadwood.git import BranchPruner, GitError, GitRunner

app = typer.Typer(help="Prune local git branches that are merged and gone from the remote")
console = Console()

ACCEPT_ANSWERS = ("y", "s")


def configure_logging(verbose: bool) -> None:
    """Send log records through rich, at DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )
    logging.getLogger("deadwood").setLevel(logging.DEBUG if verbose else logging.WARNING)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"deadwood {__version__}")
        raise typer.Exit()


def confirm(count: int) -> bool:
    """Ask the operator to confirm deletion. Accepts y or s, case-insensitive."""
    try:
        answer = console.input(f"\n[red]Delete these {count} branch(es)? \\[y/N][/red] ")
    except EOFError:
        answer = ""
    return answer.strip().lower() in ACCEPT_ANSWERS


def fail(err: GitError) -> NoReturn:
    """Report a git failure and exit non-zero."""
    console.print(f"[red]Error:[/red] {err}")
    if err.stderr:
        console.print(err.stderr, markup=False, highlight=False)
    console.print("[red]Are you inside a git repository?[/red]")
    raise typer.Exit(code=1) from err


@app.command()
def prune(
    delete: bool = typer.Option(False, "--delete", help="Delete the stale branches after confirmation"),
    path: Annotated[Path, typer.Option(help="Path to git repository")] = Path("."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every git command that runs"),
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
) -> None:
    """List merged local branches whose remote branch is gone, and optionally delete them."""
    configure_logging(verbose)
    pruner = BranchPruner(GitRunner(path))

    console.print("[cyan]--- Checking for stale git branches ---[/cyan]")
    try:
        console.print("Syncing with remote (git fetch --prune)...")
        pruner.sync()
        main_branch = pruner.detect_main_branch()
        console.print(f"Main branch: [yellow]{main_branch}[/yellow]")
        stale = pruner.find_stale_branches(main_branch)
    except GitError as err:
        fail(err)

    if not stale:
        console.print(
            Panel(
                "[green]No stale branches found ✨[/green]",
                style="green",
                padding=(0, 2),
                expand=False,
            )
        )
        return

    console.print(f"\n[yellow]Found {len(stale)} stale branch(es) (merged and gone from remote):[/yellow]")
    for branch_name in stale:
        console.print(f"  {branch_name}", markup=False, highlight=False)

    if not delete:
        console.print("\n[cyan]Dry run. Run again with --delete to remove them.[/cyan]")
        return

    if not confirm(len(stale)):
        console.print("\n[yellow]Operation cancelled[/yellow]")
        return

    console.print("Deleting branches...")
    report = pruner.delete_branches(stale)
    for branch_name in stale:
        if branch_name in report.failed:
            console.print(f"  [red]✗ Failed to delete:[/red] {branch_name}")
            console.print(f"    {report.failed[branch_name]}", markup=False, highlight=False)
        else:
            console.print(f"  [green]✓ Deleted:[/green] {branch_name}")

    style = "green" if not report.failures else "yellow"
    console.print(f"\n[{style}]Cleanup finished: {report.succeeded} deleted, {report.failures} failed[/{style}]")


if __name__ == "__main__":
    app()

"""CLI output helpers.

Console instances, the spinner used around long-running steps, and the
success and error printers shared by the commands.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

# Console instances for stdout and stderr
console = Console()
error_console = Console(stderr=True)


@contextmanager
def with_spinner(message: str) -> Iterator[None]:
    """Simple spinner context manager for CLI operations."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(message, total=None)
        yield


def echo(message: str) -> None:
    """Print a plain progress line."""
    console.print(message, markup=False, highlight=False)


def print_success(message: str) -> None:
    console.print(f"[green]{message}[/green]")


def print_next_steps(app_name: str) -> None:
    """Print the hint shown after an application was created."""
    console.print()
    console.print("[bold]Next steps:[/bold]")
    console.print(f"  cd {app_name}", markup=False, highlight=False)


def print_error(message: str, suggestion: Optional[str] = None) -> None:
    """Print an error message to stderr, with an optional suggestion."""
    error_console.print(f"[red bold]Error:[/red bold] {escape(message)}", highlight=False)
    if suggestion:
        error_console.print(f"[cyan]Suggestion:[/cyan] {escape(suggestion)}", highlight=False)

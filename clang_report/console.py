"""Progress and diagnostic messages, written to stderr with click.

A ``Console`` is created once by the CLI and passed to every stage that
reports progress, so stdout stays reserved for the JSON report.
"""

import click


class Console:
    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose

    def step(self, message: str) -> None:
        click.echo(f"Step : {message}", err=True)

    def info(self, message: str) -> None:
        click.echo(message, err=True)

    def detail(self, message: str) -> None:
        """Only shown with --verbose."""
        if self.verbose:
            click.echo(f"[verbose] {message}", err=True)

    def warning(self, message: str) -> None:
        click.echo(f"WARNING : {message}", err=True)

    def error(self, message: str) -> None:
        click.echo(f"ERROR : {message}", err=True)

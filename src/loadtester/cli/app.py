"""Main Typer application, entry point for the ``loadtester`` CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer
from typer.core import TyperCommand

from loadtester.cli.run import run_cmd

if TYPE_CHECKING:
    import click

# One-letter flags that take a value. Click parses these as short
# options, so ``-n=10`` would otherwise yield the value ``"=10"``.
SHORT_VALUE_FLAGS = frozenset({"-n", "-c"})


def split_short_equals(args: list[str]) -> list[str]:
    """Rewrite ``-n=10`` as ``-n 10`` for the one-letter value flags.

    Arguments after ``--`` are passed through unchanged.
    """
    result: list[str] = []
    for index, arg in enumerate(args):
        if arg == "--":
            result.extend(args[index:])
            break
        flag, sep, value = arg.partition("=")
        if sep and flag in SHORT_VALUE_FLAGS:
            result.extend([flag, value])
        else:
            result.append(arg)
    return result


class LoadTesterCommand(TyperCommand):
    """Accepts ``-flag=value`` for every flag, one-letter ones included."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        return super().parse_args(ctx, split_short_equals(args))


app = typer.Typer(
    name="loadtester",
    help="Concurrent HTTP load generator.",
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(
    cls=LoadTesterCommand,
    help="Send requests to a URL concurrently and report throughput.",
)(run_cmd)

"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import typer

from relkit.core.result import Err, Result
from relkit.output.errors import print_release_error, release_error_exit_code
from relkit.release.errors import ReleaseError

if TYPE_CHECKING:
    from relkit.release.context import ReleaseContext


T = TypeVar("T")


def exit_on_error[T](result: Result[T, ReleaseError], ctx: ReleaseContext) -> T:
    """Return the value, or print the failure and exit with its code.

    Replaces the pattern:
        match result:
            case Err(e):
                print_release_error(e, ctx.console)
                raise typer.Exit(code=release_error_exit_code(e))
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        print_release_error(result.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(result.error))
    return result.value

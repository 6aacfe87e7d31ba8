from __future__ import annotations

import os
from pathlib import Path

import typer

from relkit import __version__
from relkit.cli.commands.bump_pre import bump_pre
from relkit.cli.commands.doctor import doctor
from relkit.cli.commands.publish import publish_central, publish_local, publish_portal
from relkit.cli.commands.tag_and_publish import (
    tag_and_publish_pre_release,
    tag_and_publish_release,
)
from relkit.cli.context import CONFIG_ENV, ROOT_ENV
from relkit.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(doctor)
app.command("bump-pre")(bump_pre)
app.command("publish-local")(publish_local)
app.command("publish-portal")(publish_portal)
app.command("publish-central")(publish_central)
app.command("tag-and-publish-pre-release")(tag_and_publish_pre_release)
app.command("tag-and-publish-release")(tag_and_publish_release)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Repository checkout to release (default: current directory)",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Path to relkit.toml (default: <root>/relkit.toml)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if root is not None:
        try:
            resolved = root.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --root: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not resolved.is_dir():
            typer.echo(f"error: --root '{resolved}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[ROOT_ENV] = str(resolved)

    if config is not None:
        os.environ[CONFIG_ENV] = str(config.expanduser().resolve())


def main() -> None:
    app()

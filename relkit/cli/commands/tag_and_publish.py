from __future__ import annotations

from enum import StrEnum
from typing import cast

import typer

from relkit.cli.commands._helpers import exit_on_error
from relkit.cli.context import build_context
from relkit.core.errors import ErrorCode
from relkit.release.model import BumpKind, ReleaseWorkflowOptions
from relkit.release.workflow import create_workflow


class Bump(StrEnum):
    major = "major"
    minor = "minor"
    patch = "patch"


def tag_and_publish_pre_release(
    dry_run: bool = typer.Option(
        False, "--dry-run", envvar="RELKIT_DRY_RUN", help="Print actions without executing"
    ),
    no_push: bool = typer.Option(
        False, "--no-push", envvar="RELKIT_NO_PUSH", help="Commit and tag locally only"
    ),
    skip_publish: bool = typer.Option(
        False, "--skip-publish", envvar="RELKIT_SKIP_PUBLISH", help="Tag without publishing"
    ),
) -> None:
    """Bump to the next pre-release, commit, tag, publish and push."""
    ctx = build_context()
    ctx.console.header("Tag and publish pre-release")

    options = ReleaseWorkflowOptions(dry_run=dry_run, no_push=no_push, skip_publish=skip_publish)
    exit_on_error(create_workflow(ctx, options).tag_and_publish_pre_release(), ctx)


def tag_and_publish_release(
    version: str | None = typer.Option(
        None, "--version", envvar="RELKIT_VERSION", help="Target stable version (x.y.z)"
    ),
    bump: Bump | None = typer.Option(
        None, "--bump", help="Derive the target from the current version: major/minor/patch"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", envvar="RELKIT_DRY_RUN", help="Print actions without executing"
    ),
    no_push: bool = typer.Option(
        False, "--no-push", envvar="RELKIT_NO_PUSH", help="Commit and tag locally only"
    ),
    skip_publish: bool = typer.Option(
        False, "--skip-publish", envvar="RELKIT_SKIP_PUBLISH", help="Tag without publishing"
    ),
) -> None:
    """Set a stable version, commit, tag, publish and push."""
    if version is not None and bump is not None:
        typer.echo("error: --version and --bump are mutually exclusive", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    ctx = build_context()
    ctx.console.header("Tag and publish release")

    options = ReleaseWorkflowOptions(
        dry_run=dry_run,
        no_push=no_push,
        skip_publish=skip_publish,
        version=version,
        bump=cast(BumpKind, bump.value) if bump is not None else None,
    )
    exit_on_error(create_workflow(ctx, options).tag_and_publish_release(), ctx)

from __future__ import annotations

import typer

from relkit.cli.commands._helpers import exit_on_error
from relkit.cli.context import build_context
from relkit.release.model import ReleaseWorkflowOptions
from relkit.release.workflow import create_workflow


def bump_pre(
    dry_run: bool = typer.Option(
        False, "--dry-run", envvar="RELKIT_DRY_RUN", help="Print actions without executing"
    ),
    no_push: bool = typer.Option(
        False, "--no-push", envvar="RELKIT_NO_PUSH", help="Accepted for symmetry; bump-pre never pushes"
    ),
    skip_publish: bool = typer.Option(
        False,
        "--skip-publish",
        envvar="RELKIT_SKIP_PUBLISH",
        help="Accepted for symmetry; bump-pre never publishes",
    ),
) -> None:
    """Advance to the next pre-release version and commit it (no tag)."""
    ctx = build_context()
    ctx.console.header("Bump pre-release")

    options = ReleaseWorkflowOptions(dry_run=dry_run, no_push=no_push, skip_publish=skip_publish)
    exit_on_error(create_workflow(ctx, options).bump_pre(), ctx)

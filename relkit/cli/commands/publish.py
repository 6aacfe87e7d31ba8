from __future__ import annotations

import typer

from relkit.cli.commands._helpers import exit_on_error
from relkit.cli.context import build_context
from relkit.release.model import PublishDestination, ReleaseWorkflowOptions
from relkit.release.workflow import create_workflow


def _publish(destination: PublishDestination, *, dry_run: bool) -> None:
    ctx = build_context()
    ctx.console.header(f"Publish: {destination.label}")

    workflow = create_workflow(ctx, ReleaseWorkflowOptions(dry_run=dry_run))
    exit_on_error(workflow.publish(destination), ctx)


def publish_local(
    dry_run: bool = typer.Option(
        False, "--dry-run", envvar="RELKIT_DRY_RUN", help="Print the command without executing"
    ),
) -> None:
    """Publish the current version to the local Maven repository."""
    _publish(PublishDestination.LOCAL, dry_run=dry_run)


def publish_portal(
    dry_run: bool = typer.Option(
        False, "--dry-run", envvar="RELKIT_DRY_RUN", help="Print the command without executing"
    ),
) -> None:
    """Publish the current version to the Gradle Plugin Portal."""
    _publish(PublishDestination.PORTAL, dry_run=dry_run)


def publish_central(
    dry_run: bool = typer.Option(
        False, "--dry-run", envvar="RELKIT_DRY_RUN", help="Print the command without executing"
    ),
) -> None:
    """Publish the current version to Maven Central."""
    _publish(PublishDestination.CENTRAL, dry_run=dry_run)

from __future__ import annotations

from relkit.cli.commands._helpers import exit_on_error
from relkit.cli.context import build_context
from relkit.output.console import Style
from relkit.release.model import ReleaseWorkflowOptions
from relkit.release.workflow import create_workflow


def doctor() -> None:
    """Check the 1Password CLI, its session and every publishing secret."""
    ctx = build_context()
    ctx.console.print(f"root: {ctx.root}", Style.DIM)
    ctx.console.header("Doctor")

    workflow = create_workflow(ctx, ReleaseWorkflowOptions())
    exit_on_error(workflow.doctor(), ctx)

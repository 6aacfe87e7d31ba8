from __future__ import annotations

import shlex
from collections.abc import Sequence
from typing import Protocol

from relkit.core.result import Err, Ok, Result
from relkit.git.repository import GitError, Repository
from relkit.output.console import ConsoleProtocol
from relkit.release.errors import DirtyWorkingTree, ReleaseError, VcsCommandFailed


class VcsGateway(Protocol):
    """Source-control operations needed by the release workflow."""

    def ensure_clean(self) -> Result[None, ReleaseError]: ...

    def commit(self, files: Sequence[str], message: str) -> Result[None, ReleaseError]: ...

    def tag(self, name: str, message: str) -> Result[None, ReleaseError]: ...

    def push(self, remote: str, ref: str) -> Result[None, ReleaseError]: ...


class GitVcsGateway:
    """VcsGateway over a git checkout.

    With `dry_run`, mutating commands are echoed to the console and never
    executed; the status query still runs because it changes nothing.
    """

    def __init__(self, repo: Repository, *, console: ConsoleProtocol, dry_run: bool) -> None:
        self._repo = repo
        self._console = console
        self._dry_run = dry_run

    def ensure_clean(self) -> Result[None, ReleaseError]:
        result = self._repo.status_porcelain()
        if isinstance(result, Err):
            return Err(_failed(result.error))
        if result.value:
            return Err(DirtyWorkingTree(entries=result.value))
        return Ok(None)

    def commit(self, files: Sequence[str], message: str) -> Result[None, ReleaseError]:
        if self._dry_run:
            self._echo(["git", "add", *files])
            self._echo(["git", "commit", "-m", message])
            return Ok(None)

        added = self._repo.add(files)
        if isinstance(added, Err):
            return Err(_failed(added.error))
        committed = self._repo.commit(message)
        if isinstance(committed, Err):
            return Err(_failed(committed.error))
        return Ok(None)

    def tag(self, name: str, message: str) -> Result[None, ReleaseError]:
        if self._dry_run:
            self._echo(["git", "tag", "-a", name, "-m", message])
            return Ok(None)

        result = self._repo.tag_annotated(name, message)
        if isinstance(result, Err):
            return Err(_failed(result.error))
        return Ok(None)

    def push(self, remote: str, ref: str) -> Result[None, ReleaseError]:
        if self._dry_run:
            self._echo(["git", "push", remote, ref])
            return Ok(None)

        result = self._repo.push(remote, ref)
        if isinstance(result, Err):
            return Err(_failed(result.error))
        return Ok(None)

    def _echo(self, cmd: list[str]) -> None:
        self._console.dry_run(shlex.join(cmd))


def _failed(error: GitError) -> VcsCommandFailed:
    return VcsCommandFailed(command=error.command, output=error.message)

"""Git repository abstraction.

Thin wrappers over the git CLI for the handful of commands a release needs.
Every method blocks until git exits and returns a Result.

Usage:
    repo = Repository(Path("/path/to/checkout"))

    match repo.status_porcelain():
        case Ok(entries):
            print("clean" if not entries else f"{len(entries)} changes")
        case Err(e):
            print(f"{e.command}: {e.message}")
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from relkit.core.result import Err, Ok, Result
from relkit.platform.process import ProcessError
from relkit.platform.process import run as run_process

__all__ = ["GitError", "Repository"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command line that failed (e.g. "git push origin HEAD")
        message: Combined git output, verbatim
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """A git working tree.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path, env: Mapping[str, str] | None = None) -> None:
        self.path = path
        self._env = env

    def status_porcelain(self) -> Result[tuple[str, ...], GitError]:
        """Run `git status --porcelain`; one entry per changed path."""
        result = self._run(["status", "--porcelain"])
        match result:
            case Err(e):
                return Err(self._error(["status", "--porcelain"], e))
            case Ok(stdout):
                if not stdout:
                    return Ok(())
                return Ok(tuple(line for line in stdout.splitlines() if line) or (stdout,))

    def add(self, paths: Sequence[str]) -> Result[None, GitError]:
        return self._run_unit(["add", *paths])

    def commit(self, message: str) -> Result[None, GitError]:
        return self._run_unit(["commit", "-m", message])

    def tag_annotated(self, name: str, message: str) -> Result[None, GitError]:
        return self._run_unit(["tag", "-a", name, "-m", message])

    def push(self, remote: str, ref: str) -> Result[None, GitError]:
        return self._run_unit(["push", remote, ref])

    def _run_unit(self, args: list[str]) -> Result[None, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(self._error(args, result.error))
        return Ok(None)

    def _error(self, args: list[str], e: ProcessError) -> GitError:
        return GitError(
            command=" ".join(["git", *args]),
            message=e.output,
            returncode=e.returncode,
        )

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return run_process(["git", *args], cwd=self.path, env=self._env)

from __future__ import annotations

from pathlib import Path

import pytest

from relkit.core.result import Err, Ok, Result
from relkit.git import repository as repo_mod
from relkit.git.repository import Repository
from relkit.output.console import MockConsole
from relkit.platform.process import ProcessError
from relkit.release.errors import DirtyWorkingTree, VcsCommandFailed
from relkit.release.vcs import GitVcsGateway


def _patch_git(
    monkeypatch: pytest.MonkeyPatch,
    *,
    status: str = "",
    fail_on: str | None = None,
) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_run(
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        del cwd, env, timeout
        calls.append(cmd)
        if fail_on is not None and cmd[1] == fail_on:
            return Err(ProcessError(tuple(cmd), 1, "", f"fatal: {fail_on} failed"))
        if cmd[1] == "status":
            return Ok(status)
        return Ok("")

    monkeypatch.setattr(repo_mod, "run_process", fake_run)
    return calls


def _gateway(tmp_path: Path, *, dry_run: bool) -> tuple[GitVcsGateway, MockConsole]:
    console = MockConsole()
    return GitVcsGateway(Repository(tmp_path), console=console, dry_run=dry_run), console


def test_ensure_clean_passes_on_empty_status(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _patch_git(monkeypatch, status="")
    vcs, _ = _gateway(tmp_path, dry_run=False)

    assert vcs.ensure_clean() == Ok(None)


def test_ensure_clean_fails_on_any_output(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _patch_git(monkeypatch, status="?? scratch.txt\n")
    vcs, _ = _gateway(tmp_path, dry_run=False)

    assert vcs.ensure_clean() == Err(DirtyWorkingTree(entries=("?? scratch.txt",)))


def test_ensure_clean_runs_in_dry_run(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _patch_git(monkeypatch, status=" M build.gradle.kts\n")
    vcs, _ = _gateway(tmp_path, dry_run=True)

    assert isinstance(vcs.ensure_clean(), Err)
    assert calls == [["git", "status", "--porcelain"]]


def test_commit_adds_then_commits(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _patch_git(monkeypatch)
    vcs, _ = _gateway(tmp_path, dry_run=False)

    assert vcs.commit(["plugin/build.gradle.kts"], "chore: bump version to 0.2.0") == Ok(None)
    assert calls == [
        ["git", "add", "plugin/build.gradle.kts"],
        ["git", "commit", "-m", "chore: bump version to 0.2.0"],
    ]


def test_failure_stops_and_maps_error(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _patch_git(monkeypatch, fail_on="add")
    vcs, _ = _gateway(tmp_path, dry_run=False)

    result = vcs.commit(["plugin/build.gradle.kts"], "chore: bump version to 0.2.0")

    assert result == Err(
        VcsCommandFailed(command="git add plugin/build.gradle.kts", output="fatal: add failed")
    )
    assert len(calls) == 1


def test_dry_run_echoes_without_running(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _patch_git(monkeypatch)
    vcs, console = _gateway(tmp_path, dry_run=True)

    assert vcs.commit(["plugin/build.gradle.kts"], "chore: bump version to 1.0.0") == Ok(None)
    assert vcs.tag("v1.0.0", "Release 1.0.0") == Ok(None)
    assert vcs.push("origin", "HEAD") == Ok(None)

    assert calls == []
    assert console.dry_runs == [
        "git add plugin/build.gradle.kts",
        "git commit -m 'chore: bump version to 1.0.0'",
        "git tag -a v1.0.0 -m 'Release 1.0.0'",
        "git push origin HEAD",
    ]

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from relkit.cli.app import app
from relkit.cli.context import CONFIG_ENV, ROOT_ENV, build_context
from relkit.core.config import ReleaseConfig
from relkit.core.result import Err, Ok, Result
from relkit.git import repository as repo_mod
from relkit.output.console import MockConsole
from relkit.platform.process import ProcessError
from relkit.release import publish as publish_mod
from relkit.release import secrets as secrets_mod
from relkit.release.context import ReleaseContext

DESCRIPTOR = """\
group = "io.github.example"
version = "{version}"

gradlePlugin {{
    plugins {{
        create("release") {{
            id = "io.github.example.release"
        }}
    }}
}}
"""

Responder = Callable[[list[str]], Result[str, ProcessError]]


def _ok(_: list[str]) -> Result[str, ProcessError]:
    return Ok("")


def _fail(cmd: list[str], output: str = "boom") -> Result[str, ProcessError]:
    return Err(ProcessError(command=tuple(cmd), returncode=1, stdout="", stderr=output))


class Env:
    """Descriptor on disk, MockConsole context and recorded subprocess calls."""

    def __init__(
        self,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
        *,
        command_module: object,
        version: str = "0.1.0",
        respond: Responder = _ok,
    ) -> None:
        descriptor = tmp_path / "plugin" / "build.gradle.kts"
        descriptor.parent.mkdir(parents=True)
        descriptor.write_text(DESCRIPTOR.format(version=version), encoding="utf-8")
        self.descriptor = descriptor

        self.console = MockConsole()
        self.ctx = ReleaseContext(
            root=tmp_path,
            env={"HOME": "/home/dev"},
            config=ReleaseConfig(),
            console=self.console,
        )
        monkeypatch.setattr(command_module, "build_context", lambda: self.ctx)

        self.calls: list[list[str]] = []

        def fake_run(
            cmd: list[str],
            cwd: Path,
            env: Mapping[str, str] | None = None,
            *,
            timeout: float | None = None,
        ) -> Result[str, ProcessError]:
            del cwd, env, timeout
            self.calls.append(cmd)
            return respond(cmd)

        for module in (repo_mod, secrets_mod, publish_mod):
            monkeypatch.setattr(module, "run_process", fake_run)


def _exit_code(fn: Callable[[], None]) -> int:
    with pytest.raises(typer.Exit) as exc_info:
        fn()
    return exc_info.value.exit_code


# =============================================================================
# tag-and-publish-release
# =============================================================================


def test_release_same_version_exits_before_git(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    import relkit.cli.commands.tag_and_publish as cmd

    env = Env(monkeypatch, tmp_path, command_module=cmd)

    code = _exit_code(
        lambda: cmd.tag_and_publish_release(
            version="0.1.0", bump=None, dry_run=True, no_push=False, skip_publish=False
        )
    )

    assert code == 1
    assert "error: Version is already 0.1.0" in env.console.messages
    assert env.calls == []


def test_release_version_and_bump_are_exclusive(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    import relkit.cli.commands.tag_and_publish as cmd

    def no_context() -> ReleaseContext:
        raise AssertionError("context must not be built")

    monkeypatch.setattr(cmd, "build_context", no_context)

    code = _exit_code(
        lambda: cmd.tag_and_publish_release(
            version="1.0.0", bump=cmd.Bump.minor, dry_run=False, no_push=False, skip_publish=False
        )
    )

    assert code == 1
    assert "mutually exclusive" in capsys.readouterr().err


def test_release_bump_choice(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    import relkit.cli.commands.tag_and_publish as cmd

    env = Env(monkeypatch, tmp_path, command_module=cmd, version="0.1.0-alpha.2")

    cmd.tag_and_publish_release(
        version=None, bump=cmd.Bump.minor, dry_run=True, no_push=False, skip_publish=False
    )

    assert "info: Version bump: 0.1.0-alpha.2 -> 0.2.0" in env.console.messages
    assert env.calls == [["git", "status", "--porcelain"]]


def test_pre_release_dirty_tree_exits_vcs_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    import relkit.cli.commands.tag_and_publish as cmd

    def respond(argv: list[str]) -> Result[str, ProcessError]:
        return Ok(" M README.md\n") if argv[:2] == ["git", "status"] else Ok("")

    env = Env(monkeypatch, tmp_path, command_module=cmd, respond=respond)

    code = _exit_code(
        lambda: cmd.tag_and_publish_pre_release(dry_run=False, no_push=False, skip_publish=True)
    )

    assert code == 3
    assert "   M README.md" in env.console.messages
    assert env.calls == [["git", "status", "--porcelain"]]


# =============================================================================
# bump-pre / publish-* / doctor
# =============================================================================


def test_bump_pre_commits_descriptor(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    import relkit.cli.commands.bump_pre as cmd

    env = Env(monkeypatch, tmp_path, command_module=cmd, version="0.1.0-alpha.3")

    cmd.bump_pre(dry_run=False, no_push=False, skip_publish=False)

    assert 'version = "0.1.0-alpha.4"' in env.descriptor.read_text(encoding="utf-8")
    assert env.calls == [
        ["git", "status", "--porcelain"],
        ["git", "add", "plugin/build.gradle.kts"],
        ["git", "commit", "-m", "chore: bump version to 0.1.0-alpha.4"],
    ]


def test_publish_local_runs_task(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    import relkit.cli.commands.publish as cmd

    env = Env(monkeypatch, tmp_path, command_module=cmd)

    cmd.publish_local(dry_run=False)

    assert env.calls == [["./gradlew", ":plugin:publishToMavenLocal"]]
    assert env.console.messages[0] == "Publish: Maven local"
    assert any(m.startswith("PATH local: /home/dev/.m2/repository/") for m in env.console.messages)


def test_publish_portal_failure_exits_publish_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    import relkit.cli.commands.publish as cmd

    def respond(argv: list[str]) -> Result[str, ProcessError]:
        if argv[0] == "op" and argv[1] == "read":
            return Ok("s3cr3t\n")
        if argv[0] == "./gradlew":
            return _fail(argv, "Invalid credentials s3cr3t")
        return Ok("")

    env = Env(monkeypatch, tmp_path, command_module=cmd, respond=respond)

    code = _exit_code(lambda: cmd.publish_portal(dry_run=False))

    assert code == 4
    assert "error: Gradle Plugin Portal publish failed" in env.console.messages
    assert "hint: Invalid credentials ***" in env.console.messages
    assert "s3cr3t" not in env.console.text


def test_doctor_without_vault_cli_exits_env_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    import relkit.cli.commands.doctor as cmd

    def respond(argv: list[str]) -> Result[str, ProcessError]:
        return _fail(argv, "op: command not found")

    env = Env(monkeypatch, tmp_path, command_module=cmd, respond=respond)

    code = _exit_code(cmd.doctor)

    assert code == 2
    assert "error: 1Password CLI ('op') not found" in env.console.messages
    assert env.calls == [["op", "--version"]]


# =============================================================================
# Context
# =============================================================================


def test_build_context_uses_defaults_without_config(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv(ROOT_ENV, str(tmp_path))
    monkeypatch.delenv(CONFIG_ENV, raising=False)

    ctx = build_context()

    assert ctx.root == tmp_path
    assert ctx.config == ReleaseConfig()
    assert ctx.env[ROOT_ENV] == str(tmp_path)


def test_build_context_reads_root_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "relkit.toml").write_text('[git]\nremote = "upstream"\n', encoding="utf-8")
    monkeypatch.setenv(ROOT_ENV, str(tmp_path))
    monkeypatch.delenv(CONFIG_ENV, raising=False)

    assert build_context().config.git.remote == "upstream"


def test_build_context_invalid_config_exits_env_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "relkit.toml").write_text("[git\n", encoding="utf-8")
    monkeypatch.setenv(ROOT_ENV, str(tmp_path))
    monkeypatch.delenv(CONFIG_ENV, raising=False)

    code = _exit_code(lambda: build_context())

    assert code == 2
    assert "Invalid config relkit.toml" in capsys.readouterr().out


def test_build_context_explicit_config_must_exist(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv(ROOT_ENV, str(tmp_path))
    monkeypatch.setenv(CONFIG_ENV, str(tmp_path / "missing.toml"))

    assert _exit_code(lambda: build_context()) == 2


# =============================================================================
# App wiring
# =============================================================================


runner = CliRunner()


def test_app_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for name in (
        "doctor",
        "bump-pre",
        "publish-local",
        "publish-portal",
        "publish-central",
        "tag-and-publish-pre-release",
        "tag-and-publish-release",
    ):
        assert name in result.output


def test_app_rejects_missing_root(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--root", str(tmp_path / "nope"), "doctor"])

    assert result.exit_code == 2


def test_app_dry_run_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    descriptor = tmp_path / "plugin" / "build.gradle.kts"
    descriptor.parent.mkdir(parents=True)
    descriptor.write_text(DESCRIPTOR.format(version="0.4.0"), encoding="utf-8")

    calls: list[list[str]] = []

    def fake_run(
        cmd: list[str],
        cwd: Path,
        env: Mapping[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        calls.append(cmd)
        return Ok("")

    monkeypatch.setattr(publish_mod, "run_process", fake_run)
    monkeypatch.setenv(ROOT_ENV, str(tmp_path))
    monkeypatch.delenv(CONFIG_ENV, raising=False)

    result = runner.invoke(app, ["publish-local"], env={"RELKIT_DRY_RUN": "1"})

    assert result.exit_code == 0, result.output
    assert "[dry-run] ./gradlew :plugin:publishToMavenLocal" in result.output
    assert calls == []

"""Publish task invocation.

Each destination maps to one build-tool task. Secrets reach the task either
as `-P<name>=<value>` arguments or as environment variables of the child
process; they are never written to disk, and every line shown to the operator
has them replaced with `***`.
"""

from __future__ import annotations

import shlex
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from relkit.core.config import BuildConfig
from relkit.core.result import Err, Ok, Result
from relkit.output.console import ConsoleProtocol, Style
from relkit.platform.process import run as run_process
from relkit.release.config import (
    CENTRAL_INJECTIONS,
    PORTAL_INJECTIONS,
    SECRET_MASK,
    InjectionKind,
)
from relkit.release.errors import PublishFailed, ReleaseError
from relkit.release.model import PublishDestination


@dataclass(frozen=True, slots=True)
class SecretInjection:
    key: str
    kind: InjectionKind
    name: str


@dataclass(frozen=True, slots=True)
class DestinationSpec:
    destination: PublishDestination
    task: str
    extra_args: tuple[str, ...] = ()
    injections: tuple[SecretInjection, ...] = ()

    @property
    def required_keys(self) -> tuple[str, ...]:
        return tuple(i.key for i in self.injections)


@dataclass(frozen=True, slots=True)
class PublishInvocation:
    argv: tuple[str, ...]
    env: dict[str, str]
    display: str


def destination_specs(build: BuildConfig) -> dict[PublishDestination, DestinationSpec]:
    return {
        PublishDestination.LOCAL: DestinationSpec(
            destination=PublishDestination.LOCAL,
            task=build.local_task,
        ),
        PublishDestination.PORTAL: DestinationSpec(
            destination=PublishDestination.PORTAL,
            task=build.portal_task,
            injections=tuple(SecretInjection(k, kind, n) for k, kind, n in PORTAL_INJECTIONS),
        ),
        PublishDestination.CENTRAL: DestinationSpec(
            destination=PublishDestination.CENTRAL,
            task=build.central_task,
            extra_args=build.central_extra_args,
            injections=tuple(SecretInjection(k, kind, n) for k, kind, n in CENTRAL_INJECTIONS),
        ),
    }


def build_invocation(
    *,
    command: str,
    spec: DestinationSpec,
    secrets: Mapping[str, str],
) -> PublishInvocation:
    """Assemble argv/env for a publish task plus its masked display form.

    Keys absent from `secrets` (dry-run) are rendered masked and left out of
    argv/env.
    """
    base = [command, spec.task, *spec.extra_args]
    argv: list[str] = list(base)
    shown: list[str] = []
    env: dict[str, str] = {}
    env_shown: list[str] = []

    for injection in spec.injections:
        value = secrets.get(injection.key)
        match injection.kind:
            case "property":
                if value is not None:
                    argv.append(f"-P{injection.name}={value}")
                shown.append(f"-P{injection.name}={SECRET_MASK}")
            case "env":
                if value is not None:
                    env[injection.name] = value
                env_shown.append(f"{injection.name}={SECRET_MASK}")

    # masked arguments stay unquoted
    display = " ".join([*env_shown, shlex.join(base), *shown])
    return PublishInvocation(argv=tuple(argv), env=env, display=display)


def mask_secrets(text: str, secrets: Mapping[str, str]) -> str:
    for value in secrets.values():
        if value:
            text = text.replace(value, SECRET_MASK)
    return text


class PublishGateway(Protocol):
    """Runs the build tool's publish task for one destination."""

    def publish(
        self,
        spec: DestinationSpec,
        secrets: Mapping[str, str],
    ) -> Result[None, ReleaseError]: ...


class BuildToolPublishGateway:
    """PublishGateway invoking the build tool (`./gradlew` by default).

    With `dry_run`, the masked command line is echoed instead of executed.
    """

    def __init__(
        self,
        *,
        root: Path,
        env: Mapping[str, str],
        command: str,
        console: ConsoleProtocol,
        dry_run: bool,
    ) -> None:
        self._root = root
        self._env = env
        self._command = command
        self._console = console
        self._dry_run = dry_run

    def publish(
        self,
        spec: DestinationSpec,
        secrets: Mapping[str, str],
    ) -> Result[None, ReleaseError]:
        invocation = build_invocation(command=self._command, spec=spec, secrets=secrets)
        if self._dry_run:
            self._console.dry_run(invocation.display)
            return Ok(None)

        self._console.print(invocation.display, Style.DIM)
        result = run_process(
            list(invocation.argv),
            cwd=self._root,
            env={**self._env, **invocation.env},
        )
        if isinstance(result, Err):
            return Err(
                PublishFailed(
                    destination=spec.destination.label,
                    output=mask_secrets(result.error.output, secrets),
                )
            )
        return Ok(None)

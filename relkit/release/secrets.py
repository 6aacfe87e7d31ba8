"""Secret resolution through the 1Password CLI.

References look like `op://vault/item/section/field` (section optional) and
are resolved one at a time with `op read <ref>`. Nothing is cached: each
publish reads its secrets again, and the first failure aborts the step.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Protocol

from relkit.core.result import Err, Ok, Result
from relkit.platform.process import run as run_process
from relkit.release.errors import (
    ReleaseError,
    SecretMappingIncomplete,
    SecretUnreadable,
    VaultSignedOut,
    VaultToolMissing,
)
from relkit.release.model import SecretMapping

_SECRET_REF_RE = re.compile(r"op://[^/]+/[^/]+(?:/[^/]+){1,2}")


class SecretGateway(Protocol):
    """Access to an external secret vault."""

    @property
    def tool(self) -> str: ...

    def check_tool_available(self) -> bool:
        """True if the vault CLI runs (`<tool> --version` exits 0)."""
        ...

    def check_signed_in(self) -> Result[None, ReleaseError]: ...

    def read(self, ref: str) -> Result[str, ReleaseError]: ...


class OnePasswordCli:
    """SecretGateway backed by the `op` command."""

    def __init__(self, *, root: Path, env: Mapping[str, str], command: str = "op") -> None:
        self._root = root
        self._env = env
        self._command = command

    @property
    def tool(self) -> str:
        return self._command

    def check_tool_available(self) -> bool:
        result = run_process([self._command, "--version"], cwd=self._root, env=self._env)
        return isinstance(result, Ok)

    def check_signed_in(self) -> Result[None, ReleaseError]:
        result = run_process([self._command, "whoami"], cwd=self._root, env=self._env)
        if isinstance(result, Err):
            return Err(VaultSignedOut(tool=self._command, output=result.error.output))
        return Ok(None)

    def read(self, ref: str) -> Result[str, ReleaseError]:
        result = run_process([self._command, "read", ref], cwd=self._root, env=self._env)
        if isinstance(result, Err):
            return Err(SecretUnreadable(ref=ref, output=result.error.output))
        value = result.value
        if value.endswith("\n"):
            value = value[:-1]
        if value.endswith("\r"):
            value = value[:-1]
        return Ok(value)


def validate_mappings(
    *,
    destination: str,
    required_keys: Iterable[str],
    table: Mapping[str, str],
) -> Result[tuple[SecretMapping, ...], SecretMappingIncomplete]:
    """Check that every required key maps to a well-formed reference.

    Purely structural: no vault call is made.
    """
    missing: list[str] = []
    invalid: list[str] = []
    mappings: list[SecretMapping] = []
    for key in required_keys:
        ref = (table.get(key) or "").strip()
        if not ref:
            missing.append(key)
        elif _SECRET_REF_RE.fullmatch(ref) is None:
            invalid.append(key)
        else:
            mappings.append(SecretMapping(key=key, ref=ref))

    if missing or invalid:
        return Err(
            SecretMappingIncomplete(
                destination=destination,
                missing=tuple(missing),
                invalid=tuple(invalid),
            )
        )
    return Ok(tuple(mappings))


def resolve_secrets(
    gateway: SecretGateway,
    mappings: Iterable[SecretMapping],
) -> Result[dict[str, str], ReleaseError]:
    """Read every mapping; stops at the first unreadable secret."""
    values: dict[str, str] = {}
    for mapping in mappings:
        result = gateway.read(mapping.ref)
        if isinstance(result, Err):
            return result
        values[mapping.key] = result.value
    return Ok(values)


def ensure_vault_ready(gateway: SecretGateway) -> Result[None, ReleaseError]:
    if not gateway.check_tool_available():
        return Err(VaultToolMissing(tool=gateway.tool))
    return Ok(None)

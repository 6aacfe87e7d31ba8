"""Typed configuration loading for `relkit.toml`.

Every key is optional; a missing file yields the built-in defaults, which
match the conventional Gradle plugin layout (`plugin/build.gradle.kts`,
`./gradlew`, 1Password references).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_str_table, get_table

__all__ = [
    "CONFIG_FILENAME",
    "BuildConfig",
    "ConfigError",
    "DescriptorConfig",
    "GitConfig",
    "ReleaseConfig",
    "ReportConfig",
    "VaultConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "relkit.toml"

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

DEFAULT_PORTAL_SECRETS: dict[str, str] = {
    "GRADLE_PUBLISH_KEY": "op://Private/Gradle Plugin Portal/publishing/key",
    "GRADLE_PUBLISH_SECRET": "op://Private/Gradle Plugin Portal/publishing/secret",
    "SIGNING_PASSPHRASE": "op://Private/GPG Signing Key/publishing/passphrase",
}

DEFAULT_CENTRAL_SECRETS: dict[str, str] = {
    "ORG_GRADLE_PROJECT_mavenCentralUsername": "op://Private/Sonatype Maven Central/publishing/username",
    "ORG_GRADLE_PROJECT_mavenCentralPassword": "op://Private/Sonatype Maven Central/publishing/password",
    "ORG_GRADLE_PROJECT_signing_gnupg_passphrase": "op://Private/GPG Signing Key/publishing/passphrase",
}


def _default_secrets() -> dict[str, dict[str, str]]:
    return {
        "portal": dict(DEFAULT_PORTAL_SECRETS),
        "central": dict(DEFAULT_CENTRAL_SECRETS),
    }


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class DescriptorConfig:
    """Location of the build descriptor and the generated POM."""

    path: str = "plugin/build.gradle.kts"
    pom_path: str = "plugin/build/publications/pluginMaven/pom-default.xml"
    default_artifact_id: str = "release-plugin"


@dataclass(frozen=True, slots=True)
class GitConfig:
    remote: str = "origin"
    tag_prefix: str = "v"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Build tool invocation per publish destination."""

    command: str = "./gradlew"
    local_task: str = ":plugin:publishToMavenLocal"
    portal_task: str = ":plugin:publishPlugins"
    central_task: str = ":plugin:publishAllPublicationsToMavenCentralRepository"
    central_extra_args: tuple[str, ...] = ("--no-configuration-cache",)


@dataclass(frozen=True, slots=True)
class VaultConfig:
    command: str = "op"


@dataclass(frozen=True, slots=True)
class ReportConfig:
    local_cache: str = ".m2/repository"
    central_base_url: str = "https://repo1.maven.org/maven2"
    portal_base_url: str = "https://plugins.gradle.org/plugin"
    catalog_alias: str = "all4-release"
    catalog_version_key: str = "all4Release"


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container."""

    descriptor: DescriptorConfig = field(default_factory=DescriptorConfig)
    git: GitConfig = field(default_factory=GitConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    vault: VaultConfig = field(default_factory=VaultConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    # destination name -> {KEY: secret reference}
    secrets: dict[str, dict[str, str]] = field(default_factory=_default_secrets)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create ReleaseConfig from a mapping (parsed TOML).

        Raises:
            ValueError: A present key has the wrong type.
        """
        descriptor: StrDict = get_table(data, "descriptor") or {}
        git: StrDict = get_table(data, "git") or {}
        build: StrDict = get_table(data, "build") or {}
        vault: StrDict = get_table(data, "vault") or {}
        report: StrDict = get_table(data, "report") or {}
        secrets_table: StrDict = get_table(data, "secrets") or {}

        d_desc = DescriptorConfig()
        d_git = GitConfig()
        d_build = BuildConfig()
        d_report = ReportConfig()

        secrets = _default_secrets()
        for destination in secrets_table:
            overrides = get_str_table(secrets_table, destination)
            if overrides is None:
                raise ValueError(f'[secrets.{destination}] must map KEY = "op://..." strings')
            secrets.setdefault(destination, {}).update(overrides)

        tag_prefix = git.get("tag_prefix", d_git.tag_prefix)
        if not isinstance(tag_prefix, str):
            raise ValueError("[git] tag_prefix must be a string")

        extra_args = d_build.central_extra_args
        if "central_extra_args" in build:
            parsed = get_str_list(build, "central_extra_args")
            if parsed is None:
                raise ValueError("[build] central_extra_args must be a list of strings")
            extra_args = parsed

        return cls(
            descriptor=DescriptorConfig(
                path=get_str(descriptor, "path") or d_desc.path,
                pom_path=get_str(descriptor, "pom_path") or d_desc.pom_path,
                default_artifact_id=get_str(descriptor, "default_artifact_id")
                or d_desc.default_artifact_id,
            ),
            git=GitConfig(
                remote=get_str(git, "remote") or d_git.remote,
                tag_prefix=tag_prefix.strip(),
            ),
            build=BuildConfig(
                command=get_str(build, "command") or d_build.command,
                local_task=get_str(build, "local_task") or d_build.local_task,
                portal_task=get_str(build, "portal_task") or d_build.portal_task,
                central_task=get_str(build, "central_task") or d_build.central_task,
                central_extra_args=extra_args,
            ),
            vault=VaultConfig(command=get_str(vault, "command") or VaultConfig().command),
            report=ReportConfig(
                local_cache=get_str(report, "local_cache") or d_report.local_cache,
                central_base_url=(
                    get_str(report, "central_base_url") or d_report.central_base_url
                ).rstrip("/"),
                portal_base_url=(
                    get_str(report, "portal_base_url") or d_report.portal_base_url
                ).rstrip("/"),
                catalog_alias=get_str(report, "catalog_alias") or d_report.catalog_alias,
                catalog_version_key=get_str(report, "catalog_version_key")
                or d_report.catalog_version_key,
            ),
            secrets=secrets,
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, mapping read and syntax failures to ConfigError."""
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relkit.toml

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load config if the file exists, otherwise return the defaults."""
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)

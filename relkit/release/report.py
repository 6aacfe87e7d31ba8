"""Publish summary: where the artifact landed and how to depend on it."""

from __future__ import annotations

from collections.abc import Sequence

from relkit.core.config import ReportConfig
from relkit.release.model import ArtifactDetails, PublishDestination


def repository_path(group_id: str) -> str:
    return group_id.replace(".", "/")


def location(
    destination: PublishDestination,
    artifact: ArtifactDetails,
    *,
    config: ReportConfig,
    home: str,
) -> str:
    repo_path = repository_path(artifact.group_id)
    match destination:
        case PublishDestination.LOCAL:
            cache = config.local_cache.strip("/")
            return f"{home.rstrip('/')}/{cache}/{repo_path}/{artifact.artifact_id}/{artifact.version}"
        case PublishDestination.PORTAL:
            return f"{config.portal_base_url}/{artifact.plugin_id}"
        case PublishDestination.CENTRAL:
            return f"{config.central_base_url}/{repo_path}/{artifact.artifact_id}/{artifact.version}/"


def render_report(
    destinations: Sequence[PublishDestination],
    artifact: ArtifactDetails,
    *,
    config: ReportConfig,
    home: str,
) -> str:
    """Render the publish summary; empty string when nothing was published."""
    unique = list(dict.fromkeys(destinations))
    if not unique:
        return ""

    alias = config.catalog_alias
    version_key = config.catalog_version_key
    module = f"{artifact.group_id}:{artifact.artifact_id}"

    lines = [
        "Publish mini-report",
        f"artifact = {artifact.coordinates}",
        f"pluginId = {artifact.plugin_id}",
        "",
    ]
    for destination in unique:
        kind = "PATH" if destination is PublishDestination.LOCAL else "URL"
        where = location(destination, artifact, config=config, home=home)
        lines.append(f"{kind} {destination.value}: {where}")

    lines += [
        "",
        "Copy/Paste (libs.versions.toml)",
        "[versions]",
        f'{version_key} = "{artifact.version}"',
        "[plugins]",
        f'{alias} = {{ id = "{artifact.plugin_id}", version.ref = "{version_key}" }}',
        "[libraries]",
        f'{alias}-plugin = {{ module = "{module}", version.ref = "{version_key}" }}',
        "",
        f'{alias} = {{ id = "{artifact.plugin_id}", version = "{artifact.version}" }}',
        f'{alias}-plugin = {{ module = "{module}", version = "{artifact.version}" }}',
    ]
    return "\n".join(lines)

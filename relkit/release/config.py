from __future__ import annotations

from typing import Literal

from relkit.release.model import PublishDestination

# How each resolved secret reaches the build tool: as a `-P<name>=value`
# argument or as an environment variable of the child process.
InjectionKind = Literal["property", "env"]

PORTAL_INJECTIONS: tuple[tuple[str, InjectionKind, str], ...] = (
    ("GRADLE_PUBLISH_KEY", "property", "gradle.publish.key"),
    ("GRADLE_PUBLISH_SECRET", "property", "gradle.publish.secret"),
    ("SIGNING_PASSPHRASE", "property", "signing.gnupg.passphrase"),
)

CENTRAL_INJECTIONS: tuple[tuple[str, InjectionKind, str], ...] = (
    ("ORG_GRADLE_PROJECT_mavenCentralUsername", "env", "ORG_GRADLE_PROJECT_mavenCentralUsername"),
    ("ORG_GRADLE_PROJECT_mavenCentralPassword", "env", "ORG_GRADLE_PROJECT_mavenCentralPassword"),
    ("ORG_GRADLE_PROJECT_signing_gnupg_passphrase", "property", "signing.gnupg.passphrase"),
)

# Destinations published by the tag-and-publish flows, in order. A failure
# stops the run before the next destination is attempted.
RELEASE_DESTINATIONS: tuple[PublishDestination, ...] = (
    PublishDestination.PORTAL,
    PublishDestination.CENTRAL,
)

# Destinations whose secrets `doctor` verifies.
SECRET_DESTINATIONS: tuple[PublishDestination, ...] = RELEASE_DESTINATIONS

SECRET_MASK = "***"

COMMIT_MESSAGE_TEMPLATE = "chore: bump version to {version}"
TAG_MESSAGE_TEMPLATE = "Release {version}"

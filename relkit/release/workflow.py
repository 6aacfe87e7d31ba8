"""Release orchestration.

`ReleaseWorkflow` sequences the gateways for every operator command. The two
tag-and-publish flows run as a state machine:

    START -> CLEAN_CHECKED -> DOCTOR_PASSED -> VERSION_COMPUTED
          -> DESCRIPTOR_UPDATED -> COMMITTED_AND_TAGGED
          -> PUBLISHED -> PUSHED -> REPORTED

`--skip-publish` drops PUBLISHED and `--no-push` drops PUSHED. The first
failure ends the run and nothing is rolled back: a commit and tag made before
a failed publish stay in place for the operator to finish or revert.

Dry-run is enforced by the gateways (they echo instead of executing) and by
`_write_version`, so the orchestration itself runs the same steps in both
modes.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Literal

from relkit.core.result import Err, Ok, Result
from relkit.git.repository import Repository
from relkit.output.console import ConsoleProtocol, Style
from relkit.release.config import (
    COMMIT_MESSAGE_TEMPLATE,
    RELEASE_DESTINATIONS,
    SECRET_DESTINATIONS,
    TAG_MESSAGE_TEMPLATE,
)
from relkit.release.context import ReleaseContext
from relkit.release.descriptor import BuildDescriptorStore, read_artifact_id
from relkit.release.errors import MissingTargetVersion, ReleaseError, VersionUnchanged
from relkit.release.fsm import FINISH, StepHandler, StepOutcome, advance, run_state_machine
from relkit.release.model import (
    ArtifactDetails,
    PublishDestination,
    ReleaseState,
    ReleaseWorkflowOptions,
    SecretMapping,
)
from relkit.release.publish import BuildToolPublishGateway, PublishGateway, destination_specs
from relkit.release.report import render_report
from relkit.release.secrets import (
    OnePasswordCli,
    SecretGateway,
    ensure_vault_ready,
    resolve_secrets,
    validate_mappings,
)
from relkit.release.semver import next_bump, next_pre_release, validate_stable
from relkit.release.vcs import GitVcsGateway, VcsGateway

ReleaseKind = Literal["pre-release", "release"]


@dataclass(frozen=True, slots=True)
class ReleaseSession:
    """Progress of one tag-and-publish run."""

    kind: ReleaseKind
    state: ReleaseState = ReleaseState.START
    current_version: str = ""
    target_version: str = ""
    published: tuple[PublishDestination, ...] = ()


Step = Callable[[ReleaseSession], Result[ReleaseSession, ReleaseError]]


def _enter(state: ReleaseState, step: Step) -> StepHandler[ReleaseSession]:
    """Wrap a step so that success moves the session to `state`."""

    def handler(session: ReleaseSession) -> Result[StepOutcome[ReleaseSession], ReleaseError]:
        result = step(session)
        if isinstance(result, Err):
            return result
        return Ok(advance(replace(result.value, state=state)))

    return handler


def _finish(_: ReleaseSession) -> Result[StepOutcome[ReleaseSession], ReleaseError]:
    return Ok(FINISH)


class ReleaseWorkflow:
    def __init__(
        self,
        *,
        ctx: ReleaseContext,
        options: ReleaseWorkflowOptions,
        store: BuildDescriptorStore,
        vcs: VcsGateway,
        secrets: SecretGateway,
        publisher: PublishGateway,
    ) -> None:
        self._ctx = ctx
        self._options = options
        self._store = store
        self._vcs = vcs
        self._secrets = secrets
        self._publisher = publisher
        self._specs = destination_specs(ctx.config.build)

    @property
    def _console(self) -> ConsoleProtocol:
        return self._ctx.console

    # -------------------------------------------------------------------------
    # Operator commands
    # -------------------------------------------------------------------------

    def doctor(self) -> Result[None, ReleaseError]:
        """Verify everything a publish needs, reading every secret once.

        The descriptor and mappings are validated before the first vault call,
        so a wrong root or a missing key is reported without touching the vault.
        """
        exists = self._store.ensure_exists()
        if isinstance(exists, Err):
            return exists

        mappings = self._validate_all_mappings()
        if isinstance(mappings, Err):
            return mappings
        self._console.success("secret mappings complete")

        ready = ensure_vault_ready(self._secrets)
        if isinstance(ready, Err):
            return ready
        self._console.success(f"{self._secrets.tool} available")

        signed_in = self._secrets.check_signed_in()
        if isinstance(signed_in, Err):
            return signed_in
        self._console.success(f"{self._secrets.tool} session active")

        for destination, entries in mappings.value:
            for mapping in entries:
                read = self._secrets.read(mapping.ref)
                if isinstance(read, Err):
                    return read
                self._console.success(f"{destination.value}: {mapping.key}")

        self._console.success("doctor passed")
        return Ok(None)

    def bump_pre(self) -> Result[str, ReleaseError]:
        """Advance to the next pre-release and commit it (no tag)."""
        exists = self._store.ensure_exists()
        if isinstance(exists, Err):
            return exists

        clean = self._vcs.ensure_clean()
        if isinstance(clean, Err):
            return clean

        current = self._store.read_version()
        if isinstance(current, Err):
            return current

        target = next_pre_release(current.value)
        if isinstance(target, Err):
            return target
        self._console.info(f"Version bump: {current.value} -> {target.value}")

        written = self._write_version(target.value)
        if isinstance(written, Err):
            return written

        committed = self._vcs.commit(
            [self._ctx.config.descriptor.path],
            COMMIT_MESSAGE_TEMPLATE.format(version=target.value),
        )
        if isinstance(committed, Err):
            return committed

        self._console.success(f"bumped to {target.value}")
        return Ok(target.value)

    def publish_local(self) -> Result[None, ReleaseError]:
        return self.publish(PublishDestination.LOCAL)

    def publish_portal(self) -> Result[None, ReleaseError]:
        return self.publish(PublishDestination.PORTAL)

    def publish_central(self) -> Result[None, ReleaseError]:
        return self.publish(PublishDestination.CENTRAL)

    def publish(self, destination: PublishDestination) -> Result[None, ReleaseError]:
        """Publish the current descriptor version to one destination, then report it."""
        exists = self._store.ensure_exists()
        if isinstance(exists, Err):
            return exists

        metadata = self._store.read_metadata()
        if isinstance(metadata, Err):
            return metadata

        published = self._publish_one(destination)
        if isinstance(published, Err):
            return published

        return self._report((destination,), version=None)

    def tag_and_publish_pre_release(self) -> Result[ReleaseSession, ReleaseError]:
        return self._run_release("pre-release")

    def tag_and_publish_release(self) -> Result[ReleaseSession, ReleaseError]:
        """Stable release to `--version` (or `--bump` of the current version)."""
        return self._run_release("release")

    # -------------------------------------------------------------------------
    # Tag-and-publish state machine
    # -------------------------------------------------------------------------

    def _run_release(self, kind: ReleaseKind) -> Result[ReleaseSession, ReleaseError]:
        opts = self._options
        if opts.skip_publish:
            self._console.warning("publish skipped (--skip-publish)")
        if opts.no_push:
            self._console.warning("push skipped (--no-push)")

        session = ReleaseSession(kind=kind)
        self._save_state(session)

        preflight = self._preflight(session)
        if isinstance(preflight, Err):
            return preflight

        steps: list[tuple[ReleaseState, Step]] = [
            (ReleaseState.CLEAN_CHECKED, self._check_clean),
            (ReleaseState.DOCTOR_PASSED, self._check_doctor),
            (ReleaseState.VERSION_COMPUTED, self._compute_version),
            (ReleaseState.DESCRIPTOR_UPDATED, self._update_descriptor),
            (ReleaseState.COMMITTED_AND_TAGGED, self._commit_and_tag),
        ]
        if not opts.skip_publish:
            steps.append((ReleaseState.PUBLISHED, self._publish_all))
        if not opts.no_push:
            steps.append((ReleaseState.PUSHED, self._push))
        steps.append((ReleaseState.REPORTED, self._report_step))

        handlers: dict[str, StepHandler[ReleaseSession]] = {}
        previous = ReleaseState.START
        for state, step in steps:
            handlers[previous.value] = _enter(state, step)
            previous = state
        handlers[previous.value] = _finish

        return run_state_machine(
            initial_state=preflight.value,
            get_step=lambda s: s.state.value,
            handlers=handlers,
            save_state=self._save_state,
        )

    def _save_state(self, session: ReleaseSession) -> Result[ReleaseSession, ReleaseError]:
        self._console.print(f"state: {session.state.value}", Style.DIM)
        return Ok(session)

    def _preflight(self, session: ReleaseSession) -> Result[ReleaseSession, ReleaseError]:
        """Validation that must pass before any git command runs."""
        exists = self._store.ensure_exists()
        if isinstance(exists, Err):
            return exists

        if not self._options.skip_publish:
            mappings = self._validate_all_mappings()
            if isinstance(mappings, Err):
                return mappings

        current = self._store.read_version()
        if isinstance(current, Err):
            return current

        target = self._target_for(session.kind, current.value)
        if isinstance(target, Err):
            return target
        return Ok(replace(session, current_version=current.value, target_version=target.value))

    def _check_clean(self, session: ReleaseSession) -> Result[ReleaseSession, ReleaseError]:
        clean = self._vcs.ensure_clean()
        if isinstance(clean, Err):
            return clean
        self._console.success("working tree clean")
        return Ok(session)

    def _check_doctor(self, session: ReleaseSession) -> Result[ReleaseSession, ReleaseError]:
        if self._options.skip_publish:
            self._console.info("doctor skipped: nothing to publish")
            return Ok(session)

        if self._options.dry_run:
            mappings = self._validate_all_mappings()
            if isinstance(mappings, Err):
                return mappings
            self._console.warning("dry-run: skipping vault checks")
            return Ok(session)

        doctor = self.doctor()
        if isinstance(doctor, Err):
            return doctor
        return Ok(session)

    def _compute_version(self, session: ReleaseSession) -> Result[ReleaseSession, ReleaseError]:
        # Re-read: the descriptor is the only source of truth for the current version.
        current = self._store.read_version()
        if isinstance(current, Err):
            return current

        target = self._target_for(session.kind, current.value)
        if isinstance(target, Err):
            return target

        self._console.info(f"Version bump: {current.value} -> {target.value}")
        return Ok(replace(session, current_version=current.value, target_version=target.value))

    def _update_descriptor(self, session: ReleaseSession) -> Result[ReleaseSession, ReleaseError]:
        written = self._write_version(session.target_version)
        if isinstance(written, Err):
            return written
        return Ok(session)

    def _commit_and_tag(self, session: ReleaseSession) -> Result[ReleaseSession, ReleaseError]:
        version = session.target_version
        committed = self._vcs.commit(
            [self._ctx.config.descriptor.path],
            COMMIT_MESSAGE_TEMPLATE.format(version=version),
        )
        if isinstance(committed, Err):
            return committed

        tag = self._tag_name(version)
        tagged = self._vcs.tag(tag, TAG_MESSAGE_TEMPLATE.format(version=version))
        if isinstance(tagged, Err):
            return tagged

        self._console.success(f"committed and tagged {tag}")
        return Ok(session)

    def _publish_all(self, session: ReleaseSession) -> Result[ReleaseSession, ReleaseError]:
        published = session.published
        for destination in RELEASE_DESTINATIONS:
            result = self._publish_one(destination)
            if isinstance(result, Err):
                return result
            published = (*published, destination)
        return Ok(replace(session, published=published))

    def _push(self, session: ReleaseSession) -> Result[ReleaseSession, ReleaseError]:
        remote = self._ctx.config.git.remote
        for ref in ("HEAD", self._tag_name(session.target_version)):
            pushed = self._vcs.push(remote, ref)
            if isinstance(pushed, Err):
                return pushed
        self._console.success(f"pushed to {remote}")
        return Ok(session)

    def _report_step(self, session: ReleaseSession) -> Result[ReleaseSession, ReleaseError]:
        # Dry-run never writes the descriptor; report the version that would ship.
        version = session.target_version if self._options.dry_run else None
        reported = self._report(session.published, version=version)
        if isinstance(reported, Err):
            return reported
        return Ok(session)

    # -------------------------------------------------------------------------
    # Shared steps
    # -------------------------------------------------------------------------

    def _target_for(self, kind: ReleaseKind, current: str) -> Result[str, ReleaseError]:
        if kind == "pre-release":
            return next_pre_release(current)

        opts = self._options
        if opts.version is not None:
            target = validate_stable(opts.version.strip())
        elif opts.bump is not None:
            bumped = next_bump(current, opts.bump)
            if isinstance(bumped, Err):
                return bumped
            target = validate_stable(bumped.value)
        else:
            return Err(MissingTargetVersion())

        if isinstance(target, Err):
            return target
        if target.value == current:
            return Err(VersionUnchanged(current))
        return Ok(target.value)

    def _tag_name(self, version: str) -> str:
        return f"{self._ctx.config.git.tag_prefix}{version}"

    def _write_version(self, version: str) -> Result[None, ReleaseError]:
        path = self._ctx.config.descriptor.path
        if self._options.dry_run:
            self._console.dry_run(f'update {path}: version = "{version}"')
            return Ok(None)

        written = self._store.write_version(version)
        if isinstance(written, Err):
            return written
        self._console.success(f'{path}: version = "{version}"')
        return Ok(None)

    def _mappings_for(
        self, destination: PublishDestination
    ) -> Result[tuple[SecretMapping, ...], ReleaseError]:
        return validate_mappings(
            destination=destination.value,
            required_keys=self._specs[destination].required_keys,
            table=self._ctx.config.secrets.get(destination.value, {}),
        )

    def _validate_all_mappings(
        self,
    ) -> Result[tuple[tuple[PublishDestination, tuple[SecretMapping, ...]], ...], ReleaseError]:
        validated: list[tuple[PublishDestination, tuple[SecretMapping, ...]]] = []
        for destination in SECRET_DESTINATIONS:
            mappings = self._mappings_for(destination)
            if isinstance(mappings, Err):
                return mappings
            validated.append((destination, mappings.value))
        return Ok(tuple(validated))

    def _publish_one(self, destination: PublishDestination) -> Result[None, ReleaseError]:
        """Resolve this destination's secrets and run its publish task.

        Secrets are read right before the task and dropped afterwards. In
        dry-run the vault is not touched; the gateway echoes a masked command.
        """
        spec = self._specs[destination]
        mappings = self._mappings_for(destination)
        if isinstance(mappings, Err):
            return mappings

        if self._options.dry_run:
            return self._publisher.publish(spec, {})

        secrets: dict[str, str] = {}
        if mappings.value:
            ready = ensure_vault_ready(self._secrets)
            if isinstance(ready, Err):
                return ready
            resolved = resolve_secrets(self._secrets, mappings.value)
            if isinstance(resolved, Err):
                return resolved
            secrets = resolved.value

        published = self._publisher.publish(spec, secrets)
        if isinstance(published, Err):
            return published
        self._console.success(f"published to {destination.label}")
        return Ok(None)

    def _report(
        self,
        destinations: Sequence[PublishDestination],
        *,
        version: str | None,
    ) -> Result[None, ReleaseError]:
        if not destinations:
            self._console.info("nothing published")
            return Ok(None)

        metadata = self._store.read_metadata()
        if isinstance(metadata, Err):
            return metadata

        config = self._ctx.config
        artifact = ArtifactDetails(
            group_id=metadata.value.group_id,
            artifact_id=read_artifact_id(
                self._ctx.pom_path, default=config.descriptor.default_artifact_id
            ),
            version=version or metadata.value.version,
            plugin_id=metadata.value.plugin_id,
        )
        text = render_report(destinations, artifact, config=config.report, home=self._ctx.home)

        self._console.newline()
        for line in text.splitlines():
            self._console.print(line)
        return Ok(None)


def create_workflow(ctx: ReleaseContext, options: ReleaseWorkflowOptions) -> ReleaseWorkflow:
    """Wire the workflow to git, the 1Password CLI and the build tool."""
    config = ctx.config
    return ReleaseWorkflow(
        ctx=ctx,
        options=options,
        store=BuildDescriptorStore(ctx.descriptor_path),
        vcs=GitVcsGateway(
            Repository(ctx.root, env=ctx.env),
            console=ctx.console,
            dry_run=options.dry_run,
        ),
        secrets=OnePasswordCli(root=ctx.root, env=ctx.env, command=config.vault.command),
        publisher=BuildToolPublishGateway(
            root=ctx.root,
            env=ctx.env,
            command=config.build.command,
            console=ctx.console,
            dry_run=options.dry_run,
        ),
    )

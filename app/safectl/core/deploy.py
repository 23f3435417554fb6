"""Deploy engine reconciling declared configs with a store.

This module provides the DeployEngine class that compares the declared
configs and secrets of a project with the records currently held by a
store, writes the entries that are new or changed, and optionally
removes orphaned records under the project prefix.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from safectl.errors import (
    PartialFailureError,
    PreconditionError,
    PromptAbortedError,
    SafectlError,
)
from safectl.models.config import Config, ConfigInput

if TYPE_CHECKING:
    from safectl.models.project import GenerateTarget
    from safectl.stores.base import Store

logger = logging.getLogger(__name__)


class PromptMode(str, Enum):
    """When the operator is asked for secret values.

    Attributes:
        OFF: Never prompt. Missing secrets abort the deploy.
        MISSING: Prompt for secrets that are not stored yet.
        ALL: Prompt for every secret, with the stored value as default.
    """

    OFF = "off"
    MISSING = "missing"
    ALL = "all"


# Returns an error message for invalid input, None when valid
Validator = Callable[[str], str | None]

# Writes one generate target and returns the written path
FileGenerator = Callable[["GenerateTarget"], Path]


class Prompter(Protocol):
    """Interactive source of secret values."""

    def ask(self, label: str, default: str, validate: Validator) -> str:
        """Ask the operator for a value.

        Raises:
            PromptAbortedError: If the operator aborts.
        """
        ...


class DeployError(SafectlError):
    """Raised when a deploy step fails; the cause is chained.

    Attributes:
        step: Short name of the failed step.
    """

    def __init__(self, step: str, message: str) -> None:
        super().__init__(message)
        self.step = step


@dataclass(frozen=True, slots=True)
class DeployPlan:
    """Side-effect free comparison of desired and stored state.

    Attributes:
        creates: Plain entries that are not stored yet.
        updates: Plain entries whose stored value differs.
        unchanged: Names of plain entries whose stored value matches.
        missing: Secret entries that are not stored yet.
        current: Stored records of every tracked name, by name.
    """

    creates: tuple[ConfigInput, ...]
    updates: tuple[ConfigInput, ...]
    unchanged: tuple[str, ...]
    missing: tuple[ConfigInput, ...]
    current: dict[str, Config] = field(default_factory=dict)

    @property
    def changes(self) -> tuple[ConfigInput, ...]:
        """Plain entries that need a write."""
        return self.creates + self.updates

    @property
    def is_in_sync(self) -> bool:
        """True when nothing needs to be written or supplied."""
        return not (self.creates or self.updates or self.missing)


@dataclass(frozen=True, slots=True)
class GenerateResult:
    """Outcome of writing one generate target.

    Attributes:
        type: Output format.
        path: Destination path.
        success: Whether the file was written.
        error: Failure of the write, chained from its cause.
    """

    type: str
    path: str
    success: bool
    error: PartialFailureError | None = None

    @property
    def failed(self) -> bool:
        """Check if the file could not be written."""
        return not self.success


@dataclass(frozen=True, slots=True)
class DeployResult:
    """Outcome of a deploy.

    Attributes:
        written: Entries written in the single batch write.
        orphans: Entries removed as orphans.
        orphan_error: Error of the orphan removal step, if it failed.
        generated: Results of the file generation step.
    """

    written: tuple[ConfigInput, ...]
    orphans: tuple[ConfigInput, ...] = ()
    orphan_error: SafectlError | None = None
    generated: tuple[GenerateResult, ...] = ()

    @property
    def has_failures(self) -> bool:
        """True when a secondary step failed after the writes succeeded."""
        return self.orphan_error is not None or any(g.failed for g in self.generated)


def find_missing(secrets: Iterable[ConfigInput], current: dict[str, Config]) -> list[ConfigInput]:
    """Return the secret entries whose names are not stored."""
    return [s for s in secrets if s.name not in current]


def find_orphans(stored: Iterable[Config], tracked: Iterable[str]) -> list[ConfigInput]:
    """Return stored records whose names are not tracked.

    Args:
        stored: Records found under the project prefix.
        tracked: Every name declared by the project.

    Returns:
        Entries to delete, in stored order.
    """
    tracked_names = set(tracked)
    return [ConfigInput(name=c.name) for c in stored if c.name not in tracked_names]


def _non_empty(name: str) -> Validator:
    def validate(value: str) -> str | None:
        if not value:
            return f"{name} must not be empty"
        return None

    return validate


class DeployEngine:
    """Engine reconciling declared configs and secrets with a store.

    The store is injected; the engine performs at most one batch write
    per deploy, followed by the optional orphan removal and file
    generation steps.

    Example:
        >>> engine = DeployEngine(store, prompter=CliPrompter())
        >>> result = engine.deploy(
        ...     configs=project.configs,
        ...     secrets=project.secrets,
        ...     prefix=project.prefix,
        ...     prompt_mode=PromptMode.MISSING,
        ... )
        >>> print(len(result.written))
    """

    def __init__(
        self,
        store: Store,
        prompter: Prompter | None = None,
        generator: FileGenerator | None = None,
    ) -> None:
        """Initialize the DeployEngine.

        Args:
            store: Store the values are deployed to.
            prompter: Source of interactive values. Required for prompt
                modes other than OFF.
            generator: Writes generate targets after a deploy.
        """
        self.store = store
        self.prompter = prompter
        self.generator = generator

    def fetch_current(self, tracked: Iterable[ConfigInput]) -> dict[str, Config]:
        """Read the stored records of every tracked entry.

        Raises:
            DeployError: If the store cannot be read.
        """
        try:
            records = self.store.get_many(list(tracked))
        except SafectlError as e:
            raise DeployError("read", f"failed to read existing params: {e}") from e
        return {c.name: c for c in records}

    def plan(
        self,
        configs: Iterable[ConfigInput],
        secrets: Iterable[ConfigInput],
    ) -> DeployPlan:
        """Compare desired entries with the store without writing.

        Args:
            configs: Plain entries.
            secrets: Secret entries.

        Returns:
            DeployPlan describing the required writes.

        Raises:
            DeployError: If the store cannot be read.
        """
        configs = list(configs)
        secrets = list(secrets)
        current = self.fetch_current(configs + secrets)

        creates: list[ConfigInput] = []
        updates: list[ConfigInput] = []
        unchanged: list[str] = []

        for config in configs:
            existing = current.get(config.name)
            if existing is None:
                creates.append(config)
            elif existing.value != config.value:
                updates.append(config)
            else:
                unchanged.append(config.name)

        return DeployPlan(
            creates=tuple(creates),
            updates=tuple(updates),
            unchanged=tuple(unchanged),
            missing=tuple(find_missing(secrets, current)),
            current=current,
        )

    def deploy(
        self,
        configs: Iterable[ConfigInput],
        secrets: Iterable[ConfigInput],
        prefix: str,
        prompt_mode: PromptMode = PromptMode.OFF,
        remove_orphans: bool = False,
        generate: Iterable[GenerateTarget] = (),
    ) -> DeployResult:
        """Deploy desired entries to the store.

        Nothing is written until every precondition holds and every
        prompted value has been collected. Entries whose stored value
        already matches are never written, so an unchanged project
        deploys with zero writes.

        Args:
            configs: Plain entries.
            secrets: Secret entries.
            prefix: Namespace prefix scanned for orphans.
            prompt_mode: When to prompt for secret values.
            remove_orphans: Delete stored records under ``prefix`` that
                are not declared.
            generate: Files to write after the deploy.

        Returns:
            DeployResult with written entries, removed orphans and
            generated files.

        Raises:
            PreconditionError: If secrets are missing and prompting is off,
                or prompting is requested without a prompter.
            PromptAbortedError: If the operator aborts a prompt.
            DeployError: If the store cannot be read or written.
        """
        configs = list(configs)
        secrets = list(secrets)
        tracked = configs + secrets

        if prompt_mode != PromptMode.OFF and self.prompter is None:
            raise PreconditionError(f"prompt mode '{prompt_mode.value}' requires a prompter")

        plan = self.plan(configs, secrets)
        current = plan.current

        if plan.missing and prompt_mode == PromptMode.OFF:
            names = ", ".join(c.name for c in plan.missing)
            raise PreconditionError(
                f'config values missing ({names}). run deploy with "--prompt missing"'
            )

        queue: list[ConfigInput] = []

        if prompt_mode == PromptMode.MISSING:
            for secret in plan.missing:
                if secret.value:
                    queue.append(secret)
                else:
                    queue.append(self._prompt(secret, secret.value))

        if prompt_mode == PromptMode.ALL:
            for secret in secrets:
                existing = current.get(secret.name)
                existing_value = existing.value if existing is not None else ""
                answered = self._prompt(secret, existing_value or secret.value)
                if answered.value != existing_value:
                    queue.append(answered)
                else:
                    logger.debug("Secret %s confirmed unchanged", secret.name)

        queue.extend(plan.changes)

        if queue:
            try:
                self.store.put_many(queue)
            except SafectlError as e:
                raise DeployError("write", f"failed to write params: {e}") from e
            logger.info("Wrote %d config(s)", len(queue))
        else:
            logger.info("All configs up to date, nothing written")

        orphans: tuple[ConfigInput, ...] = ()
        orphan_error: SafectlError | None = None
        if remove_orphans:
            try:
                orphans = tuple(self.remove_orphans(prefix, [c.name for c in tracked]))
            except SafectlError as e:
                logger.warning("Failed to remove orphans under %s: %s", prefix, e)
                orphan_error = e

        return DeployResult(
            written=tuple(queue),
            orphans=orphans,
            orphan_error=orphan_error,
            generated=tuple(self._generate(generate)),
        )

    def remove_orphans(self, prefix: str, tracked: Iterable[str]) -> list[ConfigInput]:
        """Delete stored records under ``prefix`` that are not tracked.

        Args:
            prefix: Namespace prefix.
            tracked: Every declared name, not only those written now.

        Returns:
            Entries that were deleted.

        Raises:
            DeployError: If listing or deleting fails.
        """
        try:
            stored = self.store.get_by_path(prefix)
        except SafectlError as e:
            raise DeployError("orphans", f"failed to list params under {prefix}: {e}") from e

        orphans = find_orphans(stored, tracked)
        if not orphans:
            return []

        try:
            self.store.delete_many(orphans)
        except SafectlError as e:
            raise DeployError("orphans", f"failed to remove orphans: {e}") from e

        logger.info("Removed %d orphan(s) under %s", len(orphans), prefix)
        return orphans

    def _prompt(self, config: ConfigInput, default: str) -> ConfigInput:
        """Ask the prompter for a value of ``config``."""
        if self.prompter is None:
            raise PreconditionError("prompting requires a prompter")
        label = config.key()
        if config.description:
            label = f"{label} ({config.description})"
        value = self.prompter.ask(label, default, _non_empty(config.name))
        if not value:
            raise PromptAbortedError(f"no value supplied for {config.name}")
        return replace(config, value=value)

    def _generate(self, targets: Iterable[GenerateTarget]) -> list[GenerateResult]:
        """Write generate targets; failures are logged and recorded."""
        results: list[GenerateResult] = []
        targets = list(targets)
        generator = self.generator
        if generator is None:
            if targets:
                logger.warning("No file generator configured, skipping %d target(s)", len(targets))
            return results

        for target in targets:
            try:
                path = generator(target)
            except (SafectlError, OSError) as e:
                error = PartialFailureError(
                    f"failed to generate file type = {target.type}, output = {target.path}: {e}"
                )
                error.__cause__ = e
                logger.warning("%s", error)
                results.append(
                    GenerateResult(type=target.type, path=target.path, success=False, error=error)
                )
                continue
            results.append(GenerateResult(type=target.type, path=str(path), success=True))
        return results

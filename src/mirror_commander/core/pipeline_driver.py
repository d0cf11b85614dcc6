"""Mirror pipeline state machine.

initial -> examining -> (confirming) -> updating -> triggering -> checking
-> completed, with any failure passing through ``error`` back to ``initial``.

The driver runs on one asyncio loop and is strictly sequential: the workflow
file is written before the run is dispatched, and the run is dispatched
before the first status poll. The poll task is the only concurrent piece;
it is released on every exit from ``checking`` and on ``close()``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

from mirror_commander.config.settings import settings
from mirror_commander.core.confirmation import ConfirmationGate
from mirror_commander.core.errors import MirrorError, ReferenceValidationError, RunFailureError
from mirror_commander.core.workflow_generator import render_workflow, target_reference
from mirror_commander.models import Phase, SourceType
from mirror_commander.models.existence import ExistenceCheck, Unknown
from mirror_commander.models.image import ImageReference
from mirror_commander.models.run import Credentials, PipelineRun, RunStatus, WriteOutcome
from mirror_commander.utils.validation import validate_image_address, validate_repository_name, validate_tag

logger = logging.getLogger(__name__)

TransitionCallback = Callable[[Phase], None]


class ExistenceProber(Protocol):
    async def probe(self, image_address: str, source_type: SourceType) -> ExistenceCheck: ...


class PipelineBackend(Protocol):
    async def write_definition(self, content: str, message: str) -> WriteOutcome: ...

    async def trigger_run(self, event_type: str | None = None) -> None: ...

    async def latest_run(self) -> RunStatus | None: ...


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


def not_found_message(source_type: SourceType, check: ExistenceCheck) -> str:
    message = f"{source_type.display_name} image address is incorrect or does not exist, please check it"
    if isinstance(check, Unknown) and check.reason:
        message += f" ({check.reason})"
    return message


class PipelineDriver:
    """Drives one mirror request at a time through the CI pipeline."""

    def __init__(
        self,
        prober: ExistenceProber,
        backend: PipelineBackend,
        region: str,
        credentials: Credentials,
        *,
        poll_interval: float | None = None,
        event_type: str | None = None,
        registry_template: str | None = None,
        on_transition: TransitionCallback | None = None,
    ):
        self._prober = prober
        self._backend = backend
        self.region = region
        self._credentials = credentials
        self._poll_interval = settings.poll_interval if poll_interval is None else poll_interval
        self._event_type = event_type or settings.dispatch_event
        self._registry_template = registry_template
        self._on_transition = on_transition

        self._phase = Phase.INITIAL
        self._run: PipelineRun | None = None
        self._source: ImageReference | None = None
        self._gate: ConfirmationGate | None = None
        self._poll_task: asyncio.Task | None = None
        self._ticking = False
        self._closed = False
        # Bumped on every reset/close so a coroutine resuming after one stops.
        self._generation = 0

        self.last_error: str | None = None
        self.history: list[Phase] = []

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def run(self) -> PipelineRun | None:
        return self._run

    @property
    def gate(self) -> ConfirmationGate | None:
        return self._gate

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def final_target(self, namespace: str, repository: str, tag: str | None) -> str:
        return target_reference(self.region, namespace, repository, tag, self._registry_template)

    # -- transitions -------------------------------------------------------

    def _transition(self, phase: Phase) -> None:
        logger.info("Pipeline phase %s -> %s", self._phase.value, phase.value)
        self._phase = phase
        self.history.append(phase)
        if self._run is not None:
            self._run.phase = phase
        if self._on_transition is not None:
            self._on_transition(phase)

    def _stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    def _release_poll(self) -> None:
        task, self._poll_task = self._poll_task, None
        if task is None or task.done():
            return
        # The loop exits by itself once the phase leaves CHECKING.
        if task is _current_task():
            return
        task.cancel()

    def _fail(self, message: str) -> None:
        logger.warning("Mirror pipeline failed: %s", message)
        self._release_poll()
        self.last_error = message
        if self._run is not None:
            self._run.last_error = message
        self._transition(Phase.ERROR)
        self.reset()

    def _finish(self) -> None:
        self._release_poll()
        self._transition(Phase.COMPLETED)

    def reset(self) -> None:
        """Return to ``initial``; the previous run and its poll task are dropped."""
        self._release_poll()
        self._generation += 1
        self._gate = None
        self._source = None
        self._run = None
        if self._phase is not Phase.INITIAL:
            self._transition(Phase.INITIAL)

    def close(self) -> None:
        """Tear down: cancel polling now and ignore any call still in flight."""
        self._closed = True
        self._generation += 1
        self._release_poll()
        self._gate = None

    # -- operations --------------------------------------------------------

    async def submit(
        self,
        source: str,
        source_type: SourceType,
        namespace: str,
        repository: str,
        tag: str,
    ) -> Phase:
        """Start a mirror run.

        Returns the phase the run settled in: ``confirming`` when the user has
        to decide, ``checking`` once polling has started, or ``initial`` after
        a failure (see ``last_error``).
        """
        if self._closed:
            raise MirrorError("pipeline driver is closed")
        if self._phase is Phase.COMPLETED:
            self.reset()
        if self._phase is not Phase.INITIAL:
            raise MirrorError(f"a mirror run is already in progress ({self._phase.value})")

        parsed = self._validate(source, source_type, namespace, repository, tag)
        generation = self._generation

        self.last_error = None
        self._source = parsed
        self._run = PipelineRun(
            source_reference=parsed.full_address,
            target_reference=self.final_target(namespace, repository, tag),
            region=self.region,
            source_type=source_type,
        )
        self._transition(Phase.EXAMINING)

        try:
            check = await self._prober.probe(source, source_type)
        except Exception as e:
            logger.warning("Existence check raised, treating source as unknown: %s", e, exc_info=True)
            check = Unknown(reason=str(e))
        if self._stale(generation):
            return self._phase

        if not check.exists:
            self._fail(not_found_message(source_type, check))
            return self._phase

        if not check.trusted and source_type is SourceType.DOCKERHUB:
            self._gate = ConfirmationGate()
            self._transition(Phase.CONFIRMING)
            return self._phase

        await self._create_tag(generation)
        return self._phase

    async def confirm(self) -> Phase:
        """Accept the risk prompt and continue the run."""
        if self._phase is not Phase.CONFIRMING or self._gate is None:
            return self._phase
        if not self._gate.confirm():
            return self._phase
        await self._create_tag(self._generation)
        return self._phase

    def decline(self) -> Phase:
        """Reject the risk prompt; the run ends without an error."""
        if self._phase is not Phase.CONFIRMING or self._gate is None:
            return self._phase
        if self._gate.cancel():
            self.reset()
        return self._phase

    def _validate(
        self, source: str, source_type: SourceType, namespace: str, repository: str, tag: str,
    ) -> ImageReference:
        result = validate_image_address(source, source_type)
        if not result.is_valid or result.parsed is None:
            raise ReferenceValidationError(result.error or "invalid image address")
        for label, check in (
            ("target tag", validate_tag(tag)),
            ("target namespace", validate_repository_name(namespace)),
            ("target repository", validate_repository_name(repository)),
        ):
            if not check.is_valid:
                raise ReferenceValidationError(f"invalid {label}: {check.error}")
        return result.parsed

    async def _create_tag(self, generation: int) -> None:
        run = self._run
        source = self._source
        if run is None or source is None:
            return

        try:
            self._transition(Phase.UPDATING)
            content = render_workflow(
                source,
                run.target_reference,
                self.region,
                run.source_type,
                self._credentials,
                event_type=self._event_type,
                registry_template=self._registry_template,
            )
            try:
                outcome = await self._backend.write_definition(content, run.source_reference)
            except MirrorError as e:
                self._fail(f"failed to update pipeline definition: {e}")
                return
            if self._stale(generation):
                return
            logger.info("Workflow definition %s", outcome.value)

            self._transition(Phase.TRIGGERING)
            try:
                await self._backend.trigger_run(self._event_type)
            except MirrorError as e:
                self._fail(f"failed to trigger workflow: {e}")
                return
            if self._stale(generation):
                return

            self._transition(Phase.CHECKING)
            self._start_polling()
        except Exception as e:
            logger.exception("Unexpected error while driving the mirror pipeline")
            if not self._stale(generation):
                self._fail(str(e) or type(e).__name__)

    # -- polling -----------------------------------------------------------

    def _start_polling(self) -> None:
        self._release_poll()
        self._poll_task = asyncio.create_task(self._poll_loop(self._generation))

    async def _poll_loop(self, generation: int) -> None:
        while self._phase is Phase.CHECKING and not self._stale(generation):
            await asyncio.sleep(self._poll_interval)
            await self.tick()

    async def tick(self) -> Phase:
        """Poll the latest run once. A no-op outside ``checking``."""
        if self._phase is not Phase.CHECKING or self._closed or self._ticking:
            return self._phase

        generation = self._generation
        self._ticking = True
        try:
            status = await self._backend.latest_run()
        except MirrorError as e:
            if not self._stale(generation):
                self._fail(f"failed to check workflow status: {e}")
            return self._phase
        except Exception as e:
            logger.exception("Unexpected error while polling the workflow run")
            if not self._stale(generation):
                self._fail(str(e) or type(e).__name__)
            return self._phase
        finally:
            self._ticking = False

        if self._stale(generation) or self._phase is not Phase.CHECKING:
            return self._phase
        if status is None or not status.is_terminal:
            logger.debug("Workflow run not finished yet (%s)", status.status if status else "no run")
            return self._phase
        if status.succeeded:
            self._finish()
        else:
            self._fail(str(RunFailureError(status.conclusion)))
        return self._phase

    async def wait(self) -> Phase:
        """Block until polling ends (terminal status, failure or close)."""
        task = self._poll_task
        if task is not None:
            await asyncio.wait({task})
        return self._phase

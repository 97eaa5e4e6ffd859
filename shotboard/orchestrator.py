"""
shotboard.orchestrator - Sequential batch image generation.

Drives one generate request per shot, strictly in order, with a fixed delay
between requests to stay under the service's rate limits. A failure aborts
the rest of the batch unless the policy says to continue; credential
failures always abort and are re-raised to the caller.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from shotboard.exceptions import BatchInProgressError, CredentialError, GenerationError
from shotboard.images.client import ImageService
from shotboard.logging import logger
from shotboard.models import BatchResult, Scene
from shotboard.state import ImageStateMap

Sleeper = Callable[[float], Awaitable[None]]

BATCH_ERROR_POLICIES = ("abort", "continue")


class GenerationOrchestrator:
    """Runs the batch of generate requests for a freshly segmented script."""

    def __init__(
        self,
        service: ImageService,
        states: ImageStateMap,
        delay_seconds: float = 15.0,
        on_error: str = "abort",
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        if on_error not in BATCH_ERROR_POLICIES:
            raise ValueError(f"on_error must be one of: {BATCH_ERROR_POLICIES}")
        self.service = service
        self.states = states
        self.delay_seconds = delay_seconds
        self.on_error = on_error
        self._sleep = sleep
        self._running_epoch: int | None = None
        self._batched_epochs: set[int] = set()

    @property
    def is_running(self) -> bool:
        return self._running_epoch is not None

    def is_running_for(self, epoch: int) -> bool:
        return self._running_epoch == epoch

    async def run_batch(self, scenes: list[Scene], epoch: int) -> BatchResult:
        """Generate images for all scenes, one at a time.

        Every scene is set to Loading before the first request. Scenes left
        unattempted after an abort stay Loading.

        Args:
            scenes: Scenes of the current script, in shot order
            epoch: Epoch the scenes belong to

        Returns:
            BatchResult summary

        Raises:
            BatchInProgressError: If a batch for this epoch is already running
            CredentialError: If the service rejected the credential; the
                failing scene is recorded as Error first
        """
        if self._running_epoch == epoch:
            raise BatchInProgressError(f"A batch for epoch {epoch} is already running")

        if not self.states.is_current(epoch):
            logger.debug("Ignoring batch for stale epoch %d", epoch)
            return BatchResult(stale=True, not_attempted=len(scenes))

        if epoch in self._batched_epochs:
            logger.info("Skipping batch: epoch %d was already batched", epoch)
            return BatchResult(skipped_batch=True)

        result = BatchResult()
        if not scenes:
            return result

        self._batched_epochs.add(epoch)
        self._running_epoch = epoch
        try:
            for scene in scenes:
                self.states.set_loading(scene.identifier, epoch)

            total = len(scenes)
            for index, scene in enumerate(scenes):
                if not self.states.is_current(epoch):
                    result.stale = True
                    result.not_attempted = total - index
                    logger.info("Script replaced, stopping batch at %s", scene.identifier)
                    break

                logger.debug("Generating %s (%d/%d)", scene.identifier, index + 1, total)
                try:
                    image = await self.service.generate_image(scene.visual_description)
                except GenerationError as e:
                    if not self.states.set_error(scene.identifier, epoch, e.message):
                        result.stale = True
                        result.not_attempted = total - index - 1
                        logger.info("Script replaced, dropping failure of %s", scene.identifier)
                        break
                    result.failed += 1
                    if isinstance(e, CredentialError) or self.on_error == "abort":
                        result.aborted = True
                        result.not_attempted = total - index - 1
                        logger.warning("Batch aborted at %s: %s", scene.identifier, e.message)
                        if isinstance(e, CredentialError):
                            raise
                        break
                    logger.warning("%s failed, continuing: %s", scene.identifier, e.message)
                except Exception as e:
                    self.states.set_error(scene.identifier, epoch, str(e) or "Generation failed")
                    raise
                else:
                    if not self.states.set_done(scene.identifier, epoch, image):
                        result.stale = True
                        result.not_attempted = total - index - 1
                        break
                    result.generated += 1

                if index < total - 1:
                    await self._sleep(self.delay_seconds)
        finally:
            if self._running_epoch == epoch:
                self._running_epoch = None

        return result

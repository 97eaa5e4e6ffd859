"""
shotboard.session - Storyboard session controller.

The single owner of the scene store and image state map. Exposes the
discrete commands a front end drives: submit a script, run the batch,
regenerate or edit one shot, and change a shot's instruction or description.
Credential failures surface here as a top-level error; every other failure
stays on its shot.
"""

from __future__ import annotations

from shotboard.config import ShotboardConfig
from shotboard.credentials import CredentialProvider
from shotboard.exceptions import CredentialError, CredentialRequiredError, SegmentationError
from shotboard.images.client import ImageService
from shotboard.logging import logger
from shotboard.models import BatchResult, ImageState, Scene
from shotboard.orchestrator import GenerationOrchestrator
from shotboard.regenerate import RegenerationController
from shotboard.segment import segment
from shotboard.state import ImageStateMap
from shotboard.store import SceneStore
from shotboard.tiers import TierSource

SEGMENTATION_FAILED_MESSAGE = "Failed to process the script into shots."
CREDENTIAL_REJECTED_MESSAGE = "Your API key is invalid or has been revoked. Please select a new one."
CREDENTIAL_MISSING_MESSAGE = "No API key is available. Please select an API key."


class StoryboardSession:
    """Owns the shots and their image states for one user session."""

    def __init__(
        self,
        config: ShotboardConfig,
        image_service: ImageService,
        credentials: CredentialProvider,
        tiers: TierSource | None = None,
        orchestrator: GenerationOrchestrator | None = None,
    ) -> None:
        self.config = config
        self.credentials = credentials
        self.tiers = tiers or TierSource(config.tier)
        self.store = SceneStore()
        self.states = ImageStateMap()
        self.orchestrator = orchestrator or GenerationOrchestrator(
            image_service,
            self.states,
            delay_seconds=config.batch_delay_seconds,
            on_error=config.on_batch_error,
        )
        self.regenerator = RegenerationController(image_service, self.states)

        self.error: str | None = None
        self.credential_needed = False
        self._group_size = config.resolved_group_size(self.tiers.tier)
        self._unsubscribe_tier = self.tiers.subscribe(self._on_tier_change)

    @property
    def scenes(self) -> list[Scene]:
        return self.store.scenes

    @property
    def epoch(self) -> int:
        return self.store.epoch

    @property
    def group_size(self) -> int:
        return self._group_size

    @property
    def is_generating(self) -> bool:
        return self.orchestrator.is_running_for(self.store.epoch)

    def image_state(self, identifier: str) -> ImageState:
        return self.states.get(identifier)

    def states_by_scene(self) -> dict[str, ImageState]:
        """Image state of every current shot, in shot order."""
        return {scene.identifier: self.states.get(scene.identifier) for scene in self.scenes}

    def _on_tier_change(self, tier: str) -> None:
        self._group_size = self.config.resolved_group_size(tier)
        logger.info("Tier %s: %d paragraph(s) per shot from the next script", tier, self._group_size)

    def close(self) -> None:
        """Stop listening for tier changes."""
        self._unsubscribe_tier()

    def submit_script(self, text: str) -> list[Scene]:
        """Replace the current shots with a segmentation of text.

        A blank script is a no-op. Results of requests still in flight for
        the previous script are discarded.

        Returns:
            The current scene list
        """
        if not text or not text.strip():
            return self.scenes

        self.error = None
        epoch = self.store.reset()
        self.states.reset(epoch)

        try:
            scenes = segment(text, self._group_size, self.config.segment_unit)
        except SegmentationError as e:
            logger.error("Segmentation failed: %s", e)
            self.error = SEGMENTATION_FAILED_MESSAGE
            return []

        self.store.load(scenes)
        logger.info("Script split into %d shot(s), epoch %d", len(scenes), epoch)
        return self.scenes

    def _surface_credential_error(self, error: CredentialError) -> None:
        logger.error("Credential rejected: %s", error.message)
        self.error = CREDENTIAL_REJECTED_MESSAGE
        self.credential_needed = True
        self.credentials.invalidate()

    def credential_selected(self) -> None:
        """Caller acquired a new credential; clear the credential condition."""
        self.credential_needed = False
        self.error = None

    def require_credential(self) -> None:
        """Raise CredentialRequiredError and flag the session if no key is available."""
        if not self.credentials.has_credential():
            self.credential_needed = True
            self.error = CREDENTIAL_MISSING_MESSAGE
            raise CredentialRequiredError(CREDENTIAL_MISSING_MESSAGE)

    async def run_batch(self) -> BatchResult | None:
        """Generate images for all current shots.

        Returns:
            BatchResult, or None if no credential is available or a
            credential error stopped the batch
        """
        try:
            self.require_credential()
        except CredentialRequiredError:
            return None

        self.error = None
        try:
            return await self.orchestrator.run_batch(self.scenes, self.store.epoch)
        except CredentialError as e:
            self._surface_credential_error(e)
            return None

    async def regenerate(self, identifier: str) -> ImageState:
        """Edit or regenerate one shot (see RegenerationController.regenerate)."""
        scene = self.store.get(identifier)
        try:
            return await self.regenerator.regenerate(scene, self.store.epoch)
        except CredentialError as e:
            self._surface_credential_error(e)
            return self.states.get(identifier)

    async def full_regenerate(self, identifier: str) -> ImageState:
        """Regenerate one shot from its visual description."""
        scene = self.store.get(identifier)
        try:
            return await self.regenerator.full_regenerate(scene, self.store.epoch)
        except CredentialError as e:
            self._surface_credential_error(e)
            return self.states.get(identifier)

    def update_instruction(self, identifier: str, text: str) -> Scene:
        return self.store.update_instruction(identifier, text)

    def update_description(self, identifier: str, text: str) -> Scene:
        return self.store.update_description(identifier, text)

    def attach_image(self, identifier: str, image: str) -> None:
        """Record an existing image as the shot's Done result."""
        self.store.get(identifier)
        self.states.set_done(identifier, self.store.epoch, image)

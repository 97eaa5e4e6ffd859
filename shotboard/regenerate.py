"""
shotboard.regenerate - Single-shot regenerate and edit.

User-triggered requests for one shot, independent of the batch: no delay,
no abort policy, and any number may be in flight at once. The state entry
ends up holding whichever request resolved last.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from shotboard.exceptions import CredentialError, GenerationError
from shotboard.images.client import ImageService
from shotboard.logging import logger
from shotboard.models import Done, Error, ImageState, Scene
from shotboard.state import ImageStateMap


class RegenerationController:
    """Regenerates or edits the image of a single shot."""

    def __init__(self, service: ImageService, states: ImageStateMap) -> None:
        self.service = service
        self.states = states

    async def regenerate(self, scene: Scene, epoch: int) -> ImageState:
        """Edit the existing image if possible, otherwise generate a new one.

        Edits only when the shot currently has a Done image and a non-blank
        edit instruction.
        """
        current = self.states.get(scene.identifier)
        if isinstance(current, Done) and scene.edit_instruction.strip():
            source = current.image
            return await self._run(
                scene,
                epoch,
                "edit",
                lambda: self.service.edit_image(source, scene.edit_instruction),
            )
        return await self.full_regenerate(scene, epoch)

    async def full_regenerate(self, scene: Scene, epoch: int) -> ImageState:
        """Generate a fresh image from the visual description."""
        return await self._run(
            scene,
            epoch,
            "generate",
            lambda: self.service.generate_image(scene.visual_description),
        )

    async def _run(
        self,
        scene: Scene,
        epoch: int,
        action: str,
        request: Callable[[], Awaitable[str]],
    ) -> ImageState:
        if not self.states.set_loading(scene.identifier, epoch):
            return self.states.get(scene.identifier)

        logger.debug("%s %s", action.capitalize(), scene.identifier)
        try:
            image = await request()
        except GenerationError as e:
            if not self.states.set_error(scene.identifier, epoch, e.message):
                return self.states.get(scene.identifier)
            if isinstance(e, CredentialError):
                raise
            return Error(message=e.message)
        except Exception as e:
            self.states.set_error(scene.identifier, epoch, str(e) or f"{action} failed")
            raise

        if not self.states.set_done(scene.identifier, epoch, image):
            return self.states.get(scene.identifier)
        return Done(image=image)

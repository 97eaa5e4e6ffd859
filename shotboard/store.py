"""
shotboard.store - In-memory scene store.

Holds the ordered scenes of the current script, keyed by identifier, and the
epoch counter that is bumped every time the scene set is replaced.
"""

from __future__ import annotations

from shotboard.exceptions import SceneNotFoundError
from shotboard.logging import logger
from shotboard.models import Scene


class SceneStore:
    """Ordered, identifier-keyed collection of the current scenes."""

    def __init__(self) -> None:
        self._scenes: dict[str, Scene] = {}
        self._epoch = 0

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def scenes(self) -> list[Scene]:
        return list(self._scenes.values())

    def __len__(self) -> int:
        return len(self._scenes)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._scenes

    def reset(self) -> int:
        """Drop all scenes and start a new epoch.

        Returns:
            The new epoch number
        """
        self._scenes = {}
        self._epoch += 1
        logger.debug("Scene store reset, epoch %d", self._epoch)
        return self._epoch

    def load(self, scenes: list[Scene]) -> None:
        """Replace the contents of the current epoch with scenes, in order."""
        loaded: dict[str, Scene] = {}
        for scene in scenes:
            if scene.identifier in loaded:
                raise ValueError(f"Duplicate shot identifier: {scene.identifier}")
            loaded[scene.identifier] = scene
        self._scenes = loaded

    def get(self, identifier: str) -> Scene:
        """Get a scene by identifier.

        Raises:
            SceneNotFoundError: If no such scene exists
        """
        try:
            return self._scenes[identifier]
        except KeyError:
            raise SceneNotFoundError(identifier) from None

    def update_instruction(self, identifier: str, text: str) -> Scene:
        """Replace a scene's edit instruction. Image state is untouched."""
        scene = self.get(identifier).model_copy(update={"edit_instruction": text})
        self._scenes[identifier] = scene
        return scene

    def update_description(self, identifier: str, text: str) -> Scene:
        """Replace the visual description used for the next generation."""
        scene = self.get(identifier).model_copy(update={"visual_description": text})
        self._scenes[identifier] = scene
        return scene

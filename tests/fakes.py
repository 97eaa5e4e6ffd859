"""
Scripted image service used across the test suite.
"""

from __future__ import annotations

import asyncio

from shotboard.images.handles import to_data_uri


def fake_handle(kind: str, text: str) -> str:
    """Handle the fake service returns for a request."""
    return to_data_uri(f"{kind}:{text}".encode())


class FakeImageService:
    """Scripted stand-in for the image service.

    Records every call. ``failures`` maps a description or instruction to
    the exception raised for it. In manual mode each call waits on a future
    in ``pending`` that the test resolves.
    """

    def __init__(
        self,
        failures: dict[str, Exception] | None = None,
        manual: bool = False,
    ) -> None:
        self.failures = failures or {}
        self.manual = manual
        self.calls: list[tuple[str, ...]] = []
        self.pending: list[asyncio.Future] = []

    async def generate_image(self, description: str) -> str:
        self.calls.append(("generate", description))
        return await self._respond("generate", description)

    async def edit_image(self, source_handle: str, instruction: str) -> str:
        self.calls.append(("edit", source_handle, instruction))
        return await self._respond("edit", instruction)

    async def _respond(self, kind: str, text: str) -> str:
        if self.manual:
            future = asyncio.get_running_loop().create_future()
            self.pending.append(future)
            return await future
        if text in self.failures:
            raise self.failures[text]
        return fake_handle(kind, text)

    async def wait_for_pending(self, count: int) -> None:
        while len(self.pending) < count:
            await asyncio.sleep(0)

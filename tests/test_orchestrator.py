"""Tests for shotboard.orchestrator module."""

from __future__ import annotations

import asyncio

import pytest

from fakes import FakeImageService, fake_handle
from shotboard.exceptions import (
    BatchInProgressError,
    CredentialRevokedError,
    ServiceError,
)
from shotboard.models import Done, Error, Loading, Scene
from shotboard.orchestrator import GenerationOrchestrator
from shotboard.state import ImageStateMap


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def make_orchestrator(service, on_error: str = "abort", delay: float = 15.0):
    states = ImageStateMap()
    states.reset(1)
    sleeper = SleepRecorder()
    orchestrator = GenerationOrchestrator(
        service, states, delay_seconds=delay, on_error=on_error, sleep=sleeper
    )
    return orchestrator, states, sleeper


class TestRunBatch:
    @pytest.mark.asyncio
    async def test_all_succeed_in_order(self, sample_scenes: list[Scene]) -> None:
        service = FakeImageService()
        orchestrator, states, sleeper = make_orchestrator(service)

        result = await orchestrator.run_batch(sample_scenes, 1)

        assert result.generated == 3
        assert result.failed == 0
        assert not result.aborted
        assert [c[1] for c in service.calls] == ["Paragraph 1.", "Paragraph 2.", "Paragraph 3."]
        for scene in sample_scenes:
            assert states.get(scene.identifier) == Done(
                image=fake_handle("generate", scene.visual_description)
            )

    @pytest.mark.asyncio
    async def test_delay_between_requests_only(self, sample_scenes: list[Scene]) -> None:
        orchestrator, _, sleeper = make_orchestrator(FakeImageService(), delay=15.0)
        await orchestrator.run_batch(sample_scenes, 1)
        assert sleeper.delays == [15.0, 15.0]

    @pytest.mark.asyncio
    async def test_all_loading_before_first_request(self, sample_scenes: list[Scene]) -> None:
        service = FakeImageService(manual=True)
        orchestrator, states, _ = make_orchestrator(service)

        task = asyncio.create_task(orchestrator.run_batch(sample_scenes, 1))
        await service.wait_for_pending(1)

        assert all(isinstance(states.get(s.identifier), Loading) for s in sample_scenes)
        assert len(service.calls) == 1

        for index in range(3):
            await service.wait_for_pending(index + 1)
            service.pending[index].set_result(f"img{index}")
        await task

    @pytest.mark.asyncio
    async def test_second_failure_aborts_batch(self, sample_scenes: list[Scene]) -> None:
        service = FakeImageService(failures={"Paragraph 2.": ServiceError("Quota exceeded")})
        orchestrator, states, sleeper = make_orchestrator(service)

        result = await orchestrator.run_batch(sample_scenes, 1)

        assert isinstance(states.get("Shot 1"), Done)
        assert states.get("Shot 2") == Error(message="Quota exceeded")
        assert isinstance(states.get("Shot 3"), Loading)
        assert len(service.calls) == 2
        assert sleeper.delays == [15.0]
        assert result.aborted
        assert result.not_attempted == 1

    @pytest.mark.asyncio
    async def test_continue_policy_skips_failed_scene(self, sample_scenes: list[Scene]) -> None:
        service = FakeImageService(failures={"Paragraph 2.": ServiceError("boom")})
        orchestrator, states, sleeper = make_orchestrator(service, on_error="continue")

        result = await orchestrator.run_batch(sample_scenes, 1)

        assert isinstance(states.get("Shot 1"), Done)
        assert isinstance(states.get("Shot 2"), Error)
        assert isinstance(states.get("Shot 3"), Done)
        assert result.generated == 2
        assert result.failed == 1
        assert not result.aborted
        assert sleeper.delays == [15.0, 15.0]

    @pytest.mark.asyncio
    async def test_credential_error_aborts_and_raises(self, sample_scenes: list[Scene]) -> None:
        revoked = CredentialRevokedError("Requested entity was not found.")
        service = FakeImageService(failures={"Paragraph 1.": revoked})
        orchestrator, states, _ = make_orchestrator(service, on_error="continue")

        with pytest.raises(CredentialRevokedError):
            await orchestrator.run_batch(sample_scenes, 1)

        assert isinstance(states.get("Shot 1"), Error)
        assert isinstance(states.get("Shot 2"), Loading)
        assert len(service.calls) == 1
        assert not orchestrator.is_running

    @pytest.mark.asyncio
    async def test_second_run_for_same_scenes_is_skipped(self, sample_scenes: list[Scene]) -> None:
        service = FakeImageService()
        orchestrator, _, _ = make_orchestrator(service)

        await orchestrator.run_batch(sample_scenes, 1)
        result = await orchestrator.run_batch(sample_scenes, 1)

        assert result.skipped_batch
        assert len(service.calls) == 3

    @pytest.mark.asyncio
    async def test_existing_shot_state_does_not_skip_batch(self, sample_scenes: list[Scene]) -> None:
        service = FakeImageService()
        orchestrator, states, _ = make_orchestrator(service)
        states.set_done("Shot 1", 1, "regenerated")

        result = await orchestrator.run_batch(sample_scenes, 1)

        assert not result.skipped_batch
        assert result.generated == 3
        assert len(service.calls) == 3

    @pytest.mark.asyncio
    async def test_new_epoch_is_batched_again(self, sample_scenes: list[Scene]) -> None:
        service = FakeImageService()
        orchestrator, states, _ = make_orchestrator(service)

        await orchestrator.run_batch(sample_scenes, 1)
        states.reset(2)
        result = await orchestrator.run_batch(sample_scenes, 2)

        assert result.generated == 3
        assert len(service.calls) == 6

    @pytest.mark.asyncio
    async def test_not_reentrant(self, sample_scenes: list[Scene]) -> None:
        service = FakeImageService(manual=True)
        orchestrator, _, _ = make_orchestrator(service)

        task = asyncio.create_task(orchestrator.run_batch(sample_scenes, 1))
        await service.wait_for_pending(1)

        with pytest.raises(BatchInProgressError):
            await orchestrator.run_batch(sample_scenes, 1)

        for index in range(3):
            await service.wait_for_pending(index + 1)
            service.pending[index].set_result("img")
        await task
        assert len(service.calls) == 3

    @pytest.mark.asyncio
    async def test_stops_when_epoch_moves_on(self, sample_scenes: list[Scene]) -> None:
        service = FakeImageService(manual=True)
        orchestrator, states, _ = make_orchestrator(service)

        task = asyncio.create_task(orchestrator.run_batch(sample_scenes, 1))
        await service.wait_for_pending(1)
        states.reset(2)
        service.pending[0].set_result("old")
        result = await task

        assert result.stale
        assert result.generated == 0
        assert len(service.calls) == 1
        assert states.snapshot() == {}

    @pytest.mark.asyncio
    async def test_credential_failure_after_epoch_moves_on_is_dropped(
        self, sample_scenes: list[Scene]
    ) -> None:
        service = FakeImageService(manual=True)
        orchestrator, states, _ = make_orchestrator(service)

        task = asyncio.create_task(orchestrator.run_batch(sample_scenes, 1))
        await service.wait_for_pending(1)
        states.reset(2)
        service.pending[0].set_exception(CredentialRevokedError("Requested entity was not found."))
        result = await task

        assert result.stale
        assert result.failed == 0
        assert not result.aborted
        assert result.not_attempted == 2
        assert states.snapshot() == {}

    @pytest.mark.asyncio
    async def test_empty_scene_list(self) -> None:
        service = FakeImageService()
        orchestrator, _, _ = make_orchestrator(service)
        result = await orchestrator.run_batch([], 1)
        assert result.generated == 0
        assert service.calls == []

    def test_invalid_policy_raises(self) -> None:
        with pytest.raises(ValueError):
            GenerationOrchestrator(FakeImageService(), ImageStateMap(), on_error="retry")

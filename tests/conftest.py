"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from fakes import FakeImageService
from shotboard.config import ShotboardConfig
from shotboard.credentials import StaticCredentialProvider
from shotboard.models import Scene
from shotboard.session import StoryboardSession

SAMPLE_SCRIPT = """A lighthouse keeper climbs the spiral stairs at dusk.

Waves crash against the rocks below as the lamp flickers on.


A small boat appears on the horizon, fighting the storm.

The keeper swings the beam toward the boat.

The boat reaches the harbor at dawn."""


@pytest.fixture
def sample_script() -> str:
    return SAMPLE_SCRIPT


@pytest.fixture
def sample_scenes() -> list[Scene]:
    return [
        Scene(
            identifier=f"Shot {i}",
            original_text=f"Paragraph {i}.",
            visual_description=f"Paragraph {i}.",
        )
        for i in range(1, 4)
    ]


@pytest.fixture
def fast_config() -> ShotboardConfig:
    """Config with no inter-request delay."""
    return ShotboardConfig(batch_delay_seconds=0.0)


@pytest.fixture
def fake_service() -> FakeImageService:
    return FakeImageService()


@pytest.fixture
def credentials() -> StaticCredentialProvider:
    return StaticCredentialProvider(available=True)


@pytest.fixture
def session(
    fast_config: ShotboardConfig,
    fake_service: FakeImageService,
    credentials: StaticCredentialProvider,
) -> StoryboardSession:
    return StoryboardSession(fast_config, fake_service, credentials)


@pytest.fixture
def tmp_workspace(tmp_path: Path) -> Path:
    """Directory with a shotboard.yaml and a script file."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()

    config = {"tier": "free", "batch_delay_seconds": 0.0}
    with open(workspace / "shotboard.yaml", "w") as f:
        yaml.dump(config, f)

    (workspace / "script.txt").write_text(SAMPLE_SCRIPT, encoding="utf-8")
    return workspace

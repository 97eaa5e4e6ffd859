"""
shotboard.config - YAML config loading, tier merging, validation.

Handles loading shotboard.yaml, applying tier defaults, and validating
all parameters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

CONFIG_FILENAME = "shotboard.yaml"

DEFAULT_PROMPT_TEMPLATE = "{{ description }}, cinematic film still"


class ShotboardConfig(BaseModel):
    """Resolved configuration for a Shotboard session."""

    tier: str = "free"
    group_size: int | None = Field(default=None, ge=1)
    segment_unit: str = "paragraph"

    image_model: str = "gemini/imagen-4.0-generate-001"
    edit_model: str = "gemini/gemini-2.5-flash-image"
    aspect_ratio: str = "16:9"
    image_size: str | None = None
    prompt_template: str = DEFAULT_PROMPT_TEMPLATE

    batch_delay_seconds: float = Field(default=15.0, ge=0.0)
    on_batch_error: str = "abort"

    api_key_env: str = "GEMINI_API_KEY"
    request_timeout: int = Field(default=120, gt=0)
    max_retries: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=2.0, ge=0.0)

    config_path: Path | None = None

    @field_validator("tier")
    @classmethod
    def validate_tier(cls, v: str) -> str:
        if v not in BUILTIN_TIERS:
            raise ValueError(f"tier must be one of: {set(BUILTIN_TIERS)}")
        return v

    @field_validator("segment_unit")
    @classmethod
    def validate_segment_unit(cls, v: str) -> str:
        valid = {"paragraph", "sentence"}
        if v not in valid:
            raise ValueError(f"segment_unit must be one of: {valid}")
        return v

    @field_validator("on_batch_error")
    @classmethod
    def validate_on_batch_error(cls, v: str) -> str:
        valid = {"abort", "continue"}
        if v not in valid:
            raise ValueError(f"on_batch_error must be one of: {valid}")
        return v

    @field_validator("prompt_template")
    @classmethod
    def validate_prompt_template(cls, v: str) -> str:
        if "description" not in v:
            raise ValueError("prompt_template must reference {{ description }}")
        return v

    def resolved_group_size(self, tier: str | None = None) -> int:
        """Paragraphs per shot for a tier; an explicit group_size wins."""
        if self.group_size is not None:
            return self.group_size
        return load_tier(tier or self.tier)["group_size"]


BUILTIN_TIERS: dict[str, dict[str, Any]] = {
    "free": {
        "group_size": 1,
        "batch_delay_seconds": 15.0,
    },
    "paid": {
        "group_size": 2,
        "batch_delay_seconds": 15.0,
    },
}


def load_tier(name: str) -> dict[str, Any]:
    """Load the built-in settings for a tier."""
    if name in BUILTIN_TIERS:
        return BUILTIN_TIERS[name].copy()
    raise ValueError(f"Unknown tier: {name}")


def merge_config(project_config: dict[str, Any], tier: dict[str, Any]) -> dict[str, Any]:
    """Merge project config with tier defaults. Project config takes precedence."""
    merged = tier.copy()
    for key, value in project_config.items():
        if value is not None:
            merged[key] = value
    return merged


def load_config(config_file: Path) -> ShotboardConfig:
    """Load and validate configuration from a shotboard.yaml file."""
    if not config_file.exists():
        raise FileNotFoundError(f"No {CONFIG_FILENAME} found at {config_file}")

    with open(config_file) as f:
        raw_config = yaml.safe_load(f) or {}

    tier = load_tier(raw_config.get("tier", "free"))
    # group_size stays unset so later tier changes still resolve per tier
    tier.pop("group_size", None)

    merged = merge_config(raw_config, tier)
    merged["config_path"] = config_file

    return ShotboardConfig(**merged)


def find_config(start: Path | None = None) -> Path | None:
    """Find shotboard.yaml by walking up from start (default: cwd)."""
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def create_default_config(tier: str = "free") -> dict[str, Any]:
    """Create a default config for a new workspace."""
    defaults = {
        "tier": tier,
        "segment_unit": "paragraph",
        "image_model": "gemini/imagen-4.0-generate-001",
        "edit_model": "gemini/gemini-2.5-flash-image",
        "aspect_ratio": "16:9",
        "prompt_template": DEFAULT_PROMPT_TEMPLATE,
        "on_batch_error": "abort",
        "api_key_env": "GEMINI_API_KEY",
    }
    tier_defaults = load_tier(tier)
    tier_defaults.pop("group_size", None)
    return merge_config(defaults, tier_defaults)


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)

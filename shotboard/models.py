"""
shotboard.models - Scene and image state data types.

ImageState is a tagged union of Idle, Loading, Done and Error, discriminated
by the literal ``status`` field.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Scene(BaseModel):
    """One shot of the script, mapped to one generated image."""

    identifier: str
    original_text: str
    visual_description: str
    edit_instruction: str = ""


class Idle(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["idle"] = "idle"


class Loading(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["loading"] = "loading"


class Done(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["done"] = "done"
    image: str


class Error(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["error"] = "error"
    message: str


ImageState = Annotated[Union[Idle, Loading, Done, Error], Field(discriminator="status")]

IDLE = Idle()
LOADING = Loading()


class BatchResult(BaseModel):
    """Summary of one batch run."""

    generated: int = 0
    failed: int = 0
    not_attempted: int = 0
    aborted: bool = False
    stale: bool = False
    skipped_batch: bool = False

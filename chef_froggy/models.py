"""Core domain models.

Recipes and steps are static catalog data; messages and choices are recorded
by a cooking session as the player answers each step. All of them are frozen
once constructed. Pydantic is used for validation and serialisation at every
data boundary.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]

EventType = Literal[
    "instruction_ready",
    "recap_ready",
    "recap_text",
    "session_complete",
    "error",
]

ErrorKind = Literal["invalid_state", "provider"]


class Step(BaseModel):
    """One question the chef asks while cooking a recipe."""

    model_config = ConfigDict(frozen=True)

    instruction: str = Field(min_length=1)


class Recipe(BaseModel):
    """A named, ordered list of steps."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    steps: tuple[Step, ...] = Field(min_length=1)


class Message(BaseModel):
    """A single role-tagged entry in a session's ledger."""

    model_config = ConfigDict(frozen=True)

    role: Role
    text: str


class Choice(BaseModel):
    """What the player answered for one step."""

    model_config = ConfigDict(frozen=True)

    step_index: int = Field(ge=0)
    player_text: str


class Event(BaseModel):
    """An outbound notification for whatever is driving the UI."""

    model_config = ConfigDict(frozen=True)

    type: EventType
    text: str | None = None  # absent on recap_ready / session_complete
    error_kind: ErrorKind | None = None  # set on error events only

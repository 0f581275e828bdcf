"""Per-recipe session state and the phase guard.

A Session is created each time a recipe is selected and is owned by exactly
one StepSequencer. Phases:

    idle            no recipe selected (no Session exists)
    awaiting_input  the current step's instruction has been shown
    generating      the player replied; a call is in flight or has failed
    recap_pending   every step is answered, the recap has not been produced
    done            the recap has been produced

Invariants kept by the sequencer:
  - 0 <= step_index <= len(recipe.steps); equality means recap_pending/done
  - len(choices) == step_index, except while an exchange is in flight
  - at most one generation call in flight (in_flight)
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from chef_froggy.ledger import Ledger
from chef_froggy.models import Choice, Recipe, Step

Phase = Literal["idle", "awaiting_input", "generating", "recap_pending", "done"]


class InvalidStateError(RuntimeError):
    """Raised when an operation is invoked outside the phase that allows it."""

    def __init__(self, operation: str, phase: str, reason: str = "") -> None:
        detail = f" ({reason})" if reason else ""
        super().__init__(f"{operation} is not allowed in phase {phase!r}{detail}")
        self.operation = operation
        self.phase = phase


class Session(BaseModel):
    id: int
    recipe: Recipe
    ledger: Ledger
    step_index: int = 0
    choices: list[Choice] = Field(default_factory=list)
    phase: Phase = "awaiting_input"
    pending_reply: str | None = None
    in_flight: bool = False
    superseded: bool = False
    recap: str | None = None

    @property
    def current_step(self) -> Step:
        return self.recipe.steps[self.step_index]

    def require(self, operation: str, *phases: Phase) -> None:
        if self.phase not in phases:
            raise InvalidStateError(operation, self.phase)
        if self.in_flight:
            raise InvalidStateError(operation, self.phase, "a generation call is in flight")

    def stage_exchange(self, reply: str) -> int:
        """Record the player's reply; returns the ledger mark to roll back to."""
        mark = self.ledger.mark()
        self.choices.append(Choice(step_index=self.step_index, player_text=reply))
        self.ledger.append("user", reply)
        return mark

    def rollback_exchange(self, mark: int) -> None:
        del self.choices[self.step_index:]
        self.ledger.rollback(mark)

    def snapshot(self) -> dict:
        """JSON-ready view of the session for UIs."""
        return {
            "id": self.id,
            "recipe": self.recipe.name,
            "phase": self.phase,
            "step_index": self.step_index,
            "step_count": len(self.recipe.steps),
            "choices": [c.model_dump() for c in self.choices],
            "messages": [m.model_dump() for m in self.ledger.messages],
            "pending_reply": self.pending_reply,
            "recap": self.recap,
        }

"""Conversation ledger — the ordered record of a session's messages.

The ledger always starts with exactly one system message (the persona
context). User and assistant messages are appended after it in the order they
happen. Only the messages of an exchange that never completed can be taken
back out again, via mark()/rollback(); the system message is never removed.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from chef_froggy.models import Message, Role


class Ledger(BaseModel):
    messages: list[Message] = Field(min_length=1)

    @model_validator(mode="after")
    def check_system_message(self) -> Ledger:
        if self.messages[0].role != "system":
            raise ValueError("The ledger must start with the system message")
        if any(m.role == "system" for m in self.messages[1:]):
            raise ValueError("The ledger holds exactly one system message")
        return self

    @classmethod
    def seeded(cls, context: str) -> Ledger:
        return cls(messages=[Message(role="system", text=context)])

    def __len__(self) -> int:
        return len(self.messages)

    @property
    def system(self) -> Message:
        return self.messages[0]

    def append(self, role: Role, text: str) -> Message:
        if role == "system":
            raise ValueError("The ledger holds exactly one system message")
        msg = Message(role=role, text=text)
        self.messages.append(msg)
        return msg

    def mark(self) -> int:
        """Position to roll back to if the next exchange fails."""
        return len(self.messages)

    def rollback(self, mark: int) -> None:
        if mark < 1:
            raise ValueError("Cannot roll back past the system message")
        del self.messages[mark:]

    # ------------------------------------------------------------------
    # Renderings
    # ------------------------------------------------------------------

    def as_chat(self) -> list[dict[str, str]]:
        """Messages in the role/content shape chat-completion APIs expect."""
        return [{"role": m.role, "content": m.text} for m in self.messages]

    def transcript(self, chef: str = "Chef", player: str = "Player") -> str:
        """Human-readable exchange log, without the system preamble."""
        labels = {"user": player, "assistant": chef}
        return "\n".join(
            f"{labels[m.role]}: {m.text}" for m in self.messages[1:]
        )

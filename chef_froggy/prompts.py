"""Prompt construction for the chef's lines and the end-of-recipe recap.

Step prompts deliberately carry only the persona context plus the current
instruction and the player's reply, not the full ledger.
"""

from __future__ import annotations

from collections.abc import Sequence

from chef_froggy.models import Choice, Recipe

PERSONA_CONTEXT = (
    "You are Chef Froggy, a friendly frog who is a skilled chef in a charming "
    "forest restaurant. Your goal is to guide players through various recipes "
    "and cooking steps, providing helpful instructions and ensuring a "
    "delightful culinary experience. Keep your responses short and engaging, "
    "focusing on the player's input and moving to the next step. You also try "
    "to refrain from using Great Choice or Let's get cooking! You NEVER give "
    "full recipes/direct instructions or ask the customer questions!"
)

DEFAULT_CHEF = "Chef"

RECAP_HEADER = "Here are the choices the player made:"
RECAP_CLOSING = "please provide a friendly and engaging summary of the player's choices."


def build_step_prompt(
    persona: str,
    instruction: str,
    reply: str,
    chef: str = DEFAULT_CHEF,
) -> str:
    return f"{persona}\n\n{chef}: {instruction}\nPlayer: {reply}\n{chef}:"


def format_choices(recipe: Recipe, choices: Sequence[Choice]) -> str:
    """One "<instruction> Player chose: <text>. " fragment per choice, in step order."""
    parts: list[str] = []
    for choice in sorted(choices, key=lambda c: c.step_index):
        if choice.step_index >= len(recipe.steps):
            raise ValueError(
                f"Choice for step {choice.step_index} but {recipe.name!r} "
                f"has {len(recipe.steps)} steps"
            )
        instruction = recipe.steps[choice.step_index].instruction
        parts.append(f"{instruction} Player chose: {choice.player_text}. ")
    return "".join(parts)


def build_recap_prompt(
    persona: str,
    recipe: Recipe,
    choices: Sequence[Choice],
    chef: str = DEFAULT_CHEF,
) -> str:
    return (
        f"{persona}\n\n"
        f"{RECAP_HEADER}\n"
        f"{format_choices(recipe, choices)}"
        f"\n{chef}, {RECAP_CLOSING}"
    )

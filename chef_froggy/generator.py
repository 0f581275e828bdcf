"""Response generator — turns "ask the chef" requests into LLM calls.

The generator builds the prompt, calls the injected LLM with the configured
provider id, and returns the stripped text. It never retries and imposes no
deadline of its own; ProviderError propagates to the caller unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from chef_froggy.llm import LLM, ProviderError
from chef_froggy.models import Choice, Recipe
from chef_froggy.prompts import (
    DEFAULT_CHEF,
    PERSONA_CONTEXT,
    build_recap_prompt,
    build_step_prompt,
)

logger = logging.getLogger(__name__)


class ResponseGenerator:
    def __init__(
        self,
        llm: LLM,
        provider: str = "openai",
        persona: str = PERSONA_CONTEXT,
        chef: str = DEFAULT_CHEF,
    ) -> None:
        self._llm = llm
        self.provider = provider
        self.persona = persona
        self.chef = chef

    async def next_line(self, instruction: str, reply: str) -> str:
        """The chef's reaction to the player's reply to one step."""
        prompt = build_step_prompt(self.persona, instruction, reply, chef=self.chef)
        return await self._generate("step", prompt)

    async def summary(self, recipe: Recipe, choices: Sequence[Choice]) -> str:
        """The chef's friendly recap of every choice made for `recipe`."""
        prompt = build_recap_prompt(self.persona, recipe, choices, chef=self.chef)
        return await self._generate("recap", prompt)

    async def _generate(self, kind: str, prompt: str) -> str:
        logger.debug("generate %s provider=%s prompt_len=%d", kind, self.provider, len(prompt))
        try:
            text = await self._llm(self.provider, prompt)
        except ProviderError as e:
            logger.warning("%s generation failed (provider=%s): %s", kind, self.provider, e)
            raise
        return text.strip()

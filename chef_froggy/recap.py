"""Recap synthesizer — the single summary call that ends a session."""

from __future__ import annotations

import logging
from collections.abc import Callable

from chef_froggy.generator import ResponseGenerator
from chef_froggy.llm import ProviderError
from chef_froggy.models import Event
from chef_froggy.session import Session

logger = logging.getLogger(__name__)


class RecapSynthesizer:
    def __init__(self, generator: ResponseGenerator) -> None:
        self._generator = generator

    async def run(self, session: Session, emit: Callable[[Event], None]) -> str | None:
        """Summarize every choice of a recap_pending session and mark it done.

        Returns the recap text, or None when the session was superseded while
        the call was in flight. On any failure the session stays
        recap_pending and the error propagates.
        """
        session.require("request_recap", "recap_pending")
        session.in_flight = True
        try:
            text = await self._generator.summary(session.recipe, session.choices)
        except ProviderError as e:
            if session.superseded:
                logger.info("Discarding recap failure for superseded session %d", session.id)
                return None
            emit(Event(type="error", text=str(e), error_kind="provider"))
            raise
        finally:
            session.in_flight = False

        if session.superseded:
            logger.info("Discarding recap for superseded session %d", session.id)
            return None

        session.recap = text
        session.phase = "done"
        logger.info("Session %d complete (%s)", session.id, session.recipe.name)
        emit(Event(type="recap_text", text=text))
        emit(Event(type="session_complete"))
        return text

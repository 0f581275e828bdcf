"""Step sequencer — the state machine that walks a player through a recipe.

Flow for one recipe:

  1. select_recipe()/start() → new Session, emit instruction_ready(step 0).
  2. submit_response(text)   → record choice + user message, call the
                               generator, then either emit
                               instruction_ready(next step) or recap_ready.
  3. request_recap()         → RecapSynthesizer emits recap_text and
                               session_complete.

Selecting a recipe while a call is in flight supersedes the old session; the
late result of that call is dropped when it resolves. Events go to the
listener injected at construction; errors are emitted as an "error" event
and raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from chef_froggy.catalog import DEFAULT_CATALOG, Catalog
from chef_froggy.generator import ResponseGenerator
from chef_froggy.ledger import Ledger
from chef_froggy.llm import ProviderError
from chef_froggy.models import Event, Recipe
from chef_froggy.recap import RecapSynthesizer
from chef_froggy.session import InvalidStateError, Phase, Session

logger = logging.getLogger(__name__)

Listener = Callable[[Event], None]


def _ignore(event: Event) -> None:
    pass


class StepSequencer:
    def __init__(
        self,
        generator: ResponseGenerator,
        catalog: Catalog = DEFAULT_CATALOG,
        listener: Listener = _ignore,
    ) -> None:
        self._generator = generator
        self._recap = RecapSynthesizer(generator)
        self.catalog = catalog
        self._listener = listener
        self._session: Session | None = None
        self._next_id = 1

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def phase(self) -> Phase:
        return self._session.phase if self._session else "idle"

    # ------------------------------------------------------------------
    # Inbound operations
    # ------------------------------------------------------------------

    def select_recipe(self, index: int) -> Session:
        """Start the catalog recipe at `index`. Raises UnknownRecipeError."""
        return self.start(self.catalog.get(index))

    def start(self, recipe: Recipe) -> Session:
        """Start `recipe` from its first step, abandoning any current session."""
        old = self._session
        if old is not None:
            old.superseded = True
            if old.in_flight:
                logger.info("Session %d superseded with a call in flight", old.id)

        session = Session(
            id=self._next_id,
            recipe=recipe,
            ledger=Ledger.seeded(self._generator.persona),
        )
        self._next_id += 1
        self._session = session
        logger.info("Session %d started: %s", session.id, recipe.name)
        self._emit(Event(type="instruction_ready", text=session.current_step.instruction))
        return session

    async def submit_response(self, text: str) -> str | None:
        """Answer the current step. Returns the chef's reply.

        Returns None if the session was superseded before the reply arrived.
        """
        session = self._require("submit_response", "awaiting_input")
        session.pending_reply = text
        session.phase = "generating"
        return await self._exchange(session)

    async def retry(self) -> str | None:
        """Reissue the last failed step call with the same reply."""
        session = self._require("retry", "generating")
        return await self._exchange(session)

    def abandon_step(self) -> None:
        """Give up on a failed step call and ask the same step again."""
        session = self._require("abandon_step", "generating")
        session.pending_reply = None
        session.phase = "awaiting_input"
        self._emit(Event(type="instruction_ready", text=session.current_step.instruction))

    async def request_recap(self) -> str | None:
        session = self._require("request_recap", "recap_pending")
        return await self._recap.run(session, self._emit)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _emit(self, event: Event) -> None:
        self._listener(event)

    def _require(self, operation: str, *phases: Phase) -> Session:
        try:
            if self._session is None:
                raise InvalidStateError(operation, "idle")
            self._session.require(operation, *phases)
        except InvalidStateError as e:
            self._emit(Event(type="error", text=str(e), error_kind="invalid_state"))
            raise
        return self._session

    async def _exchange(self, session: Session) -> str | None:
        reply = session.pending_reply
        assert reply is not None, "generating phase without a pending reply"
        instruction = session.current_step.instruction

        mark = session.stage_exchange(reply)
        session.in_flight = True
        try:
            text = await self._generator.next_line(instruction, reply)
        except (Exception, asyncio.CancelledError) as e:
            if session.superseded:
                if isinstance(e, ProviderError):
                    logger.info("Discarding failed call for superseded session %d", session.id)
                    return None
                raise
            # Any failure leaves the step retriable with nothing recorded
            session.rollback_exchange(mark)
            if isinstance(e, ProviderError):
                self._emit(Event(type="error", text=str(e), error_kind="provider"))
            raise
        finally:
            session.in_flight = False

        if session.superseded:
            logger.info("Discarding reply for superseded session %d", session.id)
            return None

        session.ledger.append("assistant", text)
        session.pending_reply = None
        session.step_index += 1
        if session.step_index < len(session.recipe.steps):
            session.phase = "awaiting_input"
            self._emit(Event(type="instruction_ready", text=session.current_step.instruction))
        else:
            session.phase = "recap_pending"
            logger.info("Session %d: all %d steps answered", session.id, session.step_index)
            self._emit(Event(type="recap_ready"))
        return text

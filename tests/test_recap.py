"""Tests for chef_froggy.recap — the end-of-recipe summary."""

import asyncio

import pytest

from chef_froggy.llm import ProviderError
from chef_froggy.models import Event
from chef_froggy.sequencer import StepSequencer
from chef_froggy.session import InvalidStateError

from conftest import provider_error


async def _finish_two_step(sequencer: StepSequencer) -> None:
    sequencer.select_recipe(0)
    await sequencer.submit_response("x")
    await sequencer.submit_response("y")


async def test_recap_prompt_lists_choices_in_order(sequencer, llm) -> None:
    llm.responses = ["ok1", "ok2", "What a feast!"]
    await _finish_two_step(sequencer)
    await sequencer.request_recap()
    prompt = llm.prompts[-1]
    assert prompt.startswith("PERSONA\n\n")
    assert "A? Player chose: x. B? Player chose: y. " in prompt
    assert prompt.endswith("please provide a friendly and engaging summary of the player's choices.")


async def test_recap_completes_session(sequencer, llm, events) -> None:
    llm.responses = ["ok1", "ok2", "What a feast!"]
    await _finish_two_step(sequencer)
    events.clear()

    assert await sequencer.request_recap() == "What a feast!"
    assert events == [
        Event(type="recap_text", text="What a feast!"),
        Event(type="session_complete"),
    ]
    assert sequencer.phase == "done"
    assert sequencer.session.recap == "What a feast!"


async def test_recap_does_not_touch_ledger(sequencer, llm) -> None:
    llm.responses = ["ok1", "ok2", "What a feast!"]
    await _finish_two_step(sequencer)
    await sequencer.request_recap()
    assert len(sequencer.session.ledger) == 5


async def test_recap_before_all_steps(sequencer, events) -> None:
    sequencer.select_recipe(0)
    with pytest.raises(InvalidStateError, match="awaiting_input"):
        await sequencer.request_recap()
    assert events[-1].type == "error"


async def test_recap_twice_rejected(sequencer, llm) -> None:
    llm.responses = ["ok1", "ok2", "What a feast!"]
    await _finish_two_step(sequencer)
    await sequencer.request_recap()
    with pytest.raises(InvalidStateError, match="done"):
        await sequencer.request_recap()
    assert len(llm.calls) == 3


async def test_recap_failure_stays_pending_and_retries(sequencer, llm, events) -> None:
    llm.responses = ["ok1", "ok2", provider_error("quota"), "Second time lucky"]
    await _finish_two_step(sequencer)

    with pytest.raises(ProviderError):
        await sequencer.request_recap()
    assert sequencer.phase == "recap_pending"
    assert sequencer.session.recap is None
    assert events[-1] == Event(type="error", text="quota", error_kind="provider")

    assert await sequencer.request_recap() == "Second time lucky"
    assert sequencer.phase == "done"
    assert llm.prompts[2] == llm.prompts[3]


async def test_recap_while_in_flight_rejected(sequencer, llm) -> None:
    llm.responses = ["ok1", "ok2", "recap"]
    await _finish_two_step(sequencer)
    llm.gate = asyncio.Event()
    task = asyncio.create_task(sequencer.request_recap())
    await asyncio.sleep(0)
    with pytest.raises(InvalidStateError, match="in flight"):
        await sequencer.request_recap()
    llm.gate.set()
    assert await task == "recap"


async def test_recap_for_superseded_session_discarded(sequencer, llm, events) -> None:
    llm.responses = ["ok1", "ok2", "stale recap"]
    await _finish_two_step(sequencer)
    old = sequencer.session
    llm.gate = asyncio.Event()
    task = asyncio.create_task(sequencer.request_recap())
    await asyncio.sleep(0)

    sequencer.select_recipe(1)
    events.clear()
    llm.gate.set()
    assert await task is None
    assert events == []
    assert old.phase == "recap_pending"
    assert sequencer.phase == "awaiting_input"


async def test_new_recipe_after_done(sequencer, llm, events) -> None:
    llm.responses = ["ok1", "ok2", "recap"]
    await _finish_two_step(sequencer)
    await sequencer.request_recap()
    sequencer.select_recipe(1)
    assert sequencer.phase == "awaiting_input"
    assert events[-1] == Event(type="instruction_ready", text="One?")


async def test_recap_unexpected_error_stays_retriable(sequencer, llm) -> None:
    llm.responses = ["ok1", "ok2", RuntimeError("boom"), "Recovered"]
    await _finish_two_step(sequencer)
    with pytest.raises(RuntimeError):
        await sequencer.request_recap()
    assert sequencer.session.in_flight is False
    assert sequencer.phase == "recap_pending"
    assert await sequencer.request_recap() == "Recovered"

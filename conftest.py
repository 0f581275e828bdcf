import asyncio

import pytest

from chef_froggy.catalog import Catalog
from chef_froggy.generator import ResponseGenerator
from chef_froggy.llm import ProviderError
from chef_froggy.models import Event, Recipe, Step
from chef_froggy.sequencer import StepSequencer


class StubLLM:
    """Scripted LLM: returns (or raises) the queued items in order.

    Every call is recorded as a (provider, prompt) pair. When `gate` is set
    the call waits for it before answering, which lets a test hold a call
    in flight.
    """

    def __init__(self, *responses: str | Exception) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str]] = []
        self.gate: asyncio.Event | None = None

    async def __call__(self, provider: str, prompt: str) -> str:
        self.calls.append((provider, prompt))
        if self.gate is not None:
            await self.gate.wait()
        if not self.responses:
            raise AssertionError(f"StubLLM has no response left for: {prompt!r}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def prompts(self) -> list[str]:
        return [p for _, p in self.calls]


def provider_error(message: str = "backend down") -> ProviderError:
    return ProviderError(message, "openai")


TWO_STEP = Recipe(name="Two Step", steps=(Step(instruction="A?"), Step(instruction="B?")))
THREE_STEP = Recipe(
    name="Three Step",
    steps=(Step(instruction="One?"), Step(instruction="Two?"), Step(instruction="Three?")),
)


@pytest.fixture
def llm() -> StubLLM:
    return StubLLM()


@pytest.fixture
def events() -> list[Event]:
    return []


@pytest.fixture
def catalog() -> Catalog:
    return Catalog([TWO_STEP, THREE_STEP])


@pytest.fixture
def sequencer(llm: StubLLM, catalog: Catalog, events: list[Event]) -> StepSequencer:
    generator = ResponseGenerator(llm, provider="openai", persona="PERSONA")
    return StepSequencer(generator, catalog, listener=events.append)

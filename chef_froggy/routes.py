"""FastAPI endpoints under /api.

One kitchen per app: a single player cooks one recipe at a time. Every
mutating endpoint returns the events emitted during the call plus a snapshot
of the session. InvalidStateError maps to 409, ProviderError to 502 and an
unknown recipe index to 404.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from chef_froggy.catalog import Catalog, UnknownRecipeError
from chef_froggy.generator import ResponseGenerator
from chef_froggy.llm import ProviderError
from chef_froggy.models import Event
from chef_froggy.sequencer import StepSequencer
from chef_froggy.session import InvalidStateError

router = APIRouter()


class RespondBody(BaseModel):
    text: str


class Kitchen:
    """A sequencer plus the outbox its events are collected in."""

    def __init__(self, generator: ResponseGenerator, catalog: Catalog) -> None:
        self.events: list[Event] = []
        self.sequencer = StepSequencer(generator, catalog, listener=self.events.append)

    def drain(self) -> list[dict]:
        out = [e.model_dump(exclude_none=True) for e in self.events]
        self.events.clear()
        return out

    def state(self) -> dict[str, Any]:
        session = self.sequencer.session
        return {
            "phase": self.sequencer.phase,
            "session": session.snapshot() if session else None,
        }


def _kitchen(request: Request) -> Kitchen:
    return request.app.state.kitchen


async def _run(kitchen: Kitchen, op: Callable[[], Any]) -> dict[str, Any]:
    try:
        result = op()
        if inspect.isawaitable(result):
            await result
    except InvalidStateError as e:
        kitchen.drain()
        raise HTTPException(409, str(e))
    except ProviderError as e:
        kitchen.drain()
        raise HTTPException(502, str(e))
    except UnknownRecipeError as e:
        kitchen.drain()
        raise HTTPException(404, str(e))
    return {"events": kitchen.drain(), **kitchen.state()}


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/recipes")
async def list_recipes(request: Request):
    """Recipe names with their step counts, in catalog order."""
    catalog = _kitchen(request).sequencer.catalog
    return [
        {"index": i, "name": r.name, "steps": len(r.steps)}
        for i, r in enumerate(catalog.recipes)
    ]


@router.post("/recipes/{index}/select")
async def select_recipe(index: int, request: Request):
    """Start cooking a recipe; abandons any session in progress."""
    kitchen = _kitchen(request)
    return await _run(kitchen, lambda: kitchen.sequencer.select_recipe(index))


@router.post("/respond")
async def respond(body: RespondBody, request: Request):
    """Answer the current step."""
    kitchen = _kitchen(request)
    return await _run(kitchen, lambda: kitchen.sequencer.submit_response(body.text))


@router.post("/retry")
async def retry(request: Request):
    """Reissue a failed step call."""
    kitchen = _kitchen(request)
    return await _run(kitchen, kitchen.sequencer.retry)


@router.post("/abandon")
async def abandon(request: Request):
    """Drop a failed step reply and ask the step again."""
    kitchen = _kitchen(request)
    return await _run(kitchen, kitchen.sequencer.abandon_step)


@router.post("/recap")
async def recap(request: Request):
    """Produce the end-of-recipe summary."""
    kitchen = _kitchen(request)
    return await _run(kitchen, kitchen.sequencer.request_recap)


@router.get("/session")
async def get_session(request: Request):
    """Current phase and session snapshot, without side effects."""
    return _kitchen(request).state()

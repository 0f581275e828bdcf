"""Chef Froggy launcher. Plays a recipe in the terminal or serves the API."""

import argparse
import asyncio
import logging
import sys

from chef_froggy.catalog import Catalog, UnknownRecipeError
from chef_froggy.config import build_catalog, build_generator, load_settings
from chef_froggy.generator import ResponseGenerator
from chef_froggy.llm import EchoLLM, ProviderError
from chef_froggy.models import Event
from chef_froggy.sequencer import StepSequencer


async def _read_line(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


def _show(events: list[Event], chef: str) -> None:
    for event in events:
        if event.type == "instruction_ready":
            print(f"{chef}: {event.text}")
        elif event.type == "recap_ready":
            print("\n(All steps done. Press Enter for the recap.)")
        elif event.type == "recap_text":
            print(f"\n{chef}: {event.text}\n")
        elif event.type == "error":
            print(f"[error] {event.text}", file=sys.stderr)
    events.clear()


async def play(generator: ResponseGenerator, catalog: Catalog, index: int) -> None:
    chef = generator.chef
    events: list[Event] = []
    sequencer = StepSequencer(generator, catalog, listener=events.append)
    sequencer.select_recipe(index)
    _show(events, chef)

    while sequencer.phase in ("awaiting_input", "generating"):
        if sequencer.phase == "awaiting_input":
            reply = (await _read_line("> ")).strip()
            if not reply:
                continue
            call = sequencer.submit_response(reply)
        else:
            answer = (await _read_line("Retry? [Y/n] ")).strip().lower()
            if answer.startswith("n"):
                sequencer.abandon_step()
                _show(events, chef)
                continue
            call = sequencer.retry()
        try:
            text = await call
        except ProviderError:
            _show(events, chef)
            continue
        print(f"{chef}: {text}")
        _show(events, chef)

    await _read_line("")
    while sequencer.phase == "recap_pending":
        try:
            await sequencer.request_recap()
        except ProviderError:
            _show(events, chef)
            await _read_line("Press Enter to try the recap again.")
    _show(events, chef)


def main():
    parser = argparse.ArgumentParser(description="Cook with Chef Froggy")
    parser.add_argument("--list", action="store_true",
                        help="List the recipes and exit")
    parser.add_argument("--recipe", type=int, default=None,
                        help="Index of the recipe to cook (default: ask)")
    parser.add_argument("--echo", action="store_true",
                        help="Use EchoLLM instead of the configured backend")
    parser.add_argument("--serve", action="store_true",
                        help="Serve the HTTP API instead of playing in the terminal")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=13015)
    args = parser.parse_args()

    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.serve:
        import uvicorn
        uvicorn.run("chef_froggy.app:create_app", factory=True, host=args.host, port=args.port)
        return

    catalog = build_catalog(settings)
    if args.list or args.recipe is None:
        for i, name in enumerate(catalog.names()):
            print(f"  {i}. {name}")
        if args.list:
            return

    index = args.recipe
    try:
        if index is None:
            index = int(input("Which recipe? "))
        generator = build_generator(settings, EchoLLM() if args.echo else None)
        asyncio.run(play(generator, catalog, index))
    except (ValueError, UnknownRecipeError) as e:
        sys.exit(str(e))
    except (KeyboardInterrupt, EOFError):
        print("\nBye!")


if __name__ == "__main__":
    main()

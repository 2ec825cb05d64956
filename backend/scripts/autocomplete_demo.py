"""Type an address fragment through the autocomplete coordinator and print the suggestions.

Usage:
    python -m scripts.autocomplete_demo "santa fe" [--keystroke-delay 0.05]

Reads SUPABASE_URL and SUPABASE_ANON_KEY from the environment (or backend/.env).
Each character is fed to the coordinator as a separate input event, so only the
final text should reach the autocomplete function.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from client.autocomplete import AutocompleteCoordinator, AutocompleteState
from client.functions_client import FunctionsClient
from settings import FunctionsConfig

logger = logging.getLogger("autocomplete_demo")


async def _run(text: str, keystroke_delay: float) -> AutocompleteState:
    client = FunctionsClient(FunctionsConfig.from_env())

    def _log_state(state: AutocompleteState) -> None:
        logger.info("loading=%s suggestions=%d", state.is_loading, len(state.suggestions))

    coordinator = AutocompleteCoordinator(client, on_change=_log_state)
    try:
        typed = ""
        for ch in text:
            typed += ch
            coordinator.on_query_change(typed)
            await asyncio.sleep(keystroke_delay)
        # let the trailing debounce fire, then wait for the request to settle
        await asyncio.sleep(coordinator.debounce_seconds + 0.05)
        await coordinator.wait_idle()
        return coordinator.state
    finally:
        coordinator.on_destroy()


def main() -> int:
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")

    parser = argparse.ArgumentParser(description="Simulate typing into the address autocomplete.")
    parser.add_argument("text", help="Address fragment to type.")
    parser.add_argument("--keystroke-delay", type=float, default=0.05, help="Seconds between characters.")
    args = parser.parse_args()

    try:
        state = asyncio.run(_run(args.text, args.keystroke_delay))
    except ValueError as exc:
        logger.error("Configuration error: %s", exc)
        return 2

    if not state.suggestions:
        print("No suggestions.")
        return 1
    for idx, s in enumerate(state.suggestions, start=1):
        print(f"{idx}. {s.display_name} ({s.lat:.5f}, {s.lng:.5f}) [{s.type}]")
    return 0


if __name__ == "__main__":
    sys.exit(main())

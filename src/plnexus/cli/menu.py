"""Interactive prompts used when mode flags are not given."""

from __future__ import annotations

from collections.abc import Callable

from ..errors import InputError, SessionCancelled

MODES: dict[str, str] = {
    "1": "Live (Finnhub)",
    "2": "Mock (simulated)",
}
QUIT_KEY = "Q"
DEFAULT_SYMBOL = "SPX"


def sanitize_symbol(raw: str | None, default: str = DEFAULT_SYMBOL) -> str:
    """Uppercase ticker with accidental flag dashes removed (`--btc` -> `BTC`)."""
    cleaned = (raw or "").strip().lstrip("-").strip()
    return (cleaned or default).upper()


class MenuSystem:
    """Asks the operator for an execution mode and a symbol.

    Prompts call `input` directly, so Ctrl-C surfaces as KeyboardInterrupt.
    """

    def __init__(self, *, input_fn: Callable[[str], str] = input, output: Callable[[str], None] = print) -> None:
        self._input = input_fn
        self._output = output

    async def _ask(self, prompt: str) -> str:
        try:
            return self._input(prompt).strip()
        except EOFError as exc:
            raise InputError("No input available (stdin closed).") from exc

    async def prompt_mode(self) -> str:
        self._output("Select data source:")
        for key, label in MODES.items():
            self._output(f"  {key}) {label}")
        self._output(f"  {QUIT_KEY}) Exit")
        choice = await self._ask("> ")
        if choice.upper() == QUIT_KEY:
            self._output("Terminating session...")
            raise SessionCancelled("Session terminated at the mode prompt.")
        if choice not in MODES:
            raise InputError(f"Invalid selection {choice!r}. Choose one of: {', '.join(MODES)}, {QUIT_KEY}.")
        return choice

    async def prompt_symbol(self, default: str = DEFAULT_SYMBOL) -> str:
        symbol = await self._ask(f"Ticker symbol [{default}]: ")
        return sanitize_symbol(symbol, default)

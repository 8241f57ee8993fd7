"""CLI entrypoint: fetch one market quote and print it.

Run order (strictly sequential, any failure ends the run):

    UNSTARTED -> TRACER_READY -> MODE_AND_SYMBOL_RESOLVED
              -> ADAPTER_RESOLVED -> QUOTE_FETCHED -> RENDERED

Exit codes: 0 on success, help, menu quit or Ctrl-C; 1 on any unrecoverable failure.
"""

from __future__ import annotations

import argparse
import asyncio
import enum
import os
import signal
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from .cli import ConsoleRenderer, MenuSystem, sanitize_symbol
from .config import RuntimeSettings, hydrate_environment
from .errors import AdapterResolutionError, InputError, MarketDataUnavailableError, SessionCancelled
from .market import MarketQuote
from .observability import SpanTracer, configure_logging, get_logger
from .providers import ProviderConfigResolver
from .resolver import MANIFEST_RELATIVE_PATH, AdapterResolver
from .usecases import GetMarketSnapshot

logger = get_logger(__name__)

MODE_LIVE = "1"
MODE_MOCK = "2"


class Renderer(Protocol):
    def render(self, quote: MarketQuote) -> None: ...

    def render_error(self, message: str) -> None: ...


class Prompter(Protocol):
    async def prompt_mode(self) -> str: ...

    async def prompt_symbol(self) -> str: ...


class RunState(enum.Enum):
    UNSTARTED = "unstarted"
    TRACER_READY = "tracer_ready"
    MODE_AND_SYMBOL_RESOLVED = "mode_and_symbol_resolved"
    ADAPTER_RESOLVED = "adapter_resolved"
    QUOTE_FETCHED = "quote_fetched"
    RENDERED = "rendered"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plnexus",
        description="Fetch a market quote from a live or simulated provider.",
    )
    parser.add_argument("symbol", nargs="?", help="ticker symbol, e.g. SPX")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--live", dest="mode", action="store_const", const=MODE_LIVE, help="use the live provider")
    source.add_argument("--mock", dest="mode", action="store_const", const=MODE_MOCK, help="use simulated data")
    return parser


class Orchestrator:
    """Sequences one end-to-end quote retrieval."""

    def __init__(
        self,
        *,
        root: Path,
        settings: RuntimeSettings,
        tracer: SpanTracer,
        resolver: AdapterResolver,
        provider_configs: ProviderConfigResolver,
        renderer: Renderer,
        prompter: Prompter,
    ) -> None:
        self.root = root
        self.settings = settings
        self.tracer = tracer
        self.resolver = resolver
        self.provider_configs = provider_configs
        self.renderer = renderer
        self.prompter = prompter
        self.state = RunState.UNSTARTED

    @classmethod
    def from_settings(cls, root: Path, settings: RuntimeSettings) -> "Orchestrator":
        """Wire the default collaborators for a terminal run."""
        return cls(
            root=root,
            settings=settings,
            tracer=SpanTracer(
                enabled=settings.tracing_enabled,
                level=settings.log_level,
                environment=settings.environment,
            ),
            resolver=AdapterResolver(root),
            provider_configs=ProviderConfigResolver(),
            renderer=ConsoleRenderer(),
            prompter=MenuSystem(),
        )

    def _advance(self, state: RunState) -> None:
        logger.debug("run_state", previous=self.state.value, current=state.value)
        self.state = state

    async def run(self, argv: Sequence[str] | None = None) -> int:
        """Run once and return the process exit code."""
        try:
            args = build_parser().parse_args(argv)
        except SystemExit as exc:
            # argparse exits 0 after --help and 2 on usage errors.
            return 0 if exc.code in (0, None) else 1

        await self.tracer.initialize(self.root, self.settings.trace_namespace)
        self._advance(RunState.TRACER_READY)

        try:
            mode, symbol = await self._resolve_input(args)
        except SessionCancelled:
            logger.info("session_cancelled")
            return 0
        except InputError as exc:
            logger.warning("input_capture_failed", error=str(exc))
            self.renderer.render_error(f"Could not read input: {exc}")
            return 1
        self._advance(RunState.MODE_AND_SYMBOL_RESOLVED)
        await self.tracer.record("CLI", "INPUT_RESOLVED", {"mode": mode, "symbol": symbol})

        try:
            adapter = await self.tracer.trace_span(
                "INFRA",
                "ADAPTER_RESOLUTION",
                lambda: self.resolver.load_adapter(mode, self.provider_configs),
                {"mode": mode},
            )
        except AdapterResolutionError as exc:
            self.renderer.render_error(str(exc))
            return 1
        self._advance(RunState.ADAPTER_RESOLVED)

        try:
            quote = await GetMarketSnapshot(adapter, self.tracer).execute(symbol)
        except (MarketDataUnavailableError, InputError) as exc:
            self.renderer.render_error(str(exc))
            return 1
        self._advance(RunState.QUOTE_FETCHED)

        self.renderer.render(quote)
        self._advance(RunState.RENDERED)
        return 0

    async def _resolve_input(self, args: argparse.Namespace) -> tuple[str, str]:
        """Flags run unattended; without a mode flag the operator is prompted."""
        if args.mode:
            return args.mode, sanitize_symbol(args.symbol)
        return await self.tracer.trace_span("CLI", "USER_INTERACTION", lambda: self._prompt(args.symbol))

    async def _prompt(self, symbol: str | None) -> tuple[str, str]:
        mode = await self.prompter.prompt_mode()
        if not symbol:
            symbol = await self.prompter.prompt_symbol()
        return mode, sanitize_symbol(symbol)


def project_root() -> Path:
    """PLNEXUS_ROOT, else the source checkout holding the manifest, else the cwd."""
    override = os.getenv("PLNEXUS_ROOT")
    if override:
        return Path(override).resolve()
    checkout = Path(__file__).resolve().parents[2]
    if (checkout / MANIFEST_RELATIVE_PATH).is_file():
        return checkout
    return Path.cwd()


def _log_environment(settings: RuntimeSettings) -> None:
    if settings.env_file is None:
        logger.info("environment_hydrated", source="shell", detail="No .env file found; using shell variables")
    else:
        logger.info("environment_hydrated", source=str(settings.env_file))
    logger.info("tracing_status", tracing_enabled=settings.tracing_enabled, level=settings.log_level)


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entrypoint for `plnexus` / `python -m plnexus`."""
    root = project_root()
    try:
        settings = hydrate_environment(root)
    except ValueError as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        sys.exit(1)

    try:
        configure_logging(settings.log_level, log_dir=root / "logs")
    except OSError:
        configure_logging(settings.log_level)
        logger.warning("log_files_unavailable", log_dir=str(root / "logs"))
    _log_environment(settings)

    # asyncio.run only cancels the main task on SIGINT while the default handler is
    # installed, which leaves a blocking prompt waiting for Enter.
    previous_handler = signal.signal(signal.SIGINT, _raise_keyboard_interrupt)
    try:
        code = asyncio.run(Orchestrator.from_settings(root, settings).run(argv))
    except KeyboardInterrupt:
        print("\nInterrupted. Exiting.", file=sys.stderr)
        code = 0
    except Exception:  # noqa: BLE001 - last line of defense at the process boundary
        logger.exception("unhandled_failure")
        code = 1
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)
    sys.exit(code)


def _raise_keyboard_interrupt(signum: int, frame: object) -> None:
    raise KeyboardInterrupt


if __name__ == "__main__":
    main()

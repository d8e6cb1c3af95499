"""Command-line interface for loadingkit.

Runs a headless walkthrough of one loading pattern against the mock
services and prints every state transition:

    loadingkit profile   # inline loading with retry
    loadingkit form      # overlay-guarded form submission
    loadingkit search    # debounced background search
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Callable, Optional

from loadingkit import __version__
from loadingkit.config import RuntimeConfig, make_runtime_config
from loadingkit.controllers import FormController, ProductSearchPage, make_profile_machine
from loadingkit.core.events import EventBus
from loadingkit.core.exceptions import ConfigError
from loadingkit.core.overlay import OverlayCoordinator
from loadingkit.core.results import AsyncResult, SearchResult
from loadingkit.models import Product, User
from loadingkit.services.mock import MockProductService, MockUserService
from loadingkit.settings.values import MESSAGES

logger = logging.getLogger(__name__)

SCENARIOS = ("profile", "form", "search")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="loadingkit",
        description="Walk through inline, overlay and background loading states.",
    )
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "scenario",
        nargs="?",
        choices=SCENARIOS,
        default="search",
        help="Loading pattern to demonstrate (default: search)",
    )
    p.add_argument("--log-level", default="WARNING", help="Python logging level")
    p.add_argument(
        "--time-scale",
        type=float,
        default=None,
        help="Multiply every simulated delay (0 = instant)",
    )
    p.add_argument("--debounce-ms", type=int, default=None)
    p.add_argument(
        "--failure-rate",
        type=float,
        default=None,
        help="Probability that a mock user fetch or submission fails",
    )
    p.add_argument("--seed", type=int, default=None, help="Seed for mock failures")
    p.add_argument("--query", default="iphone", help="Text typed in the search demo")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Synchronous entrypoint for the console script."""
    args = parse_args(argv)
    if args.version:
        print(f"loadingkit {__version__}")
        return
    try:
        asyncio.run(run_async(argv))
    except KeyboardInterrupt:
        pass


async def run_async(
    argv: list[str] | None = None, *, echo: Callable[[str], None] = print
) -> None:
    """Async entrypoint for programmatic usage/testing."""
    args = parse_args(argv)
    if args.version:
        echo(f"loadingkit {__version__}")
        return
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        runtime = make_runtime_config(args=args)
    except ConfigError as e:
        echo(f"error: {e}")
        raise SystemExit(2) from e

    bus = runtime.bus()
    try:
        if args.scenario == "profile":
            await _run_profile(runtime, bus, echo)
        elif args.scenario == "form":
            await _run_form(runtime, bus, echo)
        else:
            await _run_search(runtime, bus, echo, args.query)
    finally:
        for topic, stats in sorted(bus.metrics().items()):
            logger.debug(
                "topic %s: %d published, %d dropped",
                topic,
                stats.publishes,
                stats.drops,
            )
        await bus.close()


# Scenarios -----------------------------------------------------------------


def _describe_profile(state: AsyncResult[User]) -> str:
    if state.is_loading:
        return "loading user profile..."
    if state.is_error:
        return f"error: {state.error}"
    assert state.data is not None
    return f"{state.data.name} <{state.data.email}> (id {state.data.id})"


async def _run_profile(
    runtime: RuntimeConfig, bus: EventBus, echo: Callable[[str], None]
) -> None:
    users = MockUserService(
        ts=runtime.time_source(),
        rng=runtime.rng(),
        failure_rate=runtime.settings.mock_failure_rate,
    )
    machine = make_profile_machine(
        users, "123", settings=runtime.settings, bus=bus
    )
    machine.listen(
        lambda _prev, cur: echo(f"[profile] {_describe_profile(cur)}"),
        fire_immediately=True,
    )
    state = await machine.wait()
    if state.is_error:
        echo("[profile] retrying")
        machine.retry()
        await machine.wait()
    machine.dispose()


class _ConsoleOverlay:
    def __init__(self, echo: Callable[[str], None], message: str) -> None:
        self._echo = echo
        self._message = message

    def show(self) -> None:
        self._echo(f"[overlay] {self._message}")

    def hide(self) -> None:
        self._echo("[overlay] hidden")


async def _run_form(
    runtime: RuntimeConfig, bus: EventBus, echo: Callable[[str], None]
) -> None:
    users = MockUserService(
        ts=runtime.time_source(),
        rng=runtime.rng(),
        failure_rate=runtime.settings.mock_failure_rate,
    )
    overlay = OverlayCoordinator(bus=bus, message=runtime.settings.overlay_message)
    overlay.attach(_ConsoleOverlay(echo, runtime.settings.overlay_message))
    form = FormController(users.submit_form, overlay=overlay)
    form.notices.listen(
        lambda _prev, cur: cur is not None and echo(f"[form] {cur.kind}: {cur.text}")
    )

    draft = {"name": "Jane", "email": "", "message": "Hello"}
    await form.submit(draft)
    for field, message in sorted(form.field_errors.state.items()):
        echo(f"[form] {field}: {message}")

    draft["email"] = "jane@example.com"
    await form.submit(draft)


def _describe_search(state: SearchResult[Product]) -> str:
    if state.is_first_load:
        return "loading products..."
    if state.shows_error_only:
        return f"error: {state.error}"
    names = ", ".join(p.name for p in state.items) or MESSAGES["no_results"]
    prefix = "refreshing | " if state.is_background_loading else ""
    suffix = f" ({state.error})" if state.error else ""
    return f"{prefix}{len(state.items)} items: {names}{suffix}"


async def _run_search(
    runtime: RuntimeConfig,
    bus: EventBus,
    echo: Callable[[str], None],
    query: Optional[str],
) -> None:
    ts = runtime.time_source()
    page = ProductSearchPage(
        MockProductService(ts=ts), settings=runtime.settings, ts=ts, bus=bus
    )
    page.search.listen(
        lambda _prev, cur: echo(f"[search] {_describe_search(cur)}"),
        fire_immediately=True,
    )
    page.search.input.emitted.listen(
        lambda _prev, cur: cur is not None
        and echo(f"[search] query emitted: {cur.text!r}")
    )
    await page.search.wait_initial()

    text = query or ""
    for i in range(1, len(text) + 1):
        page.type_text(text[:i])
        await ts.sleep(0.1)
    await ts.sleep(runtime.settings.debounce_s)
    page.search.input.flush()
    await page.search.wait_idle()

    echo("[search] clearing")
    page.clear()
    await page.search.wait_idle()
    page.dispose()


if __name__ == "__main__":
    main()

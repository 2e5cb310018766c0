#!/usr/bin/env python3
"""
IVAC Bot - session workflow engine for the IVAC payment portal.

Main entry point for the application.
"""

import argparse
import asyncio
import signal
import sys
import threading
from typing import Optional, Set

from loguru import logger

from ivac_bot.core.config import get_settings, load_config
from ivac_bot.core.enums import WorkflowState
from ivac_bot.core.exceptions import ConfigurationError, IvacBotError, ValidationError
from ivac_bot.core.logger import setup_structured_logging
from ivac_bot.services.transport import AiohttpTransport
from ivac_bot.services.workflow import WorkflowEngine

_PROMPTS = {
    WorkflowState.AWAITING_OTP: "Enter the OTP sent to your phone: ",
    WorkflowState.AWAITING_CHALLENGE: "Solve the captcha in a browser and paste the token: ",
}


async def read_line(prompt: str) -> str:
    """Read one console line in a daemon thread; a read abandoned on cancel does not block exit."""
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def deliver(setter, value) -> None:
        if not future.done():
            setter(value)

    def reader() -> None:
        try:
            outcome = (future.set_result, input(prompt))
        except EOFError as e:
            outcome = (future.set_exception, e)
        try:
            loop.call_soon_threadsafe(deliver, *outcome)
        except RuntimeError:
            # Event loop already closed
            pass

    threading.Thread(target=reader, name="console-prompt", daemon=True).start()
    return await future


class ConsolePrompter:
    """Reads suspension-point input from the console in a worker thread."""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    async def __call__(self, state: WorkflowState, engine: WorkflowEngine) -> None:
        """on_suspend hook: start a prompt without blocking the engine's wait."""
        if state == WorkflowState.AWAITING_OTP and engine.otp_signal.is_set:
            return
        if state == WorkflowState.AWAITING_CHALLENGE and engine.challenge_signal.is_set:
            return
        task = asyncio.create_task(self._prompt(state, engine))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _prompt(self, state: WorkflowState, engine: WorkflowEngine) -> None:
        if state == WorkflowState.AWAITING_OTP:
            supply = engine.supply_otp
        else:
            supply = engine.supply_challenge_token
        while True:
            try:
                value = await read_line(_PROMPTS[state])
            except EOFError:
                logger.warning("Console input closed, waiting until the run times out")
                return
            try:
                supply(value)
                return
            except ValidationError as e:
                logger.warning(e.message)

    def cancel(self) -> None:
        for task in list(self._tasks):
            task.cancel()


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="IVAC appointment payment workflow")
    parser.add_argument("--config", default=None, help="Path to the run configuration YAML")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides LOG_LEVEL)",
    )
    parser.add_argument("--date", default=None, help="Appointment date to book (YYYY-MM-DD)")
    return parser.parse_args(argv)


async def run_workflow(engine: WorkflowEngine, prompter: ConsolePrompter) -> int:
    """Run the engine until it completes or fails; returns the process exit code."""
    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, engine.cancel)
            installed.append(sig)
        except NotImplementedError:
            # Signal handlers are not available on Windows event loops
            pass

    try:
        result = await engine.run()
    except IvacBotError as e:
        logger.error(f"Run failed in state {e.state}: {e.message}")
        return 1
    finally:
        prompter.cancel()
        for sig in installed:
            loop.remove_signal_handler(sig)

    logger.info(f"Run result: {result.to_dict()}")
    if result.payment_url:
        print(f"Complete the payment at: {result.payment_url}")
    return 0 if result.completed else 1


async def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    settings = get_settings()
    setup_structured_logging(
        level=args.log_level or settings.log_level,
        json_format=settings.log_json,
        logs_dir=settings.logs_dir,
        diagnose=settings.is_development(),
    )

    try:
        config = load_config(args.config or settings.config_path, base_url=settings.ivac_base_url)
        if args.date:
            config = config.with_appointment_date(args.date)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid --date: {e}")
        return 1

    prompter = ConsolePrompter()
    async with AiohttpTransport(
        timeout=config.workflow.request_timeout, user_agent=config.workflow.user_agent
    ) as transport:
        engine = WorkflowEngine(config, transport, on_suspend=prompter)
        return await run_workflow(engine, prompter)


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

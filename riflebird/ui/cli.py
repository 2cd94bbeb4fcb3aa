"""Interactive menu using prompt_toolkit, driven by an explicit state loop."""

import logging
from typing import Awaitable, Callable, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console

from riflebird import commands
from riflebird.config.settings import Settings
from riflebird.exceptions.base import RiflebirdBaseError
from riflebird.ui.state_machine import AppState, StateMachine
from riflebird.ui.styles import create_panel, render_error

logger = logging.getLogger("InteractiveCLI")

Ask = Callable[[str], Awaitable[str]]

MENU_CHOICES = {
    "1": AppState.FIRE,
    "fire": AppState.FIRE,
    "2": AppState.CLEAN,
    "clean": AppState.CLEAN,
    "3": AppState.EXIT,
    "exit": AppState.EXIT,
    "q": AppState.EXIT,
    "quit": AppState.EXIT,
}

MENU_TEXT = (
    "[rb.accent]1[/] fire   generate unit tests for a glob pattern\n"
    "[rb.accent]2[/] clean  clear the cached project context\n"
    "[rb.accent]3[/] exit"
)


class InteractiveCLI:
    """
    Menu loop. Each action runs once and hands control back to MENU; the
    loop ends only when the machine reaches EXIT.
    """

    def __init__(self, settings: Settings, console: Console, ask: Optional[Ask] = None):
        self._settings = settings
        self._console = console
        self._machine = StateMachine()
        self._session: Optional[PromptSession] = None
        self._ask = ask or self._prompt

    @property
    def state(self) -> AppState:
        return self._machine.current

    async def run(self) -> None:
        self._console.print(create_panel(MENU_TEXT, title="Riflebird"))
        while not self._machine.finished:
            state = self._machine.current
            if state is AppState.MENU:
                self._machine.transition_to(await self._choose())
            elif state is AppState.FIRE:
                await self._run_action(self._fire)
            elif state is AppState.CLEAN:
                await self._run_action(self._clean)
        self._console.print("[dim]Bye.[/]")

    async def _choose(self) -> AppState:
        while True:
            try:
                answer = (await self._ask("riflebird> ")).strip().lower()
            except (EOFError, KeyboardInterrupt):
                return AppState.EXIT
            choice = MENU_CHOICES.get(answer)
            if choice is not None:
                return choice
            if answer:
                self._console.print(f"[failure]Unknown option:[/] {answer}")

    async def _run_action(self, action: Callable[[], Awaitable[None]]) -> None:
        try:
            await action()
        except RiflebirdBaseError as e:
            logger.error("Action failed: %s", e.message)
            render_error(self._console, e.message, e.user_hint)
        finally:
            self._machine.transition_to(AppState.MENU)

    async def _fire(self) -> None:
        try:
            raw = await self._ask("pattern(s)> ")
        except (EOFError, KeyboardInterrupt):
            return
        patterns = raw.split()
        if not patterns:
            self._console.print("[dim]No pattern given.[/]")
            return
        await commands.fire(self._settings, patterns, self._console)

    async def _clean(self) -> None:
        await commands.clean(self._settings, self._console)

    async def _prompt(self, message: str) -> str:
        if self._session is None:
            self._session = PromptSession(multiline=False)
        with patch_stdout():
            return await self._session.prompt_async(message)

from enum import Enum
from typing import Dict, Set


class AppState(str, Enum):
    MENU = "menu"
    FIRE = "fire"
    CLEAN = "clean"
    EXIT = "exit"


class StateMachine:
    """
    Enforces valid state transitions for the interactive session.
    Every action returns to MENU; only MENU can reach EXIT.
    """

    def __init__(self):
        self._current_state = AppState.MENU

        # Define allowed transitions
        self._transitions: Dict[AppState, Set[AppState]] = {
            AppState.MENU: {AppState.FIRE, AppState.CLEAN, AppState.EXIT},
            AppState.FIRE: {AppState.MENU},
            AppState.CLEAN: {AppState.MENU},
            AppState.EXIT: set(),
        }

    @property
    def current(self) -> AppState:
        return self._current_state

    @property
    def finished(self) -> bool:
        return self._current_state is AppState.EXIT

    def transition_to(self, new_state: AppState) -> None:
        """
        Attempts to transition to a new state.
        Raises ValueError if the transition is illegal.
        """
        if new_state not in self._transitions[self._current_state]:
            raise ValueError(
                f"Invalid State Transition: {self._current_state} -> {new_state}"
            )
        self._current_state = new_state

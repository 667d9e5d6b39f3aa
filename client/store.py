"""
Session store.

Holds the current ``SessionState`` and notifies listeners after every
dispatch. Create one per front-end session and hand it to whatever needs
it; there is no global instance.
"""

import logging
from typing import Callable, Optional

from .actions import Action
from .reducer import reduce
from .state import SessionState

logger = logging.getLogger(__name__)

Listener = Callable[[SessionState], None]
Reducer = Callable[[SessionState, Action], SessionState]


class SessionStore:
    def __init__(
        self,
        initial_state: Optional[SessionState] = None,
        reducer: Reducer = reduce,
    ):
        self._state = initial_state or SessionState()
        self._reducer = reducer
        self._listeners: list[Listener] = []

    def get_state(self) -> SessionState:
        return self._state

    def dispatch(self, action: Action) -> Action:
        """Apply ``action`` and call every listener with the new state."""
        logger.debug("Dispatching %s", action.type.value)
        self._state = self._reducer(self._state, action)

        # Listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            listener(self._state)
        return action

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register ``listener`` and return a function that removes it.

        Calling the returned function more than once is harmless.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

"""
Login button controller.

Holds the button's own view state (the user it shows and whether the login
modal is open) and decides what a click does. Rendering is left to the
caller.
"""

import logging
from typing import Any, Callable, Optional

from .api import AccountClient
from .exceptions import ApiRequestError
from .state import SessionState
from .store import SessionStore

logger = logging.getLogger(__name__)


class LoginButton:
    def __init__(
        self,
        store: SessionStore,
        client: AccountClient,
        on_create_submission: Optional[Callable[[], None]] = None,
    ):
        self._store = store
        self._client = client
        self._on_create_submission = on_create_submission
        self._unsubscribe: Optional[Callable[[], None]] = None

        self.user: Optional[dict[str, Any]] = None
        self.modal_is_open = False

    async def mount(self) -> None:
        """Start following the store and try to resume a stored session."""
        await self.attempt_token_login()
        self._unsubscribe = self._store.subscribe(self._on_state_change)

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def attempt_token_login(self) -> None:
        """
        Log in with the stored token when there is one but no stored user.

        A rejected token leaves the button logged out.
        """
        if self.user is not None:
            return

        state = self._store.get_state()
        if not state.token or state.user:
            return

        try:
            self.user = await self._client.login_with_token(state.token)
        except ApiRequestError as e:
            logger.info("Stored session token rejected: %s", e.message)

    def _on_state_change(self, state: SessionState) -> None:
        if state.user != self.user:
            self.user = state.user

    def open_modal(self) -> None:
        self.modal_is_open = True

    def close_modal(self) -> None:
        self.modal_is_open = False

    def create_submission(self) -> None:
        if self._on_create_submission is not None:
            self._on_create_submission()

    @property
    def label(self) -> str:
        return "+" if self.user is not None else "log in"

    @property
    def click_action(self) -> Callable[[], None]:
        if self.modal_is_open:
            return self.close_modal
        if self.user:
            return self.create_submission
        return self.open_modal

    def click(self) -> None:
        self.click_action()

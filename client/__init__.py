"""
Hackboard client package.

Session state for a front-end: an explicit ``SessionStore`` holding the
token, the logged-in user and fetch lifecycle flags, the actions that
change it, and an ``AccountClient`` that talks to the API and dispatches
those actions.
"""

from .actions import Action, ActionType
from .api import AccountClient
from .exceptions import ApiRequestError
from .login import LoginButton
from .reducer import reduce
from .state import SessionState
from .store import SessionStore

__all__ = [
    "Action",
    "ActionType",
    "AccountClient",
    "ApiRequestError",
    "LoginButton",
    "reduce",
    "SessionState",
    "SessionStore",
]

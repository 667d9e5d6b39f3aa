"""
Actions understood by the session reducer, with one creator per type.
"""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel

from .state import SessionState


class ActionType(str, Enum):
    SET_TOKEN = "SET_TOKEN"
    SET_USER = "SET_USER"
    SET_USER_AND_TOKEN = "SET_USER_AND_TOKEN"
    TOGGLE_PLAY = "TOGGLE_PLAY"
    SET_TIME = "SET_TIME"
    SET_VOLUME = "SET_VOLUME"
    SET_DROP_DOWN = "SET_DROP_DOWN"
    LOAD_STORED_STATE = "LOAD_STORED_STATE"

    USERS_REQUEST = "USERS_REQUEST"
    USERS_SUCCESS = "USERS_SUCCESS"
    USERS_FAILURE = "USERS_FAILURE"

    USER_BY_ID_REQUEST = "USER_BY_ID_REQUEST"
    USER_BY_ID_SUCCESS = "USER_BY_ID_SUCCESS"
    USER_BY_ID_FAILURE = "USER_BY_ID_FAILURE"


class Action(BaseModel):
    """
    A state change request.

    Only the fields relevant to ``type`` are set; ``payload`` carries the
    decoded response body for fetch SUCCESS actions.
    """

    type: ActionType
    token: Optional[str] = None
    user: Optional[dict[str, Any]] = None
    time: Optional[float] = None
    volume: Optional[float] = None
    drop_down_open: Optional[bool] = None
    stored_state: Optional[SessionState] = None
    payload: Any = None

    model_config = {"frozen": True}


def set_token(token: Optional[str]) -> Action:
    return Action(type=ActionType.SET_TOKEN, token=token)


def set_user(user: Optional[dict[str, Any]]) -> Action:
    return Action(type=ActionType.SET_USER, user=user)


def set_user_and_token(user: Optional[dict[str, Any]], token: Optional[str]) -> Action:
    return Action(type=ActionType.SET_USER_AND_TOKEN, user=user, token=token)


def toggle_play() -> Action:
    return Action(type=ActionType.TOGGLE_PLAY)


def set_time(time: float) -> Action:
    return Action(type=ActionType.SET_TIME, time=time)


def set_volume(volume: float) -> Action:
    return Action(type=ActionType.SET_VOLUME, volume=volume)


def set_drop_down(open_: bool) -> Action:
    return Action(type=ActionType.SET_DROP_DOWN, drop_down_open=open_)


def load_stored_state(stored: Union[SessionState, dict[str, Any]]) -> Action:
    """Replace the whole state, e.g. with one restored from local storage."""
    return Action(
        type=ActionType.LOAD_STORED_STATE,
        stored_state=SessionState.model_validate(stored),
    )


def users_request() -> Action:
    return Action(type=ActionType.USERS_REQUEST)


def users_success(users: list[dict[str, Any]]) -> Action:
    return Action(type=ActionType.USERS_SUCCESS, payload=users)


def users_failure() -> Action:
    return Action(type=ActionType.USERS_FAILURE)


def user_by_id_request() -> Action:
    return Action(type=ActionType.USER_BY_ID_REQUEST)


def user_by_id_success(user: dict[str, Any]) -> Action:
    return Action(type=ActionType.USER_BY_ID_SUCCESS, payload=user)


def user_by_id_failure() -> Action:
    return Action(type=ActionType.USER_BY_ID_FAILURE)

"""
Session reducer: ``(state, action) -> new state``.

States are frozen, so every branch builds a copy. Unknown action types
return the state unchanged.
"""

from .actions import Action, ActionType
from .state import SessionState


def reduce(state: SessionState, action: Action) -> SessionState:
    t = action.type

    if t == ActionType.SET_TOKEN:
        return state.model_copy(update={"token": action.token})
    if t == ActionType.SET_USER:
        return state.model_copy(update={"user": action.user})
    if t == ActionType.SET_USER_AND_TOKEN:
        return state.model_copy(update={"user": action.user, "token": action.token})
    if t == ActionType.TOGGLE_PLAY:
        return state.model_copy(update={"playing": not state.playing})
    if t == ActionType.SET_TIME:
        return state.model_copy(update={"time": action.time})
    if t == ActionType.SET_VOLUME:
        return state.model_copy(update={"volume": action.volume})
    if t == ActionType.SET_DROP_DOWN:
        return state.model_copy(update={"drop_down_open": bool(action.drop_down_open)})
    if t == ActionType.LOAD_STORED_STATE:
        return action.stored_state if action.stored_state is not None else SessionState()

    # Fetch lifecycles: REQUEST keeps the old data, FAILURE drops it
    if t == ActionType.USERS_REQUEST:
        return state.model_copy(update={"is_fetching": True, "is_error": False})
    if t == ActionType.USERS_SUCCESS:
        return state.model_copy(
            update={"is_fetching": False, "is_error": False, "users": action.payload}
        )
    if t == ActionType.USERS_FAILURE:
        return state.model_copy(update={"is_fetching": False, "is_error": True, "users": None})

    if t == ActionType.USER_BY_ID_REQUEST:
        return state.model_copy(update={"is_fetching": True, "is_error": False})
    if t == ActionType.USER_BY_ID_SUCCESS:
        return state.model_copy(
            update={"is_fetching": False, "is_error": False, "current_user": action.payload}
        )
    if t == ActionType.USER_BY_ID_FAILURE:
        return state.model_copy(
            update={"is_fetching": False, "is_error": True, "current_user": None}
        )

    return state

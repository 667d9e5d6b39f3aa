"""
Client session state.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class SessionState(BaseModel):
    """
    Everything the front-end keeps between renders.

    ``users`` and ``current_user`` become ``None`` after a failed fetch,
    which is distinct from the empty values they start with.
    """

    token: Optional[str] = None
    user: Optional[dict[str, Any]] = None

    users: Optional[list[dict[str, Any]]] = Field(default_factory=list)
    current_user: Optional[dict[str, Any]] = Field(default_factory=dict)
    is_fetching: bool = False
    is_error: bool = False

    # Player and layout flags
    playing: bool = False
    time: Optional[float] = None
    volume: Optional[float] = None
    drop_down_open: bool = False

    model_config = {"frozen": True}

"""
HTTP client for the Hackboard API.

Login and registration store the returned user and token in the session
store. The two fetches (user list, single user) dispatch REQUEST before the
call and SUCCESS or FAILURE after it; a failed fetch is logged and returns
``None`` instead of raising, so callers read the outcome from the store.
"""

import logging
from typing import Any, Optional

import httpx

from . import actions
from .exceptions import ApiRequestError
from .store import SessionStore

logger = logging.getLogger(__name__)


class AccountClient:
    """
    Talks to ``/api/auth`` and ``/api/users`` on behalf of one session.

    Pass ``http`` to supply a preconfigured ``httpx.AsyncClient`` (tests use
    one with a mock transport); otherwise the client owns its connection
    pool and should be closed with ``aclose()`` or used as a context manager.
    """

    def __init__(
        self,
        base_url: str,
        store: SessionStore,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self._store = store
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "AccountClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # =========================================================================
    # Session
    # =========================================================================

    async def login_with_token(self, token: Optional[str] = None) -> dict[str, Any]:
        """Resume a session; defaults to the token already in the store."""
        token = token or self._store.get_state().token
        if not token:
            raise ApiRequestError("No session token to log in with")
        body = await self._request("POST", "/api/auth/login", json={"token": token})
        return self._start_session(body)

    async def login_with_password(self, email: str, password: str) -> dict[str, Any]:
        body = await self._request(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )
        return self._start_session(body)

    async def register(self, email: str, password: str) -> dict[str, Any]:
        body = await self._request(
            "POST", "/api/auth/register", json={"email": email, "password": password}
        )
        return self._start_session(body)

    def _start_session(self, body: dict[str, Any]) -> dict[str, Any]:
        user = body["user"]
        self._store.dispatch(actions.set_user_and_token(user, body["token"]))
        return user

    # =========================================================================
    # Fetch lifecycles
    # =========================================================================

    async def fetch_users(
        self,
        page: int = 0,
        size: int = 50,
        text: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Load one page of users into ``state.users``.

        Returns the full page body (with ``total_pages``) or ``None`` on failure.
        """
        self._store.dispatch(actions.users_request())
        params: dict[str, Any] = {"page": page, "size": size}
        if text:
            params["text"] = text

        try:
            body = await self._request("GET", "/api/users", params=params, auth=True)
        except ApiRequestError as e:
            logger.warning("Fetching users failed: %s", e.message)
            self._store.dispatch(actions.users_failure())
            return None

        self._store.dispatch(actions.users_success(body["users"]))
        return body

    async def fetch_user_by_id(self, user_id: str) -> Optional[dict[str, Any]]:
        """Load one user into ``state.current_user``; ``None`` on failure."""
        self._store.dispatch(actions.user_by_id_request())
        try:
            body = await self._request("GET", f"/api/users/{user_id}", auth=True)
        except ApiRequestError as e:
            logger.warning("Fetching user %s failed: %s", user_id, e.message)
            self._store.dispatch(actions.user_by_id_failure())
            return None

        self._store.dispatch(actions.user_by_id_success(body))
        return body

    # =========================================================================
    # Transport
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        auth: bool = False,
        **kwargs: Any,
    ) -> dict[str, Any]:
        headers = {}
        if auth:
            token = self._store.get_state().token
            if token:
                headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise ApiRequestError(f"Request to {path} failed: {e}") from e

        if response.is_error:
            raise ApiRequestError(_error_message(response), status_code=response.status_code)
        return response.json()


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("message") or response.reason_phrase
    except ValueError:
        return response.reason_phrase

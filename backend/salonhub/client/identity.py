"""
salonhub/client/identity.py
Client side of Firebase Authentication over the Identity Toolkit REST API.

`IdentityProvider` signs users in (password or federated IdP credential), keeps the
current identity, and delivers auth-state changes to listeners one at a time, in the
order they happened. A listener may itself trigger a change (for example sign out);
that change is queued and delivered after the listener returns.
"""
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, List, Optional

import httpx
from pydantic import BaseModel

from salonhub.core.errors import CallableError, ErrorCode

logger = logging.getLogger("salonhub.client.identity")

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

Listener = Callable[[Optional["Identity"]], Awaitable[None]]


class Identity(BaseModel):
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    picture: Optional[str] = None
    id_token: str
    refresh_token: Optional[str] = None

    model_config = {"frozen": True}


class AuthProviderError(Exception):
    """Sign-in rejected by the identity provider (e.g. INVALID_PASSWORD)."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


class IdentityProvider:
    def __init__(self, api_key: str, http: Optional[httpx.AsyncClient] = None,
                 base_url: str = IDENTITY_TOOLKIT_URL):
        self._api_key = api_key
        self._http = http or httpx.AsyncClient(timeout=10)
        self._base_url = base_url.rstrip("/")
        self._current: Optional[Identity] = None
        self._listeners: List[Listener] = []
        self._pending: Deque[Optional[Identity]] = deque()
        self._delivering = False

    @property
    def current_user(self) -> Optional[Identity]:
        return self._current

    def current_token(self) -> Optional[str]:
        return self._current.id_token if self._current else None

    def on_auth_state_changed(self, listener: Listener) -> Callable[[], None]:
        """Registers `listener`; returns the function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def restore(self, identity: Optional[Identity] = None) -> None:
        """Announces the initial state (a persisted session, or signed out)."""
        self._current = identity
        await self._emit(identity)

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        data = await self._post("accounts:signInWithPassword", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        return await self._signed_in(data)

    async def sign_in_with_idp(self, provider_id: str, provider_id_token: str,
                               request_uri: str = "http://localhost") -> Identity:
        """Federated sign-in with a credential from the provider (e.g. a Google ID token)."""
        data = await self._post("accounts:signInWithIdp", {
            "postBody": f"id_token={provider_id_token}&providerId={provider_id}",
            "requestUri": request_uri,
            "returnIdpCredential": True,
            "returnSecureToken": True,
        })
        return await self._signed_in(data)

    async def sign_out(self) -> None:
        if self._current is None:
            return
        self._current = None
        await self._emit(None)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _post(self, method: str, payload: dict) -> dict:
        url = f"{self._base_url}/{method}"
        try:
            resp = await self._http.post(url, params={"key": self._api_key}, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("%s failed: %s", method, exc)
            raise CallableError(ErrorCode.INTERNAL, "Identity provider unreachable.", str(exc))
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.status_code != 200 or not isinstance(data, dict) or "idToken" not in data:
            code = (data.get("error") or {}).get("message", "UNKNOWN") if isinstance(data, dict) else "UNKNOWN"
            logger.info("%s rejected: %s", method, code)
            raise AuthProviderError(code)
        return data

    async def _signed_in(self, data: dict) -> Identity:
        identity = Identity(
            uid=data["localId"],
            email=data.get("email"),
            display_name=data.get("displayName") or None,
            picture=data.get("photoUrl") or data.get("profilePicture") or None,
            id_token=data["idToken"],
            refresh_token=data.get("refreshToken"),
        )
        self._current = identity
        await self._emit(identity)
        return identity

    async def _emit(self, identity: Optional[Identity]) -> None:
        self._pending.append(identity)
        if self._delivering:
            return
        self._delivering = True
        try:
            while self._pending:
                event = self._pending.popleft()
                for listener in list(self._listeners):
                    await listener(event)
        finally:
            self._delivering = False

"""
salonhub/client/session.py
Auth/profile sync: mirrors the identity provider's state into one explicit `AuthState`.

`AuthSession` is the single writer of that state. It subscribes to the provider once
(`start`) and unsubscribes on `close`.

- signed in  → identity recorded, `ensureUserProfile` called, role and profile stored.
  If the profile cannot be obtained the session forces a sign-out, so the state never
  shows an authenticated identity without a role.
- signed out → identity, role and profile cleared.
- `loading` stays true until the first change has been fully processed.
"""
import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ValidationError

from salonhub.client.functions import FunctionsClient
from salonhub.client.identity import Identity, IdentityProvider
from salonhub.core.errors import CallableError
from salonhub.schemas.user import Role, UserProfile

logger = logging.getLogger("salonhub.client.session")

LANDING_PATHS = {
    Role.ADMIN: "/dashboard/admin",
    Role.SALON: "/dashboard/salon",
    Role.CUSTOMER: "/dashboard/user",
}
HOME_PATH = "/"


def landing_path(role: Optional[Role]) -> str:
    """Dashboard a user lands on after sign-in."""
    if role is None:
        return HOME_PATH
    return LANDING_PATHS.get(role, LANDING_PATHS[Role.CUSTOMER])


class AuthStatus(str, Enum):
    LOADING = "loading"
    SIGNED_OUT = "signed_out"
    SIGNED_IN = "signed_in"


class AuthState(BaseModel):
    status: AuthStatus = AuthStatus.LOADING
    identity: Optional[Identity] = None
    profile: Optional[UserProfile] = None
    last_error: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def loading(self) -> bool:
        return self.status is AuthStatus.LOADING

    @property
    def user_id(self) -> Optional[str]:
        return self.identity.uid if self.identity else None

    @property
    def role(self) -> Optional[Role]:
        return self.profile.role if self.profile else None


class AuthSession:
    def __init__(self, provider: IdentityProvider, functions: FunctionsClient,
                 on_change: Optional[Callable[[AuthState], None]] = None):
        self._provider = provider
        self._functions = functions
        self._on_change = on_change
        self._state = AuthState()
        self._resolved = asyncio.Event()
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def state(self) -> AuthState:
        return self._state

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._provider.on_auth_state_changed(self._handle)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def wait_until_resolved(self) -> AuthState:
        await self._resolved.wait()
        return self._state

    async def refresh_profile(self) -> Optional[UserProfile]:
        """Re-reads the profile, e.g. after an admin changed this user's role."""
        if self._state.status is not AuthStatus.SIGNED_IN:
            return None
        profile = await self._functions.ensure_user_profile()
        self._publish(self._state.model_copy(update={"profile": profile}))
        return profile

    async def _handle(self, identity: Optional[Identity]) -> None:
        try:
            if identity is None:
                # keep the reason of a forced sign-out visible
                error = self._state.last_error if self._state.status is AuthStatus.SIGNED_OUT else None
                self._publish(AuthState(status=AuthStatus.SIGNED_OUT, last_error=error))
            else:
                await self._signed_in(identity)
        finally:
            self._resolved.set()

    async def _signed_in(self, identity: Identity) -> None:
        try:
            profile = await self._functions.ensure_user_profile()
        except (CallableError, ValidationError) as exc:
            message = exc.message if isinstance(exc, CallableError) else "Invalid profile response."
            logger.error("Profile loading failed for %s: %s. Signing out.", identity.uid, message)
            self._publish(AuthState(status=AuthStatus.SIGNED_OUT, last_error=message))
            await self._provider.sign_out()
            return
        logger.info("Signed in %s with role %s", identity.uid, profile.role.value)
        self._publish(AuthState(status=AuthStatus.SIGNED_IN, identity=identity, profile=profile))

    def _publish(self, state: AuthState) -> None:
        self._state = state
        if self._on_change is not None:
            self._on_change(state)

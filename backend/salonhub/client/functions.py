"""
salonhub/client/functions.py
Async client for the callable functions (`POST /<name>` with `{"data": ...}`).
Error envelopes come back as `CallableError` with the same error kind the server raised.
"""
import logging
from typing import Any, Callable, List, Optional

import httpx

from salonhub.core.errors import CallableError, ErrorCode
from salonhub.schemas.user import UserProfile, UserSearchHit

logger = logging.getLogger("salonhub.client.functions")

TokenGetter = Callable[[], Optional[str]]


class FunctionsClient:
    def __init__(self, base_url: str, token_getter: TokenGetter, http: Optional[httpx.AsyncClient] = None):
        self._base_url = base_url.rstrip("/")
        self._token_getter = token_getter
        self._http = http or httpx.AsyncClient(timeout=15)

    async def call(self, name: str, data: Any = None) -> Any:
        headers = {}
        token = self._token_getter()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            resp = await self._http.post(f"{self._base_url}/{name}", json={"data": data}, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Callable %s failed: %s", name, exc)
            raise CallableError(ErrorCode.INTERNAL, f"Call to {name} failed.", str(exc))

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if "error" in body:
            err = body["error"] or {}
            raise CallableError(
                ErrorCode.from_wire(err.get("status", "")),
                err.get("message", "Unknown error"),
                err.get("details"),
            )
        if resp.status_code != 200 or "result" not in body:
            raise CallableError(ErrorCode.INTERNAL, f"Unexpected response from {name}: HTTP {resp.status_code}")
        return body["result"]

    async def ensure_user_profile(self) -> UserProfile:
        return UserProfile.model_validate(await self.call("ensureUserProfile"))

    async def get_user_profile(self, uid: Optional[str] = None) -> Optional[UserProfile]:
        result = await self.call("getAuthUserProfile", {"uid": uid} if uid else {})
        return UserProfile.model_validate(result) if result is not None else None

    async def get_all_user_profiles(self) -> List[UserProfile]:
        return [UserProfile.model_validate(p) for p in await self.call("getAllUserProfiles")]

    async def update_user_profile(self, **changes) -> dict:
        return await self.call("updateAuthUserProfile", changes)

    async def search_users_by_email(self, term: str) -> List[UserSearchHit]:
        return [UserSearchHit.model_validate(h) for h in await self.call("searchUsersByEmail", {"searchTerm": term})]

    async def add_salon(self, name: str, address: str, description: str, owner_email: str) -> dict:
        return await self.call("addSalon", {
            "name": name,
            "address": address,
            "description": description,
            "ownerEmail": owner_email,
        })

    async def update_salon(self, salon_id: str, name: Optional[str] = None, address: Optional[str] = None,
                           description: Optional[str] = None, owner_email: Optional[str] = None) -> dict:
        data = {"id": salon_id, "name": name, "address": address,
                "description": description, "ownerEmail": owner_email}
        return await self.call("updateSalon", {k: v for k, v in data.items() if v is not None})

    async def delete_salon(self, salon_id: str) -> dict:
        return await self.call("deleteSalon", {"id": salon_id})

    async def aclose(self) -> None:
        await self._http.aclose()

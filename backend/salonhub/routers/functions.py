"""
# `salonhub/routers/functions.py` - Callable Functions

## Overview
The server-side operations invoked directly by an authenticated client. They follow the
Firebase callable protocol so the web client's `httpsCallable(functions, "<name>")` and
`salonhub.client.functions.FunctionsClient` can both reach them:

- request: `POST /<name>` with body `{"data": {...}}` and `Authorization: Bearer <ID token>`
- success: `200 {"result": ...}`
- failure: `{"error": {"status": "NOT_FOUND", "message": "...", "details": ...}}` with
  401 / 403 / 400 / 404 / 500 for unauthenticated / permission-denied / invalid-argument /
  not-found / internal.

The application instance id that namespaces every Firestore path comes from
configuration (`FIREBASE_APP_ID`), never from the request.

---

## Endpoints

### `POST /ensureUserProfile`
Creates the caller's profile on first contact (role `customer`), otherwise touches
`lastLoginAt`. Returns the profile.

### `POST /addSalon` (admin)
`{name, address, description, ownerEmail}` → `{id, message}`.
The owner is resolved by e-mail and promoted to `salon` if still on the default role.

### `POST /updateSalon` (admin)
`{id, name?, address?, description?, ownerEmail?}` → `{message}`. Partial update.

### `POST /deleteSalon` (admin)
`{id}` → `{message}`. Unknown id → not-found.

### `POST /getAuthUserProfile`
`{uid?}` → profile or `null`. Someone else's profile requires admin.

### `POST /getAllUserProfiles` (admin)
→ list of profiles.

### `POST /updateAuthUserProfile`
`{targetUid?, displayName?, photoURL?, phoneNumber?, address?, favoriteSalons?, role?}` → `{message}`.

### `POST /searchUsersByEmail` (admin)
`{searchTerm}` → list of `{uid, email, displayName, role}`.
"""
import logging
from typing import Any, Generic, Optional, TypeVar

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from salonhub.config import get_db, settings
from salonhub.core.auth import get_optional_principal
from salonhub.schemas.principal import Principal
from salonhub.schemas.salon import AddSalonRequest, DeleteSalonRequest, UpdateSalonRequest
from salonhub.schemas.user import GetUserProfileRequest, SearchUsersRequest, UpdateUserProfileRequest
from salonhub.services import profiles as profile_service
from salonhub.services import salon_admin
from salonhub.services.profile_lifecycle import ensure_profile

logger = logging.getLogger("salonhub.functions")

router = APIRouter(tags=["Callable Functions"])

T = TypeVar("T")


class CallableBody(BaseModel, Generic[T]):
    data: Optional[T] = None


def _result(value: Any) -> dict:
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    elif isinstance(value, list):
        value = [v.model_dump(mode="json") if isinstance(v, BaseModel) else v for v in value]
    return {"result": value}


@router.post("/ensureUserProfile", summary="Ensure the caller's profile exists")
def ensure_user_profile(
    body: Optional[CallableBody[Any]] = None,
    principal: Optional[Principal] = Depends(get_optional_principal),
    db=Depends(get_db),
):
    return _result(ensure_profile(db, settings.firebase_app_id, principal))


@router.post("/addSalon", summary="Create a salon (admin)")
def add_salon(
    body: CallableBody[AddSalonRequest],
    principal: Optional[Principal] = Depends(get_optional_principal),
    db=Depends(get_db),
):
    req = body.data or AddSalonRequest()
    return _result(salon_admin.add_salon(db, settings.firebase_app_id, principal, req))


@router.post("/updateSalon", summary="Update a salon (admin)")
def update_salon(
    body: CallableBody[UpdateSalonRequest],
    principal: Optional[Principal] = Depends(get_optional_principal),
    db=Depends(get_db),
):
    req = body.data or UpdateSalonRequest()
    return _result(salon_admin.update_salon(db, settings.firebase_app_id, principal, req))


@router.post("/deleteSalon", summary="Delete a salon (admin)")
def delete_salon(
    body: CallableBody[DeleteSalonRequest],
    principal: Optional[Principal] = Depends(get_optional_principal),
    db=Depends(get_db),
):
    req = body.data or DeleteSalonRequest()
    return _result(salon_admin.delete_salon(db, settings.firebase_app_id, principal, req))


@router.post("/getAuthUserProfile", summary="Read a profile")
def get_auth_user_profile(
    body: Optional[CallableBody[GetUserProfileRequest]] = None,
    principal: Optional[Principal] = Depends(get_optional_principal),
    db=Depends(get_db),
):
    req = (body.data if body else None) or GetUserProfileRequest()
    return _result(profile_service.get_profile(db, settings.firebase_app_id, principal, req.uid))


@router.post("/getAllUserProfiles", summary="List all profiles (admin)")
def get_all_user_profiles(
    body: Optional[CallableBody[Any]] = None,
    principal: Optional[Principal] = Depends(get_optional_principal),
    db=Depends(get_db),
):
    return _result(profile_service.list_profiles(db, settings.firebase_app_id, principal))


@router.post("/updateAuthUserProfile", summary="Edit a profile")
def update_auth_user_profile(
    body: CallableBody[UpdateUserProfileRequest],
    principal: Optional[Principal] = Depends(get_optional_principal),
    db=Depends(get_db),
):
    req = body.data or UpdateUserProfileRequest()
    return _result(profile_service.update_profile(db, settings.firebase_app_id, principal, req))


@router.post("/searchUsersByEmail", summary="Find users by e-mail prefix (admin)")
def search_users_by_email(
    body: CallableBody[SearchUsersRequest],
    principal: Optional[Principal] = Depends(get_optional_principal),
    db=Depends(get_db),
):
    req = body.data or SearchUsersRequest()
    return _result(profile_service.search_users_by_email(db, settings.firebase_app_id, principal, req.searchTerm))

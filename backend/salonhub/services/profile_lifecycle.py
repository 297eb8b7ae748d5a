"""
Profile lifecycle: the per-identity profile document is created lazily on first
contact and touched on every later contact.

Owner promotion lives here as well since it is the only other path that may
create a profile: an owner assigned before their first sign-in gets a placeholder
profile that `ensure_profile` later finds and keeps.
"""
import logging
from typing import Any, Dict, Optional

from firebase_admin import firestore
from google.api_core import exceptions as gexc
from pydantic import ValidationError

from salonhub.core.auth import require_principal
from salonhub.core.errors import CallableError, ErrorCode
from salonhub.repositories import profiles as profile_repo
from salonhub.schemas.principal import Principal
from salonhub.schemas.user import DEFAULT_ROLE, DEFAULT_ROLE_VALUES, Role, UserProfile

logger = logging.getLogger("salonhub.profiles")

NEW_USER_DISPLAY_NAME = "New User"

# Fields a placeholder profile may be missing; filled from the token on first sign-in.
_BACKFILL_KEYS = ("email", "displayName", "photoURL", "phoneNumber", "address",
                  "associatedSalons", "favoriteSalons", "ownedSalons", "createdAt")


def new_profile_document(principal: Principal) -> Dict[str, Any]:
    return {
        "uid": principal.uid,
        "email": principal.email,
        "displayName": principal.display_name or NEW_USER_DISPLAY_NAME,
        "photoURL": principal.picture,
        "phoneNumber": None,
        "address": None,
        "role": DEFAULT_ROLE.value,
        "ownedSalons": [],
        "associatedSalons": [],
        "favoriteSalons": [],
        "createdAt": firestore.SERVER_TIMESTAMP,
        "lastLoginAt": firestore.SERVER_TIMESTAMP,
    }


def _touch(db, app_id: str, principal: Principal, existing: Dict[str, Any]) -> None:
    changes: Dict[str, Any] = {"lastLoginAt": firestore.SERVER_TIMESTAMP}
    defaults = new_profile_document(principal)
    for key in _BACKFILL_KEYS:
        if key not in existing:
            changes[key] = defaults[key]
    profile_repo.merge(db, app_id, principal.uid, changes)


def ensure_profile(db, app_id: str, principal: Optional[Principal]) -> UserProfile:
    """
    Returns the caller's profile, creating it with the default role on first contact.

    Only ever acts on the verified caller. Role and ownership fields of an existing
    profile are never rewritten; only `lastLoginAt` moves (plus keys a placeholder
    profile never had).
    """
    principal = require_principal(principal)
    uid = principal.uid
    try:
        existing = profile_repo.get(db, app_id, uid)
        if existing is None:
            try:
                profile_repo.ref(db, app_id, uid).create(new_profile_document(principal))
                logger.info("Created new profile for user: %s", uid)
            except gexc.AlreadyExists:
                # created concurrently (another sign-in, or an owner placeholder)
                existing = profile_repo.get(db, app_id, uid) or {}
                _touch(db, app_id, principal, existing)
        else:
            _touch(db, app_id, principal, existing)
            logger.debug("Updated lastLoginAt for user: %s", uid)
        data = profile_repo.get(db, app_id, uid)
    except gexc.GoogleAPIError as exc:
        logger.exception("ensure_profile failed for %s", uid)
        raise CallableError(ErrorCode.INTERNAL, "Failed to set up user profile.", str(exc))

    if data is None:
        raise CallableError(ErrorCode.INTERNAL, "Failed to set up user profile.", "profile missing after write")
    try:
        return UserProfile.model_validate(data)
    except ValidationError as exc:
        logger.exception("Stored profile of %s is malformed", uid)
        raise CallableError(ErrorCode.INTERNAL, "Failed to set up user profile.", str(exc))


def stage_owner_promotion(db, batch, app_id: str, owner_uid: str, owner_email: str, salon_id: str) -> str:
    """
    Adds the ownership side effects of assigning `salon_id` to `owner_uid` to `batch`.

    - profile on the default role → role becomes `salon`
    - no profile yet → placeholder profile with role `salon`
    - any other role (admin, salon) is kept
    The salon id is added to `ownedSalons` in every case.
    Returns what happened: "promoted", "created" or "kept".
    """
    ref = profile_repo.ref(db, app_id, owner_uid)
    snap = ref.get()
    if not snap.exists:
        batch.set(ref, {
            "uid": owner_uid,
            "email": owner_email,
            "role": Role.SALON.value,
            "ownedSalons": [salon_id],
            "createdAt": firestore.SERVER_TIMESTAMP,
            "updatedAt": firestore.SERVER_TIMESTAMP,
        }, merge=True)
        return "created"

    current = (snap.to_dict() or {}).get("role")
    changes: Dict[str, Any] = {
        "ownedSalons": firestore.ArrayUnion([salon_id]),
        "updatedAt": firestore.SERVER_TIMESTAMP,
    }
    if current is None or current in DEFAULT_ROLE_VALUES:
        changes["role"] = Role.SALON.value
        batch.update(ref, changes)
        return "promoted"
    batch.update(ref, changes)
    return "kept"


def stage_ownership_release(db, batch, app_id: str, owner_uid: Optional[str], salon_id: str) -> None:
    """Removes `salon_id` from the owner's `ownedSalons`. The role is never demoted."""
    if not owner_uid:
        return
    ref = profile_repo.ref(db, app_id, owner_uid)
    if not ref.get().exists:
        return
    batch.update(ref, {
        "ownedSalons": firestore.ArrayRemove([salon_id]),
        "updatedAt": firestore.SERVER_TIMESTAMP,
    })

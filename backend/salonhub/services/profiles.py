"""
Profile reads and edits exposed as callables (besides `ensureUserProfile`).

Rules:
- a caller may always read and edit their own profile's display fields;
- another uid, `getAllUserProfiles`, `searchUsersByEmail` and any `role` write need an admin;
- `role` can never be set to `salon` here, that only happens through salon ownership;
- `ownedSalons`, `associatedSalons` and `createdAt` are not editable through this path.
"""
import logging
from typing import List, Optional

from firebase_admin import firestore
from google.api_core import exceptions as gexc
from pydantic import ValidationError

from salonhub.core.auth import require_principal
from salonhub.core.errors import CallableError, ErrorCode
from salonhub.core.security import assert_admin
from salonhub.repositories import profiles as profile_repo
from salonhub.schemas.principal import Principal
from salonhub.schemas.user import Role, UpdateUserProfileRequest, UserProfile, UserSearchHit

logger = logging.getLogger("salonhub.profiles")

MIN_SEARCH_LENGTH = 2
MAX_SEARCH_RESULTS = 10


def get_profile(db, app_id: str, principal: Optional[Principal], uid: Optional[str] = None) -> Optional[UserProfile]:
    principal = require_principal(principal)
    target = (uid or "").strip() or principal.uid
    if target != principal.uid:
        assert_admin(db, app_id, principal)
    try:
        data = profile_repo.get(db, app_id, target)
    except gexc.GoogleAPIError as exc:
        logger.exception("Error fetching profile %s", target)
        raise CallableError(ErrorCode.INTERNAL, "Failed to fetch user profile.", str(exc))
    if data is None:
        return None
    try:
        return UserProfile.model_validate(data)
    except ValidationError as exc:
        logger.exception("Stored profile of %s is malformed", target)
        raise CallableError(ErrorCode.INTERNAL, "Failed to fetch user profile.", str(exc))


def _stream_profiles(db, app_id: str):
    try:
        for uid, data in profile_repo.stream_all(db, app_id):
            try:
                yield UserProfile.model_validate(data)
            except ValidationError as exc:
                logger.warning("Skipping malformed profile %s: %s", uid, exc.errors()[:1])
    except gexc.GoogleAPIError as exc:
        logger.exception("Error listing profiles")
        raise CallableError(ErrorCode.INTERNAL, "Failed to list user profiles.", str(exc))


def list_profiles(db, app_id: str, principal: Optional[Principal]) -> List[UserProfile]:
    assert_admin(db, app_id, principal)
    return list(_stream_profiles(db, app_id))


def search_users_by_email(db, app_id: str, principal: Optional[Principal], term: str) -> List[UserSearchHit]:
    """Case-insensitive e-mail prefix search, used to pick a salon owner."""
    assert_admin(db, app_id, principal)
    needle = (term or "").strip().lower()
    if len(needle) < MIN_SEARCH_LENGTH:
        raise CallableError(
            ErrorCode.INVALID_ARGUMENT,
            f"Search term must be at least {MIN_SEARCH_LENGTH} characters.",
        )
    hits = [p for p in _stream_profiles(db, app_id) if (p.email or "").lower().startswith(needle)]
    hits.sort(key=lambda p: (p.email or "").lower())
    return [
        UserSearchHit(uid=p.uid, email=p.email, displayName=p.displayName, role=p.role)
        for p in hits[:MAX_SEARCH_RESULTS]
    ]


def update_profile(db, app_id: str, principal: Optional[Principal], req: UpdateUserProfileRequest) -> dict:
    principal = require_principal(principal)
    target = (req.targetUid or "").strip() or principal.uid
    changes = req.changes()

    if target != principal.uid or "role" in changes:
        assert_admin(db, app_id, principal)

    if not changes:
        raise CallableError(ErrorCode.INVALID_ARGUMENT, "No profile fields to update.")
    if "role" in changes and changes["role"] in (None, Role.SALON.value):
        raise CallableError(
            ErrorCode.INVALID_ARGUMENT,
            "The salon role is granted by assigning salon ownership, not by a profile edit.",
        )

    try:
        if profile_repo.get(db, app_id, target) is None:
            raise CallableError(ErrorCode.NOT_FOUND, f"User profile {target} not found.")
        profile_repo.update(db, app_id, target, {**changes, "updatedAt": firestore.SERVER_TIMESTAMP})
    except gexc.GoogleAPIError as exc:
        logger.exception("Error updating profile %s", target)
        raise CallableError(ErrorCode.INTERNAL, "Failed to update user profile.", str(exc))

    logger.info("Profile %s updated by %s (%s)", target, principal.uid, ", ".join(sorted(changes)))
    return {"message": "Profile updated successfully!"}


def set_photo_url(db, app_id: str, uid: str, url: str) -> None:
    try:
        profile_repo.update(db, app_id, uid, {"photoURL": url, "updatedAt": firestore.SERVER_TIMESTAMP})
    except gexc.GoogleAPIError as exc:
        logger.exception("Error saving photo URL for %s", uid)
        raise CallableError(ErrorCode.INTERNAL, "Failed to update user profile.", str(exc))

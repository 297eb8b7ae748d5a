"""
Admin-only salon mutations.

Every operation runs the admin guard first, then validates input, then resolves
the owner e-mail through Firebase Auth, and only then writes. The salon document
and the owner-profile side effects are committed in one Firestore batch, so a
failure leaves neither half behind.
"""
import logging
from typing import Any, Dict, Optional

from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import firestore
from google.api_core import exceptions as gexc

from salonhub.core.errors import CallableError, ErrorCode
from salonhub.core.security import assert_admin
from salonhub.repositories import salons as salon_repo
from salonhub.schemas.principal import Principal
from salonhub.schemas.salon import AddSalonRequest, DeleteSalonRequest, UpdateSalonRequest
from salonhub.services.profile_lifecycle import stage_owner_promotion, stage_ownership_release

logger = logging.getLogger("salonhub.salons")

_EDITABLE_FIELDS = ("name", "address", "description")


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def resolve_owner_uid(email: str) -> str:
    """Looks the e-mail up in the Firebase Auth user directory."""
    try:
        return firebase_auth.get_user_by_email(email).uid
    except firebase_auth.UserNotFoundError:
        raise CallableError(
            ErrorCode.NOT_FOUND,
            f"User with email {email} not found. Please ensure the user exists.",
        )
    except ValueError as exc:
        raise CallableError(ErrorCode.INVALID_ARGUMENT, f"Invalid owner email: {email}", str(exc))
    except firebase_exceptions.FirebaseError as exc:
        logger.exception("Error looking up owner by email: %s", email)
        raise CallableError(ErrorCode.INTERNAL, "Failed to verify owner email.", str(exc))


def add_salon(db, app_id: str, principal: Optional[Principal], req: AddSalonRequest) -> Dict[str, Any]:
    assert_admin(db, app_id, principal)

    name, address, description = _clean(req.name), _clean(req.address), _clean(req.description)
    owner_email = _clean(req.ownerEmail)
    if not (name and address and description and owner_email):
        raise CallableError(ErrorCode.INVALID_ARGUMENT, "Missing required salon fields or owner email.")

    owner_uid = resolve_owner_uid(owner_email)

    try:
        salon_ref = salon_repo.new_ref(db, app_id)
        batch = db.batch()
        batch.set(salon_ref, {
            "name": name,
            "address": address,
            "description": description,
            "ownerId": owner_uid,
            "createdAt": firestore.SERVER_TIMESTAMP,
            "updatedAt": firestore.SERVER_TIMESTAMP,
        })
        outcome = stage_owner_promotion(db, batch, app_id, owner_uid, owner_email, salon_ref.id)
        batch.commit()
    except gexc.GoogleAPIError as exc:
        logger.exception("Error adding salon %r for owner %s", name, owner_uid)
        raise CallableError(ErrorCode.INTERNAL, "Failed to add salon.", str(exc))

    logger.info("Salon %s created by %s; owner %s profile %s", salon_ref.id, principal.uid, owner_uid, outcome)
    return {"id": salon_ref.id, "message": "Salon added successfully!"}


def update_salon(db, app_id: str, principal: Optional[Principal], req: UpdateSalonRequest) -> Dict[str, Any]:
    assert_admin(db, app_id, principal)

    salon_id = _clean(req.id)
    fields = {k: _clean(getattr(req, k)) for k in _EDITABLE_FIELDS}
    fields = {k: v for k, v in fields.items() if v}
    owner_email = _clean(req.ownerEmail)
    if not salon_id or not (fields or owner_email):
        raise CallableError(ErrorCode.INVALID_ARGUMENT, "Missing salon ID or update fields.")

    new_owner_uid = resolve_owner_uid(owner_email) if owner_email else None

    try:
        salon_ref = salon_repo.ref(db, app_id, salon_id)
        snap = salon_ref.get()
        if not snap.exists:
            raise CallableError(ErrorCode.NOT_FOUND, f"Salon {salon_id} not found.")
        previous_owner = (snap.to_dict() or {}).get("ownerId")

        batch = db.batch()
        changes: Dict[str, Any] = {**fields, "updatedAt": firestore.SERVER_TIMESTAMP}
        if new_owner_uid:
            changes["ownerId"] = new_owner_uid
            stage_owner_promotion(db, batch, app_id, new_owner_uid, owner_email, salon_id)
            if previous_owner and previous_owner != new_owner_uid:
                stage_ownership_release(db, batch, app_id, previous_owner, salon_id)
        batch.update(salon_ref, changes)
        batch.commit()
    except gexc.GoogleAPIError as exc:
        logger.exception("Error updating salon %s", salon_id)
        raise CallableError(ErrorCode.INTERNAL, "Failed to update salon.", str(exc))

    logger.info("Salon %s updated by %s (%s)", salon_id, principal.uid, ", ".join(sorted(changes)))
    return {"message": "Salon updated successfully!"}


def delete_salon(db, app_id: str, principal: Optional[Principal], req: DeleteSalonRequest) -> Dict[str, Any]:
    """
    Deletes the salon document. Staff sub-records are left in place.
    A salon id that does not exist is reported as not-found.
    """
    assert_admin(db, app_id, principal)

    salon_id = _clean(req.id)
    if not salon_id:
        raise CallableError(ErrorCode.INVALID_ARGUMENT, "Missing salon ID.")

    try:
        salon_ref = salon_repo.ref(db, app_id, salon_id)
        snap = salon_ref.get()
        if not snap.exists:
            raise CallableError(ErrorCode.NOT_FOUND, f"Salon {salon_id} not found.")
        batch = db.batch()
        stage_ownership_release(db, batch, app_id, (snap.to_dict() or {}).get("ownerId"), salon_id)
        batch.delete(salon_ref)
        batch.commit()
    except gexc.GoogleAPIError as exc:
        logger.exception("Error deleting salon %s", salon_id)
        raise CallableError(ErrorCode.INTERNAL, "Failed to delete salon.", str(exc))

    logger.info("Salon %s deleted by %s", salon_id, principal.uid)
    return {"message": "Salon deleted successfully!"}

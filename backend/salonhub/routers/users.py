"""
# `salonhub/routers/users.py` - Current User

## Endpoints

### `GET /users/me`
Returns the caller's stored profile. `404` until `ensureUserProfile` has run once.

### `POST /users/me/photo`
Uploads a profile photo (multipart, field `photo`, `image/*` only) to Cloud Storage under
`artifacts/{app_id}/users/{uid}/profile/`, stores the URL in `photoURL` and returns the
updated profile.
"""
import logging
import os
from datetime import timedelta
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from google.api_core import exceptions as gexc

from salonhub.config import get_bucket, get_db, settings
from salonhub.core.auth import get_optional_principal, require_principal
from salonhub.repositories.paths import profile_photo_blob
from salonhub.schemas.principal import Principal
from salonhub.schemas.user import UserProfile
from salonhub.services import profiles as profile_service

logger = logging.getLogger("salonhub.users")

router = APIRouter(prefix="/users", tags=["Users"])

# Signed URL lifetime when the bucket refuses public objects
SIGNED_URL_LIFETIME = timedelta(days=7)


@router.get("/me", response_model=UserProfile)
def get_my_profile(
    principal: Optional[Principal] = Depends(get_optional_principal),
    db=Depends(get_db),
):
    """
    Get the profile of the currently authenticated user.
    """
    profile = profile_service.get_profile(db, settings.firebase_app_id, principal)
    if profile is None:
        raise HTTPException(status_code=404, detail="User profile not found")
    return profile


@router.post("/me/photo", response_model=UserProfile)
def upload_profile_photo(
    photo: UploadFile = File(...),
    principal: Optional[Principal] = Depends(get_optional_principal),
    db=Depends(get_db),
    bucket=Depends(get_bucket),
):
    principal = require_principal(principal)
    if not (photo.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="Profile photo must be an image")

    app_id = settings.firebase_app_id
    if profile_service.get_profile(db, app_id, principal) is None:
        raise HTTPException(status_code=404, detail="User profile not found")

    ext = os.path.splitext(photo.filename or "")[1].lower() or ".jpg"
    blob = bucket.blob(profile_photo_blob(app_id, principal.uid, f"{uuid4().hex}{ext}"))
    blob.upload_from_file(photo.file, content_type=photo.content_type)
    try:
        blob.make_public()
        url = blob.public_url
    except gexc.GoogleAPIError as exc:
        # uniform bucket-level access forbids ACLs
        logger.info("make_public refused (%s); using signed URL", exc)
        url = blob.generate_signed_url(expiration=SIGNED_URL_LIFETIME)

    profile_service.set_photo_url(db, app_id, principal.uid, url)
    return profile_service.get_profile(db, app_id, principal)

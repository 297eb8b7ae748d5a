"""
# `salonhub/core/security.py` - Authorization Guard

## Overview
The admin check that runs before every salon mutation and every admin-only read.
The role is read from the caller's **stored profile**, never from token claims; a
role change takes effect on the next call without re-issuing tokens.

## `assert_admin(db, app_id, principal) -> dict`
1. No verified caller → `unauthenticated`.
2. No profile document for the caller → `permission-denied` ("User profile not found.").
3. Stored role is not `admin` → `permission-denied`.
4. Otherwise returns the caller's profile document.

One profile read, no writes. Fails on the first unmet condition.
"""
import logging
from typing import Optional

from google.api_core import exceptions as gexc

from salonhub.core.auth import require_principal
from salonhub.core.errors import CallableError, ErrorCode
from salonhub.repositories import profiles as profile_repo
from salonhub.schemas.principal import Principal
from salonhub.schemas.user import Role

logger = logging.getLogger("salonhub.security")


def assert_admin(db, app_id: str, principal: Optional[Principal]) -> dict:
    principal = require_principal(principal)
    try:
        profile = profile_repo.get(db, app_id, principal.uid)
    except gexc.GoogleAPIError as exc:
        logger.exception("Profile read failed during admin check for %s", principal.uid)
        raise CallableError(ErrorCode.INTERNAL, "Failed to verify caller role.", str(exc))

    if profile is None:
        raise CallableError(ErrorCode.PERMISSION_DENIED, "User profile not found.")
    if profile.get("role") != Role.ADMIN.value:
        logger.info("Admin check failed for %s (role=%s)", principal.uid, profile.get("role"))
        raise CallableError(ErrorCode.PERMISSION_DENIED, "Only administrators can perform this action.")
    return profile

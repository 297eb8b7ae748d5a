#!/usr/bin/env python3
"""
Grants the admin role to an existing user by writing `role: admin` into their profile.

The admin callables read the role from the stored profile, so the very first
administrator has to be created out of band with this script.

Usage: python set_admin_role.py <user_email>
"""
import logging
import sys

from firebase_admin import auth, firestore

from salonhub.config import init_firebase, settings
from salonhub.repositories import profiles as profile_repo
from salonhub.schemas.user import Role

logger = logging.getLogger("salonhub.set_admin_role")


def set_admin_role(user_email: str) -> bool:
    """Writes role=admin into the profile of the user with this e-mail."""
    init_firebase()
    db = firestore.client()

    try:
        user = auth.get_user_by_email(user_email)
    except auth.UserNotFoundError:
        logger.error("User not found: %s", user_email)
        return False
    logger.info("User found: %s - %s", user.uid, user.email)

    profile_repo.merge(db, settings.firebase_app_id, user.uid, {
        "uid": user.uid,
        "email": user.email,
        "role": Role.ADMIN.value,
        "updatedAt": firestore.SERVER_TIMESTAMP,
    })

    stored = profile_repo.get(db, settings.firebase_app_id, user.uid) or {}
    logger.info("Stored role for %s: %s", user.uid, stored.get("role"))
    return stored.get("role") == Role.ADMIN.value


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    if len(sys.argv) != 2:
        print("Usage: python set_admin_role.py <user_email>")
        print("Example: python set_admin_role.py owner@example.com")
        sys.exit(1)

    if set_admin_role(sys.argv[1]):
        print("Admin role set. The user gets admin access on the next call, no re-login needed.")
    else:
        print("Failed to set admin role")
        sys.exit(1)

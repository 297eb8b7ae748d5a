"""Firestore / Storage path layout, namespaced per application instance."""


def user_profile_path(app_id: str, uid: str) -> str:
    return f"artifacts/{app_id}/users/{uid}/profile/data"


def salons_collection_path(app_id: str) -> str:
    return f"artifacts/{app_id}/public/data/salons"


def salon_path(app_id: str, salon_id: str) -> str:
    return f"{salons_collection_path(app_id)}/{salon_id}"


def staff_collection_path(app_id: str, salon_id: str) -> str:
    return f"{salon_path(app_id, salon_id)}/staff"


def profile_photo_blob(app_id: str, uid: str, filename: str) -> str:
    return f"artifacts/{app_id}/users/{uid}/profile/{filename}"

from typing import Any, Dict, Iterator, Optional, Tuple

from salonhub.repositories.paths import user_profile_path

PROFILE_SUBCOLLECTION = "profile"


def ref(db, app_id: str, uid: str):
    return db.document(user_profile_path(app_id, uid))


def get(db, app_id: str, uid: str) -> Optional[Dict[str, Any]]:
    snap = ref(db, app_id, uid).get()
    if not snap.exists:
        return None
    data = snap.to_dict() or {}
    data.setdefault("uid", uid)
    return data


def merge(db, app_id: str, uid: str, data: Dict[str, Any]) -> None:
    ref(db, app_id, uid).set(data, merge=True)


def update(db, app_id: str, uid: str, data: Dict[str, Any]) -> None:
    ref(db, app_id, uid).update(data)


def stream_all(db, app_id: str) -> Iterator[Tuple[str, Dict[str, Any]]]:
    """
    Yields (uid, profile) for every profile of this application instance.
    Profiles live at artifacts/{app_id}/users/{uid}/profile/data.
    """
    prefix = f"artifacts/{app_id}/users/"
    for snap in db.collection_group(PROFILE_SUBCOLLECTION).stream():
        path = snap.reference.path
        if not path.startswith(prefix) or snap.id != "data":
            continue
        uid = path[len(prefix):].split("/", 1)[0]
        data = snap.to_dict() or {}
        data.setdefault("uid", uid)
        yield uid, data

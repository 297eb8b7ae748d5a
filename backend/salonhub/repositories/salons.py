from typing import Any, Dict, List, Optional

from salonhub.repositories.paths import salon_path, salons_collection_path, staff_collection_path


def collection(db, app_id: str):
    return db.collection(salons_collection_path(app_id))


def ref(db, app_id: str, salon_id: str):
    return db.document(salon_path(app_id, salon_id))


def new_ref(db, app_id: str):
    """Reference with a fresh auto-generated id; nothing is written yet."""
    return collection(db, app_id).document()


def get(db, app_id: str, salon_id: str) -> Optional[Dict[str, Any]]:
    snap = ref(db, app_id, salon_id).get()
    if not snap.exists:
        return None
    return {**(snap.to_dict() or {}), "id": snap.id}


def list_all(db, app_id: str) -> List[Dict[str, Any]]:
    return [{**(d.to_dict() or {}), "id": d.id} for d in collection(db, app_id).stream()]


def list_staff(db, app_id: str, salon_id: str) -> List[Dict[str, Any]]:
    col = db.collection(staff_collection_path(app_id, salon_id))
    return [{**(d.to_dict() or {}), "id": d.id} for d in col.stream()]

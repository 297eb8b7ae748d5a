"""
# `salonhub/routers/salons.py` - Public Salon Reads

## Endpoints

### `GET /salons/`
Lists all salons of this application instance.

### `GET /salons/{salon_id}`
One salon, `404` if it does not exist.

### `GET /salons/{salon_id}/staff`
Staff members of a salon, `404` if the salon does not exist.

Salons are created, changed and deleted only through the admin callables
(`addSalon`, `updateSalon`, `deleteSalon`).
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from salonhub.config import get_db, settings
from salonhub.repositories import salons as salon_repo
from salonhub.schemas.salon import Salon, SalonStaff

router = APIRouter(prefix="/salons", tags=["Salons"])


@router.get("/", response_model=List[Salon], summary="List Salons")
def list_salons(db=Depends(get_db)):
    salons = [Salon.model_validate(s) for s in salon_repo.list_all(db, settings.firebase_app_id)]
    salons.sort(key=lambda s: s.name.lower())
    return salons


@router.get("/{salon_id}", response_model=Salon, summary="Get Salon")
def get_salon(salon_id: str, db=Depends(get_db)):
    data = salon_repo.get(db, settings.firebase_app_id, salon_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Salon not found")
    return Salon.model_validate(data)


@router.get("/{salon_id}/staff", response_model=List[SalonStaff], summary="List Salon Staff")
def list_salon_staff(salon_id: str, db=Depends(get_db)):
    if salon_repo.get(db, settings.firebase_app_id, salon_id) is None:
        raise HTTPException(status_code=404, detail="Salon not found")
    return [SalonStaff.model_validate(s) for s in salon_repo.list_staff(db, settings.firebase_app_id, salon_id)]

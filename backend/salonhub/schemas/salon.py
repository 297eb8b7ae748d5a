"""
salonhub/schemas/salon.py
Salon, staff and the payloads of the salon callables.

Required-field and e-mail checks for the callables happen in the service layer,
after the admin guard. The owner e-mail is resolved by Firebase Auth, which decides
what a valid address is.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from salonhub.schemas.user import StaffRole


class Salon(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Firestore document ID")
    name: str = ""
    address: str = ""
    description: str = ""
    ownerId: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class SalonStaff(BaseModel):
    """Stored in artifacts/{app_id}/public/data/salons/{salonId}/staff/{staffUid}."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Staff member's Firebase UID")
    name: str = ""
    email: str = ""
    roleInSalon: StaffRole = "other"
    googleCalendarId: Optional[str] = None


class AddSalonRequest(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    ownerEmail: Optional[str] = None


class UpdateSalonRequest(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    ownerEmail: Optional[str] = None


class DeleteSalonRequest(BaseModel):
    id: Optional[str] = None

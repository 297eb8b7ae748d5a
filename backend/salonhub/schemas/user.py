"""
# `salonhub/schemas/user.py` - User Profile Schemas

## Overview
Pydantic models for the application-level user profile stored in Firestore at
`artifacts/{app_id}/users/{uid}/profile/data`, and the payloads of the profile callables.
Field names follow the stored document (camelCase) so documents validate directly.

---

## `Role`
Closed set of roles: `admin`, `customer`, `salon`.
Older documents store the default role as `"user"`; it is read as `customer`.

---

## `UserProfile`
| Field            | Type                     | Notes |
|------------------|--------------------------|-------|
| uid              | `str`                    | Firebase UID |
| email            | `str` / `null`           | |
| displayName      | `str` / `null`           | |
| photoURL         | `str` / `null`           | |
| phoneNumber      | `str` / `null`           | |
| address          | `Address` / `null`       | |
| role             | `Role`                   | |
| ownedSalons      | `list[str]`              | salon ids this user owns |
| associatedSalons | `list[AssociatedSalon]`  | staff assignments |
| favoriteSalons   | `list[str]`              | |
| createdAt        | `datetime` / `null`      | set once |
| lastLoginAt      | `datetime` / `null`      | every ensureUserProfile |
| updatedAt        | `datetime` / `null`      | every mutation |

---

## Callable payloads
- `GetUserProfileRequest`: `uid` (optional, defaults to the caller)
- `UpdateUserProfileRequest`: `targetUid` plus the editable fields
- `SearchUsersRequest`: `searchTerm`
- `UserSearchHit`: the partial profile returned by a search
"""
from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"
    SALON = "salon"

    @classmethod
    def parse(cls, value) -> "Role":
        if isinstance(value, Role):
            return value
        if value == "user":
            return cls.CUSTOMER
        return cls(value)


DEFAULT_ROLE = Role.CUSTOMER
# Stored values that count as "still on the default role" for owner promotion
DEFAULT_ROLE_VALUES = frozenset({"customer", "user"})

StaffRole = Literal["manager", "stylist", "receptionist", "other"]


class Address(BaseModel):
    street: Optional[str] = Field(None, description="Street and number")
    city: Optional[str] = Field(None, description="City")
    state: Optional[str] = Field(None, description="State / province")
    zipCode: Optional[str] = Field(None, description="Postal code")
    country: Optional[str] = Field(None, description="Country")


class AssociatedSalon(BaseModel):
    salonId: str
    roleInSalon: StaffRole = "other"
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None


class UserProfile(BaseModel):
    """Schema for user profile output."""
    model_config = ConfigDict(extra="ignore")

    uid: str = Field(..., description="User unique ID (UID from Firebase)")
    email: Optional[str] = None
    displayName: Optional[str] = None
    photoURL: Optional[str] = None
    phoneNumber: Optional[str] = None
    address: Optional[Address] = None
    role: Role = DEFAULT_ROLE
    ownedSalons: List[str] = Field(default_factory=list)
    associatedSalons: List[AssociatedSalon] = Field(default_factory=list)
    favoriteSalons: List[str] = Field(default_factory=list)
    createdAt: Optional[datetime] = None
    lastLoginAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @field_validator("role", mode="before")
    @classmethod
    def _legacy_role(cls, v):
        if v is None:
            return DEFAULT_ROLE
        return Role.parse(v)

    @field_validator("ownedSalons", "associatedSalons", "favoriteSalons", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return [] if v is None else v


class GetUserProfileRequest(BaseModel):
    uid: Optional[str] = None


class UpdateUserProfileRequest(BaseModel):
    """Profile edit. Ownership fields are deliberately absent."""
    model_config = ConfigDict(extra="forbid")

    targetUid: Optional[str] = None
    displayName: Optional[str] = None
    photoURL: Optional[str] = None
    phoneNumber: Optional[str] = None
    address: Optional[Address] = None
    favoriteSalons: Optional[List[str]] = None
    role: Optional[Role] = None

    @field_validator("role", mode="before")
    @classmethod
    def _legacy_role(cls, v):
        return None if v is None else Role.parse(v)

    def changes(self) -> dict:
        """Fields the caller actually supplied, minus the target selector."""
        data = self.model_dump(exclude_unset=True, exclude={"targetUid"})
        if "role" in data and data["role"] is not None:
            data["role"] = Role(data["role"]).value
        return data


class SearchUsersRequest(BaseModel):
    searchTerm: str = ""


class UserSearchHit(BaseModel):
    uid: str
    email: Optional[str] = None
    displayName: Optional[str] = None
    role: Role = DEFAULT_ROLE

    @field_validator("role", mode="before")
    @classmethod
    def _legacy_role(cls, v):
        return DEFAULT_ROLE if v is None else Role.parse(v)

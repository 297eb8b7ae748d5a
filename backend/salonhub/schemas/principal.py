"""
salonhub/schemas/principal.py
The verified caller identity.
"""
from typing import Optional
from pydantic import BaseModel, Field


class Principal(BaseModel):
    uid: str = Field(..., description="Firebase UID")
    email: Optional[str] = Field(None, description="E-mail (if any)")
    display_name: Optional[str] = Field(None, description="Display name (if any)")
    picture: Optional[str] = Field(None, description="Profile picture URL (if any)")

    model_config = {"frozen": True}

"""Catalog schemas - Pydantic models for read-only catalog responses"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class ServiceOptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    duration_minutes: int
    price: float


class ServiceResponse(BaseModel):
    """Schema for a catalog service; options are empty for simple services"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    master_id: int
    name: str
    description: Optional[str] = None
    duration_minutes: int
    price: float
    options: list[ServiceOptionResponse] = []


class MasterResponse(BaseModel):
    """Admin view of a master profile and the services it offers"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    bio: Optional[str] = None
    specialty: Optional[str] = None
    experience: Optional[int] = None
    services: list[ServiceResponse] = []

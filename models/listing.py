"""Pydantic models for marketplace listings and the actors that touch them."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.helpers import to_money


class ListingStatus(str, Enum):
    """Lifecycle of a listing."""

    DRAFT = "draft"
    PUBLISHED = "published"
    SOLD_OUT = "sold_out"


class ActorRole(str, Enum):
    GUEST = "guest"
    USER = "user"
    ADMIN = "admin"


class Actor(BaseModel):
    """Who is performing a store operation. Passed explicitly to every call."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    role: ActorRole = ActorRole.GUEST

    @property
    def is_authenticated(self) -> bool:
        return self.role in (ActorRole.USER, ActorRole.ADMIN)


class ListingCreate(BaseModel):
    """Fields accepted when creating a listing."""

    title: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(default=0, ge=0)

    @field_validator("price")
    @classmethod
    def _two_places(cls, value: Decimal) -> Decimal:
        return to_money(value)


class Listing(BaseModel):
    """A marketplace listing as stored."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    price: Decimal
    quantity: int = 0
    status: ListingStatus = ListingStatus.DRAFT
    seller_id: str
    inserted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_draft(self) -> bool:
        return self.status == ListingStatus.DRAFT

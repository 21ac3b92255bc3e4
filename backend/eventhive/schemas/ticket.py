"""
Pydantic schemas for ticket inventory.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from eventhive.models.enums import TicketType


class TicketCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    ticket_type: TicketType = TicketType.GENERAL
    description: Optional[str] = Field(None, max_length=2000)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    currency: str = Field("INR", min_length=3, max_length=3)
    quantity: int = Field(..., gt=0, le=1000000)
    max_per_user: int = Field(1, ge=1)
    min_per_user: int = Field(1, ge=1)
    sale_start_date: Optional[datetime] = None
    sale_end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_limits(self) -> "TicketCreate":
        if self.max_per_user < self.min_per_user:
            raise ValueError("max_per_user must be >= min_per_user")
        if self.sale_start_date and self.sale_end_date and self.sale_end_date <= self.sale_start_date:
            raise ValueError("sale_end_date must be after sale_start_date")
        return self


class TicketUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = Field(None, max_length=2000)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    max_per_user: Optional[int] = Field(None, ge=1)
    min_per_user: Optional[int] = Field(None, ge=1)
    sale_start_date: Optional[datetime] = None
    sale_end_date: Optional[datetime] = None


class TicketQuantityUpdate(BaseModel):
    quantity: int = Field(..., ge=0, le=1000000)


class TicketResponse(BaseModel):
    id: int
    event_id: int
    name: str
    ticket_type: str
    description: Optional[str]
    price: float
    currency: str
    quantity: int
    sold_quantity: int
    available_quantity: int
    max_per_user: int
    min_per_user: int
    is_active: bool
    sale_start_date: Optional[datetime] = None
    sale_end_date: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TicketStats(BaseModel):
    total_tickets: int
    sold_tickets: int
    available_tickets: int
    total_revenue: float
    tickets: list[TicketResponse]

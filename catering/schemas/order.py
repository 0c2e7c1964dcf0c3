# catering/schemas/order.py

from pydantic import BaseModel, computed_field
from typing import Optional, Dict
from decimal import Decimal
from datetime import date, time, datetime

from catering.schemas.client import Client
from catering.utils import derived


class OrderBase(BaseModel):
    client_id: Optional[int] = None
    menu_id: Optional[int] = None
    event_date: Optional[date] = None
    event_time: Optional[time] = None
    quantity: Optional[int] = None
    guests: Optional[int] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None

# ────────────── CREATE ──────────────
class OrderCreate(OrderBase):
    client_id: int
    menu_id: int
    event_date: date
    event_time: time
    quantity: int = 1
    guests: int
    address: str
    status: Optional[str] = None    # по умолчанию PENDING

# ────────────── UPDATE ──────────────
# Статус здесь не меняется, для этого есть PATCH /orders/{id}/status
class OrderUpdate(OrderBase):
    pass

# ────────────── RESPONSE ──────────────
class Order(OrderBase):
    id: int
    status: str
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }

    @computed_field
    @property
    def event_datetime(self) -> Optional[str]:
        return derived.event_datetime(self.event_date, self.event_time)

    @computed_field
    @property
    def days_until_event(self) -> Optional[int]:
        return derived.days_until(self.event_date)


class OrderWithClient(Order):
    client: Client


class OrderStats(BaseModel):
    total_orders: int
    orders_today: int
    total_revenue: Decimal
    by_status: Dict[str, int]

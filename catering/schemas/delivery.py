# catering/schemas/delivery.py

from pydantic import BaseModel, computed_field
from typing import Optional, Dict
from datetime import date, time, datetime

from catering.schemas.order import Order
from catering.utils import derived


class DeliveryBase(BaseModel):
    order_id: Optional[int] = None
    delivery_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    vehicle: Optional[str] = None
    driver: Optional[str] = None
    notes: Optional[str] = None

class DeliveryCreate(DeliveryBase):
    order_id: int
    delivery_date: date
    start_time: time
    status: Optional[str] = None    # по умолчанию SCHEDULED

class DeliveryUpdate(DeliveryBase):
    pass

class Delivery(DeliveryBase):
    id: int
    status: str
    confirmed_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }

    @computed_field
    @property
    def estimated_duration_minutes(self) -> Optional[int]:
        return derived.duration_minutes(self.start_time, self.end_time)

    @computed_field
    @property
    def is_completed(self) -> bool:
        return self.status == "DELIVERED"

    @computed_field
    @property
    def days_until_delivery(self) -> Optional[int]:
        return derived.days_until(self.delivery_date)


class DeliveryWithOrder(Delivery):
    order: Order


class DeliveryStats(BaseModel):
    total_deliveries: int
    deliveries_today: int
    completed: int
    completion_rate: int
    by_status: Dict[str, int]

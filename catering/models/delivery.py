# catering/models/delivery.py

from enum import Enum
from sqlalchemy import Column, Integer, String, Text, Date, Time, DateTime, ForeignKey
from catering.utils.database import Base


class DeliveryStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    EN_ROUTE = "EN_ROUTE"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


DELIVERY_TRANSITIONS = {
    DeliveryStatus.SCHEDULED: set(DeliveryStatus),
    DeliveryStatus.EN_ROUTE: set(DeliveryStatus),
    DeliveryStatus.DELIVERED: {DeliveryStatus.DELIVERED},
    DeliveryStatus.CANCELLED: {DeliveryStatus.SCHEDULED},
}

DELETABLE_DELIVERY_STATUSES = {DeliveryStatus.SCHEDULED, DeliveryStatus.CANCELLED}


class Delivery(Base):
    __tablename__ = "deliveries"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)  # автоинкремент

    # unique: не больше одной доставки на заказ, проверяется и самой БД
    order_id      = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)
    delivery_date = Column(Date, nullable=False, index=True)
    start_time    = Column(Time, nullable=False)
    end_time      = Column(Time, nullable=True)
    status        = Column(String(20), nullable=False, default=DeliveryStatus.SCHEDULED.value, index=True)
    vehicle       = Column(String(100), nullable=True)
    driver        = Column(String(100), nullable=True, index=True)
    notes         = Column(Text, nullable=True)
    confirmed_at  = Column(DateTime, nullable=True)           # момент подтверждения вручения

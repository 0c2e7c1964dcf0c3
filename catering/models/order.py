# catering/models/order.py

from datetime import datetime
from enum import Enum
from sqlalchemy import Column, Integer, String, Text, Date, Time, DateTime, Numeric, ForeignKey
from catering.utils.database import Base


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PREPARATION = "IN_PREPARATION"
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


# Разрешённые переходы статусов.
# DELIVERED конечный; из CANCELLED можно вернуться только в PENDING.
ORDER_TRANSITIONS = {
    OrderStatus.PENDING: set(OrderStatus),
    OrderStatus.CONFIRMED: set(OrderStatus),
    OrderStatus.IN_PREPARATION: set(OrderStatus),
    OrderStatus.READY: set(OrderStatus),
    OrderStatus.DELIVERED: {OrderStatus.DELIVERED},
    OrderStatus.CANCELLED: {OrderStatus.PENDING},
}


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = {"sqlite_autoincrement": True}    # id удалённых записей не переиспользуются

    id = Column(Integer, primary_key=True, index=True)  # автоинкремент

    client_id    = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    menu_id      = Column(Integer, ForeignKey("menus.id"), nullable=False)
    event_date   = Column(Date, nullable=False, index=True)       # Дата мероприятия
    event_time   = Column(Time, nullable=False)                   # Время мероприятия
    quantity     = Column(Integer, nullable=False, default=1)     # Количество меню
    guests       = Column(Integer, nullable=False)                # Количество гостей
    address      = Column(Text, nullable=False)                   # Адрес мероприятия
    phone        = Column(String(30), nullable=True)              # Контактный телефон
    notes        = Column(Text, nullable=True)                    # Примечания
    status       = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    created_at   = Column(DateTime, nullable=False, default=datetime.now)
    updated_at   = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

# catering/models/payment.py

from datetime import datetime
from enum import Enum
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, CheckConstraint
from catering.utils.database import Base


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"
    CHECK = "CHECK"


_OPEN = {PaymentStatus.PENDING, PaymentStatus.PROCESSING, PaymentStatus.COMPLETED, PaymentStatus.FAILED}

# COMPLETED → только REFUNDED; REFUNDED и FAILED конечные
PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: _OPEN,
    PaymentStatus.PROCESSING: _OPEN,
    PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),
    PaymentStatus.FAILED: set(),
}

# Удалять можно только платежи, по которым деньги не поступали
DELETABLE_PAYMENT_STATUSES = {PaymentStatus.PENDING, PaymentStatus.FAILED}


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="payment_positive_amount"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, index=True)  # автоинкремент

    order_id        = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    amount          = Column(Numeric(12, 2), nullable=False)
    method          = Column(String(20), nullable=False)
    status          = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value, index=True)
    transaction_ref = Column(String(100), nullable=True)     # номер авторизации, код перевода и т.п.
    paid_at         = Column(DateTime, nullable=False, default=datetime.now, index=True)

# catering/schemas/payment.py

from pydantic import BaseModel, computed_field
from typing import Optional, Dict, List
from decimal import Decimal
from datetime import datetime

from catering.schemas.order import Order
from catering.utils import derived


class PaymentBase(BaseModel):
    order_id: Optional[int] = None
    amount: Optional[Decimal] = None
    method: Optional[str] = None
    transaction_ref: Optional[str] = None

class PaymentCreate(PaymentBase):
    order_id: int
    amount: Decimal
    method: str
    status: Optional[str] = None    # по умолчанию PENDING

class PaymentUpdate(PaymentBase):
    pass

class Payment(PaymentBase):
    id: int
    status: str
    paid_at: datetime

    model_config = {
        "from_attributes": True
    }

    @computed_field
    @property
    def is_completed(self) -> bool:
        return self.status == "COMPLETED"

    @computed_field
    @property
    def is_pending(self) -> bool:
        return self.status == "PENDING"

    @computed_field
    @property
    def method_description(self) -> str:
        return derived.method_description(self.method)

    @computed_field
    @property
    def days_since_payment(self) -> int:
        return derived.days_since(self.paid_at)


class PaymentWithOrder(Payment):
    order: Order


class PaymentSummary(BaseModel):
    """Сводка оплаты по заказу."""
    order_id: int
    order_total: Decimal
    paid_total: Decimal
    remaining_balance: Decimal
    percent_paid: int
    payment_count: int
    payments: List[Payment]


class PaymentStats(BaseModel):
    total_payments: int
    payments_today: int
    total_revenue: Decimal
    revenue_today: Decimal
    by_status: Dict[str, int]
    by_method: Dict[str, int]

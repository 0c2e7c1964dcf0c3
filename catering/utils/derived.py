# catering/utils/derived.py

"""
Вычисляемые значения записей.
Чистые функции над снимком данных: ничего не хранится в БД, считается при чтении.
"""

from datetime import date, datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal("0.01")

METHOD_DESCRIPTIONS = {
    "CASH": "Оплата наличными",
    "CARD": "Оплата кредитной/дебетовой картой",
    "TRANSFER": "Банковский перевод",
    "CHECK": "Оплата чеком",
}


def to_money(value) -> Decimal:
    """Приводит число (Decimal, float, int, None) к денежному Decimal с двумя знаками."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def percent(part, whole) -> int:
    """Целый процент part от whole; 0, если whole равен нулю."""
    whole = Decimal(str(whole or 0))
    if whole == 0:
        return 0
    ratio = Decimal(str(part or 0)) / whole * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def full_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    return " ".join(p for p in (first_name, last_name) if p)


def event_datetime(event_date: Optional[date], event_time: Optional[time]) -> Optional[str]:
    if event_date and event_time:
        return datetime.combine(event_date, event_time).isoformat()
    return None


def days_until(target: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Дней от сегодня до target (отрицательное, если дата уже прошла)."""
    if target is None:
        return None
    return (target - (today or date.today())).days


def days_since(moment: Optional[datetime], now: Optional[datetime] = None) -> int:
    if moment is None:
        return 0
    return ((now or datetime.now()) - moment).days


def method_description(method: Optional[str]) -> str:
    return METHOD_DESCRIPTIONS.get(method, "Неизвестный способ оплаты")


def duration_minutes(start: Optional[time], end: Optional[time]) -> Optional[int]:
    if start is None or end is None:
        return None
    anchor = date(2000, 1, 1)
    delta = datetime.combine(anchor, end) - datetime.combine(anchor, start)
    return round(delta.total_seconds() / 60)

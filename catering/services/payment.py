# catering/services/payment.py

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from sqlalchemy import select, func
from fastapi import Request

from catering.models.order import Order as OrderModel
from catering.models.payment import (
    Payment as PaymentModel,
    PaymentStatus,
    PaymentMethod,
    PAYMENT_TRANSITIONS,
    DELETABLE_PAYMENT_STATUSES,
)
from catering.schemas.order import Order
from catering.schemas.payment import (
    PaymentCreate,
    PaymentUpdate,
    Payment,
    PaymentWithOrder,
    PaymentSummary,
    PaymentStats,
)
from catering.services.order import read_order_service
from catering.utils.derived import to_money, percent
from catering.utils.errors import NotFoundError, InvalidInputError, ConflictError

# Заказы читаются только через read_order_service: таблица orders принадлежит сервису заказов.


# ────────────── Валидация ──────────────
def parse_payment_status(value: str) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in PaymentStatus)
        raise InvalidInputError(f"Недопустимый статус платежа: {value}. Допустимые: {allowed}")


def parse_payment_method(value: str) -> PaymentMethod:
    try:
        return PaymentMethod(value)
    except ValueError:
        allowed = ", ".join(m.value for m in PaymentMethod)
        raise InvalidInputError(f"Недопустимый способ оплаты: {value}. Допустимые: {allowed}")


def validate_amount(amount) -> Decimal:
    """Сумма округляется до копеек и только потом сравнивается с нулём (0.004 → 0.00 → 400)."""
    if amount is None:
        raise InvalidInputError("Сумма платежа должна быть больше 0")
    amount = to_money(amount)
    if amount <= 0:
        raise InvalidInputError("Сумма платежа должна быть больше 0")
    return amount


def check_payment_transition(current: str, new: PaymentStatus) -> None:
    current_status = PaymentStatus(current)
    if new in PAYMENT_TRANSITIONS[current_status]:
        return
    if current_status == PaymentStatus.COMPLETED:
        raise ConflictError("Выполненный платёж можно перевести только в REFUNDED")
    if current_status == PaymentStatus.REFUNDED:
        raise ConflictError("Статус возвращённого платежа изменить нельзя")
    if current_status == PaymentStatus.FAILED:
        raise ConflictError("Статус неуспешного платежа изменить нельзя")
    raise ConflictError(f"Переход {current_status.value} → {new.value} запрещён")


def _day_bounds(start: date, end: date | None = None) -> tuple[datetime, datetime]:
    """[начало start, начало дня после end) для фильтра по paid_at."""
    return datetime.combine(start, time.min), datetime.combine(end or start, time.min) + timedelta(days=1)


# ────────────── Лимит суммы платежей ──────────────
async def completed_total_service(order_id: int, request: Request, exclude_payment_id: int | None = None) -> Decimal:
    """
    Сумма выполненных (COMPLETED) платежей по заказу.
    """
    db = request.state.db

    query = (
        select(func.coalesce(func.sum(PaymentModel.amount), 0))
        .where(PaymentModel.order_id == order_id)
        .where(PaymentModel.status == PaymentStatus.COMPLETED.value)
    )
    if exclude_payment_id is not None:
        query = query.where(PaymentModel.id != exclude_payment_id)
    return to_money(await db.scalar(query))


async def check_payment_cap(
    order: OrderModel,
    amount: Decimal,
    request: Request,
    error_cls: type[InvalidInputError] | type[ConflictError] = InvalidInputError,
    exclude_payment_id: int | None = None,
) -> None:
    """
    Сумма выполненных платежей + amount не должна превышать сумму заказа.
    Вызывать после read_order_service(..., for_update=True): строка заказа
    заблокирована до commit, параллельные проверки по заказу идут последовательно.
    """
    log = request.app.state.log

    paid = await completed_total_service(order.id, request, exclude_payment_id)
    new_total = paid + to_money(amount)
    order_total = to_money(order.total_amount)
    if new_total > order_total:
        await log.log_warning(
            "payment",
            "Превышение суммы заказа",
            {"order_id": order.id, "paid": paid, "amount": amount, "order_total": order_total},
        )
        raise error_cls(
            f"Общая сумма платежей ({new_total}) превысит сумму заказа ({order_total})"
        )


# ────────────── CREATE ──────────────
async def create_payment_service(payment: PaymentCreate, request: Request) -> PaymentModel:
    """
    Регистрация платежа по заказу.
    """
    db = request.state.db
    log = request.app.state.log

    order = await read_order_service(payment.order_id, request, for_update=True)

    amount = validate_amount(payment.amount)
    method = parse_payment_method(payment.method)
    status = parse_payment_status(payment.status) if payment.status else PaymentStatus.PENDING

    await check_payment_cap(order, amount, request)

    db_payment = PaymentModel(
        order_id=order.id,
        amount=amount,
        method=method.value,
        status=status.value,
        transaction_ref=payment.transaction_ref,
    )
    db.add(db_payment)
    await db.commit()
    await db.refresh(db_payment)

    await log.log_info("payment", "Платёж зарегистрирован", {"id": db_payment.id, "order_id": order.id, "amount": amount})
    return db_payment


# ────────────── READ ──────────────
async def read_payment_service(id: int, request: Request) -> PaymentModel:
    db = request.state.db
    log = request.app.state.log

    result = await db.execute(select(PaymentModel).where(PaymentModel.id == id))
    db_payment = result.scalar_one_or_none()
    if db_payment is None:
        await log.log_error("payment", "Платёж не найден", {"id": id})
        raise NotFoundError(f"Платёж с ID {id} не найден")

    return db_payment


async def read_payment_with_order_service(id: int, request: Request) -> PaymentWithOrder:
    db_payment = await read_payment_service(id, request)
    db_order = await read_order_service(db_payment.order_id, request)
    payment = Payment.model_validate(db_payment)
    return PaymentWithOrder(**payment.model_dump(), order=Order.model_validate(db_order))


async def read_payments_service(
    request: Request,
    status: str | None = None,
    method: str | None = None,
    skip: int = 0,
    limit: int = 100,
) -> list[PaymentModel]:
    """
    Список платежей с фильтрами по статусу и способу оплаты.
    """
    db = request.state.db
    log = request.app.state.log

    query = select(PaymentModel)
    if status:
        query = query.where(PaymentModel.status == parse_payment_status(status).value)
    if method:
        query = query.where(PaymentModel.method == parse_payment_method(method).value)
    result = await db.execute(query.order_by(PaymentModel.paid_at.desc()).offset(skip).limit(limit))
    payments = result.scalars().all()

    await log.log_info("payment", f"{len(payments)} платежей загружено", {"status": status, "method": method})
    return payments


async def read_payments_by_order_service(order_id: int, request: Request) -> list[PaymentModel]:
    db = request.state.db

    await read_order_service(order_id, request)
    result = await db.execute(
        select(PaymentModel).where(PaymentModel.order_id == order_id).order_by(PaymentModel.paid_at.asc())
    )
    return result.scalars().all()


async def read_payments_by_date_range_service(start: date, end: date, request: Request) -> list[PaymentModel]:
    db = request.state.db

    if start > end:
        raise InvalidInputError("Начало периода позже его конца")
    lower, upper = _day_bounds(start, end)
    result = await db.execute(
        select(PaymentModel)
        .where(PaymentModel.paid_at >= lower, PaymentModel.paid_at < upper)
        .order_by(PaymentModel.paid_at.desc())
    )
    return result.scalars().all()


async def read_payments_today_service(request: Request) -> list[PaymentModel]:
    db = request.state.db

    lower, upper = _day_bounds(date.today())
    result = await db.execute(
        select(PaymentModel)
        .where(PaymentModel.paid_at >= lower, PaymentModel.paid_at < upper)
        .order_by(PaymentModel.paid_at.desc())
    )
    return result.scalars().all()


# ────────────── UPDATE ──────────────
async def update_payment_service(id: int, payment_update: PaymentUpdate, request: Request) -> PaymentModel:
    """
    Обновление реквизитов платежа (заказ, сумма, способ, референс).
    При смене заказа или суммы лимит проверяется заново, без учёта самого платежа.
    """
    db = request.state.db
    log = request.app.state.log

    db_payment = await read_payment_service(id, request)
    data = payment_update.model_dump(exclude_unset=True)

    for field in ("order_id", "amount", "method"):
        if field in data and data[field] is None:
            raise InvalidInputError(f"Поле {field} не может быть пустым")

    order_changed = "order_id" in data and data["order_id"] != db_payment.order_id
    if "amount" in data:
        data["amount"] = validate_amount(data["amount"])
    if "method" in data:
        data["method"] = parse_payment_method(data["method"]).value

    if order_changed or "amount" in data:
        order = await read_order_service(data.get("order_id", db_payment.order_id), request, for_update=True)
        await check_payment_cap(order, data.get("amount", db_payment.amount), request, exclude_payment_id=id)

    for key, value in data.items():
        setattr(db_payment, key, value)

    await db.commit()
    await db.refresh(db_payment)
    await log.log_info("payment", "Платёж обновлён", {"id": id, "fields": list(data)})
    return db_payment


async def _complete_transition(db_payment: PaymentModel, request: Request) -> None:
    """Переход в COMPLETED: повторная проверка лимита под блокировкой заказа."""
    order = await read_order_service(db_payment.order_id, request, for_update=True)
    await check_payment_cap(order, db_payment.amount, request, ConflictError, exclude_payment_id=db_payment.id)


async def change_payment_status_service(id: int, new_status: str, request: Request) -> PaymentModel:
    db = request.state.db
    log = request.app.state.log

    status = parse_payment_status(new_status)
    db_payment = await read_payment_service(id, request)

    previous = db_payment.status
    try:
        check_payment_transition(previous, status)
    except ConflictError as e:
        await log.log_warning("payment", e.detail, {"id": id, "from": previous, "to": status.value})
        raise

    if status == PaymentStatus.COMPLETED:
        await _complete_transition(db_payment, request)

    db_payment.status = status.value
    await db.commit()
    await db.refresh(db_payment)
    await log.log_info("payment", "Статус платежа изменён", {"id": id, "from": previous, "to": status.value})
    return db_payment


async def mark_payment_completed_service(id: int, request: Request) -> PaymentModel:
    """
    Отметить платёж как выполненный.
    """
    db = request.state.db
    log = request.app.state.log

    db_payment = await read_payment_service(id, request)
    if db_payment.status == PaymentStatus.COMPLETED.value:
        raise ConflictError("Платёж уже отмечен как выполненный")
    if db_payment.status == PaymentStatus.REFUNDED.value:
        raise ConflictError("Нельзя завершить возвращённый платёж")
    check_payment_transition(db_payment.status, PaymentStatus.COMPLETED)

    await _complete_transition(db_payment, request)

    db_payment.status = PaymentStatus.COMPLETED.value
    await db.commit()
    await db.refresh(db_payment)
    await log.log_info("payment", "Платёж выполнен", {"id": id, "amount": db_payment.amount})
    return db_payment


# ────────────── DELETE ──────────────
async def delete_payment_service(id: int, request: Request) -> None:
    """
    Удаление платежа. Только в статусах PENDING и FAILED.
    """
    db = request.state.db
    log = request.app.state.log

    db_payment = await read_payment_service(id, request)
    if PaymentStatus(db_payment.status) not in DELETABLE_PAYMENT_STATUSES:
        await log.log_warning("payment", "Попытка удалить проведённый платёж", {"id": id, "status": db_payment.status})
        raise ConflictError("Удалять можно только платежи в статусе PENDING или FAILED")

    await db.delete(db_payment)
    await db.commit()
    await log.log_info("payment", "Платёж удалён", {"id": id})


# ────────────── СВОДКИ ──────────────
async def payment_summary_service(order_id: int, request: Request) -> PaymentSummary:
    """
    Сводка по заказу: сумма заказа, оплачено, остаток, процент и список платежей.
    """
    order = await read_order_service(order_id, request)
    payments = await read_payments_by_order_service(order_id, request)
    paid = await completed_total_service(order_id, request)
    order_total = to_money(order.total_amount)

    return PaymentSummary(
        order_id=order_id,
        order_total=order_total,
        paid_total=paid,
        remaining_balance=order_total - paid,
        percent_paid=percent(paid, order_total),
        payment_count=len(payments),
        payments=[Payment.model_validate(p) for p in payments],
    )


async def _count_by(column, values, request: Request) -> dict[str, int]:
    db = request.state.db

    result = await db.execute(select(column, func.count(PaymentModel.id)).group_by(column))
    counts = dict(result.all())
    return {v.value: counts.get(v.value, 0) for v in values}


async def payment_stats_service(request: Request) -> PaymentStats:
    db = request.state.db

    lower, upper = _day_bounds(date.today())
    completed = PaymentModel.status == PaymentStatus.COMPLETED.value
    paid_today = (PaymentModel.paid_at >= lower, PaymentModel.paid_at < upper)

    total = await db.scalar(select(func.count(PaymentModel.id)))
    today = await db.scalar(select(func.count(PaymentModel.id)).where(*paid_today))
    revenue = await db.scalar(select(func.coalesce(func.sum(PaymentModel.amount), 0)).where(completed))
    revenue_today = await db.scalar(
        select(func.coalesce(func.sum(PaymentModel.amount), 0)).where(completed, *paid_today)
    )

    return PaymentStats(
        total_payments=total or 0,
        payments_today=today or 0,
        total_revenue=to_money(revenue),
        revenue_today=to_money(revenue_today),
        by_status=await _count_by(PaymentModel.status, PaymentStatus, request),
        by_method=await _count_by(PaymentModel.method, PaymentMethod, request),
    )

# catering/services/order.py

from datetime import date
from decimal import Decimal
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from fastapi import Request

from catering.models.order import Order as OrderModel, OrderStatus, ORDER_TRANSITIONS
from catering.schemas.order import OrderCreate, OrderUpdate, Order, OrderWithClient, OrderStats
from catering.schemas.client import Client
from catering.services.client import read_client_service
from catering.services.menu import read_menu_service
from catering.utils.derived import to_money
from catering.utils.errors import NotFoundError, InvalidInputError, ConflictError

# Поля, которые нельзя обнулить через PATCH
_REQUIRED_FIELDS = ("client_id", "menu_id", "event_date", "event_time", "quantity", "guests", "address")


# ────────────── Валидация ──────────────
def parse_order_status(value: str) -> OrderStatus:
    """Строка → OrderStatus; неизвестное значение даёт InvalidInputError."""
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise InvalidInputError(f"Недопустимый статус заказа: {value}. Допустимые: {allowed}")


def check_order_transition(current: str, new: OrderStatus) -> None:
    current_status = OrderStatus(current)
    if new in ORDER_TRANSITIONS[current_status]:
        return
    if current_status == OrderStatus.CANCELLED:
        raise ConflictError("Отменённый заказ можно вернуть только в PENDING")
    if current_status == OrderStatus.DELIVERED:
        raise ConflictError("Нельзя изменить статус уже доставленного заказа")
    raise ConflictError(f"Переход {current_status.value} → {new.value} запрещён")


def validate_event_date(event_date: date) -> None:
    if event_date < date.today():
        raise InvalidInputError("Дата мероприятия не может быть в прошлом")


def validate_quantity(quantity: int) -> None:
    if quantity <= 0:
        raise InvalidInputError("Количество меню должно быть больше 0")


def validate_guests(guests: int) -> None:
    if guests <= 0:
        raise InvalidInputError("Количество гостей должно быть больше 0")


def compute_total(unit_price, quantity: int) -> Decimal:
    return to_money(Decimal(str(unit_price)) * quantity)


# ────────────── CREATE ──────────────
async def create_order_service(order: OrderCreate, request: Request) -> OrderModel:
    """
    Создание заказа.
    Клиент и меню должны существовать; сумма = цена меню × количество.
    """
    db = request.state.db
    log = request.app.state.log

    await read_client_service(order.client_id, request)
    menu = await read_menu_service(order.menu_id, request)

    validate_event_date(order.event_date)
    validate_quantity(order.quantity)
    validate_guests(order.guests)
    status = parse_order_status(order.status) if order.status else OrderStatus.PENDING

    data = order.model_dump(exclude={"status"})
    db_order = OrderModel(
        **data,
        status=status.value,
        total_amount=compute_total(menu.unit_price, order.quantity),
    )
    db.add(db_order)
    await db.commit()
    await db.refresh(db_order)

    await log.log_info("order", "Заказ создан", {"id": db_order.id, "total_amount": db_order.total_amount})
    return db_order


# ────────────── READ ──────────────
async def read_order_service(id: int, request: Request, for_update: bool = False) -> OrderModel:
    """
    Чтение заказа по ID.
    for_update=True блокирует строку заказа до конца транзакции
    (используется при проверке лимита платежей).
    """
    db = request.state.db
    log = request.app.state.log

    query = select(OrderModel).where(OrderModel.id == id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    db_order = result.scalar_one_or_none()
    if db_order is None:
        await log.log_error("order", "Заказ не найден", {"id": id})
        raise NotFoundError(f"Заказ с ID {id} не найден")

    return db_order


async def read_order_with_client_service(id: int, request: Request) -> OrderWithClient:
    """Заказ вместе с клиентом: отдельный запрос через сервис клиентов."""
    db_order = await read_order_service(id, request)
    db_client = await read_client_service(db_order.client_id, request)
    order = Order.model_validate(db_order)
    return OrderWithClient(**order.model_dump(), client=Client.model_validate(db_client))


async def read_orders_service(request: Request, status: str | None = None, skip: int = 0, limit: int = 100) -> list[OrderModel]:
    """
    Список заказов, опционально по статусу.
    """
    db = request.state.db
    log = request.app.state.log

    query = select(OrderModel)
    if status:
        query = query.where(OrderModel.status == parse_order_status(status).value)
        query = query.order_by(OrderModel.event_date.asc())
    else:
        query = query.order_by(OrderModel.created_at.desc())
    result = await db.execute(query.offset(skip).limit(limit))
    orders = result.scalars().all()

    await log.log_info("order", f"{len(orders)} заказов загружено", {"status": status})
    return orders


async def read_orders_by_client_service(client_id: int, request: Request) -> list[OrderModel]:
    db = request.state.db

    await read_client_service(client_id, request)
    result = await db.execute(
        select(OrderModel).where(OrderModel.client_id == client_id).order_by(OrderModel.created_at.desc())
    )
    return result.scalars().all()


async def read_orders_by_date_range_service(start: date, end: date, request: Request) -> list[OrderModel]:
    db = request.state.db

    if start > end:
        raise InvalidInputError("Начало периода позже его конца")
    result = await db.execute(
        select(OrderModel)
        .where(OrderModel.event_date.between(start, end))
        .order_by(OrderModel.event_date.asc(), OrderModel.event_time.asc())
    )
    return result.scalars().all()


async def read_orders_today_service(request: Request) -> list[OrderModel]:
    db = request.state.db

    result = await db.execute(
        select(OrderModel).where(OrderModel.event_date == date.today()).order_by(OrderModel.event_time.asc())
    )
    return result.scalars().all()


# ────────────── UPDATE ──────────────
async def update_order_service(id: int, order_update: OrderUpdate, request: Request) -> OrderModel:
    """
    Обновление заказа.
    Переданные поля проверяются по тем же правилам, что и при создании;
    сумма пересчитывается при изменении количества или меню.
    """
    db = request.state.db
    log = request.app.state.log

    db_order = await read_order_service(id, request)
    data = order_update.model_dump(exclude_unset=True)

    for field in _REQUIRED_FIELDS:
        if field in data and data[field] is None:
            raise InvalidInputError(f"Поле {field} не может быть пустым")

    if "client_id" in data:
        await read_client_service(data["client_id"], request)
    if "event_date" in data:
        validate_event_date(data["event_date"])
    if "quantity" in data:
        validate_quantity(data["quantity"])
    if "guests" in data:
        validate_guests(data["guests"])

    if "quantity" in data or "menu_id" in data:
        menu = await read_menu_service(data.get("menu_id", db_order.menu_id), request)
        data["total_amount"] = compute_total(menu.unit_price, data.get("quantity", db_order.quantity))

    for key, value in data.items():
        setattr(db_order, key, value)

    await db.commit()
    await db.refresh(db_order)
    await log.log_info("order", "Заказ обновлён", {"id": id, "fields": list(data)})
    return db_order


async def change_order_status_service(id: int, new_status: str, request: Request) -> OrderModel:
    """
    Смена статуса заказа с проверкой допустимости перехода.
    """
    db = request.state.db
    log = request.app.state.log

    status = parse_order_status(new_status)
    db_order = await read_order_service(id, request)

    previous = db_order.status
    try:
        check_order_transition(previous, status)
    except ConflictError as e:
        await log.log_warning("order", e.detail, {"id": id, "from": previous, "to": status.value})
        raise

    db_order.status = status.value
    await db.commit()
    await db.refresh(db_order)
    await log.log_info("order", "Статус заказа изменён", {"id": id, "from": previous, "to": status.value})
    return db_order


# ────────────── DELETE ──────────────
async def delete_order_service(id: int, request: Request) -> None:
    """
    Удаление заказа. Разрешено только в статусе PENDING.
    """
    db = request.state.db
    log = request.app.state.log

    db_order = await read_order_service(id, request)
    if db_order.status != OrderStatus.PENDING.value:
        await log.log_warning("order", "Попытка удалить заказ не в статусе PENDING", {"id": id, "status": db_order.status})
        raise ConflictError("Удалять можно только заказы в статусе PENDING")

    # Платежи и доставка ссылаются на заказ через FK: база не даст удалить заказ с ними
    await db.delete(db_order)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        await log.log_warning("order", "Попытка удалить заказ с платежами или доставкой", {"id": id})
        raise ConflictError("Нельзя удалить заказ, по которому есть платежи или доставка")
    await log.log_info("order", "Заказ удалён", {"id": id})


# ────────────── СТАТИСТИКА ──────────────
async def count_orders_by_status_service(request: Request) -> dict[str, int]:
    db = request.state.db

    result = await db.execute(select(OrderModel.status, func.count(OrderModel.id)).group_by(OrderModel.status))
    counts = dict(result.all())
    return {s.value: counts.get(s.value, 0) for s in OrderStatus}


async def order_stats_service(request: Request) -> OrderStats:
    """
    Общее количество заказов, заказы на сегодня,
    выручка (сумма заказов без отменённых) и разбивка по статусам.
    """
    db = request.state.db

    total = await db.scalar(select(func.count(OrderModel.id)))
    today = await db.scalar(select(func.count(OrderModel.id)).where(OrderModel.event_date == date.today()))
    revenue = await db.scalar(
        select(func.coalesce(func.sum(OrderModel.total_amount), 0))
        .where(OrderModel.status != OrderStatus.CANCELLED.value)
    )

    return OrderStats(
        total_orders=total or 0,
        orders_today=today or 0,
        total_revenue=to_money(revenue),
        by_status=await count_orders_by_status_service(request),
    )

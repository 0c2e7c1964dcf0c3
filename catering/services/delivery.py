# catering/services/delivery.py

from datetime import date, datetime, time
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from fastapi import Request

from catering.models.order import Order as OrderModel
from catering.models.delivery import (
    Delivery as DeliveryModel,
    DeliveryStatus,
    DELIVERY_TRANSITIONS,
    DELETABLE_DELIVERY_STATUSES,
)
from catering.schemas.order import Order
from catering.schemas.delivery import DeliveryCreate, DeliveryUpdate, Delivery, DeliveryWithOrder, DeliveryStats
from catering.services.order import read_order_service
from catering.utils.derived import percent
from catering.utils.errors import NotFoundError, InvalidInputError, ConflictError


# ────────────── Валидация ──────────────
def parse_delivery_status(value: str) -> DeliveryStatus:
    try:
        return DeliveryStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in DeliveryStatus)
        raise InvalidInputError(f"Недопустимый статус доставки: {value}. Допустимые: {allowed}")


def check_delivery_transition(current: str, new: DeliveryStatus) -> None:
    current_status = DeliveryStatus(current)
    if new in DELIVERY_TRANSITIONS[current_status]:
        return
    if current_status == DeliveryStatus.DELIVERED:
        raise ConflictError("Нельзя изменить статус уже выполненной доставки")
    if current_status == DeliveryStatus.CANCELLED:
        raise ConflictError("Отменённую доставку можно вернуть только в SCHEDULED")
    raise ConflictError(f"Переход {current_status.value} → {new.value} запрещён")


def validate_delivery_date(delivery_date: date, order: OrderModel) -> None:
    """Доставка не позже даты мероприятия и не в прошлом."""
    if delivery_date > order.event_date:
        raise InvalidInputError("Дата доставки не может быть позже даты мероприятия")
    if delivery_date < date.today():
        raise InvalidInputError("Дата доставки не может быть в прошлом")


def validate_time_window(start_time: time | None, end_time: time | None) -> None:
    if start_time is not None and end_time is not None and end_time <= start_time:
        raise InvalidInputError("Время окончания должно быть позже времени начала")


async def find_delivery_by_order(order_id: int, request: Request) -> DeliveryModel | None:
    db = request.state.db

    result = await db.execute(select(DeliveryModel).where(DeliveryModel.order_id == order_id))
    return result.scalar_one_or_none()


async def ensure_order_has_no_delivery(order_id: int, request: Request) -> None:
    log = request.app.state.log

    if await find_delivery_by_order(order_id, request) is not None:
        await log.log_warning("delivery", "У заказа уже есть доставка", {"order_id": order_id})
        raise ConflictError(f"Для заказа {order_id} уже запланирована доставка")


async def _commit_unique(db_delivery: DeliveryModel, request: Request) -> None:
    """
    Commit с отловом нарушения UNIQUE(order_id):
    если параллельный запрос успел создать доставку для того же заказа, отдаём 409.
    """
    db = request.state.db

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Для заказа {db_delivery.order_id} уже запланирована доставка")
    await db.refresh(db_delivery)


# ────────────── CREATE ──────────────
async def create_delivery_service(delivery: DeliveryCreate, request: Request) -> DeliveryModel:
    """
    Планирование доставки для заказа (не больше одной на заказ).
    """
    db = request.state.db
    log = request.app.state.log

    order = await read_order_service(delivery.order_id, request)
    await ensure_order_has_no_delivery(order.id, request)

    validate_delivery_date(delivery.delivery_date, order)
    validate_time_window(delivery.start_time, delivery.end_time)
    status = parse_delivery_status(delivery.status) if delivery.status else DeliveryStatus.SCHEDULED

    db_delivery = DeliveryModel(**delivery.model_dump(exclude={"status"}), status=status.value)
    if status == DeliveryStatus.DELIVERED:
        db_delivery.confirmed_at = datetime.now()
    db.add(db_delivery)
    await _commit_unique(db_delivery, request)

    await log.log_info("delivery", "Доставка запланирована", {"id": db_delivery.id, "order_id": order.id})
    return db_delivery


# ────────────── READ ──────────────
async def read_delivery_service(id: int, request: Request) -> DeliveryModel:
    db = request.state.db
    log = request.app.state.log

    result = await db.execute(select(DeliveryModel).where(DeliveryModel.id == id))
    db_delivery = result.scalar_one_or_none()
    if db_delivery is None:
        await log.log_error("delivery", "Доставка не найдена", {"id": id})
        raise NotFoundError(f"Доставка с ID {id} не найдена")

    return db_delivery


async def read_delivery_with_order_service(id: int, request: Request) -> DeliveryWithOrder:
    db_delivery = await read_delivery_service(id, request)
    db_order = await read_order_service(db_delivery.order_id, request)
    delivery = Delivery.model_validate(db_delivery)
    return DeliveryWithOrder(**delivery.model_dump(), order=Order.model_validate(db_order))


async def read_delivery_by_order_service(order_id: int, request: Request) -> DeliveryModel:
    db_delivery = await find_delivery_by_order(order_id, request)
    if db_delivery is None:
        raise NotFoundError(f"Доставка для заказа {order_id} не найдена")
    return db_delivery


_SCHEDULE_ORDER = (DeliveryModel.delivery_date.asc(), DeliveryModel.start_time.asc())


async def read_deliveries_service(request: Request, status: str | None = None, skip: int = 0, limit: int = 100) -> list[DeliveryModel]:
    db = request.state.db
    log = request.app.state.log

    query = select(DeliveryModel)
    if status:
        query = query.where(DeliveryModel.status == parse_delivery_status(status).value)
    result = await db.execute(query.order_by(*_SCHEDULE_ORDER).offset(skip).limit(limit))
    deliveries = result.scalars().all()

    await log.log_info("delivery", f"{len(deliveries)} доставок загружено", {"status": status})
    return deliveries


async def read_deliveries_by_driver_service(driver: str, request: Request) -> list[DeliveryModel]:
    db = request.state.db

    result = await db.execute(
        select(DeliveryModel).where(DeliveryModel.driver == driver).order_by(*_SCHEDULE_ORDER)
    )
    return result.scalars().all()


async def read_deliveries_by_date_range_service(start: date, end: date, request: Request) -> list[DeliveryModel]:
    db = request.state.db

    if start > end:
        raise InvalidInputError("Начало периода позже его конца")
    result = await db.execute(
        select(DeliveryModel).where(DeliveryModel.delivery_date.between(start, end)).order_by(*_SCHEDULE_ORDER)
    )
    return result.scalars().all()


async def read_deliveries_today_service(request: Request) -> list[DeliveryModel]:
    db = request.state.db

    result = await db.execute(
        select(DeliveryModel)
        .where(DeliveryModel.delivery_date == date.today())
        .order_by(DeliveryModel.start_time.asc())
    )
    return result.scalars().all()


# ────────────── UPDATE ──────────────
async def update_delivery_service(id: int, delivery_update: DeliveryUpdate, request: Request) -> DeliveryModel:
    """
    Обновление доставки.
    Переданные поля сливаются с текущей записью и проверяются как при создании:
    дата сверяется с датой мероприятия (нового заказа, если он меняется), время проверяется на порядок.
    """
    db = request.state.db
    log = request.app.state.log

    db_delivery = await read_delivery_service(id, request)
    data = delivery_update.model_dump(exclude_unset=True)

    for field in ("order_id", "delivery_date", "start_time"):
        if field in data and data[field] is None:
            raise InvalidInputError(f"Поле {field} не может быть пустым")

    order_changed = "order_id" in data and data["order_id"] != db_delivery.order_id
    order = await read_order_service(data.get("order_id", db_delivery.order_id), request)
    if order_changed:
        await ensure_order_has_no_delivery(order.id, request)

    if order_changed or "delivery_date" in data:
        validate_delivery_date(data.get("delivery_date", db_delivery.delivery_date), order)
    if "start_time" in data or "end_time" in data:
        validate_time_window(
            data.get("start_time", db_delivery.start_time),
            data.get("end_time", db_delivery.end_time),
        )

    for key, value in data.items():
        setattr(db_delivery, key, value)

    await _commit_unique(db_delivery, request)
    await log.log_info("delivery", "Доставка обновлена", {"id": id, "fields": list(data)})
    return db_delivery


async def change_delivery_status_service(id: int, new_status: str, request: Request) -> DeliveryModel:
    db = request.state.db
    log = request.app.state.log

    status = parse_delivery_status(new_status)
    db_delivery = await read_delivery_service(id, request)

    previous = db_delivery.status
    try:
        check_delivery_transition(previous, status)
    except ConflictError as e:
        await log.log_warning("delivery", e.detail, {"id": id, "from": previous, "to": status.value})
        raise

    db_delivery.status = status.value
    if status == DeliveryStatus.DELIVERED:
        db_delivery.confirmed_at = datetime.now()

    await db.commit()
    await db.refresh(db_delivery)
    await log.log_info("delivery", "Статус доставки изменён", {"id": id, "from": previous, "to": status.value})
    return db_delivery


async def complete_delivery_service(id: int, request: Request) -> DeliveryModel:
    """
    Отметить доставку выполненной. Если время окончания не задано, ставится текущее время,
    но только когда оно позже времени начала; иначе end_time остаётся пустым.
    """
    db = request.state.db
    log = request.app.state.log

    db_delivery = await read_delivery_service(id, request)
    check_delivery_transition(db_delivery.status, DeliveryStatus.DELIVERED)

    now = datetime.now()
    db_delivery.status = DeliveryStatus.DELIVERED.value
    db_delivery.confirmed_at = now
    current_minute = now.time().replace(second=0, microsecond=0)
    if db_delivery.end_time is None and current_minute > db_delivery.start_time:
        db_delivery.end_time = current_minute

    await db.commit()
    await db.refresh(db_delivery)
    await log.log_info("delivery", "Доставка выполнена", {"id": id})
    return db_delivery


# ────────────── DELETE ──────────────
async def delete_delivery_service(id: int, request: Request) -> None:
    """
    Удаление доставки. Только в статусах SCHEDULED и CANCELLED.
    """
    db = request.state.db
    log = request.app.state.log

    db_delivery = await read_delivery_service(id, request)
    if DeliveryStatus(db_delivery.status) not in DELETABLE_DELIVERY_STATUSES:
        await log.log_warning("delivery", "Попытка удалить доставку в работе", {"id": id, "status": db_delivery.status})
        raise ConflictError("Удалять можно только доставки в статусе SCHEDULED или CANCELLED")

    await db.delete(db_delivery)
    await db.commit()
    await log.log_info("delivery", "Доставка удалена", {"id": id})


# ────────────── СТАТИСТИКА ──────────────
async def count_deliveries_by_status_service(request: Request) -> dict[str, int]:
    db = request.state.db

    result = await db.execute(select(DeliveryModel.status, func.count(DeliveryModel.id)).group_by(DeliveryModel.status))
    counts = dict(result.all())
    return {s.value: counts.get(s.value, 0) for s in DeliveryStatus}


async def delivery_stats_service(request: Request) -> DeliveryStats:
    db = request.state.db

    total = await db.scalar(select(func.count(DeliveryModel.id))) or 0
    today = await db.scalar(
        select(func.count(DeliveryModel.id)).where(DeliveryModel.delivery_date == date.today())
    ) or 0
    by_status = await count_deliveries_by_status_service(request)
    completed = by_status[DeliveryStatus.DELIVERED.value]

    return DeliveryStats(
        total_deliveries=total,
        deliveries_today=today,
        completed=completed,
        completion_rate=percent(completed, total),
        by_status=by_status,
    )

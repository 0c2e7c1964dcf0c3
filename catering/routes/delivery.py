# catering/routes/delivery.py

from datetime import date
from fastapi import APIRouter, Request, status
from typing import List, Optional
from catering.schemas.base import StatusChange
from catering.schemas.delivery import Delivery, DeliveryCreate, DeliveryUpdate, DeliveryWithOrder, DeliveryStats
from catering.services.delivery import (
    create_delivery_service,
    read_deliveries_service,
    read_delivery_service,
    read_delivery_with_order_service,
    read_delivery_by_order_service,
    read_deliveries_by_driver_service,
    read_deliveries_by_date_range_service,
    read_deliveries_today_service,
    update_delivery_service,
    change_delivery_status_service,
    complete_delivery_service,
    delete_delivery_service,
    delivery_stats_service,
)

router = APIRouter()

# ────────────── CREATE ──────────────
@router.post(
    "/",
    response_model=Delivery,
    status_code=status.HTTP_201_CREATED,
    summary="Запланировать доставку",
    responses={
        201: {"description": "Доставка запланирована"},
        400: {"description": "Дата после мероприятия или в прошлом, время окончания не позже начала"},
        404: {"description": "Заказ не найден"},
        409: {"description": "У заказа уже есть доставка"},
        422: {"description": "Неверные данные запроса"},
    },
)
async def create_delivery(request: Request, delivery: DeliveryCreate):
    try:
        return await create_delivery_service(delivery, request)
    except Exception as e:
        await request.app.state.log.log_error("delivery", f"Ошибка при планировании доставки: {str(e)}", {"order_id": delivery.order_id})
        raise


# ────────────── READ ALL ──────────────
@router.get(
    "/",
    response_model=List[Delivery],
    summary="Список доставок",
    responses={400: {"description": "Неизвестный статус в фильтре"}},
)
async def read_deliveries(request: Request, status: Optional[str] = None, skip: int = 0, limit: int = 100):
    try:
        return await read_deliveries_service(request, status, skip, limit)
    except Exception as e:
        await request.app.state.log.log_error("delivery", f"Ошибка при получении списка доставок: {str(e)}")
        raise


@router.get("/stats", response_model=DeliveryStats, summary="Статистика доставок")
async def read_delivery_stats(request: Request):
    return await delivery_stats_service(request)


@router.get("/today", response_model=List[Delivery], summary="Доставки на сегодня")
async def read_deliveries_today(request: Request):
    return await read_deliveries_today_service(request)


@router.get("/driver/{driver}", response_model=List[Delivery], summary="Доставки водителя")
async def read_deliveries_by_driver(driver: str, request: Request):
    return await read_deliveries_by_driver_service(driver, request)


@router.get(
    "/date-range",
    response_model=List[Delivery],
    summary="Доставки за период",
    responses={400: {"description": "Начало периода позже конца"}},
)
async def read_deliveries_by_date_range(request: Request, start: date, end: date):
    try:
        return await read_deliveries_by_date_range_service(start, end, request)
    except Exception as e:
        await request.app.state.log.log_error("delivery", f"Ошибка при выборке доставок по датам: {str(e)}")
        raise


@router.get(
    "/order/{order_id}",
    response_model=Delivery,
    summary="Доставка заказа",
    responses={404: {"description": "Для заказа нет доставки"}},
)
async def read_delivery_by_order(order_id: int, request: Request):
    try:
        return await read_delivery_by_order_service(order_id, request)
    except Exception as e:
        await request.app.state.log.log_error("delivery", f"Ошибка при получении доставки заказа: {str(e)}", {"order_id": order_id})
        raise


# ────────────── READ ONE ──────────────
@router.get(
    "/{id}",
    response_model=Delivery,
    summary="Получить доставку по ID",
    responses={404: {"description": "Доставка не найдена"}},
)
async def read_delivery(id: int, request: Request):
    try:
        return await read_delivery_service(id, request)
    except Exception as e:
        await request.app.state.log.log_error("delivery", f"Ошибка при получении доставки: {str(e)}", {"id": id})
        raise


@router.get(
    "/{id}/details",
    response_model=DeliveryWithOrder,
    summary="Доставка вместе с заказом",
    responses={404: {"description": "Доставка не найдена"}},
)
async def read_delivery_details(id: int, request: Request):
    try:
        return await read_delivery_with_order_service(id, request)
    except Exception as e:
        await request.app.state.log.log_error("delivery", f"Ошибка при получении доставки с заказом: {str(e)}", {"id": id})
        raise


# ────────────── UPDATE ──────────────
@router.patch(
    "/{id}",
    response_model=Delivery,
    summary="Обновить доставку",
    responses={
        400: {"description": "Нарушены правила даты или времени"},
        404: {"description": "Доставка или заказ не найдены"},
        409: {"description": "У нового заказа уже есть доставка"},
    },
)
async def update_delivery(id: int, delivery_update: DeliveryUpdate, request: Request):
    try:
        return await update_delivery_service(id, delivery_update, request)
    except Exception as e:
        await request.app.state.log.log_error("delivery", f"Ошибка при обновлении доставки: {str(e)}", {"id": id})
        raise


@router.patch(
    "/{id}/status",
    response_model=Delivery,
    summary="Изменить статус доставки",
    responses={
        400: {"description": "Неизвестный статус"},
        404: {"description": "Доставка не найдена"},
        409: {"description": "Переход статуса запрещён"},
    },
)
async def change_delivery_status(id: int, body: StatusChange, request: Request):
    try:
        return await change_delivery_status_service(id, body.status, request)
    except Exception as e:
        await request.app.state.log.log_error("delivery", f"Ошибка при смене статуса доставки: {str(e)}", {"id": id})
        raise


@router.patch(
    "/{id}/complete",
    response_model=Delivery,
    summary="Отметить доставку выполненной",
    responses={
        404: {"description": "Доставка не найдена"},
        409: {"description": "Доставка отменена"},
    },
)
async def complete_delivery(id: int, request: Request):
    try:
        return await complete_delivery_service(id, request)
    except Exception as e:
        await request.app.state.log.log_error("delivery", f"Ошибка при завершении доставки: {str(e)}", {"id": id})
        raise


# ────────────── DELETE ──────────────
@router.delete(
    "/{id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удалить доставку",
    responses={
        204: {"description": "Доставка удалена"},
        404: {"description": "Доставка не найдена"},
        409: {"description": "Доставка не в статусе SCHEDULED или CANCELLED"},
    },
)
async def delete_delivery(id: int, request: Request):
    try:
        await delete_delivery_service(id, request)
    except Exception as e:
        await request.app.state.log.log_error("delivery", f"Ошибка при удалении доставки: {str(e)}", {"id": id})
        raise

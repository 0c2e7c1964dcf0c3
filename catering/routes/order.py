# catering/routes/order.py

from datetime import date
from fastapi import APIRouter, Request, status
from typing import List, Optional
from catering.schemas.base import StatusChange
from catering.schemas.order import Order, OrderCreate, OrderUpdate, OrderWithClient, OrderStats
from catering.services.order import (
    create_order_service,
    read_orders_service,
    read_order_service,
    read_order_with_client_service,
    read_orders_by_client_service,
    read_orders_by_date_range_service,
    read_orders_today_service,
    update_order_service,
    change_order_status_service,
    delete_order_service,
    order_stats_service,
)

router = APIRouter()

# ────────────── CREATE ──────────────
@router.post(
    "/",
    response_model=Order,
    status_code=status.HTTP_201_CREATED,
    summary="Создать заказ",
    response_description="Возвращает созданный заказ с рассчитанной суммой",
    responses={
        201: {"description": "Заказ успешно создан"},
        400: {"description": "Дата в прошлом, количество или гости ≤ 0, неизвестный статус"},
        404: {"description": "Клиент или меню не найдены"},
        422: {"description": "Неверные данные запроса"},
    },
)
async def create_order(request: Request, order: OrderCreate):
    try:
        return await create_order_service(order, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при создании заказа: {str(e)}")
        raise


# ────────────── READ ALL ──────────────
@router.get(
    "/",
    response_model=List[Order],
    summary="Получить список заказов",
    responses={
        200: {"description": "Список заказов успешно получен"},
        400: {"description": "Неизвестный статус в фильтре"},
    },
)
async def read_orders(request: Request, status: Optional[str] = None, skip: int = 0, limit: int = 100):
    try:
        return await read_orders_service(request, status, skip, limit)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при получении списка заказов: {str(e)}")
        raise


@router.get("/stats", response_model=OrderStats, summary="Статистика заказов")
async def read_order_stats(request: Request):
    return await order_stats_service(request)


@router.get("/today", response_model=List[Order], summary="Заказы с мероприятием сегодня")
async def read_orders_today(request: Request):
    return await read_orders_today_service(request)


@router.get(
    "/client/{client_id}",
    response_model=List[Order],
    summary="Заказы клиента",
    responses={404: {"description": "Клиент не найден"}},
)
async def read_orders_by_client(client_id: int, request: Request):
    try:
        return await read_orders_by_client_service(client_id, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при получении заказов клиента: {str(e)}", {"client_id": client_id})
        raise


@router.get(
    "/date-range",
    response_model=List[Order],
    summary="Заказы по диапазону дат мероприятия",
    responses={400: {"description": "Начало периода позже конца"}},
)
async def read_orders_by_date_range(request: Request, start: date, end: date):
    try:
        return await read_orders_by_date_range_service(start, end, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при выборке по датам: {str(e)}")
        raise


# ────────────── READ ONE ──────────────
@router.get(
    "/{id}",
    response_model=Order,
    summary="Получить заказ по ID",
    responses={
        200: {"description": "Заказ найден и возвращён"},
        404: {"description": "Заказ не найден"},
    },
)
async def read_order(id: int, request: Request):
    try:
        return await read_order_service(id, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при получении заказа: {str(e)}", {"id": id})
        raise


@router.get(
    "/{id}/details",
    response_model=OrderWithClient,
    summary="Заказ вместе с данными клиента",
    responses={404: {"description": "Заказ не найден"}},
)
async def read_order_details(id: int, request: Request):
    try:
        return await read_order_with_client_service(id, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при получении заказа с клиентом: {str(e)}", {"id": id})
        raise


# ────────────── UPDATE ──────────────
@router.patch(
    "/{id}",
    response_model=Order,
    summary="Обновить заказ",
    responses={
        200: {"description": "Заказ успешно обновлён"},
        400: {"description": "Нарушены правила заказа"},
        404: {"description": "Заказ, клиент или меню не найдены"},
    },
)
async def update_order(id: int, order_update: OrderUpdate, request: Request):
    try:
        return await update_order_service(id, order_update, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при обновлении заказа: {str(e)}", {"id": id})
        raise


@router.patch(
    "/{id}/status",
    response_model=Order,
    summary="Изменить статус заказа",
    responses={
        200: {"description": "Статус изменён"},
        400: {"description": "Неизвестный статус"},
        404: {"description": "Заказ не найден"},
        409: {"description": "Переход статуса запрещён"},
    },
)
async def change_order_status(id: int, body: StatusChange, request: Request):
    try:
        return await change_order_status_service(id, body.status, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при смене статуса заказа: {str(e)}", {"id": id})
        raise


# ────────────── DELETE ──────────────
@router.delete(
    "/{id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удалить заказ",
    response_description="Заказ успешно удалён, тело ответа отсутствует",
    responses={
        204: {"description": "Заказ успешно удалён"},
        404: {"description": "Заказ не найден"},
        409: {"description": "Заказ не в статусе PENDING"},
    },
)
async def delete_order(id: int, request: Request):
    try:
        await delete_order_service(id, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при удалении заказа: {str(e)}", {"id": id})
        raise

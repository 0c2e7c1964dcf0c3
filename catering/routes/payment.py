# catering/routes/payment.py

from datetime import date
from fastapi import APIRouter, Request, status
from typing import List, Optional
from catering.schemas.base import StatusChange
from catering.schemas.payment import (
    Payment,
    PaymentCreate,
    PaymentUpdate,
    PaymentWithOrder,
    PaymentSummary,
    PaymentStats,
)
from catering.services.payment import (
    create_payment_service,
    read_payments_service,
    read_payment_service,
    read_payment_with_order_service,
    read_payments_by_order_service,
    read_payments_by_date_range_service,
    read_payments_today_service,
    update_payment_service,
    change_payment_status_service,
    mark_payment_completed_service,
    delete_payment_service,
    payment_summary_service,
    payment_stats_service,
)

router = APIRouter()

# ────────────── CREATE ──────────────
@router.post(
    "/",
    response_model=Payment,
    status_code=status.HTTP_201_CREATED,
    summary="Зарегистрировать платёж",
    responses={
        201: {"description": "Платёж зарегистрирован"},
        400: {"description": "Сумма ≤ 0, неизвестный способ/статус или превышение суммы заказа"},
        404: {"description": "Заказ не найден"},
        422: {"description": "Неверные данные запроса"},
    },
)
async def create_payment(request: Request, payment: PaymentCreate):
    try:
        return await create_payment_service(payment, request)
    except Exception as e:
        await request.app.state.log.log_error("payment", f"Ошибка при регистрации платежа: {str(e)}", {"order_id": payment.order_id})
        raise


# ────────────── READ ALL ──────────────
@router.get(
    "/",
    response_model=List[Payment],
    summary="Список платежей",
    responses={400: {"description": "Неизвестный статус или способ оплаты в фильтре"}},
)
async def read_payments(
    request: Request,
    status: Optional[str] = None,
    method: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
):
    try:
        return await read_payments_service(request, status, method, skip, limit)
    except Exception as e:
        await request.app.state.log.log_error("payment", f"Ошибка при получении списка платежей: {str(e)}")
        raise


@router.get("/stats", response_model=PaymentStats, summary="Статистика платежей")
async def read_payment_stats(request: Request):
    return await payment_stats_service(request)


@router.get("/today", response_model=List[Payment], summary="Платежи за сегодня")
async def read_payments_today(request: Request):
    return await read_payments_today_service(request)


@router.get(
    "/date-range",
    response_model=List[Payment],
    summary="Платежи за период",
    responses={400: {"description": "Начало периода позже конца"}},
)
async def read_payments_by_date_range(request: Request, start: date, end: date):
    try:
        return await read_payments_by_date_range_service(start, end, request)
    except Exception as e:
        await request.app.state.log.log_error("payment", f"Ошибка при выборке платежей по датам: {str(e)}")
        raise


@router.get(
    "/order/{order_id}",
    response_model=List[Payment],
    summary="Платежи по заказу",
    responses={404: {"description": "Заказ не найден"}},
)
async def read_payments_by_order(order_id: int, request: Request):
    try:
        return await read_payments_by_order_service(order_id, request)
    except Exception as e:
        await request.app.state.log.log_error("payment", f"Ошибка при получении платежей заказа: {str(e)}", {"order_id": order_id})
        raise


@router.get(
    "/order/{order_id}/summary",
    response_model=PaymentSummary,
    summary="Сводка оплаты по заказу",
    responses={404: {"description": "Заказ не найден"}},
)
async def read_payment_summary(order_id: int, request: Request):
    try:
        return await payment_summary_service(order_id, request)
    except Exception as e:
        await request.app.state.log.log_error("payment", f"Ошибка при расчёте сводки: {str(e)}", {"order_id": order_id})
        raise


# ────────────── READ ONE ──────────────
@router.get(
    "/{id}",
    response_model=Payment,
    summary="Получить платёж по ID",
    responses={404: {"description": "Платёж не найден"}},
)
async def read_payment(id: int, request: Request):
    try:
        return await read_payment_service(id, request)
    except Exception as e:
        await request.app.state.log.log_error("payment", f"Ошибка при получении платежа: {str(e)}", {"id": id})
        raise


@router.get(
    "/{id}/details",
    response_model=PaymentWithOrder,
    summary="Платёж вместе с заказом",
    responses={404: {"description": "Платёж не найден"}},
)
async def read_payment_details(id: int, request: Request):
    try:
        return await read_payment_with_order_service(id, request)
    except Exception as e:
        await request.app.state.log.log_error("payment", f"Ошибка при получении платежа с заказом: {str(e)}", {"id": id})
        raise


# ────────────── UPDATE ──────────────
@router.patch(
    "/{id}",
    response_model=Payment,
    summary="Обновить реквизиты платежа",
    responses={
        400: {"description": "Некорректная сумма, способ оплаты или превышение суммы заказа"},
        404: {"description": "Платёж или заказ не найден"},
    },
)
async def update_payment(id: int, payment_update: PaymentUpdate, request: Request):
    try:
        return await update_payment_service(id, payment_update, request)
    except Exception as e:
        await request.app.state.log.log_error("payment", f"Ошибка при обновлении платежа: {str(e)}", {"id": id})
        raise


@router.patch(
    "/{id}/status",
    response_model=Payment,
    summary="Изменить статус платежа",
    responses={
        400: {"description": "Неизвестный статус"},
        404: {"description": "Платёж не найден"},
        409: {"description": "Переход статуса запрещён или превышена сумма заказа"},
    },
)
async def change_payment_status(id: int, body: StatusChange, request: Request):
    try:
        return await change_payment_status_service(id, body.status, request)
    except Exception as e:
        await request.app.state.log.log_error("payment", f"Ошибка при смене статуса платежа: {str(e)}", {"id": id})
        raise


@router.patch(
    "/{id}/complete",
    response_model=Payment,
    summary="Отметить платёж выполненным",
    responses={
        404: {"description": "Платёж не найден"},
        409: {"description": "Платёж уже выполнен, возвращён, неуспешен или превышена сумма заказа"},
    },
)
async def complete_payment(id: int, request: Request):
    try:
        return await mark_payment_completed_service(id, request)
    except Exception as e:
        await request.app.state.log.log_error("payment", f"Ошибка при завершении платежа: {str(e)}", {"id": id})
        raise


# ────────────── DELETE ──────────────
@router.delete(
    "/{id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удалить платёж",
    responses={
        204: {"description": "Платёж удалён"},
        404: {"description": "Платёж не найден"},
        409: {"description": "Платёж не в статусе PENDING или FAILED"},
    },
)
async def delete_payment(id: int, request: Request):
    try:
        await delete_payment_service(id, request)
    except Exception as e:
        await request.app.state.log.log_error("payment", f"Ошибка при удалении платежа: {str(e)}", {"id": id})
        raise

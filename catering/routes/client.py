# catering/routes/client.py

from fastapi import APIRouter, Request, status
from typing import List
from catering.schemas.client import Client, ClientCreate
from catering.services.client import (
    create_client_service,
    read_clients_service,
    read_client_service,
)

router = APIRouter()

# ────────────── CREATE ──────────────
@router.post(
    "/",
    response_model=Client,
    status_code=status.HTTP_201_CREATED,
    summary="Создать клиента",
    responses={
        201: {"description": "Клиент успешно создан"},
        409: {"description": "Клиент с таким email уже существует"},
        422: {"description": "Неверные данные запроса"},
    },
)
async def create_client(request: Request, client: ClientCreate):
    try:
        return await create_client_service(client, request)
    except Exception as e:
        await request.app.state.log.log_error("client", f"Ошибка при создании клиента: {str(e)}")
        raise

# ────────────── READ ALL ──────────────
@router.get("/", response_model=List[Client], summary="Получить список клиентов")
async def read_clients(request: Request, active_only: bool = False, skip: int = 0, limit: int = 100):
    return await read_clients_service(request, active_only, skip, limit)

# ────────────── READ ONE ──────────────
@router.get(
    "/{id}",
    response_model=Client,
    summary="Получить клиента по ID",
    responses={404: {"description": "Клиент не найден"}},
)
async def read_client(id: int, request: Request):
    return await read_client_service(id, request)

# catering/routes/menu.py

from fastapi import APIRouter, Request, status
from typing import List
from catering.schemas.menu import Menu, MenuCreate
from catering.services.menu import (
    create_menu_service,
    read_menus_service,
    read_menu_service,
)

router = APIRouter()

# ────────────── CREATE ──────────────
@router.post(
    "/",
    response_model=Menu,
    status_code=status.HTTP_201_CREATED,
    summary="Создать меню",
    responses={
        201: {"description": "Меню успешно создано"},
        400: {"description": "Отрицательная цена"},
        422: {"description": "Неверные данные запроса"},
    },
)
async def create_menu(request: Request, menu: MenuCreate):
    try:
        return await create_menu_service(menu, request)
    except Exception as e:
        await request.app.state.log.log_error("menu", f"Ошибка при создании меню: {str(e)}")
        raise

# ────────────── READ ALL ──────────────
@router.get("/", response_model=List[Menu], summary="Получить список меню")
async def read_menus(request: Request, skip: int = 0, limit: int = 100):
    return await read_menus_service(request, skip, limit)

# ────────────── READ ONE ──────────────
@router.get(
    "/{id}",
    response_model=Menu,
    summary="Получить меню по ID",
    responses={404: {"description": "Меню не найдено"}},
)
async def read_menu(id: int, request: Request):
    return await read_menu_service(id, request)

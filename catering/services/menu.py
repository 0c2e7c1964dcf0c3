# catering/services/menu.py

from sqlalchemy import select
from fastapi import Request

from catering.models.menu import Menu as MenuModel
from catering.schemas.menu import MenuCreate
from catering.utils.derived import to_money
from catering.utils.errors import NotFoundError, InvalidInputError


async def read_menus_service(request: Request, skip: int = 0, limit: int = 100) -> list[MenuModel]:
    db = request.state.db
    log = request.app.state.log

    result = await db.execute(select(MenuModel).order_by(MenuModel.name).offset(skip).limit(limit))
    menus = result.scalars().all()

    await log.log_info("menu", f"{len(menus)} меню загружено")
    return menus


async def create_menu_service(menu: MenuCreate, request: Request) -> MenuModel:
    db = request.state.db
    log = request.app.state.log

    if menu.unit_price < 0:
        raise InvalidInputError("Цена меню не может быть отрицательной")

    data = menu.model_dump()
    data["unit_price"] = to_money(menu.unit_price)
    db_menu = MenuModel(**data)
    db.add(db_menu)
    await db.commit()
    await db.refresh(db_menu)

    await log.log_info("menu", "Меню создано", {"id": db_menu.id, "unit_price": db_menu.unit_price})
    return db_menu


async def read_menu_service(id: int, request: Request) -> MenuModel:
    db = request.state.db
    log = request.app.state.log

    result = await db.execute(select(MenuModel).where(MenuModel.id == id))
    db_menu = result.scalar_one_or_none()
    if db_menu is None:
        await log.log_error("menu", "Меню не найдено", {"id": id})
        raise NotFoundError(f"Меню с ID {id} не найдено")

    return db_menu

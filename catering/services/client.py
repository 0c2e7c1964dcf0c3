# catering/services/client.py

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from fastapi import Request

from catering.models.client import Client as ClientModel
from catering.schemas.client import ClientCreate
from catering.utils.errors import NotFoundError, ConflictError


async def read_clients_service(request: Request, active_only: bool = False, skip: int = 0, limit: int = 100) -> list[ClientModel]:
    """
    Получение списка клиентов (новые первыми).
    """
    db = request.state.db
    log = request.app.state.log

    query = select(ClientModel)
    if active_only:
        query = query.where(ClientModel.is_active.is_(True))
    result = await db.execute(query.order_by(ClientModel.created_at.desc()).offset(skip).limit(limit))
    clients = result.scalars().all()

    await log.log_info("client", f"{len(clients)} клиентов загружено")
    return clients


async def create_client_service(client: ClientCreate, request: Request) -> ClientModel:
    """
    Создание клиента. Email, если указан, должен быть уникальным.
    """
    db = request.state.db
    log = request.app.state.log

    if client.email:
        result = await db.execute(select(ClientModel.id).where(ClientModel.email == client.email))
        if result.scalar_one_or_none() is not None:
            await log.log_warning("client", "Email уже занят", {"email": client.email})
            raise ConflictError(f"Клиент с email {client.email} уже существует")

    db_client = ClientModel(**client.model_dump())
    db.add(db_client)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Клиент с email {client.email} уже существует")
    await db.refresh(db_client)

    await log.log_info("client", "Клиент создан", {"id": db_client.id})
    return db_client


async def read_client_service(id: int, request: Request) -> ClientModel:
    """
    Чтение клиента по ID.
    """
    db = request.state.db
    log = request.app.state.log

    result = await db.execute(select(ClientModel).where(ClientModel.id == id))
    db_client = result.scalar_one_or_none()
    if db_client is None:
        await log.log_error("client", "Клиент не найден", {"id": id})
        raise NotFoundError(f"Клиент с ID {id} не найден")

    return db_client

# catering/utils/database.py

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from catering.config import settings

# ────────────── Base для моделей ──────────────
Base = declarative_base()  # базовый класс для всех моделей SQLAlchemy

# ────────────── Асинхронный движок ──────────────
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO
)

# ────────────── SQLite ──────────────
# FK в SQLite по умолчанию выключены, а SELECT ... FOR UPDATE игнорируется.
# Поэтому: PRAGMA foreign_keys=ON на каждом соединении и BEGIN IMMEDIATE
# вместо ленивого BEGIN: транзакция сразу берёт блокировку на запись,
# и параллельные проверки лимита платежей и доставок идут по очереди.
if engine.dialect.name == "sqlite":

    @event.listens_for(engine.sync_engine, "connect")
    def _sqlite_on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None    # BEGIN выдаём сами, см. ниже
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _sqlite_on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

# ────────────── Асинхронная сессия ──────────────
# expire_on_commit=False: объекты отдаются в ответ уже после commit
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# ────────────── Инициализация базы данных ──────────────
def _import_models():
    """Регистрирует все модели в Base.metadata."""
    from catering.models import client, menu, order, payment, delivery  # noqa: F401


async def init_db():
    """
    Создаёт все таблицы в базе данных (если ещё не созданы):
        clients, menus, orders, payments, deliveries
    Ограничения (FK, UNIQUE на deliveries.order_id) создаются вместе с таблицами.
    """
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db():
    """Удаляет все таблицы. Используется в тестах."""
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

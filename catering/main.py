# catering/main.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from dotenv import load_dotenv
from contextlib import asynccontextmanager

from catering.config import settings
from catering.utils.log import Log
from catering.utils.database import init_db
from catering.middleware.db_middleware import DBSessionMiddleware

import os
import multiprocessing

# --- загрузка переменных окружения ---
load_dotenv()

# --- sync логгер для раннего старта ---
boot_log = Log()
if os.environ.get("RUN_MAIN") == "true" or multiprocessing.current_process().name == "MainProcess":
    boot_log.log_info_sync(target="startup", message="Импорты main.py выполнены")

# ────────────── Lifespan ──────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    boot_log.log_info_sync(target="startup", message="lifespan: startup начат")

    # Таблицы и ограничения
    await init_db()
    boot_log.log_info_sync(target="startup", message="База инициализирована", data={"url": settings.DATABASE_URL.split("@")[-1]})

    app.state.log = Log()
    await app.state.log.log_info(target="startup", message="Async Log инициализирован")

    yield

    # shutdown
    await app.state.log.log_info(target="shutdown", message="Остановка приложения")
    await app.state.log.shutdown()
    boot_log.log_info_sync(target="shutdown", message="Log корректно завершён")

# ────────────── Создаём FastAPI приложение ──────────────
app = FastAPI(title=settings.APP_TITLE, lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# DB middleware для request.state.db
app.add_middleware(DBSessionMiddleware)

@app.get("/")
def read_root():
    return {"message": settings.APP_TITLE}

# ────────────── Подключение роутов ──────────────
from catering.routes import client, menu, order, payment, delivery  # noqa: E402

app.include_router(client.router, prefix="/clients", tags=["clients"])
app.include_router(menu.router, prefix="/menus", tags=["menus"])
app.include_router(order.router, prefix="/orders", tags=["orders"])
app.include_router(payment.router, prefix="/payments", tags=["payments"])
app.include_router(delivery.router, prefix="/deliveries", tags=["deliveries"])

# ────────────── Запуск uvicorn ──────────────
if __name__ == "__main__":
    boot_log.log_info_sync(target="startup", message="Запуск uvicorn.run")
    uvicorn.run(
        "catering.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        log_level="info",
        reload=True
    )

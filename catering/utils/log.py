# catering/utils/log.py
# Логирование событий

import os
import datetime
import logging
from decimal import Decimal
from aiologger import Logger
from aiologger.handlers.files import AsyncFileHandler

from catering.config import settings


class Log:
    """
    Журнал событий приложения.
    Каждый target (order, payment, delivery, ...) пишет в свой файл на каждый день:
        <LOG_DIR>/<target>/2025/10/04.log
    Асинхронные методы работают через aiologger, *_sync работают через стандартный logging
    (нужны до старта event loop и при остановке).
    """

    def __init__(self, log_dir: str | None = None, log_print: bool | None = None):
        self.log_dir = log_dir or settings.LOG_DIR
        os.makedirs(self.log_dir, exist_ok=True)
        self.handlers = {}
        self.log_print = settings.LOG_PRINT if log_print is None else log_print

    def build_log_path(self, target: str, now: datetime.datetime) -> str:
        base_dir = os.path.join(self.log_dir, target or "app", f"{now.year}", f"{now:%m}")
        os.makedirs(base_dir, exist_ok=True)
        return os.path.join(base_dir, f"{now:%d}.log")

    def format_line(self, target: str, level: str, message: str, data: dict | None, now: datetime.datetime) -> str:
        line = f"{now:%d.%m.%Y %H:%M:%S} {target}: {level}: {message}"
        if data:
            line += f": {self.safe_serialize(data)}"
        return line

    async def get_logger(self, target: str, now: datetime.datetime) -> Logger:
        """Асинхронный логгер для target; при смене дня открывается новый файл."""
        log_path = self.build_log_path(target, now)

        current = self.handlers.get(target)
        if current is None or current["path"] != log_path:
            handler = AsyncFileHandler(filename=log_path, mode="a", encoding="utf-8")
            target_logger = Logger(name=f"catering_{target}")
            target_logger.add_handler(handler)

            if current is not None:
                await current["logger"].shutdown()

            self.handlers[target] = {"path": log_path, "logger": target_logger}

        return self.handlers[target]["logger"]

    # ────────────── Асинхронное ──────────────
    async def write(self, level: str, target: str, message: str, data: dict | None, is_console: bool | None):
        now = datetime.datetime.now()
        line = self.format_line(target, level, message, data, now)

        target_logger = await self.get_logger(target, now)
        await target_logger.info(line)

        should_print = self.log_print if is_console is None else is_console
        if should_print:
            print(line)

    async def log_info(self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = None):
        await self.write("INFO", target, message, data, is_console)

    async def log_warning(self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = None):
        await self.write("WARNING", target, message, data, is_console)

    async def log_error(self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = True):
        await self.write("ERROR", target, message, data, is_console)

    # ────────────── Синхронное ──────────────
    def write_sync(self, level: str, target: str, message: str, data: dict | None, is_console: bool | None):
        now = datetime.datetime.now()
        log_path = self.build_log_path(target, now)
        line = self.format_line(target, level, message, data, now)

        logger = logging.getLogger(f"catering_sync_{target}")
        logger.setLevel(logging.INFO)
        logger.propagate = False

        # файл меняется раз в сутки, переоткрываем handler
        for handler in list(logger.handlers):
            if getattr(handler, "baseFilename", None) != os.path.abspath(log_path):
                logger.removeHandler(handler)
                handler.close()
        if not logger.handlers:
            handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            handler.setFormatter(logging.Formatter("%(message)s"))
            logger.addHandler(handler)

        logger.info(line)

        should_print = self.log_print if is_console is None else is_console
        if should_print:
            print(line)

    def log_info_sync(self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = None):
        self.write_sync("INFO", target, message, data, is_console)

    def log_warning_sync(self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = None):
        self.write_sync("WARNING", target, message, data, is_console)

    def log_error_sync(self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = None):
        self.write_sync("ERROR", target, message, data, is_console)

    def safe_serialize(self, obj):
        """
        Преобразуем объект в сериализуемый вид для лога:
        - dict, list, tuple рекурсивно
        - Decimal, date, time → строка
        - Pydantic модели через model_dump
        - ORM-объекты через публичные атрибуты
        - всё остальное → строка с типом
        """
        if obj is None:
            return None
        elif isinstance(obj, (str, int, float, bool)):
            return obj
        elif isinstance(obj, (Decimal, datetime.date, datetime.time)):
            return str(obj)
        elif isinstance(obj, dict):
            return {k: self.safe_serialize(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple, set)):
            return [self.safe_serialize(v) for v in obj]
        elif hasattr(obj, "model_dump"):  # Pydantic
            return self.safe_serialize(obj.model_dump())
        elif hasattr(obj, "__dict__"):
            return {k: self.safe_serialize(v) for k, v in vars(obj).items() if not k.startswith("_")}
        else:
            return f"<{type(obj).__name__}>"

    async def shutdown(self):
        for h in list(self.handlers.values()):
            await h["logger"].shutdown()
        self.handlers = {}

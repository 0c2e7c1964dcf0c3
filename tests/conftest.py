"""
Pytest configuration and fixtures.

The application reads its settings at import time, so the test database and
log directory are pointed at a throwaway directory before anything from
`catering` is imported.
"""
import os
import tempfile
from datetime import date, timedelta
from typing import Any, AsyncGenerator

_TMP_DIR = tempfile.mkdtemp(prefix="catering-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.db"
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "log")
os.environ["LOG_PRINT"] = "0"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from catering.main import app  # noqa: E402
from catering.utils.database import drop_db, engine, init_db  # noqa: E402
from catering.utils.log import Log  # noqa: E402


def days_from_today(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


@pytest_asyncio.fixture
async def api() -> AsyncGenerator[AsyncClient, Any]:
    """HTTP client bound to the app with a freshly created schema."""
    await drop_db()
    await init_db()
    app.state.log = Log()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    await app.state.log.shutdown()
    await engine.dispose()


@pytest_asyncio.fixture
async def make_client(api: AsyncClient):
    async def _make(**overrides: Any) -> dict[str, Any]:
        payload = {"first_name": "Lucía", "last_name": "Andrade", "phone": "+593999654321"}
        payload.update(overrides)
        resp = await api.post("/clients/", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest_asyncio.fixture
async def make_menu(api: AsyncClient):
    async def _make(unit_price: str = "50.00", **overrides: Any) -> dict[str, Any]:
        payload = {"name": "Buffet ejecutivo", "unit_price": unit_price}
        payload.update(overrides)
        resp = await api.post("/menus/", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def order_payload():
    """Valid order body for the given client/menu ids."""
    def _payload(client_id: int, menu_id: int, **overrides: Any) -> dict[str, Any]:
        payload = {
            "client_id": client_id,
            "menu_id": menu_id,
            "event_date": days_from_today(10),
            "event_time": "18:30:00",
            "quantity": 3,
            "guests": 25,
            "address": "Av. Manabí 456, Salón Los Jardines",
            "phone": "+593999654321",
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest_asyncio.fixture
async def make_order(api: AsyncClient, make_client, make_menu, order_payload):
    """Creates a client, a menu and an order; returns the order JSON."""
    async def _make(unit_price: str = "50.00", **overrides: Any) -> dict[str, Any]:
        client = await make_client()
        menu = await make_menu(unit_price=unit_price)
        resp = await api.post("/orders/", json=order_payload(client["id"], menu["id"], **overrides))
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make

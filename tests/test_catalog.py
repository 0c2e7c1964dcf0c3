"""
Clients and menus referenced by orders.
"""
from decimal import Decimal

from httpx import AsyncClient


async def test_root(api: AsyncClient) -> None:
    resp = await api.get("/")
    assert resp.status_code == 200
    assert "message" in resp.json()


class TestClients:
    async def test_create_and_read(self, api: AsyncClient, make_client) -> None:
        client = await make_client(email="lucia@example.com")

        assert client["full_name"] == "Lucía Andrade"
        assert client["is_active"] is True

        fetched = (await api.get(f"/clients/{client['id']}")).json()
        assert fetched["email"] == "lucia@example.com"
        assert (await api.get("/clients/999")).status_code == 404

    async def test_duplicate_email_conflicts(self, api: AsyncClient, make_client) -> None:
        await make_client(email="dup@example.com")

        resp = await api.post(
            "/clients/", json={"first_name": "Otro", "last_name": "Cliente", "email": "dup@example.com"}
        )
        assert resp.status_code == 409

    async def test_active_only_filter(self, api: AsyncClient, make_client) -> None:
        active = await make_client()
        await make_client(first_name="Pedro", is_active=False)

        everyone = (await api.get("/clients/")).json()
        assert len(everyone) == 2
        only_active = (await api.get("/clients/", params={"active_only": True})).json()
        assert [c["id"] for c in only_active] == [active["id"]]


class TestMenus:
    async def test_create_and_read(self, api: AsyncClient, make_menu) -> None:
        menu = await make_menu(unit_price="12.50", description="Entrada, plato fuerte y postre")

        assert Decimal(menu["unit_price"]) == Decimal("12.50")
        fetched = (await api.get(f"/menus/{menu['id']}")).json()
        assert fetched["name"] == "Buffet ejecutivo"
        assert (await api.get("/menus/999")).status_code == 404

    async def test_negative_price_rejected(self, api: AsyncClient) -> None:
        resp = await api.post("/menus/", json={"name": "Gratis", "unit_price": "-1.00"})
        assert resp.status_code == 400

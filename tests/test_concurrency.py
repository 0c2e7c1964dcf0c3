"""
Parallel requests against the same order: the payment cap and the
one-delivery-per-order rule hold, and the losing request gets 400/409, never 500.
"""
import asyncio
from datetime import date, time, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
from httpx import AsyncClient

from catering.models.delivery import Delivery as DeliveryModel
from catering.services.delivery import _commit_unique
from catering.utils.database import AsyncSessionLocal
from catering.utils.errors import ConflictError

from conftest import days_from_today


class TestPaymentRace:
    async def test_parallel_completed_payments_respect_cap(self, api: AsyncClient, make_order) -> None:
        order = await make_order(unit_price="50.00", quantity=3)
        body = {"order_id": order["id"], "amount": "100.00", "method": "CARD", "status": "COMPLETED"}

        responses = await asyncio.gather(*(api.post("/payments/", json=body) for _ in range(2)))

        assert sorted(r.status_code for r in responses) == [201, 400]
        summary = (await api.get(f"/payments/order/{order['id']}/summary")).json()
        assert Decimal(summary["paid_total"]) == Decimal("100.00")
        assert summary["payment_count"] == 1

    async def test_parallel_completion_respects_cap(self, api: AsyncClient, make_order) -> None:
        order = await make_order(unit_price="50.00", quantity=3)
        ids = []
        for _ in range(2):
            resp = await api.post("/payments/", json={"order_id": order["id"], "amount": "100.00", "method": "CASH"})
            ids.append(resp.json()["id"])

        responses = await asyncio.gather(*(api.patch(f"/payments/{pid}/complete") for pid in ids))

        assert sorted(r.status_code for r in responses) == [200, 409]
        summary = (await api.get(f"/payments/order/{order['id']}/summary")).json()
        assert Decimal(summary["paid_total"]) <= Decimal(summary["order_total"])


class TestDeliveryRace:
    async def test_parallel_schedules_for_one_order(self, api: AsyncClient, make_order) -> None:
        order = await make_order()
        body = {"order_id": order["id"], "delivery_date": days_from_today(10), "start_time": "16:00:00"}

        responses = await asyncio.gather(*(api.post("/deliveries/", json=body) for _ in range(2)))

        assert sorted(r.status_code for r in responses) == [201, 409]
        assert len((await api.get("/deliveries/")).json()) == 1

    async def test_unique_violation_on_commit_is_conflict(self, api: AsyncClient, make_order) -> None:
        order = await make_order()
        body = {"order_id": order["id"], "delivery_date": days_from_today(10), "start_time": "16:00:00"}
        assert (await api.post("/deliveries/", json=body)).status_code == 201

        # вставка в обход проверки сервиса: срабатывает UNIQUE(order_id)
        async with AsyncSessionLocal() as session:
            duplicate = DeliveryModel(
                order_id=order["id"],
                delivery_date=date.today() + timedelta(days=5),
                start_time=time(10, 0),
            )
            session.add(duplicate)
            request = SimpleNamespace(state=SimpleNamespace(db=session))

            with pytest.raises(ConflictError) as exc:
                await _commit_unique(duplicate, request)
            assert exc.value.status_code == 409

        assert len((await api.get("/deliveries/")).json()) == 1

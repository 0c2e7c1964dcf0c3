"""
Delivery scheduler: one delivery per order, dates bounded by the event,
status machine and completion.
"""
from datetime import date

from httpx import AsyncClient

from conftest import days_from_today


def delivery_payload(order_id: int, **overrides) -> dict:
    payload = {
        "order_id": order_id,
        "delivery_date": days_from_today(10),
        "start_time": "16:00:00",
        "end_time": "17:30:00",
        "vehicle": "Furgoneta ABC-1234",
        "driver": "Carlos Mendoza",
    }
    payload.update(overrides)
    return payload


async def schedule(api: AsyncClient, order_id: int, **overrides):
    return await api.post("/deliveries/", json=delivery_payload(order_id, **overrides))


class TestScheduleDelivery:
    async def test_schedules_on_event_day(self, api: AsyncClient, make_order) -> None:
        order = await make_order()

        resp = await schedule(api, order["id"])
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "SCHEDULED"
        assert body["estimated_duration_minutes"] == 90
        assert body["days_until_delivery"] == 10
        assert body["is_completed"] is False
        assert body["confirmed_at"] is None

    async def test_rejects_date_after_event(self, api: AsyncClient, make_order) -> None:
        order = await make_order(event_date=days_from_today(10))

        resp = await schedule(api, order["id"], delivery_date=days_from_today(15))
        assert resp.status_code == 400
        assert (await api.get(f"/deliveries/order/{order['id']}")).status_code == 404

    async def test_rejects_past_date(self, api: AsyncClient, make_order) -> None:
        order = await make_order()
        assert (await schedule(api, order["id"], delivery_date=days_from_today(-1))).status_code == 400

    async def test_rejects_end_not_after_start(self, api: AsyncClient, make_order) -> None:
        order = await make_order()
        assert (await schedule(api, order["id"], end_time="16:00:00")).status_code == 400
        assert (await schedule(api, order["id"], end_time="15:00:00")).status_code == 400

    async def test_end_time_is_optional(self, api: AsyncClient, make_order) -> None:
        order = await make_order()

        resp = await schedule(api, order["id"], end_time=None)
        assert resp.status_code == 201
        assert resp.json()["estimated_duration_minutes"] is None

    async def test_second_delivery_for_order_conflicts(self, api: AsyncClient, make_order) -> None:
        order = await make_order()

        assert (await schedule(api, order["id"])).status_code == 201
        assert (await schedule(api, order["id"], driver="Otro")).status_code == 409

        listing = (await api.get("/deliveries/")).json()
        assert len(listing) == 1

    async def test_missing_order_and_unknown_status(self, api: AsyncClient, make_order) -> None:
        assert (await schedule(api, 999)).status_code == 404

        order = await make_order()
        assert (await schedule(api, order["id"], status="LOST")).status_code == 400

    async def test_created_as_delivered_is_confirmed(self, api: AsyncClient, make_order) -> None:
        order = await make_order()

        body = (await schedule(api, order["id"], status="DELIVERED")).json()
        assert body["is_completed"] is True
        assert body["confirmed_at"] is not None


class TestDeliveryStatus:
    async def test_complete_sets_end_time_and_confirmation(self, api: AsyncClient, make_order) -> None:
        order = await make_order()
        delivery = (await schedule(api, order["id"], start_time="00:00:00", end_time=None)).json()

        resp = await api.patch(f"/deliveries/{delivery['id']}/complete")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "DELIVERED"
        assert body["confirmed_at"] is not None
        # только в первую минуту суток окончание не может быть позже 00:00
        assert body["end_time"] is None or body["end_time"] > "00:00:00"

    async def test_complete_before_start_leaves_end_time_empty(self, api: AsyncClient, make_order) -> None:
        order = await make_order()
        delivery = (await schedule(api, order["id"], start_time="23:59:00", end_time=None)).json()

        body = (await api.patch(f"/deliveries/{delivery['id']}/complete")).json()
        assert body["status"] == "DELIVERED"
        assert body["end_time"] is None
        assert body["estimated_duration_minutes"] is None

    async def test_complete_keeps_planned_end_time(self, api: AsyncClient, make_order) -> None:
        order = await make_order()
        delivery = (await schedule(api, order["id"])).json()

        body = (await api.patch(f"/deliveries/{delivery['id']}/complete")).json()
        assert body["end_time"] == "17:30:00"

    async def test_cancelled_delivery_cannot_be_completed(self, api: AsyncClient, make_order) -> None:
        order = await make_order()
        delivery = (await schedule(api, order["id"])).json()
        url = f"/deliveries/{delivery['id']}/status"

        assert (await api.patch(url, json={"status": "CANCELLED"})).status_code == 200
        assert (await api.patch(f"/deliveries/{delivery['id']}/complete")).status_code == 409
        assert (await api.patch(url, json={"status": "EN_ROUTE"})).status_code == 409
        assert (await api.patch(url, json={"status": "SCHEDULED"})).status_code == 200

    async def test_delivered_is_final(self, api: AsyncClient, make_order) -> None:
        order = await make_order()
        delivery = (await schedule(api, order["id"])).json()
        url = f"/deliveries/{delivery['id']}/status"

        assert (await api.patch(url, json={"status": "EN_ROUTE"})).status_code == 200
        resp = await api.patch(url, json={"status": "DELIVERED"})
        assert resp.status_code == 200
        assert resp.json()["confirmed_at"] is not None

        assert (await api.patch(url, json={"status": "CANCELLED"})).status_code == 409
        assert (await api.patch(url, json={"status": "WAITING"})).status_code == 400
        assert (await api.patch("/deliveries/999/status", json={"status": "EN_ROUTE"})).status_code == 404


class TestUpdateAndDelete:
    async def test_update_to_order_with_delivery_conflicts(self, api: AsyncClient, make_order) -> None:
        first, second = await make_order(), await make_order()
        a = (await schedule(api, first["id"])).json()
        await schedule(api, second["id"])

        resp = await api.patch(f"/deliveries/{a['id']}", json={"order_id": second["id"]})
        assert resp.status_code == 409

        stored = (await api.get(f"/deliveries/{a['id']}")).json()
        assert stored["order_id"] == first["id"]

    async def test_update_date_is_bounded_by_event(self, api: AsyncClient, make_order) -> None:
        order = await make_order(event_date=days_from_today(10))
        delivery = (await schedule(api, order["id"], delivery_date=days_from_today(5))).json()
        url = f"/deliveries/{delivery['id']}"

        assert (await api.patch(url, json={"delivery_date": days_from_today(12)})).status_code == 400
        assert (await api.patch(url, json={"delivery_date": days_from_today(-2)})).status_code == 400

        resp = await api.patch(url, json={"delivery_date": days_from_today(9), "driver": "Ana Ruiz"})
        assert resp.status_code == 200
        assert resp.json()["driver"] == "Ana Ruiz"

    async def test_update_time_window_uses_stored_values(self, api: AsyncClient, make_order) -> None:
        order = await make_order()
        delivery = (await schedule(api, order["id"])).json()
        url = f"/deliveries/{delivery['id']}"

        assert (await api.patch(url, json={"start_time": "18:00:00"})).status_code == 400
        assert (await api.patch(url, json={"end_time": "15:00:00"})).status_code == 400
        assert (await api.patch(url, json={"start_time": "15:00:00"})).status_code == 200

    async def test_move_to_order_with_earlier_event(self, api: AsyncClient, make_order) -> None:
        first = await make_order(event_date=days_from_today(10))
        early = await make_order(event_date=days_from_today(3))
        delivery = (await schedule(api, first["id"], delivery_date=days_from_today(8))).json()

        resp = await api.patch(f"/deliveries/{delivery['id']}", json={"order_id": early["id"]})
        assert resp.status_code == 400

    async def test_delete_guard(self, api: AsyncClient, make_order) -> None:
        scheduled = (await schedule(api, (await make_order())["id"])).json()
        en_route = (await schedule(api, (await make_order())["id"], status="EN_ROUTE")).json()

        assert (await api.delete(f"/deliveries/{en_route['id']}")).status_code == 409
        assert (await api.delete(f"/deliveries/{scheduled['id']}")).status_code == 204
        assert (await api.get(f"/deliveries/{scheduled['id']}")).status_code == 404


class TestDeliveryQueries:
    async def test_lookups_and_stats(self, api: AsyncClient, make_order) -> None:
        today_order = await make_order(event_date=date.today().isoformat())
        later_order = await make_order(event_date=days_from_today(20))

        today = (await schedule(api, today_order["id"], delivery_date=date.today().isoformat(),
                                start_time="00:00:00", end_time="00:30:00")).json()
        later = (await schedule(api, later_order["id"], delivery_date=days_from_today(18),
                                driver="Ana Ruiz")).json()
        await api.patch(f"/deliveries/{today['id']}/complete")

        by_order = (await api.get(f"/deliveries/order/{later_order['id']}")).json()
        assert by_order["id"] == later["id"]

        assert [d["id"] for d in (await api.get("/deliveries/today")).json()] == [today["id"]]
        assert [d["id"] for d in (await api.get("/deliveries/driver/Ana Ruiz")).json()] == [later["id"]]

        ranged = (
            await api.get("/deliveries/date-range", params={"start": days_from_today(1), "end": days_from_today(30)})
        ).json()
        assert [d["id"] for d in ranged] == [later["id"]]
        assert (
            await api.get("/deliveries/date-range", params={"start": days_from_today(3), "end": days_from_today(1)})
        ).status_code == 400

        scheduled = (await api.get("/deliveries/", params={"status": "SCHEDULED"})).json()
        assert [d["id"] for d in scheduled] == [later["id"]]

        stats = (await api.get("/deliveries/stats")).json()
        assert stats["total_deliveries"] == 2
        assert stats["deliveries_today"] == 1
        assert stats["completed"] == 1
        assert stats["completion_rate"] == 50
        assert stats["by_status"]["SCHEDULED"] == 1

        details = (await api.get(f"/deliveries/{later['id']}/details")).json()
        assert details["order"]["id"] == later_order["id"]

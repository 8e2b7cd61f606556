from datetime import date, timedelta

from httpx import ASGITransport, AsyncClient

from phuongnam.database import init_db
from phuongnam.main import create_app
from tests.conftest import make_settings

API = "/api/datban"


async def create(client, body):
    return await client.post(API, json=body)


async def test_create_returns_pending_reservation(client, booking):
    response = await create(client, booking)
    assert response.status_code == 201

    body = response.json()
    assert body["success"] is True
    assert body["data"]["trang_thai"] == "pending"
    assert body["data"]["gio"] == "19:00"
    assert body["data"]["ngay"] == booking["ngay"]
    assert body["data"]["created_at"] is not None
    assert "timestamp" in body


async def test_duplicate_booking_rejected_until_cancelled(client, booking):
    first = await create(client, booking)
    assert first.status_code == 201
    reservation_id = first.json()["data"]["id_datban"]

    duplicate = await create(client, booking)
    assert duplicate.status_code == 400
    assert duplicate.json()["success"] is False
    assert duplicate.json()["code"] == "RESERVATION_CONFLICT"

    cancelled = await client.patch(f"{API}/{reservation_id}/status", json={"trang_thai": "cancelled"})
    assert cancelled.status_code == 200
    assert cancelled.json()["data"]["trang_thai"] == "cancelled"

    retry = await create(client, booking)
    assert retry.status_code == 201
    assert retry.json()["data"]["trang_thai"] == "pending"


async def test_phone_spacing_does_not_bypass_duplicate_check(client, booking):
    assert (await create(client, booking)).status_code == 201
    spaced = {**booking, "sdt": "0912 345 678"}
    assert (await create(client, spaced)).status_code == 400


async def test_time_outside_opening_hours(client, booking):
    response = await create(client, {**booking, "gio": "22:00"})
    assert response.status_code == 400

    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert any("10:00" in e and "21:30" in e for e in body["errors"])


async def test_all_validation_errors_are_returned(client):
    response = await create(client, {"ten_khach": "A", "sdt": "123", "so_luong_khach": 50})
    assert response.status_code == 400
    assert len(response.json()["errors"]) >= 4


async def test_unknown_fields_rejected(client, booking):
    response = await create(client, {**booking, "trang_thai": "confirmed"})
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


async def test_limit_is_clamped_to_maximum(client, booking):
    await create(client, booking)
    response = await client.get(API, params={"limit": 101})
    assert response.status_code == 200
    assert response.json()["pagination"]["limit"] == 100


async def test_huge_page_returns_empty_page(client, booking):
    await create(client, booking)
    response = await client.get(API, params={"page": "100000000000000000000"})
    assert response.status_code == 200
    body = response.json()
    assert body["data"] == []
    assert body["pagination"]["total"] == 1
    assert body["pagination"]["pages"] == 1


async def test_list_filters_and_pagination(client, booking, tomorrow):
    day_after = (date.today() + timedelta(days=2)).isoformat()
    ids = []
    for i, slot in enumerate(["18:00", "18:30", "19:00"]):
        r = await create(client, {**booking, "gio": slot, "sdt": f"091234567{i}"})
        ids.append(r.json()["data"]["id_datban"])
    await create(client, {**booking, "ngay": day_after, "ten_khach": "Tran Thi B", "sdt": "0987654321"})
    await client.patch(f"{API}/{ids[0]}/status", json={"trang_thai": "confirmed"})

    everything = (await client.get(API)).json()
    assert everything["pagination"]["total"] == 4

    confirmed = (await client.get(API, params={"status": "confirmed"})).json()
    assert [r["id_datban"] for r in confirmed["data"]] == [ids[0]]
    assert confirmed["filters"] == {"status": "confirmed"}

    all_status = (await client.get(API, params={"status": "all"})).json()
    assert all_status["pagination"]["total"] == 4

    by_date = (await client.get(API, params={"date": day_after})).json()
    assert [r["ten_khach"] for r in by_date["data"]] == ["Tran Thi B"]

    by_name = (await client.get(API, params={"phone": "tran"})).json()
    assert by_name["pagination"]["total"] == 1

    page = (await client.get(API, params={"limit": 2, "page": 2})).json()
    assert page["pagination"] == {
        "total": 4, "limit": 2, "offset": 2, "page": 2,
        "pages": 2, "totalPages": 2, "hasNext": False, "hasPrev": True,
    }
    assert len(page["data"]) == 2


async def test_invalid_date_filter(client):
    response = await client.get(API, params={"date": "tomorrow"})
    assert response.status_code == 400


async def test_head_reports_total(client, booking):
    await create(client, booking)
    response = await client.head(API)
    assert response.status_code == 200
    assert response.headers["X-Total-Count"] == "1"


async def test_get_and_not_found(client, booking):
    created = (await create(client, booking)).json()["data"]

    response = await client.get(f"{API}/{created['id_datban']}")
    assert response.status_code == 200
    assert response.json()["data"]["ten_khach"] == "Nguyen Van A"

    missing = await client.get(f"{API}/9999")
    assert missing.status_code == 404
    assert missing.json()["code"] == "NOT_FOUND"

    malformed = await client.get(f"{API}/abc")
    assert malformed.status_code == 400


async def test_status_transitions(client, booking):
    reservation_id = (await create(client, booking)).json()["data"]["id_datban"]
    url = f"{API}/{reservation_id}/status"

    assert (await client.patch(url, json={"trang_thai": "confirmed"})).status_code == 200
    same = await client.patch(url, json={"trang_thai": "confirmed"})
    assert same.status_code == 200
    assert same.json()["data"]["trang_thai"] == "confirmed"

    back = await client.patch(url, json={"trang_thai": "pending"})
    assert back.status_code == 409
    assert back.json()["code"] == "CONFLICT"

    assert (await client.patch(url, json={"trang_thai": "cancelled"})).status_code == 200
    revive = await client.patch(url, json={"trang_thai": "confirmed"})
    assert revive.status_code == 409


async def test_status_update_validation(client, booking):
    reservation_id = (await create(client, booking)).json()["data"]["id_datban"]
    bad = await client.patch(f"{API}/{reservation_id}/status", json={"trang_thai": "seated"})
    assert bad.status_code == 400

    missing = await client.patch(f"{API}/9999/status", json={"trang_thai": "confirmed"})
    assert missing.status_code == 404


async def test_put_replaces_and_revalidates(client, booking):
    reservation_id = (await create(client, booking)).json()["data"]["id_datban"]

    unchanged = await client.put(f"{API}/{reservation_id}", json=booking)
    assert unchanged.status_code == 200

    moved = await client.put(f"{API}/{reservation_id}", json={**booking, "gio": "20:00", "so_luong_khach": 6})
    assert moved.status_code == 200
    assert moved.json()["data"]["gio"] == "20:00"
    assert moved.json()["data"]["so_luong_khach"] == 6

    incomplete = await client.put(f"{API}/{reservation_id}", json={"ten_khach": "Nguyen Van A"})
    assert incomplete.status_code == 400


async def test_patch_merges_and_checks_conflicts(client, booking):
    first = (await create(client, booking)).json()["data"]["id_datban"]
    second = (await create(client, {**booking, "gio": "20:00"})).json()["data"]["id_datban"]

    note = await client.patch(f"{API}/{first}", json={"ghi_chu": "Birthday"})
    assert note.status_code == 200
    assert note.json()["data"]["ghi_chu"] == "Birthday"
    assert note.json()["data"]["gio"] == "19:00"

    clash = await client.patch(f"{API}/{second}", json={"gio": "19:00"})
    assert clash.status_code == 400
    assert clash.json()["code"] == "RESERVATION_CONFLICT"

    invalid = await client.patch(f"{API}/{first}", json={"so_luong_khach": 0})
    assert invalid.status_code == 400

    empty = await client.patch(f"{API}/{first}", json={})
    assert empty.status_code == 400


async def test_delete(client, booking):
    reservation_id = (await create(client, booking)).json()["data"]["id_datban"]
    assert (await client.delete(f"{API}/{reservation_id}")).status_code == 200
    assert (await client.get(f"{API}/{reservation_id}")).status_code == 404
    assert (await client.delete(f"{API}/{reservation_id}")).status_code == 404


async def test_bulk_delete(client, booking):
    ids = []
    for slot in ["18:00", "19:00"]:
        ids.append((await create(client, {**booking, "gio": slot})).json()["data"]["id_datban"])

    response = await client.request("DELETE", f"{API}/bulk", json={"ids": ids + [9999, "abc"]})
    assert response.status_code == 200
    assert response.json()["data"] == {
        "deletedIds": sorted(ids),
        "deletedCount": 2,
        "requestedCount": 3,
    }

    none_left = await client.request("DELETE", f"{API}/bulk", json={"ids": ids})
    assert none_left.status_code == 404

    empty = await client.request("DELETE", f"{API}/bulk", json={"ids": []})
    assert empty.status_code == 400

    garbage = await client.request("DELETE", f"{API}/bulk", json={"ids": ["abc"]})
    assert garbage.status_code == 400


async def test_availability(client, booking, tomorrow):
    await create(client, booking)
    await create(client, {**booking, "sdt": "0987654321"})

    response = await client.get(f"{API}/availability", params={"date": tomorrow, "time": "19:00", "guests": "4"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalTables"] == 20
    assert data["bookedTables"] == 2
    assert data["availableTables"] == 18
    assert data["isAvailable"] is True
    assert data["requestedGuests"] == 4
    assert data["recommendedTimes"] is None

    missing = await client.get(f"{API}/availability", params={"date": tomorrow})
    assert missing.status_code == 400


async def test_fully_booked_slot_recommends_other_times(tmp_path, booking, tomorrow):
    app = create_app(make_settings(tmp_path, total_tables=1))
    await init_db(app.state.engine)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        await create(client, booking)
        response = await client.get(f"{API}/availability", params={"date": tomorrow, "time": "19:00"})
    await app.state.chat.aclose()
    await app.state.engine.dispose()

    data = response.json()["data"]
    assert data["isAvailable"] is False
    assert data["availableTables"] == 0
    assert data["recommendedTimes"] == ["18:00", "18:30", "19:30", "20:00", "20:30"]


async def test_unknown_route_uses_error_envelope(client):
    response = await client.get("/api/datban-typo")
    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["code"] == "NOT_FOUND"

"""
Booking Burst Simulation

Fires a burst of concurrent reservation requests at a running API to see
how the duplicate-booking check holds up under load. A share of the
requests reuse one phone number and slot; ideally exactly one of those is
created and the rest come back as RESERVATION_CONFLICT. More than one
"created" for the shared slot means the check-then-insert race was hit.

Run from project root (server already running):
    python scripts/simulate.py --bookings 50 --duplicates 0.4
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import date, datetime, timedelta
from typing import Any

import httpx

# Configuration
API_BASE_URL = "http://localhost:3000"
TOTAL_BOOKINGS = 50

FIRST_NAMES = ["Nguyen", "Tran", "Le", "Pham", "Hoang", "Vo", "Dang", "Bui"]
MIDDLE_NAMES = ["Van", "Thi", "Minh", "Thanh", "Ngoc", "Quoc"]
LAST_NAMES = ["An", "Binh", "Chau", "Dung", "Giang", "Hanh", "Khoa", "Lan"]
SLOTS = ["11:00", "11:30", "12:00", "18:00", "18:30", "19:00", "19:30", "20:00"]
NOTES = [None, "Ban gan cua so", "Sinh nhat", "Co tre em", "Can ghe em be"]

SHARED_PHONE = "0900000001"
SHARED_SLOT = "19:00"


def booking_date() -> str:
    return (date.today() + timedelta(days=1)).isoformat()


def generate_booking(shared: bool) -> dict[str, Any]:
    """Random valid booking; ``shared`` bookings all target the same phone and slot."""
    return {
        "ten_khach": f"{random.choice(FIRST_NAMES)} {random.choice(MIDDLE_NAMES)} {random.choice(LAST_NAMES)}",
        "sdt": SHARED_PHONE if shared else f"09{random.randint(10_000_000, 99_999_999)}",
        "ngay": booking_date(),
        "gio": SHARED_SLOT if shared else random.choice(SLOTS),
        "so_luong_khach": random.randint(1, 8),
        "ghi_chu": random.choice(NOTES),
    }


async def send_booking(
    client: httpx.AsyncClient,
    booking_num: int,
    shared: bool,
) -> dict[str, Any]:
    """POST one booking and classify the outcome."""
    start_time = time.perf_counter()
    result: dict[str, Any] = {"booking_num": booking_num, "shared": shared}

    try:
        response = await client.post(
            f"{API_BASE_URL}/api/datban",
            json=generate_booking(shared),
            timeout=30.0,
        )
    except httpx.HTTPError as e:
        result.update(outcome="error", error=str(e)[:100])
    else:
        body = response.json() if response.headers.get("content-type", "").startswith("application/json") else {}
        if response.status_code == 201:
            result.update(outcome="created", reservation_id=body.get("data", {}).get("id_datban"))
        elif body.get("code") == "RESERVATION_CONFLICT":
            result.update(outcome="conflict")
        else:
            result.update(outcome="error", error=f"{response.status_code} {body.get('message', response.text[:100])}")

    result["time"] = round(time.perf_counter() - start_time, 3)
    return result


# =============================================================================
# PRE-FLIGHT
# =============================================================================

async def preflight() -> bool:
    """Health check and an availability query before the burst."""
    print("\n" + "=" * 70)
    print("🧪 PRE-FLIGHT CHECKS")
    print("=" * 70)

    async with httpx.AsyncClient(base_url=API_BASE_URL, timeout=10.0) as client:
        print("\n1️⃣ Health Check...")
        try:
            response = await client.get("/health")
        except httpx.HTTPError as e:
            print(f"   ❌ API unreachable: {e}")
            return False
        data = response.json().get("data", {})
        if response.status_code != 200:
            print(f"   ❌ Degraded: database={data.get('database')}")
            return False
        print(f"   ✅ Status: {data.get('status')}")
        print(f"   Database: {data.get('database')}")
        print(f"   AI: {data.get('ai', {}).get('primary')}")

        print("\n2️⃣ Availability...")
        response = await client.get(
            "/api/datban/availability",
            params={"date": booking_date(), "time": SHARED_SLOT},
        )
        if response.status_code != 200:
            print(f"   ❌ Failed: {response.text[:100]}")
            return False
        availability = response.json()["data"]
        print(f"   ✅ {availability['availableTables']}/{availability['totalTables']} tables free at {SHARED_SLOT}")

    return True


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_bookings: int, duplicate_share: float) -> dict[str, Any]:
    num_shared = max(2, round(num_bookings * duplicate_share))
    flags = [i < num_shared for i in range(num_bookings)]
    random.shuffle(flags)

    print("=" * 70)
    print("🔥 BOOKING BURST SIMULATION")
    print("=" * 70)
    print(f"📋 Total Bookings: {num_bookings} ({num_shared} for {SHARED_PHONE} @ {SHARED_SLOT})")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.perf_counter()
    async with httpx.AsyncClient() as client:
        tasks = [send_booking(client, i + 1, shared) for i, shared in enumerate(flags)]
        results = await asyncio.gather(*tasks)
    total_time = round(time.perf_counter() - start_time, 2)

    created = [r for r in results if r["outcome"] == "created"]
    conflicts = [r for r in results if r["outcome"] == "conflict"]
    errors = [r for r in results if r["outcome"] == "error"]
    shared_created = [r for r in created if r["shared"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Created: {len(created)}/{num_bookings}")
    print(f"🚫 Conflicts: {len(conflicts)}/{num_bookings}")
    print(f"❌ Errors: {len(errors)}/{num_bookings}")
    print(f"⏱️  Total Time: {total_time}s")

    if len(shared_created) == 1:
        print(f"\n🔒 Shared slot: exactly one booking created (#{shared_created[0]['reservation_id']})")
    elif shared_created:
        ids = [r["reservation_id"] for r in shared_created]
        print(f"\n⚠️  Shared slot: {len(shared_created)} bookings created {ids} (check-then-insert race)")
    else:
        print("\n⚠️  Shared slot: nothing created (slot already held before the burst?)")

    timings = [r["time"] for r in results if r["outcome"] != "error"]
    if timings:
        print("\n📈 Performance Metrics:")
        print(f"   Average Response: {round(sum(timings) / len(timings), 3)}s")
        print(f"   Fastest: {min(timings)}s")
        print(f"   Slowest: {max(timings)}s")

    if errors:
        print("\n⚠️  Error Details (showing first 5):")
        for r in errors[:5]:
            print(f"   Booking #{r['booking_num']}: {r.get('error', 'Unknown error')}")

    print("\n" + "=" * 70)
    return {
        "total": num_bookings,
        "created": len(created),
        "conflicts": len(conflicts),
        "errors": len(errors),
        "shared_created": len(shared_created),
        "total_time": total_time,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Booking Burst Simulation")
    parser.add_argument("--bookings", type=int, default=TOTAL_BOOKINGS, help="Number of bookings")
    parser.add_argument("--duplicates", type=float, default=0.3, help="Share of bookings for the shared slot")
    parser.add_argument("--base-url", default=API_BASE_URL, help="API base URL")
    parser.add_argument("--skip-checks", action="store_true", help="Skip pre-flight checks")
    args = parser.parse_args()

    API_BASE_URL = args.base_url.rstrip("/")

    if not args.skip_checks:
        if not asyncio.run(preflight()):
            print("\n❌ Pre-flight checks failed. Fix issues before running the simulation.")
            sys.exit(1)
        print("\n✅ Pre-flight checks passed!\n")

    summary = asyncio.run(run_simulation(args.bookings, args.duplicates))
    sys.exit(0 if summary["shared_created"] <= 1 and not summary["errors"] else 1)

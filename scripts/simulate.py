"""
Booking Race Simulation Script

Fires many concurrent reservation requests for the same table and the
same instant against a running server, then checks that exactly one
active reservation exists for that slot.

Run from project root (server running, database seeded):
    python scripts/simulate.py --requests 50
"""

import argparse
import asyncio
import os
import sys
import time
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:4000"
API_PREFIX = "/api"
TOTAL_REQUESTS = 50

GUEST_NAMES = ["Sara", "Ali", "Maryam", "Reza", "Neda", "Omid", "Leila", "Kian"]


def api(path: str) -> str:
    return f"{API_BASE_URL}{API_PREFIX}{path}"


def generate_reservation_payload(table_id: int, slot: datetime, request_num: int) -> dict[str, Any]:
    """Every request targets the same table and the same instant."""
    return {
        "table": table_id,
        "name": GUEST_NAMES[request_num % len(GUEST_NAMES)],
        "phone": f"0912{request_num:07d}",
        "guests": 2,
        "time": slot.isoformat().replace("+00:00", "Z"),
    }


async def send_reservation(
    client: httpx.AsyncClient,
    table_id: int,
    slot: datetime,
    request_num: int,
) -> dict[str, Any]:
    """Send one booking request."""
    payload = generate_reservation_payload(table_id, slot, request_num)
    start_time = time.time()

    try:
        response = await client.post(api("/reservations"), json=payload, timeout=30.0)
        elapsed = round(time.time() - start_time, 3)
        body = response.json()
        return {
            "request_num": request_num,
            "status_code": response.status_code,
            "success": response.status_code == 201,
            "reservation_id": (body.get("data") or {}).get("id"),
            "error": body.get("error"),
            "time": elapsed,
        }
    except Exception as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "request_num": request_num,
            "status_code": None,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


async def prepare(client: httpx.AsyncClient, email: str, password: str) -> int:
    """Log in as admin and create a fresh table for the run."""
    response = await client.get(f"{API_BASE_URL}/health")
    response.raise_for_status()
    print(f"   ✅ Health: {response.json().get('status')}")

    response = await client.post(api("/auth/login"), json={"email": email, "password": password})
    if response.status_code != 200:
        raise RuntimeError(f"Login failed: {response.text[:100]}")
    print(f"   ✅ Logged in as {email}")

    name = f"Race table {datetime.now().strftime('%H%M%S%f')}"
    response = await client.post(api("/tables"), json={"name": name, "capacity": 4})
    if response.status_code != 201:
        raise RuntimeError(f"Could not create table: {response.text[:100]}")
    table_id = response.json()["data"]["id"]
    print(f"   ✅ Created '{name}' (#{table_id})")
    return table_id


async def run_simulation(num_requests: int, email: str, password: str) -> dict[str, Any]:
    """
    Run the booking race.

    Args:
        num_requests: Number of concurrent booking requests
        email: Admin email used to create the table
        password: Admin password
    """
    print("=" * 70)
    print("🔥 BOOKING RACE SIMULATION")
    print("=" * 70)
    print(f"📋 Concurrent Requests: {num_requests}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    slot = (datetime.now(timezone.utc) + timedelta(days=1)).replace(
        minute=0, second=0, microsecond=0
    )

    async with httpx.AsyncClient() as client:
        print("\n🧪 Preparing...\n")
        table_id = await prepare(client, email, password)

        print(f"\n🚀 Firing {num_requests} bookings for table #{table_id} @ {slot.isoformat()}...\n")
        start_time = time.time()
        tasks = [send_reservation(client, table_id, slot, i + 1) for i in range(num_requests)]
        results = await asyncio.gather(*tasks)
        total_time = round(time.time() - start_time, 2)

        response = await client.get(
            api("/reservations"),
            params={"date": slot.date().isoformat()},
        )
        booked = [
            r for r in response.json().get("data", [])
            if r.get("tableId") == table_id and r.get("status") in ("pending", "confirmed")
        ]

    successful = [r for r in results if r["success"]]
    conflicts = [r for r in results if r["status_code"] == 409]
    errors = [r for r in results if not r["success"] and r["status_code"] != 409]

    print("=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Accepted: {len(successful)}/{num_requests}")
    print(f"⛔ Rejected as conflict: {len(conflicts)}/{num_requests}")
    print(f"❌ Other errors: {len(errors)}/{num_requests}")
    print(f"⏱️  Total Time: {total_time}s")
    print(f"\n🔎 Active reservations stored for the slot: {len(booked)}")

    if errors:
        print("\n⚠️  Error Details (showing first 5):")
        for r in errors[:5]:
            print(f"   Request #{r['request_num']} [{r['status_code']}]: {r.get('error')}")

    invariant_held = len(successful) == 1 and len(booked) == 1
    print("\n" + "=" * 70)
    print("✅ SLOT INVARIANT HELD" if invariant_held else "❌ SLOT INVARIANT VIOLATED")
    print("=" * 70)

    return {
        "total": num_requests,
        "accepted": len(successful),
        "conflicts": len(conflicts),
        "errors": len(errors),
        "stored_active": len(booked),
        "invariant_held": invariant_held,
        "total_time": total_time,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Booking Race Simulation")
    parser.add_argument("--requests", type=int, default=TOTAL_REQUESTS, help="Number of concurrent bookings")
    parser.add_argument("--email", default="admin@example.com", help="Admin email")
    parser.add_argument("--password", default="admin123", help="Admin password")
    args = parser.parse_args()

    summary = asyncio.run(run_simulation(args.requests, args.email, args.password))
    sys.exit(0 if summary["invariant_held"] else 1)

"""
Rush Hour Simulation Script

Builds a small menu through the public API, then fires concurrent
customer orders at it and walks a sample of them through the kitchen.
Run from project root (API server on port 8001): python scripts/simulate.py

In development mode the login code is printed in the API server log
("Mock OTP for ..."); paste it when asked.

Version: 1.0.0
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 50

# Sample data for random orders
FIRST_NAMES = ["Asha", "Ravi", "Meera", "Arjun", "Kavya", "Rohan", "Isha", "Vikram", "Neha", "Kabir"]
MENU = {
    "Starters": [("Paneer Tikka", 180), ("Aloo Tikki", 90), ("Veg Samosa", 40)],
    "Mains": [("Dal Makhani", 160), ("Butter Naan", 45), ("Veg Biryani", 220)],
    "Drinks": [("Masala Chai", 30), ("Sweet Lassi", 60)],
}


class ApiError(Exception):
    pass


async def call(client: httpx.AsyncClient, method: str, path: str, **kwargs) -> Any:
    response = await client.request(method, f"{API_BASE_URL}{path}", timeout=30.0, **kwargs)
    if response.status_code >= 400:
        raise ApiError(f"{method} {path} -> {response.status_code}: {response.text[:200]}")
    return response.json()


# =============================================================================
# SETUP
# =============================================================================

async def login(client: httpx.AsyncClient, email: str) -> dict[str, Any]:
    """Email-code login; completes the profile on first use."""
    await call(client, "POST", "/auth/otp/send", json={"email": email})
    code = input(f"\n🔑 Enter the code sent to {email}: ").strip()

    result = await call(client, "POST", "/auth/otp/verify", json={"email": email, "otp": code})
    if result.get("need_profile"):
        result = await call(
            client,
            "POST",
            "/auth/otp/verify",
            json={"email": email, "otp": code, "name": "Sim Owner", "country": "India"},
        )
    return result["user"]


async def build_menu(client: httpx.AsyncClient, owner_id: int) -> tuple[dict, list[dict]]:
    restaurant = await call(
        client,
        "POST",
        "/restaurants",
        json={"owner_id": owner_id, "name": "Spice Hub", "location": "Pune"},
    )
    dishes = []
    for category_name, items in MENU.items():
        category = await call(
            client,
            "POST",
            "/categories",
            json={"restaurant_id": restaurant["id"], "name": category_name},
        )
        for name, price in items:
            dishes.append(await call(
                client,
                "POST",
                "/dishes",
                json={
                    "restaurant_id": restaurant["id"],
                    "category_id": category["id"],
                    "name": name,
                    "price": price,
                },
            ))
    return restaurant, dishes


# =============================================================================
# ORDERS
# =============================================================================

def generate_order_payload(restaurant_id: int, dishes: list[dict]) -> dict[str, Any]:
    picked = random.sample(dishes, k=random.randint(1, 4))
    return {
        "restaurant_id": restaurant_id,
        "customer_name": random.choice(FIRST_NAMES),
        "table_number": str(random.randint(1, 20)),
        "items": [{"dish_id": d["id"], "quantity": random.randint(1, 3)} for d in picked],
    }


def expected_total(payload: dict[str, Any], dishes: list[dict]) -> int:
    prices = {d["id"]: d["price"] for d in dishes}
    return sum(prices[item["dish_id"]] * item["quantity"] for item in payload["items"])


async def send_order(
    client: httpx.AsyncClient,
    order_num: int,
    restaurant_id: int,
    dishes: list[dict],
) -> dict[str, Any]:
    payload = generate_order_payload(restaurant_id, dishes)
    start_time = time.time()

    try:
        order = await call(client, "POST", "/orders", json=payload)
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": True,
            "order_id": order["id"],
            "total": order["total"],
            "total_ok": order["total"] == expected_total(payload, dishes),
            "time": elapsed,
        }
    except (ApiError, httpx.HTTPError) as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


async def run_kitchen(client: httpx.AsyncClient, order_ids: list[int]) -> int:
    """Walk each order to completed; returns how many made it."""
    done = 0
    for order_id in order_ids:
        try:
            for status in ("preparing", "ready", "completed"):
                await call(client, "PATCH", f"/orders/{order_id}", json={"status": status})
            done += 1
        except ApiError as e:
            print(f"   ⚠️ Order #{order_id}: {e}")
    return done


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(email: str, num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    print("=" * 70)
    print("🔥 RUSH HOUR SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    async with httpx.AsyncClient() as client:
        health = await call(client, "GET", "/health")
        print(f"\n1️⃣ Health: {health['status']} (database: {health['database']})")

        owner = await login(client, email)
        print(f"2️⃣ Logged in as owner #{owner['id']}")

        restaurant, dishes = await build_menu(client, owner["id"])
        print(f"3️⃣ Menu ready: {len(dishes)} dishes at {restaurant['name']}")
        print(f"   QR target: {restaurant['menu_url']}")

        print("\n🚀 Firing orders...\n")
        start_time = time.time()
        results = await asyncio.gather(*[
            send_order(client, i + 1, restaurant["id"], dishes) for i in range(num_orders)
        ])
        total_time = round(time.time() - start_time, 2)

        successful = [r for r in results if r["success"]]
        failed = [r for r in results if not r["success"]]

        sample = [r["order_id"] for r in successful[:5]]
        completed = await run_kitchen(client, sample)

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        mismatched = [r for r in successful if not r["total_ok"]]
        print("\n📈 Performance Metrics:")
        print(f"   Average Response: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")
        print(f"   💰 Total Revenue: {sum(r['total'] for r in successful)}")
        print(f"   🧮 Totals matching menu prices: {len(successful) - len(mismatched)}/{len(successful)}")

    print(f"\n🍳 Kitchen completed {completed}/{len(sample)} sampled orders")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)
    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Rush Hour Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--email", default="owner@spicehub.in", help="Owner login email")
    parser.add_argument("--base-url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    API_BASE_URL = args.base_url.rstrip("/")

    try:
        summary = asyncio.run(run_simulation(args.email, args.orders))
    except ApiError as e:
        print(f"\n❌ Setup failed: {e}")
        sys.exit(1)

    sys.exit(0 if summary["failed"] == 0 else 1)

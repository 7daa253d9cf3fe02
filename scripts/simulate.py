"""
Oversell Simulation Script

Fires concurrent orders at a running fulfillment server to check that
stock never goes negative and that no product is sold beyond its stock.
Run from project root: python scripts/simulate.py

The server must run with the default in-memory catalog.
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any

import httpx

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 50
ADMIN_HEADERS = {"X-Caller-Id": "simulator", "X-Caller-Role": "restaurant_admin"}

# Products fought over by the simulated customers, with the selections they need
CONTESTED_ITEMS = [
    {
        "restaurant_id": "al-andalus",
        "product_id": "pizza-arabe-carne-andalus",
        "customizations": [{"category": "Tamaño", "option": 'Mediana (12")'}],
    },
    {
        "restaurant_id": "al-andalus",
        "product_id": "shawarma-pollo-andalus",
        "customizations": [{"category": "Contorno", "option": "Papas fritas"}],
    },
    {
        "restaurant_id": "al-andalus",
        "product_id": "knafe-andalus",
        "customizations": [],
    },
]

FIRST_NAMES = ["María", "José", "Ana", "Luis", "Carmen", "Pedro", "Lucía", "Miguel"]
LAST_NAMES = ["González", "Rodríguez", "Pérez", "Hernández", "Díaz", "Mora"]


def generate_random_customer() -> dict[str, str]:
    """Generate random customer info."""
    return {
        "name": f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}",
        "phone": f"0414-{random.randint(100, 999)}-{random.randint(1000, 9999)}",
    }


def generate_order_payload() -> dict[str, Any]:
    """One to three Al Andalus products, one to three units each."""
    picks = random.sample(CONTESTED_ITEMS, random.randint(1, len(CONTESTED_ITEMS)))
    return {
        "restaurantId": "al-andalus",
        "items": [
            {
                "productId": item["product_id"],
                "quantity": random.randint(1, 3),
                "customizations": item["customizations"],
            }
            for item in picks
        ],
        "paymentMethod": random.choice(["card", "cash", "mobile"]),
        "orderType": random.choice(["delivery", "pickup"]),
        "customer": generate_random_customer(),
    }


async def send_order(client: httpx.AsyncClient, order_num: int) -> dict[str, Any]:
    """Send a single order and classify the outcome."""
    payload = generate_order_payload()
    units = {item["productId"]: item["quantity"] for item in payload["items"]}
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/orders", json=payload, timeout=30.0)
    except httpx.HTTPError as e:
        return {
            "order_num": order_num,
            "success": False,
            "kind": "TransportError",
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }

    elapsed = round(time.time() - start_time, 3)
    data = response.json()

    if response.status_code == 201:
        return {
            "order_num": order_num,
            "success": True,
            "order_id": data.get("id"),
            "total": data.get("totalAmount", 0),
            "units": units,
            "time": elapsed,
        }

    return {
        "order_num": order_num,
        "success": False,
        "kind": data.get("kind", "Unknown"),
        "error": data.get("message", response.text)[:100],
        "time": elapsed,
    }


async def reset_stock(client: httpx.AsyncClient, quantity: int) -> None:
    """Put every contested product at ``quantity`` units."""
    response = await client.post(
        f"{API_BASE_URL}/inventory:bulkUpdate",
        json={
            "updates": [
                {"productId": item["product_id"], "quantity": quantity, "manuallyEnabled": True}
                for item in CONTESTED_ITEMS
            ],
            "reason": "oversell simulation",
        },
        headers=ADMIN_HEADERS,
    )
    response.raise_for_status()


async def read_stock(client: httpx.AsyncClient) -> dict[str, int]:
    stock = {}
    for item in CONTESTED_ITEMS:
        response = await client.get(f"{API_BASE_URL}/inventory/{item['product_id']}")
        response.raise_for_status()
        stock[item["product_id"]] = response.json()["availableQuantity"]
    return stock


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_orders: int = TOTAL_ORDERS, stock: int = 20) -> dict[str, Any]:
    """
    Run the oversell simulation.

    Args:
        num_orders: Number of concurrent orders
        stock: Starting quantity of each contested product
    """
    print("=" * 70)
    print("🔥 OVERSELL SIMULATION - HIGH CONCURRENCY TEST")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"📦 Starting stock per product: {stock}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient() as client:
        await reset_stock(client, stock)

        print("\n🚀 Firing orders...\n")
        tasks = [send_order(client, i + 1) for i in range(num_orders)]
        results = await asyncio.gather(*tasks)

        final_stock = await read_stock(client)

    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    refused = [r for r in results if not r["success"] and r["kind"] == "InsufficientStock"]
    failed = [r for r in results if not r["success"] and r["kind"] != "InsufficientStock"]

    sold = {item["product_id"]: 0 for item in CONTESTED_ITEMS}
    for r in successful:
        for product_id, units in r["units"].items():
            sold[product_id] += units

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"📉 Refused (insufficient stock): {len(refused)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        total_revenue = sum(r["total"] for r in successful)
        print(f"\n📈 Average Response: {avg_time}s")
        print(f"   💰 Total Revenue: ${total_revenue:.2f}")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']} [{f['kind']}]: {f['error']}")

    print("\n" + "=" * 70)
    print("🔍 STOCK CHECK")
    print("=" * 70)
    consistent = True
    for product_id, remaining in final_stock.items():
        ok = remaining >= 0 and sold[product_id] + remaining == stock
        consistent = consistent and ok
        marker = "✅" if ok else "❌"
        print(f"{marker} {product_id}: sold {sold[product_id]}, remaining {remaining}")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "refused": len(refused),
        "failed": len(failed),
        "total_time": total_time,
        "consistent": consistent,
        "final_stock": final_stock,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Oversell Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--stock", type=int, default=20, help="Starting stock per product")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url
    summary = asyncio.run(run_simulation(args.orders, args.stock))
    sys.exit(0 if summary["consistent"] else 1)

"""
Demo Data Script

Fills a running JWT Pizza service with a menu, a franchise with a store,
a diner, a franchisee and a burst of concurrent orders.
Run from project root: python scripts/populate.py --url http://localhost:3000
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any, Optional

import httpx

# Configuration
API_BASE_URL = "http://localhost:3000"
TOTAL_ORDERS = 20
ADMIN = {"email": "a@jwt.com", "password": "admin"}

USERS = [
    {"name": "pizza diner", "email": "d@jwt.com", "password": "diner"},
    {"name": "pizza franchisee", "email": "f@jwt.com", "password": "franchisee"},
]
MENU_ITEMS = [
    {"title": "Veggie", "description": "A garden of delight", "image": "pizza1.png", "price": 0.0038},
    {"title": "Pepperoni", "description": "Spicy treat", "image": "pizza2.png", "price": 0.0042},
    {"title": "Margarita", "description": "Essential classic", "image": "pizza3.png", "price": 0.0042},
    {"title": "Crusty", "description": "A dry mouthed favorite", "image": "pizza4.png", "price": 0.0028},
    {"title": "Charred Leopard", "description": "For those with a darker side", "image": "pizza5.png", "price": 0.0099},
]
FRANCHISE = {"name": "pizzaPocket", "admins": [{"email": "f@jwt.com"}]}
STORES = ["SLC", "Provo", "Orem"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def login(client: httpx.AsyncClient, email: str, password: str) -> Optional[str]:
    response = await client.put("/api/auth", json={"email": email, "password": password})
    if response.status_code != 200:
        return None
    return response.json()["token"]


async def ensure_user(client: httpx.AsyncClient, user: dict[str, str]) -> str:
    """Register the user, or log in when the account already exists."""
    token = await login(client, user["email"], user["password"])
    if token:
        print(f"   ↪ {user['email']} already registered")
        return token

    response = await client.post("/api/auth", json=user)
    response.raise_for_status()
    print(f"   ✅ Registered {user['email']}")
    return response.json()["token"]


async def setup(client: httpx.AsyncClient) -> dict[str, Any]:
    """Create menu, franchise and stores. Returns ids needed for ordering."""
    print("\n1️⃣ Admin login...")
    admin_token = await login(client, ADMIN["email"], ADMIN["password"])
    if not admin_token:
        print("   ❌ Admin login failed. Is DEFAULT_ADMIN_PASSWORD set?")
        sys.exit(1)

    print("\n2️⃣ Users...")
    tokens = [await ensure_user(client, user) for user in USERS]
    diner_token, franchisee_token = tokens

    print("\n3️⃣ Menu...")
    response = await client.get("/api/order/menu")
    menu = response.json()
    known_titles = {item["title"] for item in menu}
    for item in MENU_ITEMS:
        if item["title"] in known_titles:
            continue
        response = await client.put("/api/order/menu", json=item, headers=bearer(admin_token))
        response.raise_for_status()
        menu = response.json()
    print(f"   ✅ {len(menu)} menu items")

    print("\n4️⃣ Franchise...")
    response = await client.post("/api/franchise", json=FRANCHISE, headers=bearer(admin_token))
    if response.status_code == 200:
        franchise_id = response.json()["id"]
        print(f"   ✅ Franchise #{franchise_id} created")
    else:
        response = await client.get("/api/franchise", params={"name": FRANCHISE["name"]})
        franchise_id = response.json()["franchises"][0]["id"]
        print(f"   ↪ Franchise #{franchise_id} already exists")

    print("\n5️⃣ Stores...")
    store_ids = []
    for name in STORES:
        response = await client.post(
            f"/api/franchise/{franchise_id}/store",
            json={"name": name},
            headers=bearer(franchisee_token),
        )
        response.raise_for_status()
        store_ids.append(response.json()["id"])
    print(f"   ✅ Stores {store_ids}")

    return {
        "diner_token": diner_token,
        "admin_token": admin_token,
        "franchise_id": franchise_id,
        "store_ids": store_ids,
        "menu": menu,
    }


def generate_order(context: dict[str, Any]) -> dict[str, Any]:
    """Random order of one to three menu items."""
    items = random.sample(context["menu"], k=min(len(context["menu"]), random.randint(1, 3)))
    return {
        "franchiseId": context["franchise_id"],
        "storeId": random.choice(context["store_ids"]),
        "items": [
            {"menuId": item["id"], "description": item["title"], "price": item["price"]}
            for item in items
        ],
    }


async def send_order(client: httpx.AsyncClient, context: dict[str, Any], order_num: int) -> dict[str, Any]:
    payload = generate_order(context)
    start_time = time.time()

    try:
        response = await client.post("/api/order", json=payload, headers=bearer(context["diner_token"]))
        elapsed = round(time.time() - start_time, 3)
        data = response.json()

        if response.status_code == 200:
            return {
                "order_num": order_num,
                "success": True,
                "order_id": data["order"]["id"],
                "total": sum(item["price"] for item in payload["items"]),
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": data.get("message", response.text[:100]),
            "report": data.get("followLinkToEndChaos"),
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


async def run(num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    print("=" * 70)
    print("🍕 JWT PIZZA DEMO DATA")
    print("=" * 70)
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"📋 Orders: {num_orders}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    async with httpx.AsyncClient(base_url=API_BASE_URL, timeout=30.0) as client:
        context = await setup(client)

        print(f"\n6️⃣ Firing {num_orders} orders...")
        start_time = time.time()
        results = await asyncio.gather(*[send_order(client, context, i + 1) for i in range(num_orders)])
        total_time = round(time.time() - start_time, 2)

        response = await client.get("/api/franchise", headers=bearer(context["admin_token"]))
        revenue = {
            store["name"]: store.get("totalRevenue", 0)
            for franchise in response.json()["franchises"]
            if franchise["id"] == context["franchise_id"]
            for store in franchise["stores"]
        }

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 RESULTS")
    print("=" * 70)
    print(f"\n✅ Fulfilled Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"\n📈 Average Response: {avg_time}s")

    print("\n💰 Store Revenue:")
    for name, total in revenue.items():
        print(f"   {name}: {total:.4f} ₿")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f['error']} {f.get('report') or ''}")

    print("=" * 70)
    return {"total": num_orders, "successful": len(successful), "failed": len(failed)}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Populate a JWT Pizza service with demo data")
    parser.add_argument("--url", default=API_BASE_URL, help="Service base URL")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    args = parser.parse_args()

    API_BASE_URL = args.url
    asyncio.run(run(num_orders=args.orders))
